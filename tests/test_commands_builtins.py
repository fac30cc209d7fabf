from __future__ import annotations

import re
from datetime import datetime, timezone

import pytest

from conftest import write
from playground_shell.commands import ALL_HANDLERS, build_handlers
from playground_shell.commands.builtins import (
    DateCommand,
    EchoCommand,
    FalseCommand,
    TrueCommand,
    WhichCommand,
    format_date,
)
from playground_shell.context import ExecutionContext
from playground_shell.errors import HandlerError, UsageError
from playground_shell.parser import CommandName, GlobPattern


def test_every_command_name_has_a_handler() -> None:
    handlers = build_handlers()
    assert set(handlers) == set(CommandName)
    assert len(ALL_HANDLERS) == len(CommandName)


def test_echo(ctx: ExecutionContext) -> None:
    assert EchoCommand().handle(["hello", "world"], ctx).output == "hello world\n"
    assert EchoCommand().handle(["-n", "x"], ctx).output == "x"
    assert EchoCommand().handle([], ctx).output == "\n"


def test_echo_expands_globs(ctx: ExecutionContext, root: str) -> None:
    write(root, "b.md")
    write(root, "a.md")
    assert EchoCommand().handle([GlobPattern("*.md")], ctx).output == "a.md b.md\n"
    assert EchoCommand().handle([GlobPattern("*.none")], ctx).output == "*.none\n"


def test_date_format() -> None:
    assert format_date(datetime(2026, 1, 9, 10, 30, 45, tzinfo=timezone.utc)) == "Fri Jan  9 10:30:45 UTC 2026\n"


def test_date_command_shape(ctx: ExecutionContext) -> None:
    out = DateCommand().handle([], ctx).output
    assert re.fullmatch(r"\w{3} \w{3} [ \d]\d \d\d:\d\d:\d\d UTC \d{4}\n", out)


def test_true_and_false(ctx: ExecutionContext) -> None:
    assert TrueCommand().handle(["ignored"], ctx).output == ""
    with pytest.raises(HandlerError) as exc:
        FalseCommand().handle([], ctx)
    assert exc.value.message == ""


def test_which(ctx: ExecutionContext) -> None:
    assert WhichCommand().handle(["ls", "grep"], ctx).output == "ls: shell builtin\ngrep: shell builtin\n"
    with pytest.raises(HandlerError) as exc:
        WhichCommand().handle(["ls", "python"], ctx)
    assert exc.value.message == "ls: shell builtin\npython not found\n"
    with pytest.raises(UsageError):
        WhichCommand().handle([], ctx)
