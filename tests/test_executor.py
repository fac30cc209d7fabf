from __future__ import annotations

import os

import pytest

from conftest import write
from playground_shell.commands import CommandResult, SetCurrentDirectory
from playground_shell.context import ExecutionContext
from playground_shell.errors import (
    BoundaryDenial,
    DispatchError,
    HandlerError,
    ResourceLimitError,
)
from playground_shell.executor import Executor
from playground_shell.parser import CommandName, parse


class CountingTrue:
    name = CommandName.TRUE

    def __init__(self) -> None:
        self.calls = 0

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        self.calls += 1
        return CommandResult(output="x\n")


class Escape:
    name = CommandName.CD

    def __init__(self, target: str) -> None:
        self.target = target

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        return CommandResult(effects=(SetCurrentDirectory(self.target),))


def _run(line: str, ctx: ExecutionContext) -> str:
    return Executor().run(parse(line), ctx).output


def test_pipeline_at_depth_limit_runs(ctx: ExecutionContext) -> None:
    handler = CountingTrue()
    outcome = Executor({CommandName.TRUE: handler}).run(parse(" | ".join(["true"] * 10)), ctx)
    assert handler.calls == 10
    assert outcome.output == "x\n"


def test_pipeline_over_depth_limit_runs_nothing(ctx: ExecutionContext) -> None:
    handler = CountingTrue()
    with pytest.raises(ResourceLimitError):
        Executor({CommandName.TRUE: handler}).run(parse(" | ".join(["true"] * 11)), ctx)
    assert handler.calls == 0


def test_unknown_command(ctx: ExecutionContext) -> None:
    with pytest.raises(DispatchError) as exc:
        _run("python -c 1", ctx)
    assert exc.value.message == "bash: python: command not found\n"


def test_missing_handler_is_a_dispatch_error(ctx: ExecutionContext) -> None:
    with pytest.raises(DispatchError):
        Executor({}).run(parse("ls"), ctx)


def test_stdout_flows_between_stages(ctx: ExecutionContext) -> None:
    assert _run("echo hi | grep h", ctx) == "hi\n"
    assert _run("echo hi | grep zzz", ctx) == ""


def test_cd_returns_new_context(root: str, ctx: ExecutionContext) -> None:
    os.mkdir(os.path.join(root, "sub"))
    outcome = Executor().run(parse("cd sub"), ctx)
    assert outcome.context.cwd == os.path.join(root, "sub")
    assert outcome.context.stdin is None
    assert ctx.cwd == root


def test_side_effect_outside_roots_is_refused(ctx: ExecutionContext, outside: str) -> None:
    with pytest.raises(HandlerError):
        Executor({CommandName.CD: Escape(outside)}).run(parse("cd x"), ctx)


def test_stdout_redirect_writes_and_passes_nothing(root: str, ctx: ExecutionContext) -> None:
    assert _run("echo hello > out.txt", ctx) == ""
    assert open(os.path.join(root, "out.txt")).read() == "hello\n"
    _run("echo again >> out.txt", ctx)
    assert open(os.path.join(root, "out.txt")).read() == "hello\nagain\n"


def test_last_stdout_redirect_wins(root: str, ctx: ExecutionContext) -> None:
    write(root, "a.txt", "old\n")
    _run("echo data > a.txt > b.txt", ctx)
    assert open(os.path.join(root, "a.txt")).read() == ""
    assert open(os.path.join(root, "b.txt")).read() == "data\n"


def test_redirect_into_directory(root: str, ctx: ExecutionContext) -> None:
    os.mkdir(os.path.join(root, "d"))
    with pytest.raises(HandlerError) as exc:
        _run("echo x > d", ctx)
    assert exc.value.message == "bash: d: Is a directory\n"


def test_redirect_outside_boundary_looks_missing(ctx: ExecutionContext, outside: str) -> None:
    target = os.path.join(outside, "owned.txt")
    with pytest.raises(BoundaryDenial) as exc:
        _run(f"echo x > {target}", ctx)
    assert exc.value.message == f"bash: {target}: No such file or directory\n"
    assert not os.path.exists(target)


def test_redirect_through_symlink_is_refused(root: str, ctx: ExecutionContext, outside: str) -> None:
    os.symlink(os.path.join(outside, "secret.txt"), os.path.join(root, "link"))
    with pytest.raises(BoundaryDenial):
        _run("echo pwned > link", ctx)
    assert open(os.path.join(outside, "secret.txt")).read() == "top secret\n"


def test_stdin_redirect(root: str, ctx: ExecutionContext) -> None:
    write(root, "in.txt", "alpha\nbeta\n")
    assert _run("grep b < in.txt", ctx) == "beta\n"


def test_stdin_redirect_missing_file(ctx: ExecutionContext) -> None:
    with pytest.raises(HandlerError) as exc:
        _run("cat < nope.txt", ctx)
    assert exc.value.message == "bash: nope.txt: No such file or directory\n"


def test_stderr_redirect_captures_failure(root: str, ctx: ExecutionContext) -> None:
    with pytest.raises(HandlerError) as exc:
        _run("cat missing.txt 2> err.log", ctx)
    assert exc.value.message == ""
    assert open(os.path.join(root, "err.log")).read() == "cat: missing.txt: No such file or directory\n"


def test_stderr_redirect_created_on_success(root: str, ctx: ExecutionContext) -> None:
    assert _run("echo ok 2> err.log", ctx) == "ok\n"
    assert open(os.path.join(root, "err.log")).read() == ""


def test_failure_aborts_later_stages_but_keeps_earlier_writes(root: str, ctx: ExecutionContext) -> None:
    with pytest.raises(HandlerError):
        _run("echo kept > first.txt | cat missing.txt | echo never > last.txt", ctx)
    assert open(os.path.join(root, "first.txt")).read() == "kept\n"
    assert not os.path.exists(os.path.join(root, "last.txt"))


def test_redirected_stage_feeds_empty_stdin(root: str, ctx: ExecutionContext) -> None:
    assert _run("echo hi > a.txt | wc -l", ctx) == "       0\n"


def test_tilde_targets_resolve_to_home(root: str, ctx: ExecutionContext) -> None:
    _run("echo t > ~/t.txt", ctx)
    assert open(os.path.join(root, "t.txt")).read() == "t\n"


def test_redirect_with_unencodable_text_keeps_target_whole(root: str, ctx: ExecutionContext) -> None:
    write(root, "out.txt", "old\n")
    assert _run("echo \ud800 > out.txt", ctx) == ""
    with open(os.path.join(root, "out.txt"), "rb") as f:
        assert f.read() == b"?\n"
