from __future__ import annotations

from datetime import datetime, timezone

from ..context import ExecutionContext
from ..errors import HandlerError, UsageError
from ..lib.globbing import expand_operands
from ..parser import CommandName, UnknownCommand, resolve_name
from .base import CommandResult


class EchoCommand:
    name = CommandName.ECHO

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        newline = True
        if args and args[0] == "-n":
            newline = False
            args = args[1:]
        text = " ".join(expand_operands(args, ctx))
        return CommandResult(output=text + "\n" if newline else text)


def format_date(now: datetime | None = None) -> str:
    """``date`` output in UTC, e.g. ``Thu Jan  9 10:30:45 UTC 2026``."""
    now = now or datetime.now(timezone.utc)
    return f"{now:%a %b} {now.day:2d} {now:%H:%M:%S} UTC {now.year}\n"


class DateCommand:
    name = CommandName.DATE

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        return CommandResult(output=format_date())


class TrueCommand:
    name = CommandName.TRUE

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        return CommandResult()


class FalseCommand:
    name = CommandName.FALSE

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        raise HandlerError("")


class WhichCommand:
    name = CommandName.WHICH

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        if not args:
            raise UsageError("usage: which name ...\n")
        lines: list[str] = []
        missing = False
        for name in args:
            if isinstance(resolve_name(name), UnknownCommand):
                lines.append(f"{name} not found\n")
                missing = True
            else:
                lines.append(f"{name}: shell builtin\n")
        if missing:
            raise HandlerError("".join(lines))
        return CommandResult(output="".join(lines))
