from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from ..context import ExecutionContext
from ..parser import CommandName


@dataclass(frozen=True)
class SetCurrentDirectory:
    path: str


SideEffect = SetCurrentDirectory


@dataclass(frozen=True)
class CommandResult:
    output: str = ""
    effects: tuple[SideEffect, ...] = ()


class Handler(Protocol):
    """A single builtin.

    Handlers never touch shared state: a change of directory is returned as a
    side effect and applied by the executor once the handler has succeeded.
    Failures are raised as ``HandlerError``.
    """

    name: CommandName

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        ...
