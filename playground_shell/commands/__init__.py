from __future__ import annotations

from ..parser import CommandName
from .base import CommandResult, Handler, SetCurrentDirectory, SideEffect
from .builtins import DateCommand, EchoCommand, FalseCommand, TrueCommand, WhichCommand
from .filesystem import CpCommand, MkdirCommand, MvCommand, RmCommand, TouchCommand
from .navigation import CdCommand, LsCommand, PwdCommand
from .reading import CatCommand, HeadCommand, TailCommand, WcCommand
from .search import FindCommand, GrepCommand

ALL_HANDLERS = [
    CatCommand,
    CdCommand,
    CpCommand,
    DateCommand,
    EchoCommand,
    FalseCommand,
    FindCommand,
    GrepCommand,
    HeadCommand,
    LsCommand,
    MkdirCommand,
    MvCommand,
    PwdCommand,
    RmCommand,
    TailCommand,
    TouchCommand,
    TrueCommand,
    WcCommand,
    WhichCommand,
]


def build_handlers() -> dict[CommandName, Handler]:
    """One handler instance per command name; every name must be covered."""

    handlers: dict[CommandName, Handler] = {cls.name: cls() for cls in ALL_HANDLERS}
    missing = [c.value for c in CommandName if c not in handlers]
    if missing:
        raise RuntimeError(f"No handler registered for: {', '.join(missing)}")
    return handlers


__all__ = [
    "ALL_HANDLERS",
    "CommandResult",
    "Handler",
    "SetCurrentDirectory",
    "SideEffect",
    "build_handlers",
]
