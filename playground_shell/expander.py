from __future__ import annotations

import os
from dataclasses import replace

from .parser import Command, GlobPattern, Redirect


def expand_tilde(arg: str, home: str) -> str:
    """``~`` and ``~/x`` point at the boundary home; ``~user`` is left alone."""

    if arg == "~" or arg == "~/":
        expanded = home
    elif arg.startswith("~/"):
        expanded = os.path.join(home, arg[2:].lstrip("/"))
    else:
        return arg
    return GlobPattern(expanded) if isinstance(arg, GlobPattern) else expanded


def expand_command(command: Command, home: str) -> Command:
    return replace(
        command,
        args=tuple(expand_tilde(a, home) for a in command.args),
        redirects=tuple(Redirect(r.kind, expand_tilde(r.target, home)) for r in command.redirects),
        pipes=tuple(expand_command(p, home) for p in command.pipes),
    )
