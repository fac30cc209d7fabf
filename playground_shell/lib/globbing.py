from __future__ import annotations

import glob
import logging
import os
from typing import Sequence

from ..boundary import validate
from ..context import ExecutionContext
from ..parser import GlobPattern

logger = logging.getLogger(__name__)

_GLOB_CHARS = ("*", "?", "[")


def _literal_prefix(pattern: str) -> str:
    parts: list[str] = []
    for part in pattern.split(os.sep):
        if any(c in part for c in _GLOB_CHARS):
            break
        parts.append(part)
    prefix = os.sep.join(parts)
    return prefix or os.sep


def expand_pattern(pattern: str, ctx: ExecutionContext) -> list[str]:
    """Expand one glob pattern inside the boundary.

    The literal directory prefix is validated before anything is listed, and
    every match is validated again. Relative patterns give relative results.
    No match (or a refused prefix) returns the pattern unchanged, as bash does.
    """

    literal = [str(pattern)]
    if "$" in pattern:
        return literal

    absolute = os.path.isabs(pattern)
    full = pattern if absolute else os.path.join(ctx.cwd, pattern)
    if not validate(_literal_prefix(full), ctx.boundaries, ctx.cwd).ok:
        return literal

    # glob() leaves dotfiles out unless the pattern itself starts with a dot.
    matches = [m for m in glob.glob(full) if validate(m, ctx.boundaries, ctx.cwd).ok]
    if not matches:
        return literal
    logger.debug("Glob %r matched %d path(s)", str(pattern), len(matches))

    if absolute:
        return sorted(matches)
    rel = [os.path.relpath(m, ctx.cwd) for m in matches]
    if pattern.startswith("./"):
        rel = ["./" + r for r in rel]
    return sorted(rel)


def expand_operands(args: Sequence[str], ctx: ExecutionContext) -> list[str]:
    out: list[str] = []
    for a in args:
        if isinstance(a, GlobPattern):
            out.extend(expand_pattern(a, ctx))
        else:
            out.append(a)
    return out
