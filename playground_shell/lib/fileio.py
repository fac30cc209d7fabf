"""Path resolution and bounded file access shared by the builtins."""

from __future__ import annotations

import os
import stat
from typing import IO, Sequence

from ..boundary import validate
from ..context import ExecutionContext
from ..errors import BoundaryDenial, HandlerError, UsageError, format_error, strerror

# O_NONBLOCK keeps open() on a FIFO from waiting for the other end.
_OPEN_FLAGS = getattr(os, "O_NOFOLLOW", 0) | getattr(os, "O_NONBLOCK", 0)


def _nofollow_opener(path: str, flags: int) -> int:
    return os.open(path, flags | _OPEN_FLAGS, 0o666)


def open_nofollow(path: str, mode: str = "rb") -> IO[bytes]:
    """Binary ``open()`` that refuses a symlink at the leaf, even one planted after validation."""
    return open(path, mode, opener=_nofollow_opener)


def encode_text(text: str) -> bytes:
    """UTF-8 bytes for ``text``.

    Undecodable argv bytes arrive as lone surrogates (U+DC80..U+DCFF) and are
    written back as the original bytes; any other lone surrogate becomes ``?``.
    """
    try:
        return text.encode("utf-8", errors="surrogateescape")
    except UnicodeEncodeError:
        return text.encode("utf-8", errors="replace")


def resolve(raw: str, ctx: ExecutionContext, command: str) -> str:
    """Validate ``raw`` right now and return the canonical path.

    Raises :class:`BoundaryDenial`, which renders as a plain "not found".
    """

    result = validate(raw, ctx.boundaries, ctx.cwd)
    if not result.ok:
        raise BoundaryDenial(command, raw, result.denial)
    assert result.path is not None
    return result.path


def read_text(raw: str, ctx: ExecutionContext, command: str) -> str:
    """Read a regular file inside the boundary, refusing anything over the size limit."""
    path = resolve(raw, ctx, command)
    limit = ctx.limits.max_file_bytes
    try:
        with open_nofollow(path, "rb") as f:
            mode = os.fstat(f.fileno()).st_mode
            if stat.S_ISDIR(mode):
                raise HandlerError(format_error(command, raw, "Is a directory"))
            if not stat.S_ISREG(mode):
                raise HandlerError(format_error(command, raw, "Not a regular file"))
            # Read limit+1 in one go instead of stat-then-read.
            data = f.read(limit + 1)
    except OSError as e:
        raise HandlerError(format_error(command, raw, strerror(e))) from e
    if len(data) > limit:
        raise HandlerError(format_error(command, raw, f"File too large (max {limit} bytes)"))
    return data.decode("utf-8", errors="replace")


def read_inputs(
    operands: Sequence[str],
    ctx: ExecutionContext,
    command: str,
) -> list[tuple[str | None, str]]:
    """Return ``(label, text)`` pairs for the operands.

    With no operands the piped stdin is used (empty stdin is valid input);
    ``-`` also names stdin when one is present.
    """

    if not operands:
        if ctx.stdin is None:
            raise UsageError(format_error(command, None, "missing file operand"))
        return [(None, ctx.stdin)]

    out: list[tuple[str | None, str]] = []
    for op in operands:
        if op == "-" and ctx.stdin is not None:
            out.append(("-", ctx.stdin))
        else:
            out.append((op, read_text(op, ctx, command)))
    return out
