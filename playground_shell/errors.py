from __future__ import annotations

import errno

NOT_FOUND = "No such file or directory"

_ERRNO_MESSAGES = {
    errno.ENOENT: NOT_FOUND,
    errno.EISDIR: "Is a directory",
    errno.ENOTDIR: "Not a directory",
    errno.EEXIST: "File exists",
    errno.EACCES: "Permission denied",
    errno.EPERM: "Permission denied",
    errno.ENOTEMPTY: "Directory not empty",
    errno.ENOSPC: "No space left on device",
    errno.EROFS: "Read-only file system",
    errno.EXDEV: "Invalid cross-device link",
    errno.EFBIG: "File too large",
    errno.ENXIO: "No such device or address",
}


class ShellError(RuntimeError):
    """Base error. ``message`` is exactly what the user gets to see."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class LexError(ShellError):
    pass


class ParseError(ShellError):
    pass


class DispatchError(ShellError):
    pass


class HandlerError(ShellError):
    pass


class UsageError(HandlerError):
    pass


class BoundaryDenial(HandlerError):
    """A path was refused. Always rendered as a plain "not found"."""

    def __init__(self, command: str, target: str, denial) -> None:
        super().__init__(format_error(command, target, NOT_FOUND))
        self.command = command
        self.target = target
        self.denial = denial


class ResourceLimitError(ShellError):
    pass


class ConfigError(ValueError):
    pass


def format_error(command: str, target: str | None, reason: str) -> str:
    if target is None:
        return f"{command}: {reason}\n"
    return f"{command}: {target}: {reason}\n"


def strerror(exc: OSError) -> str:
    """Map an OSError onto the fixed message vocabulary."""
    return _ERRNO_MESSAGES.get(exc.errno or 0, NOT_FOUND)
