from __future__ import annotations

import os
import stat

from ..context import ExecutionContext
from ..errors import NOT_FOUND, HandlerError, UsageError, format_error, strerror
from ..lib.args import split_flags
from ..lib.fileio import resolve
from ..lib.globbing import expand_operands
from ..lib.listing import bounded_listing
from ..parser import CommandName
from .base import CommandResult, SetCurrentDirectory


class CdCommand:
    name = CommandName.CD

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        operands = expand_operands(args, ctx)
        if not operands:
            return CommandResult(effects=(SetCurrentDirectory(ctx.boundaries.home),))
        if len(operands) > 1:
            raise UsageError("bash: cd: too many arguments\n")

        target = operands[0]
        path = resolve(target, ctx, "bash: cd")
        if not os.path.isdir(path):
            reason = "Not a directory" if os.path.lexists(path) else NOT_FOUND
            raise HandlerError(format_error("bash: cd", target, reason))
        return CommandResult(effects=(SetCurrentDirectory(path),))


class PwdCommand:
    name = CommandName.PWD

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        return CommandResult(output=ctx.cwd + "\n")


class LsCommand:
    """List one or more paths.

    Directories list their entries sorted by name, with a trailing ``/`` on
    subdirectories. Dotfiles need ``-a``. Each listing is capped at
    ``max_output_lines``.
    """

    name = CommandName.LS

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        flags, operands = split_flags(args, "a1", "ls")
        operands = expand_operands(operands, ctx) or ["."]
        show_hidden = "a" in flags
        limit = ctx.limits.max_output_lines

        files: list[str] = []
        dirs: list[tuple[str, str]] = []
        for op in operands:
            path = resolve(op, ctx, "ls")
            try:
                st = os.lstat(path)
            except OSError as e:
                raise HandlerError(format_error("ls", op, strerror(e))) from e
            if stat.S_ISDIR(st.st_mode):
                dirs.append((op, path))
            else:
                files.append(op)

        if len(operands) == 1:
            if files:
                return CommandResult(output=files[0] + "\n")
            return CommandResult(output=self._list_dir(*dirs[0], show_hidden, limit))

        blocks: list[str] = []
        if files:
            blocks.append(bounded_listing(sorted(files), limit))
        for op, path in dirs:
            blocks.append(f"{op}:\n" + self._list_dir(op, path, show_hidden, limit))
        return CommandResult(output="\n".join(blocks))

    def _list_dir(self, label: str, path: str, show_hidden: bool, limit: int) -> str:
        try:
            with os.scandir(path) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise HandlerError(format_error("ls", label, strerror(e))) from e

        lines: list[str] = []
        for entry in entries:
            if not show_hidden and entry.name.startswith("."):
                continue
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError:
                is_dir = False
            lines.append(entry.name + "/" if is_dir else entry.name)
        return bounded_listing(lines, limit)
