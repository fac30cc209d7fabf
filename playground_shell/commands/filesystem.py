from __future__ import annotations

import logging
import os
import shutil
import stat
import threading
import time
from pathlib import Path

from ..boundary import within
from ..context import ExecutionContext
from ..errors import NOT_FOUND, BoundaryDenial, HandlerError, UsageError, format_error, strerror
from ..lib.args import split_flags
from ..lib.fileio import resolve
from ..lib.globbing import expand_operands
from ..parser import CommandName
from .base import CommandResult

logger = logging.getLogger(__name__)

TRASH_DIRNAME = ".trash"

_trash_lock = threading.Lock()
_last_trash_id = 0


def next_trash_id() -> int:
    """Process-wide, strictly increasing id for trash entries."""
    global _last_trash_id
    with _trash_lock:
        ident = max(time.time_ns(), _last_trash_id + 1)
        _last_trash_id = ident
        return ident


def _protected(path: str, ctx: ExecutionContext) -> bool:
    trash = os.path.join(ctx.boundaries.home, TRASH_DIRNAME)
    return (
        path in ctx.boundaries.roots
        or path == ctx.boundaries.home
        or within(path, trash)
        or within(trash, path)
    )


class MkdirCommand:
    name = CommandName.MKDIR

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        flags, operands = split_flags(args, "p", "mkdir")
        if not operands:
            raise UsageError("mkdir: missing operand\n")
        for op in operands:
            path = resolve(op, ctx, "mkdir")
            try:
                if "p" in flags:
                    os.makedirs(path, exist_ok=True)
                else:
                    os.mkdir(path)
            except OSError as e:
                raise HandlerError(format_error("mkdir", op, strerror(e))) from e
        return CommandResult()


class TouchCommand:
    name = CommandName.TOUCH

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        _, operands = split_flags(args, "", "touch")
        operands = expand_operands(operands, ctx)
        if not operands:
            raise UsageError("touch: missing file operand\n")
        for op in operands:
            path = resolve(op, ctx, "touch")
            try:
                Path(path).touch()
            except OSError as e:
                raise HandlerError(format_error("touch", op, strerror(e))) from e
        return CommandResult()


class RmCommand:
    """Soft delete.

    Nothing is unlinked: each operand is renamed into
    ``<home>/.trash/<id>_<basename>``. Rename is atomic, so a failure leaves
    the file where it was. The roots, the home and the trash are refused.
    """

    name = CommandName.RM

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        flags, operands = split_flags(args, "rRf", "rm")
        recursive = "r" in flags or "R" in flags
        force = "f" in flags
        operands = expand_operands(operands, ctx)
        if not operands:
            if force:
                return CommandResult()
            raise UsageError("rm: missing operand\n")
        for op in operands:
            self._remove(op, ctx, recursive, force)
        return CommandResult()

    def _remove(self, op: str, ctx: ExecutionContext, recursive: bool, force: bool) -> None:
        result = ctx.boundaries.validate(op, ctx.cwd)
        if not result.ok:
            if force:
                return
            raise BoundaryDenial("rm", op, result.denial)
        path = result.path
        assert path is not None
        if not os.path.lexists(path):
            if force:
                return
            raise HandlerError(format_error("rm", op, NOT_FOUND))

        if _protected(path, ctx):
            raise HandlerError(format_error("rm", op, "Permission denied"))
        if stat.S_ISDIR(os.lstat(path).st_mode) and not recursive:
            raise HandlerError(format_error("rm", op, "Is a directory"))

        trash = resolve(os.path.join(ctx.boundaries.home, TRASH_DIRNAME), ctx, "rm")
        dest = os.path.join(trash, f"{next_trash_id()}_{os.path.basename(path)}")
        try:
            os.makedirs(trash, exist_ok=True)
            os.rename(path, dest)
        except OSError as e:
            raise HandlerError(format_error("rm", op, strerror(e))) from e
        logger.info("Moved %s to trash as %s", path, dest)


def _split_src_dst(operands: list[str], command: str) -> list[str]:
    if not operands:
        raise UsageError(f"{command}: missing file operand\n")
    if len(operands) == 1:
        raise UsageError(f"{command}: missing destination file operand after '{operands[0]}'\n")
    return operands


class MvCommand:
    name = CommandName.MV

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        _, operands = split_flags(args, "f", "mv")
        *sources, dst = _split_src_dst(expand_operands(operands, ctx), "mv")
        dst_is_dir = os.path.isdir(resolve(dst, ctx, "mv"))
        if len(sources) > 1 and not dst_is_dir:
            raise HandlerError(format_error("mv", dst, "Not a directory"))

        for src in sources:
            src_path = resolve(src, ctx, "mv")
            if not os.path.lexists(src_path):
                raise HandlerError(format_error("mv", src, NOT_FOUND))
            if _protected(src_path, ctx):
                raise HandlerError(format_error("mv", src, "Permission denied"))
            target = os.path.join(dst, os.path.basename(src_path)) if dst_is_dir else dst
            # The final destination is validated on its own right before use.
            target_path = resolve(target, ctx, "mv")
            try:
                os.rename(src_path, target_path)
            except OSError as e:
                raise HandlerError(format_error("mv", src, strerror(e))) from e
        return CommandResult()


class CpCommand:
    name = CommandName.CP

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        flags, operands = split_flags(args, "rR", "cp")
        recursive = "r" in flags or "R" in flags
        *sources, dst = _split_src_dst(expand_operands(operands, ctx), "cp")
        dst_is_dir = os.path.isdir(resolve(dst, ctx, "cp"))
        if len(sources) > 1 and not dst_is_dir:
            raise HandlerError(format_error("cp", dst, "Not a directory"))

        for src in sources:
            src_path = resolve(src, ctx, "cp")
            if not os.path.lexists(src_path):
                raise HandlerError(format_error("cp", src, NOT_FOUND))
            is_dir = os.path.isdir(src_path)
            if is_dir and not recursive:
                raise HandlerError(f"cp: -r not specified; omitting directory '{src}'\n")
            target = os.path.join(dst, os.path.basename(src_path)) if dst_is_dir else dst
            target_path = resolve(target, ctx, "cp")
            try:
                if is_dir:
                    # symlinks=True copies links as links instead of following them.
                    shutil.copytree(src_path, target_path, symlinks=True)
                else:
                    shutil.copy2(src_path, target_path, follow_symlinks=False)
            except OSError as e:
                raise HandlerError(format_error("cp", src, strerror(e))) from e
        return CommandResult()
