from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Sequence

from .commands import CommandResult, Handler, SetCurrentDirectory, SideEffect, build_handlers
from .context import ExecutionContext
from .errors import (
    NOT_FOUND,
    BoundaryDenial,
    DispatchError,
    HandlerError,
    ResourceLimitError,
    format_error,
    strerror,
)
from .expander import expand_command
from .lib.fileio import encode_text, open_nofollow, read_text
from .parser import Command, CommandName, Redirect, UnknownCommand

logger = logging.getLogger(__name__)

_STDOUT = ("stdout", "stdout_append")
_STDERR = ("stderr", "stderr_append")


@dataclass(frozen=True)
class ExecutionOutcome:
    output: str
    context: ExecutionContext


class Executor:
    """Runs a parsed pipeline stage by stage.

    Each stage fully materializes its output before the next one starts.
    The first failing stage aborts the rest; redirect files written by
    earlier stages are kept.
    """

    def __init__(self, handlers: Mapping[CommandName, Handler] | None = None) -> None:
        self.handlers: dict[CommandName, Handler] = dict(handlers) if handlers is not None else build_handlers()

    def run(self, command: Command, ctx: ExecutionContext) -> ExecutionOutcome:
        limit = ctx.limits.max_pipeline_depth
        if command.depth > limit:
            raise ResourceLimitError(
                f"bash: pipeline too deep: {command.depth} commands (max {limit})\n"
            )

        command = expand_command(command, ctx.boundaries.home)
        piped: str | None = ctx.stdin
        for stage in command.stages():
            stage_ctx = self._stage_input(stage, ctx.with_stdin(piped))
            result = self._dispatch(stage, stage_ctx)
            piped = self._route_output(stage, result.output, stage_ctx)
            ctx = self._apply_effects(result.effects, ctx)

        return ExecutionOutcome(output=piped or "", context=ctx.with_stdin(None))

    def _dispatch(self, stage: Command, ctx: ExecutionContext) -> CommandResult:
        handler = None if isinstance(stage.name, UnknownCommand) else self.handlers.get(stage.name)
        if handler is None:
            raise DispatchError(f"bash: {stage.display_name}: command not found\n")

        logger.debug("Dispatch %s %r (cwd=%s)", stage.display_name, stage.args, ctx.cwd)
        try:
            return handler.handle(list(stage.args), ctx)
        except HandlerError as e:
            errs = [r for r in stage.redirects if r.kind in _STDERR]
            if not errs:
                raise
            self._write_targets(errs, e.message, ctx)
            raise HandlerError("") from e

    def _stage_input(self, stage: Command, ctx: ExecutionContext) -> ExecutionContext:
        for r in stage.redirects:
            if r.kind == "stdin":
                ctx = ctx.with_stdin(read_text(r.target, ctx, "bash"))
        return ctx

    def _route_output(self, stage: Command, output: str, ctx: ExecutionContext) -> str:
        errs = [r for r in stage.redirects if r.kind in _STDERR]
        if errs:
            self._write_targets(errs, "", ctx)

        outs = [r for r in stage.redirects if r.kind in _STDOUT]
        if not outs:
            return output
        self._write_targets(outs, output, ctx)
        return ""

    def _write_targets(self, redirects: Sequence[Redirect], content: str, ctx: ExecutionContext) -> None:
        """The last redirect gets ``content``; earlier ones are created empty."""
        for i, r in enumerate(redirects):
            self._write(r, content if i == len(redirects) - 1 else "", ctx)

    def _write(self, redirect: Redirect, data: str, ctx: ExecutionContext) -> None:
        result = ctx.boundaries.validate(redirect.target, ctx.cwd)
        if not result.ok:
            raise BoundaryDenial("bash", redirect.target, result.denial)
        assert result.path is not None
        if os.path.isdir(result.path):
            raise HandlerError(format_error("bash", redirect.target, "Is a directory"))

        # Encoded before the target is opened and truncated.
        payload = encode_text(data)
        mode = "ab" if redirect.kind.endswith("_append") else "wb"
        try:
            with open_nofollow(result.path, mode) as f:
                f.write(payload)
        except OSError as e:
            raise HandlerError(format_error("bash", redirect.target, strerror(e))) from e

    def _apply_effects(self, effects: Sequence[SideEffect], ctx: ExecutionContext) -> ExecutionContext:
        for effect in effects:
            if isinstance(effect, SetCurrentDirectory):
                if not ctx.boundaries.contains(effect.path):
                    logger.warning("Refusing directory change outside the roots: %s", effect.path)
                    raise HandlerError(format_error("bash: cd", None, NOT_FOUND))
                ctx = ctx.with_cwd(effect.path)
        return ctx


def run(
    command: Command,
    ctx: ExecutionContext,
    handlers: Mapping[CommandName, Handler] | None = None,
) -> ExecutionOutcome:
    """Run one parsed command line with a fresh handler table."""
    return Executor(handlers).run(command, ctx)

