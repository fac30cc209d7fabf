from __future__ import annotations

import logging
from dataclasses import dataclass

from .audit import AuditLogger, audit_event
from .boundary import BoundarySet, Denial, ValidationResult, validate
from .config import ShellConfig, ShellLimits
from .context import ExecutionContext
from .errors import ShellError
from .executor import Executor
from .parser import parse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShellResult:
    """Outcome of one command line.

    ``output`` and ``error`` are exactly what a terminal would show on stdout
    and stderr. ``context`` carries the new working directory on success and
    the unchanged one on failure. ``denial`` is the internal reason behind a
    refused path; it is never part of ``error``.
    """

    ok: bool
    output: str
    error: str
    context: ExecutionContext
    denial: Denial | None = None


def _denial_of(exc: BaseException) -> Denial | None:
    while exc is not None:
        d = getattr(exc, "denial", None)
        if d is not None:
            return d
        exc = exc.__cause__  # type: ignore[assignment]
    return None


class PlaygroundShell:
    def __init__(
        self,
        boundaries: BoundarySet,
        *,
        limits: ShellLimits | None = None,
        executor: Executor | None = None,
        audit: AuditLogger | None = None,
    ) -> None:
        self.boundaries = boundaries
        self.limits = limits or ShellLimits()
        self.executor = executor or Executor()
        self.audit = audit

    @classmethod
    def from_config(cls, cfg: ShellConfig, *, audit_path: str | None = None) -> "PlaygroundShell":
        path = audit_path or cfg.audit_path
        return cls(
            cfg.boundaries(),
            limits=cfg.limits,
            audit=AuditLogger.at(path) if path else None,
        )

    def new_context(self, cwd: str | None = None) -> ExecutionContext:
        ctx = ExecutionContext.at_home(self.boundaries, self.limits)
        return ctx.with_cwd(cwd) if cwd else ctx

    def validate_path(self, raw_path: str, ctx: ExecutionContext | None = None) -> ValidationResult:
        ctx = ctx or self.new_context()
        result = validate(raw_path, self.boundaries, ctx.cwd)
        if self.audit is not None:
            self.audit.log(
                audit_event(
                    action="validate_path",
                    ok=result.ok,
                    details={"path": raw_path, "cwd": ctx.cwd},
                    denial=result.denial.value if result.denial else None,
                )
            )
        return result

    def execute(self, line: str, ctx: ExecutionContext | None = None) -> ShellResult:
        """Parse and run one line. Never raises for shell-level failures."""

        ctx = ctx or self.new_context()
        try:
            outcome = self.executor.run(parse(line), ctx)
            result = ShellResult(ok=True, output=outcome.output, error="", context=outcome.context)
        except ShellError as e:
            result = ShellResult(
                ok=False,
                output="",
                error=e.message,
                context=ctx.with_stdin(None),
                denial=_denial_of(e),
            )

        logger.info("Executed %r (ok=%s, cwd=%s)", line, result.ok, result.context.cwd)
        if result.denial is not None:
            logger.debug("Denied %r: %s", line, result.denial.value)
        if self.audit is not None:
            self.audit.log(
                audit_event(
                    action="execute",
                    ok=result.ok,
                    details={"line": line, "cwd": ctx.cwd, "new_cwd": result.context.cwd},
                    error=result.error.rstrip("\n") or None,
                    denial=result.denial.value if result.denial else None,
                )
            )
        return result
