from __future__ import annotations

from dataclasses import dataclass, field, replace

from .boundary import BoundarySet
from .config import ShellLimits


@dataclass(frozen=True)
class ExecutionContext:
    """Per-invocation state handed to every handler.

    ``cwd`` only ever changes through a side effect applied by the executor,
    which derives a new context instead of mutating this one.
    """

    cwd: str
    boundaries: BoundarySet
    stdin: str | None = None
    limits: ShellLimits = field(default_factory=ShellLimits)

    @classmethod
    def at_home(cls, boundaries: BoundarySet, limits: ShellLimits | None = None) -> "ExecutionContext":
        return cls(cwd=boundaries.home, boundaries=boundaries, limits=limits or ShellLimits())

    def with_cwd(self, cwd: str) -> "ExecutionContext":
        return replace(self, cwd=cwd)

    def with_stdin(self, stdin: str | None) -> "ExecutionContext":
        return replace(self, stdin=stdin)
