"""Playground Shell: a boundary-confined shell for coding agents.

The package keeps a small "safe core":
- Boundary validation (no traversal, no symlinks, no $VAR, 404-style denials)
- A tokenizer/parser for a POSIX-flavored command line
- An executor with pipe depth limits, redirects and side-effect directives
- A closed table of builtin commands

Everything that touches the filesystem goes through boundary validation first.
"""

from __future__ import annotations

__version__ = "0.3.0"

from .boundary import BoundarySet, Denial, ValidationResult, validate, within
from .config import ShellConfig, ShellLimits, discover_config, load_config
from .context import ExecutionContext
from .errors import ShellError
from .shell import PlaygroundShell, ShellResult

__all__ = [
    "BoundarySet",
    "Denial",
    "ExecutionContext",
    "PlaygroundShell",
    "ShellConfig",
    "ShellError",
    "ShellLimits",
    "ShellResult",
    "ValidationResult",
    "__version__",
    "discover_config",
    "load_config",
    "validate",
    "within",
]
