from __future__ import annotations

import glob
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .boundary import BoundarySet
from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ("playground.yaml", ".playground.yaml")
FALLBACK_CONFIG_PATH = "~/.config/playground-shell/playground.yaml"
ROOT_ENV_VAR = "PLAYGROUND_SHELL_ROOT"

_GLOB_CHARS = ("*", "?", "[")


@dataclass(frozen=True)
class ShellLimits:
    max_pipeline_depth: int = 10
    max_output_lines: int = 200
    max_file_bytes: int = 10_000_000
    max_walk_depth: int = 100


@dataclass(frozen=True)
class ShellConfig:
    raw: dict[str, Any]
    base_dir: str = field(default_factory=os.getcwd)
    source: str | None = None

    @property
    def version(self) -> str:
        return str(self.raw.get("version") or "0.1")

    @property
    def _sandbox(self) -> dict[str, Any]:
        return self.raw.get("sandbox") or {}

    @property
    def roots(self) -> list[str]:
        roots = self._sandbox.get("roots")
        if roots is None:
            return ["."]
        if isinstance(roots, str):
            return [roots]
        return [str(r) for r in roots]

    @property
    def home(self) -> str | None:
        h = self._sandbox.get("home")
        return str(h) if h else None

    @property
    def audit_path(self) -> str | None:
        p = (self.raw.get("audit") or {}).get("path")
        if not p:
            return None
        p = os.path.expanduser(str(p))
        return p if os.path.isabs(p) else os.path.join(self.base_dir, p)

    @property
    def limits(self) -> ShellLimits:
        raw = self.raw.get("limits") or {}
        defaults = ShellLimits()
        values: dict[str, int] = {}
        for name in ("max_pipeline_depth", "max_output_lines", "max_file_bytes", "max_walk_depth"):
            v = raw.get(name, getattr(defaults, name))
            if isinstance(v, bool) or not isinstance(v, int) or v < 1:
                raise ConfigError(f"limits.{name} must be a positive integer, got {v!r}")
            values[name] = v
        return ShellLimits(**values)

    def expanded_roots(self) -> list[str]:
        """Expand ~ and glob patterns once; deduplicated and sorted."""
        out: set[str] = set()
        for r in self.roots:
            p = os.path.expanduser(r)
            if not os.path.isabs(p):
                p = os.path.join(self.base_dir, p)
            if any(c in p for c in _GLOB_CHARS):
                for match in glob.glob(p):
                    if os.path.islink(match):
                        logger.warning("Skipping symlinked root match: %s", match)
                        continue
                    if os.path.isdir(match):
                        out.add(os.path.normpath(match))
            else:
                out.add(os.path.normpath(p))
        return sorted(out)

    def expanded_home(self, roots: list[str]) -> str | None:
        if self.home is None:
            return None
        h = os.path.expanduser(self.home)
        if os.path.isabs(h):
            return os.path.normpath(h)
        base = roots[0] if roots else self.base_dir
        return os.path.normpath(os.path.join(base, h))

    def boundaries(self) -> BoundarySet:
        roots = self.expanded_roots()
        boundaries = BoundarySet.create(roots, self.expanded_home(roots))
        logger.info(
            "Boundaries ready (roots=%s, home=%s, source=%s)",
            ",".join(boundaries.roots),
            boundaries.home,
            self.source or "defaults",
        )
        return boundaries


def load_config(path: str) -> ShellConfig:
    p = Path(path).expanduser()
    if not p.exists():
        raise ConfigError(f"config file not found: {path}")

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ConfigError("shell config must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise RuntimeError("PyYAML is required to read playground.yaml") from e

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {p}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError("playground.yaml must contain a mapping/object")

    p = p.resolve()
    return ShellConfig(raw=raw, base_dir=str(p.parent), source=str(p))


def default_config() -> ShellConfig:
    root = os.environ.get(ROOT_ENV_VAR) or os.getcwd()
    return ShellConfig(raw={"sandbox": {"roots": [root]}})


def find_config_file(cwd: str | None = None) -> str | None:
    base = Path(cwd or os.getcwd())
    for name in CONFIG_FILENAMES:
        candidate = base / name
        if candidate.is_file():
            return str(candidate)
    fallback = Path(FALLBACK_CONFIG_PATH).expanduser()
    if fallback.is_file():
        return str(fallback)
    return None


def discover_config(cwd: str | None = None) -> ShellConfig:
    path = find_config_file(cwd)
    if path is None:
        logger.debug("No config file found; using defaults")
        return default_config()
    logger.debug("Using config file %s", path)
    return load_config(path)
