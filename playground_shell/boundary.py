from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable

from .errors import ConfigError

logger = logging.getLogger(__name__)

PathLike = str | Path


class Denial(str, Enum):
    OUTSIDE_BOUNDARY = "outside_boundary"
    SYMLINK = "symlink"
    EMBEDDED_VAR = "embedded_var"


@dataclass(frozen=True)
class ValidationResult:
    path: str | None = None
    denial: Denial | None = None

    @property
    def ok(self) -> bool:
        return self.denial is None and self.path is not None


def _normalize(path: str) -> str:
    p = os.path.normpath(path)
    # POSIX keeps a leading "//"; collapse it so string containment stays exact.
    if p.startswith(os.sep):
        p = os.sep + p.lstrip(os.sep)
    return p


def within(path: str, root: str) -> bool:
    """True when ``path`` is ``root`` or lies below it.

    Pure string comparison on canonical absolute paths, aligned on a full
    separator boundary: ``/sandbox2/x`` is not within ``/sandbox``.
    """

    if root != os.sep:
        root = root.rstrip(os.sep)
    if path != os.sep:
        path = path.rstrip(os.sep)
    if root == os.sep:
        return path.startswith(os.sep)
    return path == root or path.startswith(root + os.sep)


def _canonical_dir(raw: PathLike, label: str) -> str:
    p = _normalize(os.path.abspath(str(raw)))
    if not os.path.exists(p):
        raise ConfigError(f"{label} does not exist: {p}")
    if not os.path.isdir(p):
        raise ConfigError(f"{label} is not a directory: {p}")
    if os.path.realpath(p) != p:
        raise ConfigError(f"{label} resolves through a symlink: {p}")
    return p


@dataclass(frozen=True)
class BoundarySet:
    """Allowed roots plus the home directory. Built once, never mutated."""

    roots: tuple[str, ...]
    home: str

    @classmethod
    def create(cls, roots: Iterable[PathLike], home: PathLike | None = None) -> "BoundarySet":
        raw_roots = list(roots)
        if not raw_roots:
            raise ConfigError("sandbox must have at least one root")

        canonical: list[str] = []
        for r in raw_roots:
            c = _canonical_dir(r, "root")
            if c not in canonical:
                canonical.append(c)

        home_path = _canonical_dir(home, "home") if home is not None else canonical[0]
        if not any(within(home_path, r) for r in canonical):
            raise ConfigError(f"home must be within one of the roots: {home_path}")

        return cls(roots=tuple(canonical), home=home_path)

    @classmethod
    def from_cwd(cls) -> "BoundarySet":
        return cls.create([os.getcwd()])

    def contains(self, path: str) -> bool:
        return any(within(path, r) for r in self.roots)

    def validate(self, raw_path: str, current_dir: str | None = None) -> ValidationResult:
        return validate(raw_path, self, current_dir)


def _first_symlink(path: str) -> str | None:
    current = os.sep
    for part in path.split(os.sep):
        if not part:
            continue
        current = os.path.join(current, part)
        try:
            st = os.lstat(current)
        except OSError:
            # Missing (or uninspectable) component: nothing below it can be a
            # link we would traverse; the caller's own syscall reports the error.
            return None
        if stat.S_ISLNK(st.st_mode):
            return current
    return None


def _deny(raw_path: str, denial: Denial) -> ValidationResult:
    logger.debug("Path denied (%s): %r", denial.value, raw_path)
    return ValidationResult(denial=denial)


def validate(
    raw_path: str,
    boundaries: BoundarySet,
    current_dir: str | None = None,
) -> ValidationResult:
    """Resolve a caller-supplied path inside ``boundaries``.

    Steps:
    - any ``$`` is refused (variables are never expanded), and so is a NUL
    - relative paths join ``current_dir`` (or the home directory)
    - ``.``/``..`` are resolved lexically
    - every existing component is lstat'ed; a symlink anywhere is refused,
      no matter where it points
    - the result must sit within one of the roots

    A missing leaf is fine (``touch``/``mkdir`` targets). Never cache the
    result: validate again right before each use.
    """

    if "$" in raw_path or (current_dir is not None and "$" in current_dir):
        return _deny(raw_path, Denial.EMBEDDED_VAR)
    # No filesystem path can hold a NUL byte.
    if "\x00" in raw_path or (current_dir is not None and "\x00" in current_dir):
        return _deny(raw_path, Denial.OUTSIDE_BOUNDARY)

    if current_dir is not None:
        base = _normalize(current_dir)
        if not os.path.isabs(base) or not boundaries.contains(base):
            return _deny(raw_path, Denial.OUTSIDE_BOUNDARY)
    else:
        base = boundaries.home

    candidate = raw_path if os.path.isabs(raw_path) else os.path.join(base, raw_path)
    canonical = _normalize(candidate)

    if _first_symlink(canonical) is not None:
        return _deny(raw_path, Denial.SYMLINK)

    if not boundaries.contains(canonical):
        return _deny(raw_path, Denial.OUTSIDE_BOUNDARY)

    return ValidationResult(path=canonical)
