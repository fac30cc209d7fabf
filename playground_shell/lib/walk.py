from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

EntryKind = Literal["file", "dir"]


@dataclass(frozen=True)
class WalkEntry:
    path: str
    kind: EntryKind
    depth: int


def walk(
    root: str,
    *,
    max_depth: int | None = None,
    kind: EntryKind | None = None,
    hard_limit: int = 100,
) -> list[WalkEntry]:
    """Walk a directory tree without following symlinks.

    Symlinks, devices and sockets are skipped. ``max_depth`` (1 = immediate
    children) can lower ``hard_limit`` but never raise it. Unreadable
    directories are skipped.
    """

    limit = hard_limit if max_depth is None else min(max_depth, hard_limit)
    out: list[WalkEntry] = []
    _walk(root, 0, limit, kind, out)
    return out


def _walk(directory: str, depth: int, limit: int, kind: EntryKind | None, out: list[WalkEntry]) -> None:
    if depth >= limit:
        return
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError:
        return

    for entry in entries:
        try:
            if entry.is_symlink():
                continue
            if entry.is_dir(follow_symlinks=False):
                if kind in (None, "dir"):
                    out.append(WalkEntry(entry.path, "dir", depth + 1))
                _walk(entry.path, depth + 1, limit, kind, out)
            elif entry.is_file(follow_symlinks=False):
                if kind in (None, "file"):
                    out.append(WalkEntry(entry.path, "file", depth + 1))
        except OSError:
            continue
