from __future__ import annotations

from typing import Sequence


def bounded_listing(lines: Sequence[str], limit: int) -> str:
    """Join listing lines, keeping at most ``limit`` plus one summary line."""

    total = len(lines)
    if total == 0:
        return ""
    if total <= limit:
        return "\n".join(lines) + "\n"
    shown = "\n".join(lines[:limit])
    return f"{shown}\n... ({total - limit} more entries, {total} total)\n"
