from __future__ import annotations

import json
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

_write_lock = threading.Lock()


@dataclass(frozen=True)
class AuditLogger:
    """Append-only JSONL trail of executed lines.

    Unlike the user-facing error text, entries carry the internal denial
    reason (``outside_boundary``, ``symlink``, ``embedded_var``). Keep the
    file outside the sandbox roots so it cannot be read back from a shell.
    """

    path: Path

    @classmethod
    def at(cls, path: str) -> "AuditLogger":
        return cls(path=Path(path).expanduser())

    def log(self, event: Dict[str, Any]) -> None:
        event = dict(event)
        event.setdefault("ts", time.time())
        line = json.dumps(event, sort_keys=True) + "\n"
        with _write_lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line)


def audit_event(
    *,
    action: str,
    ok: bool,
    details: Optional[Dict[str, Any]] = None,
    error: Optional[str] = None,
    denial: Optional[str] = None,
) -> Dict[str, Any]:
    e: Dict[str, Any] = {"action": action, "ok": ok}
    if details:
        e["details"] = details
    if error:
        e["error"] = error
    if denial:
        e["denial"] = denial
    return e
