from __future__ import annotations

import logging
import os
from pathlib import Path


def configure_logging(
    log_path: str | None = None,
    level: int = logging.INFO,
    also_console: bool = False,
) -> str | None:
    """Configure logging for the CLI.

    Library code only ever calls ``logging.getLogger(__name__)``; handlers are
    attached here, once. Console output goes to stderr so it never mixes with
    command output on stdout.

    - ``log_path`` given: attempt to write there first; if the directory is
      not writable, fall back to ``playground-shell.log`` in the working
      directory.
    - no ``log_path`` and no console: records are dropped.

    Returns the file path actually used, if any.
    """

    root = logging.getLogger()
    root.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(root, "_playground_configured", False):
        return getattr(root, "_playground_log_path", None)

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )
    handlers: list[logging.Handler] = []
    chosen: str | None = None

    if log_path:
        requested = os.path.expanduser(log_path)
        try:
            Path(os.path.dirname(requested) or ".").mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(requested, encoding="utf-8"))
            chosen = requested
        except OSError:
            fallback = str(Path.cwd() / "playground-shell.log")
            handlers.append(logging.FileHandler(fallback, encoding="utf-8"))
            chosen = fallback

    if also_console:
        handlers.append(logging.StreamHandler())

    if not handlers:
        handlers.append(logging.NullHandler())

    for h in handlers:
        h.setFormatter(fmt)
        root.addHandler(h)

    setattr(root, "_playground_configured", True)
    setattr(root, "_playground_log_path", chosen)

    logging.getLogger(__name__).debug("Logging initialized (requested=%s, actual=%s)", log_path, chosen)
    return chosen
