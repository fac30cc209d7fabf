from __future__ import annotations

import argparse
import logging
import sys

from . import __version__
from .config import discover_config, load_config
from .errors import ConfigError
from .logging_utils import configure_logging
from .shell import PlaygroundShell

logger = logging.getLogger(__name__)

HELP_REPL = """\
Playground Shell (boundary-confined)

Builtins: cat cd cp date echo false find grep head ls mkdir mv pwd rm tail touch true wc which
Pipes (|) and redirects (> >> 2> 2>> <) work; only the part before && || ; runs.

  help      show this help
  exit      quit
"""


def _shell_from_args(args: argparse.Namespace) -> PlaygroundShell:
    cfg = load_config(args.config) if args.config else discover_config()
    return PlaygroundShell.from_config(cfg, audit_path=args.audit_log)


def cmd_execute(args: argparse.Namespace) -> int:
    shell = _shell_from_args(args)
    res = shell.execute(" ".join(args.line))
    if res.ok:
        sys.stdout.write(res.output)
        return 0
    sys.stderr.write(res.error)
    return 1


def cmd_validate_path(args: argparse.Namespace) -> int:
    shell = _shell_from_args(args)
    res = shell.validate_path(args.path)
    if not res.ok:
        return 1
    print(res.path)
    return 0


def cmd_repl(args: argparse.Namespace) -> int:
    shell = _shell_from_args(args)
    ctx = shell.new_context()
    print(HELP_REPL)

    while True:
        try:
            line = input("playground$ ").strip()
        except EOFError:
            print()
            return 0
        if not line:
            continue
        if line in {"exit", "quit"}:
            return 0
        if line == "help":
            print(HELP_REPL)
            continue

        res = shell.execute(line, ctx)
        sys.stdout.write(res.output)
        sys.stderr.write(res.error)
        ctx = res.context


def cmd_version(args: argparse.Namespace) -> int:
    print(__version__)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="playground-shell")
    p.add_argument("--config", help="Path to playground.yaml (default: discovered)")
    p.add_argument("--log", help="Write logs to this file")
    p.add_argument("--audit-log", help="Append a JSONL audit trail to this file")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr")

    sub = p.add_subparsers(dest="subcmd", required=True)

    sp = sub.add_parser("execute", help="Run one command line and exit")
    sp.add_argument("line", nargs="+", help="Command line; quote it to keep pipes and redirects")
    sp.set_defaults(func=cmd_execute)

    sp = sub.add_parser("validate-path", help="Print the canonical path, or exit 1 if it is refused")
    sp.add_argument("path")
    sp.set_defaults(func=cmd_validate_path)

    sp = sub.add_parser("repl", help="Interactive shell; keeps the working directory between lines")
    sp.set_defaults(func=cmd_repl)

    sp = sub.add_parser("version", help="Print version")
    sp.set_defaults(func=cmd_version)

    return p


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    if hasattr(sys.stdout, "reconfigure"):
        # Undecodable argv bytes are printed back as the bytes they were.
        sys.stdout.reconfigure(errors="surrogateescape")
    configure_logging(
        args.log,
        level=logging.DEBUG if args.verbose else logging.INFO,
        also_console=bool(args.verbose),
    )
    try:
        return int(args.func(args))
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        print(f"playground-shell: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
