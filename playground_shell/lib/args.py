from __future__ import annotations

from typing import Sequence

from ..errors import UsageError, format_error


def split_flags(args: Sequence[str], allowed: str, command: str) -> tuple[set[str], list[str]]:
    """Separate combined short flags (``-rf``) from operands.

    ``--`` ends option parsing; a bare ``-`` is an operand.
    """

    flags: set[str] = set()
    operands: list[str] = []
    options_done = False
    for a in args:
        if options_done or a == "-" or not a.startswith("-"):
            operands.append(a)
            continue
        if a == "--":
            options_done = True
            continue
        for ch in a[1:]:
            if ch not in allowed:
                raise UsageError(format_error(command, None, f"invalid option -- '{ch}'"))
            flags.add(ch)
    return flags, operands


def parse_count(value: str, command: str, what: str = "lines") -> int:
    try:
        n = int(value)
    except ValueError:
        n = -1
    if n < 0:
        raise UsageError(format_error(command, None, f"invalid number of {what}: '{value}'"))
    return n


def parse_line_count(args: Sequence[str], command: str, default: int = 10) -> tuple[int, list[str]]:
    """Handle ``-n N``, ``-nN`` and ``-N`` for head/tail."""

    n = default
    operands: list[str] = []
    i = 0
    while i < len(args):
        a = args[i]
        if a == "-n":
            if i + 1 >= len(args):
                raise UsageError(format_error(command, None, "option requires an argument -- 'n'"))
            n = parse_count(args[i + 1], command)
            i += 2
            continue
        if a.startswith("-n") and len(a) > 2:
            n = parse_count(a[2:], command)
        elif len(a) > 1 and a[0] == "-" and a[1:].isdigit():
            n = int(a[1:])
        elif a.startswith("-") and a != "-":
            raise UsageError(format_error(command, None, f"invalid option -- '{a[1:2]}'"))
        else:
            operands.append(a)
        i += 1
    return n, operands
