from __future__ import annotations

import fnmatch
import os
import re

from ..context import ExecutionContext
from ..errors import NOT_FOUND, HandlerError, UsageError, format_error
from ..lib.args import parse_count
from ..lib.fileio import read_text, resolve
from ..lib.globbing import expand_operands
from ..lib.listing import bounded_listing
from ..lib.walk import EntryKind, walk
from ..parser import CommandName
from .base import CommandResult

_GREP_FLAGS = "ivnclrREF"


class GrepCommand:
    """Regex search over files, directories (``-r``) or piped stdin.

    Flags: ``-i`` ignore case, ``-v`` invert, ``-n`` line numbers, ``-c``
    count, ``-l`` names only, ``-r``/``-R`` recurse, ``-F`` fixed string,
    ``-E`` accepted (patterns are already extended), ``-e PATTERN``.
    """

    name = CommandName.GREP

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        flags, pattern, operands = self._parse(args)
        regex = self._compile(pattern, flags)
        recursive = "r" in flags or "R" in flags
        operands = expand_operands(operands, ctx)
        if recursive and not operands:
            operands = ["."]

        sources = self._sources(operands, ctx, recursive)
        show_label = recursive or len(sources) > 1
        out: list[str] = []
        for label, text in sources:
            hits = [
                (i, line)
                for i, line in enumerate(text.splitlines(), 1)
                if bool(regex.search(line)) != ("v" in flags)
            ]
            prefix = f"{label}:" if show_label and label is not None else ""
            if "l" in flags:
                if hits:
                    out.append(f"{label if label is not None else '(standard input)'}\n")
            elif "c" in flags:
                out.append(f"{prefix}{len(hits)}\n")
            else:
                for i, line in hits:
                    num = f"{i}:" if "n" in flags else ""
                    out.append(f"{prefix}{num}{line}\n")
        return CommandResult(output="".join(out))

    def _parse(self, args: list[str]) -> tuple[set[str], str, list[str]]:
        flags: set[str] = set()
        pattern: str | None = None
        operands: list[str] = []
        options_done = False
        i = 0
        while i < len(args):
            a = args[i]
            if options_done or a == "-" or not a.startswith("-"):
                operands.append(a)
            elif a == "--":
                options_done = True
            elif a == "-e":
                if i + 1 >= len(args):
                    raise UsageError(format_error("grep", None, "option requires an argument -- 'e'"))
                pattern = args[i + 1]
                i += 1
            else:
                for ch in a[1:]:
                    if ch not in _GREP_FLAGS:
                        raise UsageError(format_error("grep", None, f"invalid option -- '{ch}'"))
                    flags.add(ch)
            i += 1

        if pattern is None:
            if not operands:
                raise UsageError("usage: grep [-icnlrvFE] [-e pattern] pattern [file ...]\n")
            pattern, operands = operands[0], operands[1:]
        return flags, str(pattern), operands

    def _compile(self, pattern: str, flags: set[str]) -> "re.Pattern[str]":
        source = re.escape(pattern) if "F" in flags else pattern
        try:
            return re.compile(source, re.IGNORECASE if "i" in flags else 0)
        except re.error as e:
            raise HandlerError(format_error("grep", None, f"invalid regular expression: {e}")) from e

    def _sources(
        self, operands: list[str], ctx: ExecutionContext, recursive: bool
    ) -> list[tuple[str | None, str]]:
        if not operands:
            if ctx.stdin is None:
                raise UsageError("usage: grep [-icnlrvFE] [-e pattern] pattern [file ...]\n")
            return [(None, ctx.stdin)]

        sources: list[tuple[str | None, str]] = []
        for op in operands:
            path = resolve(op, ctx, "grep")
            if not os.path.isdir(path):
                sources.append((op, read_text(op, ctx, "grep")))
                continue
            if not recursive:
                raise HandlerError(format_error("grep", op, "Is a directory"))
            for entry in walk(path, kind="file", hard_limit=ctx.limits.max_walk_depth):
                label = os.path.join(op, os.path.relpath(entry.path, path))
                # Each file is validated again as it is read.
                sources.append((label, read_text(label, ctx, "grep")))
        return sources


class FindCommand:
    """``find [path ...] [-name PAT] [-iname PAT] [-type f|d] [-maxdepth N]``.

    Symlinks are never followed or listed. Output is sorted and capped.
    """

    name = CommandName.FIND

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        starts, name_pat, ignore_case, kind, max_depth = self._parse(args)
        starts = expand_operands(starts, ctx) or ["."]

        lines: list[str] = []
        for start in starts:
            path = resolve(start, ctx, "find")
            if not os.path.lexists(path):
                raise HandlerError(format_error("find", start, NOT_FOUND))
            start_kind: EntryKind = "dir" if os.path.isdir(path) else "file"
            if self._matches(os.path.basename(path), start_kind, name_pat, ignore_case, kind):
                lines.append(start)
            if start_kind != "dir":
                continue
            for entry in walk(path, max_depth=max_depth, kind=kind, hard_limit=ctx.limits.max_walk_depth):
                if self._matches(os.path.basename(entry.path), entry.kind, name_pat, ignore_case, None):
                    lines.append(os.path.join(start, os.path.relpath(entry.path, path)))

        return CommandResult(output=bounded_listing(sorted(lines), ctx.limits.max_output_lines))

    @staticmethod
    def _matches(
        basename: str,
        entry_kind: EntryKind,
        pattern: str | None,
        ignore_case: bool,
        kind: EntryKind | None,
    ) -> bool:
        if kind is not None and entry_kind != kind:
            return False
        if pattern is None:
            return True
        if ignore_case:
            return fnmatch.fnmatchcase(basename.lower(), pattern.lower())
        return fnmatch.fnmatchcase(basename, pattern)

    def _parse(self, args: list[str]):
        starts: list[str] = []
        name_pat: str | None = None
        ignore_case = False
        kind: EntryKind | None = None
        max_depth: int | None = None

        i = 0
        while i < len(args) and not args[i].startswith("-"):
            starts.append(args[i])
            i += 1

        while i < len(args):
            pred = args[i]
            if pred not in ("-name", "-iname", "-type", "-maxdepth"):
                raise UsageError(f"find: unknown predicate `{pred}'\n")
            if i + 1 >= len(args):
                raise UsageError(f"find: missing argument to `{pred}'\n")
            value = str(args[i + 1])
            if pred in ("-name", "-iname"):
                name_pat = value
                ignore_case = pred == "-iname"
            elif pred == "-type":
                if value not in ("f", "d"):
                    raise UsageError(f"find: Unknown argument to -type: {value}\n")
                kind = "file" if value == "f" else "dir"
            else:
                max_depth = parse_count(value, "find", "levels")
            i += 2
        return starts, name_pat, ignore_case, kind, max_depth
