from __future__ import annotations

from ..context import ExecutionContext
from ..lib.args import parse_line_count, split_flags
from ..lib.fileio import encode_text, read_inputs
from ..lib.globbing import expand_operands
from ..parser import CommandName
from .base import CommandResult


class CatCommand:
    name = CommandName.CAT

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        _, operands = split_flags(args, "", "cat")
        sources = read_inputs(expand_operands(operands, ctx), ctx, "cat")
        return CommandResult(output="".join(text for _, text in sources))


def _join_sections(sections: list[tuple[str | None, str]]) -> str:
    if len(sections) == 1:
        return sections[0][1]
    return "\n".join(f"==> {label} <==\n{body}" for label, body in sections)


def _terminated(lines: list[str]) -> str:
    body = "".join(lines)
    if body and not body.endswith("\n"):
        body += "\n"
    return body


class HeadCommand:
    name = CommandName.HEAD

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        n, operands = parse_line_count(args, "head")
        sources = read_inputs(expand_operands(operands, ctx), ctx, "head")
        sections = [(label, _terminated(text.splitlines(keepends=True)[:n])) for label, text in sources]
        return CommandResult(output=_join_sections(sections))


class TailCommand:
    name = CommandName.TAIL

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        n, operands = parse_line_count(args, "tail")
        sources = read_inputs(expand_operands(operands, ctx), ctx, "tail")
        sections = []
        for label, text in sources:
            lines = text.splitlines(keepends=True)
            sections.append((label, _terminated(lines[-n:] if n else [])))
        return CommandResult(output=_join_sections(sections))


class WcCommand:
    """Count lines, words and bytes; ``-l``/``-w``/``-c`` select columns."""

    name = CommandName.WC

    def handle(self, args: list[str], ctx: ExecutionContext) -> CommandResult:
        flags, operands = split_flags(args, "lwc", "wc")
        columns = [c for c in "lwc" if c in flags] or ["l", "w", "c"]
        sources = read_inputs(expand_operands(operands, ctx), ctx, "wc")

        totals = {"l": 0, "w": 0, "c": 0}
        rows: list[str] = []
        for label, text in sources:
            counts = {"l": text.count("\n"), "w": len(text.split()), "c": len(encode_text(text))}
            for k, v in counts.items():
                totals[k] += v
            rows.append(self._row(counts, columns, label))
        if len(sources) > 1:
            rows.append(self._row(totals, columns, "total"))
        return CommandResult(output="".join(rows))

    def _row(self, counts: dict, columns: list[str], label: str | None) -> str:
        cells = " ".join(f"{counts[c]:>8}" for c in columns)
        return f"{cells} {label}\n" if label else f"{cells}\n"
