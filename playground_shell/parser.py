from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Literal, Sequence

from .errors import ParseError
from .tokenizer import Token, describe, tokenize

logger = logging.getLogger(__name__)

RedirectKind = Literal["stdout", "stdout_append", "stderr", "stderr_append", "stdin"]


class CommandName(str, Enum):
    CAT = "cat"
    CD = "cd"
    CP = "cp"
    DATE = "date"
    ECHO = "echo"
    FALSE = "false"
    FIND = "find"
    GREP = "grep"
    HEAD = "head"
    LS = "ls"
    MKDIR = "mkdir"
    MV = "mv"
    PWD = "pwd"
    RM = "rm"
    TAIL = "tail"
    TOUCH = "touch"
    TRUE = "true"
    WC = "wc"
    WHICH = "which"


_KNOWN: dict[str, CommandName] = {c.value: c for c in CommandName}


@dataclass(frozen=True)
class UnknownCommand:
    name: str


Name = CommandName | UnknownCommand


class GlobPattern(str):
    """An argument that came from an unquoted glob token."""

    __slots__ = ()


@dataclass(frozen=True)
class Redirect:
    kind: RedirectKind
    target: str


@dataclass(frozen=True)
class Command:
    name: Name
    args: tuple[str, ...] = ()
    pipes: tuple["Command", ...] = ()
    redirects: tuple[Redirect, ...] = field(default=())

    @property
    def depth(self) -> int:
        return 1 + len(self.pipes)

    @property
    def display_name(self) -> str:
        return self.name.value if isinstance(self.name, CommandName) else self.name.name

    def stages(self) -> list["Command"]:
        """The pipeline as a flat list, root stage (without pipes) first."""
        return [replace(self, pipes=()), *self.pipes]


def resolve_name(name: str) -> Name:
    """Map a literal name onto the closed command table."""
    return _KNOWN.get(name) or UnknownCommand(name)


def _split_at_chain(tokens: Sequence[Token]) -> tuple[list[Token], list[Token]]:
    for i, tok in enumerate(tokens):
        if tok.kind == "chain":
            return list(tokens[:i]), list(tokens[i + 1 :])
    return list(tokens), []


def _split_at_pipes(tokens: Sequence[Token]) -> list[list[Token]]:
    segments: list[list[Token]] = [[]]
    for tok in tokens:
        if tok.kind == "pipe":
            segments.append([])
        else:
            segments[-1].append(tok)
    return segments


def _parse_segment(tokens: list[Token]) -> Command:
    if not tokens:
        raise ParseError("bash: syntax error near unexpected token `|'\n")

    head = tokens[0]
    if head.kind == "glob":
        raise ParseError(f"bash: {head.value}: cannot execute glob pattern\n")
    if head.kind != "word":
        raise ParseError(f"bash: syntax error near unexpected token `{describe(head)}'\n")

    args: list[str] = []
    redirects: list[Redirect] = []
    rest = tokens[1:]
    i = 0
    while i < len(rest):
        tok = rest[i]
        if tok.kind == "redirect":
            nxt = rest[i + 1] if i + 1 < len(rest) else None
            if nxt is not None and nxt.kind in ("word", "glob"):
                redirects.append(Redirect(kind=tok.value, target=nxt.value))  # type: ignore[arg-type]
                i += 2
                continue
            # Dangling redirect: dropped, like an interactive shell's incomplete input.
            i += 1
            continue
        if tok.kind == "glob":
            args.append(GlobPattern(tok.value))
        else:
            args.append(tok.value)
        i += 1

    return Command(name=resolve_name(head.value), args=tuple(args), redirects=tuple(redirects))


def parse_tokens(tokens: Sequence[Token]) -> Command:
    if not tokens:
        raise ParseError("bash: empty command\n")

    leading, trailing = _split_at_chain(tokens)
    if trailing:
        logger.debug("Ignoring %d token(s) after chain operator", len(trailing))
    if not leading:
        raise ParseError("bash: empty command\n")

    segments = [_parse_segment(seg) for seg in _split_at_pipes(leading)]
    root, pipes = segments[0], segments[1:]
    return replace(root, pipes=tuple(pipes))


def parse(line: str) -> Command:
    """Tokenize and parse a command line into a single :class:`Command`.

    Only the segment before the first ``&&``/``||``/``;`` is returned; later
    segments are accepted but never executed.
    """

    return parse_tokens(tokenize(line))
