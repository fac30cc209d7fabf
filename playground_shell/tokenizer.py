"""Lexer for the playground command line.

Token kinds:
- ``word``     plain or quoted text (quotes stripped)
- ``glob``     unquoted text containing ``*``, ``?`` or ``[`` (raw pattern)
- ``pipe``     ``|``
- ``redirect`` ``>`` ``>>`` ``2>`` ``2>>`` ``<``
- ``chain``    ``&&`` ``||`` ``;``

Glob patterns are not expanded here; the handler consuming them does that.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .errors import LexError

TokenKind = Literal["word", "glob", "pipe", "redirect", "chain"]


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str


# Longest operators first, otherwise "||" lexes as two pipes.
_OPERATORS: tuple[tuple[str, TokenKind, str], ...] = (
    ("||", "chain", "or"),
    ("|", "pipe", "|"),
    ("&&", "chain", "and"),
    ("2>>", "redirect", "stderr_append"),
    ("2>", "redirect", "stderr"),
    (">>", "redirect", "stdout_append"),
    (">", "redirect", "stdout"),
    ("<", "redirect", "stdin"),
    (";", "chain", "seq"),
)

_OPERATOR_TEXT = {(kind, value): text for text, kind, value in _OPERATORS}

_WHITESPACE = frozenset(" \t\n")
_WORD_BREAKS = frozenset(" \t\n|&;<>")
_GLOB_CHARS = frozenset("*?[")
_DQ_ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "t": "\t"}


def describe(token: Token) -> str:
    """Source text of a token, for error messages."""
    return _OPERATOR_TEXT.get((token.kind, token.value), token.value)


def _match_operator(line: str, i: int) -> tuple[str, TokenKind, str] | None:
    for op in _OPERATORS:
        if line.startswith(op[0], i):
            return op
    return None


def _read_quoted(line: str, i: int, quote: str) -> tuple[str, int]:
    buf: list[str] = []
    n = len(line)
    while i < n:
        c = line[i]
        if c == quote:
            return "".join(buf), i + 1
        if quote == '"' and c == "\\" and i + 1 < n and line[i + 1] in _DQ_ESCAPES:
            buf.append(_DQ_ESCAPES[line[i + 1]])
            i += 2
            continue
        buf.append(c)
        i += 1
    raise LexError(f"bash: unexpected EOF while looking for matching `{quote}'\n")


def _read_word(line: str, i: int) -> tuple[Token, int]:
    buf: list[str] = []
    is_glob = False
    n = len(line)
    while i < n:
        c = line[i]
        if c in _WORD_BREAKS:
            break
        if c == "\\":
            if i + 1 < n:
                buf.append(line[i + 1])
                i += 2
            else:
                buf.append(c)
                i += 1
            continue
        if c in ("'", '"'):
            text, i = _read_quoted(line, i + 1, c)
            buf.append(text)
            continue
        if c in _GLOB_CHARS:
            is_glob = True
        buf.append(c)
        i += 1
    return Token("glob" if is_glob else "word", "".join(buf)), i


def tokenize(line: str) -> list[Token]:
    """Split a raw command line into tokens.

    Empty or whitespace-only input gives ``[]``. Unterminated quotes and a
    lone ``&`` raise :class:`LexError`.
    """

    tokens: list[Token] = []
    i = 0
    n = len(line)
    while i < n:
        c = line[i]
        if c in _WHITESPACE:
            i += 1
            continue

        op = _match_operator(line, i)
        if op is not None:
            text, kind, value = op
            tokens.append(Token(kind, value))
            i += len(text)
            continue

        if c == "&":
            raise LexError("bash: syntax error near unexpected token `&'\n")

        token, i = _read_word(line, i)
        tokens.append(token)
    return tokens
