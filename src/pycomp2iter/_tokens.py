"""Token source: lark lexer-only tokenizer and a cursor over its output."""

from __future__ import annotations

import ast
import keyword
from collections.abc import Iterable, Sequence

from lark import Lark, Token
from lark.exceptions import UnexpectedCharacters

from pycomp2iter._constants import RUNTIME_NAME
from pycomp2iter._errors import (
    EXPECTED_LITERAL,
    EXPECTED_NAME,
    EXPECTED_TOKEN,
    ComprehensionSyntaxError,
)
from pycomp2iter._grammar import GRAMMAR, START_RULES

_LITERAL_NAMES = frozenset({"True", "False", "None"})

_LITERAL_TYPES = frozenset({"NUMBER", "STRING", "BYTES"})

# parser=None keeps every terminal, so keywords no expression rule uses
# (``for``) still come out as their own token type.
_lexer = Lark(GRAMMAR, parser=None, lexer="basic", start=START_RULES)


def tokenize(text: str) -> tuple[Token, ...]:
    """Split comprehension text into lark tokens.

    Raises:
        ComprehensionSyntaxError: On a character no terminal matches, an
            identifier that is a reserved Python keyword or the runtime name,
            or a literal Python rejects (``0777``, ``'\\x1'``).
    """
    tokens: list[Token] = []
    try:
        for token in _lexer.lex(text):
            if token.type == "NAME" and _is_reserved(token.value):
                raise ComprehensionSyntaxError(
                    "token",
                    EXPECTED_NAME,
                    len(tokens),
                    found=repr(token.value),
                    line=token.line,
                    column=token.column,
                )
            if token.type in _LITERAL_TYPES:
                _check_literal(token, len(tokens))
            tokens.append(token)
    except UnexpectedCharacters as e:
        raise ComprehensionSyntaxError(
            "token",
            EXPECTED_TOKEN,
            len(tokens),
            found=repr(e.char),
            line=e.line,
            column=e.column,
            wrapped=e,
        ) from e
    return tuple(tokens)


def _is_reserved(name: str) -> bool:
    if name == RUNTIME_NAME:
        return True
    return keyword.iskeyword(name) and name not in _LITERAL_NAMES


def _check_literal(token: Token, position: int) -> None:
    try:
        ast.literal_eval(token.value)
    except (SyntaxError, ValueError) as e:
        raise ComprehensionSyntaxError(
            "token",
            EXPECTED_LITERAL,
            position,
            found=repr(token.value),
            line=token.line,
            column=token.column,
            wrapped=e,
        ) from e


class TokenStream:
    """Read cursor over an immutable token sequence.

    ``mark()`` and ``reset()`` give callers an explicit checkpoint/rollback
    for speculative parses.
    """

    def __init__(self, tokens: Iterable[Token]) -> None:
        self._tokens: tuple[Token, ...] = tuple(tokens)
        self._pos = 0

    def __len__(self) -> int:
        return len(self._tokens)

    @property
    def position(self) -> int:
        return self._pos

    def at_end(self) -> bool:
        return self._pos >= len(self._tokens)

    def peek(self) -> Token | None:
        if self.at_end():
            return None
        return self._tokens[self._pos]

    def advance(self) -> Token:
        token = self._tokens[self._pos]
        self._pos += 1
        return token

    def remaining(self) -> Sequence[Token]:
        return self._tokens[self._pos:]

    def seek(self, position: int) -> None:
        if not 0 <= position <= len(self._tokens):
            raise IndexError(f"token position {position} out of range")
        self._pos = position

    def mark(self) -> int:
        return self._pos

    def reset(self, mark: int) -> None:
        self.seek(mark)

    def describe(self, position: int | None = None) -> str:
        """Describe the token at ``position`` for error messages."""
        if position is None:
            position = self._pos
        if position >= len(self._tokens):
            return "end of input"
        return repr(self._tokens[position].value)

    def location(self, position: int | None = None) -> tuple[int | None, int | None]:
        """Line and column of the token at ``position``.

        Past the end, this is the column just after the last token.
        """
        if position is None:
            position = self._pos
        if position < len(self._tokens):
            token = self._tokens[position]
            return token.line, token.column
        if not self._tokens:
            return 1, 1
        last = self._tokens[-1]
        return last.end_line, last.end_column
