"""Comprehension grammar parser.

Grammar::

    comprehension    := mapping generator_clause
    mapping          := expression
    generator_clause := 'for' pattern 'in' expression condition*
    pattern          := name (',' name)*
    condition        := 'if' expression

Expressions and patterns are delegated to a ``Sublanguage``; this module
only handles the keywords and the shape of the clause.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import NoReturn, TypeVar

from lark import Token

from pycomp2iter._constants import DEFAULT_MAX_TOKENS
from pycomp2iter._errors import (
    ERR_MSG_TOO_MANY_TOKENS,
    EXPECTED_DISTINCT_NAMES,
    EXPECTED_END,
    EXPECTED_EXPRESSION,
    EXPECTED_PATTERN,
    ComprehensionSyntaxError,
    MaxTokensExceededError,
)
from pycomp2iter._expressions import (
    EXPRESSION_RULE,
    GUARD_RULE,
    PythonSublanguage,
    Sublanguage,
)
from pycomp2iter._grammar import FOR, IF, IN
from pycomp2iter._tokens import TokenStream
from pycomp2iter.nodes import Comprehension, Condition, GeneratorClause, Mapping, Pattern

logger = logging.getLogger(__name__)

T = TypeVar("T")

_KEYWORD_TEXT = {FOR: "'for'", IN: "'in'", IF: "'if'"}


def parse_zero_or_more(stream: TokenStream, parse_one: Callable[[TokenStream], T | None]) -> list[T]:
    """Apply ``parse_one`` repeatedly until it fails.

    Each attempt runs from a checkpoint; a failed attempt (``None``) rolls
    the stream back to it and ends the repetition, so failure never
    consumes tokens.
    """
    items: list[T] = []
    while True:
        checkpoint = stream.mark()
        item = parse_one(stream)
        if item is None:
            stream.reset(checkpoint)
            return items
        items.append(item)


class ComprehensionParser:
    """Builds a ``Comprehension`` from a token sequence."""

    def __init__(
        self,
        tokens: Iterable[Token],
        sublanguage: Sublanguage | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> None:
        self._stream = TokenStream(tokens)
        self._sublanguage = sublanguage or PythonSublanguage()
        if len(self._stream) > max_tokens:
            raise MaxTokensExceededError(
                ERR_MSG_TOO_MANY_TOKENS,
                f"{len(self._stream)} tokens exceeds limit {max_tokens}",
            )

    def parse(self) -> Comprehension:
        mapping = self._parse_mapping()
        clause = self._parse_generator_clause()
        if not self._stream.at_end():
            self._fail("comprehension", EXPECTED_END)
        logger.debug(
            "parsed comprehension binding %s with %d condition(s)",
            clause.pattern.names,
            len(clause.conditions),
        )
        return Comprehension(mapping=mapping, clause=clause)

    # ---- Required rules: fail fast ----

    def _parse_mapping(self) -> Mapping:
        expression = self._sublanguage.match_expression(self._stream, EXPRESSION_RULE)
        if expression is None:
            self._fail("mapping", EXPECTED_EXPRESSION)
        return Mapping(expression)

    def _parse_generator_clause(self) -> GeneratorClause:
        self._expect_keyword("generator_clause", FOR)
        pattern = self._parse_pattern()
        self._expect_keyword("generator_clause", IN)
        sequence = self._sublanguage.match_expression(self._stream, GUARD_RULE)
        if sequence is None:
            self._fail("generator_clause", EXPECTED_EXPRESSION)
        conditions = parse_zero_or_more(self._stream, self._try_condition)
        return GeneratorClause(
            pattern=pattern,
            sequence=sequence,
            conditions=tuple(conditions),
        )

    def _parse_pattern(self) -> Pattern:
        start = self._stream.position
        target = self._sublanguage.match_pattern(self._stream)
        if target is None:
            self._fail("pattern", EXPECTED_PATTERN)
        pattern = Pattern(target)
        if len(set(pattern.names)) != len(pattern.names):
            self._fail("pattern", EXPECTED_DISTINCT_NAMES, start)
        return pattern

    # ---- Optional rule: failure means "no more conditions" ----

    def _try_condition(self, stream: TokenStream) -> Condition | None:
        token = stream.peek()
        if token is None or token.type != IF:
            return None
        stream.advance()
        expression = self._sublanguage.match_expression(stream, GUARD_RULE)
        if expression is None:
            return None
        return Condition(expression)

    # ---- Helpers ----

    def _expect_keyword(self, rule: str, token_type: str) -> Token:
        token = self._stream.peek()
        if token is None or token.type != token_type:
            self._fail(rule, _KEYWORD_TEXT[token_type])
        return self._stream.advance()

    def _fail(self, rule: str, expected: str, position: int | None = None) -> NoReturn:
        if position is None:
            position = self._stream.position
        line, column = self._stream.location(position)
        raise ComprehensionSyntaxError(
            rule,
            expected,
            position,
            found=self._stream.describe(position),
            line=line,
            column=column,
        )
