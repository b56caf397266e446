"""Exception hierarchy for comprehension translation."""

from __future__ import annotations


class TranslationError(Exception):
    """Base exception for comprehension translation errors.

    Provides dual messaging: a sanitized user-facing message and
    internal details for logging.
    """

    def __init__(
        self,
        user_message: str,
        internal_details: str = "",
        wrapped: Exception | None = None,
    ) -> None:
        super().__init__(user_message)
        self.user_message = user_message
        self.internal_details = internal_details or user_message
        self.wrapped = wrapped

    def internal(self) -> str:
        return self.internal_details


class ComprehensionSyntaxError(TranslationError):
    """Raised when the input does not match the comprehension grammar.

    Carries the grammar rule being attempted, the construct that was
    expected, and the token index where the mismatch occurred.
    """

    def __init__(
        self,
        rule: str,
        expected: str,
        position: int,
        *,
        found: str = "",
        line: int | None = None,
        column: int | None = None,
        wrapped: Exception | None = None,
    ) -> None:
        where = f"token {position}"
        if line is not None and column is not None:
            where = f"{where} (line {line}, column {column})"
        super().__init__(
            f"{ERR_MSG_SYNTAX}: expected {expected} in {rule} at {where}",
            f"rule {rule!r} expected {expected} at {where}, found {found or 'nothing'}",
            wrapped,
        )
        self.rule = rule
        self.expected = expected
        self.position = position
        self.found = found
        self.line = line
        self.column = column


class MaxTokensExceededError(TranslationError):
    """Raised when the token stream is longer than the configured limit."""


class MaxOutputLengthExceededError(TranslationError):
    """Raised when the generated source is longer than the configured limit."""


# Sanitized user-facing error message constants
ERR_MSG_SYNTAX = "invalid comprehension syntax"
ERR_MSG_TOO_MANY_TOKENS = "comprehension is too long"
ERR_MSG_OUTPUT_TOO_LONG = "generated expression is too long"

# Expected-construct descriptions used in ComprehensionSyntaxError
EXPECTED_EXPRESSION = "expression"
EXPECTED_PATTERN = "pattern"
EXPECTED_DISTINCT_NAMES = "distinct names"
EXPECTED_END = "end of input"
EXPECTED_TOKEN = "valid token"
EXPECTED_NAME = "non-reserved name"
EXPECTED_LITERAL = "valid literal"
