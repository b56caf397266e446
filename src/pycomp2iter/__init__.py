"""pycomp2iter - Translate comprehension expressions into lazy iterator chains."""

from __future__ import annotations

__version__ = "0.1.0"

import ast
import logging
import types
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from lark import Token

from pycomp2iter import _runtime
from pycomp2iter._analysis import free_names
from pycomp2iter._codegen import render, to_source
from pycomp2iter._constants import (
    DEFAULT_MAX_OUTPUT_LENGTH,
    DEFAULT_MAX_TOKENS,
    RUNTIME_NAME,
    SOURCE_FILENAME,
)
from pycomp2iter._errors import (
    ERR_MSG_OUTPUT_TOO_LONG,
    ComprehensionSyntaxError,
    MaxOutputLengthExceededError,
    MaxTokensExceededError,
    TranslationError,
)
from pycomp2iter._expressions import PythonSublanguage, Sublanguage
from pycomp2iter._parser import ComprehensionParser
from pycomp2iter._tokens import TokenStream, tokenize
from pycomp2iter.nodes import Comprehension, Condition, GeneratorClause, Mapping, Pattern

__all__ = [
    "analyze",
    "comp",
    "compile_comprehension",
    "evaluation_scope",
    "parse",
    "render",
    "tokenize",
    "translate",
    "translate_tree",
    "AnalysisResult",
    "Translation",
    "Comprehension",
    "Condition",
    "GeneratorClause",
    "Mapping",
    "Pattern",
    "Sublanguage",
    "PythonSublanguage",
    "TokenStream",
    "TranslationError",
    "ComprehensionSyntaxError",
    "MaxOutputLengthExceededError",
    "MaxTokensExceededError",
    "RUNTIME_NAME",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Translation:
    """Result of a translation: Python source and its expression tree."""

    source: str
    tree: ast.Expression


@dataclass(frozen=True)
class AnalysisResult:
    """Result of comprehension analysis."""

    source: str
    bound_names: tuple[str, ...] = ()
    free_names: tuple[str, ...] = ()
    condition_count: int = 0


def parse(
    source: str | Iterable[Token],
    *,
    sublanguage: Sublanguage | None = None,
    max_tokens: int | None = None,
) -> Comprehension:
    """Parse comprehension text (or pre-lexed tokens) into a ``Comprehension``.

    Args:
        source: Comprehension text, or tokens produced by ``tokenize``.
        sublanguage: Expression/pattern grammar to delegate to. Defaults to
            ``PythonSublanguage``.
        max_tokens: Maximum number of tokens. Defaults to 10000.

    Raises:
        ComprehensionSyntaxError: If the input is not a valid comprehension.
        MaxTokensExceededError: If the input has too many tokens.
    """
    tokens = tokenize(source) if isinstance(source, str) else tuple(source)
    if max_tokens is None:
        max_tokens = DEFAULT_MAX_TOKENS
    return ComprehensionParser(tokens, sublanguage, max_tokens).parse()


def translate_tree(
    source: str | Iterable[Token],
    *,
    sublanguage: Sublanguage | None = None,
    max_tokens: int | None = None,
    max_output_length: int | None = None,
) -> Translation:
    """Translate a comprehension into a Python expression tree and its source.

    Args:
        source: Comprehension text or tokens.
        sublanguage: Expression/pattern grammar to delegate to. Defaults to
            ``PythonSublanguage``.
        max_tokens: Maximum number of tokens. Defaults to 10000.
        max_output_length: Maximum generated source length. Defaults to 50000.

    Returns:
        Translation with the unparsed source and an ``ast.Expression`` ready
        for ``compile(..., "eval")``.

    Raises:
        ComprehensionSyntaxError: If the input is not a valid comprehension.
        MaxTokensExceededError: If the input has too many tokens.
        MaxOutputLengthExceededError: If the generated source is too long.
    """
    if max_output_length is None:
        max_output_length = DEFAULT_MAX_OUTPUT_LENGTH

    comprehension = parse(source, sublanguage=sublanguage, max_tokens=max_tokens)
    expression = render(comprehension)
    text = to_source(expression)
    if len(text) > max_output_length:
        raise MaxOutputLengthExceededError(
            ERR_MSG_OUTPUT_TOO_LONG,
            f"output length {len(text)} exceeds limit {max_output_length}",
        )

    tree = ast.fix_missing_locations(ast.Expression(body=expression))
    logger.debug("translated %s -> %s", comprehension, text)
    return Translation(source=text, tree=tree)


def translate(
    source: str | Iterable[Token],
    *,
    sublanguage: Sublanguage | None = None,
    max_tokens: int | None = None,
    max_output_length: int | None = None,
) -> str:
    """Translate a comprehension into Python source text.

    The result is an expression to splice where the comprehension appeared.
    It reaches its iterator helpers through ``RUNTIME_NAME``
    (``__pycomp2iter__``), which the evaluation scope must bind to the
    runtime module; ``evaluation_scope`` builds such a scope.

    Raises:
        ComprehensionSyntaxError: If the input is not a valid comprehension.
        MaxTokensExceededError: If the input has too many tokens.
        MaxOutputLengthExceededError: If the generated source is too long.
    """
    return translate_tree(
        source,
        sublanguage=sublanguage,
        max_tokens=max_tokens,
        max_output_length=max_output_length,
    ).source


def compile_comprehension(
    source: str | Iterable[Token],
    *,
    sublanguage: Sublanguage | None = None,
    max_tokens: int | None = None,
    max_output_length: int | None = None,
) -> types.CodeType:
    """Compile a comprehension into an ``eval``-mode code object."""
    translation = translate_tree(
        source,
        sublanguage=sublanguage,
        max_tokens=max_tokens,
        max_output_length=max_output_length,
    )
    return compile(translation.tree, SOURCE_FILENAME, "eval")


def evaluation_scope(namespace: dict[str, Any] | None = None, /, **names: Any) -> dict[str, Any]:
    """Build a globals dict for evaluating translated comprehensions.

    ``names`` override ``namespace``. ``RUNTIME_NAME`` is bound last, so no
    user name can replace the runtime helpers.
    """
    scope: dict[str, Any] = {}
    if namespace is not None:
        scope.update(namespace)
    scope.update(names)
    scope[RUNTIME_NAME] = _runtime
    return scope


def comp(
    source: str,
    namespace: dict[str, Any] | None = None,
    sublanguage: Sublanguage | None = None,
    /,
    **names: Any,
) -> Iterator[Any]:
    """Evaluate a comprehension lazily against the given names.

    ``comp("x * 2 for x in xs", xs=[1, 2, 3])`` returns an iterator over
    ``2, 4, 6``. Elements are computed only as the iterator is consumed.

    Args:
        source: Comprehension text.
        namespace: Names visible to the comprehension.
        sublanguage: Expression/pattern grammar to delegate to. Positional
            only, like ``namespace``, so every keyword stays a name.
        **names: Additional names; these override ``namespace``.

    Raises:
        ComprehensionSyntaxError: If the input is not a valid comprehension.
    """
    code = compile_comprehension(source, sublanguage=sublanguage)
    return eval(code, evaluation_scope(namespace, **names))


def analyze(
    source: str | Iterable[Token],
    *,
    sublanguage: Sublanguage | None = None,
    max_tokens: int | None = None,
) -> AnalysisResult:
    """Translate a comprehension and report the names it binds and reads.

    Returns:
        AnalysisResult with the generated source, the pattern names, the
        names read from the surrounding namespace (builtins excluded), and
        the guard count.
    """
    comprehension = parse(source, sublanguage=sublanguage, max_tokens=max_tokens)
    return AnalysisResult(
        source=to_source(render(comprehension)),
        bound_names=comprehension.clause.pattern.names,
        free_names=free_names(comprehension),
        condition_count=len(comprehension.clause.conditions),
    )
