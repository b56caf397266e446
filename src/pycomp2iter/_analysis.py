"""Name analysis: which names a translated comprehension reads from its scope."""

from __future__ import annotations

import ast
import builtins

from pycomp2iter._constants import RUNTIME_NAME
from pycomp2iter.nodes import Comprehension

_PROVIDED_NAMES = frozenset(dir(builtins)) | {RUNTIME_NAME}


class _NameCollector(ast.NodeVisitor):
    """Collects loaded names in source order, first occurrence only."""

    def __init__(self, bound: frozenset[str] = frozenset()) -> None:
        self._bound = bound | _PROVIDED_NAMES
        self.names: list[str] = []

    def visit_Name(self, node: ast.Name) -> None:
        if isinstance(node.ctx, ast.Load) and node.id not in self._bound and node.id not in self.names:
            self.names.append(node.id)


def free_names(comprehension: Comprehension) -> tuple[str, ...]:
    """Names the comprehension needs from the surrounding namespace.

    Builtins are not reported. The sequence is evaluated outside the
    per-element closure, so a pattern name used there is still free. In the
    mapping and the conditions the pattern names are bound.
    """
    clause = comprehension.clause
    bound = frozenset(clause.pattern.names)

    outer = _NameCollector()
    outer.visit(clause.sequence)

    inner = _NameCollector(bound)
    inner.visit(comprehension.mapping.expression)
    for condition in clause.conditions:
        inner.visit(condition.expression)

    names = list(outer.names)
    names.extend(n for n in inner.names if n not in names)
    return tuple(names)
