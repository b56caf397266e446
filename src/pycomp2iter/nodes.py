"""Syntax tree for a parsed comprehension."""

from __future__ import annotations

import ast
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Mapping:
    """Expression producing one output element per admitted input element."""

    expression: ast.expr


@dataclass(frozen=True)
class Pattern:
    """Binding target: one name, or a flat tuple of names."""

    target: ast.Name | ast.Tuple

    @property
    def names(self) -> tuple[str, ...]:
        if isinstance(self.target, ast.Name):
            return (self.target.id,)
        return tuple(elt.id for elt in self.target.elts)

    @property
    def is_tuple(self) -> bool:
        return isinstance(self.target, ast.Tuple)


@dataclass(frozen=True)
class Condition:
    """Guard expression; an element is admitted only when it is truthy."""

    expression: ast.expr


@dataclass(frozen=True)
class GeneratorClause:
    """``for pattern in sequence`` followed by its guards, in source order."""

    pattern: Pattern
    sequence: ast.expr
    conditions: tuple[Condition, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Comprehension:
    """Root node: a mapping and its single generator clause."""

    mapping: Mapping
    clause: GeneratorClause

    def __str__(self) -> str:
        parts = [
            ast.unparse(self.mapping.expression),
            "for",
            ast.unparse(self.clause.pattern.target),
            "in",
            ast.unparse(self.clause.sequence),
        ]
        for condition in self.clause.conditions:
            parts.extend(["if", ast.unparse(condition.expression)])
        return " ".join(parts)
