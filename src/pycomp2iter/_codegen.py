"""Lowering of a ``Comprehension`` into a lazy iterator-chain expression.

For ``M for P in S if C1 ... if Cn`` the generated expression is::

    __pycomp2iter__.chain.from_iterable(
        __pycomp2iter__.map(
            lambda P: (M,) if True and C1 and ... and Cn else (),
            __pycomp2iter__.iter(S)))

with ``starmap`` in place of ``map`` when ``P`` is a tuple of names.
``__pycomp2iter__`` is the reserved ``RUNTIME_NAME`` bound to the
``pycomp2iter._runtime`` module. Every input element yields zero or one
output element.
"""

from __future__ import annotations

import ast
import copy

from pycomp2iter._constants import RUNTIME_NAME
from pycomp2iter.nodes import Comprehension, Condition, Pattern


def _runtime_attr(*path: str) -> ast.expr:
    node: ast.expr = ast.Name(id=RUNTIME_NAME, ctx=ast.Load())
    for attr in path:
        node = ast.Attribute(value=node, attr=attr, ctx=ast.Load())
    return node


def _call(func: ast.expr, *args: ast.expr) -> ast.Call:
    return ast.Call(func=func, args=list(args), keywords=[])


def into_iter(sequence: ast.expr) -> ast.Call:
    """``__pycomp2iter__.iter(sequence)``"""
    return _call(_runtime_attr("iter"), sequence)


def conjunction(conditions: tuple[Condition, ...]) -> ast.expr:
    """``True and C1 and ... and Cn``; plain ``True`` without conditions."""
    if not conditions:
        return ast.Constant(value=True)
    return ast.BoolOp(
        op=ast.And(),
        values=[ast.Constant(value=True)] + [copy.deepcopy(c.expression) for c in conditions],
    )


def then_some(admit: ast.expr, value: ast.expr) -> ast.IfExp:
    """``(value,) if admit else ()``: one element or none."""
    return ast.IfExp(
        test=admit,
        body=ast.Tuple(elts=[value], ctx=ast.Load()),
        orelse=ast.Tuple(elts=[], ctx=ast.Load()),
    )


def closure(pattern: Pattern, body: ast.expr) -> ast.Lambda:
    """``lambda names: body``, binding each pattern name per call."""
    return ast.Lambda(
        args=ast.arguments(
            posonlyargs=[],
            args=[ast.arg(arg=name) for name in pattern.names],
            kwonlyargs=[],
            kw_defaults=[],
            defaults=[],
        ),
        body=body,
    )


def flat_map(pattern: Pattern, function: ast.Lambda, iterator: ast.expr) -> ast.Call:
    """Apply ``function`` to every element and flatten the results."""
    if pattern.is_tuple:
        mapped = _call(_runtime_attr("starmap"), function, iterator)
    else:
        mapped = _call(_runtime_attr("map"), function, iterator)
    return _call(_runtime_attr("chain", "from_iterable"), mapped)


def render(comprehension: Comprehension) -> ast.expr:
    """Lower a comprehension into a fresh Python expression tree.

    The comprehension itself is left untouched; every embedded expression
    is copied into the result.
    """
    clause = comprehension.clause
    mapping = copy.deepcopy(comprehension.mapping.expression)
    body = then_some(conjunction(clause.conditions), mapping)
    return flat_map(
        clause.pattern,
        closure(clause.pattern, body),
        into_iter(copy.deepcopy(clause.sequence)),
    )


def to_source(expression: ast.expr) -> str:
    """Unparse a rendered expression to Python source text."""
    return ast.unparse(expression)
