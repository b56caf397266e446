"""Python expression and binding-pattern sublanguage.

The comprehension parser never parses expressions itself: it asks a
``Sublanguage`` for the longest expression (or pattern) that starts at the
current token. ``PythonSublanguage`` answers with lark's interactive LALR
parser, feeding tokens one at a time until the parser rejects one, and
converts the parse tree into Python ``ast`` nodes.
"""

from __future__ import annotations

import ast
from abc import ABC, abstractmethod

from lark import Lark, Transformer, Tree, v_args
from lark.exceptions import UnexpectedToken

from pycomp2iter._grammar import GRAMMAR, START_RULES
from pycomp2iter._tokens import TokenStream

EXPRESSION_RULE = "test"
"""Full expression, including ``a if b else c``."""

GUARD_RULE = "or_test"
"""Expression without a bare conditional, as in Python comprehension clauses."""

PATTERN_RULE = "pattern"

_COMPARISON_OPERATORS: dict[str, type[ast.cmpop]] = {
    "<": ast.Lt,
    ">": ast.Gt,
    "==": ast.Eq,
    ">=": ast.GtE,
    "<=": ast.LtE,
    "!=": ast.NotEq,
    "in": ast.In,
    "not in": ast.NotIn,
    "is": ast.Is,
    "is not": ast.IsNot,
}

_CONSTANT_NAMES = {"True": True, "False": False, "None": None}

_parser = Lark(GRAMMAR, parser="lalr", lexer="basic", start=START_RULES)


def _binop(op: type[ast.operator]):
    def method(self, left, right):
        return ast.BinOp(left=left, op=op(), right=right)

    return method


def _unaryop(op: type[ast.unaryop]):
    def method(self, operand):
        return ast.UnaryOp(op=op(), operand=operand)

    return method


@v_args(inline=True)
class ToPythonAst(Transformer):
    """Converts sublanguage parse trees into Python ``ast`` nodes."""

    def ternary(self, body, test, orelse):
        return ast.IfExp(test=test, body=body, orelse=orelse)

    def or_test(self, *values):
        return ast.BoolOp(op=ast.Or(), values=list(values))

    def and_test(self, *values):
        return ast.BoolOp(op=ast.And(), values=list(values))

    not_op = _unaryop(ast.Not)

    def comparison(self, left, *rest):
        ops = list(rest[0::2])
        comparators = list(rest[1::2])
        return ast.Compare(left=left, ops=ops, comparators=comparators)

    def comp_op(self, *tokens):
        return _COMPARISON_OPERATORS[" ".join(str(t) for t in tokens)]()

    bit_or = _binop(ast.BitOr)
    bit_xor = _binop(ast.BitXor)
    bit_and = _binop(ast.BitAnd)
    lshift = _binop(ast.LShift)
    rshift = _binop(ast.RShift)
    add = _binop(ast.Add)
    sub = _binop(ast.Sub)
    mul = _binop(ast.Mult)
    div = _binop(ast.Div)
    floordiv = _binop(ast.FloorDiv)
    mod = _binop(ast.Mod)
    matmul = _binop(ast.MatMult)
    pow = _binop(ast.Pow)

    uadd = _unaryop(ast.UAdd)
    usub = _unaryop(ast.USub)
    invert = _unaryop(ast.Invert)

    def call(self, func, arguments):
        arguments = arguments or []
        args = [a for a in arguments if not isinstance(a, ast.keyword)]
        keywords = [a for a in arguments if isinstance(a, ast.keyword)]
        return ast.Call(func=func, args=args, keywords=keywords)

    def arguments(self, *items):
        return list(items)

    def keyword(self, name, value):
        return ast.keyword(arg=str(name), value=value)

    def getitem(self, value, index):
        return ast.Subscript(value=value, slice=index, ctx=ast.Load())

    def slice(self, lower, upper):
        return ast.Slice(lower=lower, upper=upper)

    def getattr(self, value, name):
        return ast.Attribute(value=value, attr=str(name), ctx=ast.Load())

    def name(self, token):
        if token.value in _CONSTANT_NAMES:
            return ast.Constant(value=_CONSTANT_NAMES[token.value])
        return ast.Name(id=token.value, ctx=ast.Load())

    def number(self, token):
        return ast.Constant(value=ast.literal_eval(token.value))

    def string(self, *tokens):
        return ast.Constant(value="".join(ast.literal_eval(t.value) for t in tokens))

    def bytes_literal(self, *tokens):
        return ast.Constant(value=b"".join(ast.literal_eval(t.value) for t in tokens))

    def tuple_display(self, *items):
        return ast.Tuple(elts=list(items), ctx=ast.Load())

    def list_display(self, *items):
        return ast.List(elts=list(items), ctx=ast.Load())

    def set_display(self, *items):
        return ast.Set(elts=list(items))

    def dict_item(self, key, value):
        return key, value

    def dict_display(self, *items):
        return ast.Dict(keys=[k for k, _ in items], values=[v for _, v in items])

    def single_pattern(self, name):
        return ast.Name(id=name.value, ctx=ast.Store())

    def tuple_pattern(self, *names):
        return ast.Tuple(
            elts=[ast.Name(id=n.value, ctx=ast.Store()) for n in names],
            ctx=ast.Store(),
        )


_to_python_ast = ToPythonAst()


def match_prefix(stream: TokenStream, rule: str) -> tuple[Tree, int] | None:
    """Find the longest prefix of the remaining tokens that parses as ``rule``.

    Returns the parse tree and the token position just after the prefix, or
    None when no prefix is a complete ``rule``. The stream is not moved.
    """
    interactive = _parser.parse_interactive(start=rule)
    position = stream.position
    longest: tuple[Tree, int] | None = None
    for token in stream.remaining():
        try:
            interactive.feed_token(token)
        except UnexpectedToken:
            break
        position += 1
        try:
            tree = interactive.copy().feed_eof(token)
        except UnexpectedToken:
            continue
        longest = (tree, position)
    return longest


class Sublanguage(ABC):
    """Grammar the comprehension parser delegates expressions and patterns to.

    Each method looks at the tokens from the stream's current position. On
    success it returns the node and advances the stream past it; on failure
    it returns None and leaves the stream where it was.
    """

    @abstractmethod
    def match_expression(self, stream: TokenStream, rule: str = EXPRESSION_RULE) -> ast.expr | None: ...

    @abstractmethod
    def match_pattern(self, stream: TokenStream) -> ast.Name | ast.Tuple | None: ...


class PythonSublanguage(Sublanguage):
    """Python expressions and flat identifier patterns, parsed with lark."""

    def match_expression(self, stream: TokenStream, rule: str = EXPRESSION_RULE) -> ast.expr | None:
        return self._match(stream, rule)

    def match_pattern(self, stream: TokenStream) -> ast.Name | ast.Tuple | None:
        return self._match(stream, PATTERN_RULE)

    def _match(self, stream: TokenStream, rule: str):
        found = match_prefix(stream, rule)
        if found is None:
            return None
        tree, end = found
        node = _to_python_ast.transform(tree)
        stream.seek(end)
        return node
