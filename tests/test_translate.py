"""End-to-end translation and evaluation tests."""

import ast
import itertools
import types

import pytest

from pycomp2iter import (
    RUNTIME_NAME,
    MaxOutputLengthExceededError,
    PythonSublanguage,
    Translation,
    analyze,
    comp,
    compile_comprehension,
    evaluation_scope,
    translate,
    translate_tree,
)
from pycomp2iter import _runtime


class TestScenarios:
    def test_double(self):
        assert list(comp("x*2 for x in [1,2,3]")) == [2, 4, 6]

    def test_divide_pairs_skipping_zero(self, pairs):
        assert list(comp("x/y for x,y in pairs if y != 0", pairs=pairs)) == [2, 2]

    def test_empty_sequence(self):
        assert list(comp("x for x in [] ")) == []

    def test_two_conditions(self):
        assert list(comp("x for x in [1,2,3,4] if x>1 if x<4")) == [2, 3]


class TestSemantics:
    def test_zero_conditions_preserves_length(self):
        xs = list(range(17))
        assert len(list(comp("x % 3 for x in xs", xs=xs))) == len(xs)

    def test_at_most_one_output_per_input(self):
        xs = [[1, 2], [3], []]
        assert list(comp("x for x in xs", xs=xs)) == xs

    def test_empty_sequence_never_evaluates_body(self):
        assert list(comp("1 / 0 for x in [] if undefined_name")) == []

    def test_short_circuit_stops_at_first_false(self, recorder):
        first = recorder(lambda x: x != 2)
        second = recorder(lambda x: True)
        mapping = recorder(lambda x: x * 10)
        result = list(
            comp(
                "mapping(x) for x in [1, 2, 3] if first(x) if second(x)",
                first=first,
                second=second,
                mapping=mapping,
            )
        )
        assert result == [10, 30]
        assert first.calls == [1, 2, 3]
        assert second.calls == [1, 3]
        assert mapping.calls == [1, 3]

    def test_later_conditions_may_rely_on_earlier(self):
        xs = [0, 2, None, 4]
        assert list(comp("10 // x for x in xs if x is not None if x != 0", xs=xs)) == [5, 2]

    def test_lazy(self, recorder):
        mapping = recorder(lambda x: x)
        it = comp("mapping(x) for x in [1, 2, 3]", mapping=mapping)
        assert mapping.calls == []
        assert next(it) == 1
        assert mapping.calls == [1]

    def test_infinite_source(self):
        it = comp("x * x for x in count() if x % 2", count=itertools.count)
        assert list(itertools.islice(it, 3)) == [1, 9, 25]

    def test_each_element_sees_its_own_binding(self):
        rows = [(1, "a"), (2, "b")]
        assert list(comp("(n, s) for n, s in rows", rows=rows)) == rows

    def test_pattern_names_shadow_namespace(self):
        assert list(comp("x for x in [1, 2]", x=99)) == [1, 2]

    def test_namespace_and_keywords(self):
        it = comp("x + k for x in xs", {"xs": [1, 2], "k": 1}, k=10)
        assert list(it) == [11, 12]

    def test_mapping_uses_outer_names(self):
        assert list(comp("x * factor for x in range(3)", factor=3)) == [0, 3, 6]

    def test_builtins_available(self):
        assert list(comp("len(w) for w in words if w", words=["ab", "", "c"])) == [2, 1]

    def test_string_and_dict_literals(self):
        it = comp("d[k] for k in 'ab' if k in d", d={"a": 1, "c": 3})
        assert list(it) == [1]

    def test_result_is_iterator(self):
        it = comp("x for x in [1]")
        assert iter(it) is it

    def test_python_literal_forms(self):
        it = comp("(x & 0xff, 1_0, r'\\d', b'z') for x in [0x1ff]")
        assert list(it) == [(255, 10, "\\d", b"z")]


class TestTranslateApi:
    def test_translate_returns_source(self):
        assert translate("x for x in xs") == (
            "__pycomp2iter__.chain.from_iterable(__pycomp2iter__.map("
            "lambda x: (x,) if True else (), __pycomp2iter__.iter(xs)))"
        )

    def test_translated_source_evaluates(self):
        source = translate("x + 1 for x in xs if x")
        assert list(eval(source, evaluation_scope(xs=[0, 1, 2]))) == [2, 3]

    def test_translate_tree(self):
        translation = translate_tree("x for x in xs")
        assert isinstance(translation, Translation)
        assert isinstance(translation.tree, ast.Expression)
        assert ast.unparse(translation.tree.body) == translation.source

    def test_compile(self):
        code = compile_comprehension("x for x in xs")
        assert isinstance(code, types.CodeType)
        assert code.co_filename == "<comprehension>"

    def test_max_output_length(self):
        with pytest.raises(MaxOutputLengthExceededError):
            translate("x for x in xs", max_output_length=10)


class TestHelperNamesAreUserNames:
    def test_map_as_user_name(self):
        it = comp("map[k] for k in keys", map={"a": 1, "b": 2}, keys=["a", "b"])
        assert list(it) == [1, 2]

    def test_iter_as_sequence_name(self):
        assert list(comp("x for x in iter", iter=[1, 2])) == [1, 2]

    def test_itertools_as_sequence_name(self):
        assert list(comp("x for x in itertools", itertools=[1, 2])) == [1, 2]

    def test_starmap_and_chain_as_user_names(self):
        it = comp("chain + a for a, starmap in pairs", {"pairs": [(1, 2)], "chain": 10})
        assert list(it) == [11]

    def test_helper_names_in_namespace_dict(self):
        it = comp("x for x in xs", {"map": None, "iter": None, "xs": [3]})
        assert list(it) == [3]


class TestEvaluationScope:
    def test_runtime_bound(self):
        assert evaluation_scope()[RUNTIME_NAME] is _runtime

    def test_names_override_namespace(self):
        scope = evaluation_scope({"a": 1, "b": 2}, b=3)
        assert scope["a"] == 1
        assert scope["b"] == 3

    def test_runtime_bound_last(self):
        scope = evaluation_scope({RUNTIME_NAME: None}, **{RUNTIME_NAME: None})
        assert scope[RUNTIME_NAME] is _runtime

    def test_namespace_not_modified(self):
        namespace = {"xs": [1]}
        evaluation_scope(namespace)
        assert namespace == {"xs": [1]}


class RecordingSublanguage(PythonSublanguage):
    def __init__(self):
        self.rules = []

    def match_expression(self, stream, rule="test"):
        self.rules.append(rule)
        return super().match_expression(stream, rule)


class TestSublanguagePassThrough:
    @pytest.mark.parametrize("translate_fn", [translate, translate_tree, compile_comprehension, analyze])
    def test_keyword_argument(self, translate_fn):
        sublanguage = RecordingSublanguage()
        translate_fn("x for x in xs if x", sublanguage=sublanguage)
        assert sublanguage.rules == ["test", "or_test", "or_test"]

    def test_comp(self):
        sublanguage = RecordingSublanguage()
        assert list(comp("x for x in [1, 2]", None, sublanguage)) == [1, 2]
        assert sublanguage.rules == ["test", "or_test"]

    def test_comp_keyword_named_sublanguage_is_a_name(self):
        assert list(comp("sublanguage for x in [1]", sublanguage=5)) == [5]
