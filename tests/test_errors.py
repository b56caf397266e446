"""Syntax error tests: expected construct and position."""

import pytest

from pycomp2iter import ComprehensionSyntaxError, TranslationError, comp, parse, translate


def _syntax_error(text):
    with pytest.raises(ComprehensionSyntaxError) as exc_info:
        parse(text)
    return exc_info.value


class TestRequiredParts:
    def test_missing_in(self):
        err = _syntax_error("x*2 for x [1,2,3]")
        assert err.rule == "generator_clause"
        assert err.expected == "'in'"
        assert err.position == 5
        assert err.line == 1
        assert err.column == 11
        assert err.found == "'['"

    def test_missing_for(self):
        err = _syntax_error("x*2 x in [1,2,3]")
        assert err.rule == "generator_clause"
        assert err.expected == "'for'"
        assert err.position == 3

    def test_missing_sequence(self):
        err = _syntax_error("x for x in")
        assert err.rule == "generator_clause"
        assert err.expected == "expression"
        assert err.position == 4
        assert err.found == "end of input"

    def test_missing_mapping(self):
        err = _syntax_error("for x in xs")
        assert err.rule == "mapping"
        assert err.expected == "expression"
        assert err.position == 0

    def test_missing_pattern(self):
        err = _syntax_error("x for in xs")
        assert err.rule == "pattern"
        assert err.expected == "pattern"
        assert err.position == 2

    def test_empty_input(self):
        err = _syntax_error("")
        assert err.rule == "mapping"
        assert err.position == 0

    def test_mapping_only(self):
        err = _syntax_error("x * 2")
        assert err.expected == "'for'"
        assert err.position == 3

    def test_bare_tuple_mapping(self):
        err = _syntax_error("x, y for x, y in pairs")
        assert err.expected == "'for'"
        assert err.position == 1


class TestRejectedShapes:
    def test_duplicate_pattern_names(self):
        err = _syntax_error("x for x, x in xs")
        assert err.rule == "pattern"
        assert err.expected == "distinct names"
        assert err.position == 2

    def test_nested_destructuring(self):
        err = _syntax_error("x for (a, b), c in xs")
        assert err.expected == "'in'"
        assert err.position == 7

    def test_chained_for_clause(self):
        err = _syntax_error("x for y in ys for x in y")
        assert err.rule == "comprehension"
        assert err.expected == "end of input"
        assert err.position == 5

    def test_dangling_if(self):
        err = _syntax_error("x for x in xs if")
        assert err.rule == "comprehension"
        assert err.position == 5

    def test_else_after_guard(self):
        err = _syntax_error("x for x in xs if a else b")
        assert err.rule == "comprehension"
        assert err.position == 7

    def test_failed_guard_rolls_back_to_if(self):
        err = _syntax_error("x for x in xs if a if )")
        assert err.rule == "comprehension"
        assert err.position == 7
        assert err.found == "'if'"

    def test_guard_keeps_longest_complete_expression(self):
        err = _syntax_error("x for x in xs if a if b +")
        assert err.rule == "comprehension"
        assert err.position == 9


class TestErrorSurface:
    def test_is_translation_error(self):
        with pytest.raises(TranslationError):
            translate("x for x [1]")

    def test_comp_raises_before_evaluation(self):
        with pytest.raises(ComprehensionSyntaxError):
            comp("x for x [1]")

    def test_user_message_hides_token_text(self):
        err = _syntax_error("x for x secret")
        assert "expected 'in'" in str(err)
        assert "secret" not in str(err)
        assert "secret" in err.internal()

    def test_message_has_location(self):
        err = _syntax_error("x for x [1]")
        assert "token 3" in str(err)
        assert "line 1, column 9" in str(err)
