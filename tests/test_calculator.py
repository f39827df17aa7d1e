"""Tests for the sandboxed arithmetic evaluator."""

import pytest

from knowledge_assistant.exceptions import CalculationError
from knowledge_assistant.orchestrator.calculator import evaluate, extract_expression, format_number


class TestEvaluate:
    """Tests for evaluate()."""

    @pytest.mark.parametrize(
        "expression,expected",
        [
            ("2 + 3 * 4", 14),
            ("(2 + 3) * 4", 20),
            ("-3 + 5", 2),
            ("10 / 4", 2.5),
            ("2 * -3", -6),
            ("1.5 + .5", 2),
            ("8 - 2 - 1", 5),
        ],
    )
    def test_arithmetic(self, expression, expected):
        assert evaluate(expression) == pytest.approx(expected)

    def test_division_by_zero(self):
        with pytest.raises(CalculationError, match="Division by zero"):
            evaluate("5 / 0")

    @pytest.mark.parametrize("expression", ["2 +", "2 ) 3", "(2 + 3", "* 4", "2 $ 3"])
    def test_syntax_errors(self, expression):
        with pytest.raises(CalculationError):
            evaluate(expression)

    def test_empty_and_oversized(self):
        with pytest.raises(CalculationError):
            evaluate("")
        with pytest.raises(CalculationError):
            evaluate("1 + " * 100 + "1")

    def test_nesting_limit(self):
        """Deeply nested input is rejected instead of exhausting the stack."""
        with pytest.raises(CalculationError, match="nested"):
            evaluate("(" * 60 + "1" + ")" * 60)

    def test_no_code_execution(self):
        """Names are not evaluated."""
        with pytest.raises(CalculationError):
            evaluate("__import__('os')")


class TestExtractExpression:
    """Tests for extract_expression()."""

    @pytest.mark.parametrize(
        "query,expected",
        [
            ("what is 2 + 3?", "2 + 3"),
            ("What is 12 times 4", "12 * 4"),
            ("calculate (2 + 3) * 4", "(2 + 3) * 4"),
            ("what is 7 divided by 2", "7 / 2"),
            ("how much is 3 x 4", "3 * 4"),
            ("10 minus 4", "10 - 4"),
        ],
    )
    def test_extracts(self, query, expected):
        assert extract_expression(query) == expected

    @pytest.mark.parametrize(
        "query",
        ["how old is the universe", "what happened in 1998", "plus ultra", "room 101"],
    )
    def test_no_expression(self, query):
        assert extract_expression(query) is None


class TestFormatNumber:
    """Tests for format_number()."""

    def test_integral(self):
        assert format_number(5.0) == "5"
        assert format_number(-6.0) == "-6"

    def test_fraction(self):
        assert format_number(2.5) == "2.5"
        assert format_number(1 / 3) == "0.3333333333"
