"""Tests for argument splitting and bracket matching."""

from basebridge.formulas.splitter import find_closing_bracket, is_wrapped, split_arguments


class TestSplitArguments:
    """Test top-level argument splitting."""

    def test_simple_arguments(self):
        """Test splitting plain comma-separated arguments."""
        assert split_arguments("a, b, c") == ["a", "b", "c"]

    def test_empty_input(self):
        """Test that empty or blank input yields no arguments."""
        assert split_arguments("") == []
        assert split_arguments("   ") == []

    def test_quoted_comma_and_nested_call(self):
        """Test that quoted commas and nested calls stay in one argument."""
        args = split_arguments('"a, b", g(1, 2)')

        assert len(args) == 2
        assert args[0] == '"a, b"'
        assert args[1] == "g(1, 2)"

    def test_nested_brackets(self):
        """Test that list literals and index expressions are not split."""
        args = split_arguments("[1, 2, 3], x[0], f([a, b], (c, d))")

        assert args == ["[1, 2, 3]", "x[0]", "f([a, b], (c, d))"]

    def test_escaped_quote_inside_literal(self):
        """Test that an escaped quote does not end the literal."""
        args = split_arguments(r'"say \"hi, there\"", 2')

        assert args == [r'"say \"hi, there\""', "2"]

    def test_single_quotes_and_mixed_quotes(self):
        """Test single-quoted literals containing double quotes and commas."""
        args = split_arguments("'a \"b\", c', d")

        assert args == ["'a \"b\", c'", "d"]

    def test_whitespace_is_trimmed(self):
        """Test that whitespace around arguments is removed."""
        assert split_arguments("  x ,\n y\t") == ["x", "y"]

    def test_interior_empty_argument_is_kept(self):
        """Test that an empty argument between commas is reported."""
        assert split_arguments("a,,b") == ["a", "", "b"]

    def test_trailing_comma_is_dropped(self):
        """Test that a trailing empty argument is not reported."""
        assert split_arguments("a, b,") == ["a", "b"]


class TestFindClosingBracket:
    """Test bracket matching."""

    def test_matches_outer_parenthesis(self):
        """Test finding the close of the outermost parenthesis."""
        text = "f(g(1), h(2)) + 1"
        assert find_closing_bracket(text, 1) == 12

    def test_ignores_brackets_in_strings(self):
        """Test that brackets inside quotes are skipped."""
        text = 'f(")", 1)'
        assert find_closing_bracket(text, 1) == 8

    def test_unbalanced_returns_minus_one(self):
        """Test that a missing close bracket is reported."""
        assert find_closing_bracket("f(1, 2", 1) == -1

    def test_is_wrapped(self):
        """Test detection of fully parenthesised text."""
        assert is_wrapped("(a + b)") is True
        assert is_wrapped("(a).round()") is False
        assert is_wrapped("a") is False
