"""Tests for the formula parser."""

import pytest

from basebridge.formulas import FormulaSyntaxError, TranslationError, parse_formula
from basebridge.formulas.nodes import (
    Binary,
    Call,
    Conditional,
    Index,
    ListLiteral,
    Literal,
    Member,
    MethodCall,
    Name,
    PropertyRef,
    Raw,
    RegexLiteral,
    Unary,
    rename,
)


class TestParsePrimaries:
    """Test parsing of atoms."""

    def test_literals(self):
        """Test string, number and boolean literals."""
        assert parse_formula('"a, b"') == Literal('"a, b"', "string", "a, b")
        assert parse_formula("3.25") == Literal("3.25", "number")
        assert parse_formula("true") == Literal("true", "boolean")
        assert parse_formula("null") == Literal("null", "null")

    def test_property_reference(self):
        """Test the reference constructors and target forms."""
        assert parse_formula('prop("Due Date")') == PropertyRef("Due Date")
        assert parse_formula("ref('Cost')") == PropertyRef("Cost")
        assert parse_formula('note["Due Date"]') == PropertyRef("Due Date")
        assert parse_formula("note.Cost") == PropertyRef("Cost")

    def test_placeholder_is_opaque(self):
        """Test that placeholder tokens become raw atoms."""
        token = "{{source:block_property:abc:1}}"
        assert parse_formula(token) == Raw(token)

    def test_regex_literal(self):
        """Test regex literals at operand position."""
        assert parse_formula("/a+b/i") == RegexLiteral("/a+b/i")

    def test_list_literal(self):
        """Test list literals."""
        assert parse_formula("[1, 2]") == ListLiteral([Literal("1", "number"), Literal("2", "number")])


class TestParseStructure:
    """Test operators, calls and postfix chains."""

    def test_call_with_nested_arguments(self):
        """Test that arguments are parsed recursively."""
        node = parse_formula('contains(lower(prop("A")), "x")')

        assert node == Call(
            "contains",
            [Call("lower", [PropertyRef("A")]), Literal('"x"', "string", "x")],
        )

    def test_method_member_and_index_chain(self):
        """Test target-style postfix chains."""
        node = parse_formula("(x).round().length[0]")

        assert node == Index(Member(MethodCall(Name("x"), "round", []), "length"), Literal("0", "number"))

    def test_operator_precedence(self):
        """Test that multiplication binds tighter than addition."""
        node = parse_formula("a + b * c")

        assert node == Binary("+", Name("a"), Binary("*", Name("b"), Name("c")))

    def test_keyword_and_symbol_logic(self):
        """Test that keyword and symbol forms produce the same tree."""
        assert parse_formula("a and b or c") == parse_formula("a && b || c")

    def test_not_keyword_and_not_call(self):
        """Test the two spellings of not."""
        assert parse_formula("not a") == Unary("!", Name("a"))
        assert parse_formula("not(a)") == Call("not", [Name("a")])

    def test_ternary(self):
        """Test the conditional operator."""
        node = parse_formula("a ? 1 : 2")

        assert node == Conditional(Name("a"), Literal("1", "number"), Literal("2", "number"))

    def test_identifier_prefix_is_not_keyword(self):
        """Test that names starting with a keyword are plain names."""
        assert parse_formula("order") == Name("order")
        assert parse_formula("android and notable") == Binary("&&", Name("android"), Name("notable"))


class TestParseErrors:
    """Test malformed input."""

    @pytest.mark.parametrize(
        "text",
        ["", "(", "f(1", "a +", "[1, 2", "f(1]", "a b", "()", "x[]", '"abc', "a ? b", "f(a,)", "f(a, )", "[1,]"],
    )
    def test_malformed_input_raises(self, text):
        """Test that malformed input raises a syntax error."""
        with pytest.raises(FormulaSyntaxError):
            parse_formula(text)

    def test_power_operator(self):
        """Test that ^ is rejected."""
        with pytest.raises(TranslationError):
            parse_formula("2 ^ 3")

    def test_depth_limit(self):
        """Test that deep nesting is rejected."""
        with pytest.raises(FormulaSyntaxError):
            parse_formula("((((1))))", max_depth=2)


class TestRename:
    """Test identifier renaming on trees."""

    def test_renames_whole_names_only(self):
        """Test that only matching Name nodes change."""
        tree = parse_formula('current + currentValue + prop("current")')

        renamed = rename(tree, {"current": "value"})

        assert renamed == Binary(
            "+",
            Binary("+", Name("value"), Name("currentValue")),
            PropertyRef("current"),
        )
