"""Recursive-descent parser for source formula expressions."""

import logging
from typing import Optional

from ..config import settings
from .functions import PROPERTY_REFERENCE_FUNCTIONS
from .models import ArityError, FormulaSyntaxError, TranslationError
from .nodes import (
    Binary,
    Call,
    Conditional,
    Index,
    ListLiteral,
    Literal,
    Member,
    MethodCall,
    Name,
    Node,
    PropertyRef,
    Raw,
    RegexLiteral,
    Unary,
)
from .splitter import find_closing_bracket, split_arguments
from .syntax import IDENTIFIER_PATTERN, NUMBER_PATTERN, mask_literals, scan_regex, scan_string, unquote_string

logger = logging.getLogger(__name__)

COMPARISON_OPERATORS = ("==", "!=", ">=", "<=", ">", "<")
ADDITIVE_OPERATORS = ("+", "-")
MULTIPLICATIVE_OPERATORS = ("*", "/", "%")
MATCHING_BRACKETS = {"(": ")", "[": "]"}


class FormulaParser:
    """
    Parse one formula expression into a tree.

    Bracketed argument lists are cut out with ``find_closing_bracket``, split
    with ``split_arguments`` and each argument is handed to a nested parser one
    level deeper. Nesting beyond ``max_depth`` raises ``FormulaSyntaxError``.

    Precedence, loosest first: ``?:``, ``or``/``||``, ``and``/``&&``,
    comparisons, ``+ -``, ``* / %``, prefix ``- + ! not``, then member
    access, method calls and indexing.
    """

    def __init__(self, text: str, depth: int = 0, max_depth: Optional[int] = None):
        self.text = text
        self.pos = 0
        self.depth = depth
        self.max_depth = settings.max_nesting_depth if max_depth is None else max_depth

        if depth > self.max_depth:
            raise FormulaSyntaxError(f"Formula is nested deeper than {self.max_depth} levels")

    def parse(self) -> Node:
        """
        Parse the whole text as a single expression.

        Returns:
            Root node of the expression tree

        Raises:
            TranslationError: If the text is not a valid expression
        """
        self._skip_whitespace()
        if self._at_end():
            raise FormulaSyntaxError("Empty expression")

        node = self._parse_conditional()

        self._skip_whitespace()
        if not self._at_end():
            raise FormulaSyntaxError(
                f"Unexpected {self.text[self.pos]!r} at position {self.pos} in {self.text!r}"
            )
        return node

    # Expression levels

    def _parse_conditional(self) -> Node:
        condition = self._parse_or()
        if not self._match("?"):
            return condition

        then = self._parse_conditional()
        if not self._match(":"):
            raise FormulaSyntaxError(f"Expected ':' in conditional expression {self.text!r}")
        otherwise = self._parse_conditional()
        return Conditional(condition, then, otherwise)

    def _parse_or(self) -> Node:
        left = self._parse_and()
        while self._match("||") or self._match_keyword("or"):
            left = Binary("||", left, self._parse_and())
        return left

    def _parse_and(self) -> Node:
        left = self._parse_comparison()
        while self._match("&&") or self._match_keyword("and"):
            left = Binary("&&", left, self._parse_comparison())
        return left

    def _parse_comparison(self) -> Node:
        left = self._parse_additive()
        while True:
            op = self._match_any(COMPARISON_OPERATORS)
            if op is None:
                return left
            left = Binary(op, left, self._parse_additive())

    def _parse_additive(self) -> Node:
        left = self._parse_multiplicative()
        while True:
            op = self._match_any(ADDITIVE_OPERATORS)
            if op is None:
                return left
            left = Binary(op, left, self._parse_multiplicative())

    def _parse_multiplicative(self) -> Node:
        left = self._parse_unary()
        while True:
            self._skip_whitespace()
            if self._peek() == "^":
                raise TranslationError("Operator '^' has no equivalent in the target formula language")
            op = self._match_any(MULTIPLICATIVE_OPERATORS)
            if op is None:
                return left
            left = Binary(op, left, self._parse_unary())

    def _parse_unary(self) -> Node:
        self._skip_whitespace()
        char = self._peek()

        if char == "!":
            self.pos += 1
            return Unary("!", self._parse_unary())

        if char in ("-", "+"):
            self.pos += 1
            operand = self._parse_unary()
            return operand if char == "+" else Unary("-", operand)

        # "not(x)" is parsed as a call, "not x" as the prefix operator
        end = self._keyword_end("not")
        if end != -1 and not self.text[end:].lstrip().startswith("("):
            self.pos = end
            return Unary("!", self._parse_unary())

        return self._parse_postfix()

    def _parse_postfix(self) -> Node:
        node = self._parse_primary()

        while True:
            self._skip_whitespace()
            char = self._peek()

            if char == ".":
                self.pos += 1
                self._skip_whitespace()
                name = self._read_identifier()
                if name is None:
                    raise FormulaSyntaxError(f"Expected a member name after '.' in {self.text!r}")
                self._skip_whitespace()
                if self._peek() == "(":
                    node = MethodCall(node, name, self._parse_arguments())
                elif _is_note(node):
                    node = PropertyRef(name)
                else:
                    node = Member(node, name)

            elif char == "[":
                inner = self._take_bracketed()
                if not inner.strip():
                    raise FormulaSyntaxError(f"Empty index in {self.text!r}")
                index = self._parse_nested(inner)
                if _is_note(node) and isinstance(index, Literal) and index.kind == "string":
                    node = PropertyRef(index.value)
                else:
                    node = Index(node, index)

            else:
                return node

    def _parse_primary(self) -> Node:
        self._skip_whitespace()
        if self._at_end():
            raise FormulaSyntaxError(f"Unexpected end of expression in {self.text!r}")

        char = self._peek()

        if char == "(":
            inner = self._take_bracketed()
            if not inner.strip():
                raise FormulaSyntaxError(f"Empty parentheses in {self.text!r}")
            return self._parse_nested(inner)

        if char == "[":
            inner = self._take_bracketed()
            return ListLiteral(self._parse_argument_list(inner))

        if char in ("'", '"'):
            end = scan_string(self.text, self.pos)
            if end == -1:
                raise FormulaSyntaxError(f"Unterminated string literal in {self.text!r}")
            literal = self.text[self.pos:end]
            self.pos = end
            return Literal(literal, "string", unquote_string(literal))

        if char == "/":
            end = scan_regex(self.text, self.pos)
            if end == -1:
                raise FormulaSyntaxError(f"Unterminated regex literal in {self.text!r}")
            literal = self.text[self.pos:end]
            self.pos = end
            return RegexLiteral(literal)

        if self.text.startswith("{{", self.pos):
            close = self.text.find("}}", self.pos)
            if close == -1:
                raise FormulaSyntaxError(f"Unterminated placeholder in {self.text!r}")
            token = self.text[self.pos:close + 2]
            self.pos = close + 2
            return Raw(token)

        match = NUMBER_PATTERN.match(self.text, self.pos)
        if match:
            self.pos = match.end()
            return Literal(match.group(0), "number")

        name = self._read_identifier()
        if name is not None:
            if name in ("true", "false"):
                return Literal(name, "boolean")
            if name == "null":
                return Literal(name, "null")
            self._skip_whitespace()
            if self._peek() == "(":
                return self._make_call(name, self._parse_arguments())
            return Name(name)

        raise FormulaSyntaxError(f"Unexpected {char!r} at position {self.pos} in {self.text!r}")

    # Calls and bracketed groups

    def _make_call(self, name: str, args: list[Node]) -> Node:
        if name not in PROPERTY_REFERENCE_FUNCTIONS:
            return Call(name, args)

        if len(args) != 1 or not (isinstance(args[0], Literal) and args[0].kind == "string"):
            raise ArityError(f"{name}() expects a single quoted property name")
        if not args[0].value:
            raise FormulaSyntaxError(f"{name}() was given an empty property name")
        return PropertyRef(args[0].value)

    def _parse_arguments(self) -> list[Node]:
        return self._parse_argument_list(self._take_bracketed())

    def _parse_argument_list(self, inner: str) -> list[Node]:
        parts = split_arguments(inner)
        # split_arguments drops a trailing empty part, so "a," is checked here
        if any(not part for part in parts) or mask_literals(inner).rstrip().endswith(","):
            raise FormulaSyntaxError(f"Empty argument in ({inner})")
        return [self._parse_nested(part) for part in parts]

    def _parse_nested(self, text: str) -> Node:
        return FormulaParser(text, self.depth + 1, self.max_depth).parse()

    def _take_bracketed(self) -> str:
        """Consume a bracketed group and return the text between the brackets."""
        open_pos = self.pos
        opening = self.text[open_pos]
        close = find_closing_bracket(self.text, open_pos)

        if close == -1:
            raise FormulaSyntaxError(f"Unbalanced {opening!r} at position {open_pos} in {self.text!r}")
        if self.text[close] != MATCHING_BRACKETS[opening]:
            raise FormulaSyntaxError(
                f"Mismatched {self.text[close]!r} at position {close} in {self.text!r}"
            )

        self.pos = close + 1
        return self.text[open_pos + 1:close]

    # Scanning helpers

    def _at_end(self) -> bool:
        return self.pos >= len(self.text)

    def _peek(self) -> str:
        return self.text[self.pos:self.pos + 1]

    def _skip_whitespace(self):
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def _read_identifier(self) -> Optional[str]:
        match = IDENTIFIER_PATTERN.match(self.text, self.pos)
        if not match:
            return None
        self.pos = match.end()
        return match.group(0)

    def _match(self, token: str) -> bool:
        self._skip_whitespace()
        if self.text.startswith(token, self.pos):
            self.pos += len(token)
            return True
        return False

    def _match_any(self, tokens: tuple[str, ...]) -> Optional[str]:
        self._skip_whitespace()
        for token in tokens:
            if self.text.startswith(token, self.pos):
                self.pos += len(token)
                return token
        return None

    def _keyword_end(self, word: str) -> int:
        """Return the end of ``word`` if it starts at the cursor as a whole word, else -1."""
        self._skip_whitespace()
        match = IDENTIFIER_PATTERN.match(self.text, self.pos)
        if match and match.group(0) == word:
            return match.end()
        return -1

    def _match_keyword(self, word: str) -> bool:
        end = self._keyword_end(word)
        if end == -1:
            return False
        self.pos = end
        return True


def _is_note(node: Node) -> bool:
    return isinstance(node, Name) and node.name == "note"


def parse_formula(text: str, max_depth: Optional[int] = None) -> Node:
    """Parse a formula expression into a tree."""
    logger.debug(f"Parsing formula: {text}")
    return FormulaParser(text, max_depth=max_depth).parse()
