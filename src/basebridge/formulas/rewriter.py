"""Translation of source formulas into target formula syntax."""

import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from ..config import settings
from .checker import find_blocking_function
from .functions import DURATION_UNITS, UNSUPPORTED_CONSTANTS, get_descriptor
from .models import (
    ArityError,
    ConversionDescriptor,
    ConversionKind,
    PropertyDefinition,
    TranslationError,
    TranslationResult,
    UnsupportedFunctionError,
)
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
    rename,
)
from .parser import FormulaParser
from .splitter import is_wrapped
from .syntax import TARGET_NAMESPACES, format_property_reference, resolve_placeholders

logger = logging.getLogger(__name__)

# Implicit iteration variables of map/filter in each language
SOURCE_ITEM_NAME = "current"
TARGET_ITEM_NAME = "value"
INDEX_NAME = "index"
ITERATION_METHODS = ("map", "filter")

SPECIAL_FORMS = ("ifs", "test", "dateAdd", "dateSubtract", "map", "filter")


def build_property_names(properties: Optional[Mapping[str, Any]]) -> dict[str, str]:
    """
    Build the property id -> display name lookup used for placeholders.

    Schema entries may be ``PropertyDefinition`` objects or raw dicts as
    returned by the note-database API. Both the entry's ``id`` and its key in
    the schema resolve to the entry's name.
    """
    names: dict[str, str] = {}
    if not properties:
        return names

    for key, entry in properties.items():
        definition = entry if isinstance(entry, PropertyDefinition) else PropertyDefinition.model_validate(entry)
        name = definition.name or key
        names[key] = name
        if definition.id:
            names[definition.id] = name
    return names


class FormulaRewriter:
    """
    Translates source formulas into target formula syntax.

    Translation is whole-or-nothing: the expression is gated by the
    convertibility checker, parsed into a tree and emitted in one pass.
    Any problem along the way yields a failed ``TranslationResult`` with no
    formula text.
    """

    def __init__(
        self,
        properties: Optional[Mapping[str, Any]] = None,
        max_depth: Optional[int] = None,
        max_length: Optional[int] = None,
    ):
        self.property_names = build_property_names(properties)
        self.max_depth = settings.max_nesting_depth if max_depth is None else max_depth
        self.max_length = settings.max_formula_length if max_length is None else max_length
        self._iteration_depth = 0

    def rewrite(self, expression: str) -> TranslationResult:
        """
        Translate one formula expression.

        Args:
            expression: Source formula text

        Returns:
            TranslationResult with either the target formula or the reason
            translation failed
        """
        if not isinstance(expression, str) or not expression.strip():
            return TranslationResult(success=False, original=str(expression or ""), error="Formula expression is empty")

        if len(expression) > self.max_length:
            return self._failure(
                expression, f"Formula is longer than {self.max_length} characters"
            )

        resolved, warnings = resolve_placeholders(expression, self.property_names)

        blocking = find_blocking_function(resolved)
        if blocking is not None:
            return self._failure(expression, f"Unsupported function: {blocking}", warnings)

        try:
            tree = FormulaParser(resolved, max_depth=self.max_depth).parse()
            formula = self.emit(tree)
        except TranslationError as e:
            return self._failure(expression, str(e), warnings)
        except RecursionError:
            return self._failure(expression, "Formula is too deeply nested", warnings)

        logger.debug(f"Translated formula {expression!r} -> {formula!r}")
        return TranslationResult(success=True, formula=formula, original=expression, warnings=warnings)

    def _failure(self, expression: str, reason: str, warnings: Optional[list[str]] = None) -> TranslationResult:
        logger.debug(f"Could not translate formula {expression!r}: {reason}")
        return TranslationResult(success=False, original=expression, error=reason, warnings=warnings or [])

    # Emission

    def emit(self, node: Node) -> str:
        """Render an expression tree in target syntax."""
        if isinstance(node, Literal):
            return node.text
        if isinstance(node, (Raw, RegexLiteral)):
            return node.text
        if isinstance(node, Name):
            return self._emit_name(node.name)
        if isinstance(node, PropertyRef):
            return format_property_reference(node.name)
        if isinstance(node, Call):
            return self._emit_call(node)
        if isinstance(node, MethodCall):
            receiver = self._receiver(node.receiver)
            if node.name in ITERATION_METHODS:
                body = [rename(arg, {SOURCE_ITEM_NAME: TARGET_ITEM_NAME}) for arg in node.args]
                return f"{receiver}.{node.name}({self._emit_in_iteration(body)})"
            return f"{receiver}.{node.name}({self._emit_args(node.args)})"
        if isinstance(node, Member):
            return f"{self._receiver(node.receiver)}.{node.name}"
        if isinstance(node, Index):
            return f"{self._receiver(node.receiver)}[{self.emit(node.index)}]"
        if isinstance(node, ListLiteral):
            return f"[{self._emit_args(node.items)}]"
        if isinstance(node, Unary):
            if node.op == "-":
                return f"(-{self.emit(node.operand)})"
            return f"!{self._receiver(node.operand)}"
        if isinstance(node, Binary):
            return f"({self.emit(node.left)} {node.op} {self.emit(node.right)})"
        if isinstance(node, Conditional):
            return f"if({self.emit(node.condition)}, {self.emit(node.then)}, {self.emit(node.otherwise)})"
        raise TranslationError(f"Cannot translate expression node {node!r}")

    def _emit_args(self, args: list[Node]) -> str:
        return ", ".join(self.emit(arg) for arg in args)

    def _emit_in_iteration(self, args: list[Node]) -> str:
        self._iteration_depth += 1
        try:
            return self._emit_args(args)
        finally:
            self._iteration_depth -= 1

    def _emit_name(self, name: str) -> str:
        if name in UNSUPPORTED_CONSTANTS:
            raise TranslationError(f"Constant {name} has no equivalent in the target formula language")
        # map/filter bodies have already been renamed to the target variable
        if name == SOURCE_ITEM_NAME:
            raise TranslationError(f"{name} is only defined inside map() and filter()")
        if name == INDEX_NAME and not self._iteration_depth:
            raise TranslationError(f"{name} is only defined inside map() and filter()")
        return name

    def _receiver(self, node: Node) -> str:
        """Render a node used before '.', '[' or after '!'."""
        text = self.emit(node)
        if text in TARGET_NAMESPACES or isinstance(node, RegexLiteral) or is_wrapped(text):
            return text
        return f"({text})"

    def _emit_call(self, node: Call) -> str:
        name = node.name
        args = node.args
        descriptor = get_descriptor(name)

        if descriptor.kind == ConversionKind.UNSUPPORTED:
            raise UnsupportedFunctionError(name)

        if name in SPECIAL_FORMS:
            _check_arity(name, descriptor, args)
            return getattr(self, f"_emit_{name.lower()}")(args)

        if descriptor.kind == ConversionKind.GLOBAL:
            _check_arity(name, descriptor, args)
            return f"{descriptor.target}({self._emit_args(args)})"

        if descriptor.kind == ConversionKind.PROPERTY:
            _check_arity(name, descriptor, args)
            return f"{self._receiver(args[0])}.{descriptor.target}"

        if descriptor.kind == ConversionKind.METHOD:
            _check_arity(name, descriptor, args, minimum=1)
            return f"{self._receiver(args[0])}.{descriptor.target}({self._emit_args(args[1:])})"

        return self._emit_operator(name, descriptor, args)

    def _emit_operator(self, name: str, descriptor: ConversionDescriptor, args: list[Node]) -> str:
        symbol = descriptor.target

        if descriptor.arg_count is None:
            # Variadic: add, multiply, and, or
            _check_arity(name, descriptor, args, minimum=2)
            if name == "add" and len(args) > 2:
                return f"sum({self._emit_args(args)})"
            return "(" + f" {symbol} ".join(self.emit(arg) for arg in args) + ")"

        _check_arity(name, descriptor, args)

        if symbol == "!":
            return f"!{self._receiver(args[0])}"
        if symbol.startswith("["):
            index = symbol[1:-1] or self.emit(args[1])
            return f"{self._receiver(args[0])}[{index}]"
        if descriptor.arg_count == 1:
            return f"({symbol}{self.emit(args[0])})"
        return f"({self.emit(args[0])} {symbol} {self.emit(args[1])})"

    # Special forms

    def _emit_ifs(self, args: list[Node]) -> str:
        if len(args) < 3 or len(args) % 2 == 0:
            raise ArityError(f"ifs() expects condition/value pairs and a fallback, got {len(args)} arguments")
        result = self.emit(args[-1])
        for position in range(len(args) - 3, -1, -2):
            result = f"if({self.emit(args[position])}, {self.emit(args[position + 1])}, {result})"
        return result

    def _emit_test(self, args: list[Node]) -> str:
        subject, pattern = args
        if not (isinstance(pattern, Literal) and pattern.kind == "string"):
            raise TranslationError("test() needs a quoted pattern to build a regex literal")
        source = _escape_regex_delimiters(pattern.value)
        return f"/{source}/.matches({self.emit(subject)})"

    def _emit_dateadd(self, args: list[Node]) -> str:
        return self._emit_date_arithmetic("+", args)

    def _emit_datesubtract(self, args: list[Node]) -> str:
        return self._emit_date_arithmetic("-", args)

    def _emit_date_arithmetic(self, op: str, args: list[Node]) -> str:
        date, amount, unit = args
        if not (isinstance(unit, Literal) and unit.kind == "string"):
            raise TranslationError("Date arithmetic needs a quoted unit")

        code = DURATION_UNITS.get(unit.value.strip().lower())
        if code is None:
            raise TranslationError(f"Unsupported date unit: {unit.value}")

        number = _number_text(amount)
        if number is not None:
            duration = f'"{number}{code}"'
        else:
            duration = f'({self.emit(amount)} + "{code}")'
        return f"({self.emit(date)} {op} {duration})"

    def _emit_map(self, args: list[Node]) -> str:
        return self._emit_iteration("map", args)

    def _emit_filter(self, args: list[Node]) -> str:
        return self._emit_iteration("filter", args)

    def _emit_iteration(self, method: str, args: list[Node]) -> str:
        items, body = args
        body = rename(body, {SOURCE_ITEM_NAME: TARGET_ITEM_NAME})
        return f"{self._receiver(items)}.{method}({self._emit_in_iteration([body])})"


def _check_arity(name: str, descriptor: ConversionDescriptor, args: list[Node], minimum: int = 0):
    expected = descriptor.arg_count
    if expected is not None and len(args) != expected:
        raise ArityError(f"{name}() expects {expected} argument(s), got {len(args)}")
    if len(args) < minimum:
        raise ArityError(f"{name}() expects at least {minimum} argument(s), got {len(args)}")


def _number_text(node: Node) -> Optional[str]:
    if isinstance(node, Literal) and node.kind == "number":
        return node.text
    if isinstance(node, Unary) and node.op == "-" and isinstance(node.operand, Literal) and node.operand.kind == "number":
        return f"-{node.operand.text}"
    return None


def _escape_regex_delimiters(pattern: str) -> str:
    escaped = []
    previous = ""
    for char in pattern:
        if char == "/" and previous != "\\":
            escaped.append("\\/")
        else:
            escaped.append(char)
        previous = char
    return "".join(escaped)


def translate_formula(
    expression: str, properties: Optional[Mapping[str, Any]] = None
) -> TranslationResult:
    """
    Translate a source formula, reporting success or the failure reason.

    Args:
        expression: Source formula text, possibly containing property
            placeholder tokens
        properties: Optional property schema used to resolve placeholders

    Returns:
        TranslationResult; ``formula`` is None whenever ``success`` is False
    """
    try:
        rewriter = FormulaRewriter(properties)
    except ValidationError as e:
        logger.warning(f"Invalid property schema: {e.error_count()} error(s)")
        return TranslationResult(
            success=False, original=str(expression or ""), error=f"Invalid property schema: {e}"
        )
    return rewriter.rewrite(expression)


def translate(expression: str, properties: Optional[Mapping[str, Any]] = None) -> Optional[str]:
    """Translate a source formula, returning None when it cannot be translated."""
    return translate_formula(expression, properties).formula
