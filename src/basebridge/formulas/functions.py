"""Classification of source formula functions.

Every source function the translator understands is listed in
``FUNCTION_TABLE`` with a descriptor saying how the target language expresses
it. Functions with no faithful equivalent are listed in
``UNSUPPORTED_FUNCTIONS``; any expression calling one of them is rejected as a
whole. All tables are read-only.
"""

from types import MappingProxyType
from typing import Mapping, Optional

from .models import ConversionDescriptor, ConversionKind

GLOBAL = ConversionKind.GLOBAL
PROPERTY = ConversionKind.PROPERTY
METHOD = ConversionKind.METHOD
OPERATOR = ConversionKind.OPERATOR
UNSUPPORTED = ConversionKind.UNSUPPORTED


def _describe(kind: ConversionKind, target: Optional[str] = None, arg_count: Optional[int] = None):
    return ConversionDescriptor(kind=kind, target=target, arg_count=arg_count)


# Source function -> target form
FUNCTION_TABLE: Mapping[str, ConversionDescriptor] = MappingProxyType(
    {
        # Globals keep the call form
        "if": _describe(GLOBAL, "if", 3),
        "ifs": _describe(GLOBAL, "if"),
        "now": _describe(GLOBAL, "now", 0),
        "today": _describe(GLOBAL, "today", 0),
        "min": _describe(GLOBAL, "min"),
        "max": _describe(GLOBAL, "max"),
        "sum": _describe(GLOBAL, "sum"),
        "toNumber": _describe(GLOBAL, "number", 1),
        "parseDate": _describe(GLOBAL, "date", 1),
        # Single-argument functions that become member access
        "length": _describe(PROPERTY, "length", 1),
        "year": _describe(PROPERTY, "year", 1),
        "month": _describe(PROPERTY, "month", 1),
        "date": _describe(PROPERTY, "day", 1),  # day of month
        "hour": _describe(PROPERTY, "hour", 1),
        "minute": _describe(PROPERTY, "minute", 1),
        # Methods on the first argument
        "round": _describe(METHOD, "round"),
        "ceil": _describe(METHOD, "ceil"),
        "floor": _describe(METHOD, "floor"),
        "abs": _describe(METHOD, "abs"),
        "lower": _describe(METHOD, "lower"),
        "upper": _describe(METHOD, "upper"),
        "trim": _describe(METHOD, "trim"),
        "contains": _describe(METHOD, "contains"),
        "includes": _describe(METHOD, "contains"),
        "startsWith": _describe(METHOD, "startsWith"),
        "endsWith": _describe(METHOD, "endsWith"),
        "replace": _describe(METHOD, "replace"),
        "replaceAll": _describe(METHOD, "replace"),
        "repeat": _describe(METHOD, "repeat"),
        "join": _describe(METHOD, "join"),
        "split": _describe(METHOD, "split"),
        "slice": _describe(METHOD, "slice"),
        "substring": _describe(METHOD, "slice"),
        "sort": _describe(METHOD, "sort"),
        "reverse": _describe(METHOD, "reverse"),
        "unique": _describe(METHOD, "unique"),
        "flat": _describe(METHOD, "flat"),
        "formatDate": _describe(METHOD, "format"),
        "empty": _describe(METHOD, "isEmpty"),
        "format": _describe(METHOD, "toString"),
        "test": _describe(METHOD, "matches", 2),
        "map": _describe(METHOD, "map", 2),
        "filter": _describe(METHOD, "filter", 2),
        # Operators and indexing
        "add": _describe(OPERATOR, "+"),
        "subtract": _describe(OPERATOR, "-", 2),
        "multiply": _describe(OPERATOR, "*"),
        "divide": _describe(OPERATOR, "/", 2),
        "mod": _describe(OPERATOR, "%", 2),
        "equal": _describe(OPERATOR, "==", 2),
        "unequal": _describe(OPERATOR, "!=", 2),
        "larger": _describe(OPERATOR, ">", 2),
        "largerEq": _describe(OPERATOR, ">=", 2),
        "smaller": _describe(OPERATOR, "<", 2),
        "smallerEq": _describe(OPERATOR, "<=", 2),
        "and": _describe(OPERATOR, "&&"),
        "or": _describe(OPERATOR, "||"),
        "not": _describe(OPERATOR, "!", 1),
        "unaryMinus": _describe(OPERATOR, "-", 1),
        "first": _describe(OPERATOR, "[0]", 1),
        "last": _describe(OPERATOR, "[-1]", 1),
        "at": _describe(OPERATOR, "[]", 2),
        "dateAdd": _describe(OPERATOR, "+", 3),
        "dateSubtract": _describe(OPERATOR, "-", 3),
    }
)

# Functions with no faithful target equivalent
UNSUPPORTED_FUNCTIONS: frozenset[str] = frozenset(
    {
        # Variable binding
        "let",
        "lets",
        # Date arithmetic without matching primitives
        "dateBetween",
        "dateRange",
        "dateStart",
        "dateEnd",
        "timestamp",
        "fromTimestamp",
        "week",
        "day",
        # Statistical and math reducers
        "mean",
        "median",
        "sqrt",
        "cbrt",
        "exp",
        "ln",
        "log10",
        "log2",
        "pow",
        "sign",
        "pi",
        "e",
        # List searches and aggregates
        "find",
        "findIndex",
        "some",
        "every",
        "count",
        "concat",
        # People, pages and styling
        "id",
        "name",
        "email",
        "link",
        "style",
        "unstyle",
        "padStart",
        "padEnd",
        "match",
    }
)

# Bare source constants with no target equivalent
UNSUPPORTED_CONSTANTS: frozenset[str] = frozenset({"pi", "e"})

# Target globals that may appear in source text and are emitted unchanged
PASS_THROUGH_GLOBALS: frozenset[str] = frozenset({"number", "list", "duration", "sum", "if", "min", "max", "now", "today"})

# Constructors that reference a property by name
PROPERTY_REFERENCE_FUNCTIONS: frozenset[str] = frozenset({"ref", "prop"})

# dateAdd/dateSubtract unit -> target duration code
DURATION_UNITS: Mapping[str, str] = MappingProxyType(
    {
        "years": "y",
        "year": "y",
        "months": "M",
        "month": "M",
        "weeks": "w",
        "week": "w",
        "days": "d",
        "day": "d",
        "hours": "h",
        "hour": "h",
        "minutes": "m",
        "minute": "m",
        "seconds": "s",
        "second": "s",
        "milliseconds": "ms",
        "millisecond": "ms",
    }
)


def get_descriptor(name: str) -> ConversionDescriptor:
    """
    Look up how a source function is translated.

    Deny-listed and unknown names yield an ``UNSUPPORTED`` descriptor, except
    pass-through globals which keep their own name.
    """
    if name in UNSUPPORTED_FUNCTIONS:
        return ConversionDescriptor(kind=UNSUPPORTED)
    descriptor = FUNCTION_TABLE.get(name)
    if descriptor is not None:
        return descriptor
    if name in PASS_THROUGH_GLOBALS:
        return ConversionDescriptor(kind=GLOBAL, target=name)
    return ConversionDescriptor(kind=UNSUPPORTED)


def is_known_function(name: str) -> bool:
    """Check whether a call to ``name`` can be translated."""
    return get_descriptor(name).kind != UNSUPPORTED
