"""Formula translation between note-database formula languages.

This module rewrites source computed-property formulas (``ref("Price") *
2``) into target formula syntax (``(Price * 2)``) and compiles rollup
aggregates into equivalent target formulas.
"""

from .models import (
    ArityError,
    ConversionDescriptor,
    ConversionKind,
    FormulaConfig,
    FormulaSyntaxError,
    PropertyDefinition,
    RollupConfig,
    TranslationError,
    TranslationResult,
    UnsupportedFunctionError,
)
from .splitter import split_arguments, find_closing_bracket
from .functions import (
    FUNCTION_TABLE,
    UNSUPPORTED_FUNCTIONS,
    PASS_THROUGH_GLOBALS,
    DURATION_UNITS,
    get_descriptor,
)
from .checker import is_convertible, find_blocking_function
from .parser import FormulaParser, parse_formula
from .rewriter import FormulaRewriter, translate, translate_formula
from .rollup import ROLLUP_FUNCTIONS, compile_rollup, compile_rollup_config

__all__ = [
    "ArityError",
    "ConversionDescriptor",
    "ConversionKind",
    "FormulaConfig",
    "FormulaSyntaxError",
    "PropertyDefinition",
    "RollupConfig",
    "TranslationError",
    "TranslationResult",
    "UnsupportedFunctionError",
    "split_arguments",
    "find_closing_bracket",
    "FUNCTION_TABLE",
    "UNSUPPORTED_FUNCTIONS",
    "PASS_THROUGH_GLOBALS",
    "DURATION_UNITS",
    "get_descriptor",
    "is_convertible",
    "find_blocking_function",
    "FormulaParser",
    "parse_formula",
    "FormulaRewriter",
    "translate",
    "translate_formula",
    "ROLLUP_FUNCTIONS",
    "compile_rollup",
    "compile_rollup_config",
]
