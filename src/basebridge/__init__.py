"""basebridge - translate note-database formulas and rollups into base-file formulas."""

from .formulas import (
    TranslationResult,
    compile_rollup,
    compile_rollup_config,
    is_convertible,
    split_arguments,
    translate,
    translate_formula,
)
from .properties import FormulaStrategy, PropertyMapping, map_database_properties

__version__ = "0.1.0"

__all__ = [
    "TranslationResult",
    "compile_rollup",
    "compile_rollup_config",
    "is_convertible",
    "split_arguments",
    "translate",
    "translate_formula",
    "FormulaStrategy",
    "PropertyMapping",
    "map_database_properties",
]
