"""Data models for formula translation."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ConversionKind(str, Enum):
    """How a source function is expressed in the target formula language."""

    GLOBAL = "global"  # name(args), possibly renamed
    PROPERTY = "property"  # (x).member
    METHOD = "method"  # (x).member(rest)
    OPERATOR = "operator"  # infix, prefix or indexing form
    UNSUPPORTED = "unsupported"  # no faithful equivalent


class ConversionDescriptor(BaseModel):
    """Classification of one source function name."""

    model_config = ConfigDict(frozen=True)

    kind: ConversionKind
    target: Optional[str] = None  # Renamed function, member or operator symbol
    arg_count: Optional[int] = None  # Exact argument count, None when variadic


class TranslationResult(BaseModel):
    """Outcome of translating one formula expression.

    ``formula`` is set only when ``success`` is true; a failed translation
    never carries partially rewritten text.
    """

    success: bool
    formula: Optional[str] = None
    original: str
    error: Optional[str] = None
    warnings: list[str] = Field(default_factory=list)


class FormulaConfig(BaseModel):
    """Formula configuration of a computed property."""

    expression: str = ""


class RollupConfig(BaseModel):
    """Rollup configuration of an aggregate property."""

    relation_property_name: Optional[str] = None
    relation_property_key: Optional[str] = None
    relation_property_id: Optional[str] = None
    rollup_property_name: Optional[str] = None
    rollup_property_key: Optional[str] = None
    rollup_property_id: Optional[str] = None
    function: str = "show_original"

    @property
    def relation(self) -> Optional[str]:
        """Relation property to aggregate over, when named directly."""
        return self.relation_property_name or self.relation_property_key

    @property
    def target(self) -> Optional[str]:
        """Property read from each related record, when named directly."""
        return self.rollup_property_name or self.rollup_property_key


class PropertyDefinition(BaseModel):
    """One entry of a database property schema."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: str = ""
    type: str = "rich_text"
    formula: Optional[FormulaConfig] = None
    rollup: Optional[RollupConfig] = None


class TranslationError(Exception):
    """Exception raised when a formula cannot be translated faithfully."""

    pass


class FormulaSyntaxError(TranslationError):
    """Exception raised when a formula cannot be parsed."""

    pass


class UnsupportedFunctionError(TranslationError):
    """Exception raised when a formula calls a function with no target equivalent."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unsupported function: {name}")


class ArityError(TranslationError):
    """Exception raised when a call has the wrong number of arguments."""

    pass
