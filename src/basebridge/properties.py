"""Mapping of database property schemas to base-file property entries."""

import logging
from enum import Enum
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, Field

from .config import settings
from .formulas import FormulaRewriter, PropertyDefinition, compile_rollup_config

logger = logging.getLogger(__name__)

FORMULA_KEY_PREFIX = "formula."


class FormulaStrategy(str, Enum):
    """What to do with formula properties that cannot be translated."""

    STATIC = "static"  # Never translate; keep the pre-computed values
    HYBRID = "hybrid"  # Translate, fall back to pre-computed values
    ORIGINAL = "original"  # Translate, fall back to the source expression
    OMIT = "omit"  # Translate, drop the property on failure


class MappedProperty(BaseModel):
    """One property entry for the base file."""

    key: str
    display_name: str
    type: str
    formula: Optional[str] = None
    is_relation: bool = False
    relation_config: Optional[dict[str, Any]] = None


class PropertyMapping(BaseModel):
    """Result of mapping a database property schema."""

    formulas: list[MappedProperty] = Field(default_factory=list)
    regular_properties: list[MappedProperty] = Field(default_factory=list)
    title_property_name: Optional[str] = None
    skipped: list[str] = Field(default_factory=list)  # Display names of dropped properties
    warnings: list[str] = Field(default_factory=list)


def sanitize_property_key(key: str) -> str:
    """Property keys are used as-is; the base file quotes them where needed."""
    return key


class PropertyMapper:
    """Maps a database property schema to formula and regular entries."""

    def __init__(self, strategy: Optional[Union[FormulaStrategy, str]] = None):
        self.strategy = FormulaStrategy(strategy or settings.formula_strategy)

    def map_properties(self, properties: Mapping[str, Any]) -> PropertyMapping:
        """
        Map every property of a schema.

        Args:
            properties: Property key -> PropertyDefinition or raw schema dict

        Returns:
            PropertyMapping with formula entries keyed ``formula.<key>`` and
            regular entries keyed by the property key
        """
        definitions = {
            key: entry if isinstance(entry, PropertyDefinition) else PropertyDefinition.model_validate(entry)
            for key, entry in properties.items()
        }
        rewriter = FormulaRewriter(definitions)
        mapping = PropertyMapping()

        for key, definition in definitions.items():
            name = definition.name or key
            sanitized = sanitize_property_key(key)

            if definition.type == "title":
                mapping.title_property_name = name

            elif definition.type == "formula":
                self._map_formula(mapping, rewriter, sanitized, name, definition)

            elif definition.type == "rollup":
                formula = compile_rollup_config(definition.rollup, rewriter.property_names)
                if formula:
                    mapping.formulas.append(
                        MappedProperty(key=FORMULA_KEY_PREFIX + sanitized, display_name=name, type="rollup", formula=formula)
                    )
                else:
                    message = f"Failed to convert rollup property {name!r} to a formula"
                    logger.warning(message)
                    mapping.warnings.append(message)
                    mapping.skipped.append(name)

            elif definition.type == "relation":
                mapping.regular_properties.append(
                    MappedProperty(
                        key=sanitized,
                        display_name=name,
                        type="relation",
                        is_relation=True,
                        relation_config=getattr(definition, "relation", None),
                    )
                )

            elif definition.type == "button":
                # Buttons are UI elements, not data
                mapping.skipped.append(name)

            else:
                mapping.regular_properties.append(MappedProperty(key=sanitized, display_name=name, type=definition.type))

        return mapping

    def _map_formula(
        self,
        mapping: PropertyMapping,
        rewriter: FormulaRewriter,
        key: str,
        name: str,
        definition: PropertyDefinition,
    ):
        expression = definition.formula.expression if definition.formula else ""

        if self.strategy == FormulaStrategy.STATIC:
            mapping.regular_properties.append(MappedProperty(key=key, display_name=name, type="formula"))
            return

        result = rewriter.rewrite(expression)
        mapping.warnings.extend(result.warnings)
        if result.success:
            mapping.formulas.append(
                MappedProperty(key=FORMULA_KEY_PREFIX + key, display_name=name, type="formula", formula=result.formula)
            )
            return

        message = f"Formula {name!r} cannot be converted ({result.error}); original: {expression}"
        logger.warning(message)
        mapping.warnings.append(message)

        if self.strategy == FormulaStrategy.HYBRID:
            mapping.regular_properties.append(MappedProperty(key=key, display_name=name, type="formula"))
        elif self.strategy == FormulaStrategy.ORIGINAL:
            mapping.formulas.append(
                MappedProperty(key=FORMULA_KEY_PREFIX + key, display_name=name, type="formula", formula=expression)
            )
        else:
            mapping.skipped.append(name)


def map_database_properties(
    properties: Mapping[str, Any], strategy: Optional[Union[FormulaStrategy, str]] = None
) -> PropertyMapping:
    """Map a database property schema using the given fallback strategy."""
    return PropertyMapper(strategy).map_properties(properties)
