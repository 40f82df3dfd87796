"""Compilation of rollup aggregates into target formulas.

A rollup aggregates one property across the records linked through a
relation property. The target language has no rollup type, so each
aggregation is spelled out as a formula over the relation list, e.g.
``count`` over ``Tasks`` becomes ``note["Tasks"].length``.
"""

import logging
from typing import Callable, Mapping, Optional

from .models import RollupConfig
from .syntax import lookup_property_name, quote_string

logger = logging.getLogger(__name__)

DATE_RANGE_FORMAT = "YYYY-MM-DD"
DATE_RANGE_SEPARATOR = " → "


class _Rollup:
    """Formula fragments for one relation/target pair."""

    def __init__(self, relation: str, target: Optional[str]):
        self.relation = f"note[{quote_string(relation)}]"
        self.target = target
        self.total = f"{self.relation}.length"

    @property
    def value(self) -> str:
        """Target property read from each related record."""
        return f"value.asFile().properties[{quote_string(self.target)}]"

    @property
    def values(self) -> str:
        return f"{self.relation}.map({self.value})"

    @property
    def empty_count(self) -> str:
        return f"{self.relation}.filter({self.value}.isEmpty()).length"

    @property
    def not_empty_count(self) -> str:
        return f"{self.relation}.filter(!{self.value}.isEmpty()).length"

    @property
    def sorted_dates(self) -> str:
        return f"{self.values}.filter(value != null).map(date(value)).sort()"

    def percent(self, count: str) -> str:
        return f"if({self.total} == 0, 0, ({count} / {self.total}) * 100)"


def _show_original(rollup: _Rollup) -> str:
    return rollup.values if rollup.target else rollup.relation


def _show_unique(rollup: _Rollup) -> str:
    if rollup.target:
        return f"{rollup.values}.flat().unique()"
    return f"{rollup.relation}.unique()"


def _count(rollup: _Rollup) -> str:
    return rollup.total


def _count_values(rollup: _Rollup) -> str:
    return f"{rollup.values}.flat().length" if rollup.target else rollup.total


def _unique(rollup: _Rollup) -> str:
    if rollup.target:
        return f"{rollup.values}.flat().unique().length"
    return f"{rollup.relation}.unique().length"


def _empty(rollup: _Rollup) -> str:
    if rollup.target:
        return rollup.empty_count
    return f"if({rollup.total} == 0, 1, 0)"


def _not_empty(rollup: _Rollup) -> str:
    if rollup.target:
        return rollup.not_empty_count
    return f"if({rollup.total} > 0, 1, 0)"


def _percent_empty(rollup: _Rollup) -> str:
    if rollup.target:
        return rollup.percent(rollup.empty_count)
    return f"if({rollup.total} == 0, 100, 0)"


def _percent_not_empty(rollup: _Rollup) -> str:
    if rollup.target:
        return rollup.percent(rollup.not_empty_count)
    return f"if({rollup.total} > 0, 100, 0)"


def _earliest_date(rollup: _Rollup) -> str:
    return f"{rollup.sorted_dates}[0]"


def _latest_date(rollup: _Rollup) -> str:
    return f"{rollup.sorted_dates}[-1]"


def _date_range(rollup: _Rollup) -> str:
    date_format = quote_string(DATE_RANGE_FORMAT)
    return (
        f"({_earliest_date(rollup)}).format({date_format})"
        f" + {quote_string(DATE_RANGE_SEPARATOR)} + "
        f"({_latest_date(rollup)}).format({date_format})"
    )


def _sum(rollup: _Rollup) -> str:
    return f"{rollup.values}.flat().sum()"


def _average(rollup: _Rollup) -> str:
    return f"{rollup.values}.flat().mean()"


def _checked(rollup: _Rollup) -> str:
    return f"{rollup.relation}.filter({rollup.value} == true).length"


def _unchecked(rollup: _Rollup) -> str:
    return f"{rollup.relation}.filter({rollup.value} != true).length"


# Rollup function -> (formula builder, needs a target property)
ROLLUP_FUNCTIONS: dict[str, tuple[Callable[[_Rollup], str], bool]] = {
    "show_original": (_show_original, False),
    "show_unique": (_show_unique, False),
    "count": (_count, False),
    "count_all": (_count, False),
    "count_values": (_count_values, False),
    "unique": (_unique, False),
    "count_unique_values": (_unique, False),
    "empty": (_empty, False),
    "count_empty": (_empty, False),
    "not_empty": (_not_empty, False),
    "count_not_empty": (_not_empty, False),
    "percent_empty": (_percent_empty, False),
    "percent_not_empty": (_percent_not_empty, False),
    "earliest_date": (_earliest_date, True),
    "latest_date": (_latest_date, True),
    "date_range": (_date_range, True),
    "sum": (_sum, True),
    "average": (_average, True),
    "checked": (_checked, True),
    "unchecked": (_unchecked, True),
}


def compile_rollup(
    function: str, relation_property: Optional[str], target_property: Optional[str] = None
) -> Optional[str]:
    """
    Build a target formula performing a rollup aggregation.

    Args:
        function: Rollup function id, e.g. "count" or "earliest_date"
        relation_property: Name of the relation property to aggregate over
        target_property: Property read from each related record, if any

    Returns:
        Target formula text, or None (with a logged warning) when the
        function is unknown or lacks the inputs it needs
    """
    if not relation_property:
        logger.warning(f"Rollup function {function!r} has no relation property, skipping")
        return None

    entry = ROLLUP_FUNCTIONS.get(function)
    if entry is None:
        logger.warning(f"Unsupported rollup function {function!r} on relation {relation_property!r}")
        return None

    build, needs_target = entry
    if needs_target and not target_property:
        logger.warning(f"Rollup function {function!r} requires a target property")
        return None

    formula = build(_Rollup(relation_property, target_property))
    logger.debug(f"Compiled rollup {function} over {relation_property}: {formula}")
    return formula


def compile_rollup_config(
    config: Optional[RollupConfig], property_names: Optional[Mapping[str, str]] = None
) -> Optional[str]:
    """
    Build a target formula from a rollup configuration.

    Property names and keys are used directly. Bare property ids are resolved
    through ``property_names``; an id that cannot be resolved skips the
    rollup, since an id is never a usable property name.

    Args:
        config: Rollup configuration from the property schema
        property_names: Property id -> display name for the current schema

    Returns:
        Target formula text, or None when the rollup cannot be compiled
    """
    if config is None:
        return None

    relation = config.relation
    if not relation and config.relation_property_id:
        relation = _resolve_id(config.relation_property_id, property_names, "Relation")
        if relation is None:
            return None

    target = config.target
    if not target and config.rollup_property_id:
        target = _resolve_id(config.rollup_property_id, property_names, "Rollup")
        if target is None:
            return None

    return compile_rollup(config.function, relation, target)


def _resolve_id(property_id: str, property_names: Optional[Mapping[str, str]], role: str) -> Optional[str]:
    name = lookup_property_name(property_id, property_names or {})
    if name is None:
        logger.warning(f"{role} property id {property_id!r} does not match any property, skipping rollup")
    return name
