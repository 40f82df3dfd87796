"""Convertibility checks for source formulas."""

import logging
from typing import Optional

from .functions import PROPERTY_REFERENCE_FUNCTIONS, UNSUPPORTED_FUNCTIONS, is_known_function
from .syntax import CALL_SITE_PATTERN, mask_literals

logger = logging.getLogger(__name__)


def find_call_names(expression: str) -> list[str]:
    """
    List the source-style call names in an expression, in order.

    Names inside string or regex literals and method calls written as
    ``.name(`` are not reported.
    """
    masked = mask_literals(expression)
    return [match.group(1) for match in CALL_SITE_PATTERN.finditer(masked)]


def find_blocking_function(expression: str) -> Optional[str]:
    """
    Find the first function that prevents translating an expression.

    Args:
        expression: Source formula text

    Returns:
        Name of a deny-listed or unknown function, or None if every call
        site can be translated
    """
    for name in find_call_names(expression):
        if name in PROPERTY_REFERENCE_FUNCTIONS:
            continue
        if name in UNSUPPORTED_FUNCTIONS:
            logger.debug(f"Function {name} has no target equivalent")
            return name
        if not is_known_function(name):
            logger.debug(f"Unknown function {name}")
            return name
    return None


def is_convertible(expression: str) -> bool:
    """Check whether an expression can be translated as a whole."""
    if not isinstance(expression, str) or not expression.strip():
        return False
    return find_blocking_function(expression) is None
