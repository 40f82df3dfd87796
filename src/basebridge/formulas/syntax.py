"""Formula syntax definitions and patterns."""

import logging
import re
from typing import Mapping, Optional, Pattern
from urllib.parse import unquote

logger = logging.getLogger(__name__)

# {{source:block_property:<property-id>:...}} - property placeholder token
# (exports from the live API use the "notion" prefix)
PLACEHOLDER_PATTERN: Pattern = re.compile(
    r"\{\{(?:source|notion):block_property:([^:{}]+)(?::[^{}]*)?\}\}"
)

# name( - a call site not preceded by a member-access dot
CALL_SITE_PATTERN: Pattern = re.compile(r"(?<![.\w])([A-Za-z_]\w*)\s*\(")

IDENTIFIER_PATTERN: Pattern = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

NUMBER_PATTERN: Pattern = re.compile(r"\d+(?:\.\d+)?(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?")

# Characters after which a "/" opens a regex literal rather than dividing
REGEX_PRECEDERS = "(,[=!&|?:+-*%<>{"

# Names with a meaning of their own in the target language; properties with
# these names are always referenced through the note namespace
RESERVED_NAMES: frozenset[str] = frozenset(
    {
        "note",
        "file",
        "this",
        "formula",
        "value",
        "index",
        "current",
        "pi",
        "e",
        "true",
        "false",
        "null",
        "if",
        "and",
        "or",
        "not",
        "now",
        "today",
        "date",
        "number",
        "list",
        "duration",
        "link",
        "image",
        "icon",
        "html",
        "min",
        "max",
        "sum",
    }
)

# Target namespaces that may be used as receivers without parentheses
TARGET_NAMESPACES: frozenset[str] = frozenset({"note", "file", "this", "formula", "value"})


def quote_string(value: str) -> str:
    """Render a value as a double-quoted target string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def unquote_string(literal: str) -> str:
    """
    Decode a quoted source string literal.

    Only escaped quotes and backslashes are decoded; other escape sequences
    are kept as written so regex patterns such as ``"\\d+"`` survive.
    """
    quote = literal[0]
    body = literal[1:-1]
    chars = []
    pos = 0
    while pos < len(body):
        char = body[pos]
        if char == "\\" and pos + 1 < len(body) and body[pos + 1] in (quote, "\\", "'", '"'):
            chars.append(body[pos + 1])
            pos += 2
            continue
        chars.append(char)
        pos += 1
    return "".join(chars)


def format_property_reference(name: str) -> str:
    """
    Render a reference to a note property.

    Plain identifiers are emitted bare; anything else, including names with
    spaces and reserved words, goes through ``note["..."]``.

    Args:
        name: The property display name

    Returns:
        Target-language property access
    """
    if IDENTIFIER_PATTERN.fullmatch(name) and name not in RESERVED_NAMES:
        return name
    return f"note[{quote_string(name)}]"


def scan_string(text: str, start: int) -> int:
    """Return the index just past the quoted literal opening at ``start``, or -1."""
    quote = text[start]
    pos = start + 1
    while pos < len(text):
        char = text[pos]
        if char == "\\":
            pos += 2
            continue
        if char == quote:
            return pos + 1
        pos += 1
    return -1


def scan_regex(text: str, start: int) -> int:
    """Return the index just past the regex literal opening at ``start``, or -1."""
    pos = start + 1
    in_class = False
    while pos < len(text):
        char = text[pos]
        if char == "\\":
            pos += 2
            continue
        if char == "[":
            in_class = True
        elif char == "]":
            in_class = False
        elif char == "/" and not in_class:
            pos += 1
            while pos < len(text) and text[pos].isalpha():
                pos += 1
            return pos
        elif char == "\n":
            return -1
        pos += 1
    return -1


def opens_regex(text: str, pos: int) -> bool:
    """Check whether the "/" at ``pos`` starts a regex literal."""
    before = text[:pos].rstrip()
    return not before or before[-1] in REGEX_PRECEDERS


def mask_literals(text: str) -> str:
    """
    Blank out the contents of string literals, regex literals and placeholders.

    The result has the same length as the input, so positions found in the
    masked text are valid in the original.
    """
    masked = []
    pos = 0
    while pos < len(text):
        char = text[pos]
        end = -1
        if char in "\"'":
            end = scan_string(text, pos)
        elif char == "/" and opens_regex(text, pos):
            end = scan_regex(text, pos)
        elif text.startswith("{{", pos):
            close = text.find("}}", pos)
            end = close + 2 if close != -1 else -1

        if end == -1:
            masked.append(char)
            pos += 1
            continue

        masked.append(char)
        masked.append(" " * (end - pos - 2))
        masked.append(text[end - 1])
        pos = end

    return "".join(masked)


def resolve_placeholders(
    expression: str, property_names: Mapping[str, str]
) -> tuple[str, list[str]]:
    """
    Replace property placeholder tokens with property references.

    Args:
        expression: Source formula text
        property_names: Property id -> display name

    Returns:
        Tuple of (resolved expression, warnings). Tokens whose property id is
        unknown are left in place and reported as warnings.
    """
    warnings: list[str] = []

    def replace(match: re.Match) -> str:
        property_id = match.group(1)
        name = lookup_property_name(property_id, property_names)
        if name is None:
            warnings.append(f"Unresolved property placeholder: {match.group(0)}")
            logger.debug(f"No property found for placeholder id {property_id}")
            return match.group(0)
        return f"ref({quote_string(name)})"

    return PLACEHOLDER_PATTERN.sub(replace, expression), warnings


def lookup_property_name(property_id: str, property_names: Mapping[str, str]) -> Optional[str]:
    """Find the display name for a property id, trying it as-is and URL-decoded."""
    if property_id in property_names:
        return property_names[property_id]
    decoded = unquote(property_id)
    return property_names.get(decoded)
