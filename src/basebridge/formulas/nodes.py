"""Expression tree produced by the formula parser."""

from dataclasses import dataclass, field, fields, replace
from typing import Mapping, Union


@dataclass
class Literal:
    """String, number, boolean or null literal, kept as written."""

    text: str
    kind: str  # "string", "number", "boolean", "null"
    value: str = ""  # Decoded value for strings


@dataclass
class Raw:
    """Opaque text emitted unchanged, such as an unresolved placeholder."""

    text: str


@dataclass
class RegexLiteral:
    text: str


@dataclass
class Name:
    """Bare identifier."""

    name: str


@dataclass
class PropertyRef:
    """Reference to a note property by display name."""

    name: str


@dataclass
class Call:
    """Source-style call ``name(args)``."""

    name: str
    args: list["Node"] = field(default_factory=list)


@dataclass
class MethodCall:
    """Target-style call ``receiver.name(args)``."""

    receiver: "Node"
    name: str
    args: list["Node"] = field(default_factory=list)


@dataclass
class Member:
    receiver: "Node"
    name: str


@dataclass
class Index:
    receiver: "Node"
    index: "Node"


@dataclass
class ListLiteral:
    items: list["Node"] = field(default_factory=list)


@dataclass
class Unary:
    op: str  # "-", "+", "!"
    operand: "Node"


@dataclass
class Binary:
    op: str
    left: "Node"
    right: "Node"


@dataclass
class Conditional:
    """Ternary ``condition ? then : otherwise``."""

    condition: "Node"
    then: "Node"
    otherwise: "Node"


Node = Union[
    Literal,
    Raw,
    RegexLiteral,
    Name,
    PropertyRef,
    Call,
    MethodCall,
    Member,
    Index,
    ListLiteral,
    Unary,
    Binary,
    Conditional,
]


def rename(node: Node, names: Mapping[str, str]) -> Node:
    """
    Return a copy of the tree with bare identifiers renamed.

    Only whole ``Name`` nodes are renamed; member names, property references
    and string contents are left alone.
    """
    if isinstance(node, Name):
        return Name(names.get(node.name, node.name))

    changes = {}
    for item in fields(node):
        value = getattr(node, item.name)
        if isinstance(value, list):
            changes[item.name] = [rename(child, names) for child in value]
        elif not isinstance(value, str):
            changes[item.name] = rename(value, names)
    return replace(node, **changes)
