"""Validated directive records built from section children."""

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from .script import ScriptElement

_INT_PREFIX = re.compile(r"\s*([+-]?)(0[xX][0-9a-fA-F]+|[0-9]+)")


class DirectiveError(RuntimeError):
    """Raised when a script element is not a valid directive."""


class DirectiveKind(StrEnum):
    """Tag names accepted inside a section."""

    OFFSET = "offset"
    SIZE = "size"
    VMETHOD = "vmethod"
    VALUE = "value"
    GLOBAL = "global"
    VTABLE = "vtable"


@dataclass(frozen=True)
class OffsetDirective:
    name: str
    type_name: str
    member: str


@dataclass(frozen=True)
class SizeDirective:
    name: str
    type_name: str


@dataclass(frozen=True)
class VMethodDirective:
    name: str
    type_name: str
    method: str


@dataclass(frozen=True)
class ValueDirective:
    """A literal value, or a named value of an enum when `enum_name` is set."""

    name: str
    literal: int = 0
    enum_name: str | None = None
    value_name: str | None = None


@dataclass(frozen=True)
class GlobalDirective:
    name: str
    object_path: str


@dataclass(frozen=True)
class VTableDirective:
    name: str
    type_name: str


Directive = (
    OffsetDirective
    | SizeDirective
    | VMethodDirective
    | ValueDirective
    | GlobalDirective
    | VTableDirective
)


def parse_int(text: str | None) -> int:
    """Parse a decimal or 0x-prefixed integer attribute.

    Trailing garbage after the leading number is ignored ("12abc" is 12);
    an attribute that does not start with a number is 0.
    """
    if text is None:
        return 0
    match = _INT_PREFIX.match(text)
    if match is None:
        return 0
    sign, digits = match.groups()
    value = int(digits, 16 if digits[:2].lower() == "0x" else 10)
    return -value if sign == "-" else value


def _require(element: ScriptElement, attribute: str) -> str:
    value = element.attributes.get(attribute)
    if value is None:
        raise DirectiveError(f"{element.tag} {element.name} need a {attribute}.")
    return value


def _offset(element: ScriptElement) -> OffsetDirective:
    return OffsetDirective(element.name, _require(element, "type"), _require(element, "member"))


def _size(element: ScriptElement) -> SizeDirective:
    return SizeDirective(element.name, _require(element, "type"))


def _vmethod(element: ScriptElement) -> VMethodDirective:
    return VMethodDirective(element.name, _require(element, "type"), _require(element, "method"))


def _value(element: ScriptElement) -> ValueDirective:
    enum_name = element.attributes.get("enum")
    if enum_name is None:
        return ValueDirective(element.name, literal=parse_int(element.attributes.get("value")))
    return ValueDirective(element.name, enum_name=enum_name, value_name=_require(element, "value"))


def _global(element: ScriptElement) -> GlobalDirective:
    return GlobalDirective(element.name, _require(element, "object"))


def _vtable(element: ScriptElement) -> VTableDirective:
    return VTableDirective(element.name, _require(element, "type"))


_BUILDERS: dict[DirectiveKind, Callable[[ScriptElement], Directive]] = {
    DirectiveKind.OFFSET: _offset,
    DirectiveKind.SIZE: _size,
    DirectiveKind.VMETHOD: _vmethod,
    DirectiveKind.VALUE: _value,
    DirectiveKind.GLOBAL: _global,
    DirectiveKind.VTABLE: _vtable,
}


def parse_directive(element: ScriptElement) -> Directive:
    """Validate one section child into a directive record."""
    try:
        kind = DirectiveKind(element.tag)
    except ValueError:
        raise DirectiveError(f"Invalid tag name: {element.tag}.") from None
    if "name" not in element.attributes:
        raise DirectiveError(f"{element.tag} directive has no name.")
    return _BUILDERS[kind](element)
