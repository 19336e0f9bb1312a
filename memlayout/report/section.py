"""Evaluation of `section` elements."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from memlayout.structures import (
    ABI,
    Compound,
    GlobalLookupError,
    LayoutError,
    MalformedPath,
    MemoryLayout,
    Pointer,
    StructureDatabase,
    VersionInfo,
    parse_path,
)

from .directives import (
    Directive,
    DirectiveError,
    GlobalDirective,
    OffsetDirective,
    SizeDirective,
    ValueDirective,
    VMethodDirective,
    VTableDirective,
    parse_directive,
)
from .formatting import ReportWriter
from .script import ScriptElement

logger = logging.getLogger(__name__)


class ResolutionError(RuntimeError):
    """Raised when a directive cannot be resolved against the database."""


@dataclass(frozen=True)
class ResolutionContext:
    """Read-only inputs shared by every directive of a run."""

    structures: StructureDatabase
    version: VersionInfo
    abi: ABI
    layout: MemoryLayout


def _compound(context: ResolutionContext, type_name: str, entry: str) -> Compound:
    try:
        compound = context.structures.find_compound(parse_path(type_name))
    except MalformedPath as e:
        raise ResolutionError(f"type {type_name} not found for entry {entry}: {e}.") from e
    if compound is None:
        raise ResolutionError(f"type {type_name} not found for entry {entry}.")
    return compound


def resolve_offset(directive: OffsetDirective, context: ResolutionContext) -> int:
    compound = _compound(context, directive.type_name, directive.name)
    try:
        _member_type, offset = context.layout.get_offset(compound, parse_path(directive.member))
    except (MalformedPath, LayoutError) as e:
        raise ResolutionError(
            f"Failed to get member {directive.member} offset for {directive.name}: {e}."
        ) from e
    return offset


def resolve_size(directive: SizeDirective, context: ResolutionContext) -> int:
    compound = _compound(context, directive.type_name, directive.name)
    try:
        return context.layout.size_of(compound)
    except LayoutError as e:
        raise ResolutionError(f"Missing type info for size {directive.name}.") from e


def resolve_vmethod(directive: VMethodDirective, context: ResolutionContext) -> int:
    compound = _compound(context, directive.type_name, directive.name)
    index = context.structures.method_index(compound, directive.method)
    if index is None:
        raise ResolutionError(f"Method {directive.method} not found for vmethod {directive.name}.")
    return index * context.abi.pointer.size


def resolve_value(directive: ValueDirective, context: ResolutionContext) -> int:
    if directive.enum_name is None:
        return directive.literal
    enum = context.structures.find_enum(directive.enum_name)
    if enum is None:
        raise ResolutionError(f"Unknown enum {directive.enum_name}.")
    value = enum.values.get(directive.value_name or "")
    if value is None:
        raise ResolutionError(f"Unknown enum value {directive.value_name} in {directive.enum_name}.")
    return value.value


def resolve_global(directive: GlobalDirective, context: ResolutionContext) -> int:
    try:
        pointer = Pointer.from_global(
            context.structures, context.version, context.layout, parse_path(directive.object_path)
        )
    except (MalformedPath, GlobalLookupError) as e:
        raise ResolutionError(f"Global object {directive.object_path}: {e}") from e
    return pointer.address


def resolve_vtable(directive: VTableDirective, context: ResolutionContext) -> int:
    address = context.version.vtable_addresses.get(directive.type_name)
    if address is None:
        raise ResolutionError(f"Failed to find vtable for {directive.name}.")
    return address


RESOLVERS: dict[type, Callable[[Any, ResolutionContext], int]] = {
    OffsetDirective: resolve_offset,
    SizeDirective: resolve_size,
    VMethodDirective: resolve_vmethod,
    ValueDirective: resolve_value,
    GlobalDirective: resolve_global,
    VTableDirective: resolve_vtable,
}


def resolve(directive: Directive, context: ResolutionContext) -> int:
    """Resolve a directive to the value it reports."""
    return RESOLVERS[type(directive)](directive, context)


def evaluate_section(
    element: ScriptElement, context: ResolutionContext, writer: ReportWriter
) -> bool:
    """Emit one line per resolvable directive; return False if any failed."""
    ok = True
    for child in element.children:
        try:
            directive = parse_directive(child)
            value = resolve(directive, context)
        except (DirectiveError, ResolutionError) as e:
            logger.error("%s", e)
            ok = False
            continue
        writer.emit(directive.name, value)
    return ok
