"""Memory layout computation for compounds under an ABI."""

import logging
from dataclasses import dataclass

from .abi import ABI, TypeInfo
from .path import Path, format_path
from .types import Compound, StructureDatabase, TypeRef

logger = logging.getLogger(__name__)


class LayoutError(RuntimeError):
    """Raised when a layout cannot be computed or a member cannot be located."""


@dataclass(frozen=True)
class CompoundLayout:
    """Computed layout of one compound, inherited members included."""

    name: str
    info: TypeInfo
    offsets: dict[str, int]
    has_vtable: bool


def align_up(offset: int, align: int) -> int:
    return (offset + align - 1) // align * align


class MemoryLayout:
    """Compute offsets and sizes for every compound of a database.

    Compounds whose layout fails are left without an entry in `type_info`.
    """

    def __init__(self, structures: StructureDatabase, abi: ABI):
        self.structures = structures
        self.abi = abi
        self.compounds: dict[str, CompoundLayout] = {}
        self._in_progress: set[str] = set()

        for compound in structures.compounds:
            try:
                self.calc_compound(compound.name)
            except LayoutError as e:
                logger.warning("No layout for %s: %s", compound.name, e)

    @property
    def type_info(self) -> dict[str, TypeInfo]:
        return {name: layout.info for name, layout in self.compounds.items()}

    def calc_type(self, t: TypeRef) -> TypeInfo:
        """Calculate size and alignment for any type reference."""
        if t.is_array:
            elem = self.calc_type(t.element())
            return TypeInfo(elem.size * t.dims[0], elem.align)

        if t.pointer:
            return self.abi.pointer

        if self.abi.is_primitive(t):
            return self.abi.primitive(t.name)

        enum = self.structures.find_enum(t.name)
        if enum is not None:
            return self.abi.primitive(enum.base)

        bitfield = self.structures.find_bitfield(t.name)
        if bitfield is not None:
            return self.abi.primitive(bitfield.base)

        if self.structures.compound(t.name) is not None:
            return self.calc_compound(t.name).info

        raise LayoutError(f"Unknown type: {t.name}")

    def calc_compound(self, name: str) -> CompoundLayout:
        """Calculate the layout of a compound (with caching)."""
        if name in self.compounds:
            return self.compounds[name]
        if name in self._in_progress:
            raise LayoutError(f"{name} contains itself")

        compound = self.structures.compound(name)
        if compound is None:
            raise LayoutError(f"Unknown compound: {name}")

        self._in_progress.add(name)
        try:
            layout = self._layout(compound)
        finally:
            self._in_progress.discard(name)

        self.compounds[name] = layout
        return layout

    def _layout(self, compound: Compound) -> CompoundLayout:
        offset = 0
        align = 1
        offsets: dict[str, int] = {}
        has_vtable = False

        base = self.calc_compound(compound.parent) if compound.parent else None

        # The vtable pointer comes first unless a base already provides one
        if self.structures.has_vtable(compound) and not (base and base.has_vtable):
            offset = self.abi.pointer.size
            align = self.abi.pointer.align
            has_vtable = True

        if base is not None:
            base_offset = align_up(offset, base.info.align)
            offsets.update({k: v + base_offset for k, v in base.offsets.items()})
            offset = base_offset + base.info.size
            align = max(align, base.info.align)
            has_vtable = has_vtable or base.has_vtable

        for member in compound.members:
            info = self.calc_type(member.type)
            offset = align_up(offset, info.align)
            offsets[member.name] = offset
            offset += info.size
            align = max(align, info.align)

        size = align_up(max(offset, 1), align)
        return CompoundLayout(compound.name, TypeInfo(size, align), offsets, has_vtable)

    def size_of(self, compound: Compound) -> int:
        layout = self.compounds.get(compound.name)
        if layout is None:
            raise LayoutError(f"Missing type info for {compound.name}")
        return layout.info.size

    def member_offset(self, t: TypeRef, path: Path) -> tuple[TypeRef, int]:
        """Walk a member path from a type and return (member type, offset)."""
        offset = 0
        for item in path:
            if isinstance(item, int):
                if not t.is_array:
                    raise LayoutError(f"{t} is not an array")
                if item >= t.dims[0]:
                    raise LayoutError(f"Index {item} out of bounds for {t}")
                t = t.element()
                offset += item * self.calc_type(t).size
                continue

            if t.is_array or t.pointer:
                raise LayoutError(f"Cannot access member {item} of {t}")
            compound = self.structures.compound(t.name)
            if compound is None:
                raise LayoutError(f"{t} is not a compound")
            layout = self.compounds.get(compound.name)
            if layout is None:
                raise LayoutError(f"Missing type info for {compound.name}")
            member = self.structures.find_member(compound, item)
            if member is None:
                raise LayoutError(f"No member {item} in {compound.name}")
            offset += layout.offsets[item]
            t = member.type
        return t, offset

    def get_offset(self, compound: Compound, path: Path) -> tuple[TypeRef, int]:
        """Return the type and byte offset of a member path within a compound."""
        if not path:
            raise LayoutError("Empty member path")
        logger.debug("Resolving %s in %s", format_path(path), compound.name)
        return self.member_offset(TypeRef(compound.name), path)
