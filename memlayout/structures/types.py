"""Type definitions for the structure database."""

from dataclasses import dataclass, field
from functools import cached_property

from dataclasses_json import DataClassJsonMixin

from .path import Path


@dataclass
class TypeRef(DataClassJsonMixin):
    """Reference to a primitive or user-defined type.

    - pointer=N: N levels of indirection on top of `name`
    - dims=[A, B]: A arrays of B elements (outermost dimension first)
    """

    name: str
    pointer: int = 0
    dims: list[int] = field(default_factory=list)

    @property
    def is_array(self) -> bool:
        return len(self.dims) > 0

    @property
    def is_pointer(self) -> bool:
        return not self.dims and self.pointer > 0

    def element(self) -> "TypeRef":
        """Return the element type of an array."""
        return TypeRef(self.name, self.pointer, self.dims[1:])

    def __str__(self) -> str:
        return self.name + "*" * self.pointer + "".join(f"[{n}]" for n in self.dims)


@dataclass
class CompoundMember(DataClassJsonMixin):
    """Represents a data member of a compound."""

    name: str
    type: TypeRef


@dataclass
class Compound(DataClassJsonMixin):
    """Represents a struct or class definition.

    Virtual methods are listed in declaration order; a method that already
    exists in a parent's vtable overrides it instead of adding a slot.
    """

    kind: str
    name: str
    parent: str | None
    members: list[CompoundMember]
    vmethods: list[str]


@dataclass
class EnumValue(DataClassJsonMixin):
    """Represents a single enum value."""

    name: str
    value: int


@dataclass
class EnumType(DataClassJsonMixin):
    """Represents an enum type definition."""

    name: str
    base: str
    values: dict[str, EnumValue]


@dataclass
class BitfieldFlag(DataClassJsonMixin):
    """Represents one flag of a bitfield."""

    name: str
    offset: int
    count: int


@dataclass
class Bitfield(DataClassJsonMixin):
    """Represents a bitfield type definition."""

    name: str
    base: str
    flags: list[BitfieldFlag]


@dataclass
class GlobalObject(DataClassJsonMixin):
    """Represents a declared global object."""

    name: str
    type: TypeRef


@dataclass
class VersionInfo(DataClassJsonMixin):
    """Represents one build of the target binary."""

    version_name: str
    id: list[int]
    global_addresses: dict[str, int]
    vtable_addresses: dict[str, int]


@dataclass
class StructureDatabase(DataClassJsonMixin):
    """All types, globals and versions loaded from a set of definitions."""

    compounds: list[Compound]
    enums: list[EnumType]
    bitfields: list[Bitfield]
    globals: list[GlobalObject]
    versions: list[VersionInfo]

    @cached_property
    def _compounds(self) -> dict[str, Compound]:
        return {c.name: c for c in self.compounds}

    @cached_property
    def _enums(self) -> dict[str, EnumType]:
        return {e.name: e for e in self.enums}

    @cached_property
    def _bitfields(self) -> dict[str, Bitfield]:
        return {b.name: b for b in self.bitfields}

    @cached_property
    def _globals(self) -> dict[str, GlobalObject]:
        return {g.name: g for g in self.globals}

    def compound(self, name: str) -> Compound | None:
        return self._compounds.get(name)

    def find_enum(self, name: str) -> EnumType | None:
        return self._enums.get(name)

    def find_bitfield(self, name: str) -> Bitfield | None:
        return self._bitfields.get(name)

    def find_global(self, name: str) -> GlobalObject | None:
        return self._globals.get(name)

    def version_by_name(self, name: str) -> VersionInfo | None:
        for version in self.versions:
            if version.version_name == name:
                return version
        return None

    def all_versions(self) -> list[VersionInfo]:
        return list(self.versions)

    def find_member(self, compound: Compound, name: str) -> CompoundMember | None:
        """Look up a data member, including members inherited from parents."""
        current: Compound | None = compound
        while current is not None:
            for member in current.members:
                if member.name == name:
                    return member
            current = self.compound(current.parent) if current.parent else None
        return None

    def find_compound(self, path: Path) -> Compound | None:
        """Find the compound named by a path.

        The first item names a top-level compound. Following identifiers
        select by-value members and indices step into arrays; the path must
        end on a compound.
        """
        if not path or not isinstance(path[0], str):
            return None
        current = self.compound(path[0])
        if current is None:
            return None
        type_ref = TypeRef(current.name)

        for item in path[1:]:
            if isinstance(item, int):
                if not type_ref.is_array:
                    return None
                type_ref = type_ref.element()
                continue
            if type_ref.is_array or type_ref.is_pointer:
                return None
            current = self.compound(type_ref.name)
            if current is None:
                return None
            member = self.find_member(current, item)
            if member is None:
                return None
            type_ref = member.type

        if type_ref.is_array or type_ref.is_pointer:
            return None
        return self.compound(type_ref.name)

    def vtable(self, compound: Compound) -> list[str]:
        """Return the virtual method slots of a compound, inherited slots first."""
        chain: list[Compound] = []
        current: Compound | None = compound
        while current is not None:
            chain.append(current)
            current = self.compound(current.parent) if current.parent else None

        slots: list[str] = []
        for klass in reversed(chain):
            for method in klass.vmethods:
                if method not in slots:
                    slots.append(method)
        return slots

    def has_vtable(self, compound: Compound) -> bool:
        return len(self.vtable(compound)) > 0

    def method_index(self, compound: Compound, method: str) -> int | None:
        """Return the vtable slot index of a method, or None if absent."""
        slots = self.vtable(compound)
        if method in slots:
            return slots.index(method)
        return None


PRIMITIVE_TYPES = frozenset(
    [
        "bool",
        "char",
        "int8",
        "int16",
        "int32",
        "int64",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "float32",
        "float64",
    ]
)

INTEGER_TYPES = frozenset(
    ["char", "int8", "int16", "int32", "int64", "uint8", "uint16", "uint32", "uint64"]
)


def is_primitive(t: TypeRef) -> bool:
    """Check if a type is a primitive type by value."""
    return not t.dims and not t.pointer and t.name in PRIMITIVE_TYPES
