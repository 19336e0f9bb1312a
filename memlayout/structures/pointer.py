"""Resolution of global objects to addresses for a version."""

from dataclasses import dataclass

from .layout import LayoutError, MemoryLayout
from .path import Path, format_path
from .types import StructureDatabase, TypeRef, VersionInfo


class GlobalLookupError(LookupError):
    """Raised when a global object path cannot be resolved for a version."""


@dataclass(frozen=True)
class Pointer:
    """A typed address in the target process."""

    type: TypeRef
    address: int

    @classmethod
    def from_global(
        cls,
        structures: StructureDatabase,
        version: VersionInfo,
        layout: MemoryLayout,
        path: Path,
    ) -> "Pointer":
        """Resolve `global.member[index]...` to the address of that object.

        Members are reached by offset only; paths through pointers cannot be
        followed without reading process memory.
        """
        if not path or not isinstance(path[0], str):
            raise GlobalLookupError(f"Invalid global path {format_path(path)}")
        name = path[0]

        obj = structures.find_global(name)
        if obj is None:
            raise GlobalLookupError(f"Unknown global object {name}")

        address = version.global_addresses.get(name)
        if address is None:
            raise GlobalLookupError(f"No address for {name} in version {version.version_name}")

        try:
            member_type, offset = layout.member_offset(obj.type, path[1:])
        except LayoutError as e:
            raise GlobalLookupError(str(e)) from e
        return cls(member_type, address + offset)
