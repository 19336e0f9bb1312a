"""ABI descriptions keyed by the platform tag of a version name."""

from dataclasses import dataclass, field

from .types import TypeRef


class AbiError(RuntimeError):
    """Raised when no ABI matches a version name."""


@dataclass(frozen=True)
class TypeInfo:
    """Size and alignment of a type, in bytes."""

    size: int
    align: int


# Primitive sizes in bytes; alignment is natural unless an ABI overrides it
PRIMITIVE_SIZES: dict[str, int] = {
    "bool": 1,
    "char": 1,
    "int8": 1,
    "uint8": 1,
    "int16": 2,
    "uint16": 2,
    "int32": 4,
    "uint32": 4,
    "int64": 8,
    "uint64": 8,
    "float32": 4,
    "float64": 8,
}


@dataclass(frozen=True)
class ABI:
    """Pointer width and alignment rules of one build."""

    name: str
    pointer: TypeInfo
    align_overrides: dict[str, int] = field(default_factory=dict)

    def primitive(self, name: str) -> TypeInfo:
        size = PRIMITIVE_SIZES[name]
        return TypeInfo(size, self.align_overrides.get(name, size))

    def is_primitive(self, t: TypeRef) -> bool:
        return not t.dims and not t.pointer and t.name in PRIMITIVE_SIZES

    @classmethod
    def from_version_name(cls, version_name: str) -> "ABI":
        """Select the ABI from a platform tag such as `linux64` in the version name."""
        for word in version_name.lower().split():
            if word in ABIS:
                return ABIS[word]
        raise AbiError(
            f"No ABI for version {version_name!r} (expected one of {', '.join(sorted(ABIS))})"
        )


_I386_SYSV_ALIGN = {"int64": 4, "uint64": 4, "float64": 4}

ABIS: dict[str, ABI] = {
    "win32": ABI("msvc-x86", TypeInfo(4, 4)),
    "win64": ABI("msvc-x64", TypeInfo(8, 8)),
    "linux32": ABI("sysv-i386", TypeInfo(4, 4), _I386_SYSV_ALIGN),
    "linux64": ABI("sysv-x86_64", TypeInfo(8, 8)),
    "osx32": ABI("sysv-i386", TypeInfo(4, 4), _I386_SYSV_ALIGN),
    "osx64": ABI("sysv-x86_64", TypeInfo(8, 8)),
}
