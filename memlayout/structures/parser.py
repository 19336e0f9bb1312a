"""Structure definition parser using Lark."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path as FilePath
from typing import Any, TypeVar

from lark import Lark
from lark.exceptions import LarkError
from lark.visitors import Transformer

from .types import (
    INTEGER_TYPES,
    Bitfield,
    BitfieldFlag,
    Compound,
    CompoundMember,
    EnumType,
    EnumValue,
    GlobalObject,
    StructureDatabase,
    TypeRef,
    VersionInfo,
)

logger = logging.getLogger(__name__)

_g_parser: Lark | None = None

DEFINITION_SUFFIX = ".structdef"


class DatabaseError(RuntimeError):
    """Raised when the structure database cannot be loaded."""


class ValidationError(DatabaseError):
    """Raised when structure definitions are inconsistent."""


@dataclass
class _Name:
    value: str


@dataclass
class _Number:
    value: int


@dataclass
class _Base:
    value: str


@dataclass
class _Array:
    value: int


@dataclass
class _VMethod:
    value: str


@dataclass
class _VersionId:
    value: list[int]


@dataclass
class _GlobalAddress:
    name: str
    address: int


@dataclass
class _VTableAddress:
    name: str
    address: int


TFilter = TypeVar("TFilter", bound=object)


def _filter(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


def _find_one(args: list[Any], class_type: type[object]) -> Any:
    filtered = _filter(args, class_type)
    if len(filtered) == 0:
        return None
    if len(filtered) > 1:
        raise RuntimeError(f"Found more than one {class_type}")

    if hasattr(filtered[0], "value"):
        return filtered[0].value
    return filtered[0]


def _unquote(token: Any) -> str:
    return json.loads(str(token))


class TreeTransformer(Transformer):
    """Transform parse tree into database types."""

    def name(self, args: list[Any]) -> _Name:
        return _Name(value=str(args[0]))

    def number(self, args: list[Any]) -> _Number:
        text = str(args[0])
        return _Number(value=int(text, 16 if "0x" in text else 10))

    def array(self, args: list[Any]) -> _Array:
        return _Array(value=int(args[0]))

    def base(self, args: list[Any]) -> _Base:
        return _Base(value=args[0].value)

    def type(self, args: list[Any]) -> TypeRef:
        return TypeRef(
            name=_find_one(args, _Name),
            pointer=sum(1 for arg in args if str(arg) == "*"),
            dims=[a.value for a in _filter(args, _Array)],
        )

    def member(self, args: list[Any]) -> CompoundMember:
        return CompoundMember(name=_find_one(args, _Name), type=_find_one(args, TypeRef))

    def vmethod(self, args: list[Any]) -> _VMethod:
        return _VMethod(value=args[0].value)

    def compound(self, args: list[Any]) -> Compound:
        return Compound(
            kind=str(args[0]),
            name=_find_one(args, _Name),
            parent=_find_one(args, _Base),
            members=_filter(args, CompoundMember),
            vmethods=[v.value for v in _filter(args, _VMethod)],
        )

    def enum_value(self, args: list[Any]) -> tuple[str, int | None]:
        return (_find_one(args, _Name), _find_one(args, _Number))

    def enum(self, args: list[Any]) -> EnumType:
        names = _filter(args, _Name)
        values: dict[str, EnumValue] = {}
        next_value = 0
        for value_name, value in _filter(args, tuple):
            if value is None:
                value = next_value
            if value_name in values:
                raise ValidationError(f"Duplicate value {value_name} in enum {names[0].value}")
            values[value_name] = EnumValue(value_name, value)
            next_value = value + 1
        return EnumType(
            name=names[0].value,
            base=names[1].value if len(names) > 1 else "int32",
            values=values,
        )

    def flag(self, args: list[Any]) -> tuple[str, int]:
        count = _find_one(args, _Number)
        return (_find_one(args, _Name), 1 if count is None else count)

    def bitfield(self, args: list[Any]) -> Bitfield:
        names = _filter(args, _Name)
        flags: list[BitfieldFlag] = []
        offset = 0
        for flag_name, count in _filter(args, tuple):
            flags.append(BitfieldFlag(flag_name, offset, count))
            offset += count
        return Bitfield(
            name=names[0].value,
            base=names[1].value if len(names) > 1 else "uint32",
            flags=flags,
        )

    def global_decl(self, args: list[Any]) -> GlobalObject:
        return GlobalObject(name=_find_one(args, _Name), type=_find_one(args, TypeRef))

    def version_id(self, args: list[Any]) -> _VersionId:
        text = _unquote(args[0])
        try:
            return _VersionId(value=list(bytes.fromhex(text)))
        except ValueError as e:
            raise ValidationError(f"Invalid version id {text!r}: {e}") from e

    def global_address(self, args: list[Any]) -> _GlobalAddress:
        return _GlobalAddress(name=args[0].value, address=args[1].value)

    def vtable_address(self, args: list[Any]) -> _VTableAddress:
        return _VTableAddress(name=args[0].value, address=args[1].value)

    def version(self, args: list[Any]) -> VersionInfo:
        version_id = _find_one(args, _VersionId)
        return VersionInfo(
            version_name=_unquote(args[0]),
            id=version_id if version_id is not None else [],
            global_addresses={g.name: g.address for g in _filter(args, _GlobalAddress)},
            vtable_addresses={v.name: v.address for v in _filter(args, _VTableAddress)},
        )


def _check_unique(kind: str, names: list[str]) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise ValidationError(f"Duplicate {kind} {name}")
        seen.add(name)


def validate(database: StructureDatabase) -> None:
    """Validate a loaded structure database."""
    _check_unique(
        "type",
        [c.name for c in database.compounds]
        + [e.name for e in database.enums]
        + [b.name for b in database.bitfields],
    )
    _check_unique("global", [g.name for g in database.globals])
    _check_unique("version", [v.version_name for v in database.versions])

    for enum in database.enums:
        if enum.base not in INTEGER_TYPES:
            raise ValidationError(f"Enum {enum.name} has non-integer base type {enum.base}")
    for bitfield in database.bitfields:
        if bitfield.base not in INTEGER_TYPES:
            raise ValidationError(
                f"Bitfield {bitfield.name} has non-integer base type {bitfield.base}"
            )

    for compound in database.compounds:
        _check_unique(f"vmethod in {compound.name}:", compound.vmethods)

        seen = {compound.name}
        parent = compound.parent
        while parent is not None:
            if parent in seen:
                raise ValidationError(f"Inheritance cycle through {compound.name}")
            base = database.compound(parent)
            if base is None:
                raise ValidationError(f"{compound.name} inherits from unknown type {parent}")
            seen.add(parent)
            parent = base.parent


def parse(text: str) -> StructureDatabase:
    """Parse structure definitions."""
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/structdef.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_parser = Lark(grammar)

    tree = _g_parser.parse(text)
    items = TreeTransformer().transform(tree).children

    database = StructureDatabase(
        compounds=_filter(items, Compound),
        enums=_filter(items, EnumType),
        bitfields=_filter(items, Bitfield),
        globals=_filter(items, GlobalObject),
        versions=_filter(items, VersionInfo),
    )
    validate(database)
    return database


def load(path: str | os.PathLike[str]) -> StructureDatabase:
    """Load a structure database.

    `path` is either a directory of .structdef files (read in name order),
    a single .structdef file, or a JSON snapshot written by `to_json()`.
    """
    source = FilePath(path)
    try:
        if source.is_dir():
            files = sorted(source.glob(f"*{DEFINITION_SUFFIX}"))
            if not files:
                raise DatabaseError(f"No {DEFINITION_SUFFIX} files in {source}")
            text = ""
            for file in files:
                logger.debug("Reading %s", file)
                text += file.read_text(encoding="utf-8") + "\n"
            return parse(text)

        text = source.read_text(encoding="utf-8")
        if source.suffix == ".json":
            database = StructureDatabase.from_json(text)
            validate(database)
            return database
        return parse(text)
    except OSError as e:
        raise DatabaseError(f"Cannot read {source}: {e}") from e
    except LarkError as e:
        # Errors raised inside transformer callbacks arrive wrapped
        orig = getattr(e, "orig_exc", None)
        if isinstance(orig, DatabaseError):
            raise orig from e
        raise DatabaseError(f"Invalid structure definitions in {source}: {e}") from e
    except (ValueError, KeyError, TypeError) as e:
        raise DatabaseError(f"Invalid database snapshot {source}: {e}") from e
