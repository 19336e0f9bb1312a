"""Evaluation of `flag-array` elements."""

import logging
from dataclasses import dataclass

from memlayout.structures import Bitfield, StructureDatabase

from .formatting import ReportWriter, format_flag_value
from .script import ScriptElement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlagCombination:
    """A named OR of single-bit flags."""

    name: str
    value: int


def combine_flags(bitfield: Bitfield, flags: str) -> tuple[int, bool]:
    """OR together the `|`-separated single-bit flags of a bitfield.

    Unknown or multi-bit flags are logged and left out. Returns the value
    and whether every flag was valid.
    """
    by_name = {flag.name: flag for flag in bitfield.flags}
    value = 0
    ok = True
    for flag_name in flags.split("|") if flags else []:
        flag = by_name.get(flag_name)
        if flag is None:
            logger.error("Unknown flag value %s in %s.", flag_name, bitfield.name)
            ok = False
            continue
        if flag.count != 1:
            logger.error("%s is not a single bit flag.", flag_name)
            ok = False
            continue
        value |= 1 << flag.offset
    return value, ok


def evaluate_flag_array(
    element: ScriptElement, structures: StructureDatabase, writer: ReportWriter
) -> bool:
    """Emit the ordinal-indexed flag table of a flag-array element."""
    bitfield_name = element.attributes.get("bitfield", "")
    bitfield = structures.find_bitfield(bitfield_name)
    if bitfield is None:
        logger.error("Unknown bitfield %s.", bitfield_name)
        return False

    ok = True
    combinations: list[FlagCombination] = []
    for child in element.children:
        if child.tag != "flag":
            logger.error("invalid tagname %s in flag-array.", child.tag)
            ok = False
            continue
        value, flags_ok = combine_flags(bitfield, child.attributes.get("flags", ""))
        ok = ok and flags_ok
        combinations.append(FlagCombination(child.name, value))

    writer.emit_raw("size", str(len(combinations)))
    for i, combination in enumerate(combinations, start=1):
        writer.emit_raw(f"{i}\\name", f'"{combination.name}"')
        writer.emit_raw(f"{i}\\value", format_flag_value(combination.value))
    return ok
