"""Report driver: version selection, preamble and top-level dispatch."""

import logging
import os
from collections.abc import Callable

from memlayout.structures import (
    ABI,
    AbiError,
    MemoryLayout,
    StructureDatabase,
    VersionInfo,
    load,
)

from .flags import evaluate_flag_array
from .formatting import ReportWriter, format_checksum
from .script import FatalError, ScriptElement, load_script
from .section import ResolutionContext, evaluate_section

logger = logging.getLogger(__name__)

MIN_VERSION_ID_SIZE = 4


class UnknownVersionError(FatalError):
    """Raised when the requested version is not in the database."""

    def __init__(self, version_name: str, available: list[str]):
        super().__init__(f'Version "{version_name}" not found')
        self.version_name = version_name
        self.available = available


def select_version(structures: StructureDatabase, version_name: str) -> VersionInfo:
    version = structures.version_by_name(version_name)
    if version is None:
        raise UnknownVersionError(
            version_name, [v.version_name for v in structures.all_versions()]
        )
    return version


def build_context(structures: StructureDatabase, version_name: str) -> ResolutionContext:
    """Resolve the version and ABI and compute the layout for a run."""
    version = select_version(structures, version_name)
    try:
        abi = ABI.from_version_name(version_name)
    except AbiError as e:
        raise FatalError(str(e)) from e
    layout = MemoryLayout(structures, abi)

    if len(version.id) < MIN_VERSION_ID_SIZE:
        raise FatalError(f"Invalid version id, size is too small: {len(version.id)}")
    return ResolutionContext(structures, version, abi, layout)


def write_info(context: ResolutionContext, writer: ReportWriter) -> None:
    writer.begin_section("info")
    writer.emit_raw("checksum", format_checksum(context.version.id))
    writer.emit_raw("version_name", context.version.version_name)
    writer.emit_raw("complete", "true")
    writer.end_section()


def _section(element: ScriptElement, context: ResolutionContext, writer: ReportWriter) -> bool:
    return evaluate_section(element, context, writer)


def _flag_array(element: ScriptElement, context: ResolutionContext, writer: ReportWriter) -> bool:
    return evaluate_flag_array(element, context.structures, writer)


EVALUATORS: dict[str, Callable[[ScriptElement, ResolutionContext, ReportWriter], bool]] = {
    "section": _section,
    "flag-array": _flag_array,
}


def write_elements(
    script: ScriptElement, context: ResolutionContext, writer: ReportWriter
) -> bool:
    """Evaluate every top-level element of a script; return False if any failed."""
    ok = True
    for element in script.children:
        writer.begin_section(element.name)
        evaluate = EVALUATORS.get(element.tag)
        if evaluate is None:
            logger.error("Ignoring unknown tag name: %s", element.tag)
            ok = False
            continue
        if not evaluate(element, context, writer):
            ok = False
        writer.end_section()
    return ok


def write_report(
    structures: StructureDatabase,
    version_name: str,
    script: ScriptElement,
    writer: ReportWriter,
) -> bool:
    """Write a complete report for already loaded inputs."""
    context = build_context(structures, version_name)
    write_info(context, writer)
    return write_elements(script, context, writer)


def run_report(
    database_path: str | os.PathLike[str],
    version_name: str,
    script_path: str | os.PathLike[str],
    writer: ReportWriter,
) -> bool:
    """Load the database and script, then write the report.

    Raises FatalError (or DatabaseError) before anything is written when the
    inputs are unusable.
    """
    structures = load(database_path)
    context = build_context(structures, version_name)
    script = load_script(script_path)
    write_info(context, writer)
    return write_elements(script, context, writer)
