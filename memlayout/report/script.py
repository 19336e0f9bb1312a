"""Layout script documents."""

import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field


class FatalError(RuntimeError):
    """Raised when a report cannot be produced at all."""


class ScriptError(FatalError):
    """Raised when a layout script cannot be read or parsed."""


@dataclass(frozen=True)
class ScriptElement:
    """An element of a layout script: tag, string attributes and element children."""

    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: tuple["ScriptElement", ...] = ()

    @property
    def name(self) -> str:
        return self.attributes.get("name", "")

    @classmethod
    def from_xml(cls, element: ET.Element) -> "ScriptElement":
        return cls(
            tag=element.tag,
            attributes=dict(element.attrib),
            children=tuple(cls.from_xml(child) for child in element if isinstance(child.tag, str)),
        )


def parse_script(text: str | bytes) -> ScriptElement:
    """Parse a layout script from XML text and return its document element."""
    try:
        return ScriptElement.from_xml(ET.fromstring(text))
    except ET.ParseError as e:
        raise ScriptError(f"Failed to parse memory layout xml: {e}") from e


def load_script(path: str | os.PathLike[str]) -> ScriptElement:
    """Load a layout script from an XML file."""
    try:
        with open(path, "rb") as f:
            text = f.read()
    except OSError as e:
        raise ScriptError(f"Cannot read memory layout xml {path}: {e}") from e
    return parse_script(text)
