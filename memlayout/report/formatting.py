"""Report value formatting and the streaming report writer."""

from typing import TextIO

# Report values are machine-word sized and unsigned
_WORD_MASK = (1 << 64) - 1


def format_hex(value: int) -> str:
    """Format a value as 0x + 4 hex digits, or 8 once the high word is set."""
    value &= _WORD_MASK
    width = 8 if value >> 16 else 4
    return f"{value:#0{width + 2}x}"


def format_flag_value(value: int) -> str:
    """Format a flag combination, always 8 hex digits."""
    return f"{value & _WORD_MASK:#010x}"


def format_checksum(version_id: list[int]) -> str:
    return "0x" + "".join(f"{b:02x}" for b in version_id[:4])


class ReportWriter:
    """Write `[section]` headers and `key=value` lines to a text stream."""

    def __init__(self, stream: TextIO):
        self.stream = stream

    def begin_section(self, name: str) -> None:
        self.stream.write(f"[{name}]\n")

    def end_section(self) -> None:
        self.stream.write("\n")

    def emit(self, key: str, value: int) -> None:
        self.stream.write(f"{key}={format_hex(value)}\n")

    def emit_raw(self, key: str, value: str) -> None:
        self.stream.write(f"{key}={value}\n")
