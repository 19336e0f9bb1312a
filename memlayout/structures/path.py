"""Qualified name parsing for types, members and globals."""

import re

PathItem = str | int
Path = tuple[PathItem, ...]

_TOKEN = re.compile(r"(?P<ident>[A-Za-z_][A-Za-z0-9_]*)|\[(?P<index>[0-9]+)\]|(?P<sep>[./])")


class MalformedPath(ValueError):
    """Raised when a qualified name does not follow the path syntax."""


def parse_path(text: str) -> Path:
    """Parse `a.b[3]/c` into ("a", "b", 3, "c").

    Identifiers are separated by `.` or `/`; `[N]` indexes the preceding item.
    """
    items: list[PathItem] = []
    expect_ident = True
    pos = 0

    while pos < len(text):
        match = _TOKEN.match(text, pos)
        if match is None:
            raise MalformedPath(f"unexpected character {text[pos]!r} at {pos} in {text!r}")
        if match.group("ident") is not None:
            if not expect_ident:
                raise MalformedPath(f"missing separator before {match.group('ident')!r} in {text!r}")
            items.append(match.group("ident"))
            expect_ident = False
        elif match.group("index") is not None:
            if expect_ident:
                raise MalformedPath(f"index without a name in {text!r}")
            items.append(int(match.group("index")))
        else:
            if expect_ident:
                raise MalformedPath(f"empty name in {text!r}")
            expect_ident = True
        pos = match.end()

    if not items:
        raise MalformedPath("empty path")
    if expect_ident:
        raise MalformedPath(f"trailing separator in {text!r}")
    return tuple(items)


def format_path(path: Path) -> str:
    """Render a parsed path back to dotted text."""
    text = ""
    for item in path:
        if isinstance(item, int):
            text += f"[{item}]"
        elif text:
            text += f".{item}"
        else:
            text = item
    return text
