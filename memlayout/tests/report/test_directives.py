"""Tests for script loading and directive validation."""

import os

import pytest

from memlayout.report.directives import (
    DirectiveError,
    GlobalDirective,
    OffsetDirective,
    ValueDirective,
    VTableDirective,
    parse_directive,
    parse_int,
)
from memlayout.report.script import ScriptElement, ScriptError, load_script, parse_script

DATA_DIR = os.path.join(os.path.dirname(os.path.realpath(__file__)), "..", "data")


def element(tag, **attributes):
    return ScriptElement(tag, attributes)


def describe_script():
    def loads_elements_in_order(expect):
        script = load_script(os.path.join(DATA_DIR, "layout.xml"))
        expect(script.tag) == "data-definition"
        expect([c.tag for c in script.children]) == ["section", "flag-array"]
        expect(script.children[0].name) == "offsets"
        expect(len(script.children[0].children)) == 9
        expect(script.children[1].attributes["bitfield"]) == "UnitFlags"

    def ignores_comments(expect):
        script = parse_script("<root><!-- note --><section name='a'/></root>")
        expect(len(script.children)) == 1

    def rejects_malformed_documents():
        with pytest.raises(ScriptError):
            load_script(os.path.join(DATA_DIR, "malformed.xml"))

    def rejects_missing_files():
        with pytest.raises(ScriptError):
            load_script(os.path.join(DATA_DIR, "missing.xml"))


def describe_parse_directive():
    def builds_offset_directive(expect):
        directive = parse_directive(element("offset", name="o", type="Unit", member="pos.x"))
        expect(directive) == OffsetDirective("o", "Unit", "pos.x")

    def builds_enum_value_directive(expect):
        directive = parse_directive(element("value", name="v", enum="E", value="A"))
        expect(directive) == ValueDirective("v", enum_name="E", value_name="A")

    def builds_literal_value_directive(expect):
        directive = parse_directive(element("value", name="v", value="0x10"))
        expect(directive) == ValueDirective("v", literal=16)

    def defaults_missing_literal_to_zero(expect):
        expect(parse_directive(element("value", name="v"))) == ValueDirective("v", literal=0)
        expect(parse_directive(element("value", name="v", value="abc")).literal) == 0

    def builds_global_and_vtable_directives(expect):
        expect(parse_directive(element("global", name="g", object="world"))) == GlobalDirective(
            "g", "world"
        )
        expect(parse_directive(element("vtable", name="t", type="Item"))) == VTableDirective(
            "t", "Item"
        )

    def rejects_unknown_tags(expect):
        with pytest.raises(DirectiveError) as e:
            parse_directive(element("bogus", name="b"))
        expect(str(e.value)) == "Invalid tag name: bogus."

    @pytest.mark.parametrize(
        "tag,attributes",
        [
            ("offset", {"name": "o", "member": "x"}),
            ("offset", {"name": "o", "type": "Unit"}),
            ("size", {"name": "s"}),
            ("vmethod", {"name": "m", "type": "Item"}),
            ("global", {"name": "g"}),
            ("vtable", {"name": "t"}),
            ("value", {"name": "v", "enum": "E"}),
            ("size", {"type": "Unit"}),
        ],
    )
    def rejects_missing_attributes(tag, attributes):
        with pytest.raises(DirectiveError):
            parse_directive(ScriptElement(tag, attributes))


def describe_parse_int():
    def parses_decimal_and_hex(expect):
        expect(parse_int("42")) == 42
        expect(parse_int(" 0x2A ")) == 42
        expect(parse_int("-7")) == -7

    def ignores_trailing_garbage(expect):
        expect(parse_int("12abc")) == 12
        expect(parse_int("0x1Fzz")) == 31

    def falls_back_to_zero(expect):
        expect(parse_int(None)) == 0
        expect(parse_int("")) == 0
        expect(parse_int("0xzz")) == 0
