"""Tests for section directive evaluation."""

import logging

from memlayout.report.script import ScriptElement
from memlayout.report.section import evaluate_section


def section(*children):
    return ScriptElement("section", {"name": "test"}, tuple(children))


def directive(tag, **attributes):
    return ScriptElement(tag, attributes)


def describe_evaluate_section():
    def emits_offsets(context, writer, output, expect):
        ok = evaluate_section(
            section(
                directive("offset", name="prof", type="Unit", member="profession"),
                directive("offset", name="coord_y", type="World.cursor", member="y"),
            ),
            context,
            writer,
        )
        expect(ok) == True
        expect(output.getvalue()) == "prof=0x0020\ncoord_y=0x0002\n"

    def emits_sizes_and_vmethods(context, writer, output, expect):
        ok = evaluate_section(
            section(
                directive("size", name="unit", type="Unit"),
                directive("vmethod", name="get_type", type="ItemWeapon", method="getType"),
                directive("vmethod", name="get_attack", type="ItemWeapon", method="getAttack"),
            ),
            context,
            writer,
        )
        expect(ok) == True
        expect(output.getvalue()) == "unit=0x0060\nget_type=0x0000\nget_attack=0x0018\n"

    def emits_enum_values_like_literals(context, writer, output, expect):
        ok = evaluate_section(
            section(
                directive("value", name="mason", enum="Profession", value="MASON"),
                directive("value", name="ten", value="10"),
                directive("value", name="none", enum="Profession", value="NONE"),
            ),
            context,
            writer,
        )
        expect(ok) == True
        expect(output.getvalue()) == "mason=0x000a\nten=0x000a\nnone=0xffffffffffffffff\n"

    def emits_globals_and_vtables(context, writer, output, expect):
        ok = evaluate_section(
            section(
                directive("global", name="world", object="world"),
                directive("global", name="cursor_z", object="cursor.z"),
                directive("vtable", name="weapon_vtable", type="ItemWeapon"),
            ),
            context,
            writer,
        )
        expect(ok) == True
        expect(output.getvalue()) == (
            "world=0x001a2b3c\ncursor_z=0x2004\nweapon_vtable=0x8840\n"
        )

    def skips_failed_directives_and_continues(context, writer, output, caplog, expect):
        with caplog.at_level(logging.ERROR):
            ok = evaluate_section(
                section(
                    directive("offset", name="prof", type="Unit", member="profession"),
                    directive("offset", name="ghost", type="Ghost", member="field"),
                ),
                context,
                writer,
            )
        expect(ok) == False
        expect(output.getvalue()) == "prof=0x0020\n"
        expect("type Ghost not found for entry ghost." in caplog.text) == True

    def reports_each_failure_kind(context, writer, output, caplog, expect):
        with caplog.at_level(logging.ERROR):
            ok = evaluate_section(
                section(
                    directive("offset", name="bad_type", type="Unit..x", member="pos"),
                    directive("offset", name="bad_member", type="Unit", member="ghost"),
                    directive("size", name="broken", type="Broken"),
                    directive("vmethod", name="missing", type="Item", method="getAttack"),
                    directive("value", name="no_enum", enum="Ghost", value="A"),
                    directive("value", name="no_value", enum="Profession", value="KING"),
                    directive("global", name="no_global", object="gamemode"),
                    directive("global", name="bad_global", object="world..units"),
                    directive("vtable", name="no_vtable", type="Unit"),
                    directive("bogus", name="bogus"),
                    directive("size", name="untyped"),
                    directive("size", name="last", type="Coord"),
                ),
                context,
                writer,
            )
        expect(ok) == False
        expect(output.getvalue()) == "last=0x0006\n"
        messages = [record.getMessage() for record in caplog.records]
        expect(len(messages)) == 11
        expect("Failed to get member ghost offset for bad_member" in caplog.text) == True
        expect("Missing type info for size broken." in caplog.text) == True
        expect("Method getAttack not found for vmethod missing." in caplog.text) == True
        expect("Unknown enum Ghost." in caplog.text) == True
        expect("Unknown enum value KING in Profession." in caplog.text) == True
        expect("Global object gamemode" in caplog.text) == True
        expect("Failed to find vtable for no_vtable." in caplog.text) == True
        expect("Invalid tag name: bogus." in caplog.text) == True
        expect("size untyped need a type." in caplog.text) == True

    def is_repeatable(context, writer, output, expect):
        element = section(directive("offset", name="prof", type="Unit", member="profession"))
        evaluate_section(element, context, writer)
        first = output.getvalue()
        evaluate_section(element, context, writer)
        expect(output.getvalue()) == first * 2
