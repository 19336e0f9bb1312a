"""Tests for flag-array evaluation."""

import logging

from memlayout.report.flags import combine_flags, evaluate_flag_array
from memlayout.report.script import ScriptElement


def flag_array(bitfield, *flags):
    children = tuple(ScriptElement("flag", {"name": name, "flags": value}) for name, value in flags)
    return ScriptElement("flag-array", {"name": "flags", "bitfield": bitfield}, children)


def describe_combine_flags():
    def ors_single_bit_flags(database, expect):
        bitfield = database.find_bitfield("UnitFlags")
        expect(combine_flags(bitfield, "moving|dead")) == (0x5, True)
        expect(combine_flags(bitfield, "caged")) == (0x40, True)

    def treats_empty_flags_as_zero(database, expect):
        bitfield = database.find_bitfield("UnitFlags")
        expect(combine_flags(bitfield, "")) == (0, True)

    def skips_wide_flags_but_keeps_siblings(database, caplog, expect):
        bitfield = database.find_bitfield("UnitFlags")
        with caplog.at_level(logging.ERROR):
            expect(combine_flags(bitfield, "moving|mood|inactive")) == (0x3, False)
        expect("mood is not a single bit flag." in caplog.text) == True

    def skips_unknown_flags(database, caplog, expect):
        bitfield = database.find_bitfield("UnitFlags")
        with caplog.at_level(logging.ERROR):
            expect(combine_flags(bitfield, "dead|flying")) == (0x4, False)
        expect("Unknown flag value flying in UnitFlags." in caplog.text) == True


def describe_evaluate_flag_array():
    def emits_ordinal_table(database, writer, output, expect):
        ok = evaluate_flag_array(
            flag_array("UnitFlags", ("Moving and dead", "moving|dead"), ("Caged", "caged")),
            database,
            writer,
        )
        expect(ok) == True
        expect(output.getvalue()) == (
            "size=2\n"
            '1\\name="Moving and dead"\n'
            "1\\value=0x00000005\n"
            '2\\name="Caged"\n'
            "2\\value=0x00000040\n"
        )

    def keeps_combinations_with_invalid_flags(database, writer, output, expect):
        ok = evaluate_flag_array(flag_array("UnitFlags", ("Odd", "moving|mood")), database, writer)
        expect(ok) == False
        expect(output.getvalue()) == 'size=1\n1\\name="Odd"\n1\\value=0x00000001\n'

    def emits_zero_for_flag_without_flags(database, writer, output, expect):
        ok = evaluate_flag_array(flag_array("UnitFlags", ("None", "")), database, writer)
        expect(ok) == True
        expect(output.getvalue()) == 'size=1\n1\\name="None"\n1\\value=0x00000000\n'

    def skips_non_flag_children(database, writer, output, caplog, expect):
        element = ScriptElement(
            "flag-array",
            {"name": "flags", "bitfield": "UnitFlags"},
            (ScriptElement("value", {"name": "x"}), ScriptElement("flag", {"name": "D", "flags": "dead"})),
        )
        with caplog.at_level(logging.ERROR):
            ok = evaluate_flag_array(element, database, writer)
        expect(ok) == False
        expect(output.getvalue()) == 'size=1\n1\\name="D"\n1\\value=0x00000004\n'
        expect("invalid tagname value in flag-array." in caplog.text) == True

    def fails_without_bitfield(database, writer, output, caplog, expect):
        with caplog.at_level(logging.ERROR):
            ok = evaluate_flag_array(flag_array("Ghost", ("A", "a")), database, writer)
        expect(ok) == False
        expect(output.getvalue()) == ""
        expect("Unknown bitfield Ghost." in caplog.text) == True
