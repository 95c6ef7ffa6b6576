import pytest

from hackasm.model import (
    AddressSymbol,
    AddressValue,
    Compute,
    Label,
    MalformedInstruction,
    NumericOverflow,
    SourceLine,
)
from hackasm.parser import parse_instruction, parse_lines


def test_build_command_to_a_type():
    assert parse_instruction("@2") == AddressValue(2)
    assert parse_instruction("@133") == AddressValue(133)
    assert parse_instruction("@32767") == AddressValue(32767)


def test_address_symbol_accepts_any_non_numeric_text():
    assert parse_instruction("@LOOP") == AddressSymbol("LOOP")
    assert parse_instruction("@sys.init$ret.1") == AddressSymbol("sys.init$ret.1")
    assert parse_instruction("@12abc") == AddressSymbol("12abc")


def test_address_value_out_of_range_overflows():
    with pytest.raises(NumericOverflow) as exc:
        parse_instruction("@32768", line_no=4)
    assert exc.value.line_no == 4
    assert exc.value.text == "@32768"
    with pytest.raises(NumericOverflow):
        parse_instruction("@-1")


def test_bare_at_sign_is_malformed():
    with pytest.raises(MalformedInstruction):
        parse_instruction("@")


def test_labels():
    assert parse_instruction("(LOOP)") == Label("LOOP")
    assert parse_instruction("(a b)") == Label("a b")
    assert parse_instruction("()") == Label("")


def test_build_command_to_c_type():
    assert parse_instruction("D=A") == Compute(dest="D", comp="A", jump="")
    assert parse_instruction("AM=M-1") == Compute(dest="AM", comp="M-1", jump="")
    assert parse_instruction("0;JEQ") == Compute(dest="", comp="0", jump="JEQ")
    assert parse_instruction("D;JGT") == Compute(dest="", comp="D", jump="JGT")
    assert parse_instruction("AMD=D|M;JMP") == Compute(dest="AMD", comp="D|M", jump="JMP")


def test_dest_order_is_kept_as_written():
    assert parse_instruction("DM=D+1").dest == "DM"


@pytest.mark.parametrize(
    "line",
    ["D=", "=A", "DD=A", "X=D", "A=M=D", "D;JM", "D;JMPX", ";JMP"],
)
def test_unparseable_compute_lines_are_malformed(line):
    with pytest.raises(MalformedInstruction) as exc:
        parse_instruction(line, line_no=7)
    assert exc.value.line_no == 7
    assert exc.value.text == line


def test_instructions_carry_position_but_compare_by_syntax():
    instr = parse_instruction("@R1", line_no=12)
    assert instr.line_no == 12
    assert instr.text == "@R1"
    assert instr == AddressSymbol("R1")


def test_parse_lines_preserves_order():
    lines = [SourceLine(1, "@1"), SourceLine(3, "(END)"), SourceLine(4, "0;JMP")]
    instructions = parse_lines(lines)
    assert instructions == [AddressValue(1), Label("END"), Compute("", "0", "JMP")]
    assert [instr.line_no for instr in instructions] == [1, 3, 4]


def test_signed_literals_parse_as_numbers():
    assert parse_instruction("@+5") == AddressValue(5)
    assert parse_instruction("@+0") == AddressValue(0)
    with pytest.raises(NumericOverflow):
        parse_instruction("@+32768")


@pytest.mark.parametrize("line", ["(LOOP", "D=D*A", "M=X", "0;JXX", "D;jmp"])
def test_unknown_mnemonics_fail_during_classification(line):
    with pytest.raises(MalformedInstruction) as exc:
        parse_instruction(line, line_no=5)
    assert exc.value.line_no == 5
    assert exc.value.text == line
