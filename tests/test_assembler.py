import pytest

from hackasm.assembler import assemble, assemble_program, format_listing
from hackasm.model import AssemblyError, MalformedInstruction, NumericOverflow


LOOP_WORDS = [
    "0000000000000000",
    "1111110000010000",
    "0000000000000100",
    "1110001100000110",
    "1110001100001000",
    "0000000000010000",
]


def test_binary_code_from_assembly_code():
    lines = [
        "// this",
        "\n\n",
        "// is",
        "// a comment.",
        "\n",
        "@2",
        "D=A",
        "@3",
        "D=D+A",
        "@0",
        "M=D",
    ]
    assert assemble(lines) == [
        "0000000000000010",
        "1110110000010000",
        "0000000000000011",
        "1110000010010000",
        "0000000000000000",
        "1110001100001000",
    ]


def test_labels_and_variables_resolve(loop_source):
    result = assemble_program(loop_source)
    assert result.words == LOOP_WORDS
    assert result.symbols.resolve("LOOP") == 4
    assert result.symbols.resolve("counter") == 16
    assert result.symbols.frozen


def test_every_word_is_sixteen_binary_digits(loop_source):
    for word in assemble(loop_source):
        assert len(word) == 16
        assert set(word) <= {"0", "1"}


def test_assembly_is_deterministic(loop_source):
    assert assemble(loop_source) == assemble(loop_source) == LOOP_WORDS


def test_empty_program():
    result = assemble_program(["// nothing here", "   "])
    assert result.words == []
    assert result.instructions == []


def test_errors_report_the_original_line():
    lines = ["// header", "@1", "", "D=Q"]
    with pytest.raises(MalformedInstruction) as exc:
        assemble(lines)
    assert exc.value.line_no == 4
    assert str(exc.value) == "line 4: Unknown computation: Q: D=Q"


def test_first_failure_aborts_assembly():
    with pytest.raises(AssemblyError) as exc:
        assemble(["@99999", "garbage here"])
    assert isinstance(exc.value, NumericOverflow)
    assert exc.value.line_no == 1


def test_listing_rows(loop_source):
    rows = assemble_program(loop_source).listing()
    assert [row.rom_address for row in rows] == [0, 1, 2, 3, None, 4, 5]
    assert rows[4].word is None
    assert rows[4].text == "(LOOP)"
    assert rows[4].line_no == 7
    assert [row.word for row in rows if row.word] == LOOP_WORDS


def test_format_listing_includes_symbols(loop_source):
    text = "\n".join(format_listing(assemble_program(loop_source), "loop.asm"))
    assert "// Listing for loop.asm" in text
    assert "1110001100000110" in text
    assert "LOOP" in text
    assert "counter" in text


def test_sorted_symbols_order_by_address(loop_source):
    symbols = assemble_program(loop_source).sorted_symbols()
    addresses = [address for _, address in symbols]
    assert addresses == sorted(addresses)
    assert ("counter", 16) in symbols


def test_earliest_bad_line_is_reported():
    with pytest.raises(MalformedInstruction) as exc:
        assemble(["(LOOP", "@99999"])
    assert exc.value.line_no == 1
    assert exc.value.text == "(LOOP"
