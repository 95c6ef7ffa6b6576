from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from hackasm.model import (
    MAX_ADDRESS,
    WORD_WIDTH,
    AddressSymbol,
    AddressValue,
    Compute,
    Instruction,
    Label,
    MalformedInstruction,
    NumericOverflow,
)
from hackasm.symbols import SymbolTable


logger = logging.getLogger(__name__)

COMPUTE_PREFIX = "111"

DEST_CODES: Dict[str, str] = {
    "": "000",
    "M": "001",
    "D": "010",
    "MD": "011",
    "A": "100",
    "AM": "101",
    "AD": "110",
    "AMD": "111",
}

JUMP_CODES: Dict[str, str] = {
    "": "000",
    "JGT": "001",
    "JEQ": "010",
    "JGE": "011",
    "JLT": "100",
    "JNE": "101",
    "JLE": "110",
    "JMP": "111",
}

COMP_CODES: Dict[str, str] = {
    "0": "0101010",
    "1": "0111111",
    "-1": "0111010",
    "D": "0001100",
    "A": "0110000",
    "!D": "0001101",
    "!A": "0110001",
    "-D": "0001111",
    "-A": "0110011",
    "D+1": "0011111",
    "A+1": "0110111",
    "D-1": "0001110",
    "A-1": "0110010",
    "D+A": "0000010",
    "D-A": "0010011",
    "A-D": "0000111",
    "D&A": "0000000",
    "D|A": "0010101",
    "M": "1110000",
    "!M": "1110001",
    "-M": "1110011",
    "M+1": "1110111",
    "M-1": "1110010",
    "D+M": "1000010",
    "D-M": "1010011",
    "M-D": "1000111",
    "D&M": "1000000",
    "D|M": "1010101",
}

DEST_ORDER = "AMD"


def canonical_dest(dest: str) -> str:
    return "".join(reg for reg in DEST_ORDER if reg in dest)


def dest_bits(dest: str, line_no: Optional[int] = None, text: str = "") -> str:
    # registers may be listed in any order, each at most once
    if len(set(dest)) != len(dest) or not set(dest) <= set(DEST_ORDER):
        raise MalformedInstruction(f"Unknown destination: {dest}", line_no, text)
    return DEST_CODES[canonical_dest(dest)]


def comp_bits(comp: str, line_no: Optional[int] = None, text: str = "") -> str:
    bits = COMP_CODES.get(comp)
    if bits is None:
        raise MalformedInstruction(f"Unknown computation: {comp}", line_no, text)
    return bits


def jump_bits(jump: str, line_no: Optional[int] = None, text: str = "") -> str:
    bits = JUMP_CODES.get(jump)
    if bits is None:
        raise MalformedInstruction(f"Unknown jump: {jump}", line_no, text)
    return bits


def address_word(address: int, line_no: Optional[int] = None, text: str = "") -> str:
    if not 0 <= address <= MAX_ADDRESS:
        raise NumericOverflow(f"Address {address} outside 0..{MAX_ADDRESS}", line_no, text)
    return format(address, f"0{WORD_WIDTH}b")


def compute_word(dest: str, comp: str, jump: str, line_no: Optional[int] = None, text: str = "") -> str:
    return (
        COMPUTE_PREFIX
        + comp_bits(comp, line_no, text)
        + dest_bits(dest, line_no, text)
        + jump_bits(jump, line_no, text)
    )


def encode(instr: Instruction, table: SymbolTable) -> Optional[str]:
    """Return the 16-bit word for ``instr``, or ``None`` for a label."""
    if isinstance(instr, Label):
        return None
    if isinstance(instr, AddressValue):
        return address_word(instr.value, instr.line_no, instr.text)
    if isinstance(instr, AddressSymbol):
        address = table.resolve(instr.name, instr.line_no, instr.text)
        return address_word(address, instr.line_no, instr.text)
    if isinstance(instr, Compute):
        return compute_word(instr.dest, instr.comp, instr.jump, instr.line_no, instr.text)
    raise TypeError(f"Not an instruction: {instr!r}")


def encode_program(instructions: Iterable[Instruction], table: SymbolTable) -> List[str]:
    words: List[str] = []
    for instr in instructions:
        word = encode(instr, table)
        if word is not None:
            words.append(word)
    logger.debug("Encoded %d words", len(words))
    return words
