from __future__ import annotations

import logging
import re
from typing import Iterable, List

from hackasm.code import comp_bits, jump_bits
from hackasm.model import (
    MAX_ADDRESS,
    AddressSymbol,
    AddressValue,
    Compute,
    Instruction,
    Label,
    MalformedInstruction,
    NumericOverflow,
    SourceLine,
)


logger = logging.getLogger(__name__)

LABEL_RE = re.compile(r"^\((.*)\)$")
COMPUTE_RE = re.compile(r"^(?:(?P<dest>[AMD]+)=)?(?P<comp>[^=;]+)(?:;(?P<jump>\w{3}))?$")
NUMBER_RE = re.compile(r"[+-]?\d+")


def _parse_address(operand: str, line_no: int, text: str) -> Instruction:
    if not operand:
        raise MalformedInstruction("Missing address after '@'", line_no, text)
    if NUMBER_RE.fullmatch(operand):
        value = int(operand, 10)
        if not 0 <= value <= MAX_ADDRESS:
            raise NumericOverflow(
                f"Address {value} outside 0..{MAX_ADDRESS}",
                line_no,
                text,
            )
        return AddressValue(value, line_no=line_no, text=text)
    return AddressSymbol(operand, line_no=line_no, text=text)


def _parse_compute(text: str, line_no: int) -> Compute:
    match = COMPUTE_RE.match(text)
    if not match:
        raise MalformedInstruction("Unrecognized instruction", line_no, text)
    dest = match.group("dest") or ""
    if len(set(dest)) != len(dest):
        raise MalformedInstruction(f"Repeated register in destination: {dest}", line_no, text)
    comp = match.group("comp")
    jump = match.group("jump") or ""
    comp_bits(comp, line_no, text)
    jump_bits(jump, line_no, text)
    return Compute(
        dest=dest,
        comp=comp,
        jump=jump,
        line_no=line_no,
        text=text,
    )


def parse_instruction(text: str, line_no: int = 0) -> Instruction:
    """Classify one significant line without consulting any symbol table.

    The checks run in a fixed order: ``@`` address loads, then ``(label)``
    brackets, then the ``dest=comp;jump`` compute form. Symbols are kept by
    name here and only resolved once both symbol passes have run.
    """
    if text.startswith("@"):
        return _parse_address(text[1:], line_no, text)
    label = LABEL_RE.match(text)
    if label:
        return Label(label.group(1), line_no=line_no, text=text)
    return _parse_compute(text, line_no)


def parse_lines(lines: Iterable[SourceLine]) -> List[Instruction]:
    instructions = [parse_instruction(line.text, line.line_no) for line in lines]
    logger.debug("Classified %d instructions", len(instructions))
    return instructions
