from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from hackasm.code import encode, encode_program
from hackasm.model import Instruction
from hackasm.parser import parse_lines
from hackasm.preprocess import significant_lines
from hackasm.symbols import SymbolTable, build_symbol_table


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListingRow:
    rom_address: Optional[int]
    word: Optional[str]
    line_no: int
    text: str


@dataclass
class AssemblyResult:
    instructions: List[Instruction]
    symbols: SymbolTable
    words: List[str]

    def listing(self) -> List[ListingRow]:
        rows: List[ListingRow] = []
        rom_address = 0
        for instr in self.instructions:
            word = encode(instr, self.symbols)
            if word is None:
                rows.append(ListingRow(None, None, instr.line_no, instr.text))
                continue
            rows.append(ListingRow(rom_address, word, instr.line_no, instr.text))
            rom_address += 1
        return rows

    def sorted_symbols(self) -> List[Tuple[str, int]]:
        return sorted(self.symbols.items(), key=lambda item: (item[1], item[0]))


def assemble_program(lines: Iterable[str]) -> AssemblyResult:
    """Run every stage over ``lines`` and keep the intermediate results.

    Stages run strictly in order: comment stripping, classification, the
    label pass, the variable pass, and encoding. The first
    :class:`~hackasm.model.AssemblyError` raised aborts the run.
    """
    source = significant_lines(lines)
    instructions = parse_lines(source)
    symbols = build_symbol_table(instructions)
    words = encode_program(instructions, symbols)
    logger.info("Assembled %d source lines into %d words", len(source), len(words))
    return AssemblyResult(instructions=instructions, symbols=symbols, words=words)


def assemble(lines: Iterable[str]) -> List[str]:
    return assemble_program(lines).words


def format_listing(result: AssemblyResult, source_name: str = "") -> List[str]:
    lines: List[str] = []
    if source_name:
        lines.append(f"// Listing for {source_name}")
        lines.append("")
    lines.append(f"{'ROM':>6}  {'Word':<16}  {'Line':>5}  Source")
    lines.append("-" * 60)
    for row in result.listing():
        addr = f"{row.rom_address:6d}" if row.rom_address is not None else " " * 6
        word = row.word or ""
        lines.append(f"{addr}  {word:<16}  {row.line_no:>5}  {row.text}")
    lines.append("")
    lines.append("// Symbols:")
    for name, address in result.sorted_symbols():
        lines.append(f"//   {name:<24} = {address}")
    return lines
