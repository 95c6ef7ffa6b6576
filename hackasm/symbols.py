from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from hackasm.model import AddressSymbol, Instruction, Label, UndefinedSymbol


logger = logging.getLogger(__name__)

PREDEFINED_SYMBOLS: Dict[str, int] = {
    "SP": 0,
    "LCL": 1,
    "ARG": 2,
    "THIS": 3,
    "THAT": 4,
    **{f"R{i}": i for i in range(16)},
    "SCREEN": 0x4000,
    "KBD": 0x6000,
}

VARIABLE_BASE = 16


class SymbolTable:
    """Name to address bindings for one assembly run.

    Addresses are write-once: a name keeps the first address it is given.
    The table starts out holding the predefined symbols and is frozen once
    both passes are done, after which it only answers lookups.
    """

    def __init__(self) -> None:
        self._symbols: Dict[str, int] = dict(PREDEFINED_SYMBOLS)
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def add_entry(self, symbol: str, address: int) -> None:
        if self._frozen:
            raise ValueError(f"Symbol table is frozen; cannot add {symbol!r}")
        if symbol in self._symbols:
            raise ValueError(f"Symbol {symbol!r} is already bound to {self._symbols[symbol]}")
        self._symbols[symbol] = address

    def contains(self, symbol: str) -> bool:
        return symbol in self._symbols

    def get_address(self, symbol: str) -> Optional[int]:
        return self._symbols.get(symbol)

    def resolve(self, symbol: str, line_no: Optional[int] = None, text: str = "") -> int:
        address = self._symbols.get(symbol)
        if address is None:
            raise UndefinedSymbol(f"Undefined symbol: {symbol}", line_no, text)
        return address

    def items(self) -> List[Tuple[str, int]]:
        return list(self._symbols.items())

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._symbols

    def __iter__(self) -> Iterator[str]:
        return iter(self._symbols)

    def __len__(self) -> int:
        return len(self._symbols)


def record_labels(instructions: Iterable[Instruction], table: SymbolTable) -> int:
    rom_address = 0
    for instr in instructions:
        if isinstance(instr, Label):
            if table.contains(instr.name):
                logger.warning(
                    "line %s: label %r already bound to %s; ignoring redefinition",
                    instr.line_no,
                    instr.name,
                    table.get_address(instr.name),
                )
                continue
            table.add_entry(instr.name, rom_address)
            continue
        rom_address += 1
    return rom_address


def record_variables(instructions: Iterable[Instruction], table: SymbolTable) -> int:
    ram_address = VARIABLE_BASE
    for instr in instructions:
        if isinstance(instr, AddressSymbol) and not table.contains(instr.name):
            table.add_entry(instr.name, ram_address)
            ram_address += 1
    return ram_address - VARIABLE_BASE


def build_symbol_table(instructions: Iterable[Instruction]) -> SymbolTable:
    instructions = list(instructions)
    table = SymbolTable()
    rom_size = record_labels(instructions, table)
    variable_count = record_variables(instructions, table)
    table.freeze()
    logger.debug("Resolved %d symbols (%d ROM words, %d variables)", len(table), rom_size, variable_count)
    return table
