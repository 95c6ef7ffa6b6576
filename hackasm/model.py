from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union


MAX_ADDRESS = 0x7FFF
WORD_WIDTH = 16


class AssemblyError(Exception):
    def __init__(self, message: str, line_no: Optional[int] = None, text: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.line_no = line_no
        self.text = text

    def __str__(self) -> str:
        if self.line_no:
            return f"line {self.line_no}: {self.message}: {self.text}"
        return self.message


class MalformedInstruction(AssemblyError):
    pass


class UndefinedSymbol(AssemblyError):
    pass


class NumericOverflow(AssemblyError):
    pass


@dataclass(frozen=True)
class SourceLine:
    line_no: int
    text: str


@dataclass(frozen=True)
class AddressValue:
    value: int
    line_no: int = field(default=0, compare=False)
    text: str = field(default="", compare=False)


@dataclass(frozen=True)
class AddressSymbol:
    name: str
    line_no: int = field(default=0, compare=False)
    text: str = field(default="", compare=False)


@dataclass(frozen=True)
class Label:
    name: str
    line_no: int = field(default=0, compare=False)
    text: str = field(default="", compare=False)


@dataclass(frozen=True)
class Compute:
    dest: str
    comp: str
    jump: str
    line_no: int = field(default=0, compare=False)
    text: str = field(default="", compare=False)


Instruction = Union[AddressValue, AddressSymbol, Label, Compute]
