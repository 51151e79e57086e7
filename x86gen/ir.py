"""IR Design — Linear Stack-Machine Instructions."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel


class Opcode(str, Enum):
    # Value producers
    READ = "READ"
    CONST = "CONST"
    LD = "LD"
    BINOP = "BINOP"
    # Value consumers
    WRITE = "WRITE"
    ST = "ST"


# (pops, pushes) per opcode
_STACK_EFFECTS: dict[Opcode, tuple[int, int]] = {
    Opcode.READ: (0, 1),
    Opcode.WRITE: (1, 0),
    Opcode.CONST: (0, 1),
    Opcode.LD: (0, 1),
    Opcode.ST: (1, 0),
    Opcode.BINOP: (2, 1),
}


class SMInstruction(BaseModel):
    opcode: Opcode
    operands: list[Any] = []

    @property
    def operand(self) -> Any:
        """The single operand of CONST/LD/ST/BINOP."""
        return self.operands[0]

    def stack_effect(self) -> tuple[int, int]:
        return _STACK_EFFECTS[self.opcode]

    def __str__(self) -> str:
        parts = [self.opcode.value]
        parts.extend(str(op) for op in self.operands)
        return " ".join(parts)


def read() -> SMInstruction:
    return SMInstruction(opcode=Opcode.READ)


def write() -> SMInstruction:
    return SMInstruction(opcode=Opcode.WRITE)


def const(value: int) -> SMInstruction:
    return SMInstruction(opcode=Opcode.CONST, operands=[value])


def ld(name: str) -> SMInstruction:
    return SMInstruction(opcode=Opcode.LD, operands=[name])


def st(name: str) -> SMInstruction:
    return SMInstruction(opcode=Opcode.ST, operands=[name])


def binop(operator: str) -> SMInstruction:
    return SMInstruction(opcode=Opcode.BINOP, operands=[operator])
