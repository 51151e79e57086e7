"""x86 target — operand and instruction data types (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from . import constants

# ── Operands ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Register:
    index: int


@dataclass(frozen=True)
class StackSlot:
    index: int


@dataclass(frozen=True)
class Memory:
    name: str


@dataclass(frozen=True)
class Immediate:
    value: int


Operand = Union[Register, StackSlot, Memory, Immediate]


def is_memory(operand: Operand) -> bool:
    return isinstance(operand, (StackSlot, Memory))


def is_register(operand: Operand) -> bool:
    return isinstance(operand, Register)


EBX = Register(0)
ECX = Register(1)
ESI = Register(2)
EAX = Register(constants.EAX_INDEX)
EDX = Register(constants.EDX_INDEX)
EBP = Register(constants.EBP_INDEX)
ESP = Register(constants.ESP_INDEX)

# ── Instructions ─────────────────────────────────────────────────


class BinopKind(str, Enum):
    ADD = "add"
    SUB = "sub"
    MUL = "imul"
    AND = "and"
    OR = "or"
    XOR = "xor"
    CMP = "cmp"


@dataclass(frozen=True)
class Mov:
    src: Operand
    dst: Operand


@dataclass(frozen=True)
class Binop:
    """``dst := dst <kind> src`` (AT&T operand order)."""

    kind: BinopKind
    src: Operand
    dst: Operand


@dataclass(frozen=True)
class IDiv:
    divisor: Operand


@dataclass(frozen=True)
class Cltd:
    pass


@dataclass(frozen=True)
class SetCondition:
    suffix: str
    register: Register


@dataclass(frozen=True)
class Push:
    operand: Operand


@dataclass(frozen=True)
class Pop:
    operand: Operand


@dataclass(frozen=True)
class Call:
    target: str


@dataclass(frozen=True)
class Ret:
    pass


@dataclass(frozen=True)
class Meta:
    text: str


X86Instruction = Union[Mov, Binop, IDiv, Cltd, SetCondition, Push, Pop, Call, Ret, Meta]
