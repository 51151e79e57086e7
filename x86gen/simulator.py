"""Machine simulator — executes generated x86 instructions without an assembler.

Models the register file, a word-addressed stack memory, named globals,
the flags of the last flag-setting instruction and the two runtime
routines (``Lread`` / ``Lwrite``).  Arithmetic wraps at 32 bits and
``idivl`` truncates toward zero, matching the hardware.

The runtime calls are modelled as preserving every register except
%eax.  Under cdecl a real callee may also clobber %ecx and %edx, so a
value kept in %ecx across READ or WRITE survives here but not
necessarily on hardware.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from .printer import slot_displacement
from .x86_types import (
    EAX,
    EDX,
    Binop,
    BinopKind,
    Call,
    Cltd,
    IDiv,
    Immediate,
    Memory,
    Meta,
    Mov,
    Operand,
    Pop,
    Push,
    Register,
    Ret,
    SetCondition,
    StackSlot,
    X86Instruction,
)
from . import constants

logger = logging.getLogger(__name__)

STACK_TOP = 0x10000
FRAME_BASE = STACK_TOP - constants.WORD_SIZE


class SimulationError(Exception):
    """Raised when the simulated program faults."""

    pass


def wrap32(value: int) -> int:
    """Reduce *value* to a signed 32-bit integer."""
    return ((value + 2**31) % 2**32) - 2**31


# ── Data types ───────────────────────────────────────────────────


@dataclass
class MachineState:
    registers: list[int] = field(
        default_factory=lambda: [0] * len(constants.REGISTER_NAMES)
    )
    stack: dict[int, int] = field(default_factory=dict)
    globals: dict[str, int] = field(default_factory=dict)
    # (left, right) of the last flag-setting instruction; cc tests left ? right
    flags: tuple[int, int] = (0, 0)
    inputs: list[int] = field(default_factory=list)
    output: list[int] = field(default_factory=list)
    halted: bool = False
    steps: int = 0

    def __post_init__(self):
        self.registers[constants.ESP_INDEX] = STACK_TOP
        self.registers[constants.EBP_INDEX] = FRAME_BASE

    def register(self, reg: Register) -> int:
        return self.registers[reg.index]

    def slot(self, index: int) -> int:
        """Value of a spill slot in the frame set up by the standard prologue."""
        return self.stack.get(FRAME_BASE + slot_displacement(index), 0)

    @property
    def exit_code(self) -> int:
        return self.registers[constants.EAX_INDEX]


# ── Operand access ───────────────────────────────────────────────


def _read(state: MachineState, operand: Operand) -> int:
    match operand:
        case Register(index):
            return state.registers[index]
        case StackSlot(index):
            address = state.registers[constants.EBP_INDEX] + slot_displacement(index)
            return state.stack.get(address, 0)
        case Memory(name):
            return state.globals.get(name, 0)
        case Immediate(value):
            return wrap32(value)
    raise SimulationError(f"Cannot read operand {operand!r}")


def _write(state: MachineState, operand: Operand, value: int):
    value = wrap32(value)
    match operand:
        case Register(index):
            state.registers[index] = value
        case StackSlot(index):
            address = state.registers[constants.EBP_INDEX] + slot_displacement(index)
            state.stack[address] = value
        case Memory(name):
            state.globals[name] = value
        case _:
            raise SimulationError(f"Cannot write operand {operand!r}")


def _push(state: MachineState, value: int):
    state.registers[constants.ESP_INDEX] -= constants.WORD_SIZE
    state.stack[state.registers[constants.ESP_INDEX]] = wrap32(value)


def _pop(state: MachineState) -> int:
    value = state.stack.get(state.registers[constants.ESP_INDEX], 0)
    state.registers[constants.ESP_INDEX] += constants.WORD_SIZE
    return value


# ── Semantics ────────────────────────────────────────────────────

BINOP_TABLE: dict[BinopKind, Callable[[int, int], int]] = {
    BinopKind.ADD: lambda dst, src: dst + src,
    BinopKind.SUB: lambda dst, src: dst - src,
    BinopKind.MUL: lambda dst, src: dst * src,
    BinopKind.AND: lambda dst, src: dst & src,
    BinopKind.OR: lambda dst, src: dst | src,
    BinopKind.XOR: lambda dst, src: dst ^ src,
}

CONDITION_TABLE: dict[str, Callable[[int, int], bool]] = {
    "l": lambda a, b: a < b,
    "le": lambda a, b: a <= b,
    "e": lambda a, b: a == b,
    "ne": lambda a, b: a != b,
    "ge": lambda a, b: a >= b,
    "g": lambda a, b: a > b,
}


def _call(state: MachineState, target: str):
    if target == constants.READ_ROUTINE:
        if not state.inputs:
            raise SimulationError("Lread: input exhausted")
        _write(state, EAX, state.inputs.pop(0))
    elif target == constants.WRITE_ROUTINE:
        state.output.append(state.stack.get(state.registers[constants.ESP_INDEX], 0))
        _write(state, EAX, 0)
    else:
        raise SimulationError(f"Call to unknown routine: {target}")


def _divide(state: MachineState, divisor: int):
    if divisor == 0:
        raise SimulationError("Division by zero")
    dividend = (state.register(EDX) << 32) | (state.register(EAX) & 0xFFFFFFFF)
    quotient = abs(dividend) // abs(divisor)
    if (dividend < 0) != (divisor < 0):
        quotient = -quotient
    _write(state, EAX, quotient)
    _write(state, EDX, dividend - quotient * divisor)


def step(state: MachineState, instruction: X86Instruction):
    """Execute a single instruction against *state*."""
    match instruction:
        case Mov(src, dst):
            _write(state, dst, _read(state, src))
        case Binop(BinopKind.CMP, src, dst):
            state.flags = (_read(state, dst), _read(state, src))
        case Binop(kind, src, dst):
            result = wrap32(BINOP_TABLE[kind](_read(state, dst), _read(state, src)))
            _write(state, dst, result)
            state.flags = (result, 0)
        case IDiv(divisor):
            _divide(state, _read(state, divisor))
        case Cltd():
            _write(state, EDX, -1 if state.register(EAX) < 0 else 0)
        case SetCondition(suffix, register):
            test = CONDITION_TABLE.get(suffix)
            if test is None:
                raise SimulationError(f"Unknown condition suffix: {suffix}")
            bit = 1 if test(*state.flags) else 0
            _write(state, register, (state.register(register) & ~0xFF) | bit)
        case Push(operand):
            _push(state, _read(state, operand))
        case Pop(operand):
            _write(state, operand, _pop(state))
        case Call(target):
            _call(state, target)
        case Ret():
            state.halted = True
        case Meta():
            pass
        case _:
            raise SimulationError(f"Cannot execute {instruction!r}")


def _entry_index(code: list[X86Instruction]) -> int:
    """Index just past the ``main:`` label, or 0 when there is none."""
    entry = Meta(f"{constants.ENTRY_LABEL}:")
    return code.index(entry) + 1 if entry in code else 0


def run(code: list[X86Instruction], inputs: list[int] | None = None) -> MachineState:
    """Execute *code* from the ``main:`` label until ``ret`` or the end of the list."""
    state = MachineState(inputs=list(inputs or []))
    for instruction in code[_entry_index(code):]:
        if state.halted:
            break
        step(state, instruction)
        state.steps += 1
    logger.debug(
        "Simulation finished after %d steps, output=%s", state.steps, state.output
    )
    return state
