"""Instruction printer — renders x86 instructions as AT&T assembly text."""

from __future__ import annotations

from .x86_types import (
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

BINOP_MNEMONICS: dict[BinopKind, str] = {
    BinopKind.ADD: "addl",
    BinopKind.SUB: "subl",
    BinopKind.MUL: "imull",
    BinopKind.AND: "andl",
    BinopKind.OR: "orl",
    BinopKind.XOR: "xorl",
    BinopKind.CMP: "cmpl",
}


def slot_displacement(index: int) -> int:
    """Byte offset of a stack slot relative to %ebp."""
    return -(index + 1) * constants.WORD_SIZE


def render_operand(operand: Operand) -> str:
    match operand:
        case Register(index):
            return constants.REGISTER_NAMES[index]
        case StackSlot(index):
            return f"{slot_displacement(index)}(%ebp)"
        case Memory(name):
            return name
        case Immediate(value):
            return f"${value}"
    raise TypeError(f"Not an operand: {operand!r}")


def render_instruction(instruction: X86Instruction) -> str:
    match instruction:
        case Mov(src, dst):
            return f"\tmovl\t{render_operand(src)},\t{render_operand(dst)}"
        case Binop(kind, src, dst):
            return (
                f"\t{BINOP_MNEMONICS[kind]}\t"
                f"{render_operand(src)},\t{render_operand(dst)}"
            )
        case IDiv(divisor):
            return f"\tidivl\t{render_operand(divisor)}"
        case Cltd():
            return "\tcltd"
        case SetCondition(suffix, Register(index)):
            return f"\tset{suffix}\t{constants.BYTE_REGISTER_NAMES[index]}"
        case Push(operand):
            return f"\tpushl\t{render_operand(operand)}"
        case Pop(operand):
            return f"\tpopl\t{render_operand(operand)}"
        case Call(target):
            return f"\tcall\t{target}"
        case Ret():
            return "\tret"
        case Meta(text):
            return text
    raise TypeError(f"Not an instruction: {instruction!r}")


def render_code(code: list[X86Instruction]) -> str:
    """Render an instruction list, one line per instruction, newline-terminated."""
    return "".join(f"{render_instruction(inst)}\n" for inst in code)
