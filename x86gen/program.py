"""Section assembler — wraps generated code into a complete ``main`` program."""

from __future__ import annotations

from .environment import Environment, location_of
from .printer import render_code
from .x86_types import (
    EAX,
    EBP,
    ESP,
    Binop,
    BinopKind,
    Immediate,
    Meta,
    Mov,
    Pop,
    Push,
    Ret,
    X86Instruction,
)
from . import constants


def data_section(global_names: tuple[str, ...]) -> list[X86Instruction]:
    """One zero-initialised word per global, in discovery order."""
    return [Meta("\t.data")] + [
        Meta(f"{location_of(name).name}:\t.int\t0") for name in global_names
    ]


def prologue(frame_size: int) -> list[X86Instruction]:
    return [
        Push(EBP),
        Mov(ESP, EBP),
        Binop(BinopKind.SUB, Immediate(frame_size * constants.WORD_SIZE), ESP),
    ]


def epilogue() -> list[X86Instruction]:
    return [
        Binop(BinopKind.XOR, EAX, EAX),
        Mov(EBP, ESP),
        Pop(EBP),
        Ret(),
    ]


def assemble_program(
    code: list[X86Instruction], environment: Environment
) -> list[X86Instruction]:
    return [
        Meta(f"\t.global\t{constants.ENTRY_LABEL}"),
        *data_section(environment.globals()),
        Meta("\t.text"),
        Meta(f"{constants.ENTRY_LABEL}:"),
        *prologue(environment.frame_size()),
        *code,
        *epilogue(),
    ]


def render_program(code: list[X86Instruction], environment: Environment) -> str:
    return render_code(assemble_program(code, environment))
