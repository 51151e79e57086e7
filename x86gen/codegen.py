"""Code generator — lowers stack-machine IR to x86 instructions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from .environment import CodegenError, Environment
from .ir import Opcode, SMInstruction
from .x86_types import (
    EAX,
    EDX,
    Binop,
    BinopKind,
    Call,
    Cltd,
    IDiv,
    Immediate,
    Meta,
    Mov,
    Operand,
    Pop,
    Push,
    Register,
    SetCondition,
    X86Instruction,
    is_memory,
    is_register,
)
from . import constants

logger = logging.getLogger(__name__)


class UnknownOperatorError(CodegenError):
    """Raised when BINOP carries an operator outside the supported families."""

    pass


ARITHMETIC_KINDS: dict[str, BinopKind] = {
    "+": BinopKind.ADD,
    "-": BinopKind.SUB,
}

LOGICAL_KINDS: dict[str, BinopKind] = {
    "&&": BinopKind.AND,
    "!!": BinopKind.OR,
}

COMPARISON_SUFFIXES: dict[str, str] = {
    "<": "l",
    "<=": "le",
    "==": "e",
    "!=": "ne",
    ">=": "ge",
    ">": "g",
}

# ── Staging helpers ──────────────────────────────────────────────


def move(src: Operand, dst: Operand) -> list[X86Instruction]:
    """Copy *src* into *dst*, staging through %eax when both are in memory."""
    if is_memory(src) and is_memory(dst):
        return [Mov(src, EAX), Mov(EAX, dst)]
    return [Mov(src, dst)]


def _binop_staged(
    kind: BinopKind, src: Operand, dst: Operand, scratch: Operand
) -> list[X86Instruction]:
    if is_memory(src) and is_memory(dst):
        return [Mov(src, scratch), Binop(kind, scratch, dst)]
    return [Binop(kind, src, dst)]


def _normalize(operand: Operand, scratch: Register) -> list[X86Instruction]:
    """scratch := operand != 0"""
    return [
        Binop(BinopKind.XOR, scratch, scratch),
        Binop(BinopKind.CMP, Immediate(0), operand),
        SetCondition("ne", scratch),
    ]


# ── Operator families ────────────────────────────────────────────


def _compile_arithmetic(op: str, src: Operand, dst: Operand) -> list[X86Instruction]:
    return _binop_staged(ARITHMETIC_KINDS[op], src, dst, EAX)


def _compile_logical(op: str, src: Operand, dst: Operand) -> list[X86Instruction]:
    return [
        *_normalize(dst, EAX),
        *_normalize(src, EDX),
        Binop(LOGICAL_KINDS[op], EDX, EAX),
        Mov(EAX, dst),
    ]


def _compile_comparison(op: str, src: Operand, dst: Operand) -> list[X86Instruction]:
    # %eax is cleared before the compare since xor clobbers the flags;
    # a memory/memory compare therefore stages through %edx.
    return [
        Binop(BinopKind.XOR, EAX, EAX),
        *_binop_staged(BinopKind.CMP, src, dst, EDX),
        SetCondition(COMPARISON_SUFFIXES[op], EAX),
        Mov(EAX, dst),
    ]


def _compile_multiplicative(
    op: str, src: Operand, dst: Operand
) -> list[X86Instruction]:
    if op == "*":
        if is_register(dst):
            return [Binop(BinopKind.MUL, src, dst)]
        return [Mov(dst, EAX), Binop(BinopKind.MUL, src, EAX), Mov(EAX, dst)]

    result = EAX if op == "/" else EDX
    return [Mov(dst, EAX), Cltd(), IDiv(src), Mov(result, dst)]


_FAMILY_DISPATCH: dict[str, Callable[[str, Operand, Operand], list[X86Instruction]]] = {
    **{op: _compile_arithmetic for op in constants.ARITHMETIC_OPERATORS},
    **{op: _compile_logical for op in constants.LOGICAL_OPERATORS},
    **{op: _compile_comparison for op in constants.COMPARISON_OPERATORS},
    **{op: _compile_multiplicative for op in constants.MULTIPLICATIVE_OPERATORS},
}


def compile_binop(op: str, src: Operand, dst: Operand) -> list[X86Instruction]:
    """Lower ``dst := dst <op> src``; the result is left in *dst*."""
    handler = _FAMILY_DISPATCH.get(op)
    if handler is None:
        raise UnknownOperatorError(f"Unknown binary operator: {op!r}")
    return handler(op, src, dst)


# ── IR instructions ──────────────────────────────────────────────


def _lower_read(
    inst: SMInstruction, env: Environment
) -> tuple[list[X86Instruction], Environment]:
    dst, env = env.allocate()
    return [Call(constants.READ_ROUTINE), Mov(EAX, dst)], env.push(dst)


def _lower_write(
    inst: SMInstruction, env: Environment
) -> tuple[list[X86Instruction], Environment]:
    value, env = env.pop()
    return [Push(value), Call(constants.WRITE_ROUTINE), Pop(EAX)], env


def _lower_const(
    inst: SMInstruction, env: Environment
) -> tuple[list[X86Instruction], Environment]:
    dst, env = env.allocate()
    return [Mov(Immediate(int(inst.operand)), dst)], env.push(dst)


def _lower_ld(
    inst: SMInstruction, env: Environment
) -> tuple[list[X86Instruction], Environment]:
    name = inst.operand
    env = env.add_global(name)
    dst, env = env.allocate()
    return move(env.location_of(name), dst), env.push(dst)


def _lower_st(
    inst: SMInstruction, env: Environment
) -> tuple[list[X86Instruction], Environment]:
    name = inst.operand
    env = env.add_global(name)
    value, env = env.pop()
    return move(value, env.location_of(name)), env


def _lower_binop(
    inst: SMInstruction, env: Environment
) -> tuple[list[X86Instruction], Environment]:
    src, dst, env = env.pop2()
    return compile_binop(inst.operand, src, dst), env.push(dst)


_OPCODE_DISPATCH: dict[
    Opcode,
    Callable[[SMInstruction, Environment], tuple[list[X86Instruction], Environment]],
] = {
    Opcode.READ: _lower_read,
    Opcode.WRITE: _lower_write,
    Opcode.CONST: _lower_const,
    Opcode.LD: _lower_ld,
    Opcode.ST: _lower_st,
    Opcode.BINOP: _lower_binop,
}


def compile_instruction(
    inst: SMInstruction, env: Environment
) -> tuple[list[X86Instruction], Environment]:
    """Lower one IR instruction, preceded by a comment naming it."""
    code, env = _OPCODE_DISPATCH[inst.opcode](inst, env)
    return [Meta(f"{constants.COMMENT_PREFIX}{inst}"), *code], env


# ── Whole-program lowering ───────────────────────────────────────


@dataclass(frozen=True)
class TraceStep:
    """One IR instruction, the code it produced and the environment after it."""

    index: int
    instruction: SMInstruction
    code: list[X86Instruction]
    environment: Environment


@dataclass(frozen=True)
class LoweringResult:
    code: list[X86Instruction] = field(default_factory=list)
    environment: Environment = field(default_factory=Environment)
    steps: list[TraceStep] = field(default_factory=list)


def lower(instructions: list[SMInstruction]) -> LoweringResult:
    """Lower a full instruction stream, threading a fresh environment."""
    env = Environment()
    code: list[X86Instruction] = []
    steps: list[TraceStep] = []
    for i, inst in enumerate(instructions):
        logger.debug("[%d] %s (depth=%d)", i, inst, env.depth)
        emitted, env = compile_instruction(inst, env)
        code.extend(emitted)
        steps.append(TraceStep(i, inst, emitted, env))

    logger.info(
        "Lowered %d IR instructions to %d x86 instructions (frame=%d, globals=%d)",
        len(instructions),
        len(code),
        env.frame_size(),
        len(env.globals()),
    )
    return LoweringResult(code=code, environment=env, steps=steps)
