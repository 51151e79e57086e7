"""Tests for AT&T rendering of operands and instructions."""

import pytest

from x86gen.printer import render_code, render_instruction, render_operand
from x86gen.x86_types import (
    EAX,
    EBP,
    EBX,
    EDX,
    ESI,
    ESP,
    Binop,
    BinopKind,
    Call,
    Cltd,
    IDiv,
    Immediate,
    Memory,
    Meta,
    Mov,
    Pop,
    Push,
    Register,
    Ret,
    SetCondition,
    StackSlot,
)


class TestRenderOperand:
    @pytest.mark.parametrize(
        "index, name",
        [(0, "%ebx"), (1, "%ecx"), (2, "%esi"), (3, "%edi"), (4, "%eax"), (5, "%edx"), (6, "%ebp"), (7, "%esp")],
    )
    def test_register_names(self, index, name):
        assert render_operand(Register(index)) == name

    def test_first_slot_is_one_word_below_frame_base(self):
        assert render_operand(StackSlot(0)) == "-4(%ebp)"

    def test_later_slots_step_by_word(self):
        assert render_operand(StackSlot(2)) == "-12(%ebp)"

    def test_memory_is_bare_symbol(self):
        assert render_operand(Memory("global_x")) == "global_x"

    def test_immediate_has_dollar_prefix(self):
        assert render_operand(Immediate(-7)) == "$-7"


class TestRenderInstruction:
    def test_mov(self):
        assert render_instruction(Mov(Immediate(5), EBX)) == "\tmovl\t$5,\t%ebx"

    @pytest.mark.parametrize(
        "kind, mnemonic",
        [
            (BinopKind.ADD, "addl"),
            (BinopKind.SUB, "subl"),
            (BinopKind.MUL, "imull"),
            (BinopKind.AND, "andl"),
            (BinopKind.OR, "orl"),
            (BinopKind.XOR, "xorl"),
            (BinopKind.CMP, "cmpl"),
        ],
    )
    def test_binop_mnemonics(self, kind, mnemonic):
        assert (
            render_instruction(Binop(kind, ESI, StackSlot(0)))
            == f"\t{mnemonic}\t%esi,\t-4(%ebp)"
        )

    def test_idiv(self):
        assert render_instruction(IDiv(StackSlot(1))) == "\tidivl\t-8(%ebp)"

    def test_cltd(self):
        assert render_instruction(Cltd()) == "\tcltd"

    def test_set_uses_byte_register(self):
        assert render_instruction(SetCondition("le", EAX)) == "\tsetle\t%al"
        assert render_instruction(SetCondition("ne", EDX)) == "\tsetne\t%dl"

    def test_push_pop(self):
        assert render_instruction(Push(EBP)) == "\tpushl\t%ebp"
        assert render_instruction(Pop(ESP)) == "\tpopl\t%esp"

    def test_call_and_ret(self):
        assert render_instruction(Call("Lwrite")) == "\tcall\tLwrite"
        assert render_instruction(Ret()) == "\tret"

    def test_meta_passes_through(self):
        assert render_instruction(Meta("main:")) == "main:"

    def test_unknown_instruction_raises(self):
        with pytest.raises(TypeError):
            render_instruction("movl")


class TestRenderCode:
    def test_one_line_per_instruction(self):
        text = render_code([Meta("# CONST 1"), Mov(Immediate(1), EBX)])
        assert text == "# CONST 1\n\tmovl\t$1,\t%ebx\n"

    def test_empty(self):
        assert render_code([]) == ""
