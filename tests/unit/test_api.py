"""Tests for the composable API functions in x86gen.api."""

import pytest

from x86gen.api import compile_file, compile_text, compile_to_asm, simulate
from x86gen.codegen import UnknownOperatorError
from x86gen.compile_types import BuildConfig
from x86gen.environment import StackUnderflowError
from x86gen.ir import binop, const, write
from x86gen.ir_parser import IRParsingError

SOURCE = "READ\nREAD\nBINOP *\nWRITE\n"


class RecordingRunner:
    def __init__(self, returncode: int = 0):
        self.commands = []
        self.returncode = returncode

    def __call__(self, command, **kwargs):
        self.commands.append(command)
        return type("Completed", (), {"returncode": self.returncode, "stderr": ""})()


class TestCompileToAsm:
    def test_returns_newline_terminated_text(self):
        text = compile_to_asm([const(1), write()])
        assert text.endswith("\tret\n")

    def test_underflow_aborts(self):
        with pytest.raises(StackUnderflowError):
            compile_to_asm([write()])

    def test_unknown_operator_aborts(self):
        with pytest.raises(UnknownOperatorError):
            compile_text("CONST 1\nCONST 2\nBINOP ^\n")

    def test_oversized_constant_aborts(self):
        with pytest.raises(IRParsingError):
            compile_text("CONST 99999999999\nWRITE\n")


class TestSimulate:
    def test_runs_assembled_program(self):
        assert simulate([const(6), const(7), binop("*"), write()]).output == [42]


class TestCompileFile:
    def test_emit_asm_only_writes_assembly(self, tmp_path):
        source = tmp_path / "prog.sm"
        source.write_text(SOURCE)
        result = compile_file(source, BuildConfig(emit_asm_only=True))
        asm = tmp_path / "prog.s"
        assert result.asm_path == str(asm)
        assert asm.read_text() == result.assembly
        assert result.build is None
        assert result.success

    def test_invokes_build_once(self, tmp_path):
        source = tmp_path / "prog.sm"
        source.write_text(SOURCE)
        runner = RecordingRunner()
        result = compile_file(source, BuildConfig(runtime_dir="/rt"), runner=runner)
        assert len(runner.commands) == 1
        assert runner.commands[0][-1] == str(tmp_path / "prog.s")
        assert result.executable_path == str(tmp_path / "prog")
        assert result.success

    def test_failed_build_has_no_executable(self, tmp_path):
        source = tmp_path / "prog.sm"
        source.write_text(SOURCE)
        result = compile_file(
            source, BuildConfig(runtime_dir="/rt"), runner=RecordingRunner(returncode=1)
        )
        assert not result.success
        assert result.executable_path is None

    def test_lowering_error_writes_nothing(self, tmp_path):
        source = tmp_path / "bad.sm"
        source.write_text("CONST 1\nBINOP +\n")
        with pytest.raises(StackUnderflowError):
            compile_file(source, BuildConfig(emit_asm_only=True))
        assert not (tmp_path / "bad.s").exists()

    def test_source_without_extension_is_refused(self, tmp_path):
        source = tmp_path / "prog"
        source.write_text(SOURCE)
        runner = RecordingRunner()
        with pytest.raises(ValueError, match="extension"):
            compile_file(source, BuildConfig(runtime_dir="/rt"), runner=runner)
        assert runner.commands == []
        assert source.read_text() == SOURCE

    def test_assembly_source_is_not_overwritten(self, tmp_path):
        source = tmp_path / "prog.s"
        source.write_text(SOURCE)
        with pytest.raises(ValueError):
            compile_file(source, BuildConfig(emit_asm_only=True))
        assert source.read_text() == SOURCE
