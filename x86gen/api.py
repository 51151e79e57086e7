"""Composable API functions for the stack-machine to x86 pipeline.

Each function covers one stage or a whole workflow and is callable
programmatically; build orchestration stays with the caller.
"""

from __future__ import annotations

import logging
import subprocess
import time
from pathlib import Path
from typing import Any, Callable

from .build import build_executable, executable_path
from .codegen import lower
from .compile_types import BuildConfig, CompileResult, CompileStats
from .ir import SMInstruction
from .ir_parser import load_program, parse_program
from .ir_stats import max_stack_depth
from .printer import render_code
from .program import assemble_program, render_program
from .simulator import MachineState, run
from . import constants

logger = logging.getLogger(__name__)


def compile_to_asm(instructions: list[SMInstruction]) -> str:
    """Lower IR instructions and return the complete assembly text.

    Raises:
        CodegenError: If the instruction stream cannot be lowered.
    """
    result = lower(instructions)
    return render_program(result.code, result.environment)


def compile_text(text: str) -> str:
    """Parse stack-machine program text and return the assembly text."""
    return compile_to_asm(parse_program(text))


def simulate(
    instructions: list[SMInstruction], inputs: list[int] | None = None
) -> MachineState:
    """Lower *instructions* and execute the assembled program in the simulator."""
    result = lower(instructions)
    return run(assemble_program(result.code, result.environment), inputs)


def lowering_stats(instructions: list[SMInstruction]) -> CompileStats:
    """Lower and render *instructions*, returning size and timing statistics."""
    t0 = time.perf_counter()
    result = lower(instructions)
    t1 = time.perf_counter()
    program = assemble_program(result.code, result.environment)
    text = render_code(program)
    t2 = time.perf_counter()
    return CompileStats(
        ir_instruction_count=len(instructions),
        max_stack_depth=max_stack_depth(instructions),
        x86_instruction_count=len(result.code),
        asm_lines=text.count("\n"),
        frame_size=result.environment.frame_size(),
        global_count=len(result.environment.globals()),
        lower_time=t1 - t0,
        render_time=t2 - t1,
    )


def compile_file(
    source_path: Path | str,
    config: BuildConfig = BuildConfig(),
    runner: Callable[..., Any] = subprocess.run,
) -> CompileResult:
    """Compile a stack-machine source file to ``<base>.s`` and an executable.

    The program is fully lowered before anything is written, so a lowering
    error leaves no partial output behind.

    Args:
        source_path: The stack-machine program file.
        config: Build settings; ``emit_asm_only`` skips the link step.
        runner: ``subprocess.run``-compatible callable for the build step.

    Returns:
        A CompileResult with the assembly text and build outcome.

    Raises:
        ValueError: If the source has no extension or is itself a ``.s`` file,
            since the executable or the assembly would overwrite it.
    """
    source_path = Path(source_path)
    if source_path.suffix in ("", constants.ASM_SUFFIX):
        raise ValueError(
            f"Source '{source_path}' needs an extension other than "
            f"'{constants.ASM_SUFFIX}' so the outputs do not overwrite it"
        )
    assembly = compile_to_asm(load_program(source_path))

    asm_path = source_path.with_suffix(constants.ASM_SUFFIX)
    asm_path.write_text(assembly)
    logger.info("Wrote %s", asm_path)

    if config.emit_asm_only:
        return CompileResult(assembly=assembly, asm_path=str(asm_path))

    build = build_executable(asm_path, config, runner=runner)
    return CompileResult(
        assembly=assembly,
        asm_path=str(asm_path),
        executable_path=str(executable_path(asm_path)) if build.success else None,
        build=build,
    )
