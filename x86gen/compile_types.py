"""Compile pipeline data types (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass, field

from . import constants


@dataclass(frozen=True)
class BuildConfig:
    """Groups assembler/linker configuration."""

    runtime_dir: str | None = None
    compiler: str = constants.DEFAULT_C_COMPILER
    flags: tuple[str, ...] = constants.DEFAULT_COMPILER_FLAGS
    runtime_object: str = constants.DEFAULT_RUNTIME_OBJECT
    emit_asm_only: bool = False


@dataclass
class BuildResult:
    """Outcome of the external assembler/linker invocation."""

    success: bool
    command: list[str] = field(default_factory=list)
    returncode: int | None = None
    stderr: str = ""


@dataclass
class CompileResult:
    """Result of compiling one stack-machine source file."""

    assembly: str
    asm_path: str
    executable_path: str | None = None
    build: BuildResult | None = None

    @property
    def success(self) -> bool:
        return self.build is None or self.build.success


@dataclass
class CompileStats:
    """Timing and size statistics for each pipeline stage."""

    ir_instruction_count: int = 0
    max_stack_depth: int = 0
    x86_instruction_count: int = 0
    asm_lines: int = 0
    frame_size: int = 0
    global_count: int = 0

    # Stage timings (seconds)
    lower_time: float = 0.0
    render_time: float = 0.0

    def report(self) -> str:
        lines = [
            "═══ Compile Statistics ═══",
            f"  IR: {self.ir_instruction_count} instructions,"
            f" max stack depth {self.max_stack_depth}",
            f"  x86: {self.x86_instruction_count} instructions,"
            f" {self.asm_lines} lines of assembly",
            f"  Frame: {self.frame_size} slots"
            f" ({self.frame_size * constants.WORD_SIZE} bytes),"
            f" {self.global_count} globals",
            "",
            f"  {'Lower':<20} {self.lower_time * 1000:>8.1f}ms",
            f"  {'Render':<20} {self.render_time * 1000:>8.1f}ms",
        ]
        return "\n".join(lines)
