"""Named constants — eliminates magic strings across the codebase."""

from __future__ import annotations

WORD_SIZE = 4

# Accepted range of 32-bit immediates, signed or unsigned
IMMEDIATE_MIN = -(2**31)
IMMEDIATE_MAX = 2**32 - 1

REGISTER_NAMES: tuple[str, ...] = (
    "%ebx",
    "%ecx",
    "%esi",
    "%edi",
    "%eax",
    "%edx",
    "%ebp",
    "%esp",
)

BYTE_REGISTER_NAMES: tuple[str, ...] = (
    "%bl",
    "%cl",
    "%sil",
    "%dil",
    "%al",
    "%dl",
    "%bpl",
    "%spl",
)

# Registers below this index hold IR values; the rest are reserved.
ALLOCATABLE_REGISTERS = 3

EAX_INDEX = 4
EDX_INDEX = 5
EBP_INDEX = 6
ESP_INDEX = 7

GLOBAL_PREFIX = "global_"

ENTRY_LABEL = "main"

READ_ROUTINE = "Lread"
WRITE_ROUTINE = "Lwrite"

COMMENT_PREFIX = "# "

ARITHMETIC_OPERATORS: tuple[str, ...] = ("+", "-")
LOGICAL_OPERATORS: tuple[str, ...] = ("&&", "!!")
COMPARISON_OPERATORS: tuple[str, ...] = ("<", "<=", "==", "!=", ">=", ">")
MULTIPLICATIVE_OPERATORS: tuple[str, ...] = ("*", "/", "%")

RUNTIME_ENV_VAR = "SM_RUNTIME"
DEFAULT_RUNTIME_DIR = "../runtime"
DEFAULT_RUNTIME_OBJECT = "runtime.o"
DEFAULT_C_COMPILER = "gcc"
DEFAULT_COMPILER_FLAGS: tuple[str, ...] = ("-g", "-m32")

ASM_SUFFIX = ".s"
