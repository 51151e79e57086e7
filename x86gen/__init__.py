"""Stack-machine IR to x86 assembly backend."""

from .api import (  # noqa: F401
    compile_to_asm,
    compile_text,
    compile_file,
    lowering_stats,
    simulate,
)
