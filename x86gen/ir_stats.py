"""Pure functions for computing statistics over IR instruction lists."""

from __future__ import annotations

from collections import Counter

from x86gen.environment import StackUnderflowError
from x86gen.ir import SMInstruction


def count_opcodes(instructions: list[SMInstruction]) -> dict[str, int]:
    """Return a frequency map of opcode names in the given instruction list.

    Args:
        instructions: A list of IR instructions.

    Returns:
        A dict mapping opcode name strings to their occurrence counts.
        Empty dict for an empty input list.
    """
    return dict(Counter(inst.opcode.value for inst in instructions))


def stack_depths(instructions: list[SMInstruction]) -> list[int]:
    """Return the evaluation-stack depth after each instruction.

    Computed from each opcode's stack effect alone, independently of any
    operand placement.

    Raises:
        StackUnderflowError: If an instruction pops more than the stack holds.
    """
    depths: list[int] = []
    depth = 0
    for i, inst in enumerate(instructions):
        pops, pushes = inst.stack_effect()
        if pops > depth:
            raise StackUnderflowError(
                f"Instruction {i} ({inst}) pops {pops} from a stack of depth {depth}"
            )
        depth += pushes - pops
        depths.append(depth)
    return depths


def max_stack_depth(instructions: list[SMInstruction]) -> int:
    return max(stack_depths(instructions), default=0)
