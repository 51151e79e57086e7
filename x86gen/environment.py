"""Allocation environment — immutable symbolic stack of operand locations.

Every operation returns a new ``Environment``; the receiver is never
mutated.  The symbolic stack mirrors the IR evaluation stack one-to-one,
so its depth always equals the IR stack depth at the same program point.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from .x86_types import Memory, Operand, Register, StackSlot
from . import constants

logger = logging.getLogger(__name__)


class CodegenError(Exception):
    """Raised when lowering meets an inconsistent instruction stream."""

    pass


class StackUnderflowError(CodegenError):
    """Raised when an operand is popped from an empty symbolic stack."""

    pass


def location_of(name: str) -> Memory:
    """Memory operand holding the global variable *name*."""
    return Memory(constants.GLOBAL_PREFIX + name)


@dataclass(frozen=True)
class Environment:
    symbolic_stack: tuple[Operand, ...] = ()
    high_water_mark: int = 0
    global_names: tuple[str, ...] = ()

    @property
    def depth(self) -> int:
        return len(self.symbolic_stack)

    def allocate(self) -> tuple[Operand, Environment]:
        """Choose the location for the next value without pushing it."""
        match self.symbolic_stack[-1:]:
            case ():
                operand: Operand = Register(0)
            case (StackSlot(n),):
                operand = StackSlot(n + 1)
            case (Register(n),) if n + 1 < constants.ALLOCATABLE_REGISTERS:
                operand = Register(n + 1)
            case _:
                operand = StackSlot(0)

        if isinstance(operand, StackSlot):
            return operand, replace(
                self, high_water_mark=max(self.high_water_mark, operand.index + 1)
            )
        return operand, self

    def push(self, operand: Operand) -> Environment:
        return replace(self, symbolic_stack=self.symbolic_stack + (operand,))

    def pop(self) -> tuple[Operand, Environment]:
        if not self.symbolic_stack:
            raise StackUnderflowError("pop from an empty symbolic stack")
        return self.symbolic_stack[-1], replace(
            self, symbolic_stack=self.symbolic_stack[:-1]
        )

    def pop2(self) -> tuple[Operand, Operand, Environment]:
        """Pop the top two operands, top first."""
        if len(self.symbolic_stack) < 2:
            raise StackUnderflowError(
                f"pop2 needs two operands, symbolic stack holds {self.depth}"
            )
        return (
            self.symbolic_stack[-1],
            self.symbolic_stack[-2],
            replace(self, symbolic_stack=self.symbolic_stack[:-2]),
        )

    def add_global(self, name: str) -> Environment:
        if name in self.global_names:
            return self
        logger.debug("Registering global %s", name)
        return replace(self, global_names=self.global_names + (name,))

    def location_of(self, name: str) -> Memory:
        return location_of(name)

    def globals(self) -> tuple[str, ...]:
        return self.global_names

    def frame_size(self) -> int:
        return self.high_water_mark
