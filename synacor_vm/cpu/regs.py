"""
Synacor VM - Register File + Operand Resolver

Register model:
  r0-r7  eight 15-bit general purpose registers, zero at construction

There is no flag register and no stack pointer: the stack is a separate
unbounded structure (mem/stack.py) and the program counter is owned by the
execution engine.

Registers only ever hold literal values (0-32767). A register reference
operand (32768-32775) is resolved to the register's contents before use;
it is never stored.
"""

from typing import List, Tuple

from ..errors import FaultKind, VMFault
from .operands import (
    REGISTER_COUNT, Operand, RegisterRef, decode_operand, is_literal,
)


class Registers:
    """Eight-slot register file.

    Indices are validated when operands are decoded, so read/write index
    the backing list directly.
    """

    __slots__ = ('_slots',)

    def __init__(self):
        self._slots: List[int] = [0] * REGISTER_COUNT

    def read(self, index: int) -> int:
        return self._slots[index]

    def write(self, index: int, value: int):
        """Store a resolved literal. Register reference encodings and other
        out-of-range words are rejected."""
        if not is_literal(value):
            raise VMFault(FaultKind.INVALID_OPERAND_CODE,
                          f"r{index} cannot hold {value} (not a literal)")
        self._slots[index] = value

    # --- Operand resolution ---

    def value_of(self, operand: Operand) -> int:
        """Numeric value of an already-decoded operand."""
        if isinstance(operand, RegisterRef):
            return self._slots[operand.index]
        return operand.value

    def resolve(self, raw: int) -> int:
        """Resolve a raw operand word: literal as-is, register reference
        to that register's value. Invalid codes fault."""
        return self.value_of(decode_operand(raw))

    # --- Display ---

    def snapshot(self) -> Tuple[int, ...]:
        return tuple(self._slots)

    def display(self) -> str:
        """Format register state for trace output."""
        return ' '.join(f"r{i}={v:05d}" for i, v in enumerate(self._slots))
