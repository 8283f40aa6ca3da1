"""
Synacor VM - Fault Kinds and Fault Records

Every invalid condition the machine can detect is a fault. Components raise
VMFault at the point of detection; the execution engine stamps it with the
opcode and program counter of the instruction that was executing and turns
it into a Fault record on the RunResult. Nothing is retried.

Fault kinds:
  INVALID_OPERAND_CODE  raw operand outside 0-32775, or a literal where a
                        register is required
  MEMORY_OUT_OF_RANGE   address outside 0-32767
  STACK_UNDERFLOW       POP or RET on an empty stack
  UNKNOWN_OPCODE        opcode not in the table (includes unsupported IN)
  DIVISION_BY_ZERO      MOD with a zero divisor
  LOAD_OVERFLOW         image longer than 32768 words
  TRUNCATED_IMAGE       image with an odd trailing byte
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FaultKind(Enum):
    INVALID_OPERAND_CODE = 'InvalidOperandCode'
    MEMORY_OUT_OF_RANGE = 'MemoryOutOfRange'
    STACK_UNDERFLOW = 'StackUnderflow'
    UNKNOWN_OPCODE = 'UnknownOpcode'
    DIVISION_BY_ZERO = 'DivisionByZero'
    LOAD_OVERFLOW = 'LoadOverflow'
    TRUNCATED_IMAGE = 'TruncatedImage'


class VMFault(Exception):
    """Raised when the machine detects an invalid condition.

    opcode and pc are filled in by the engine once the fault reaches the
    instruction loop; load-time faults leave them as None.
    """
    def __init__(self, kind: FaultKind, message: str,
                 opcode: Optional[int] = None, pc: Optional[int] = None):
        self.kind = kind
        self.message = message
        self.opcode = opcode
        self.pc = pc
        super().__init__(self._format())

    def _format(self) -> str:
        if self.pc is None:
            return f"{self.kind.value}: {self.message}"
        return f"{self.kind.value} at pc={self.pc}: {self.message}"

    def at(self, opcode: Optional[int], pc: int) -> 'VMFault':
        """Attach instruction context (keeps context set by an inner frame)."""
        if self.pc is None:
            self.opcode = opcode
            self.pc = pc
            self.args = (self._format(),)
        return self

    def to_record(self) -> 'Fault':
        return Fault(self.kind, self.message, self.opcode, self.pc)


@dataclass(frozen=True)
class Fault:
    """Fault as surfaced to the caller of VirtualMachine.run()."""
    kind: FaultKind
    message: str
    opcode: Optional[int] = None
    pc: Optional[int] = None

    def __str__(self) -> str:
        op = '-' if self.opcode is None else str(self.opcode)
        pc = '-' if self.pc is None else str(self.pc)
        return f"{self.kind.value} (opcode={op}, pc={pc}): {self.message}"
