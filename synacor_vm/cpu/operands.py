"""
Synacor VM - Word Ranges and Operand Addressing Modes

Every operand word falls in one of two addressing modes:

  LIT   0x0000-0x7FFF   Literal value, used as-is
  REG   0x8000-0x8007   Register reference, value lives in register 0-7

Anything above 0x8007 is not a valid operand. Operands are decoded once
into Literal / RegisterRef and the register index is checked here, so the
register file can index its slots directly.
"""

from dataclasses import dataclass
from typing import Union

from ..errors import FaultKind, VMFault

WORD_MAX = 0xFFFF
LITERAL_MAX = 0x7FFF
MODULUS = 0x8000          # arithmetic wraps at 32768
REGISTER_BASE = 0x8000
REGISTER_COUNT = 8
REGISTER_MAX = REGISTER_BASE + REGISTER_COUNT - 1


@dataclass(frozen=True)
class Literal:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class RegisterRef:
    index: int

    def __str__(self) -> str:
        return f"r{self.index}"


Operand = Union[Literal, RegisterRef]


def is_literal(value: int) -> bool:
    return 0 <= value <= LITERAL_MAX


def decode_operand(raw: int) -> Operand:
    """Classify a raw operand word.

    Raises VMFault(INVALID_OPERAND_CODE) for anything outside 0-32775.
    """
    if 0 <= raw <= LITERAL_MAX:
        return Literal(raw)
    if REGISTER_BASE <= raw <= REGISTER_MAX:
        return RegisterRef(raw - REGISTER_BASE)
    raise VMFault(FaultKind.INVALID_OPERAND_CODE,
                  f"operand {raw} is neither a literal nor a register")
