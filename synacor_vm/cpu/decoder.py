"""
Synacor VM - Opcode Table / Instruction Decoder

This module maps opcode words to (mnemonic, operand signature). The
signature lists one entry per operand word following the opcode:

  DST   destination, must be a register reference
  SRC   source, literal or register reference, resolved before use

Instruction length is always 1 + len(signature). Operands are decoded into
Literal / RegisterRef once, here, so handlers never range-check raw words.

Opcode 20 (IN, read one character) exists in the historical ISA but is not
supported by this machine; it decodes as an unknown opcode.
"""

from dataclasses import dataclass
from typing import Tuple

from ..errors import FaultKind, VMFault
from .operands import Literal, Operand, decode_operand

# ──────────────────────────────────────────────
# Operand roles
# ──────────────────────────────────────────────

DST = 'DST'
SRC = 'SRC'

# ──────────────────────────────────────────────
# Opcode table
# ──────────────────────────────────────────────
# Format: opcode -> (mnemonic, operand signature)

OPCODES = {
    0:  ('HALT', ()),
    1:  ('SET',  (DST, SRC)),
    2:  ('PUSH', (SRC,)),
    3:  ('POP',  (DST,)),
    4:  ('EQ',   (DST, SRC, SRC)),
    5:  ('GT',   (DST, SRC, SRC)),
    6:  ('JMP',  (SRC,)),
    7:  ('JT',   (SRC, SRC)),
    8:  ('JF',   (SRC, SRC)),
    9:  ('ADD',  (DST, SRC, SRC)),
    10: ('MULT', (DST, SRC, SRC)),
    11: ('MOD',  (DST, SRC, SRC)),
    12: ('AND',  (DST, SRC, SRC)),
    13: ('OR',   (DST, SRC, SRC)),
    14: ('NOT',  (DST, SRC)),
    15: ('RMEM', (DST, SRC)),
    16: ('WMEM', (SRC, SRC)),
    17: ('CALL', (SRC,)),
    18: ('RET',  ()),
    19: ('OUT',  (SRC,)),
    21: ('NOOP', ()),
}

OP_IN = 20


def operand_count(opcode: int) -> int:
    """Number of operand words following opcode. Unknown opcodes fault."""
    return len(lookup(opcode)[1])


def lookup(opcode: int) -> Tuple[str, Tuple[str, ...]]:
    try:
        return OPCODES[opcode]
    except KeyError:
        if opcode == OP_IN:
            msg = "opcode 20 (IN, character input) is not supported"
        else:
            msg = f"unknown opcode {opcode}"
        raise VMFault(FaultKind.UNKNOWN_OPCODE, msg) from None


@dataclass(frozen=True)
class Instruction:
    opcode: int
    mnemonic: str
    operands: Tuple[Operand, ...]
    pc: int

    @property
    def size(self) -> int:
        return 1 + len(self.operands)

    @property
    def next_pc(self) -> int:
        """Address of the instruction that follows in memory."""
        return self.pc + self.size

    def __str__(self) -> str:
        if not self.operands:
            return self.mnemonic
        return f"{self.mnemonic:4s} " + ' '.join(str(o) for o in self.operands)


def decode_instruction(memory, pc: int) -> Instruction:
    """Fetch and decode the instruction at pc.

    Raises VMFault for an out-of-range fetch, an unknown opcode, an invalid
    operand code, or a literal in a destination slot.
    """
    opcode = memory.read(pc)
    mnem, signature = lookup(opcode)

    operands = []
    for offset, role in enumerate(signature, start=1):
        operand = decode_operand(memory.read(pc + offset))
        if role == DST and isinstance(operand, Literal):
            raise VMFault(FaultKind.INVALID_OPERAND_CODE,
                          f"{mnem} operand {offset} must be a register, "
                          f"got literal {operand.value}")
        operands.append(operand)

    return Instruction(opcode, mnem, tuple(operands), pc)
