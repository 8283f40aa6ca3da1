"""
Synacor VM - ALU Operations

All values are 15-bit literals (0-32767). Results are reduced into the same
range before the engine stores them:

  add / mult   wrap modulo 32768
  mod          plain remainder, zero divisor faults
  and / or     bitwise, inputs are already 15-bit so results are too
  not          15-bit complement, bit 15 always clear
  eq / gt      1 or 0

There is no condition code register; comparison results land in a register.
"""

from ..errors import FaultKind, VMFault
from .operands import LITERAL_MAX, MODULUS


def add15(b: int, c: int) -> int:
    return (b + c) % MODULUS


def mult15(b: int, c: int) -> int:
    return (b * c) % MODULUS


def mod15(b: int, c: int) -> int:
    """Remainder of b / c. Raises VMFault(DIVISION_BY_ZERO) when c is 0."""
    if c == 0:
        raise VMFault(FaultKind.DIVISION_BY_ZERO, f"{b} mod 0")
    return b % c


def and15(b: int, c: int) -> int:
    return b & c & LITERAL_MAX


def or15(b: int, c: int) -> int:
    return (b | c) & LITERAL_MAX


def not15(b: int) -> int:
    """15-bit one's complement. not15(not15(x)) == x for every literal."""
    return ~b & LITERAL_MAX


def eq(b: int, c: int) -> int:
    return 1 if b == c else 0


def gt(b: int, c: int) -> int:
    return 1 if b > c else 0
