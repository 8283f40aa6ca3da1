"""
Synacor VM
==========
An interpreter for the 16-bit word machine of the Synacor challenge ISA:
eight registers, 32768 words of memory, an unbounded stack, 21 opcodes and
a single output channel.

Architecture:
    ┌────────────┐    ┌──────────┐    ┌───────────┐    ┌──────────┐
    │ image bytes│───>│  Memory  │───>│  Decoder  │───>│  Engine  │───> console bytes
    │ (LE words) │    │ (32K wd) │    │ (operands)│    │ (21 ops) │
    └────────────┘    └──────────┘    └───────────┘    └──────────┘

    - mem/memory.py:     word memory + little-endian image loader
    - mem/stack.py:      LIFO used by PUSH/POP/CALL/RET
    - cpu/operands.py:   literal / register-reference operand decoding
    - cpu/regs.py:       register file + operand resolver
    - cpu/decoder.py:    opcode table, instruction decode
    - cpu/alu.py:        15-bit arithmetic and logic
    - periph/console.py: OUT sink
    - emu.py:            fetch-decode-execute loop, RunResult
"""

__version__ = "0.1.0"

from .errors import Fault, FaultKind, VMFault
from .emu import RunResult, StopReason, VirtualMachine, run_image

__all__ = [
    'Fault', 'FaultKind', 'VMFault',
    'RunResult', 'StopReason', 'VirtualMachine', 'run_image',
]
