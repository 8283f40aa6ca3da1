"""
Synacor VM - 32K Word Memory + Image Loader

Memory map:
  0x0000-0x7FFF  32768 words of flat RAM, code and data share it

Addresses are word addresses; there is no byte addressing and no I/O
region. Memory is zero at construction, filled from address 0 upward by
load(), and mutated afterwards only by WMEM.

Image format:
  Flat binary, each word stored as two bytes, low byte first. An image may
  hold at most 32768 words. An odd trailing byte is rejected rather than
  padded or dropped.
"""

import logging
import struct
from array import array
from typing import Iterator, List

from ..errors import FaultKind, VMFault
from ..cpu.operands import WORD_MAX

logger = logging.getLogger(__name__)

MEMORY_SIZE = 0x8000
ADDRESS_MAX = MEMORY_SIZE - 1

_WORD = struct.Struct('<H')


def decode_words(data: bytes) -> Iterator[int]:
    """Yield the little-endian 16-bit words of an image, in order.

    Raises VMFault(TRUNCATED_IMAGE) if data has an odd length.
    """
    if len(data) % 2:
        raise VMFault(FaultKind.TRUNCATED_IMAGE,
                      f"image is {len(data)} bytes, last word is missing "
                      f"its high byte")
    for (word,) in _WORD.iter_unpack(data):
        yield word


class Memory:
    """32768-word memory.

    Words are stored in an array('H'), so any 16-bit value can be held.
    Out-of-range addresses fault instead of wrapping.
    """

    def __init__(self):
        self._mem = array('H', bytes(2 * MEMORY_SIZE))

    def __len__(self) -> int:
        return MEMORY_SIZE

    @staticmethod
    def _check(addr: int):
        if not 0 <= addr <= ADDRESS_MAX:
            raise VMFault(FaultKind.MEMORY_OUT_OF_RANGE,
                          f"address {addr} outside 0-{ADDRESS_MAX}")

    # --- Core read/write ---

    def read(self, addr: int) -> int:
        self._check(addr)
        return self._mem[addr]

    def write(self, addr: int, value: int):
        """Store a word at addr.

        A value outside 0-65535 is a caller bug, not a machine fault: the
        engine only writes resolved literals, so it raises ValueError.
        """
        self._check(addr)
        if not 0 <= value <= WORD_MAX:
            raise ValueError(f"{value} is not a 16-bit word")
        self._mem[addr] = value

    def read_block(self, start: int, length: int) -> List[int]:
        """Copy of length words starting at start (inspection only)."""
        if length:
            self._check(start)
            self._check(start + length - 1)
        return self._mem[start:start + length].tolist()

    # --- Bulk load ---

    def load(self, data: bytes) -> int:
        """Load a little-endian image at address 0. Returns the word count.

        The whole image is validated before memory is touched, so a rejected
        image leaves memory unchanged.
        """
        data = bytes(data)
        if len(data) % 2 == 0 and len(data) > 2 * MEMORY_SIZE:
            raise VMFault(FaultKind.LOAD_OVERFLOW,
                          f"image is {len(data) // 2} words, memory holds "
                          f"{MEMORY_SIZE}")
        words = array('H', decode_words(data))
        self._mem[0:len(words)] = words
        logger.debug("loaded %d words (%d bytes)", len(words), len(data))
        return len(words)
