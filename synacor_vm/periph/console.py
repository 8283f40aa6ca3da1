"""
Synacor VM - Console Output

OUT is the machine's only side effect: each execution appends one byte,
the low 8 bits of its operand, to the console. Bytes are kept in tx_buffer
for inspection and, when a stream is attached, written through to it and
flushed one at a time so the stream sees them in execution order.

There is no input side; opcode 20 (IN) is unsupported.
"""

from typing import BinaryIO, Optional


class Console:
    """Append-only character sink.

    stream is any binary file-like object with write() and flush(), for
    example sys.stdout.buffer.
    """

    def __init__(self, stream: Optional[BinaryIO] = None):
        self.stream = stream
        self.tx_buffer: bytearray = bytearray()

    def write(self, value: int):
        """Emit the low byte of value.

        The byte reaches tx_buffer only after the stream accepted it, so a
        stream error leaves the console unchanged.
        """
        byte = value & 0xFF
        if self.stream is not None:
            self.stream.write(bytes((byte,)))
            self.stream.flush()
        self.tx_buffer.append(byte)

    @property
    def output(self) -> bytes:
        """All bytes emitted so far."""
        return bytes(self.tx_buffer)

    def text(self, encoding: str = 'latin-1') -> str:
        return self.output.decode(encoding)
