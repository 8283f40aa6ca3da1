"""
Synacor VM - Stack

Unbounded LIFO of 16-bit words, separate from memory. PUSH/POP use it
directly; CALL pushes the return address and RET pops it.
"""

from array import array

from ..errors import FaultKind, VMFault


class Stack:

    def __init__(self):
        self._items = array('H')

    def __len__(self) -> int:
        return len(self._items)

    def push(self, value: int):
        self._items.append(value)

    def pop(self) -> int:
        """Remove and return the top word. Empty stack faults."""
        if not self._items:
            raise VMFault(FaultKind.STACK_UNDERFLOW, "pop from empty stack")
        return self._items.pop()

    def peek(self) -> int:
        if not self._items:
            raise VMFault(FaultKind.STACK_UNDERFLOW, "peek at empty stack")
        return self._items[-1]
