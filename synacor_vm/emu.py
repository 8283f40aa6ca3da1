"""
Synacor VM - Main Execution Engine

Integrates:
  - Register file + operand resolver (cpu/regs.py)
  - Opcode table + decoder (cpu/decoder.py)
  - ALU operations (cpu/alu.py)
  - Memory + image loader (mem/memory.py)
  - Stack (mem/stack.py)
  - Console output (periph/console.py)

Execution model:
  1. Fetch opcode at pc, look up its operand signature
  2. Decode operand words into literals / register references
  3. Advance pc past the instruction
  4. Execute handler: update registers, memory, stack, console; jumps
     overwrite pc

Termination reasons:
  - HALT:   opcode 0
  - FAULT:  any detected invalid condition (see errors.py)

There is no cycle limit. A program that never halts or faults runs forever.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, List, Optional

from .cpu import alu
from .cpu.decoder import Instruction, decode_instruction
from .cpu.regs import Registers
from .errors import Fault, VMFault
from .mem.memory import Memory
from .mem.stack import Stack
from .periph.console import Console

logger = logging.getLogger(__name__)


class StopReason(Enum):
    HALT = 'HALT'
    FAULT = 'FAULT'


EXIT_HALTED = 0
EXIT_FAULTED = 1


@dataclass(frozen=True)
class RunResult:
    """Outcome of a run. exit_code is 0 on HALT, 1 on any fault."""
    reason: StopReason
    output: bytes
    steps: int
    fault: Optional[Fault] = None

    @property
    def halted(self) -> bool:
        return self.reason is StopReason.HALT

    @property
    def exit_code(self) -> int:
        return EXIT_HALTED if self.halted else EXIT_FAULTED


class VirtualMachine:
    """16-bit word virtual machine.

    Usage:
        vm = VirtualMachine(stream=sys.stdout.buffer)
        vm.load(image_bytes)
        result = vm.run()
        sys.exit(result.exit_code)
    """

    def __init__(self, stream: Optional[BinaryIO] = None, trace: bool = False):
        self.regs = Registers()
        self.mem = Memory()
        self.stack = Stack()
        self.console = Console(stream)

        self.pc = 0
        self.steps = 0
        self.stop_reason: Optional[StopReason] = None
        self.fault: Optional[Fault] = None

        self._trace = trace
        self._trace_output: List[str] = []

        self._dispatch = self._build_dispatch()

    # ══════════════════════════════════════════════
    # Loading
    # ══════════════════════════════════════════════

    def load(self, data: bytes) -> int:
        """Load a little-endian word image at address 0.

        Raises VMFault (LOAD_OVERFLOW / TRUNCATED_IMAGE) for a bad image.
        """
        return self.mem.load(data)

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self) -> Optional[StopReason]:
        """Execute one instruction. Returns StopReason if stopped, else None.

        Once stopped, the machine stays stopped and further calls return the
        same reason without executing anything. Errors that are not machine
        faults, such as an OSError from the output stream, propagate with pc
        and step count unchanged.
        """
        if self.stop_reason is not None:
            return self.stop_reason

        pc = self.pc
        try:
            ins = decode_instruction(self.mem, pc)
            if self._trace:
                self._record_trace(ins)
            self.pc = ins.next_pc
            self._dispatch[ins.mnemonic](ins.operands)
        except _HaltException:
            self.pc = pc
            self.steps += 1
            logger.debug("halted at pc=%d after %d steps", pc, self.steps)
            return self._stop(StopReason.HALT)
        except VMFault as e:
            self.pc = pc
            e.at(self._peek_opcode(pc), pc)
            self.fault = e.to_record()
            logger.warning("fault after %d steps: %s", self.steps, self.fault)
            return self._stop(StopReason.FAULT)
        except Exception:
            # not a machine fault (e.g. the output stream broke): leave pc at
            # the instruction so the machine state is as before the step
            self.pc = pc
            raise

        self.steps += 1
        return None

    def run(self) -> RunResult:
        """Run until HALT or a fault."""
        while self.step() is None:
            pass
        return self.result()

    def result(self) -> RunResult:
        if self.stop_reason is None:
            raise RuntimeError("machine is still running")
        return RunResult(self.stop_reason, self.console.output,
                         self.steps, self.fault)

    @property
    def running(self) -> bool:
        return self.stop_reason is None

    def _stop(self, reason: StopReason) -> StopReason:
        self.stop_reason = reason
        return reason

    def _peek_opcode(self, pc: int) -> Optional[int]:
        """Opcode word at pc for fault context, None if pc is unaddressable."""
        try:
            return self.mem.read(pc)
        except VMFault:
            return None

    # ══════════════════════════════════════════════
    # Operand helpers
    # ══════════════════════════════════════════════

    def _val(self, operand) -> int:
        return self.regs.value_of(operand)

    def _set(self, dst, value: int):
        self.regs.write(dst.index, value)

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════
    # Handler signature: handler(operands)
    # pc already points past the instruction when a handler runs.

    def _build_dispatch(self) -> dict:
        """Build mnemonic -> handler dispatch table."""
        return {
            'HALT': self._op_halt,
            'SET':  self._op_set,
            'PUSH': self._op_push,
            'POP':  self._op_pop,
            'EQ':   self._binary(alu.eq),
            'GT':   self._binary(alu.gt),
            'JMP':  self._op_jmp,
            'JT':   self._op_jt,
            'JF':   self._op_jf,
            'ADD':  self._binary(alu.add15),
            'MULT': self._binary(alu.mult15),
            'MOD':  self._binary(alu.mod15),
            'AND':  self._binary(alu.and15),
            'OR':   self._binary(alu.or15),
            'NOT':  self._op_not,
            'RMEM': self._op_rmem,
            'WMEM': self._op_wmem,
            'CALL': self._op_call,
            'RET':  self._op_ret,
            'OUT':  self._op_out,
            'NOOP': self._op_noop,
        }

    def _binary(self, fn):
        """Handler for a, b, c ops: r[a] = fn(b, c)."""
        def handler(ops):
            dst, b, c = ops
            self._set(dst, fn(self._val(b), self._val(c)))
        return handler

    # ── Register / stack ──

    def _op_set(self, ops):
        dst, b = ops
        self._set(dst, self._val(b))

    def _op_push(self, ops):
        self.stack.push(self._val(ops[0]))

    def _op_pop(self, ops):
        self._set(ops[0], self.stack.pop())

    def _op_not(self, ops):
        dst, b = ops
        self._set(dst, alu.not15(self._val(b)))

    # ── Memory ──

    def _op_rmem(self, ops):
        dst, b = ops
        self._set(dst, self.mem.read(self._val(b)))

    def _op_wmem(self, ops):
        a, b = ops
        self.mem.write(self._val(a), self._val(b))

    # ── Jump / call ──

    def _op_jmp(self, ops):
        self.pc = self._val(ops[0])

    def _op_jt(self, ops):
        cond, target = ops
        if self._val(cond) != 0:
            self.pc = self._val(target)

    def _op_jf(self, ops):
        cond, target = ops
        if self._val(cond) == 0:
            self.pc = self._val(target)

    def _op_call(self, ops):
        target = self._val(ops[0])
        self.stack.push(self.pc)  # return address = call site + 2
        self.pc = target

    def _op_ret(self, ops):
        self.pc = self.stack.pop()

    # ── I/O / control ──

    def _op_out(self, ops):
        self.console.write(self._val(ops[0]))

    def _op_noop(self, ops):
        pass

    def _op_halt(self, ops):
        raise _HaltException("HALT")

    # ══════════════════════════════════════════════
    # Trace / Debug
    # ══════════════════════════════════════════════

    def _record_trace(self, ins: Instruction):
        line = f"{ins.pc:05d}: {str(ins):24s} {self.regs.display()}"
        self._trace_output.append(line)
        logger.debug(line)

    def enable_trace(self, enable: bool = True):
        """Enable instruction trace logging."""
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(self._trace_output)

    def clear_trace(self):
        self._trace_output.clear()


def run_image(data: bytes, stream: Optional[BinaryIO] = None,
              trace: bool = False) -> RunResult:
    """Load data into a fresh machine and run it to completion.

    Load faults are reported on the result like execution faults, so the
    caller always gets a RunResult back.
    """
    vm = VirtualMachine(stream=stream, trace=trace)
    try:
        vm.load(data)
    except VMFault as e:
        logger.warning("image rejected: %s", e)
        return RunResult(StopReason.FAULT, b'', 0, e.to_record())
    return vm.run()


# Internal exception for flow control
class _HaltException(Exception):
    pass
