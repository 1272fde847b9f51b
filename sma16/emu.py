"""
SMA-16 Emulator: Main Emulator Class

This is the top-level class that integrates:
  - CPU registers (cpu/regs.py)
  - Memory (mem/memory.py)
  - Opcode decoder (cpu/decoder.py)
  - Output ports + sink (periph/ports.py, periph/sinks.py)

Execution model, one step():
  1. Fetch IR = mem[PC]
  2. Decode IR into an Instruction (op kind + 12-bit operand)
  3. Execute the handler for that kind
  4. PC += 1, unless the handler moved PC itself (JMP, taken JMZ, fault)

run() clears the halt flag and steps until a HLT sets it again. There is
no step limit: a program that never halts runs forever.

Unassigned opcodes are not host errors. They go through the in-band fault
protocol: the resume address (PC + 1) is stored at $009, the reason code
at $008, and execution continues at the fault vector $001. Returning from
the fault is up to the code that lives there.
"""

import logging
from collections import deque
from pathlib import Path
from typing import Dict, Callable, Iterable, List, Optional, Union

from .config import (
    WORD_MASK, FAULT_VECTOR, FAULT_UNKNOWN_OPCODE,
    INTERRUPT_REASON_REGISTER, INTERRUPT_RETURN_REGISTER,
    STACK_SIZE_REGISTER, STACK_SIZE_DEFAULT, TRACE_DEPTH,
)
from .cpu.decoder import Op, Instruction, decode, disassemble
from .cpu.regs import Registers
from .cpu.word import data, set_data
from .mem.memory import Memory
from .periph.ports import OutputPorts
from .periph.sinks import OutputSink, BufferSink

log = logging.getLogger(__name__)


class Sma16:
    """SMA-16 virtual machine.

    Usage:
        emu = Sma16.with_blank_memory()
        emu.load_memory(0, [0xB005, 0xE000, 0x0000])  # ADD $005; PSH; HLT
        emu.run()
        emu.acc, emu.stack       # 5, [5]
        emu.output               # bytes written to the output ports
    """

    def __init__(self, memory: Optional[Union[Memory, Iterable[int]]] = None,
                 sink: Optional[OutputSink] = None):
        if sink is None:
            sink = BufferSink()
        elif not callable(getattr(sink, 'emit', None)):
            raise TypeError(f"sink {sink!r} has no emit() method")

        if isinstance(memory, Memory):
            memory = memory.snapshot()

        # Core components
        self.regs = Registers()
        self.mem = Memory(memory)

        # Peripherals
        self.sink = sink
        self.ports = OutputPorts(sink)
        self.ports.register(self.mem)

        # Trace output
        self._trace = False
        self._trace_output: deque = deque(maxlen=TRACE_DEPTH)

        # Instruction dispatch table
        self._dispatch = self._build_dispatch()

        self.mem.write_raw(STACK_SIZE_REGISTER, STACK_SIZE_DEFAULT)

    @classmethod
    def with_blank_memory(cls, sink: Optional[OutputSink] = None) -> 'Sma16':
        return cls(None, sink)

    @classmethod
    def with_memory(cls, image: Union[Memory, Iterable[int]],
                    sink: Optional[OutputSink] = None) -> 'Sma16':
        """New machine over a copy of image (a Memory or up to 4096 words)."""
        return cls(image, sink)

    # ══════════════════════════════════════════════
    # Loading
    # ══════════════════════════════════════════════

    def load_memory(self, start: int, words: Iterable[int]):
        """Copy words into memory starting at start (addresses wrap)."""
        self.mem.load(start, words)

    def load_binary(self, path_or_data, start: int = 0):
        """Load a big-endian word image from a file path or bytes."""
        if isinstance(path_or_data, (str, Path)):
            raw = Path(path_or_data).read_bytes()
        else:
            raw = bytes(path_or_data)
        self.mem.load_bytes(raw, start)

    def reinitialize(self):
        """Power-on reset of registers, flags and stack. Memory is kept."""
        self.regs.reset()
        self.mem.write_raw(STACK_SIZE_REGISTER, STACK_SIZE_DEFAULT)
        self._trace_output.clear()
        log.debug("reinitialized")

    # ══════════════════════════════════════════════
    # Memory access (bypasses PC)
    # ══════════════════════════════════════════════

    def peek(self, addr: int) -> int:
        return self.mem.read(addr)

    def poke(self, addr: int, value: int):
        """Write a full word. Writes to the output ports still emit."""
        self.mem.write_raw(addr, value)

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self):
        """Fetch, decode and execute exactly one instruction."""
        regs = self.regs
        pc = regs.PC
        regs.IR = self.mem.read(pc)
        inst = decode(regs.IR)

        if self._trace:
            self._trace_output.append(
                f"${pc:03X}: {disassemble(regs.IR):9s} {regs.display()}"
            )

        if inst.op is None:
            self._op_unknown(inst)
        elif self._dispatch[inst.op](inst):
            regs.advance()

        regs.steps += 1

    def run(self):
        """Step until halted. Unbounded by design."""
        self.regs.halted = False
        log.debug("run start at $%03X", self.regs.PC)
        while not self.regs.halted:
            self.step()
        log.debug("run stop at $%03X after %d steps",
                  self.regs.PC, self.regs.steps)

    def fault(self, reason: int):
        """Dispatch to the fault vector.

        Saves PC + 1 as the return address and reason as the reason code,
        then sets PC to $001. Also usable by external interrupt sources.
        """
        # Not wrapped to 12 bits: a fault at $FFF saves $1000.
        ret = (self.regs.PC + 1) & WORD_MASK
        self.mem.write_raw(INTERRUPT_RETURN_REGISTER, ret)
        self.mem.write_raw(INTERRUPT_REASON_REGISTER, reason)
        self.regs.PC = FAULT_VECTOR
        log.debug("fault reason=$%04X return=$%04X",
                  reason & WORD_MASK, ret)

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════
    # Handler signature: handler(inst) -> bool
    # The return value says whether PC advances normally.

    def _build_dispatch(self) -> Dict[Op, Callable[[Instruction], bool]]:
        return {
            Op.HALT:        self._op_halt,
            Op.JUMP:        self._op_jump,
            Op.JUMPZ:       self._op_jumpz,
            Op.LOAD:        self._op_load,
            Op.STORE:       self._op_store,
            Op.SHIFT_LEFT:  self._op_shift_left,
            Op.SHIFT_RIGHT: self._op_shift_right,
            Op.XOR:         self._op_xor,
            Op.AND:         self._op_and,
            Op.STORE_FULL:  self._op_store_full,
            Op.ADD:         self._op_add,
            Op.POP:         self._op_pop,
            Op.PUSH:        self._op_push,
            Op.NOOP:        self._op_noop,
        }

    # ── Control ──

    def _op_halt(self, inst):
        self.regs.halted = True
        log.debug("halt at $%03X", self.regs.PC)
        return True

    def _op_jump(self, inst):
        self.regs.jump(inst.operand)
        return False

    def _op_jumpz(self, inst):
        if self.regs.zero:
            self.regs.jump(inst.operand)
            return False
        return True

    def _op_noop(self, inst):
        return True

    def _op_unknown(self, inst):
        # Reason is built from the isolated nibble, not the whole IR.
        self.fault(FAULT_UNKNOWN_OPCODE | inst.nibble)

    # ── Load/Store ──

    def _op_load(self, inst):
        self.regs.ACC = self.mem.read(inst.operand)
        return True

    def _op_store(self, inst):
        self.mem.write_data(inst.operand, data(self.regs.ACC))
        return True

    def _op_store_full(self, inst):
        self.mem.write_raw(inst.operand, self.regs.ACC)
        return True

    # ── Shift ──
    # Operand bit 0 selects the mode, the rest is the amount:
    #   1 -> shift data(ACC), result replaces the whole register
    #   0 -> shift the full 16-bit ACC

    def _op_shift_left(self, inst):
        amount = inst.operand >> 1
        if inst.operand & 1:
            self.regs.ACC = set_data(self.regs.ACC, data(self.regs.ACC) << amount)
        else:
            self.regs.ACC = (self.regs.ACC << amount) & WORD_MASK
        return True

    def _op_shift_right(self, inst):
        amount = inst.operand >> 1
        if inst.operand & 1:
            self.regs.ACC = set_data(self.regs.ACC, data(self.regs.ACC) >> amount)
        else:
            self.regs.ACC >>= amount
        return True

    # ── Logic ──

    def _op_xor(self, inst):
        self.regs.ACC = set_data(self.regs.ACC, data(self.regs.ACC) ^ inst.operand)
        return True

    def _op_and(self, inst):
        self.regs.ACC = set_data(self.regs.ACC, data(self.regs.ACC) & inst.operand)
        return True

    # ── Arithmetic ──

    def _op_add(self, inst):
        # Wraps at the 16-bit register width; Z only looks at the low 12 bits.
        self.regs.ACC = set_data(self.regs.ACC, data(self.regs.ACC) + inst.operand)
        self.regs.zero = data(self.regs.ACC) == 0
        return True

    # ── Stack ──

    def _op_pop(self, inst):
        self.regs.ACC = self.regs.pop()
        return True

    def _op_push(self, inst):
        self.regs.push(self.regs.ACC)
        return True

    # ══════════════════════════════════════════════
    # Register views
    # ══════════════════════════════════════════════

    @property
    def pc(self) -> int:
        return self.regs.PC

    @property
    def ir(self) -> int:
        return self.regs.IR

    @property
    def acc(self) -> int:
        return self.regs.ACC

    @property
    def halted(self) -> bool:
        return self.regs.halted

    @property
    def zero(self) -> bool:
        return self.regs.zero

    @property
    def stack(self) -> List[int]:
        """Copy of the stack, bottom first."""
        return list(self.regs.stack)

    @property
    def output(self) -> Optional[bytes]:
        """Bytes emitted so far, when the sink is a BufferSink."""
        if isinstance(self.sink, BufferSink):
            return self.sink.data
        return None

    # ══════════════════════════════════════════════
    # Trace / Debug
    # ══════════════════════════════════════════════

    def enable_trace(self, enable: bool = True):
        """Enable instruction trace recording.

        Only the last TRACE_DEPTH steps are kept, so tracing a program that
        never halts stays bounded.
        """
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(self._trace_output)

    def clear_trace(self):
        self._trace_output.clear()
