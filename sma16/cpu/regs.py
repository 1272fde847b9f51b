"""
SMA-16 Emulator: CPU Register Set

Register model:
  PC      program counter, 12 bits (wraps mod 4096)
  IR      instruction register, last fetched word
  ACC     accumulator, 16 bits (most ops only use the low 12)
  halted  halt flag, set by HLT, cleared by run()
  zero    zero flag, written only by ADD
  stack   value stack of 16-bit words, no fixed capacity

The register set is a plain object owned by one emulator instance. It is
never shared and there is no module-level CPU.
"""

from typing import List

from ..config import ADDR_MASK, WORD_MASK, RESET_VECTOR


class Registers:
    """SMA-16 CPU state."""

    __slots__ = ('PC', 'IR', 'ACC', 'halted', 'zero', 'stack', 'steps')

    def __init__(self):
        self.PC: int = RESET_VECTOR
        self.IR: int = 0
        self.ACC: int = 0
        self.halted: bool = False
        self.zero: bool = False
        self.stack: List[int] = []
        self.steps: int = 0       # instructions executed, informational

    # --- Program counter ---

    def advance(self):
        """PC += 1, wrapping within the 12-bit address space."""
        self.PC = (self.PC + 1) & ADDR_MASK

    def jump(self, target: int):
        self.PC = target & ADDR_MASK

    # --- Stack operations ---

    def push(self, value: int):
        self.stack.append(value & WORD_MASK)

    def pop(self) -> int:
        """Pop the top of stack. An empty stack yields 0."""
        if not self.stack:
            return 0
        return self.stack.pop()

    # --- Display ---

    def display(self) -> str:
        """Format register state for traces."""
        flags = ('H' if self.halted else '.') + ('Z' if self.zero else '.')
        top = f"{self.stack[-1]:04X}" if self.stack else '----'
        return (f"PC={self.PC:03X} IR={self.IR:04X} ACC={self.ACC:04X} "
                f"[{flags}] SP={len(self.stack)} TOS={top}")

    def reset(self):
        """Reset CPU to power-on state."""
        self.PC = RESET_VECTOR
        self.IR = 0
        self.ACC = 0
        self.halted = False
        self.zero = False
        self.stack = []
        self.steps = 0
