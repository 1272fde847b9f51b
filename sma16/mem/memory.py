"""
SMA-16 Emulator: 4K Word Memory with Write Routing

Memory is a flat, fixed-size buffer of 4096 16-bit words. Every access
masks the address to 12 bits first, so address $1000 + k aliases k and
there is no out-of-range condition.

Two write paths:
  write_raw(addr, value)   store the full 16-bit word
  write_data(addr, value)  keep the target's opcode nibble, replace the
                           low 12 bits with data(value)

Both end in write_raw(), which is where registered I/O handlers (the
output ports) and watchpoints fire, synchronously and after the word has
been stored.
"""

import logging
from array import array
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Union

from ..config import ADDR_MASK, WORD_MASK, MEM_WORDS
from ..cpu.word import merge_data

log = logging.getLogger(__name__)


class Memory:
    """4096-word addressable memory.

    I/O handlers are registered per address via register_io_handler() and
    receive (addr, value) after each write to that address. Bulk loads
    place words directly and do not trigger handlers.
    """

    def __init__(self, image: Optional[Iterable[int]] = None):
        self._mem = array('H', [0]) * MEM_WORDS

        # addr -> write_fn(addr, value)
        self._io_write_handlers: Dict[int, Callable] = {}

        # addr -> [callback(addr, old_val, new_val)]
        self._watchpoints: Dict[int, List[Callable]] = {}

        if image is not None:
            words = list(image)
            if len(words) > MEM_WORDS:
                raise ValueError(
                    f"memory image has {len(words)} words, max is {MEM_WORDS}")
            for i, word in enumerate(words):
                self._mem[i] = word & WORD_MASK

    def __len__(self) -> int:
        return MEM_WORDS

    def __iter__(self):
        return iter(self._mem)

    # --- Core read/write ---

    def read(self, addr: int) -> int:
        return self._mem[addr & ADDR_MASK]

    def write_raw(self, addr: int, value: int):
        """Store a full 16-bit word, then fire watchpoints and I/O handlers."""
        addr &= ADDR_MASK
        value &= WORD_MASK
        old = self._mem[addr]
        self._mem[addr] = value

        if addr in self._watchpoints:
            for cb in self._watchpoints[addr]:
                cb(addr, old, value)

        if addr in self._io_write_handlers:
            self._io_write_handlers[addr](addr, value)

    def write_data(self, addr: int, value: int):
        """Merge data(value) into the low 12 bits of the word at addr."""
        self.write_raw(addr, merge_data(self.read(addr), value))

    # --- Bulk load ---

    def load(self, start: int, words: Iterable[int]):
        """Copy words into memory from start, wrapping per word.

        Bypasses I/O handlers: loading an image is not a machine write.
        """
        count = 0
        for i, word in enumerate(words):
            self._mem[(start + i) & ADDR_MASK] = word & WORD_MASK
            count += 1
        log.debug("loaded %d words at $%03X", count, start & ADDR_MASK)

    def load_bytes(self, data: bytes, start: int = 0):
        """Load a big-endian byte image (two bytes per word)."""
        if len(data) % 2:
            raise ValueError(f"odd-length image ({len(data)} bytes)")
        self.load(start, (
            (data[i] << 8) | data[i + 1] for i in range(0, len(data), 2)
        ))

    def to_bytes(self) -> bytes:
        """Whole memory as a big-endian byte image."""
        return b''.join(word.to_bytes(2, 'big') for word in self._mem)

    def snapshot(self) -> List[int]:
        return list(self._mem)

    def save(self, filepath: Union[str, Path]):
        """Write the memory image to a file (big-endian words)."""
        Path(filepath).write_bytes(self.to_bytes())

    # --- I/O handler registration ---

    def register_io_handler(self, addr: int, write_fn: Callable):
        """Route writes at addr to write_fn(addr, value).

        Peripheral models (the output ports) call this to observe writes
        to their registers. One handler per address; re-registering
        replaces it.
        """
        self._io_write_handlers[addr & ADDR_MASK] = write_fn

    def unregister_io_handler(self, addr: int):
        self._io_write_handlers.pop(addr & ADDR_MASK, None)

    # --- Watchpoints ---

    def add_watchpoint(self, addr: int, callback: Callable):
        """Call callback(addr, old_val, new_val) on every write to addr."""
        self._watchpoints.setdefault(addr & ADDR_MASK, []).append(callback)

    def remove_watchpoint(self, addr: int, callback: Optional[Callable] = None):
        """Remove a watchpoint. If callback is None, removes all on that addr."""
        addr &= ADDR_MASK
        if addr in self._watchpoints:
            if callback is None:
                del self._watchpoints[addr]
            else:
                self._watchpoints[addr] = [
                    cb for cb in self._watchpoints[addr] if cb != callback
                ]

    # --- Hex dump ---

    def hexdump(self, start: int, length: int = 64) -> str:
        """Produce a word dump of memory for debugging, 8 words per line."""
        lines = []
        for offset in range(0, length, 8):
            addr = (start + offset) & ADDR_MASK
            words = ' '.join(f'{self.read(addr + i):04X}'
                             for i in range(min(8, length - offset)))
            lines.append(f'{addr:03X}  {words}')
        return '\n'.join(lines)
