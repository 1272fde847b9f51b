"""
SMA-16 Emulator: Output Ports Peripheral

Two memory-mapped, write-only output ports. A write to either one is
stored like any other word and then turned into output bytes on the
attached sink, inside the same write.

Register map:
  $00A  ASCII_OUT  - emit (value & $FF) as one byte
  $00B  SMALL_OUT  - emit up to two characters packed 6 bits each:
                     bits 0-5 first, bits 6-11 second

Packed ("small") character codes:
   0-25  'A'-'Z'
  26-51  'a'-'z'
  52-61  '0'-'9'
     62  ' '
     63  nothing emitted
"""

from typing import Optional, Tuple

from ..config import ASCII_OUT, SMALL_OUT
from .sinks import OutputSink

SMALL_NONE = 63


def small_code_to_char(code: int) -> Optional[int]:
    """Map one 6-bit code to an ASCII byte, None for code 63."""
    code &= 0x3F
    if code <= 25:
        return ord('A') + code
    if code <= 51:
        return ord('a') + (code - 26)
    if code <= 61:
        return ord('0') + (code - 52)
    if code == 62:
        return ord(' ')
    return None


def small_to_chars(value: int) -> Tuple[Optional[int], Optional[int]]:
    """Split a packed word into its (first, second) characters."""
    former = value & 0x3F
    latter = (value >> 6) & 0x3F
    return small_code_to_char(former), small_code_to_char(latter)


def decode_small(value: int) -> bytes:
    """Bytes a SMALL_OUT write of value emits, in emission order."""
    return bytes(c for c in small_to_chars(value) if c is not None)


def char_to_small_code(ch: str) -> int:
    if 'A' <= ch <= 'Z':
        return ord(ch) - ord('A')
    if 'a' <= ch <= 'z':
        return ord(ch) - ord('a') + 26
    if '0' <= ch <= '9':
        return ord(ch) - ord('0') + 52
    if ch == ' ':
        return 62
    raise ValueError(f"character {ch!r} has no packed code")


def encode_small(text: str) -> int:
    """Pack up to two characters into a SMALL_OUT word.

    Missing characters are filled with code 63, so encode_small('A')
    emits just 'A'.
    """
    if len(text) > 2:
        raise ValueError(f"at most two characters per word, got {len(text)}")
    codes = [char_to_small_code(ch) for ch in text]
    codes += [SMALL_NONE] * (2 - len(codes))
    return codes[0] | (codes[1] << 6)


class OutputPorts:
    """ASCII and packed-character output ports.

    Register with a Memory so writes to $00A/$00B reach the sink:
        ports = OutputPorts(BufferSink())
        ports.register(memory)
    """

    def __init__(self, sink: OutputSink):
        self.sink = sink
        self.bytes_out = 0

    def register(self, memory):
        """Register write handlers for both port addresses."""
        memory.register_io_handler(ASCII_OUT, self._write_ascii)
        memory.register_io_handler(SMALL_OUT, self._write_small)

    def _emit(self, byte: int):
        self.sink.emit(byte)
        self.bytes_out += 1

    def _write_ascii(self, addr: int, value: int):
        self._emit(value & 0xFF)

    def _write_small(self, addr: int, value: int):
        for c in small_to_chars(value):
            if c is not None:
                self._emit(c)
