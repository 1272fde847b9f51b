# SMA-16 Virtual Emulator: pure-software model of a minimal 16-bit machine
#
# 4096 words of memory, one accumulator, an unbounded value stack and a
# 4-bit opcode instruction set. Output happens through two memory-mapped
# ports ($00A ASCII, $00B packed characters) into a pluggable sink.
#
# Layout:
#   cpu/     word codec, opcode decoder, register set
#   mem/     masked 4K word memory with write routing
#   periph/  output ports and sinks
#   emu.py   fetch/decode/execute core

__version__ = "0.1.0"

from .emu import Sma16
from .cpu.decoder import Op, Instruction, decode, disassemble
from .cpu.regs import Registers
from .cpu.word import opcode, data, set_data, merge_data, encode
from .mem.memory import Memory
from .periph.ports import OutputPorts, small_to_chars, decode_small, encode_small
from .periph.sinks import OutputSink, BufferSink, StreamSink, SerialSink
from .log_setup import setup_logging
