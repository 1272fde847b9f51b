"""
SMA-16 Emulator: Output Sinks

The output ports decide what bytes to emit and when; a sink decides
where they go. A sink has exactly one required capability, emit(byte),
and is called synchronously from inside the memory write that produced
the byte. Sinks must not reorder or batch bytes across emit() calls.

  BufferSink   collects bytes in memory (default, used by tests)
  StreamSink   writes each byte to a binary stream and flushes
  SerialSink   writes each byte to a serial port via pyserial
"""

import logging
import sys
from abc import ABC, abstractmethod
from typing import BinaryIO, Optional

import serial

from ..config import SERIAL_BAUD, SERIAL_WRITE_TIMEOUT

log = logging.getLogger(__name__)


class OutputSink(ABC):
    """Destination for bytes emitted by the output ports."""

    @abstractmethod
    def emit(self, byte: int):
        """Deliver one byte (0-255)."""

    def close(self):
        pass


class BufferSink(OutputSink):
    """Collects emitted bytes for programmatic inspection."""

    def __init__(self):
        self.buffer: bytearray = bytearray()

    def emit(self, byte: int):
        self.buffer.append(byte & 0xFF)

    @property
    def data(self) -> bytes:
        """All bytes emitted since creation or the last clear()."""
        return bytes(self.buffer)

    def clear(self):
        self.buffer.clear()


class StreamSink(OutputSink):
    """Writes every byte straight to a binary stream (stdout by default).

    Flushes after each byte so output appears as the program runs.
    """

    def __init__(self, stream: Optional[BinaryIO] = None):
        self.stream = stream if stream is not None else sys.stdout.buffer

    def emit(self, byte: int):
        self.stream.write(bytes([byte & 0xFF]))
        self.stream.flush()


class SerialSink(OutputSink):
    """Sends emitted bytes out a serial port.

    The port is opened on first emit(). Any pyserial URL works, so
    'loop://' gives a loopback port without hardware.

    Usage:
        sink = SerialSink('/dev/ttyUSB0', baud=9600)
        emu = Sma16(sink=sink)
        emu.run()
        sink.close()
    """

    def __init__(self, port: str, baud: int = SERIAL_BAUD):
        self.port = port
        self.baud = baud
        self.ser: Optional[serial.Serial] = None

    def open(self) -> serial.Serial:
        if self.ser is None or not self.ser.is_open:
            self.ser = serial.serial_for_url(
                self.port,
                baudrate=self.baud,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=0.1,
                write_timeout=SERIAL_WRITE_TIMEOUT,
            )
            log.info("Opened %s @ %d baud (8N1)", self.port, self.baud)
        return self.ser

    def emit(self, byte: int):
        self.open().write(bytes([byte & 0xFF]))

    def close(self):
        if self.ser is not None and self.ser.is_open:
            self.ser.close()
            log.info("Closed %s", self.port)
        self.ser = None

    @property
    def is_connected(self) -> bool:
        return self.ser is not None and self.ser.is_open
