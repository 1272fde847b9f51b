"""
Output port and sink tests.

Packed-character codes: 0-25 'A'-'Z', 26-51 'a'-'z', 52-61 '0'-'9',
62 space, 63 nothing.
"""
import io
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from sma16.config import ASCII_OUT, SMALL_OUT
from sma16.mem.memory import Memory
from sma16.periph.ports import (
    OutputPorts, small_code_to_char, small_to_chars, decode_small, encode_small,
)
from sma16.periph.sinks import OutputSink, BufferSink, StreamSink, SerialSink


def wired():
    sink = BufferSink()
    mem = Memory()
    ports = OutputPorts(sink)
    ports.register(mem)
    return mem, ports, sink


class TestPackedCharacters:

    @pytest.mark.parametrize("code,char", [
        (0, 'A'), (25, 'Z'), (26, 'a'), (51, 'z'),
        (52, '0'), (61, '9'), (62, ' '),
    ])
    def test_code_map(self, code, char):
        assert small_code_to_char(code) == ord(char)

    def test_code_63_is_nothing(self):
        assert small_code_to_char(63) is None

    def test_order_low_bits_first(self):
        """low 6 bits → first char, bits 6-11 → second"""
        assert small_to_chars((62 << 6) | 0) == (ord('A'), ord(' '))
        assert decode_small((62 << 6) | 0) == b'A '

    def test_only_one_emitted(self):
        assert decode_small((63 << 6) | 7) == b'H'
        assert decode_small((7 << 6) | 63) == b'H'
        assert decode_small(0xFFF) == b''

    def test_opcode_bits_ignored(self):
        assert decode_small(0xF000 | (62 << 6)) == b'A '

    def test_encode_small(self):
        assert encode_small('Hi') == 7 | (34 << 6)
        assert decode_small(encode_small('Hi')) == b'Hi'
        assert decode_small(encode_small('A')) == b'A'
        assert encode_small('') == 0xFFF

    def test_encode_small_rejects(self):
        with pytest.raises(ValueError):
            encode_small('!')
        with pytest.raises(ValueError):
            encode_small('abc')


class TestOutputPorts:

    def test_ascii_port_low_byte(self):
        mem, ports, sink = wired()
        mem.write_raw(ASCII_OUT, 0x1241)
        assert sink.data == b'A'
        assert ports.bytes_out == 1

    def test_small_port(self):
        mem, ports, sink = wired()
        mem.write_raw(SMALL_OUT, encode_small('Ok'))
        assert sink.data == b'Ok'
        assert ports.bytes_out == 2

    def test_small_port_code_63_silent(self):
        mem, ports, sink = wired()
        mem.write_raw(SMALL_OUT, 0xFFF)
        assert sink.data == b''
        assert ports.bytes_out == 0

    def test_other_addresses_silent(self):
        mem, ports, sink = wired()
        for addr in (0x000, 0x009, 0x00C, 0x100):
            mem.write_raw(addr, 0x41)
        assert sink.data == b''

    def test_emission_order_across_ports(self):
        mem, ports, sink = wired()
        mem.write_raw(ASCII_OUT, ord('>'))
        mem.write_raw(SMALL_OUT, encode_small('Hi'))
        mem.write_raw(ASCII_OUT, ord('\n'))
        assert sink.data == b'>Hi\n'


class TestSinks:

    def test_buffer_sink(self):
        sink = BufferSink()
        sink.emit(0x41)
        sink.emit(0x142)
        assert sink.data == b'AB'
        sink.clear()
        assert sink.data == b''

    def test_stream_sink(self):
        stream = io.BytesIO()
        sink = StreamSink(stream)
        sink.emit(ord('h'))
        sink.emit(ord('i'))
        assert stream.getvalue() == b'hi'

    def test_serial_sink_loopback(self):
        sink = SerialSink('loop://')
        assert not sink.is_connected
        sink.emit(0x41)
        sink.emit(0x42)
        assert sink.is_connected
        assert sink.ser.read(2) == b'AB'
        sink.close()
        assert not sink.is_connected

    def test_custom_sink(self):
        class Collect(OutputSink):
            def __init__(self):
                self.got = []

            def emit(self, byte):
                self.got.append(byte)

        sink = Collect()
        mem = Memory()
        OutputPorts(sink).register(mem)
        mem.write_raw(SMALL_OUT, (62 << 6) | 0)
        assert sink.got == [ord('A'), ord(' ')]
