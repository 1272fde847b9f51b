"""
SMA-16 Emulator: Word Codec

A word is 16 bits wide and is read two ways:

    OOOO DDDDDDDDDDDD

    O: opcode nibble (bits 15-12)
    D: data / operand field (bits 11-0)

All functions here are total over 16-bit inputs. Wider inputs are
masked, never rejected.
"""

from ..config import (
    WORD_MASK, OPCODE_SHIFT, OPCODE_MASK, OPCODE_FIELD, DATA_MASK,
)


def opcode(word: int) -> int:
    """Opcode nibble, bits 15-12."""
    return (word >> OPCODE_SHIFT) & OPCODE_MASK


def data(word: int) -> int:
    """Data field, bits 11-0."""
    return word & DATA_MASK


def set_data(word: int, value: int) -> int:
    """Set the "data" of a register word.

    On the SMA-16 this replaces the whole register with ``value``: the
    opcode nibble of ``word`` is NOT kept. Logic and flagged-shift results
    land in the accumulator this way. Compare merge_data(), which is what
    Store uses for memory.
    """
    return value & WORD_MASK


def merge_data(word: int, value: int) -> int:
    """Replace only the low 12 bits of ``word`` with data(value)."""
    return (word & OPCODE_FIELD) | data(value)


def encode(op: int, operand: int = 0) -> int:
    """Pack an opcode nibble and a 12-bit operand into one word.

    encode(0xB, 5) -> 0xB005  (ADD $005)
    """
    return ((int(op) & OPCODE_MASK) << OPCODE_SHIFT) | data(operand)
