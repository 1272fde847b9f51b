"""
SMA-16 Emulator: Opcode Decoder

Maps the 4-bit opcode field of a word to one of 14 operation kinds and
packages it, together with the 12-bit operand, as an Instruction. The
execution core decodes once per step and dispatches on Instruction.op.

Opcode card:

  $0  HLT  Halt           $8  XOR  Xor
  $1  ---  (unassigned)   $9  AND  And
  $2  JMP  Jump           $A  SFL  StoreFull
  $3  JMZ  JumpZ          $B  ADD  Add
  $4  LDA  Load           $C  ---  (unassigned)
  $5  STA  Store          $D  POP  Pop
  $6  LSH  ShiftLeft      $E  PSH  Push
  $7  RSH  ShiftRight     $F  NOP  NoOp

Unassigned nibbles decode to an Unknown instruction (op is None) that
still carries its nibble, so the core can raise an in-band fault.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from .word import opcode, data


class Op(IntEnum):
    HALT = 0x0
    JUMP = 0x2
    JUMPZ = 0x3
    LOAD = 0x4
    STORE = 0x5
    SHIFT_LEFT = 0x6
    SHIFT_RIGHT = 0x7
    XOR = 0x8
    AND = 0x9
    STORE_FULL = 0xA
    ADD = 0xB
    POP = 0xD
    PUSH = 0xE
    NOOP = 0xF


# ──────────────────────────────────────────────
# Opcode table: nibble -> (kind, mnemonic, takes_operand)
# ──────────────────────────────────────────────

OPCODES = {
    0x0: (Op.HALT,        'HLT', False),
    0x2: (Op.JUMP,        'JMP', True),
    0x3: (Op.JUMPZ,       'JMZ', True),
    0x4: (Op.LOAD,        'LDA', True),
    0x5: (Op.STORE,       'STA', True),
    0x6: (Op.SHIFT_LEFT,  'LSH', True),
    0x7: (Op.SHIFT_RIGHT, 'RSH', True),
    0x8: (Op.XOR,         'XOR', True),
    0x9: (Op.AND,         'AND', True),
    0xA: (Op.STORE_FULL,  'SFL', True),
    0xB: (Op.ADD,         'ADD', True),
    0xD: (Op.POP,         'POP', False),
    0xE: (Op.PUSH,        'PSH', False),
    0xF: (Op.NOOP,        'NOP', False),
}

MNEMONICS = {kind: mnem for kind, mnem, _ in OPCODES.values()}

UNKNOWN_MNEMONIC = '???'


@dataclass(frozen=True)
class Instruction:
    """One decoded word.

    op       Op kind, or None for an unassigned opcode
    operand  12-bit data field
    nibble   raw opcode field (what Unknown carries)
    raw      the full 16-bit word as fetched
    """
    op: Optional[Op]
    operand: int
    nibble: int
    raw: int

    @property
    def is_unknown(self) -> bool:
        return self.op is None

    @property
    def mnemonic(self) -> str:
        if self.op is None:
            return UNKNOWN_MNEMONIC
        return MNEMONICS[self.op]


def lookup(nibble: int) -> Optional[Op]:
    """Operation kind for an opcode nibble, None if unassigned."""
    entry = OPCODES.get(nibble & 0xF)
    return entry[0] if entry else None


def decode(word: int) -> Instruction:
    """Split a word into its tagged Instruction form."""
    nibble = opcode(word)
    return Instruction(
        op=lookup(nibble),
        operand=data(word),
        nibble=nibble,
        raw=word & 0xFFFF,
    )


def disassemble(word: int) -> str:
    """Render a word as assembly text, e.g. 0xB005 -> 'ADD $005'.

    Operand-less instructions print the mnemonic only. Unassigned opcodes
    print '???' followed by the nibble so traces show what faulted.
    """
    inst = decode(word)
    if inst.op is None:
        return f"{UNKNOWN_MNEMONIC} ${inst.nibble:X}"
    _, mnem, takes_operand = OPCODES[inst.nibble]
    if not takes_operand:
        return mnem
    return f"{mnem} ${inst.operand:03X}"
