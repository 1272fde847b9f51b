"""
SMA-16 Emulator: Machine Configuration
=======================================

Fixed parameters of the emulated machine. Everything here is a property
of the SMA-16 itself (word width, memory size, memory map), so nothing is
read from the environment or from files.

Memory map (word addresses):
  $000  RESET_VECTOR               execution starts here after power-on
  $001  FAULT_VECTOR               fault handler entry point
  $008  INTERRUPT_REASON_REGISTER  reason code of the last fault
  $009  INTERRUPT_RETURN_REGISTER  resume address of the last fault
  $00A  ASCII_OUT                  write: emit low byte as one character
  $00B  SMALL_OUT                  write: emit two packed 6-bit characters
  $00D  STACK_SIZE_REGISTER        initialized to $FFFF, never consulted
"""

# =============================================================================
#  WORD / ADDRESS GEOMETRY
# =============================================================================
WORD_MASK = 0xFFFF

OPCODE_SHIFT = 12
OPCODE_MASK = 0xF         # after shifting
OPCODE_FIELD = 0xF000     # in place
DATA_MASK = 0x0FFF

ADDR_MASK = 0x0FFF
MEM_WORDS = 4096           # 12-bit address space


# =============================================================================
#  RESERVED ADDRESSES
# =============================================================================
RESET_VECTOR = 0x000
FAULT_VECTOR = 0x001

INTERRUPT_REASON_REGISTER = 0x008
INTERRUPT_RETURN_REGISTER = 0x009
STACK_SIZE_REGISTER = 0x00D

ASCII_OUT = 0x00A
SMALL_OUT = 0x00B


# =============================================================================
#  POWER-ON DEFAULTS
# =============================================================================
STACK_SIZE_DEFAULT = 0xFFFF   # sentinel; the stack itself is unbounded

# Fault reason for an unrecognized opcode: base | opcode nibble
FAULT_UNKNOWN_OPCODE = 0x0FF0


# =============================================================================
#  OUTPUT DEFAULTS
# =============================================================================
SERIAL_BAUD = 9600
SERIAL_WRITE_TIMEOUT = 1.0    # seconds


# =============================================================================
#  DEBUG
# =============================================================================
TRACE_DEPTH = 10_000          # trace lines kept, oldest dropped first
