#!/usr/bin/env python3

"""
Machine State

Everything the running program can change lives here: system RAM, the V
registers, the index register, the program counter, the call stack, both
timers, the framebuffer and the keypad.

A Machine is built once per run.  Memory starts zeroed, the system font is
written at 0x50 and the program is copied in at 0x200.  The interpreter mode
is fixed at construction time.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import MEM_SIZE, FONT_LOC, PROGRAM_LOC, STACK_DEPTH, SYSTEM_FONT
from .framebuffer import Framebuffer
from .keypad import Keypad
from .ram import RAM
from .stack import Stack
from .timers import Timers


class Machine:
    def __init__(self, program=b"", super_mode=False, stack_depth=STACK_DEPTH):
        self._super_mode = bool(super_mode)

        # Allocate memory, then write the system font and the program into it
        self.ram = RAM()
        self.ram.resize(MEM_SIZE)
        self.ram.write_block(FONT_LOC, SYSTEM_FONT)
        self.ram.write_block(PROGRAM_LOC, program)

        # Bytearrays are mutable, so this should be fast when a register is updated
        self.v = memoryview(bytearray(16))
        self.i = 0  # Index register
        self.pc = PROGRAM_LOC

        self.stack = Stack(stack_depth)
        self.timers = Timers()
        self.framebuffer = Framebuffer()
        self.keypad = Keypad()

    @property
    def super_mode(self):
        return self._super_mode
