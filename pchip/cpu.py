#!/usr/bin/env python3

"""
CPU Emulator (CHIP-8)

Like a real computer, this is where most of the processing happens.  Each
instruction is fetched from the Machine's RAM, decoded by its first nibble (and
then by its last nibble or low byte where instructions share a first nibble),
and executed directly against the Machine's state.

The main loop ('run') paces everything else too: the CPU runs at a fixed
number of instructions per second, the timers count down at 60Hz of real time,
and inputs and the display are serviced at 60Hz.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from time import perf_counter
from random import randint
from .constants import APP_NAME, DEFAULT_CLOCK_SPEED, FONT_LOC
from .timers import TIMER_FREQ, TIMER_INTERVAL

CPU_ENDIAN = "big"   # CHIP-8 is big-endian
DISPLAY_FREQ = 60.0  # 60Hz emulated display refresh
DISPLAY_INTERVAL = 1.0 / DISPLAY_FREQ


class CPUError(Exception):
    pass


class InvalidOpcodeError(CPUError):
    def __init__(self, opcode, pc):
        super().__init__("Opcode 0x{:04x} at address 0x{:03x} is not a valid instruction".format(opcode, pc))
        self.opcode = opcode
        self.pc = pc


class CPU:
    def __init__(self, machine, debugger, clock_speed=None):
        self.machine = machine
        self.debugger = debugger
        self.live_debug = self.debugger.is_live()

        # These never get replaced, only mutated, so keep direct references for speed
        self.v = machine.v
        self.ram = machine.ram
        self.stack = machine.stack
        self.timers = machine.timers
        self.framebuffer = machine.framebuffer
        self.keypad = machine.keypad

        if clock_speed is None:
            clock_speed = DEFAULT_CLOCK_SPEED

        # User can specify 0 for infinite
        self.core_interval = None if clock_speed <= 0 else 1.0 / clock_speed

        # Define instruction pointers.
        # n = Nibble
        # nn = Byte
        # nnn = address
        # x/y = register (0-15)
        self.instructions = {
            # Initial lookup for instructions' first nibble
            0x0: self._0nnn,  # Alias for bitmask 0xFFFF
            0x1: self._1nnn,
            0x2: self._2nnn,
            0x3: self._3xnn,
            0x4: self._4xnn,
            0x5: self._5nnn_8nnn_9nnn,  # Alias for bitmask 0xF00F
            0x6: self._6xnn,
            0x7: self._7xnn,
            0x8: self._5nnn_8nnn_9nnn,  # Alias for bitmask 0xF00F
            0x9: self._5nnn_8nnn_9nnn,  # Alias for bitmask 0xF00F
            0xA: self._Annn,
            0xB: self._Bnnn,
            0xC: self._Cxnn,
            0xD: self._Dxyn,
            0xE: self._Ennn_Fnnn,  # Alias for bitmask 0xF0FF
            0xF: self._Ennn_Fnnn,  # Alias for bitmask 0xF0FF
            # Instructions beginning with nibble 0x0, bitmask 0xFFFF (i.e., exact match)
            0x00E0: self._00E0,
            0x00EE: self._00EE,
            # Instructions beginning with nibble 0x5/0x8/0x9, bitmask 0xF00F
            0x5000: self._5xy0,
            0x8000: self._8xy0,
            0x8001: self._8xy1,
            0x8002: self._8xy2,
            0x8003: self._8xy3,
            0x8004: self._8xy4,
            0x8005: self._8xy5,
            0x8006: self._8xy6,
            0x8007: self._8xy7,
            0x800E: self._8xyE,
            0x9000: self._9xy0,
            # Instructions beginning with nibble 0xE/0xF, bitmask 0xF0FF
            0xE09E: self._Ex9E,
            0xE0A1: self._ExA1,
            0xF007: self._Fx07,
            0xF00A: self._Fx0A,
            0xF015: self._Fx15,
            0xF018: self._Fx18,
            0xF01E: self._Fx1E,
            0xF029: self._Fx29,
            0xF033: self._Fx33,
            0xF055: self._Fx55,
            0xF065: self._Fx65
        }

        # Current opcode, and where it was fetched from
        self.opcode = 0
        self.debug_pc = machine.pc

        # Timer-related vars
        self.next_timer_time = None

        # Performance-related vars
        self.next_display_update_time = 0
        self.perf_counter_fps = 0
        self.perf_counter_ops = 0
        self.next_perf_report_time = 0

    def run(self, inputs, renderer):
        # Runs until the inputs plugin asks to quit.  Any emulation fault propagates to the caller.
        while True:
            this_time = perf_counter()  # Do this first for maximum precision

            # Performance counters
            if this_time >= self.next_perf_report_time:
                self.next_perf_report_time = int(this_time) + 1.0
                # Reporting the performance should be done before a refresh, as refreshing will likely show the report
                self.report_perf(renderer, self.perf_counter_fps, self.perf_counter_ops)
                self.perf_counter_ops = 0
                self.perf_counter_fps = 0

            # Prevent unnecessary display rendering in excess of host frame rate
            if this_time >= self.next_display_update_time:
                if inputs.process_messages():  # Process inputs at 60Hz too, to avoid slowdown
                    return
                self.next_display_update_time = this_time + DISPLAY_INTERVAL
                self.refresh_framebuffer(renderer)
                self.perf_counter_fps += 1

            self.service_timers(this_time)
            self.step()

            if self.core_interval is not None:
                # Wait for next CPU instruction.  Do this last for maximum precision (takes into account time spent on
                # this instruction)
                next_time = this_time + self.core_interval

                while perf_counter() < next_time:  # Unfortunately we have to do this to get the timing right
                    pass

            self.perf_counter_ops += 1

    def service_timers(self, this_time):
        # Tick the timers once for every 60th of a second of real time that has passed.  Returns the number of ticks.
        if self.next_timer_time is None:
            self.next_timer_time = this_time + TIMER_INTERVAL
            return 0

        if this_time < self.next_timer_time:
            return 0

        due = int((this_time - self.next_timer_time) * TIMER_FREQ) + 1
        self.next_timer_time += due * TIMER_INTERVAL

        # After 256 ticks both counters are certainly zero, so don't spin after a long stall
        for _ in range(min(due, 0x100)):
            self.timers.tick()

        return due

    def step(self):
        self.decode_exec(self.fetch())

    def fetch(self):
        machine = self.machine
        # Keep track of the program counter before altering it in any way for debugging purposes
        self.debug_pc = machine.pc  # Do this all the time in case there is a crash
        opcode = int.from_bytes(self.ram.read_block(machine.pc, 2), CPU_ENDIAN, signed=False)
        machine.pc += 2
        return opcode

    def _call_masked_instruction(self, masked_opcode):
        instruction = self.instructions.get(masked_opcode)

        if instruction is None:
            self._opcode_unsupported()

        instruction()

    def decode_exec(self, opcode):
        self.opcode = opcode
        self._call_masked_instruction((0xF000 & opcode) >> 12)

    def refresh_framebuffer(self, renderer):
        # Hand the screen over only if an instruction has changed it since the last time
        if self.framebuffer.consume_changed():
            renderer.refresh_display(self.framebuffer.get_bitmap())

    def report_perf(self, renderer, fps=0, ops=0):
        renderer.set_title("{} - {} FPS, {} OPS".format(APP_NAME, fps, ops))

    def skip(self):
        self.machine.pc += 2

    def dec_pc(self):
        # Only used to re-run instructions (i.e. keypress wait).
        self.machine.pc = (self.machine.pc - 2) & 0xFFF

    # References to Vx, Vy, byte and addr are always in the same opcode position throughout all instructions, so avoid
    # excessive code duplication (ever so slight slowdown).  Don't reference these more than necessary as they are
    # recalculated each time.
    @property
    def vx(self):
        return (self.opcode & 0xF00) >> 8

    @property
    def vy(self):
        return (self.opcode & 0xF0) >> 4

    @property
    def addr(self):
        return self.opcode & 0xFFF

    @property
    def byte(self):
        return self.opcode & 0xFF

    @property
    def nibble(self):
        return self.opcode & 0xF

    def _opcode_unsupported(self):
        raise InvalidOpcodeError(self.opcode, self.debug_pc) from None

    def debug(self, instruction):
        self.debugger.output(self, instruction)

    def _0nnn(self):
        opcode = self.opcode

        if opcode < 0x10:
            # Opcodes 0x0 - 0xF are used internally for indexing, so they must not be looked up again
            self._opcode_unsupported()

        self._call_masked_instruction(opcode)

    def _5nnn_8nnn_9nnn(self):
        self._call_masked_instruction(self.opcode & 0xF00F)

    def _Ennn_Fnnn(self):
        self._call_masked_instruction(self.opcode & 0xF0FF)

    def _00E0(self):  # CLS
        if self.live_debug:
            self.debug("CLS")

        self.framebuffer.clear()

    def _00EE(self):  # RET
        if self.live_debug:
            self.debug("RET")

        self.machine.pc = self.stack.pop()

    def _1nnn(self):  # JP addr
        if self.live_debug:
            self.debug("JP 0x{:03x}".format(self.addr))

        self.machine.pc = self.addr

    def _2nnn(self):  # CALL addr
        if self.live_debug:
            self.debug("CALL 0x{:03x}".format(self.addr))

        self.stack.push(self.machine.pc)
        self.machine.pc = self.addr

    def _3xnn(self):  # SE Vx, byte
        if self.live_debug:
            self.debug("SE V{:01x}, 0x{:02x}".format(self.vx, self.byte))

        if self.v[self.vx] == self.byte:
            self.skip()

    def _4xnn(self):  # SNE Vx, byte
        if self.live_debug:
            self.debug("SNE V{:01x}, 0x{:02x}".format(self.vx, self.byte))

        if self.v[self.vx] != self.byte:
            self.skip()

    def _5xy0(self):  # SE Vx, Vy
        if self.live_debug:
            self.debug("SE V{:01x}, V{:01x}".format(self.vx, self.vy))

        if self.v[self.vx] == self.v[self.vy]:
            self.skip()

    def _6xnn(self):  # LD Vx, byte
        if self.live_debug:
            self.debug("LD V{:01x}, 0x{:02x}".format(self.vx, self.byte))

        self.v[self.vx] = self.byte

    def _7xnn(self):  # ADD Vx, byte
        vx = self.vx
        byte = self.byte

        if self.live_debug:
            self.debug("ADD V{:01x}, 0x{:02x}".format(vx, byte))

        # No carry flag for this one
        self.v[vx] = (self.v[vx] + byte) & 0xFF

    def _8xy0(self):  # LD Vx, Vy
        if self.live_debug:
            self.debug("LD V{:01x}, V{:01x}".format(self.vx, self.vy))

        self.v[self.vx] = self.v[self.vy]

    def _8xy1(self):  # OR Vx, Vy
        if self.live_debug:
            self.debug("OR V{:01x}, V{:01x}".format(self.vx, self.vy))

        self.v[self.vx] |= self.v[self.vy]

    def _8xy2(self):  # AND Vx, Vy
        if self.live_debug:
            self.debug("AND V{:01x}, V{:01x}".format(self.vx, self.vy))

        self.v[self.vx] &= self.v[self.vy]

    def _8xy3(self):  # XOR Vx, Vy
        if self.live_debug:
            self.debug("XOR V{:01x}, V{:01x}".format(self.vx, self.vy))

        self.v[self.vx] ^= self.v[self.vy]

    # Vf is always written after Vx below, so the flag survives when Vf is itself the target register

    def _8xy4(self):  # ADD Vx, Vy
        vx = self.vx
        vy = self.vy

        if self.live_debug:
            self.debug("ADD V{:01x}, V{:01x}".format(vx, vy))

        val = self.v[vx] + self.v[vy]
        self.v[vx] = val & 0xFF
        self.v[0xF] = int(val > 0xFF)  # Vf is set when carrying

    def _post_8xy5_8xy7(self, val):  # Post-SUB/SUBN
        self.v[self.vx] = val & 0xFF
        self.v[0xF] = int(val >= 0)  # Vf is set when NOT borrowing

    def _8xy5(self):  # SUB Vx, Vy
        if self.live_debug:
            self.debug("SUB V{:01x}, V{:01x}".format(self.vx, self.vy))

        self._post_8xy5_8xy7(self.v[self.vx] - self.v[self.vy])

    def _8xy6(self):  # SHR Vx
        # Vy is ignored.  Only Vx is shifted, as on most modern interpreters.
        if self.live_debug:
            self.debug("SHR V{:01x}".format(self.vx))

        val = self.v[self.vx]
        self.v[self.vx] = val >> 1
        self.v[0xF] = val & 1  # The whole byte gets set just for the flag

    def _8xy7(self):  # SUBN Vx, Vy
        if self.live_debug:
            self.debug("SUBN V{:01x}, V{:01x}".format(self.vx, self.vy))

        self._post_8xy5_8xy7(self.v[self.vy] - self.v[self.vx])

    def _8xyE(self):  # SHL Vx
        if self.live_debug:
            self.debug("SHL V{:01x}".format(self.vx))

        val = self.v[self.vx]
        self.v[self.vx] = (val << 1) & 0xFF
        self.v[0xF] = val >> 7

    def _9xy0(self):  # SNE Vx, Vy
        if self.live_debug:
            self.debug("SNE V{:01x}, V{:01x}".format(self.vx, self.vy))

        if self.v[self.vx] != self.v[self.vy]:
            self.skip()

    def _Annn(self):  # LD I, addr
        if self.live_debug:
            self.debug("LD I, 0x{:03x}".format(self.addr))

        self.machine.i = self.addr

    def _Bnnn(self):  # JP V0, addr
        # This quirk breaks lots of games if set incorrectly, so it is fixed by the mode chosen at startup.  In super
        # mode the jump is to Vx plus the low byte.
        if self.machine.super_mode:
            vx = self.vx

            if self.live_debug:
                self.debug("JP V{:01x}, 0x{:02x}".format(vx, self.byte))

            self.machine.pc = self.byte + self.v[vx]
        else:
            if self.live_debug:
                self.debug("JP V0, 0x{:03x}".format(self.addr))

            self.machine.pc = (self.v[0x0] + self.addr) & 0xFFF

    def _Cxnn(self):  # RND Vx, byte
        if self.live_debug:
            self.debug("RND V{:01x}, 0x{:02x}".format(self.vx, self.byte))

        # The ANDing here is intentional.  This is not a random number between 0 and 'byte' inclusive.
        self.v[self.vx] = randint(0, 0xFF) & self.byte

    def _Dxyn(self):  # DRW Vx, Vy, nibble
        height = self.nibble

        if self.live_debug:
            self.debug("DRW V{:01x}, V{:01x}, 0x{:01x}".format(self.vx, self.vy, height))

        # The sprite's start always wraps, but anything past the bottom-right edges is clipped
        vid_width, vid_height = self.framebuffer.get_vid_size()
        x_pos = self.v[self.vx] % vid_width
        y_pos = self.v[self.vy] % vid_height
        rows = self.ram.read_block(self.machine.i, min(height, vid_height - y_pos)) if height else b""

        self.v[0xF] = 0
        collision = self.framebuffer.draw_sprite(x_pos, y_pos, rows)
        self.v[0xF] = int(collision)

    def _Ex9E(self):  # SKP Vx
        if self.live_debug:
            self.debug("SKP V{:01x}".format(self.vx))

        if self.keypad.is_held(self.v[self.vx]):
            self.skip()

    def _ExA1(self):  # SKNP Vx
        if self.live_debug:
            self.debug("SKNP V{:01x}".format(self.vx))

        if not self.keypad.is_held(self.v[self.vx]):
            self.skip()

    def _Fx07(self):  # LD Vx, DT
        if self.live_debug:
            self.debug("LD V{:01x}, DT".format(self.vx))

        self.v[self.vx] = self.timers.delay

    def _Fx0A(self):  # LD Vx, K
        if self.live_debug:
            self.debug("LD V{:01x}, K".format(self.vx))

        # This opcode waits for a keypress, but since the timers still need to count down and the framebuffer still
        # needs updating, we'll return control to the main loop and simply decrement the incremented program counter.
        key = self.keypad.any_held()

        if key is None:
            # We need to come back here on the next instruction, because no key is held.
            self.dec_pc()
        else:
            self.v[self.vx] = key

    def _Fx15(self):  # LD DT, Vx
        if self.live_debug:
            self.debug("LD DT, V{:01x}".format(self.vx))

        self.timers.set_delay(self.v[self.vx])

    def _Fx18(self):  # LD ST, Vx
        if self.live_debug:
            self.debug("LD ST, V{:01x}".format(self.vx))

        self.timers.set_sound(self.v[self.vx])

    def _Fx1E(self):  # ADD I, Vx
        if self.live_debug:
            self.debug("ADD I, V{:01x}".format(self.vx))

        # Vf is left alone, unlike the Amiga interpreter
        self.machine.i = (self.machine.i + self.v[self.vx]) & 0xFFFF

    def _Fx29(self):  # LD F, Vx
        if self.live_debug:
            self.debug("LD F, V{:01x}".format(self.vx))

        self.machine.i = FONT_LOC + 5 * self.v[self.vx]

    def _Fx33(self):  # LD B, Vx
        if self.live_debug:
            self.debug("LD B, V{:01x}".format(self.vx))

        val = self.v[self.vx]
        i = self.machine.i
        self.ram.write_block(i, bytes((
            val // 100,        # Most-significant digit
            (val // 10) % 10,  # Middle digit
            val % 10           # Least-significant digit
        )))

    def _Fx55(self):  # LD [I], Vx
        if self.live_debug:
            self.debug("LD [I], V{:01x}".format(self.vx))

        # Ensure with +1s that the final register is copied.  I is left unchanged.
        self.ram.write_block(self.machine.i, self.v[:self.vx + 1])

    def _Fx65(self):  # LD Vx, [I]
        if self.live_debug:
            self.debug("LD V{:01x}, [I]".format(self.vx))

        vx = self.vx
        self.v[:vx + 1] = self.ram.read_block(self.machine.i, vx + 1)
