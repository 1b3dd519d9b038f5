#!/usr/bin/env python3

"""
Delay and Sound Timers

Both timers count down towards zero at 60Hz, regardless of how fast the CPU is
running.  The CPU's main loop decides when a tick is due by watching the real
clock; this module only holds the counters.

The sound timer is modeled as a counter only.  No audio is produced.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

TIMER_FREQ = 60.0  # 60Hz emulated system timer refresh
TIMER_INTERVAL = 1.0 / TIMER_FREQ


class Timers:
    def __init__(self):
        self.delay = 0
        self.sound = 0

    def set_delay(self, value):
        self.delay = value & 0xFF

    def set_sound(self, value):
        self.sound = value & 0xFF

    def tick(self):
        if self.delay > 0:
            self.delay -= 1

        if self.sound > 0:
            self.sound -= 1
