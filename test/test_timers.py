#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import unittest
from pchip.timers import Timers


class TestTimers(unittest.TestCase):
    def setUp(self):
        self.timers = Timers()

    def test_timers_tick_to_zero(self):
        self.timers.set_delay(5)

        for _ in range(5):
            self.timers.tick()

        self.assertEqual(0, self.timers.delay)
        self.timers.tick()  # No underflow
        self.assertEqual(0, self.timers.delay)

    def test_timers_independent(self):
        self.timers.set_delay(3)
        self.timers.set_sound(1)
        self.timers.tick()
        self.assertEqual(2, self.timers.delay)
        self.assertEqual(0, self.timers.sound)
        self.timers.tick()  # Sound stays at zero while delay keeps counting
        self.assertEqual(1, self.timers.delay)
        self.assertEqual(0, self.timers.sound)

    def test_timers_set_absolute(self):
        self.timers.set_delay(0xFF)
        self.timers.tick()
        self.timers.set_delay(0x10)
        self.assertEqual(0x10, self.timers.delay)
