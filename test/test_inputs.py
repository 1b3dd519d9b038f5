#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import unittest
from types import SimpleNamespace
import pygame
from pchip.constants import DEFAULT_KEYMAP
from pchip.inputs.i_null import Inputs, InputsError
from pchip.inputs.i_pygame import Inputs as PygameInputs
from pchip.keypad import Keypad
from pchip.renderers.r_null import Renderer


class TestNullInputs(unittest.TestCase):
    def setUp(self):
        self.keypad = Keypad()
        self.renderer = Renderer()

    def test_inputs_default_keymap(self):
        inputs = Inputs(DEFAULT_KEYMAP, self.renderer, self.keypad)
        self.assertEqual(16, len(inputs.keymap_dict))
        self.assertEqual(0x0, inputs.keymap_dict[ord("x")])
        self.assertEqual(0x1, inputs.keymap_dict[ord("1")])
        self.assertEqual(0xC, inputs.keymap_dict[ord("4")])
        self.assertEqual(0xF, inputs.keymap_dict[ord("v")])
        self.assertFalse(inputs.process_messages())

    def test_inputs_bad_keymaps(self):
        self.assertRaises(InputsError, Inputs, "1,2,3", self.renderer, self.keypad)
        self.assertRaises(InputsError, Inputs, ",".join(["a"] * 16), self.renderer, self.keypad)
        self.assertRaises(InputsError, Inputs, ",".join(["1"] * 16), self.renderer, self.keypad)

    def test_inputs_force_lowercase(self):
        keymap = ",".join(str(ord(char)) for char in "X123QWEASDZC4RFV")
        inputs = Inputs(keymap, self.renderer, self.keypad, force_lowercase=True)
        self.assertEqual(0x0, inputs.keymap_dict[ord("x")])
        self.assertEqual(0xD, inputs.keymap_dict[ord("r")])

    def test_inputs_shutdown_releases_keys(self):
        inputs = Inputs(DEFAULT_KEYMAP, self.renderer, self.keypad)
        self.keypad.press(0x5)
        inputs.shutdown()
        self.assertIsNone(self.keypad.any_held())


class TestPygameInputs(unittest.TestCase):
    def setUp(self):
        self.keypad = Keypad()
        self.inputs = PygameInputs(DEFAULT_KEYMAP, Renderer(), self.keypad)

    def test_pygame_press_release(self):
        self.assertFalse(self.inputs._pygame_keydown(SimpleNamespace(key=pygame.K_w)))
        self.assertTrue(self.keypad.is_held(0x5))
        self.assertFalse(self.inputs._pygame_keyup(SimpleNamespace(key=pygame.K_w)))
        self.assertFalse(self.keypad.is_held(0x5))

    def test_pygame_unmapped_key(self):
        self.inputs._pygame_keydown(SimpleNamespace(key=pygame.K_p))
        self.assertIsNone(self.keypad.any_held())

    def test_pygame_quit_keys(self):
        self.assertTrue(self.inputs._pygame_keydown(SimpleNamespace(key=pygame.K_ESCAPE)))
        self.assertTrue(self.inputs._pygame_quit(None))
