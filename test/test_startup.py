#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout, redirect_stderr
from pchip import main, build_machine, load_plugins, StartupError, HaltError
from pchip.constants import DEFAULT_KEYMAP, MODE_CLASSIC, MODE_SUPER
from pchip.cpu import InvalidOpcodeError
from pchip.inputs.i_null import Inputs
from pchip.renderers.r_null import Renderer
import plainchip


class TestStartup(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp_dir.cleanup)

    def _write_rom(self, data):
        filename = os.path.join(self.tmp_dir.name, "test.ch8")

        with open(filename, "wb") as f:
            f.write(data)

        return filename

    def _args(self, filename, **overrides):
        args = {
            "filename": filename,
            "mode": None,
            "clock_speed": None,
            "renderer": "null",
            "scale": None,
            "keymap": DEFAULT_KEYMAP,
            "palette": None,
            "debug": False
        }
        args.update(overrides)
        return args

    def test_startup_parse_args(self):
        args = vars(plainchip.parse_args(["game.ch8"]))
        self.assertEqual("game.ch8", args["filename"])
        self.assertEqual(MODE_CLASSIC, args["mode"])
        self.assertEqual(DEFAULT_KEYMAP, args["keymap"])
        self.assertIsNone(args["clock_speed"])
        self.assertFalse(args["debug"])

        args = vars(plainchip.parse_args(["game.ch8", "-m", "super", "-c", "0", "-r", "null"]))
        self.assertEqual(MODE_SUPER, args["mode"])
        self.assertEqual(0, args["clock_speed"])
        self.assertEqual("null", args["renderer"])

    def test_startup_missing_filename(self):
        with redirect_stderr(io.StringIO()):  # argparse prints usage before exiting
            self.assertRaises(SystemExit, plainchip.parse_args, [])

    def test_startup_build_machine(self):
        machine = build_machine(self._write_rom(b"\x12\x00"), MODE_SUPER)
        self.assertTrue(machine.super_mode)
        self.assertEqual(0x12, machine.ram.read(0x200))

    def test_startup_build_machine_failures(self):
        self.assertRaises(StartupError, build_machine, os.path.join(self.tmp_dir.name, "none.ch8"), MODE_CLASSIC)
        self.assertRaises(StartupError, build_machine, self._write_rom(bytes(0xE01)), MODE_CLASSIC)
        self.assertRaises(StartupError, build_machine, self._write_rom(b"\x12\x00"), "schip")

    def test_startup_load_null_plugins(self):
        self.assertEqual((Inputs, Renderer), load_plugins("null"))
        self.assertRaises(StartupError, load_plugins, "vga")

    def test_startup_main_halts(self):
        filename = self._write_rom(b"\x00\x00")

        with redirect_stdout(io.StringIO()):
            with self.assertRaises(HaltError) as ctx:
                main(self._args(filename))

        self.assertIn("Emulation halted", str(ctx.exception))
        self.assertIn("Stack: (Empty)", str(ctx.exception))
        self.assertIn("Opcode 0x0000 at address 0x200", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, InvalidOpcodeError)

    def test_startup_cli_exits_on_failure(self):
        with redirect_stdout(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                plainchip.cli([os.path.join(self.tmp_dir.name, "none.ch8"), "-r", "null"])

        self.assertIn("Unable to read ROM", ctx.exception.code)
