#!/usr/bin/env python3

"""
Main Startup Module

Simply call main(args) to start the emulator, replacing args with a dictionary
of options.  This can be done via the Terminal or GUI.

All options must be supplied.  Defaults can be specified with a 'None'.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import APP_INTRO, APP_COPYRIGHT, MEM_SIZE, PROGRAM_LOC, MODE_CLASSIC, MODE_SUPER, VID_WIDTH, VID_HEIGHT
from .cpu import CPU, CPUError
from .debugger import Debugger
from .hostio import Loader
from .machine import Machine
from .ram import RAMError
from .stack import StackError


class StartupError(Exception):
    pass


class HaltError(Exception):
    pass


def load_plugins(opt_renderer):
    # Returns the (Inputs, Renderer) classes for the chosen renderer.  If no renderer is chosen, try PyGame first, then
    # Curses.
    auto_select_renderer = opt_renderer is None

    # flake8: noqa: F401
    if auto_select_renderer or opt_renderer == "pygame":
        # pylint: disable=unused-import, import-outside-toplevel, raise-missing-from
        try:
            import pygame
        except ImportError:
            if auto_select_renderer:
                opt_renderer = "curses"
            else:
                raise StartupError(
                    "PyGame does not appear to be installed."
                )
        else:
            from .inputs.i_pygame import Inputs
            from .renderers.r_pygame import Renderer
            return Inputs, Renderer

    if opt_renderer == "curses":
        # pylint: disable=unused-import, import-outside-toplevel, raise-missing-from
        try:
            import curses
        except ImportError:
            if auto_select_renderer:
                raise StartupError(
                    "Neither PyGame nor Curses (or Windows-Curses) appear to be installed."
                )

            raise StartupError(
                "Curses (or Windows-Curses) does not appear to be installed."
            )
        else:
            from .inputs.i_curses import Inputs
            from .renderers.r_curses import Renderer
            return Inputs, Renderer

    if opt_renderer == "null":
        # pylint: disable=import-outside-toplevel
        from .inputs.i_null import Inputs
        from .renderers.r_null import Renderer
        return Inputs, Renderer

    raise StartupError("Unknown renderer '{}'.".format(opt_renderer))


def build_machine(filename, mode):
    # Read ROM binary and write it into a fresh machine at the default address
    if mode not in (MODE_CLASSIC, MODE_SUPER):
        raise StartupError("Unknown interpreter mode '{}'.".format(mode))

    try:
        program = Loader().load_binary(filename)
    except OSError as err:
        raise StartupError("Unable to read ROM '{}': {}".format(filename, err.strerror or err)) from err

    try:
        return Machine(program, super_mode=(mode == MODE_SUPER))
    except RAMError:
        raise StartupError(
            "ROM '{}' is {} bytes, which is too large to fit in memory (maximum {} bytes).".format(
                filename, len(program), MEM_SIZE - PROGRAM_LOC
            )
        ) from None


def halt_report(cpu, err):
    return (
        "Emulation halted.\n\n" +
        "{}Debug info:\n" +
        "{}\n\n{}"
    ).format(APP_INTRO, cpu.debugger.debug(cpu, "???", verbose=True), err)


def main(args):
    print("".join((APP_INTRO, APP_COPYRIGHT)))

    machine = build_machine(args["filename"], args["mode"] or MODE_CLASSIC)
    Inputs, Renderer = load_plugins(args["renderer"])

    # Set up a new rendering system sized for the emulated screen
    renderer = Renderer(scale=args["scale"], palette=args["palette"])
    renderer.set_resolution(VID_WIDTH, VID_HEIGHT)

    try:
        # Set up host inputs, and link to the chosen rendering module in case it provides inputs too
        inputs = Inputs(args["keymap"], renderer, machine.keypad)

        # Set up debugger and live output if necessary
        debugger = Debugger()
        debugger.set_live(args["debug"])

        # Create a new CPU, plug it into the machine, and boot it up
        cpu = CPU(machine, debugger, clock_speed=args["clock_speed"])

        try:
            cpu.run(inputs, renderer)
        except (CPUError, StackError, RAMError) as err:
            raise HaltError(halt_report(cpu, err)) from err
        finally:
            inputs.shutdown()
    finally:
        # The CPU has quit, so shut down the rendering framework.  __del__ cannot be relied upon when using PyPy
        renderer.shutdown()
