#!/usr/bin/env python3

__author__ = "Gregory Maynard-Hoare"
__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"
__version__ = "1.0.0"

import sys
from argparse import ArgumentParser
from pchip import main, StartupError, HaltError
from pchip.constants import DEFAULT_KEYMAP, DEFAULT_CLOCK_SPEED, SUPPORTED_MODES, MODE_CLASSIC
from pchip.inputs.i_null import InputsError
from pchip.renderers.r_null import RendererError


def parse_args(argv=None):
    parser = ArgumentParser()
    parser.add_argument("filename", help="ROM to execute (normally ending in .ch8 or .c8)")
    parser.add_argument(
        "-m", "--mode", choices=SUPPORTED_MODES, default=MODE_CLASSIC,
        help="select classic CHIP-8 or Super-CHIP behaviour for the Bnnn jump instruction (default classic)"
    )
    parser.add_argument(
        "-c", "--clock_speed", type=int,
        help="set the CPU speed in operations/second (default {}, 0 = uncapped)".format(DEFAULT_CLOCK_SPEED)
    )
    parser.add_argument(
        "-r", "--renderer", choices=["pygame", "curses", "null"],
        help="set the rendering and input systems (pygame by default if available, otherwise curses)"
    )
    parser.add_argument(
        "-s", "--scale", type=int,
        help="set the window width in PyGame mode (default 640), and scale in Curses mode (default 2)"
    )
    parser.add_argument(
        "-k", "--keymap", default=DEFAULT_KEYMAP,
        help="redefine the 16 keyscan codes (PyGame) or character numbers (Curses).  Separate each decimal with a comma"
    )
    parser.add_argument(
        "-p", "--palette",
        help="redefine the 'off' and 'on' colours for the PyGame renderer in comma-separated hex, e.g. 000000,FFFFFF"
    )
    parser.add_argument(
        "-d", "--debug", action="store_true", default=False,
        help="enable live debug output of every instruction.  Slows CPU execution"
    )
    return parser.parse_args(argv)  # Can call sys.exit(2) if args are incorrect


def cli(argv=None):
    args = vars(parse_args(argv))

    # It is possible to start the emulator from a GUI by calling main with a dictionary
    try:
        main(args)
    except (StartupError, HaltError, InputsError, RendererError) as err:
        sys.exit(str(err))


if __name__ == "__main__":
    cli()
