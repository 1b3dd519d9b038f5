#!/usr/bin/env python3

"""
Curses Renderer Plugin

Draws the screen in a standard Linux-style TTY Terminal, the Windows Command
Prompt, or PowerShell.  Each 'on' pixel is drawn as an inverted space, which is
stretched horizontally by the scale, as terminal characters are roughly twice
as tall as they are wide.

The top line is kept for the title (and performance figures).
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import curses
import _curses
from .r_null import Renderer as RendererBase, unpack_bitmap


class Renderer(RendererBase):
    def __init__(self, scale=None, **kwargs):
        if scale is None:
            scale = 2  # Default horizontal stretch if not supplied, or set to default

        self.pixel_char = " " * scale
        self.pad = None
        self.last_bitmap = None
        self.refresh_needed = False
        self.last_screen_height = -1
        self.last_screen_width = -1
        self.screen = curses.initscr()
        curses.curs_set(0)
        curses.noecho()
        curses.cbreak()

        super().__init__(scale)

    def set_resolution(self, width, height):
        # We have to allow one extra character, presumably for the cursor, otherwise we can't write the furthest
        # bottom-right pixel.  One more line is used for the title.
        self.pad = curses.newpad(height + 2, width * self.scale + 1)
        self.last_bitmap = None
        super().set_resolution(width, height)

    def refresh_display(self, bitmap):
        if self.pad is None:
            return

        last_bitmap = self.last_bitmap
        width = self.width

        # Only redraw pixels whose byte has changed since the last frame
        for location, pixel in enumerate(unpack_bitmap(bitmap)):
            if last_bitmap is not None and last_bitmap[location >> 3] == bitmap[location >> 3]:
                continue

            y, x = divmod(location, width)
            self.pad.addstr(y + 1, x * self.scale, self.pixel_char, curses.A_REVERSE if pixel else curses.A_NORMAL)

        self.last_bitmap = bytes(bitmap)
        self.refresh_needed = True
        self._refresh_screen()

    def _refresh_screen(self):
        screen_height, screen_width = self.screen.getmaxyx()  # This doesn't seem to ever change/work on Windows?!

        if screen_height != self.last_screen_height or screen_width != self.last_screen_width:
            # Screen resolution changed, redraw everything
            self.screen.clear()

            if hasattr(curses, "resizeterm"):
                # This doesn't work on Windows
                curses.resizeterm(screen_height, screen_width)

            self.screen.refresh()
            self.last_screen_height = screen_height
            self.last_screen_width = screen_width
            self.refresh_needed = True

        if self.refresh_needed:
            self.pad.refresh(0, 0, 0, 0, screen_height - 1, screen_width - 1)
            self.refresh_needed = False

    def set_title(self, title):
        if self.pad:
            line_width = self.width * self.scale
            self.pad.addstr(0, 0, title[:line_width].ljust(line_width), curses.A_REVERSE)
            self.refresh_needed = True

        super().set_title(title)

    def shutdown(self):
        if self.pad:
            del self.pad
            self.pad = None

        curses.nocbreak()
        curses.echo()

        try:
            curses.curs_set(1)
        except _curses.error:
            pass

        curses.endwin()
        super().shutdown()

    # No Superclass for these Curses-specific methods

    def get_curses_screen(self):
        return self.screen
