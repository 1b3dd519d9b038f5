#!/usr/bin/env python3

"""
PyGame Renderer Plugin

Draws the screen onto an SDL window surface via PyGame.  The surface is
allocated at the emulated screen size, and then the contents are stretched
(in the correct aspect ratio using 'Nearest Neighbour' translation) to fit the
window itself.  This means we don't have to draw the same pixel multiple times.

Pixels are drawn in one of two colours, dark grey for 'off' and white for 'on'
by default.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import pygame
from .r_null import RendererError, Renderer as RendererBase, unpack_bitmap
from ..constants import APP_NAME


class Renderer(RendererBase):
    def __init__(self, scale=None, palette=None, **kwargs):
        if scale is None:
            scale = 640  # Default window width if not supplied, or set to default

        colour_map = [0x222222, 0xDDDDDD]  # Off, on

        # Override one (or both) of the colours with a user-defined palette, if necessary.  Must happen before the display
        # is opened.
        if palette is not None:
            palette_split = palette.split(",")

            if len(palette_split) > 2:
                raise RendererError("Too many palette colours defined.  Only 'off' and 'on' can be set.")

            for colour_num, colour in enumerate(palette_split):
                if len(colour) != 6:
                    raise RendererError("Palette colours must all be 6 hex digits long.")

                try:
                    colour_map[colour_num] = int(colour, 16)
                except ValueError:
                    raise RendererError("Invalid palette colour defined.") from None

        # Split compound RGB values for faster byte-based lookup later
        self.rgb_map = [bytes((i >> 16, (i >> 8) & 0xFF, i & 0xFF)) for i in colour_map]

        pygame.display.init()
        self.set_title(APP_NAME)
        self.rgb_buffer = None
        self.scaled_size = (scale, scale // 2)
        self.display_surface = pygame.display.set_mode(self.scaled_size)

        super().__init__(scale)

    def set_resolution(self, width, height):
        total_pixels = width * height
        # Fill the offscreen 24-bit RGB buffer with the default background colour
        self.rgb_buffer = bytearray(self.rgb_map[0] * total_pixels)

        # Call superclass method so display size is known on the next refresh
        super().set_resolution(width, height)

    def refresh_display(self, bitmap):
        if not self.rgb_buffer:
            return

        # Update RGB buffer in-place to minimise allocations and PyGame calls
        rgb_buffer = self.rgb_buffer
        rgb_map = self.rgb_map

        for location, pixel in enumerate(unpack_bitmap(bitmap)):
            rgb_location = location * 3
            rgb_buffer[rgb_location:rgb_location + 3] = rgb_map[pixel]

        # Blit the bytearray straight to the surface, then stretch it to the window
        render_surface = pygame.image.frombuffer(bytes(rgb_buffer), (self.width, self.height), "RGB")
        scaled_win = pygame.transform.scale(render_surface, self.scaled_size)
        self.display_surface.blit(scaled_win, (0, 0))
        pygame.display.flip()

    def set_title(self, title):
        pygame.display.set_caption(title)

    def shutdown(self):
        # PyGame currently segfaults if display.quit is called via __del__
        pygame.display.quit()
        super().shutdown()
