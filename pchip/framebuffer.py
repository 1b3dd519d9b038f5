#!/usr/bin/env python3

"""
Framebuffer Emulator

Pixels are written here, and are only handed to the actual display (the host
rendering system) at up to 60Hz, and only if something has changed since the
last hand-over.

Programs for this system cannot write directly into video RAM.  Instead,
sprites are drawn to the screen using an XOR method.  Collisions (where any
pixel was set, but was unset by an XOR), are reported back to the caller.

The screen is stored as a packed 1-bit-per-pixel bitmap, row-major and
most-significant-bit first, which is exactly the layout passed to renderers.
Sprites which run over the right or bottom edges are clipped rather than
wrapped around.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import VID_WIDTH, VID_HEIGHT
from .ram import RAM


class FramebufferError(Exception):
    pass


class Framebuffer:
    def __init__(self, vid_width=VID_WIDTH, vid_height=VID_HEIGHT):
        if vid_width % 8:
            raise FramebufferError("Screen width must be a multiple of 8 pixels")

        self.vid_width = vid_width
        self.vid_height = vid_height
        self.vid_size = vid_width * vid_height
        self.vram = RAM()
        self.vram.resize(self.vid_size // 8)
        self.changed = True  # Force the first frame to be drawn

    def _locate(self, x, y):
        if not (0 <= x < self.vid_width and 0 <= y < self.vid_height):
            raise FramebufferError("Pixel ({}, {}) is off-screen".format(x, y))

        bit_loc = y * self.vid_width + x
        return bit_loc >> 3, 0x80 >> (bit_loc & 7)

    def get_pixel(self, x, y):
        vram_loc, mask = self._locate(x, y)
        return bool(self.vram.read(vram_loc) & mask)

    def set_pixel(self, x, y, on):
        vram_loc, mask = self._locate(x, y)
        byte = self.vram.read(vram_loc)
        self.vram.write(vram_loc, (byte | mask) if on else (byte & ~mask & 0xFF))
        self.changed = True

    def clear(self):
        self.vram.clear()
        self.changed = True

    def draw_sprite(self, x0, y0, rows):
        # Returns True if any pixel was switched off
        collision = False
        vid_width = self.vid_width

        for y, row in enumerate(rows, y0):
            if y >= self.vid_height:
                break  # Clip at the bottom edge

            for x in range(x0, min(x0 + 8, vid_width)):  # Clip at the right edge
                if not row & (0x80 >> (x - x0)):
                    continue

                if self.get_pixel(x, y):
                    self.set_pixel(x, y, False)
                    collision = True
                else:
                    self.set_pixel(x, y, True)

        self.changed = True
        return collision

    def get_bitmap(self):
        return bytes(self.vram.mem)

    def get_vid_size(self):
        return self.vid_width, self.vid_height

    def consume_changed(self):
        # Read and reset the display-changed signal in one go
        changed = self.changed
        self.changed = False
        return changed
