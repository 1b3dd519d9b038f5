#!/usr/bin/env python3

"""
Null Renderer Plugin

This serves as a base class for other rendering plugins.

This module can be used on its own as a Renderer plugin if you only want to see
debug output.  Without a renderer, performance data will also not be shown.

Renderers receive the whole screen at once, as a packed 1-bit-per-pixel bitmap
(row-major, most-significant bit first), and draw each pixel in one of two
colours.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class RendererError(Exception):
    pass


def unpack_bitmap(bitmap):
    # Yields 0 or 1 for every pixel in the bitmap, in row-major order
    for byte in bitmap:
        for bit in range(7, -1, -1):
            yield (byte >> bit) & 1


class Renderer:
    def __init__(self, scale=None, **kwargs):  # pylint: disable=unused-argument
        self.scale = 1 if scale is None else scale
        self.set_resolution(0, 0)

    def set_resolution(self, width, height):
        self.width = width
        self.height = height

    def refresh_display(self, bitmap):  # pylint: disable=unused-argument
        pass

    def set_title(self, title):
        pass

    def shutdown(self):
        pass
