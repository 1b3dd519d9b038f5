#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import unittest
from unittest import mock
from pchip.renderers.r_null import Renderer, RendererError, unpack_bitmap
from pchip.renderers.r_pygame import Renderer as PygameRenderer


class TestNullRenderer(unittest.TestCase):
    def test_renderer_resolution(self):
        renderer = Renderer()
        self.assertEqual((0, 0), (renderer.width, renderer.height))
        self.assertEqual(1, renderer.scale)
        renderer.set_resolution(64, 32)
        self.assertEqual((64, 32), (renderer.width, renderer.height))

    def test_renderer_calls(self):
        # Only checks the calls run
        renderer = Renderer(scale=3)
        renderer.refresh_display(bytes(256))
        renderer.set_title("Title")
        renderer.shutdown()

    def test_unpack_bitmap(self):
        self.assertEqual([1, 0, 1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1], list(unpack_bitmap(b"\xA0\x01")))


class TestPygameRenderer(unittest.TestCase):
    def test_renderer_bad_palette_opens_no_display(self):
        for palette in ("GGGGGG", "FFF", "000000,FFFFFF,FF0000"):
            with mock.patch("pygame.display.init") as display_init, \
                    mock.patch("pygame.display.set_mode") as set_mode:
                self.assertRaises(RendererError, PygameRenderer, palette=palette)
                display_init.assert_not_called()
                set_mode.assert_not_called()
