#!/usr/bin/env python3

"""
Keypad State

Tracks which of the 16 hex keys are currently held.  Input plugins call
'press' and 'release' as host events arrive; the CPU only ever reads.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class KeypadError(Exception):
    pass


class Keypad:
    def __init__(self):
        self.held = set()

    def press(self, key):
        if not 0 <= key <= 0xF:
            raise KeypadError("Key 0x{:x} is not on the hex keypad".format(key))

        self.held.add(key)

    def release(self, key):
        self.held.discard(key)

    def release_all(self):
        self.held.clear()

    def is_held(self, key):
        return key in self.held

    def any_held(self):
        # Lowest held key, or None
        return min(self.held) if self.held else None
