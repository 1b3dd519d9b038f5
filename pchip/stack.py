#!/usr/bin/env python3

"""
Stack Emulator

There is no specified location for the CPU call stack in system RAM, and no
stack pointer register is exposed to the running program, so the stack is kept
in host memory as a simple list of return addresses.

The depth is capped (16 levels by default), so runaway recursion in a program
is reported as an overflow rather than growing without limit.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class StackError(Exception):
    pass


class StackOverflowError(StackError):
    pass


class StackUnderflowError(StackError):
    pass


class Stack:
    def __init__(self, size):
        self.items = []
        self.size = size

    def push(self, item):
        # Fetching the stack size with 'len' should be immediate, so no slow loop
        if len(self.items) >= self.size:
            raise StackOverflowError("Stack overflow (more than {} nested calls)".format(self.size))

        self.items.append(item)

    def pop(self):
        try:
            return self.items.pop()
        except IndexError:
            raise StackUnderflowError("Stack underflow (return without a matching call)") from None

    def get_items(self):
        # For debugging
        return self.items

    def __len__(self):
        return len(self.items)
