# shelld — Line-Editing Command Shell Server
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Raw input bytes -> prompt_toolkit key presses.

Only a fixed set of VT100 sequences is recognised:

    ESC [ 3 ~   Delete         ESC [ A   Up
    ESC [ B     Down           ESC [ C   Right
    ESC [ D     Left           ESC O H   Home
    ESC O F     End

Sequences are consumed strictly in order. A byte that does not continue
a known sequence ends it with no event, and the bytes already read are
not looked at again.
"""

from __future__ import annotations

from collections.abc import Callable

from prompt_toolkit.key_binding.key_processor import KeyPress
from prompt_toolkit.keys import Keys

ESC = 0x1B
DEL = 0x7F
NEWLINE = 0x0A
SPACE = 0x20

# Submit is the line feed the client sends at the end of a line
SUBMIT = Keys.ControlJ

_CSI_KEYS: dict[int, Keys] = {
    ord("A"): Keys.Up,
    ord("B"): Keys.Down,
    ord("C"): Keys.Right,
    ord("D"): Keys.Left,
}

_SS3_KEYS: dict[int, Keys] = {
    ord("H"): Keys.Home,
    ord("F"): Keys.End,
}


class EscapeDecoder:
    """Classify input bytes into key presses.

    `read_next` reads one continuation byte from whichever source is
    active; an empty result counts as a byte that matches nothing.
    """

    def __init__(self, read_next: Callable[[], bytes]) -> None:
        self.read_next = read_next

    def _next(self) -> int:
        data = self.read_next()
        return data[0] if data else 0

    def decode(self, byte: int) -> KeyPress | None:
        if byte == ESC:
            return self._decode_escape()
        if byte == NEWLINE:
            return KeyPress(SUBMIT, "\n")
        if byte == DEL:
            return KeyPress(Keys.Backspace, "\x7f")
        if byte >= SPACE:
            ch = chr(byte)
            return KeyPress(ch, ch)
        return None

    def _decode_escape(self) -> KeyPress | None:
        data = self._next()
        if data == ord("["):
            data = self._next()
            if data == ord("3"):
                if self._next() == ord("~"):
                    return KeyPress(Keys.Delete)
                return None
            key = _CSI_KEYS.get(data)
        elif data == ord("O"):
            key = _SS3_KEYS.get(self._next())
        else:
            key = None

        if key is None:
            return None
        return KeyPress(key)
