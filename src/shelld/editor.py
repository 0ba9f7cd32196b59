# shelld — Line-Editing Command Shell Server
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Live input line: buffer, cursor and terminal redraw.

Rendering never clears the terminal line. Every redraw returns to
column 0 with a carriage return, prints the prompt and then the buffer;
removed characters are overwritten with padding spaces before the final
redraw. Cursor movement uses the same VT100 arrow sequences the decoder
understands.

Invariant: 0 <= cursor <= len(buffer) <= capacity - 1.
"""

from __future__ import annotations

from collections.abc import Callable

from prompt_toolkit.key_binding.key_processor import KeyPress
from prompt_toolkit.keys import Keys

from .config import CR, ENCODING, LEFT_ARROW, LF, RIGHT_ARROW
from .interfaces import ByteStream


class LineEditor:
    """Editable input line rendered onto a byte stream."""

    def __init__(
        self,
        output: ByteStream,
        capacity: int,
        prompt_fn: Callable[[], bytes],
    ) -> None:
        self.output = output
        self.capacity = capacity
        self.prompt_fn = prompt_fn
        self.buffer = bytearray()
        self.cursor = 0

    def __len__(self) -> int:
        return len(self.buffer)

    @property
    def line(self) -> bytes:
        return bytes(self.buffer)

    # -----------------------
    # Rendering
    # -----------------------

    def put_prompt(self, text: bytes | None = None,
                   newline: bool = False) -> None:
        """Return to column 0, optionally start a new line, print prompt
        and text."""
        out = bytearray(CR)
        if newline:
            out += LF
        out += self.prompt_fn()
        if text:
            out += text
        self.output.write(bytes(out))

    def _cursor_back_to_place(self) -> None:
        steps = len(self.buffer) - self.cursor
        if steps > 0:
            self.output.write(LEFT_ARROW * steps)

    def _redraw_after_removal(self) -> None:
        # Pad the freed cell, then draw again so the terminal cursor
        # ends right after the text.
        self.put_prompt(bytes(self.buffer) + b" ")
        self.put_prompt(bytes(self.buffer))
        self._cursor_back_to_place()

    def _blank(self) -> None:
        """Overwrite the displayed line with spaces."""
        self.put_prompt(b" " * len(self.buffer))

    # -----------------------
    # Editing operations
    # -----------------------

    def insert(self, byte: int) -> None:
        """Insert a byte at the cursor.

        A full buffer is reset to hold only the new byte; the previous
        content is discarded.
        """
        if len(self.buffer) < self.capacity - 1:
            self.buffer.insert(self.cursor, byte)
            self.cursor += 1
        else:
            self.buffer = bytearray([byte])
            self.cursor = 1

        self.output.write(bytes(self.buffer[self.cursor - 1:]))
        self._cursor_back_to_place()

    def backspace(self) -> None:
        if self.cursor == 0:
            return
        self.cursor -= 1
        del self.buffer[self.cursor]
        self._redraw_after_removal()

    def delete(self) -> None:
        if self.cursor >= len(self.buffer):
            return
        del self.buffer[self.cursor]
        self._redraw_after_removal()

    def move_left(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1
            self.output.write(LEFT_ARROW)

    def move_right(self) -> None:
        if self.cursor < len(self.buffer):
            self.cursor += 1
            self.output.write(RIGHT_ARROW)

    def home(self) -> None:
        while self.cursor > 0:
            self.output.write(LEFT_ARROW)
            self.cursor -= 1

    def end(self) -> None:
        while self.cursor < len(self.buffer):
            self.output.write(RIGHT_ARROW)
            self.cursor += 1

    def replace(self, line: bytes) -> None:
        """Show a recalled line in place of the current input."""
        self._blank()
        self.buffer = bytearray(line[: self.capacity - 1])
        self.cursor = len(self.buffer)
        self.put_prompt(bytes(self.buffer))

    def clear(self) -> None:
        """Discard the current input and show a bare prompt."""
        self._blank()
        self.buffer = bytearray()
        self.cursor = 0
        self.put_prompt()

    def take_line(self) -> bytes:
        """Hand over the submitted line and empty the buffer."""
        line = bytes(self.buffer)
        self.buffer = bytearray()
        self.cursor = 0
        return line

    def handle_key(self, key: KeyPress) -> bool:
        """Apply an editing key.

        Returns:
            False if the key is not an editing key (history, submit).
        """
        k = key.key
        if k == Keys.Backspace:
            self.backspace()
        elif k == Keys.Delete:
            self.delete()
        elif k == Keys.Left:
            self.move_left()
        elif k == Keys.Right:
            self.move_right()
        elif k == Keys.Home:
            self.home()
        elif k == Keys.End:
            self.end()
        elif isinstance(k, str) and not isinstance(k, Keys) and len(k) == 1:
            self.insert(k.encode(ENCODING)[0])
        else:
            return False
        return True
