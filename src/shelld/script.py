# shelld — Line-Editing Command Shell Server
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Script redirection: replay a regular file as if it were typed.

When a submitted line names an existing non-empty regular file, the
session's read source is swapped to that file. Bytes then flow through
the same decoder and editor as live keystrokes. Once the recorded size
has been read the file is closed and the previous source restored; if
the last byte was not a newline, one is injected so the final line is
still submitted. Only one script runs at a time.
"""

from __future__ import annotations

import logging
import os

from .config import LF
from .interfaces import ByteStream, Filesystem, ScriptSource

logger = logging.getLogger(__name__)


class ScriptRedirector:
    """Owns the active read source of a session."""

    def __init__(self, direct: ByteStream, filesystem: Filesystem) -> None:
        self.direct = direct
        self.filesystem = filesystem
        self.active: ByteStream = direct
        self._saved: ByteStream | None = None
        self._script: ScriptSource | None = None
        self._script_path = ""
        self._size = 0
        self._last = b""
        self._pending = b""

    @property
    def script_active(self) -> bool:
        return self._script is not None

    def try_redirect(self, line: bytes) -> bool:
        """Switch to reading from the file named by line, if eligible.

        Returns:
            True if a script is now the active source.
        """
        if self._script is not None:
            return False

        # Raw bytes name the file, as typed
        path = os.fsdecode(line)
        info = self.filesystem.stat(path)
        if info is None or not info.is_regular_file or info.size <= 0:
            return False

        try:
            script = self.filesystem.open_script(path)
        except OSError as e:
            logger.warning("Cannot open script %r: %s", path, e)
            return False

        self._saved = self.active
        self.active = script
        self._script = script
        self._script_path = path
        self._size = info.size
        self._last = b""
        logger.debug("Running script %r (%d bytes)", path, info.size)
        return True

    # -----------------------
    # Reading
    # -----------------------

    def read_key_byte(self) -> bytes:
        """Read the first byte of the next key.

        Returns b"" only when the direct source has ended.
        """
        if self._pending:
            data, self._pending = self._pending, b""
            return data

        if self._script is None:
            return self.active.read(1)

        data = self._read_script_byte()
        if data:
            return data
        # Script ended early without a trailing byte to deliver
        if self._pending:
            return self.read_key_byte()
        return self.active.read(1)

    def read_continuation(self) -> bytes:
        """Read one byte inside an escape sequence.

        A sequence cut short by the end of a script yields b"".
        """
        if self._pending:
            return b""
        if self._script is None:
            return self.active.read(1)
        return self._read_script_byte()

    def _read_script_byte(self) -> bytes:
        assert self._script is not None
        data = self._script.read(1)
        if not data:
            # File shrank since it was stat'ed
            self._finish()
            return b""

        self._last = data
        if self._script.tell() >= self._size:
            self._finish()
        return data

    def _finish(self) -> None:
        assert self._script is not None
        self._script.close()
        logger.debug("Script %r finished", self._script_path)
        self.active = self._saved if self._saved is not None else self.direct
        self._saved = None
        self._script = None
        self._script_path = ""
        self._size = 0
        if self._last and self._last != LF:
            self._pending = LF
        self._last = b""

    def close(self) -> None:
        """Close a script left open when the session ends."""
        if self._script is not None:
            self._script.close()
            self._script = None
            self.active = self.direct
