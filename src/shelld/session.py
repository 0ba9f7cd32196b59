# shelld — Line-Editing Command Shell Server
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
shelld session engine.

One ShellSession serves one connection for its whole lifetime:
- pulls bytes from the active source (connection or script file)
- decodes them into key presses
- applies editing keys to the live line and redraws
- on submit: records history, tokenizes, resolves and dispatches, or
  starts a script, or reports an unknown command
- interprets the control code a handler returns

Important boundary:
- Session does not load YAML; it consumes injected ShellSettings.
- Session does not know how the connection was accepted.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from prompt_toolkit.key_binding.key_processor import KeyPress
from prompt_toolkit.keys import Keys

from .config import ENCODING, ShellSettings
from .decoder import SUBMIT, EscapeDecoder
from .editor import LineEditor
from .history import HistoryRing
from .interfaces import ByteStream, Filesystem
from .registry import Command, CommandRegistry, ControlCode, ParsedCommand
from .script import ScriptRedirector
from .streams import StreamError
from .utils import tokenize

logger = logging.getLogger(__name__)


@dataclass
class ShellSession:
    """Line-editing shell bound to one byte stream."""

    stream: ByteStream
    registry: CommandRegistry
    filesystem: Filesystem
    settings: ShellSettings = field(default_factory=ShellSettings)

    # Label used in log records (peer address for served sessions)
    name: str = "session"

    running: bool = False
    exit_flag: bool = False

    history: HistoryRing = field(init=False)
    editor: LineEditor = field(init=False)
    redirector: ScriptRedirector = field(init=False)
    decoder: EscapeDecoder = field(init=False)

    def __post_init__(self) -> None:
        cap = self.settings.buffer_size
        self.history = HistoryRing(self.settings.history_length, cap)
        self.editor = LineEditor(self.stream, cap, self.prompt)
        self.redirector = ScriptRedirector(self.stream, self.filesystem)
        self.decoder = EscapeDecoder(self.redirector.read_continuation)

    # -----------------------
    # Session
    # -----------------------

    def prompt(self) -> bytes:
        """Return the prompt bytes for the current working directory."""
        cwd = self.filesystem.getcwd()
        if cwd:
            return (
                self.settings.prompt_drive
                + os.fsencode(cwd)
                + self.settings.prompt_suffix
            )
        return self.settings.root_prompt

    def start(self) -> None:
        """Mark the session running and show the first prompt."""
        self.running = True
        self.exit_flag = False
        self.editor.put_prompt()

    def run(self) -> None:
        """Serve the stream until EXIT, end of stream or a stream error."""
        logger.info("Session %s started", self.name)
        try:
            self.start()
            while not self.exit_flag:
                data = self.redirector.read_key_byte()
                if not data:
                    logger.info("Session %s: end of stream", self.name)
                    break
                key = self.decoder.decode(data[0])
                if key is not None:
                    self.handle_key(key)
        except StreamError as e:
            logger.info("Session %s: stream failure: %s", self.name, e)
        finally:
            self.redirector.close()
            self.running = False
            logger.info("Session %s ended", self.name)

    # -----------------------
    # Key handling
    # -----------------------

    def handle_key(self, key: KeyPress) -> None:
        k = key.key
        if k == SUBMIT:
            self.submit()
        elif k == Keys.Up:
            line = self.history.up()
            if line is not None:
                self.editor.replace(line)
        elif k == Keys.Down:
            self.history.down()
            self.editor.clear()
        else:
            self.editor.handle_key(key)

    def submit(self) -> ControlCode:
        """Run the current line and show a fresh prompt."""
        line = self.editor.take_line()
        code = self.handle_command(line)
        self.editor.put_prompt(newline=True)
        return code

    # -----------------------
    # Command handling
    # -----------------------

    def handle_command(self, line: bytes) -> ControlCode:
        """Handle a single submitted line."""
        self.history.record(line)

        tokens = tokenize(line, self.settings.max_args)
        parsed = self.registry.resolve(tokens)

        if parsed.command is not None:
            code = self._invoke(parsed)
            self.apply_control_code(code, parsed.command)
            return code

        if self.redirector.try_redirect(line):
            return ControlCode.CONTINUE

        self.registry.report_unknown(
            parsed, self.stream, self.settings.no_such_command
        )
        return ControlCode.CONTINUE

    def _invoke(self, parsed: ParsedCommand) -> ControlCode:
        try:
            return self.registry.dispatch(
                parsed, self.stream, self.settings.newline
            )
        except StreamError:
            raise
        except Exception as e:
            assert parsed.command is not None
            logger.exception(
                "Session %s: command %r failed", self.name,
                parsed.command.name,
            )
            msg = f"[ERROR] Unhandled exception: {type(e).__name__}: {e}"
            self.stream.write(msg.encode(ENCODING, errors="replace"))
            return ControlCode.CONTINUE

    def apply_control_code(self, code: ControlCode, cmd: Command) -> None:
        """React to the value a handler returned."""
        nl = self.settings.newline

        if code == ControlCode.EXIT:
            self.exit_flag = True
        elif code == ControlCode.DIR_CHANGED:
            self.filesystem.refresh_cwd()
        elif code == ControlCode.PRINT_COMMAND_LIST:
            out = bytearray(self.settings.help_banner)
            for c in self.registry:
                out += nl + c.name.encode(ENCODING, errors="replace")
            self.stream.write(bytes(out))
        elif code == ControlCode.PRINT_USAGE:
            self.stream.write(cmd.usage_bytes(nl))
