# shelld — Line-Editing Command Shell Server
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Command registry and dispatch.

Commands are kept in an ordered list. Registering prepends, so the most
recently registered command is searched first and shadows any earlier
command with the same name.

Name matching compares at most `compare_limit` characters (the input
buffer bound), not the length of the registered name. With names and
tokens shorter than the bound this is plain equality; a token that
fills the whole buffer matches any longer name sharing that prefix.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import IntEnum

from .config import ENCODING
from .interfaces import ByteStream, CommandHandler

logger = logging.getLogger(__name__)


class ControlCode(IntEnum):
    """Outcome of a handler, interpreted by the session."""

    CONTINUE = 0
    EXIT = 1
    DIR_CHANGED = 2
    PRINT_USAGE = 3
    PRINT_COMMAND_LIST = 4


@dataclass
class Command:
    name: str
    usage: str
    handler: CommandHandler

    def usage_bytes(self, newline: bytes = b"\n") -> bytes:
        """Usage text with each line break rendered as newline."""
        text = self.usage.encode(ENCODING, errors="replace")
        return text.replace(b"\n", newline)


@dataclass
class ParsedCommand:
    """Result of resolving one submitted line."""

    command: Command | None
    tokens: list[str] = field(default_factory=list)

    @property
    def args(self) -> list[str]:
        """Arguments following the command name."""
        return self.tokens[1:]


class CommandRegistry:
    """Ordered set of named commands."""

    def __init__(self, compare_limit: int = 127) -> None:
        self.compare_limit = compare_limit
        self._commands: list[Command] = []

    def register(
        self, name: str, usage: str, handler: CommandHandler
    ) -> Command:
        """Register a command ahead of all existing ones."""
        cmd = Command(name=name, usage=usage, handler=handler)
        self._commands.insert(0, cmd)
        logger.debug("Registered command %r", name)
        return cmd

    def __iter__(self) -> Iterator[Command]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def names(self) -> list[str]:
        return [c.name for c in self._commands]

    def find(self, name: str) -> Command | None:
        """Exact-name lookup in registry order."""
        for cmd in self._commands:
            if cmd.name == name:
                return cmd
        return None

    def match(self, token: str) -> Command | None:
        """Match a typed token against command names, first hit wins."""
        bound = self.compare_limit
        head = token[:bound]
        for cmd in self._commands:
            if cmd.name[:bound] == head:
                return cmd
        return None

    def resolve(self, tokens: list[str]) -> ParsedCommand:
        """Resolve the first token of a line to a command."""
        if not tokens:
            return ParsedCommand(None, [])
        return ParsedCommand(self.match(tokens[0]), list(tokens))

    def dispatch(
        self, parsed: ParsedCommand, output: ByteStream, newline: bytes
    ) -> ControlCode:
        """Invoke the resolved command's handler.

        Writes the line terminator first so handler output starts on a
        fresh line. Handlers may return None, meaning CONTINUE.
        """
        cmd = parsed.command
        if cmd is None:
            return ControlCode.CONTINUE

        output.write(newline)
        args = parsed.args
        code = cmd.handler(output, args, len(args))
        if code is None:
            return ControlCode.CONTINUE
        return ControlCode(code)

    def report_unknown(
        self, parsed: ParsedCommand, output: ByteStream, message: bytes
    ) -> None:
        """Tell the user the first token named no command."""
        if not parsed.tokens or not parsed.tokens[0]:
            return
        token = parsed.tokens[0]
        logger.debug("No such command: %r", token)
        output.write(message + token.encode(ENCODING))
