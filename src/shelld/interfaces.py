# shelld — Line-Editing Command Shell Server
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Protocol definitions for dependency injection.

These interfaces keep the line-editing session independent of the
connection, the filesystem and the configuration source.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .filesystem import PathInfo  # pragma: no cover
    from .registry import ControlCode  # pragma: no cover


class ByteStream(Protocol):
    """Protocol for the blocking byte stream a session runs over."""

    def read(self, size: int = 1) -> bytes:
        """Read up to size bytes. Returns b"" on end of stream."""
        ...

    def write(self, data: bytes) -> None:
        """Write all of data to the stream."""
        ...

    def close(self) -> None:
        """Release the underlying resource."""
        ...


class ScriptSource(ByteStream, Protocol):
    """A byte stream backed by a regular file (script redirection)."""

    def tell(self) -> int:
        """Current read position in bytes."""
        ...


class CommandHandler(Protocol):
    """Protocol for command handlers.

    Handlers receive the output stream, the arguments following the
    command name and their count. They return a ControlCode, or None
    which is treated as CONTINUE.
    """

    def __call__(
        self, output: ByteStream, args: list[str], nargs: int
    ) -> ControlCode | None:
        ...


class Filesystem(Protocol):
    """Protocol for the filesystem operations the session depends on."""

    def stat(self, path: str) -> PathInfo | None:
        """Stat a path, or None if it does not exist."""
        ...

    def open_script(self, path: str) -> ScriptSource:
        """Open a regular file for script redirection."""
        ...

    def getcwd(self) -> str:
        """Return the working directory string used in the prompt."""
        ...

    def refresh_cwd(self) -> str:
        """Re-query the working directory and return it."""
        ...


class ConfigModel(Protocol):
    """Protocol for configuration access."""

    @property
    def server(self) -> dict[str, Any]:
        """Server configuration."""
        ...

    @property
    def shell(self) -> dict[str, Any]:
        """Line editor / dispatch configuration."""
        ...

    @property
    def logging(self) -> dict[str, Any]:
        """Logging configuration."""
        ...
