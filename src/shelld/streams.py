# shelld — Line-Editing Command Shell Server
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Byte stream implementations.

This module provides:
- SocketStream: a connected socket (one per served session)
- PipeStream: a pair of binary file objects (stdin/stdout mode)
- FileStream: a regular file opened for script redirection

All of them satisfy the ByteStream protocol: read() returns b"" at end
of stream, and transport errors surface as StreamError.
"""

from __future__ import annotations

import socket
from typing import BinaryIO


class StreamError(Exception):
    """Read or write failure on a session stream."""


class SocketStream:
    """ByteStream over a connected socket."""

    def __init__(self, sock: socket.socket) -> None:
        self.sock = sock

    def read(self, size: int = 1) -> bytes:
        try:
            return self.sock.recv(size)
        except OSError as e:
            raise StreamError(f"recv failed: {e}") from e

    def write(self, data: bytes) -> None:
        if not data:
            return
        try:
            self.sock.sendall(data)
        except OSError as e:
            raise StreamError(f"send failed: {e}") from e

    def close(self) -> None:
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # Peer already gone
            pass
        self.sock.close()


class PipeStream:
    """ByteStream over separate binary reader and writer objects."""

    def __init__(self, reader: BinaryIO, writer: BinaryIO) -> None:
        self.reader = reader
        self.writer = writer

    def read(self, size: int = 1) -> bytes:
        try:
            return self.reader.read(size) or b""
        except (OSError, ValueError) as e:
            raise StreamError(f"read failed: {e}") from e

    def write(self, data: bytes) -> None:
        try:
            self.writer.write(data)
            self.writer.flush()
        except (OSError, ValueError) as e:
            raise StreamError(f"write failed: {e}") from e

    def close(self) -> None:
        # stdin/stdout belong to the process
        pass


class FileStream:
    """Read-only ByteStream over a regular file."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._f = open(path, "rb")

    def read(self, size: int = 1) -> bytes:
        try:
            return self._f.read(size)
        except (OSError, ValueError) as e:
            raise StreamError(f"read {self.path} failed: {e}") from e

    def write(self, data: bytes) -> None:
        raise StreamError(f"{self.path} is open for reading only")

    def tell(self) -> int:
        try:
            return self._f.tell()
        except (OSError, ValueError) as e:
            raise StreamError(f"tell {self.path} failed: {e}") from e

    def close(self) -> None:
        self._f.close()
