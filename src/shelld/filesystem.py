# shelld — Line-Editing Command Shell Server
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Local filesystem collaborator.

The working directory is process state (os.chdir affects every thread),
so all sessions share one WorkingDirectory value. Reads and refreshes go
through a lock so a prompt never renders a half-updated value.
"""

from __future__ import annotations

import os
import stat as stat_module
import threading
from dataclasses import dataclass

from .streams import FileStream


@dataclass(frozen=True)
class PathInfo:
    exists: bool
    is_regular_file: bool
    size: int


class WorkingDirectory:
    """Lock-guarded cached copy of the process working directory."""

    def __init__(self, initial: str | None = None) -> None:
        self._lock = threading.Lock()
        self._value = initial if initial is not None else _safe_getcwd()

    @property
    def value(self) -> str:
        with self._lock:
            return self._value

    def refresh(self) -> str:
        with self._lock:
            self._value = _safe_getcwd()
            return self._value


def _safe_getcwd() -> str:
    try:
        return os.getcwd()
    except OSError:
        # Directory removed underneath us; the prompt falls back to root
        return ""


# Shared by every session in the process
shared_cwd = WorkingDirectory()


class LocalFilesystem:
    """Filesystem implementation backed by the os module."""

    def __init__(self, cwd: WorkingDirectory | None = None) -> None:
        self.cwd = cwd if cwd is not None else shared_cwd

    def stat(self, path: str) -> PathInfo | None:
        if not path:
            return None
        try:
            st = os.stat(path)
        except (OSError, ValueError):
            return None
        return PathInfo(
            exists=True,
            is_regular_file=stat_module.S_ISREG(st.st_mode),
            size=st.st_size,
        )

    def open_script(self, path: str) -> FileStream:
        return FileStream(path)

    def getcwd(self) -> str:
        return self.cwd.value

    def refresh_cwd(self) -> str:
        return self.cwd.refresh()
