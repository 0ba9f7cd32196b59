# shelld — Line-Editing Command Shell Server
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
shelld core package.

A line-editing command shell served over a byte stream: key decoding,
in-line editing with redraw, recall history, quote-aware tokenizing and
command dispatch, plus script replay from regular files.
"""
from .registry import CommandRegistry as CommandRegistry  # noqa: F401
from .registry import ControlCode as ControlCode  # noqa: F401
from .session import ShellSession as ShellSession  # noqa: F401 (re-export)
