# shelld — Line-Editing Command Shell Server
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Utility functions for shelld.
"""

import os

from .config import ENCODING

SPACE = ord(" ")

# Characters that open a quoted token. The same character closes it.
QUOTE_CHARS = frozenset(b"`'\"")

SIZE_UNITS = ("b", "kb", "Mb", "Gb")


def tokenize(line: bytes, max_args: int) -> list[str]:
    """Split a submitted line into arguments.

    Rules:
    - runs of spaces separate tokens (tabs are ordinary characters)
    - a token starting with `, ' or " ends at the next occurrence of the
      same character; the quotes are not part of the token and the
      content (spaces, other quote kinds) is kept verbatim
    - an unterminated quote runs to the end of the line
    - once max_args tokens exist, the last one holds the rest of the
      line unscanned

    Args:
        line: The submitted line bytes
        max_args: Maximum number of tokens to produce

    Returns:
        List of tokens decoded as latin-1
    """
    tokens: list[str] = []
    i = 0
    n = len(line)

    while i < n:
        while i < n and line[i] == SPACE:
            i += 1
        if i >= n:
            break

        delimiter = SPACE
        if line[i] in QUOTE_CHARS:
            delimiter = line[i]
            i += 1

        start = i
        if len(tokens) + 1 >= max_args:
            tokens.append(line[start:].decode(ENCODING))
            break

        end = line.find(bytes([delimiter]), i)
        if end < 0:
            end = n
        tokens.append(line[start:end].decode(ENCODING))
        i = end + 1

    return tokens


def has_switch(switch: str, args: list[str]) -> bool:
    """Return True if switch appears among args."""
    return switch in args


def final_arg(args: list[str]) -> str | None:
    """Return the last argument, or None when there are none."""
    return args[-1] if args else None


def arg_by_index(index: int, args: list[str]) -> str | None:
    """Return args[index], or None if out of range."""
    if 0 <= index < len(args):
        return args[index]
    return None


def fs_path(arg: str) -> str:
    """Turn a token back into the OS path its raw bytes name.

    Tokens map bytes 1:1 onto latin-1 characters. OS calls encode str
    paths with the filesystem encoding, so the original bytes are
    recovered first and decoded with os.fsdecode (surrogateescape).
    """
    return os.fsdecode(arg.encode(ENCODING))


def fs_name_bytes(name: str) -> bytes:
    """Raw bytes of a name returned by the OS, for writing to a stream."""
    return os.fsencode(name)


def format_size(nbytes: int) -> str:
    """Format a byte count with decimal units (b, kb, Mb, Gb).

    Divides by 1000 while the value exceeds 1000, so 1500 -> "1kb".
    """
    unit = 0
    while nbytes > 1000 and unit < len(SIZE_UNITS) - 1:
        unit += 1
        nbytes //= 1000
    return f"{nbytes}{SIZE_UNITS[unit]}"
