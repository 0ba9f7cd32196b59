# shelld — Line-Editing Command Shell Server
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Filesystem commands: ls, cd, rm, mkdir, echo, cat, mv, cp.

Handlers take (output, args, nargs) where args excludes the command name.
Paths are relative to the process working directory, which `cd` changes
for every session at once.
"""

from __future__ import annotations

import logging
import os
import shutil

from .config import ANSI_COLORS, ENCODING
from .interfaces import ByteStream
from .registry import CommandRegistry, ControlCode
from .utils import (
    arg_by_index,
    final_arg,
    format_size,
    fs_name_bytes,
    fs_path,
    has_switch,
)

logger = logging.getLogger(__name__)

IS_NOT_A_DIRECTORY = " is not a directory"
ARGUMENT_NOT_SPECIFIED = "argument not specified"
ERROR_OPENING_SOURCE_FILE = "couldnt open source file"
ERROR_OPENING_DEST_FILE = "couldnt open destination file"
ERROR_MOVING_FILE = "error moving file"

# ls column widths
PAD_TO_FILESIZE = 40
PAD_TO_NEXT_FILE = 16

COPY_CHUNK = 64

LS_USAGE = (
    "prints directory content, relative to the current directory\n"
    "flags:\n"
    "\t-l  print details\n"
    "ls [-l] [relpath]"
)
CD_USAGE = "changes the current working directory"
RM_USAGE = "removes the specified file(s)\nrm file [file file ...]"
MKDIR_USAGE = "creates the specified directory"
ECHO_USAGE = (
    "add text to new file:\n"
    "\techo 123 > file.txt\n"
    "append text on new line in a file:\n"
    "\techo abc >> file.txt\n"
    "accepts `, ' and \" quotes\n"
    "to preserve quotes:\n"
    "\techo `\"key\": \"value\"` > file.txt"
)
CAT_USAGE = "reads the entire content of a file to the screen"
MV_USAGE = "moves/renames a file\nmv oldname newname"
CP_USAGE = "copies a file from one location to another\ncp file newfile"


def _write(output: ByteStream, text: str) -> None:
    output.write(text.encode(ENCODING, errors="replace"))


# -----------------------
# Directory commands
# -----------------------


def ls_cmd(output: ByteStream, args: list[str], nargs: int):
    ll = has_switch("-l", args)
    rel = final_arg(args)
    path = os.getcwd()
    if rel is not None and ((nargs == 1 and not ll) or (nargs == 2 and ll)):
        path = os.path.join(path, fs_path(rel))

    try:
        entries = sorted(
            os.scandir(path), key=lambda e: fs_name_bytes(e.name)
        )
    except OSError as e:
        logger.debug("ls %r failed: %s", path, e)
        shown = rel.encode(ENCODING) if rel else fs_name_bytes(path)
        output.write(shown + IS_NOT_A_DIRECTORY.encode(ENCODING))
        return ControlCode.CONTINUE

    blue = ANSI_COLORS["blue"].encode(ENCODING)
    reset = ANSI_COLORS["reset"].encode(ENCODING)
    out = bytearray()
    for ent in entries:
        # Names go out as the raw bytes the OS returned
        name = fs_name_bytes(ent.name)
        if ent.is_dir(follow_symlinks=False):
            out += blue + name + reset
        else:
            out += name

        if ll:
            out += b" " * max(PAD_TO_FILESIZE - len(name), 0)
            if ent.is_file(follow_symlinks=False):
                try:
                    out += format_size(ent.stat().st_size).encode(ENCODING)
                except OSError:
                    pass
            else:
                out += b"-"
            out += b"\r\n"
        else:
            out += b" " * max(PAD_TO_NEXT_FILE - len(name), 0)

    output.write(bytes(out))
    return ControlCode.CONTINUE


def cd_cmd(output: ByteStream, args: list[str], nargs: int):
    path = arg_by_index(0, args) if nargs else "/"
    try:
        os.chdir(fs_path(path))
    except OSError:
        _write(output, f"{path}{IS_NOT_A_DIRECTORY}")
    return ControlCode.DIR_CHANGED


def mkdir_cmd(output: ByteStream, args: list[str], nargs: int):
    path = final_arg(args)
    if path is None:
        _write(output, ARGUMENT_NOT_SPECIFIED)
        return ControlCode.CONTINUE
    try:
        os.mkdir(fs_path(path), 0o777)
    except OSError as e:
        _write(output, f"{path}: {e.strerror}")
    return ControlCode.CONTINUE


# -----------------------
# File commands
# -----------------------


def rm_cmd(output: ByteStream, args: list[str], nargs: int):
    if not nargs:
        _write(output, ARGUMENT_NOT_SPECIFIED)
    for path in args:
        try:
            os.unlink(fs_path(path))
        except OSError as e:
            logger.debug("rm %r failed: %s", path, e)
    return ControlCode.CONTINUE


def echo_cmd(output: ByteStream, args: list[str], nargs: int):
    text = arg_by_index(0, args)
    option = arg_by_index(1, args)
    filename = arg_by_index(2, args)

    if text is None or option is None or filename is None:
        return ControlCode.PRINT_USAGE
    if option.startswith(">>"):
        mode = "a"
    elif option.startswith(">"):
        mode = "w"
    else:
        return ControlCode.PRINT_USAGE

    try:
        target = fs_path(filename)
        with open(target, mode, encoding=ENCODING, newline="") as f:
            if mode == "a":
                f.write("\n")
            f.write(text)
    except OSError:
        _write(output, ERROR_OPENING_DEST_FILE)
    return ControlCode.CONTINUE


def cat_cmd(output: ByteStream, args: list[str], nargs: int):
    path = arg_by_index(0, args)
    if path is None:
        _write(output, ARGUMENT_NOT_SPECIFIED)
        return ControlCode.CONTINUE
    try:
        with open(fs_path(path), "rb") as f:
            while chunk := f.read(COPY_CHUNK):
                output.write(chunk)
    except OSError:
        _write(output, ERROR_OPENING_SOURCE_FILE)
    return ControlCode.CONTINUE


def mv_cmd(output: ByteStream, args: list[str], nargs: int):
    path = arg_by_index(0, args)
    newpath = arg_by_index(1, args)
    if path is None or newpath is None:
        _write(output, ARGUMENT_NOT_SPECIFIED)
        return ControlCode.CONTINUE
    try:
        os.rename(fs_path(path), fs_path(newpath))
    except OSError:
        _write(output, ERROR_MOVING_FILE)
    return ControlCode.CONTINUE


def cp_cmd(output: ByteStream, args: list[str], nargs: int):
    path = arg_by_index(0, args)
    newpath = arg_by_index(1, args)
    if path is None or newpath is None:
        _write(output, ARGUMENT_NOT_SPECIFIED)
        return ControlCode.CONTINUE

    try:
        src = open(fs_path(path), "rb")
    except OSError:
        _write(output, ERROR_OPENING_SOURCE_FILE)
        return ControlCode.CONTINUE

    with src:
        try:
            dst = open(fs_path(newpath), "wb")
        except OSError:
            _write(output, ERROR_OPENING_DEST_FILE)
            return ControlCode.CONTINUE
        with dst:
            shutil.copyfileobj(src, dst, COPY_CHUNK)
    return ControlCode.CONTINUE


def install_fs_commands(registry: CommandRegistry) -> None:
    """Register the filesystem commands."""
    registry.register("ls", LS_USAGE, ls_cmd)
    registry.register("cd", CD_USAGE, cd_cmd)
    registry.register("rm", RM_USAGE, rm_cmd)
    registry.register("mkdir", MKDIR_USAGE, mkdir_cmd)
    registry.register("echo", ECHO_USAGE, echo_cmd)
    registry.register("cat", CAT_USAGE, cat_cmd)
    registry.register("mv", MV_USAGE, mv_cmd)
    registry.register("cp", CP_USAGE, cp_cmd)
