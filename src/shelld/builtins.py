# shelld — Line-Editing Command Shell Server
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Commands every shelld instance provides: help, exit, date, uname, reboot.
"""

from __future__ import annotations

import logging
import platform
import time
from collections.abc import Callable

from .config import ENCODING
from .interfaces import ByteStream, CommandHandler
from .registry import CommandRegistry, ControlCode

logger = logging.getLogger(__name__)

HELP_USAGE = "usage:\n\thelp [command]"
EXIT_USAGE = "usage:\n\texit"
DATE_USAGE = "usage:\n\tdate"
UNAME_USAGE = "usage:\n\tuname [-a]"
REBOOT_USAGE = "usage:\n\treboot"

DATE_FORMAT = "%a %b %d %H:%M:%S %Y"


def _write(output: ByteStream, text: str) -> None:
    output.write(text.encode(ENCODING, errors="replace"))


def make_help(
    registry: CommandRegistry, newline: bytes = b"\r\n"
) -> CommandHandler:
    """help lists every command, or prints one command's usage."""

    def help_cmd(output: ByteStream, args: list[str], nargs: int):
        if nargs:
            cmd = registry.find(args[0])
            if cmd is not None:
                output.write(cmd.usage_bytes(newline))
                return ControlCode.CONTINUE
        return ControlCode.PRINT_COMMAND_LIST

    return help_cmd


def exit_cmd(output: ByteStream, args: list[str], nargs: int):
    return ControlCode.EXIT


def date_cmd(output: ByteStream, args: list[str], nargs: int):
    _write(output, time.strftime(DATE_FORMAT, time.localtime()))
    return ControlCode.CONTINUE


def uname_cmd(output: ByteStream, args: list[str], nargs: int):
    info = platform.uname()
    if "-a" in args:
        text = f"{info.system} {info.node} {info.release} {info.machine}"
    else:
        text = info.system
    _write(output, text)
    return ControlCode.CONTINUE


def make_reboot(restart: Callable[[], None] | None) -> CommandHandler:
    """reboot restarts the server when there is one, otherwise exits."""

    def reboot_cmd(output: ByteStream, args: list[str], nargs: int):
        if restart is not None:
            logger.warning("Restart requested from shell")
            _write(output, "rebooting...")
            restart()
        return ControlCode.EXIT

    return reboot_cmd


def install_builtins(
    registry: CommandRegistry,
    restart: Callable[[], None] | None = None,
    newline: bytes = b"\r\n",
) -> None:
    """Register the builtin commands.

    Args:
        registry: Registry to add the commands to
        restart: Called by `reboot`; usually ShellServer.request_restart
        newline: Line terminator used when printing usage text
    """
    registry.register("help", HELP_USAGE, make_help(registry, newline))
    registry.register("exit", EXIT_USAGE, exit_cmd)
    registry.register("date", DATE_USAGE, date_cmd)
    registry.register("uname", UNAME_USAGE, uname_cmd)
    registry.register("reboot", REBOOT_USAGE, make_reboot(restart))
