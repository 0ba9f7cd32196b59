# shelld — Line-Editing Command Shell Server
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
shelld CLI entry point.

Design:
- CLI owns process startup: config, logging, command registration.
- ShellServer accepts connections; ShellSession serves each one.
- --stdio runs a single session on stdin/stdout instead of listening.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from typing import BinaryIO

from . import config
from .builtins import install_builtins
from .filesystem import LocalFilesystem
from .fs_commands import install_fs_commands
from .registry import CommandRegistry
from .server import ShellServer, build_server
from .session import ShellSession
from .streams import PipeStream

logger = logging.getLogger(__name__)


def setup_logging(cfg: config.YAMLConfig) -> None:
    """Configure root logging from the logging section."""
    log_cfg = cfg.logging
    level_name = str(log_cfg.get("level", "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ValueError(f"logging.level is not a valid level: {level_name}")
    logging.basicConfig(
        level=level,
        format=log_cfg.get(
            "format", "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
        ),
        stream=sys.stderr,
    )


def build_registry(
    settings: config.ShellSettings,
    restart: Callable[[], None] | None = None,
) -> CommandRegistry:
    """Create the registry with the filesystem commands and builtins."""
    registry = CommandRegistry(compare_limit=settings.buffer_size - 1)
    install_fs_commands(registry)
    install_builtins(registry, restart=restart, newline=settings.newline)
    return registry


def run_stdio(
    registry: CommandRegistry,
    settings: config.ShellSettings,
    stdin: BinaryIO,
    stdout: BinaryIO,
) -> None:
    """Serve one session over a pair of binary streams."""
    session = ShellSession(
        stream=PipeStream(stdin, stdout),
        registry=registry,
        filesystem=LocalFilesystem(),
        settings=settings,
        name="stdio",
    )
    session.run()


def serve(
    cfg: config.YAMLConfig,
    settings: config.ShellSettings,
    host: str | None = None,
    port: int | None = None,
) -> None:
    """Serve TCP connections, rebuilding the server after a reboot."""
    current: list[ShellServer] = []

    def restart() -> None:
        if current:
            current[0].request_restart()

    registry = build_registry(settings, restart=restart)

    while True:
        server = build_server(cfg, registry, settings, host=host, port=port)
        current[:] = [server]
        with server:
            server.serve_forever()
        if not server.restart_requested:
            break
        logger.info("Restarting %s", server.name)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shelld",
        description="Line-editing command shell server",
    )
    parser.add_argument(
        "--config",
        default=None,
        metavar="PATH",
        help=f"Path to a YAML config file (default: ${config.CONFIG_ENV})",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Address to listen on (default: server.host)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default: server.port)",
    )
    parser.add_argument(
        "--stdio",
        action="store_true",
        help="Run one session on stdin/stdout instead of listening",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for shelld."""
    args = _build_parser().parse_args(argv)

    try:
        cfg = config.load_system_config(args.config)
        settings = config.ShellSettings.from_config(cfg)
    except (OSError, ValueError) as e:
        print(f"shelld: {e}", file=sys.stderr)
        return 1

    setup_logging(cfg)

    if args.stdio:
        registry = build_registry(settings)
        run_stdio(registry, settings, sys.stdin.buffer, sys.stdout.buffer)
        return 0

    try:
        serve(cfg, settings, host=args.host, port=args.port)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except OSError as e:
        logger.error("Cannot serve: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
