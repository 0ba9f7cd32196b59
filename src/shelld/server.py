# shelld — Line-Editing Command Shell Server
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
TCP front end: one thread and one ShellSession per accepted connection.
"""

from __future__ import annotations

import logging
import socketserver
import threading

from .config import ShellSettings, YAMLConfig
from .filesystem import LocalFilesystem
from .interfaces import Filesystem
from .registry import CommandRegistry
from .session import ShellSession
from .streams import SocketStream

logger = logging.getLogger(__name__)


class ShellRequestHandler(socketserver.BaseRequestHandler):
    server: ShellServer

    def handle(self) -> None:
        host, port = self.client_address[:2]
        stream = SocketStream(self.request)
        session = ShellSession(
            stream=stream,
            registry=self.server.registry,
            filesystem=self.server.filesystem,
            settings=self.server.settings,
            name=f"{host}:{port}",
        )
        try:
            session.run()
        finally:
            stream.close()


class ShellServer(socketserver.ThreadingTCPServer):
    """Threaded TCP server sharing one registry across sessions."""

    allow_reuse_address = True
    daemon_threads = True

    def __init__(
        self,
        address: tuple[str, int],
        registry: CommandRegistry,
        settings: ShellSettings | None = None,
        filesystem: Filesystem | None = None,
        conns: int = 5,
        name: str = "shelld",
    ) -> None:
        self.registry = registry
        self.settings = settings if settings is not None else ShellSettings()
        self.filesystem = (
            filesystem if filesystem is not None else LocalFilesystem()
        )
        self.request_queue_size = conns
        self.name = name
        self.restart_requested = False
        super().__init__(address, ShellRequestHandler)

    def request_restart(self) -> None:
        """Stop serving and ask the caller to start a fresh server.

        shutdown() blocks until serve_forever returns, so it must not run
        on a request thread directly.
        """
        logger.info("%s: restart requested", self.name)
        self.restart_requested = True
        threading.Thread(target=self.shutdown, daemon=True).start()


def build_server(
    cfg: YAMLConfig,
    registry: CommandRegistry,
    settings: ShellSettings | None = None,
    host: str | None = None,
    port: int | None = None,
) -> ShellServer:
    """Create a ShellServer from the server section of the config."""
    server_cfg = cfg.server
    bind_host = host if host is not None else server_cfg.get("host", "0.0.0.0")
    bind_port = port if port is not None else int(server_cfg.get("port", 2222))
    conns = int(server_cfg.get("conns", 5))
    if conns < 1:
        raise ValueError(f"server.conns must be >= 1, got {conns}")

    server = ShellServer(
        (bind_host, bind_port),
        registry,
        settings=settings if settings is not None
        else ShellSettings.from_config(cfg),
        conns=conns,
        name=str(server_cfg.get("name", "shelld")),
    )
    logger.info(
        "%s listening on %s:%d (backlog %d)",
        server.name, bind_host, server.server_address[1], conns,
    )
    return server
