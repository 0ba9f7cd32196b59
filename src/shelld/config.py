# shelld — Line-Editing Command Shell Server
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Configuration loading and rendered-text constants for shelld.

Handles:
- Packaged YAML defaults loading (shelld.defaults/system.yaml)
- User config file discovery (--config, SHELLD_CONFIG) and merging
- ShellSettings: the immutable per-session view of the shell section
- ANSI / VT100 byte constants shared by the editor and commands
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from importlib import resources as importlib_resources
from pathlib import Path
from typing import Any

import yaml

# -----------------------
# Rendered text constants
# -----------------------

# Bytes are mapped 1:1 onto str through latin-1
ENCODING = "iso-8859-1"

CR = b"\r"
LF = b"\n"
LEFT_ARROW = b"\x1b[D"
RIGHT_ARROW = b"\x1b[C"

ANSI_COLORS: dict[str, str] = {
    "blue": "\x1b[34m",
    "red": "\x1b[31m",
    "reset": "\x1b[0m",
}

CONFIG_ENV = "SHELLD_CONFIG"


# -----------------------
# Config model wrapper
# -----------------------


class YAMLConfig:
    """Simple config wrapper that implements ConfigModel protocol."""

    def __init__(self, config_dict: dict[str, Any]):
        self._config = config_dict

    @property
    def server(self) -> dict[str, Any]:
        return self._config.get("server", {})

    @property
    def shell(self) -> dict[str, Any]:
        return self._config.get("shell", {})

    @property
    def logging(self) -> dict[str, Any]:
        log_cfg = self._config.get("logging", {})
        return log_cfg if isinstance(log_cfg, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def get_path(self, path: str, default: Any = None) -> Any:
        """
        Nested lookup using dot-separated path.
        Example: get_path("shell.prompt.drive", "") -> prompt drive literal
        """
        if not path:
            return default

        cur: Any = self._config
        for part in path.split("."):
            if not isinstance(cur, dict):
                return default
            if part not in cur:
                return default
            cur = cur[part]
        return cur


@dataclass(frozen=True)
class ShellSettings:
    """Per-session limits and literals, derived from the shell section."""

    buffer_size: int = 128
    history_length: int = 5
    max_args: int = 16
    newline: bytes = b"\r\n"
    prompt_drive: bytes = b"shelld:"
    prompt_suffix: bytes = b"$ "
    root_prompt: bytes = b"shelld$ "
    no_such_command: bytes = b"no such command: "
    help_banner: bytes = b"available commands:"

    @classmethod
    def from_config(cls, cfg: YAMLConfig) -> ShellSettings:
        defaults = cls()

        def _int(path: str, default: int, minimum: int) -> int:
            val = cfg.get_path(path, default)
            if not isinstance(val, int) or isinstance(val, bool):
                raise ValueError(f"{path} must be an integer, got {val!r}")
            if val < minimum:
                raise ValueError(f"{path} must be >= {minimum}, got {val}")
            return val

        def _bytes(path: str, default: bytes) -> bytes:
            val = cfg.get_path(path, None)
            if val is None:
                return default
            return str(val).encode(ENCODING)

        return cls(
            buffer_size=_int("shell.buffer_size", defaults.buffer_size, 2),
            history_length=_int(
                "shell.history_length", defaults.history_length, 1
            ),
            max_args=_int("shell.max_args", defaults.max_args, 1),
            newline=_bytes("shell.newline", defaults.newline),
            prompt_drive=_bytes("shell.prompt.drive", defaults.prompt_drive),
            prompt_suffix=_bytes(
                "shell.prompt.suffix", defaults.prompt_suffix
            ),
            root_prompt=_bytes("shell.prompt.root", defaults.root_prompt),
            no_such_command=_bytes(
                "shell.messages.no_such_command", defaults.no_such_command
            ),
            help_banner=_bytes(
                "shell.messages.help_banner", defaults.help_banner
            ),
        )


# -----------------------
# Packaged defaults loading
# -----------------------


def _defaults_dir() -> Path:
    """Return the installed path to packaged defaults directory."""
    return Path(
        importlib_resources.files("shelld.defaults")
    )  # type: ignore[arg-type]


def _read_yaml_mapping(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config YAML {path} must load to a mapping/dict.")
    return data


def load_defaults_yaml(filename: str) -> dict[str, Any]:
    """
    Load a YAML file from shelld/defaults/.
    """
    defaults_dir = _defaults_dir()
    path = defaults_dir / filename
    if not path.exists():
        raise FileNotFoundError(
            f"Missing defaults YAML: {filename} "
            f"(looked in {defaults_dir})"
        )
    return _read_yaml_mapping(path)


def merge_config(
    base: dict[str, Any], override: dict[str, Any]
) -> dict[str, Any]:
    """Recursively merge override onto a copy of base."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def find_user_config(explicit: str | Path | None = None) -> Path | None:
    """Resolve the user config file.

    Resolution order:
    1. explicit path (from --config)
    2. SHELLD_CONFIG environment variable (if set)
    """
    if explicit:
        return Path(explicit)
    env_path = os.getenv(CONFIG_ENV)
    if env_path:
        return Path(env_path)
    return None


def load_system_config(path: str | Path | None = None) -> YAMLConfig:
    """
    Load system.yaml from packaged defaults, merge the user config file
    over it (if any) and return a YAMLConfig wrapper.
    """
    data = load_defaults_yaml("system.yaml")
    user_path = find_user_config(path)
    if user_path is not None:
        if not user_path.exists():
            raise FileNotFoundError(f"Missing config file: {user_path}")
        data = merge_config(data, _read_yaml_mapping(user_path))
    return YAMLConfig(data)
