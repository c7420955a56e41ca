# wsh - Line-Oriented Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Configuration and data root resolution for wsh.

Handles:
- Packaged YAML defaults loading (wsh_cli/defaults/system.yaml)
- Optional user override file (WSH_CONFIG), deep-merged over defaults
- Data root resolution (WSH_DATA_HOME, ~/.local/share)
- ANSI coloring constants for the prompt
"""

from __future__ import annotations

import os
from importlib import resources as importlib_resources
from pathlib import Path
from typing import Any

import yaml

# -----------------------
# UI constants
# -----------------------

ANSI_COLORS: dict[str, str] = {
    "cyan": "\033[38;5;69;1m",
    "pink": "\033[38;5;169;1m",
    "magenta": "\033[38;5;126;1m",
    "yellow": "\033[38;5;226;1m",
    "reset": "\033[0m",
    "dim": "\033[2m",
    "green": "\033[32m",
    "red": "\033[31m",
}


# -----------------------
# Config model wrapper
# -----------------------


class YAMLConfig:
    """Simple config wrapper that implements ConfigModel protocol."""

    def __init__(self, config_dict: dict[str, Any]):
        self._config = config_dict

    def _section(self, name: str) -> dict[str, Any]:
        section = self._config.get(name, {})
        return section if isinstance(section, dict) else {}

    @property
    def system(self) -> dict[str, Any]:
        return self._section("system")

    @property
    def history(self) -> dict[str, Any]:
        return self._section("history")

    @property
    def execution(self) -> dict[str, Any]:
        return self._section("execution")

    @property
    def parser(self) -> dict[str, Any]:
        return self._section("parser")

    @property
    def ui(self) -> dict[str, Any]:
        return self._section("ui")

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def get_path(self, path: str, default: Any = None) -> Any:
        """
        Nested lookup using dot-separated path.
        Example: get_path("ui.theme.style", {}) -> dict style mapping
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


# -----------------------
# Data root
# -----------------------


def get_data_root() -> Path:
    """Get the data root directory for wsh.

    Resolution order:
    1. WSH_DATA_HOME environment variable (if set)
    2. ~/.local/share (default)
    """
    wsh_data_home = os.getenv("WSH_DATA_HOME")
    if wsh_data_home:
        root = Path(wsh_data_home)
    else:
        root = Path.home() / ".local" / "share"

    root.mkdir(parents=True, exist_ok=True)
    return root


# -----------------------
# YAML loading
# -----------------------


def _defaults_dir() -> Path:
    """Return the installed path to packaged defaults directory."""
    return Path(
        importlib_resources.files("wsh_cli.defaults")
    )  # type: ignore[arg-type]


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file that must contain a mapping."""
    if not path.exists():
        raise FileNotFoundError(f"Missing config YAML: {path}")

    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config YAML {path} must load to a mapping/dict.")
    return data


def load_defaults_yaml(filename: str) -> dict[str, Any]:
    """
    Load a YAML file from wsh_cli/defaults/.
    """
    return load_yaml_file(_defaults_dir() / filename)


def merge_config(
    base: dict[str, Any], override: dict[str, Any]
) -> dict[str, Any]:
    """Deep-merge ``override`` into a copy of ``base``.

    Nested mappings merge key by key; any other value replaces.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_config(current, value)
        else:
            merged[key] = value
    return merged


def load_system_config() -> YAMLConfig:
    """
    Load system.yaml from packaged defaults, apply the WSH_CONFIG override
    file if one is named, and return a YAMLConfig wrapper.
    """
    data = load_defaults_yaml("system.yaml")

    override_path = os.getenv("WSH_CONFIG")
    if override_path:
        data = merge_config(data, load_yaml_file(Path(override_path)))

    return YAMLConfig(data)


def get_file_mode(cfg: Any, default: int = 0o644) -> int:
    """Read ``execution.file_mode``; strings are parsed as octal."""
    value = cfg.get_path("execution.file_mode", default)
    if isinstance(value, str):
        return int(value, 8)
    return int(value)
