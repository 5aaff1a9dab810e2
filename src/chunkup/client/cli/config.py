"""Configuration utilities for the chunkup CLI.

This module provides shared configuration functions used across CLI commands.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from chunkup.core.config import TransferConfig


def get_config_dir() -> Path:
    """Get the configuration directory for chunkup.

    Returns:
        Path to ~/.chunkup or equivalent.
    """
    return Path.home() / ".chunkup"


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def load_config() -> dict[str, Any]:
    """Load configuration from config file."""
    config_file = get_config_file()
    if config_file.exists():
        return dict(json.loads(config_file.read_text()))
    return {}


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to config file."""
    config_file = get_config_file()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(config, indent=2))


def load_transfer_config(overrides: dict[str, Any] | None = None) -> TransferConfig:
    """Build the transfer settings from the config file and CLI overrides.

    Overrides set to None are ignored, so unset CLI options fall back to the
    config file, then to the built-in defaults.
    """
    config = load_config()
    for key, value in (overrides or {}).items():
        if value is not None:
            config[key] = value
    return TransferConfig.from_dict(config)


def parse_form_fields(values: tuple[str, ...]) -> dict[str, str]:
    """Parse repeated key=value options into a dict.

    Raises:
        ValueError: If a value has no '=' or an empty key.
    """
    fields: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid form field {item!r}, expected key=value")
        fields[key] = value
    return fields
