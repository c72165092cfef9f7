"""Configuration utilities for the offlinelink CLI.

This module provides shared configuration functions used across CLI commands.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from offlinelink.core.config import DEFAULT_RETRY_INTERVAL


def get_config_dir() -> Path:
    """Get the configuration directory for offlinelink.

    Returns:
        Path to ~/.offlinelink or equivalent.
    """
    return Path.home() / ".offlinelink"


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def get_queue_db() -> Path:
    """Get the default path of the queue database."""
    return get_config_dir() / "queue.db"


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


def get_retry_interval(config: dict[str, Any]) -> float:
    """Get the configured retry interval in seconds."""
    return float(config.get("retry_interval", DEFAULT_RETRY_INTERVAL))
