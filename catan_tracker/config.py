"""
Configuration management for the Catan card tracker.

Handles the user preferences a display layer persists between sessions:
who "you" is, whether debug entries are shown, and where the overlay sits.
"""

import json
import os
from pathlib import Path
from typing import Optional

DEFAULT_DEBUG_MODE = True
DEFAULT_OVERLAY_POSITION = {"x": 12, "y": 12}


def get_config_dir() -> Path:
    """Get the configuration directory, creating it if needed."""
    # Use XDG_CONFIG_HOME if set, otherwise ~/.config
    config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    config_dir = Path(config_home) / "catan-tracker"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_path() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def load_config() -> dict:
    """Load configuration from disk."""
    config_path = get_config_path()
    if config_path.exists():
        try:
            with open(config_path) as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError):
            return {}
    return {}


def save_config(config: dict) -> None:
    """Save configuration to disk."""
    config_path = get_config_path()
    with open(config_path, "w") as f:
        json.dump(config, f, indent=2)
    # owner read/write only
    os.chmod(config_path, 0o600)


def get_current_player() -> Optional[str]:
    """
    Get the username "you" refers to.

    Priority:
    1. CATAN_TRACKER_USERNAME environment variable
    2. Stored config file
    """
    env_name = os.environ.get("CATAN_TRACKER_USERNAME")
    if env_name:
        return env_name

    config = load_config()
    return config.get("current_player")


def set_current_player(username: str) -> None:
    """Store the username "you" refers to."""
    config = load_config()
    config["current_player"] = username
    save_config(config)


def clear_current_player() -> None:
    """Remove the stored username."""
    config = load_config()
    config.pop("current_player", None)
    save_config(config)


def get_debug_mode() -> bool:
    return bool(load_config().get("debug_mode", DEFAULT_DEBUG_MODE))


def set_debug_mode(enabled: bool) -> None:
    config = load_config()
    config["debug_mode"] = enabled
    save_config(config)


def get_overlay_position() -> dict:
    """Overlay position as {"x": int, "y": int}; negative values clamp to 0."""
    position = load_config().get("overlay_position") or {}
    try:
        return {
            "x": max(0, int(position.get("x", DEFAULT_OVERLAY_POSITION["x"]))),
            "y": max(0, int(position.get("y", DEFAULT_OVERLAY_POSITION["y"]))),
        }
    except (TypeError, ValueError, AttributeError):
        return dict(DEFAULT_OVERLAY_POSITION)


def set_overlay_position(x: int, y: int) -> None:
    config = load_config()
    config["overlay_position"] = {"x": max(0, int(x)), "y": max(0, int(y))}
    save_config(config)
