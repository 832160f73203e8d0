"""Configuration management for nencho.

Settings live in a single settings.json file:
   - flag_value: string that marks 退職 / 乙欄 as set in CSV input
   - csv_encoding: encoding used to read CSV exports
   - default_output_format: "text" or "json" for 'nencho verify'

Config directory resolution:
1. NENCHO_CONFIG_PATH environment variable (if set)
2. $XDG_CONFIG_HOME/nencho/ or ~/.config/nencho/
"""

import json
import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError


APP_NAME = "nencho"
SETTINGS_FILENAME = "settings.json"


class ConfigError(Exception):
    """Raised when settings.json is malformed or a setting is unknown."""
    pass


class Settings(BaseModel):
    """Known settings and their defaults."""
    model_config = ConfigDict(extra="forbid")

    flag_value: str = "Yes"
    csv_encoding: str = "utf-8-sig"
    default_output_format: Literal["text", "json"] = "text"


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. NENCHO_CONFIG_PATH environment variable
    2. ~/.config/nencho/ (XDG_CONFIG_HOME)
    """
    env_path = os.environ.get("NENCHO_CONFIG_PATH")
    if env_path:
        return Path(env_path)

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    """Get the path to settings.json (may not exist yet)."""
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Load raw settings from settings.json.

    Returns:
        Settings dictionary (empty dict if file doesn't exist)

    Raises:
        ConfigError: If the file is not a JSON object
    """
    settings_file = get_settings_path()

    if not settings_file.exists():
        return {}

    with open(settings_file, "r") as f:
        try:
            settings = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {settings_file}: {e}")

    if not isinstance(settings, dict):
        raise ConfigError(f"{settings_file} must contain a JSON object")
    return settings


def save_settings(settings: dict) -> Path:
    """Save settings to settings.json.

    Returns:
        Path to the saved settings file
    """
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME

    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def get_effective_settings() -> Settings:
    """Load settings.json merged over defaults and validate it."""
    try:
        return Settings(**load_settings())
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {get_settings_path()}: {e}")


def get_setting(key: str, default: Any = None) -> Any:
    """Get an effective setting value (file value, else built-in default)."""
    settings = get_effective_settings()
    return getattr(settings, key, default)


def set_setting(key: str, value: Any) -> Path:
    """Set a setting value in settings.json.

    Raises:
        ConfigError: Unknown key or invalid value
    """
    if key not in Settings.model_fields:
        known = ", ".join(Settings.model_fields)
        raise ConfigError(f"Unknown setting '{key}'. Known settings: {known}")

    settings = load_settings()
    settings[key] = value
    try:
        Settings(**settings)
    except ValidationError as e:
        raise ConfigError(f"Invalid value for '{key}': {e}")
    return save_settings(settings)


def unset_setting(key: str) -> bool:
    """Remove a setting from settings.json.

    Returns:
        True if the key was present
    """
    settings = load_settings()
    if key not in settings:
        return False
    del settings[key]
    save_settings(settings)
    return True
