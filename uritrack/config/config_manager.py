# uritrack/config/config_manager.py
'''
config_manager.py - Configuration management for uritrack
'''
from importlib.resources import files
import logging
import os
from pathlib import Path
from typing import Any, Dict
import toml
from rich.console import Console


console = Console()

logger = logging.getLogger(__name__)

REPORT_PERIODS = ("week", "month", "three_months")

if "BASE_DIR" not in globals():
    _xdg = os.getenv("XDG_CONFIG_HOME")
    BASE_DIR = Path(_xdg) / "uritrack" if _xdg else Path.home() / ".uritrack"

if "USER_CONFIG" not in globals():
    USER_CONFIG = BASE_DIR / "config.toml"

if "DEFAULT_CONFIG" not in globals():
    # the shipped defaults, read from the package resources
    DEFAULT_CONFIG = files("uritrack.config") \
        .joinpath("config.toml") \
        .read_text(encoding="utf-8")


def load_config() -> dict:
    """
    Load the user configuration from USER_CONFIG file.
    - If the config directory or file does not exist, create them with defaults.
    - Returns a dict parsed from TOML; on error, logs and returns empty dict.
    """
    try:
        BASE_DIR.mkdir(parents=True, exist_ok=True)
        if not USER_CONFIG.exists():
            try:
                USER_CONFIG.write_text(DEFAULT_CONFIG, encoding="utf-8")
            except OSError as e:
                logger.error(
                    f"Failed to write default config to {USER_CONFIG}: {e}", exc_info=True)
        try:
            text = USER_CONFIG.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(
                f"Failed to read config file {USER_CONFIG}: {e}", exc_info=True)
            return {}
        try:
            return toml.loads(text)
        except toml.TomlDecodeError as e:
            logger.error(
                f"Failed to parse TOML from {USER_CONFIG}: {e}", exc_info=True)
            return {}
    except OSError as e:
        logger.error(f"Unexpected error in load_config: {e}", exc_info=True)
        return {}


def save_config(doc: dict) -> bool:
    """
    Save the given config dict to USER_CONFIG in TOML format.
    - On error, logs and returns False; otherwise returns True.
    """
    try:
        BASE_DIR.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(
            f"Failed to ensure config directory {BASE_DIR}: {e}", exc_info=True)
    try:
        toml_str = toml.dumps(doc)
    except (TypeError, ValueError) as e:
        logger.error(f"Failed to serialize config to TOML: {e}", exc_info=True)
        return False
    try:
        USER_CONFIG.write_text(toml_str, encoding="utf-8")
        return True
    except OSError as e:
        logger.error(
            f"Failed to write config to {USER_CONFIG}: {e}", exc_info=True)
        return False


def get_config_value(section: str, key: str, default=None) -> Any:
    """
    Return value for [section][key] in config, or default if missing.
    """
    config = load_config()
    sec = config.get(section, {})
    if not isinstance(sec, dict):
        return default
    return sec.get(key, default)


def set_config_value(section: str, key: str, value: Any) -> bool:
    """
    Set config[section][key] = value and persist.
    Returns True if saved successfully, False otherwise.
    """
    config = load_config()
    sec = config.get(section, {}) or {}
    sec[key] = value
    config[section] = sec
    success = save_config(config)
    if not success:
        logger.error(
            f"Failed to save config after setting [{section}][{key}]")
    return success


def delete_config_value(section: str, key: str) -> bool:
    """
    Delete key from config[section] if present, persist changes.
    Returns True if deleted (or section/key missing and treated as no-op), False on write error.
    """
    config = load_config()
    sec = config.get(section, {}) or {}
    if key not in sec:
        logger.warning(
            f"delete_config_value: '{key}' not found in section [{section}]. No action taken.")
        return True
    del sec[key]
    config[section] = sec
    success = save_config(config)
    if not success:
        logger.error(
            f"Failed to save config after deleting [{section}][{key}]")
    return success


def get_config_section(section: str) -> Dict[str, Any]:
    """
    Return the dict for [section] from config.
    On error or missing, returns empty dict.
    """
    sec = load_config().get(section, {})
    if isinstance(sec, dict):
        return sec
    logger.warning(f"get_config_section: section [{section}] is not a dict.")
    return {}


def get_timezone_name() -> str:
    """
    Return [location].timezone, or an empty string when unset.
    """
    return get_config_value("location", "timezone", "") or ""


def get_log_level() -> str:
    return str(get_config_value("logging", "level", "INFO") or "INFO").upper()


def get_default_report_period() -> str:
    """
    Return [reports].default_period; unknown values fall back to 'month'.
    """
    period = get_config_value("reports", "default_period", "month")
    if period not in REPORT_PERIODS:
        logger.warning(
            f"Unknown reports.default_period '{period}', defaulting to 'month'")
        return "month"
    return period


def get_fetch_limit() -> int:
    value = get_config_value("sessions", "fetch_limit", 500)
    try:
        limit = int(value)
    except (TypeError, ValueError):
        logger.warning(
            f"sessions.fetch_limit '{value}' is not an integer. Using 500.")
        return 500
    return limit if limit > 0 else 500
