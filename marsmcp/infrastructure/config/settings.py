"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
YAML configuration file (~/.mars-mcp/config.yaml). JSON is valid YAML, so
a config.json-style document works too.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from marsmcp.infrastructure.mars.config import DEFAULT_BASE_URL, MarsConfig

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".mars-mcp"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"

# --- Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}  # For testing purposes
_loaded = False


class ConfigurationError(Exception):
    """Raised when required settings are missing or invalid."""
    pass


def load_configuration(
    config_file: Optional[Path] = None,
    env_file: Optional[Path] = None,
    force: bool = False,
) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values

    Args:
        config_file: Path to the YAML configuration file (DEFAULT_CONFIG_FILE if None).
        env_file: Path to the .env file (searches upwards from cwd if None).
        force: Reload even if configuration was already loaded.
    """
    global _config, _loaded
    if _loaded and not force:
        logger.debug("Configuration already loaded.")
        return

    _config = {}
    config_file = config_file or DEFAULT_CONFIG_FILE

    # 1. YAML file (lowest priority)
    if config_file.exists():
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load or parse config {config_file}: {e}") from e
        if isinstance(yaml_config, dict):
            _config.update(yaml_config)
            logger.info(f"Loaded configuration from YAML: {config_file}")
        elif yaml_config is not None:
            logger.warning(f"Config file {config_file} did not contain a mapping.")
    else:
        logger.debug(f"Config file not found: {config_file}")

    # 2. .env file; override=False keeps real environment variables on top
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")

    # 3. Environment variables are read on demand in get_config

    _loaded = True
    logger.debug("Configuration loading process completed.")


def _lookup_nested(key: str) -> Any:
    """Resolves 'a.b.c' through nested YAML mappings."""
    if key in _config:
        return _config[key]
    node: Any = _config
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def get_config(key: str, default: Any = None) -> Any:
    """Get a configuration value by key.

    Priority:
    1. Test configuration
    2. Environment variable (key upper-cased)
    3. YAML config (dotted keys walk nested mappings)
    4. Default value

    Environment strings 'true'/'false' become booleans and numeric strings
    become int or float.
    """
    if key in _test_config:
        return _test_config[key]

    env_key = key.upper()
    if env_key in os.environ:
        value = os.environ[env_key]
        if value.lower() == "true":
            return True
        elif value.lower() == "false":
            return False
        try:
            if "." in value:
                return float(value)
            else:
                return int(value)
        except (ValueError, TypeError):
            return value

    value = _lookup_nested(key)
    if value is not None:
        return value

    return default


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None


# --- Convenience Functions ---

def _first(*keys: str, default: Any = None) -> Any:
    for key in keys:
        value = get_config(key)
        if value is not None:
            return value
    return default


def _seconds(ms_value: Any, name: str) -> Optional[float]:
    if ms_value is None:
        return None
    try:
        return float(ms_value) / 1000.0
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be a number of milliseconds, got {ms_value!r}") from e


def get_api_key() -> Optional[str]:
    """Returns the MARS API key exactly as configured.

    Unlike get_config, environment values are not coerced, so keys such as
    "0123456789" or "1_000" survive unchanged.
    """
    for key in ("MARS_API_KEY", "mars.api_key"):
        if _test_config.get(key) is not None:
            return str(_test_config[key])
    if "MARS_API_KEY" in os.environ:
        return os.environ["MARS_API_KEY"]
    value = _lookup_nested("mars.api_key")
    return str(value) if value is not None else None


def load_mars_config() -> MarsConfig:
    """Builds a MarsConfig from the loaded settings.

    Millisecond settings (MARS_TIMEOUT_MS, MARS_RETRY_BASE_DELAY_MS,
    MARS_RETRY_MAX_DELAY_MS) are converted to seconds.

    Raises:
        ConfigurationError: If a value has the wrong type or is out of range.
    """
    defaults = MarsConfig()
    try:
        timeout_s = _seconds(_first("MARS_TIMEOUT_MS", "mars.timeout_ms"), "MARS_TIMEOUT_MS")
        base_delay_s = _seconds(_first("MARS_RETRY_BASE_DELAY_MS", "mars.retry_base_delay_ms"), "MARS_RETRY_BASE_DELAY_MS")
        max_delay_s = _seconds(_first("MARS_RETRY_MAX_DELAY_MS", "mars.retry_max_delay_ms"), "MARS_RETRY_MAX_DELAY_MS")
        return MarsConfig(
            base_url=str(_first("MARS_BASE_URL", "mars.base_url", default=DEFAULT_BASE_URL)),
            api_key=get_api_key(),
            timeout_s=timeout_s if timeout_s is not None else defaults.timeout_s,
            max_retries=int(_first("MARS_MAX_RETRIES", "mars.max_retries", default=defaults.max_retries)),
            retry_base_delay_s=base_delay_s if base_delay_s is not None else defaults.retry_base_delay_s,
            retry_max_delay_s=max_delay_s if max_delay_s is not None else defaults.retry_max_delay_s,
            concurrency=int(_first("MARS_CONCURRENCY", "mars.concurrency", default=defaults.concurrency)),
            auth_scheme=str(_first("MARS_AUTH_SCHEME", "mars.auth_scheme", default=defaults.auth_scheme)).lower(),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid MARS configuration: {e}") from e


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values will override any existing configuration.

    Args:
        config_dict: Dictionary of configuration values to set
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    global _test_config
    _test_config = {}
    logger.debug("Cleared testing configuration")
