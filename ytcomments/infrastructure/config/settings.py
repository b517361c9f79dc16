"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a YAML
configuration file (`config.yaml` in the working directory by default),
which is also where the developer key is persisted.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from ytcomments.domain.models.common import BackoffPolicy

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_FILE = Path("config.yaml")
ENV_FILE_NAME = ".env"
DEVELOPER_KEY_FIELD = "developerKey"
DEVELOPER_KEY_ENV = "YOUTUBE_API_KEY"

# --- Global Configuration Store (Simple Approach) ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False
_config_file: Path = DEFAULT_CONFIG_FILE


def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None, force: bool = False) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values passed to get_config

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
        force: Reload even if configuration was already loaded.
    """
    global _config, _loaded, _config_file
    if _loaded and not force:
        logger.debug("Configuration already loaded.")
        return

    _config = {}
    _config_file = Path(config_file)

    # 1. Load from YAML file (Lowest priority)
    if _config_file.exists():
        try:
            with open(_config_file, 'r', encoding='utf-8') as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(yaml_config)
                logger.info(f"Loaded configuration from YAML: {_config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {_config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {_config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {_config_file}")

    # 2. Load from .env file (Medium priority)
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        if load_dotenv(dotenv_path=dotenv_path, override=False):  # ENV VARS take precedence
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug(".env file not found at or above current directory.")

    # 3. Environment Variables (Highest priority) are handled in get_config

    _loaded = True
    logger.debug("Configuration loading process completed.")


def _coerce(value: str) -> Any:
    if value.lower() == 'true':
        return True
    if value.lower() == 'false':
        return False
    try:
        if '.' in value:
            return float(value)
        return int(value)
    except (ValueError, TypeError):
        return value


def _lookup_nested(key: str) -> Any:
    """Resolves 'a.b.c' against nested YAML mappings, or a flat 'a.b.c' key."""
    if key in _config:
        return _config[key]
    value: Any = _config
    for part in key.split('.'):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by key.

    Priority:
    1. Test configuration (if in testing mode)
    2. Environment variable (key upper-cased, dots replaced by underscores)
    3. YAML config
    4. Default value

    Args:
        key: The configuration key (e.g., 'rate_limit.capacity')
        default: Default value if the key is not found

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    env_key = key.upper().replace('.', '_')
    if env_key in os.environ:
        return _coerce(os.environ[env_key])

    value = _lookup_nested(key)
    if value is not None:
        return value

    logger.debug(f"Config key '{key}' not found in environment or loaded config. Returning default: {default}")
    return default


def set_config(key: str, value: Any) -> None:
    """Sets a configuration value in memory for the rest of the process."""
    logger.debug(f"Setting config: {key} = {value}")
    _config[key] = value


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None


# --- Convenience Functions ---

def get_developer_key() -> Optional[str]:
    """Returns the YouTube developer key (env YOUTUBE_API_KEY first, then config.yaml)."""
    key = get_config(DEVELOPER_KEY_ENV) or get_config(DEVELOPER_KEY_FIELD)
    return str(key) if key else None


def save_developer_key(developer_key: str, config_file: Optional[Path] = None) -> Path:
    """Persists the developer key to the YAML config, keeping other settings.

    Returns:
        The path written.

    Raises:
        OSError: If the file cannot be written.
    """
    path = Path(config_file) if config_file is not None else _config_file
    existing: Dict[str, Any] = {}
    if path.exists():
        with open(path, 'r', encoding='utf-8') as f:
            loaded = yaml.safe_load(f)
        if isinstance(loaded, dict):
            existing = loaded
    existing[DEVELOPER_KEY_FIELD] = developer_key
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(existing, f, default_flow_style=False)
    _config[DEVELOPER_KEY_FIELD] = developer_key
    logger.info(f"Developer key saved to {path}")
    return path


def get_rate_limit_settings() -> Dict[str, Any]:
    """Capacity and refill interval for the shared rate limiter."""
    return {
        'capacity': int(get_config('rate_limit.capacity', 1)),
        'interval_seconds': float(get_config('rate_limit.interval_seconds', 1.0)),
    }


def get_backoff_policy() -> BackoffPolicy:
    """Builds the retry policy from settings, falling back to BackoffPolicy defaults."""
    defaults = BackoffPolicy()
    max_elapsed = get_config('retry.max_elapsed_seconds', defaults.max_elapsed_seconds)
    max_retries = get_config('retry.max_retries', defaults.max_retries)
    return BackoffPolicy(
        initial_interval=float(get_config('retry.initial_interval', defaults.initial_interval)),
        multiplier=float(get_config('retry.multiplier', defaults.multiplier)),
        randomization_factor=float(get_config('retry.randomization_factor', defaults.randomization_factor)),
        max_interval=float(get_config('retry.max_interval', defaults.max_interval)),
        max_elapsed_seconds=float(max_elapsed) if max_elapsed is not None else None,
        max_retries=int(max_retries) if max_retries is not None else None,
    )


def fail_fast_on_input_error() -> bool:
    """Whether malformed locators skip the backoff loop (default: retried like any error)."""
    flag = get_config('retry.fail_fast_on_input_error', False)
    if isinstance(flag, str):
        return flag.lower() in ('true', '1', 'yes', 'on')
    return bool(flag)


def get_output_dir() -> Path:
    return Path(str(get_config('output.dir', '.')))


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
    _test_config.clear()
    logger.debug("Cleared testing configuration")
