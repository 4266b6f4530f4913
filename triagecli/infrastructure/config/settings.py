"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
configuration file (~/.triagecli/config.yaml). Also resolves which upstream
endpoint to talk to: the API directly when credentials are configured,
otherwise the proxy that keeps the key server-side.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from triagecli.domain.models.common import BackoffPolicy

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".triagecli"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"

DEFAULT_PROXY_URL = "https://ksense-assessment.lumi8866.workers.dev/api"
API_KEY_HEADER = "x-api-key"

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False


@dataclass(frozen=True)
class ApiEndpoint:
    """Base URL and auth headers used for every upstream call."""
    base_url: str
    headers: Dict[str, str] = field(default_factory=dict)
    using_direct: bool = False

    def describe(self) -> str:
        if self.using_direct:
            return "Using .env credentials (direct hit on upstream API)"
        return "Using proxy (key stays server-side)"


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Turns nested YAML sections into dotted keys ('api': {'page_size': 20} -> 'api.page_size')."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        full_key = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{full_key}."))
        else:
            flat[full_key] = value
    return flat


def load_configuration(config_file: Optional[Path] = None, env_file: Optional[Path] = None) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values passed to get_config

    Args:
        config_file: Path to the YAML configuration file (DEFAULT_CONFIG_FILE if None).
        env_file: Path to the .env file (searches upwards from cwd if None).
    """
    global _config, _loaded
    if _loaded:
        logger.debug("Configuration already loaded.")
        return

    _config = {}
    config_file = config_file or DEFAULT_CONFIG_FILE

    # 1. Load from YAML file (Lowest priority)
    if config_file.exists():
        try:
            with open(config_file, 'r') as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. Load from .env file (Medium priority)
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        # override=False: real environment variables take precedence
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug(".env file not found at or above current directory.")

    # 3. Environment Variables (Highest priority) are handled by os.environ in get_config

    _loaded = True
    logger.info("Configuration loading process completed.")


def reset_configuration() -> None:
    """Forgets loaded configuration so the next load_configuration reads again."""
    global _config, _loaded
    _config = {}
    _loaded = False


def _convert_env_value(value: str) -> Any:
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


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by key.

    Priority:
    1. Test configuration (if in testing mode)
    2. Environment variable (key upper-cased, dots replaced by underscores)
    3. YAML config
    4. Default value

    Args:
        key: The configuration key
        default: Default value if the key is not found

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    env_key = key.upper().replace('.', '_')
    if env_key in os.environ:
        return _convert_env_value(os.environ[env_key])

    if key in _config:
        return _config[key]

    logger.debug(f"Config key '{key}' not found in environment or loaded config. Returning default: {default}")
    return default


def _get_str(*keys: str) -> Optional[str]:
    """Returns the first non-empty value among ``keys`` as a raw string.

    Environment values are read without numeric conversion so that keys and
    URLs are never turned into numbers.
    """
    for key in keys:
        if key in _test_config and _test_config[key]:
            return str(_test_config[key])
        env_value = os.environ.get(key.upper().replace('.', '_'))
        if env_value:
            return env_value
        if _config.get(key):
            return str(_config[key])
    return None


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None

# --- Convenience Functions ---

def resolve_endpoint() -> ApiEndpoint:
    """Picks the direct API when both base URL and key are configured, else the proxy."""
    base_url = _get_str('BASE_URL', 'api.base_url')
    api_key = _get_str('X_API_KEY', 'api.key')
    if base_url and api_key:
        endpoint = ApiEndpoint(base_url=base_url, headers={API_KEY_HEADER: api_key}, using_direct=True)
    else:
        proxy_url = _get_str('CF_PROXY_URL', 'api.proxy_url') or DEFAULT_PROXY_URL
        endpoint = ApiEndpoint(base_url=proxy_url)
    logger.info(endpoint.describe())
    return endpoint


def get_request_timeout() -> float:
    return float(get_config('api.timeout_seconds', 10.0))


def get_page_size() -> int:
    return int(get_config('api.page_size', 20))


def get_min_request_interval() -> float:
    return float(get_config('rate_limit.min_interval_seconds', 0.35))


def get_backoff_policy() -> BackoffPolicy:
    max_delay = get_config('retry.max_backoff_seconds')
    return BackoffPolicy(
        max_retries=int(get_config('retry.max_retries', 5)),
        initial_delay=float(get_config('retry.initial_backoff_seconds', 1.0)),
        factor=float(get_config('retry.backoff_factor', 2.0)),
        max_delay=float(max_delay) if max_delay is not None else None,
    )


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
