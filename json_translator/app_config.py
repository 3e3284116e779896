"""Application configuration for the JSON translator."""
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import yaml
from dotenv import load_dotenv
from openai import AsyncOpenAI

from json_translator.exceptions import ConfigurationError
from json_translator.logging_config import setup_logger

DEFAULT_CONFIG_FILE = 'config.yaml'
DEFAULT_ENV_FILE = '.env'
DEFAULT_MODEL_NAME = 'gpt-4o-mini'
DEFAULT_BATCH_SIZE = 100
DEFAULT_REQUEST_TIMEOUT = 120.0
DEFAULT_LOG_FILE_PATH = None

logger = logging.getLogger(__name__)


@dataclass
class AppConfig:
    """Application configuration dataclass."""
    # Model configuration
    model_name: str = DEFAULT_MODEL_NAME
    temperature: Optional[float] = None
    custom_prompt: Optional[str] = None

    # Processing settings
    batch_size: int = DEFAULT_BATCH_SIZE
    dry_run: bool = False

    # API access
    api_key: Optional[str] = None
    api_endpoint: Optional[str] = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    # Language configuration
    language_names: Dict[str, str] = field(default_factory=dict)

    # Logging
    log_level: str = 'INFO'
    log_file_path: Optional[str] = DEFAULT_LOG_FILE_PATH
    log_to_console: bool = True

    # Where the settings came from, for the startup log
    config_file: Optional[str] = None
    env_file: Optional[str] = None


def _load_dotenv_file(env_file: Optional[str]) -> Optional[str]:
    """
    Load a .env file into the environment. Returns the path loaded, if any.

    A missing default .env is fine; a missing explicit ``env_file`` is an error.
    """
    dotenv_path = os.path.abspath(env_file or DEFAULT_ENV_FILE)
    if os.path.exists(dotenv_path):
        load_dotenv(dotenv_path)
        return dotenv_path
    if env_file:
        raise ConfigurationError(f"Environment file '{dotenv_path}' not found.")
    return None


def _load_yaml_config(config_file: Optional[str]) -> Tuple[Dict[str, Any], Optional[str]]:
    """
    Load the YAML configuration file.

    The path is taken from ``config_file``, then the TRANSLATOR_CONFIG_FILE
    environment variable, then ``config.yaml`` in the working directory.
    A missing file means defaults; a broken one is an error.

    Returns:
        The configuration mapping and the absolute path it was read from
        (None when no file was found).
    """
    config_path = config_file or os.environ.get('TRANSLATOR_CONFIG_FILE', DEFAULT_CONFIG_FILE)
    config_path = os.path.abspath(config_path)

    if not os.path.exists(config_path):
        if config_file:
            raise ConfigurationError(f"Configuration file '{config_path}' not found.")
        return {}, None

    try:
        with open(config_path, 'r', encoding='utf-8') as config_file_stream:
            loaded_config = yaml.safe_load(config_file_stream)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file '{config_path}': {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Could not read configuration file '{config_path}': {e}") from e

    if loaded_config is None:
        return {}, config_path
    if not isinstance(loaded_config, dict):
        raise ConfigurationError(f"Configuration file '{config_path}' must contain a YAML dictionary.")
    return loaded_config, config_path


def _build_language_names(locales_list: List[Dict[str, str]]) -> Dict[str, str]:
    """Build the code to display name mapping from ``supported_locales``."""
    language_names: Dict[str, str] = {}
    for locale in locales_list or []:
        code = locale.get('code')
        name = locale.get('name')
        if code and name:
            language_names[code] = name
    return language_names


def _positive_int(value: Any, setting: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{setting} must be an integer, got {value!r}") from e
    if number < 1:
        raise ConfigurationError(f"{setting} must be a positive integer, got {number}")
    return number


def load_app_config(config_file: Optional[str] = None, env_file: Optional[str] = None) -> AppConfig:
    """
    Load application configuration from the .env file, YAML file and environment.

    Environment variables take precedence over the YAML file.

    Args:
        config_file: Explicit YAML configuration path.
        env_file: Explicit .env path (defaults to ``.env`` in the working directory).

    Returns:
        AppConfig: The loaded application configuration.

    Raises:
        ConfigurationError: If the YAML file or a numeric setting is invalid.
    """
    loaded_env_file = _load_dotenv_file(env_file)
    config, loaded_config_file = _load_yaml_config(config_file)

    log_config = config.get('logging', {}) or {}

    model_name = os.environ.get('MODEL_NAME', config.get('model_name', DEFAULT_MODEL_NAME))
    batch_size = _positive_int(
        os.environ.get('BATCH_SIZE', config.get('batch_size', DEFAULT_BATCH_SIZE)), 'batch_size'
    )

    temperature = config.get('temperature')
    if temperature is not None:
        try:
            temperature = float(temperature)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"temperature must be a number, got {temperature!r}") from e

    try:
        request_timeout = float(config.get('request_timeout', DEFAULT_REQUEST_TIMEOUT))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"request_timeout must be a number of seconds: {e}") from e

    return AppConfig(
        model_name=model_name,
        temperature=temperature,
        custom_prompt=os.environ.get('CUSTOM_PROMPT', config.get('custom_prompt')) or None,
        batch_size=batch_size,
        dry_run=bool(config.get('dry_run', False)),
        api_key=os.environ.get('OPENAI_API_KEY') or None,
        api_endpoint=os.environ.get('OPENAI_API_ENDPOINT', config.get('api_endpoint')) or None,
        request_timeout=request_timeout,
        language_names=_build_language_names(config.get('supported_locales', [])),
        log_level=str(log_config.get('log_level', 'INFO')).upper(),
        log_file_path=log_config.get('log_file_path', DEFAULT_LOG_FILE_PATH),
        log_to_console=log_config.get('log_to_console', True),
        config_file=loaded_config_file,
        env_file=loaded_env_file,
    )


def setup_logger_from_config(app_config: AppConfig, log_level_override: Optional[str] = None) -> logging.Logger:
    """Set up the package logger from configuration and log where settings were loaded from."""
    package_logger = setup_logger(
        log_level_override or app_config.log_level,
        app_config.log_file_path,
        app_config.log_to_console
    )

    if app_config.config_file:
        logger.info("Loaded configuration from: %s", app_config.config_file)
    else:
        logger.info("No configuration file found. Using default configuration.")
    if app_config.env_file:
        logger.info("Loaded environment variables from: %s", app_config.env_file)
    else:
        logger.info("No .env file found. Relying on system environment variables if any.")
    return package_logger


def create_openai_client(app_config: AppConfig) -> AsyncOpenAI:
    """
    Create the OpenAI client.

    The client does not retry failed requests and gives up after
    ``request_timeout`` seconds.

    Raises:
        ConfigurationError: If no API key is configured.
    """
    if not app_config.api_key:
        raise ConfigurationError(
            "OPENAI_API_KEY not found. Set it in the environment or in the .env file."
        )

    if not app_config.api_key.startswith('sk-'):
        logger.warning("OPENAI_API_KEY does not start with 'sk-'. This may be invalid.")

    client = AsyncOpenAI(
        api_key=app_config.api_key,
        base_url=app_config.api_endpoint,
        timeout=app_config.request_timeout,
        max_retries=0,
    )
    if app_config.api_endpoint:
        logger.info("Using OpenAI API endpoint: %s", app_config.api_endpoint)
    return client
