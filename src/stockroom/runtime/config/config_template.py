"""Configuration template substitution utilities."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.stockroom.runtime.config.config_data import ConfigData
from src.stockroom.runtime.config.settings import EnvironmentVariables


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message
    """
    def replacer(match):
        var_expr = match.group(1)

        # Handle default values: ${VAR:-default}
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)

        # Handle error messages: ${VAR:?message}
        elif ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name}: {error_msg}")
            return value

        else:
            var_name = var_expr
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name} not set")
            return value

    pattern = r'\$\{([^}]+)\}'
    return re.sub(pattern, replacer, text)


def load_templated_yaml(file_path: Path) -> ConfigData:
    """
    Load a YAML file with environment variable substitution.

    Args:
        file_path: Path to the YAML file

    Returns:
        Parsed configuration with environment variables substituted

    Raises:
        ValueError: If required environment variables are missing or the file is invalid
        FileNotFoundError: If the YAML file doesn't exist
    """
    with open(file_path) as f:
        content = f.read()

    substituted_content = substitute_env_vars(content)

    try:
        loaded = yaml.safe_load(substituted_content)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    if not isinstance(loaded, dict):
        raise ValueError(f"Failed to parse YAML: {file_path} has no mapping at the top level")

    try:
        # Extract the 'config' section from the YAML structure
        config = ConfigData(**(loaded.get("config") or {}))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    return config


def load_config(env_vars: EnvironmentVariables | None = None) -> ConfigData:
    """Load the application configuration for the current environment.

    The file named by ``STOCKROOM_CONFIG_FILE`` (default ``config.yaml``) is used
    when it exists; otherwise the built-in defaults apply. ``STOCKROOM_ENVIRONMENT``
    and ``STOCKROOM_LOG_LEVEL`` override the matching values from the file.
    """
    env_vars = env_vars or EnvironmentVariables()
    config_path = Path(env_vars.config_file)

    if config_path.is_file():
        logger.debug("Loading configuration from {}", config_path)
        config = load_templated_yaml(config_path)
    else:
        logger.debug("No configuration file at {}, using defaults", config_path)
        config = ConfigData()

    if "environment" in env_vars.model_fields_set:
        config.app.environment = env_vars.environment
    if env_vars.log_level:
        config.logging.level = env_vars.log_level.upper()

    return config
