"""Configuration template substitution utilities."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.library_api.runtime.config.config_data import ConfigData


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - default when the variable is unset or empty
    - ${VAR_NAME-default} - default only when the variable is unset
    - ${VAR_NAME:?error_message} - required with custom error message

    Full-line ``#`` comments are left untouched.
    """
    def replacer(match):
        var_expr = match.group(1)

        # ${VAR:-default}
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name) or default

        # ${VAR:?message}
        elif ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name}: {error_msg}")
            return value

        # ${VAR-default}
        elif "-" in var_expr:
            var_name, default = var_expr.split("-", 1)
            return os.getenv(var_name, default)

        else:
            var_name = var_expr
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name} not set")
            return value

    pattern = re.compile(r'\$\{([^}]+)\}')
    return "".join(
        line if line.lstrip().startswith("#") else pattern.sub(replacer, line)
        for line in text.splitlines(keepends=True)
    )


def apply_environment_overrides(env_mode: str) -> None:
    """Copy ``<ENV>_NAME`` variables onto ``NAME`` for the active environment."""
    prefix = f"{env_mode.upper()}_"
    env_variables = [(var, value) for var, value in os.environ.items() if var.startswith(prefix)]
    if env_variables:
        logger.info("Applying environment-specific overrides: {}", [name for name, _ in env_variables])

    for var_name, var_value in env_variables:
        new_var_name = var_name[len(prefix):]
        os.environ[new_var_name] = var_value
        logger.debug("Set environment variable {} from {}", new_var_name, var_name)


def load_templated_yaml(file_path: Path) -> ConfigData:
    """
    Load a YAML file with environment variable substitution.

    Args:
        file_path: Path to the YAML file

    Returns:
        Parsed YAML with environment variables substituted

    Raises:
        ValueError: If required environment variables are missing
        FileNotFoundError: If the YAML file doesn't exist
    """
    with open(file_path) as f:
        content = f.read()

    env_mode = os.getenv("APP_ENVIRONMENT", "development")
    logger.info("Loading configuration for environment: {}", env_mode)
    apply_environment_overrides(env_mode)

    substituted_content = substitute_env_vars(content)

    try:
        loaded = yaml.safe_load(substituted_content)
        if not loaded:
            raise ValueError("Failed to parse YAML")
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    try:
        config_data = loaded.get('config', {})
        config = ConfigData(**config_data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    # Keep the database password policy in step with the application environment
    config.database.environment_mode = config.app.environment

    if config.app.environment == "production" and not config.app.session_signing_secret:
        raise ValueError("app.session_signing_secret must be set in production")

    return config
