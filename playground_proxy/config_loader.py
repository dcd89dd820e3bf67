"""Configuration loading from YAML files with environment variable support."""

import logging
import os
import re
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import dotenv_values

logger = logging.getLogger("playground-proxy")

# Default paths (relative to project root)
DEFAULT_CONFIG_PATH = "configs/config_default.yaml"
DEFAULT_ENV_PATH = ".env"

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


def resolve_config_path(path: str) -> Path:
    """Resolve config path relative to project root if needed."""
    if Path(path).is_absolute():
        return Path(path)
    project_root = Path(__file__).parent.parent
    return project_root / path


def load_env_values(env_path: Path) -> dict[str, str]:
    """Load environment values from a .env file without mutating os.environ."""
    if not env_path.exists():
        return {}
    raw_values = dotenv_values(env_path)
    return {key: value for key, value in raw_values.items() if value is not None}


def read_environment(env_path: str | None = None) -> dict[str, str]:
    """Return the effective environment: .env values overlaid by os.environ."""
    env_file = resolve_config_path(
        env_path or os.getenv("PLAYGROUND_PROXY_ENV_FILE") or DEFAULT_ENV_PATH
    )
    values = load_env_values(env_file)
    values.update(os.environ)
    return values


def load_config(
    path: str | None = None,
    substitute_env: bool = True,
    env_values: Mapping[str, str] | None = None,
) -> dict:
    """Load the static proxy configuration from a YAML file.

    Args:
        path: Path to the config file. When omitted, PLAYGROUND_PROXY_CONFIG
              or configs/config_default.yaml is used, and a missing file
              falls back to built-in defaults.
        substitute_env: Whether to substitute ${VAR} references in values.
        env_values: Environment used for substitution. Defaults to
              read_environment().

    Returns:
        Parsed configuration dictionary.

    Raises:
        RuntimeError: If an explicitly requested file does not exist.
    """
    explicit = path is not None or bool(os.getenv("PLAYGROUND_PROXY_CONFIG"))
    if path is None:
        path = os.getenv("PLAYGROUND_PROXY_CONFIG") or DEFAULT_CONFIG_PATH

    config_path = resolve_config_path(path)
    logger.info(f"Loading configuration from {config_path}")

    if not config_path.exists():
        if explicit:
            logger.error(f"Config file not found: {config_path}")
            raise RuntimeError(f"Config file not found: {config_path}")
        logger.warning("No config file at %s; using built-in defaults", config_path)
        return {}

    with config_path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}

    if not isinstance(data, dict):
        raise RuntimeError(f"Config file must contain a mapping: {config_path}")

    if substitute_env:
        if env_values is None:
            env_values = read_environment()
        data = _substitute_env_vars(data, env_values)

    logger.info(f"Configuration loaded successfully from {config_path}")
    return data


def _substitute_env_vars(obj: Any, env_values: Mapping[str, str]) -> Any:
    """Recursively substitute ${VAR_NAME} and $VAR_NAME references.

    Unset variables keep their literal placeholder and log a warning.
    """
    if isinstance(obj, dict):
        return {k: _substitute_env_vars(v, env_values) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_substitute_env_vars(item, env_values) for item in obj]
    if isinstance(obj, str):

        def replace_var(match):
            var_name = match.group(1) or match.group(2)
            value = env_values.get(var_name)
            if value is None:
                logger.warning(
                    f"CONFIG ERROR: Environment variable '${var_name}' is not set! "
                    f"The literal placeholder will be used."
                )
                return match.group(0)
            return value

        return _ENV_PATTERN.sub(replace_var, obj)
    return obj
