"""
Loading of pipeline settings and the project's environment file.
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional, Union

import yaml
from dotenv import dotenv_values

from .models import ConnectorConfiguration, PipelineSettings

logger = logging.getLogger(__name__)

# Overrides the configured executable, e.g. a pinned CLI in CI
DDN_CLI_ENV_VAR = "DDN_CLI"


def load_settings(config_path: Optional[Union[str, Path]] = None) -> PipelineSettings:
    """
    Load pipeline settings.

    Args:
        config_path: Optional YAML or JSON settings file. Without one the
            defaults describe the standard DDN/Snowflake project layout.

    Returns:
        PipelineSettings instance
    """
    config_dict = {}
    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Settings file not found: {config_path}")

        with open(config_path, 'r') as f:
            try:
                if config_path.suffix in ['.yaml', '.yml']:
                    config_dict = yaml.safe_load(f) or {}
                elif config_path.suffix == '.json':
                    config_dict = json.load(f)
                else:
                    raise ValueError(f"Unsupported settings file format: {config_path.suffix}")
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid settings file {config_path}: {e}")

        if not isinstance(config_dict, dict):
            raise ValueError(f"Settings file must contain a mapping: {config_path}")
        logger.debug(f"Loaded settings from {config_path}")

    settings = PipelineSettings(**config_dict)

    cli_override = os.getenv(DDN_CLI_ENV_VAR)
    if cli_override:
        settings = settings.model_copy(update={"ddn_executable": cli_override})

    return settings


def load_env_file(env_path: Union[str, Path]) -> Dict[str, str]:
    """
    Read KEY=VALUE pairs from an env file without touching os.environ.

    Variables declared without a value come back as empty strings.
    """
    env_path = Path(env_path)
    if not env_path.is_file():
        raise FileNotFoundError(f"Environment file not found: {env_path}")

    values = dotenv_values(env_path)
    return {key: value or "" for key, value in values.items()}


def load_connector_configuration(config_path: Union[str, Path]) -> ConnectorConfiguration:
    """
    Parse the connector configuration document.

    Raises:
        FileNotFoundError: document missing
        json.JSONDecodeError: document is not valid JSON
        ValueError: top-level value is not an object, or fields have the wrong shape
    """
    config_path = Path(config_path)
    if not config_path.is_file():
        raise FileNotFoundError(f"Connector configuration not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        document = json.load(f)

    if not isinstance(document, dict):
        raise ValueError(f"Connector configuration must be a JSON object, got {type(document).__name__}")

    return ConnectorConfiguration(**document)
