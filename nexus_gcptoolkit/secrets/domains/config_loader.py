"""Configuration loader for nexus-gcptoolkit."""
import os
import socket
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .models import NodeConfig

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "NEXUS_GCPTOOLKIT_CONFIG"

DEFAULT_RETRIES = 3
DEFAULT_RETRY_DELAY = 10


class ConfigError(Exception):
    """Configuration error exception."""
    pass


def _default_config_path() -> Path:
    return Path.home() / ".config" / "nexus-gcptoolkit" / "config.yml"


def _get_config_path(config_path: Optional[str] = None) -> str:
    """
    Get config file path.

    Priority order:
    1. Explicit path (e.g. the CLI --config option)
    2. NEXUS_GCPTOOLKIT_CONFIG environment variable
    3. Default location: ~/.config/nexus-gcptoolkit/config.yml

    Returns:
        Absolute path to config file

    Raises:
        FileNotFoundError: If config file doesn't exist in any location
    """
    for source, candidate in (("argument", config_path), ("environment", os.getenv(CONFIG_ENV_VAR))):
        if not candidate:
            continue
        path = Path(candidate).expanduser()
        if path.exists():
            logger.info(f"Using config from {source}: {path}")
            return str(path)
        logger.warning(f"Config path from {source} doesn't exist: {path}")

    default_config = _default_config_path()
    if default_config.exists():
        logger.info(f"Using default config location: {default_config}")
        return str(default_config)

    raise FileNotFoundError(
        "Configuration file not found. Please set up your config file using one of these methods:\n\n"
        "1. Use the default location:\n"
        f"   mkdir -p {default_config.parent}\n"
        f"   cp /path/to/your/config.yml {default_config}\n\n"
        "2. Point to an existing config file:\n"
        f"   export {CONFIG_ENV_VAR}=/path/to/your/config.yml\n\n"
        "3. Pass it explicitly:\n"
        "   nexus-gcptoolkit --config /path/to/your/config.yml check\n"
    )


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Raises:
        FileNotFoundError: If no config file can be located
        ConfigError: If config file is unreadable, invalid or empty
    """
    config_path = _get_config_path(config_path)

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}")

    if not config:
        raise ConfigError(f"Config file at {config_path} is empty")

    if not isinstance(config, dict):
        raise ConfigError(f"Config file at {config_path} must contain a mapping")

    logger.info(f"Configuration loaded successfully from {config_path}")
    return config


def _section(config: Dict[str, Any], path: str) -> Dict[str, Any]:
    section = config
    for key in path.split("."):
        section = section.get(key) or {}
        if not isinstance(section, dict):
            raise ConfigError(f"'{path}' must be a mapping in config")
    return section


def _require(section: Dict[str, Any], key: str, path: str) -> str:
    value = section.get(key)
    if not value:
        raise ConfigError(f"Missing '{path}.{key}' in config" if path else f"Missing '{key}' in config")
    return str(value)


def parse_node_config(config: Dict[str, Any]) -> NodeConfig:
    """
    Validate a raw config mapping and build a NodeConfig.

    Raises:
        ConfigError: If required fields are missing or have the wrong type
    """
    environment = _require(config, "environment", "")
    cli = _section(config, "nexus.cli")
    ssl = _section(config, "nexus.ssl")
    gcp = _section(config, "gcp")

    url = _require(cli, "url", "nexus.cli")
    repository = _require(cli, "repository", "nexus.cli")

    retries = cli.get("retries", DEFAULT_RETRIES)
    if isinstance(retries, bool) or not isinstance(retries, int) or retries < 0:
        raise ConfigError(f"'nexus.cli.retries' must be a non-negative integer, got {retries!r}")

    retry_delay = cli.get("retry_delay", DEFAULT_RETRY_DELAY)
    if isinstance(retry_delay, bool) or not isinstance(retry_delay, (int, float)) or retry_delay < 0:
        raise ConfigError(f"'nexus.cli.retry_delay' must be a non-negative number, got {retry_delay!r}")

    ssl_verify = ssl.get("verify", True)
    if not isinstance(ssl_verify, bool):
        raise ConfigError(f"'nexus.ssl.verify' must be true or false, got {ssl_verify!r}")

    rotated = cli.get("default_admin_credentials_updated")
    if rotated is not None and not isinstance(rotated, bool):
        raise ConfigError(
            f"'nexus.cli.default_admin_credentials_updated' must be true, false or null, got {rotated!r}"
        )

    return NodeConfig(
        environment=environment,
        hostname=str(config.get("hostname") or socket.gethostname()),
        url=url,
        repository=repository,
        retries=retries,
        retry_delay=retry_delay,
        ssl_verify=ssl_verify,
        credentials_rotated=rotated,
        project_id=gcp.get("project_id"),
    )


def load_node_config(config_path: Optional[str] = None) -> NodeConfig:
    """Load the YAML config and return the validated node settings."""
    node_config = parse_node_config(load_config(config_path))
    logger.debug(f"Using environment: {node_config.environment}, hostname: {node_config.hostname}")
    return node_config
