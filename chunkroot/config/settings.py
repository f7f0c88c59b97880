"""
Configuration management for Chunkroot.

Loads YAML configuration from file with sensible defaults and validation.
Supports environment variable substitution using ${ENV_VAR} syntax.
"""

import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from chunkroot.exceptions import (
    ConfigurationLoadError,
    InvalidConfigurationError,
    UnknownHasherError,
)
from chunkroot.logging_config import get_logger
from chunkroot.merkle.hasher import get_hasher

logger = get_logger(__name__)

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
VALID_LOG_FORMATS = ("console", "json")


def _expand_env_vars(value: Any) -> Any:
    """
    Recursively expand environment variables in configuration values.

    Supports ${ENV_VAR} syntax with optional default values: ${ENV_VAR:default}

    Args:
        value: Configuration value (string, dict, list, or other)

    Returns:
        Value with environment variables expanded

    Examples:
        "${CHUNKROOT_DATA}" -> value of CHUNKROOT_DATA env var
        "${CHUNKROOT_DATA:/srv/files}" -> value of CHUNKROOT_DATA or "/srv/files" if not set
    """
    if isinstance(value, str):
        # Pattern matches ${VAR} or ${VAR:default}
        pattern = r'\$\{([^}:]+)(?::([^}]*))?\}'

        def replace_env_var(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else ""
            return os.environ.get(var_name, default_value)

        return re.sub(pattern, replace_env_var, value)
    elif isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    else:
        return value


@dataclass
class MerkleConfig:
    """Merkle tree configuration."""

    hash_algorithm: str = "sha256"  # "sha256", "djb2" or "sdbm"


@dataclass
class FileServerConfig:
    """File chunking and serving configuration."""

    chunk_size: int = 1024
    data_dir: str = ""
    allowed_extensions: List[str] = field(default_factory=lambda: ["txt"])  # empty = all files


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    file: str = ""  # empty = stderr
    format: str = "console"  # "console" or "json"


@dataclass
class ChunkrootConfig:
    """Main Chunkroot configuration."""

    merkle: MerkleConfig = field(default_factory=MerkleConfig)
    file_server: FileServerConfig = field(default_factory=FileServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_default_config_path() -> str:
    """Get the default configuration file path."""
    return os.path.expanduser("~/.chunkroot/config.yaml")


def get_default_config() -> ChunkrootConfig:
    """
    Get default configuration with sensible defaults.

    Returns:
        ChunkrootConfig: Default configuration object
    """
    home_dir = os.path.expanduser("~/.chunkroot")

    return ChunkrootConfig(
        merkle=MerkleConfig(hash_algorithm="sha256"),
        file_server=FileServerConfig(
            chunk_size=1024,
            data_dir=os.path.join(home_dir, "data"),
            allowed_extensions=["txt"],
        ),
        logging=LoggingConfig(level="INFO", file="", format="console"),
    )


def load_config(config_path: Optional[str] = None) -> ChunkrootConfig:
    """
    Load configuration from YAML file with validation.

    If config file is not found, returns default configuration.
    If config file is malformed or invalid, raises InvalidConfigurationError.

    Args:
        config_path: Path to configuration file. If None, uses default path.

    Returns:
        ChunkrootConfig: Loaded and validated configuration

    Raises:
        InvalidConfigurationError: If configuration is invalid or malformed
        ConfigurationLoadError: If the configuration file cannot be read
    """
    if config_path is None:
        config_path = get_default_config_path()

    config_path = os.path.expanduser(config_path)

    if not os.path.exists(config_path):
        logger.debug(f"Configuration file not found at {config_path}, using defaults")
        return get_default_config()

    try:
        with open(config_path, 'r') as f:
            config_data = yaml.safe_load(f)
        logger.debug(f"Loaded configuration from {config_path}")
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML configuration file '{config_path}': {e}")
        raise InvalidConfigurationError(
            f"Failed to parse YAML configuration file '{config_path}': {e}"
        ) from e
    except OSError as e:
        logger.error(f"Failed to read configuration file '{config_path}': {e}")
        raise ConfigurationLoadError(
            f"Failed to read configuration file '{config_path}': {e}"
        ) from e

    if config_data is None:
        logger.debug(f"Configuration file {config_path} is empty, using defaults")
        return get_default_config()

    if not isinstance(config_data, dict):
        raise InvalidConfigurationError(
            f"Invalid configuration in '{config_path}': expected a mapping at top level"
        )

    config_data = _expand_env_vars(config_data)

    try:
        config = _build_config_from_dict(config_data)
        _validate_config(config)
    except InvalidConfigurationError as e:
        logger.error(f"Invalid configuration in '{config_path}': {e}")
        raise InvalidConfigurationError(
            f"Invalid configuration in '{config_path}': {e}"
        ) from e

    logger.debug(f"Successfully loaded and validated configuration from {config_path}")
    return config


def _section(config_data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = config_data.get(name) or {}
    if not isinstance(section, dict):
        raise InvalidConfigurationError(f"Section '{name}' must be a mapping")
    return section


def _path_option(section: Dict[str, Any], section_name: str, key: str, default: str) -> str:
    value = section.get(key, default)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidConfigurationError(
            f"{section_name}.{key} must be a string, got {type(value).__name__}"
        )
    return os.path.expanduser(value)


def _build_config_from_dict(config_data: Dict[str, Any]) -> ChunkrootConfig:
    """
    Build ChunkrootConfig from dictionary loaded from YAML.

    Merges user configuration with defaults.
    """
    default_config = get_default_config()

    merkle_data = _section(config_data, 'merkle')
    merkle = MerkleConfig(
        hash_algorithm=merkle_data.get('hash_algorithm', default_config.merkle.hash_algorithm),
    )

    file_server_data = _section(config_data, 'file_server')
    allowed_extensions = file_server_data.get(
        'allowed_extensions', default_config.file_server.allowed_extensions
    )
    if allowed_extensions is None:
        allowed_extensions = []
    if isinstance(allowed_extensions, str):
        allowed_extensions = [allowed_extensions]
    if not isinstance(allowed_extensions, list):
        raise InvalidConfigurationError(
            "file_server.allowed_extensions must be a list of extensions, "
            f"got {type(allowed_extensions).__name__}"
        )
    chunk_size = file_server_data.get('chunk_size', default_config.file_server.chunk_size)
    # Values substituted from the environment arrive as strings
    if isinstance(chunk_size, str) and chunk_size.strip().isdigit():
        chunk_size = int(chunk_size)
    file_server = FileServerConfig(
        chunk_size=chunk_size,
        data_dir=_path_option(
            file_server_data, 'file_server', 'data_dir', default_config.file_server.data_dir
        ),
        allowed_extensions=[str(ext).lstrip('.') for ext in allowed_extensions],
    )

    logging_data = _section(config_data, 'logging')
    logging = LoggingConfig(
        level=str(logging_data.get('level', default_config.logging.level)).upper(),
        file=_path_option(logging_data, 'logging', 'file', default_config.logging.file),
        format=str(logging_data.get('format', default_config.logging.format)).lower(),
    )

    return ChunkrootConfig(
        merkle=merkle,
        file_server=file_server,
        logging=logging,
    )


def _validate_config(config: ChunkrootConfig) -> None:
    """
    Validate configuration values.

    Raises:
        InvalidConfigurationError: If any value is out of range or unknown
    """
    chunk_size = config.file_server.chunk_size
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
        raise InvalidConfigurationError(
            f"file_server.chunk_size must be a positive integer, got {chunk_size!r}"
        )

    try:
        get_hasher(config.merkle.hash_algorithm)
    except UnknownHasherError as e:
        raise InvalidConfigurationError(f"merkle.hash_algorithm: {e}") from e

    if config.logging.level not in VALID_LOG_LEVELS:
        raise InvalidConfigurationError(
            f"logging.level must be one of {', '.join(VALID_LOG_LEVELS)}, "
            f"got {config.logging.level!r}"
        )

    if config.logging.format not in VALID_LOG_FORMATS:
        raise InvalidConfigurationError(
            f"logging.format must be one of {', '.join(VALID_LOG_FORMATS)}, "
            f"got {config.logging.format!r}"
        )
