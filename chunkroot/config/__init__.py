"""
Configuration management for Chunkroot.

Handles loading and validation of configuration files.
"""

from chunkroot.config.settings import (
    ChunkrootConfig,
    FileServerConfig,
    LoggingConfig,
    MerkleConfig,
    get_default_config,
    get_default_config_path,
    load_config,
)

__all__ = [
    "ChunkrootConfig",
    "FileServerConfig",
    "LoggingConfig",
    "MerkleConfig",
    "get_default_config",
    "get_default_config_path",
    "load_config",
]
