"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Chunkroot, a product of Garudex Labs

CLI context for Chunkroot.

Provides shared context object and decorators for CLI commands.
"""

from typing import Optional, Type

import click

from chunkroot.config.settings import ChunkrootConfig, get_default_config
from chunkroot.merkle.hasher import MerkleTreeHasher, get_hasher


# Global context object to share configuration across commands
class CLIContext:
    """Context object for CLI commands."""
    
    def __init__(self):
        self.config: Optional[ChunkrootConfig] = None
        self.config_path: Optional[str] = None
        self.verbose = False

    def get_config(self) -> ChunkrootConfig:
        if self.config is None:
            self.config = get_default_config()
        return self.config

    def resolve_hasher(self, name: Optional[str] = None) -> Type[MerkleTreeHasher]:
        """Hasher from an explicit name, falling back to configuration."""
        return get_hasher(name or self.get_config().merkle.hash_algorithm)

    def resolve_chunk_size(self, chunk_size: Optional[int] = None) -> int:
        """Chunk size from an explicit value, falling back to configuration."""
        return chunk_size if chunk_size is not None else self.get_config().file_server.chunk_size


pass_context = click.make_pass_decorator(CLIContext, ensure=True)
