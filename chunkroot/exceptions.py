"""
Exception hierarchy for Chunkroot.

All custom exceptions inherit from ChunkrootError base class.
"""


class ChunkrootError(Exception):
    """Base exception for all Chunkroot errors."""
    pass


# Merkle Tree Errors
class MerkleTreeError(ChunkrootError):
    """Base exception for Merkle tree errors."""
    pass


class TreeConstructionError(MerkleTreeError):
    """Raised when the item source fails while a tree is being built."""
    pass


class UnknownHasherError(MerkleTreeError):
    """Raised when a hash function name cannot be resolved."""
    pass


# Configuration Errors
class ConfigurationError(ChunkrootError):
    """Base exception for configuration-related errors."""
    pass


class InvalidConfigurationError(ConfigurationError):
    """Raised when configuration is invalid or malformed."""
    pass


class ConfigurationLoadError(ConfigurationError):
    """Raised when loading configuration fails."""
    pass


# File Server Errors
class FileServerError(ChunkrootError):
    """Base exception for file server errors."""
    pass


class FileHashingError(FileServerError):
    """Raised when a file cannot be opened, sized or read while hashing."""
    pass


class EmptyFileError(FileServerError):
    """Raised when a file has no chunks and therefore no root hash."""
    pass


class HashCollisionError(FileServerError):
    """Raised when two files produce the same root hash."""
    pass


class DirectoryReadError(FileServerError):
    """Raised when a directory cannot be listed."""
    pass
