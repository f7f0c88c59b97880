"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Chunkroot, a product of Garudex Labs

Chunk server for integrity-checked file distribution.

Files are split into fixed-size chunks and hashed into a Merkle tree whose
root identifies the file. A client that trusts a root can fetch any chunk
together with its inclusion proof and check it without downloading the
rest of the file.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from chunkroot.exceptions import (
    DirectoryReadError,
    EmptyFileError,
    HashCollisionError,
)
from chunkroot.fileserver.chunking import (
    PathLike,
    make_merkle_tree_for_file,
    read_file_chunk_by_offset,
)
from chunkroot.logging_config import get_logger, log_file_hashed
from chunkroot.merkle.hasher import DEFAULT_HASHER, MerkleTreeHasher, digest_hex
from chunkroot.merkle.tree import MerkleProof, MerkleTree

logger = get_logger(__name__)


@dataclass
class FileHash:
    """A hashed file known to the server."""
    path: Path
    size: int
    tree: MerkleTree


@dataclass(frozen=True)
class FileInfo:
    """
    Public description of a served file.

    Attributes:
        name: File name (without directory)
        size: File size in bytes
        root_hash: Merkle root identifying the file
        chunk_size: Chunk size used to build the tree
    """
    name: str
    size: int
    root_hash: Any
    chunk_size: int

    @property
    def chunk_count(self) -> int:
        return (self.size + self.chunk_size - 1) // self.chunk_size

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "size": self.size,
            "root_hash": digest_hex(self.root_hash),
            "chunk_size": self.chunk_size,
            "chunk_count": self.chunk_count,
        }


class FileServer:
    """
    Serves file chunks with Merkle inclusion proofs.

    Files are indexed by the root hash of their chunk tree.

    Example:
        >>> server = FileServer.from_dir("data", ["txt"], chunk_size=1024)
        >>> info = server.list_files()[0]
        >>> proof, chunk = server.get_file_chunk(info.root_hash, 0)
        >>> server.verify_chunk(info.root_hash, chunk, proof)
        True
    """

    def __init__(self, chunk_size: int, hasher: Optional[MerkleTreeHasher] = None):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        self.chunk_size = chunk_size
        self.hasher = hasher if hasher is not None else DEFAULT_HASHER
        self._files: Dict[Any, FileHash] = {}

    @classmethod
    def from_dir(
        cls,
        dir_path: PathLike,
        allowed_extensions: Sequence[str],
        chunk_size: int,
        hasher: Optional[MerkleTreeHasher] = None,
    ) -> "FileServer":
        """Create a server and hash every matching file in a directory."""
        server = cls(chunk_size, hasher=hasher)
        server.hash_files_from_dir(dir_path, allowed_extensions)
        return server

    def __len__(self) -> int:
        return len(self._files)

    def hash_file(self, file_path: PathLike) -> Any:
        """
        Hash a file and register it under its root hash.

        Args:
            file_path: Path of the file to add

        Returns:
            Root hash of the file

        Raises:
            FileHashingError: If the file cannot be read
            EmptyFileError: If the file is empty (no chunks, no root)
            HashCollisionError: If another file already has the same root
        """
        file_path = Path(file_path)
        tree, file_size = make_merkle_tree_for_file(file_path, self.chunk_size, self.hasher)

        root_hash = tree.get_root()
        if root_hash is None:
            raise EmptyFileError(f"empty file: {file_path}")

        existing = self._files.get(root_hash)
        if existing is not None:
            raise HashCollisionError(
                f"hash ({digest_hex(root_hash)}) collision for file {file_path} "
                f"(already registered for {existing.path})"
            )

        self._files[root_hash] = FileHash(path=file_path, size=file_size, tree=tree)

        log_file_hashed(
            logger,
            path=str(file_path),
            file_size=file_size,
            chunk_count=tree.item_count,
            root_hash=digest_hex(root_hash),
        )
        return root_hash

    def hash_files_from_dir(self, dir_path: PathLike, allowed_extensions: Sequence[str]) -> None:
        """
        Hash every regular file in a directory (non-recursive).

        Args:
            dir_path: Directory to scan
            allowed_extensions: Extensions (without dot) to include; empty means all files

        Raises:
            DirectoryReadError: If the directory cannot be listed
        """
        dir_path = Path(dir_path)
        allowed = {ext.lstrip(".") for ext in allowed_extensions}

        try:
            entries = sorted(os.scandir(dir_path), key=lambda entry: entry.name)
        except OSError as e:
            raise DirectoryReadError(f"can not read directory {dir_path}: {e}") from e

        for entry in entries:
            try:
                if not entry.is_file():
                    continue
            except OSError:
                continue

            if allowed:
                suffix = Path(entry.name).suffix
                if not suffix or suffix[1:] not in allowed:
                    continue

            self.hash_file(entry.path)

    def list_files(self) -> List[FileInfo]:
        """List served files in the order they were added."""
        return [
            FileInfo(
                name=file_hash.path.name,
                size=file_hash.size,
                root_hash=root_hash,
                chunk_size=self.chunk_size,
            )
            for root_hash, file_hash in self._files.items()
        ]

    def get_file_chunk(self, root_hash: Any, chunk_index: int) -> Optional[Tuple[MerkleProof, bytes]]:
        """
        Read one chunk of a file together with its inclusion proof.

        Args:
            root_hash: Root hash identifying the file
            chunk_index: Index of the chunk (0-based)

        Returns:
            Tuple of (proof, chunk data), or None if the file is unknown,
            the chunk index is out of range or the chunk cannot be read
        """
        try:
            file_hash = self._files.get(root_hash)
        except TypeError:
            return None
        if file_hash is None:
            return None

        proof = file_hash.tree.get_proof(chunk_index)
        if proof is None:
            return None

        try:
            data = read_file_chunk_by_offset(
                file_hash.path,
                chunk_index * self.chunk_size,
                self.chunk_size,
            )
        except OSError as e:
            logger.warning(
                "file_chunk_read_failed",
                path=str(file_hash.path),
                chunk_index=chunk_index,
                error=str(e),
            )
            return None

        if not data:
            return None

        return proof, data

    def verify_chunk(self, root_hash: Any, chunk_data: bytes, proof: MerkleProof) -> bool:
        """Check a chunk against a root hash with this server's hash function."""
        return MerkleTree.verify_proof(chunk_data, root_hash, proof, hasher=self.hasher)
