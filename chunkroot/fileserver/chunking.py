"""
Fixed-size file chunking and per-file Merkle tree construction.
"""

import os
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Tuple, Union

from chunkroot.exceptions import FileHashingError, TreeConstructionError
from chunkroot.logging_config import get_logger
from chunkroot.merkle.hasher import MerkleTreeHasher
from chunkroot.merkle.tree import MerkleTree

logger = get_logger(__name__)

PathLike = Union[str, os.PathLike]


def read_file_chunk(file: BinaryIO, chunk_size: int) -> bytes:
    """
    Read up to chunk_size bytes, retrying short reads until EOF.

    Args:
        file: Binary file object positioned at the chunk start
        chunk_size: Maximum number of bytes to read

    Returns:
        The bytes read; shorter than chunk_size only at end of file
    """
    buffer = bytearray()
    while len(buffer) < chunk_size:
        data = file.read(chunk_size - len(buffer))
        if not data:
            break
        buffer.extend(data)
    return bytes(buffer)


def read_file_chunk_by_offset(file_path: PathLike, offset: int, chunk_size: int) -> bytes:
    """Read one chunk of a file starting at a byte offset."""
    with open(file_path, "rb") as f:
        f.seek(offset)
        return read_file_chunk(f, chunk_size)


def chunk_count_for_size(file_size: int, chunk_size: int) -> int:
    """Number of chunks needed to cover file_size bytes."""
    return (file_size + chunk_size - 1) // chunk_size


def iter_file_chunks(file: BinaryIO, chunk_size: int, chunk_count: int) -> Iterator[bytes]:
    """Yield exactly chunk_count chunks read sequentially from file."""
    for _ in range(chunk_count):
        yield read_file_chunk(file, chunk_size)


def make_merkle_tree_for_file(
    file_path: PathLike,
    chunk_size: int,
    hasher: Optional[MerkleTreeHasher] = None,
) -> Tuple[MerkleTree, int]:
    """
    Build a Merkle tree whose leaves are the file's fixed-size chunks.

    Args:
        file_path: Path of the file to hash
        chunk_size: Chunk size in bytes
        hasher: Hash function (default: SHA-256)

    Returns:
        Tuple of (tree, file_size)

    Raises:
        FileHashingError: If the file cannot be opened, sized or read
    """
    file_path = Path(file_path)

    try:
        f = open(file_path, "rb")
    except OSError as e:
        raise FileHashingError(f"can not open file {file_path}: {e}") from e

    with f:
        try:
            file_size = os.fstat(f.fileno()).st_size
        except OSError as e:
            raise FileHashingError(f"can not get size of file {file_path}: {e}") from e

        chunk_count = chunk_count_for_size(file_size, chunk_size)

        try:
            tree = MerkleTree.from_data_items(
                iter_file_chunks(f, chunk_size, chunk_count),
                hasher=hasher,
                item_count=chunk_count,
            )
        except TreeConstructionError as e:
            raise FileHashingError(f"can not read file {file_path}: {e}") from e

    logger.debug(
        "file_tree_built",
        path=str(file_path),
        file_size=file_size,
        chunk_count=chunk_count,
    )
    return tree, file_size
