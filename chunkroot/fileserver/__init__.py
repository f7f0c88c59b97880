"""
File chunking and chunk serving on top of Merkle trees.

Files are split into fixed-size chunks, each file is identified by the
root hash of its chunk tree, and chunks are served with inclusion proofs.
"""

from chunkroot.fileserver.chunking import (
    make_merkle_tree_for_file,
    read_file_chunk,
    read_file_chunk_by_offset,
)
from chunkroot.fileserver.server import FileInfo, FileServer

__all__ = [
    "FileInfo",
    "FileServer",
    "make_merkle_tree_for_file",
    "read_file_chunk",
    "read_file_chunk_by_offset",
]
