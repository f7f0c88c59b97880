"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Chunkroot, a product of Garudex Labs

Chunkroot - Merkle tree commitments and inclusion proofs for chunked content

Chunkroot builds binary Merkle trees over ordered items (typically fixed-size
file chunks), publishes a single root hash and serves per-chunk inclusion
proofs that can be verified against that root.
"""

from chunkroot._version import __version__

__all__ = ["__version__"]
