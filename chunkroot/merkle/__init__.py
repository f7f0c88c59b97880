"""
Merkle tree implementation for chunk-level content integrity.

This module provides Merkle tree construction, proof generation, and proof
verification over pluggable hash functions.
"""

from chunkroot.merkle.container import MerkleTreeContainer
from chunkroot.merkle.hasher import (
    DEFAULT_HASHER,
    Djb2Hasher,
    Hash64,
    MerkleTreeHasher,
    SdbmHasher,
    Sha256Hasher,
    SimpleHasher,
    digest_hex,
    get_hasher,
)
from chunkroot.merkle.tree import MerkleProof, MerkleTree, ProofStep

verify_proof = MerkleTree.verify_proof

__all__ = [
    "DEFAULT_HASHER",
    "Djb2Hasher",
    "Hash64",
    "MerkleProof",
    "MerkleTree",
    "MerkleTreeContainer",
    "MerkleTreeHasher",
    "ProofStep",
    "SdbmHasher",
    "Sha256Hasher",
    "SimpleHasher",
    "digest_hex",
    "get_hasher",
    "verify_proof",
]
