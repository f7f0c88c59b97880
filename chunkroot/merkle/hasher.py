"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Chunkroot, a product of Garudex Labs

Hash functions for Merkle tree construction.

A Merkle tree hasher provides two operations:
- hash: map raw bytes to a fixed-size digest (used for leaves)
- concat: combine an ordered (left, right) pair of digests into one
  (used for internal nodes)

Hashers are stateless. Every operation is a static/class method so either
the hasher class or an instance of it can be handed to a tree.
"""

import hashlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Type

from chunkroot.exceptions import UnknownHasherError

_U64_MASK = 0xFFFF_FFFF_FFFF_FFFF


@dataclass(frozen=True)
class Hash64:
    """
    64-bit digest produced by the simple (non-cryptographic) hashers.

    Attributes:
        value: Unsigned 64-bit integer value of the digest
    """
    value: int

    def __post_init__(self):
        if not 0 <= self.value <= _U64_MASK:
            raise ValueError(f"Hash64 value out of range: {self.value!r}")

    def hex(self) -> str:
        """Return the digest as 16 lowercase hex digits."""
        return f"{self.value:016x}"

    def __repr__(self) -> str:
        return f"Hash64({self.hex()})"


def _byte_input(data: Any) -> bytes:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"Expected bytes-like data, got {type(data).__name__}")
    return bytes(data)


class MerkleTreeHasher(ABC):
    """
    Hash function abstraction used by MerkleTree.

    concat must treat its arguments as ordered: concat(a, b) and concat(b, a)
    differ in general, which is what lets a proof detect swapped children.
    """

    name: str = ""

    @classmethod
    @abstractmethod
    def hash(cls, data: bytes) -> Any:
        """Hash raw bytes into a digest."""

    @classmethod
    @abstractmethod
    def concat(cls, left: Any, right: Any) -> Any:
        """Combine two child digests into their parent digest."""


class Sha256Hasher(MerkleTreeHasher):
    """SHA-256 leaves, SHA-256 over the concatenated children for nodes."""

    name = "sha256"

    @classmethod
    def hash(cls, data: bytes) -> bytes:
        return hashlib.sha256(data).digest()

    @classmethod
    def concat(cls, left: bytes, right: bytes) -> bytes:
        return hashlib.sha256(left + right).digest()


class SimpleHasher(MerkleTreeHasher):
    """
    Base class for 64-bit hashers defined only by a byte-level hash.

    Subclasses implement hash(). concat(h1, h2) hashes the 16-byte
    little-endian encoding of the 128-bit integer (h1 << 64) | h2.
    """

    @classmethod
    def concat(cls, left: Hash64, right: Hash64) -> Hash64:
        combined = (left.value << 64) | right.value
        return cls.hash(combined.to_bytes(16, "little"))


class Djb2Hasher(SimpleHasher):
    """Dan Bernstein's djb2: h = h * 33 + c, starting from 5381."""

    name = "djb2"

    @classmethod
    def hash(cls, data: bytes) -> Hash64:
        value = 5381
        for c in _byte_input(data):
            value = ((value << 5) + value + c) & _U64_MASK
        return Hash64(value)


class SdbmHasher(SimpleHasher):
    """The sdbm hash: h = c + (h << 6) + (h << 16) - h, starting from 0."""

    name = "sdbm"

    @classmethod
    def hash(cls, data: bytes) -> Hash64:
        value = 0
        for c in _byte_input(data):
            value = (c + (value << 6) + (value << 16) - value) & _U64_MASK
        return Hash64(value)


HASHERS: Dict[str, Type[MerkleTreeHasher]] = {
    Sha256Hasher.name: Sha256Hasher,
    Djb2Hasher.name: Djb2Hasher,
    SdbmHasher.name: SdbmHasher,
}

DEFAULT_HASHER: Type[MerkleTreeHasher] = Sha256Hasher


def get_hasher(name: str) -> Type[MerkleTreeHasher]:
    """
    Resolve a hasher by name.

    Args:
        name: Hasher name ("sha256", "djb2" or "sdbm"), case-insensitive

    Returns:
        Hasher class

    Raises:
        UnknownHasherError: If no hasher is registered under the name
    """
    try:
        return HASHERS[name.strip().lower()]
    except (KeyError, AttributeError):
        raise UnknownHasherError(
            f"Unknown hash algorithm {name!r}. "
            f"Supported algorithms: {', '.join(sorted(HASHERS))}"
        ) from None


def digest_hex(digest: Any) -> str:
    """
    Render a digest for display.

    Digests with a hex() method (bytes, Hash64) are shown as hex. Digests
    from other hashers fall back to repr().
    """
    render = getattr(digest, "hex", None)
    if callable(render):
        return render()
    return repr(digest)
