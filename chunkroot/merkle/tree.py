"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Chunkroot, a product of Garudex Labs

Merkle tree implementation for chunk-level content integrity.

This module implements a binary Merkle tree over an ordered sequence of
items. It supports:
- Tree construction from raw data items or precomputed leaf hashes
- Merkle proof generation for any leaf
- Merkle proof verification without access to the tree
- Pluggable hash functions (see chunkroot.merkle.hasher)

Nodes are kept in one flat tuple, level by level from the leaves up, so the
root is always the last node. If a level has an odd number of nodes, the
last node is paired with itself to build its parent.
"""

import time
from dataclasses import dataclass
from itertools import islice
from typing import Any, Iterable, Iterator, List, NamedTuple, Optional, Tuple, Union

from chunkroot.exceptions import TreeConstructionError
from chunkroot.logging_config import (
    get_logger,
    log_merkle_root_computation,
    log_merkle_verification,
)
from chunkroot.merkle.hasher import DEFAULT_HASHER, MerkleTreeHasher, digest_hex

logger = get_logger(__name__)

_EXHAUSTED = object()


class ProofStep(NamedTuple):
    """
    One level of a Merkle proof.

    Attributes:
        sibling_hash: Hash of the sibling node at this level
        is_right_sibling: True if the sibling sits to the right of the path node
    """
    sibling_hash: Any
    is_right_sibling: bool


@dataclass(frozen=True)
class MerkleProof:
    """
    Inclusion proof for a single leaf.

    An ordered sequence of ProofStep entries, from the leaf level up to the
    level just below the root. A proof for a single-item tree is empty.
    """
    steps: Tuple[ProofStep, ...] = ()

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[ProofStep]:
        return iter(self.steps)

    def __getitem__(self, index):
        return self.steps[index]

    def __bool__(self) -> bool:
        # An empty proof is still a valid proof.
        return True


def _to_bytes(item: Union[bytes, bytearray, memoryview, str]) -> bytes:
    if isinstance(item, str):
        return item.encode("utf-8")
    if isinstance(item, (bytes, bytearray, memoryview)):
        return bytes(item)
    raise TypeError(f"Expected a bytes-like item, got {type(item).__name__}")


class MerkleTree:
    """
    Binary Merkle tree with a pluggable hash function.

    The tree is built bottom-up from leaf hashes. Each internal node's hash
    is the hasher's concat of its two children. If there's an odd number of
    nodes at any level, the last node is duplicated.

    Trees are immutable once built. Use the from_data_items() or
    from_hash_items() constructors rather than calling __init__ directly.

    Example:
        >>> tree = MerkleTree.from_data_items([b"hello", b"world"])
        >>> root = tree.get_root()
        >>> proof = tree.get_proof(0)
        >>> MerkleTree.verify_proof(b"hello", root, proof)
        True
        >>> MerkleTree.verify_proof(b"world", root, proof)
        False
        >>> tree.get_proof(2) is None
        True
    """

    def __init__(
        self,
        hasher: MerkleTreeHasher,
        item_count: int,
        level_count: int,
        nodes: Tuple[Any, ...],
    ):
        self._hasher = hasher
        self._item_count = item_count
        self._level_count = level_count
        self._nodes = nodes

    def __repr__(self) -> str:
        root = self.get_root()
        return (
            f"MerkleTree(hasher={getattr(self._hasher, 'name', self._hasher)!r}, "
            f"item_count={self._item_count}, level_count={self._level_count}, "
            f"root={digest_hex(root) if root is not None else None})"
        )

    @property
    def hasher(self) -> MerkleTreeHasher:
        return self._hasher

    @property
    def item_count(self) -> int:
        """Number of leaves in the tree."""
        return self._item_count

    @property
    def level_count(self) -> int:
        """Number of levels above the leaf level."""
        return self._level_count

    @property
    def nodes(self) -> Tuple[Any, ...]:
        """Every node of the tree, leaf level first, root last."""
        return self._nodes

    @staticmethod
    def calc_tree_size(item_count: int) -> Tuple[int, int]:
        """
        Compute the total node count and the number of levels above the leaves.

        Args:
            item_count: Number of leaves

        Returns:
            Tuple of (node_count, level_count)
        """
        level_count = 0
        tree_node_count = 0
        level_node_count = item_count

        while level_node_count > 1:
            level_count += 1
            tree_node_count += level_node_count
            level_node_count = (level_node_count + 1) >> 1

        # level_node_count is 0 only for an empty tree, otherwise it is the root
        return tree_node_count + level_node_count, level_count

    @classmethod
    def from_hash_items(
        cls,
        hash_items: Iterable[Any],
        hasher: Optional[MerkleTreeHasher] = None,
        item_count: Optional[int] = None,
    ) -> "MerkleTree":
        """
        Build a Merkle tree from precomputed leaf hashes.

        The number of leaves must be known before the source is consumed:
        it is taken from item_count if given, otherwise from len(hash_items).

        Args:
            hash_items: Ordered leaf hashes
            hasher: Hash function used for internal nodes (default: SHA-256)
            item_count: Number of leaves, required when hash_items has no len()

        Returns:
            The constructed MerkleTree

        Raises:
            TreeConstructionError: If the leaf count is unknown, the source
                raises while being consumed, or it yields a different number
                of leaves than announced
        """
        hasher = hasher if hasher is not None else DEFAULT_HASHER

        if item_count is None:
            try:
                item_count = len(hash_items)  # type: ignore[arg-type]
            except TypeError:
                raise TreeConstructionError(
                    "Item count must be known in advance: pass a sized "
                    "collection or an explicit item_count"
                ) from None
        if item_count < 0:
            raise TreeConstructionError(f"Invalid item count: {item_count}")

        start_time = time.perf_counter()
        _, level_count = cls.calc_tree_size(item_count)

        nodes: List[Any] = []

        # Leaf level. Only item_count leaves are pulled from the source.
        source = iter(hash_items)
        try:
            nodes.extend(islice(source, item_count))
            overflow = next(source, _EXHAUSTED) is not _EXHAUSTED
        except Exception as e:
            logger.error(
                "merkle_tree_construction_failed",
                item_count=item_count,
                leaves_built=len(nodes),
                error=str(e),
            )
            raise TreeConstructionError(
                f"Failed to read item {len(nodes)} of {item_count}: {e}"
            ) from e

        if len(nodes) != item_count or overflow:
            raise TreeConstructionError(
                f"Item source yielded {'more than ' if overflow else ''}"
                f"{len(nodes)} items, expected {item_count}"
            )

        # Upper levels
        level_start_index = 0
        while len(nodes) - level_start_index > 1:
            level_end_index = len(nodes)

            for i in range(level_start_index, level_end_index, 2):
                left = nodes[i]
                # Use the last node as its own sibling if the level is odd
                right = nodes[i + 1] if i + 1 < level_end_index else nodes[level_end_index - 1]
                nodes.append(hasher.concat(left, right))

            level_start_index = level_end_index

        tree = cls(hasher, item_count, level_count, tuple(nodes))

        root = tree.get_root()
        log_merkle_root_computation(
            logger,
            item_count=item_count,
            merkle_root=digest_hex(root) if root is not None else None,
            duration_ms=(time.perf_counter() - start_time) * 1000,
            level_count=level_count,
        )

        return tree

    @classmethod
    def from_data_items(
        cls,
        data_items: Iterable[Union[bytes, bytearray, memoryview, str]],
        hasher: Optional[MerkleTreeHasher] = None,
        item_count: Optional[int] = None,
    ) -> "MerkleTree":
        """
        Build a Merkle tree from raw data items.

        Each item is hashed with the hasher to form a leaf. Items are hashed
        lazily, so a source that fails part way (e.g. a file read error)
        aborts the whole construction.

        Args:
            data_items: Ordered data items (bytes-like, str is UTF-8 encoded)
            hasher: Hash function (default: SHA-256)
            item_count: Number of items, required when data_items has no len()

        Returns:
            The constructed MerkleTree

        Raises:
            TreeConstructionError: If the items cannot be consumed
        """
        hasher = hasher if hasher is not None else DEFAULT_HASHER

        if item_count is None:
            try:
                item_count = len(data_items)  # type: ignore[arg-type]
            except TypeError:
                raise TreeConstructionError(
                    "Item count must be known in advance: pass a sized "
                    "collection or an explicit item_count"
                ) from None

        leaves = (hasher.hash(_to_bytes(item)) for item in data_items)
        return cls.from_hash_items(leaves, hasher=hasher, item_count=item_count)

    def get_root(self) -> Optional[Any]:
        """
        Get the Merkle root hash.

        Returns:
            Root hash of the tree, or None for an empty tree
        """
        return self._nodes[-1] if self._nodes else None

    def get_proof(self, item_index: int) -> Optional[MerkleProof]:
        """
        Generate the Merkle proof for the leaf at the given index.

        The proof consists of sibling hashes along the path from leaf to
        root, each with a flag telling whether the sibling is on the right.

        Args:
            item_index: Index of the leaf (0-based)

        Returns:
            MerkleProof, or None if item_index is out of range
        """
        if item_index < 0 or item_index >= self._item_count:
            return None

        steps: List[ProofStep] = []

        level_start_index = 0
        node_count = self._item_count
        node_index = item_index

        while node_count > 1:
            # Clamping to the last node mirrors the odd-node duplication
            sibling_index = min(node_index ^ 1, node_count - 1)

            steps.append(
                ProofStep(
                    self._nodes[level_start_index + sibling_index],
                    sibling_index > node_index,
                )
            )

            level_start_index += node_count
            node_count = (node_count + 1) >> 1
            node_index >>= 1

        return MerkleProof(tuple(steps))

    @staticmethod
    def calc_proof_hash(
        item_hash: Any,
        proof: Iterable[Tuple[Any, bool]],
        hasher: Optional[MerkleTreeHasher] = None,
    ) -> Any:
        """Fold a proof over a leaf hash, returning the implied root."""
        hasher = hasher if hasher is not None else DEFAULT_HASHER

        proof_hash = item_hash
        for sibling_hash, is_right_sibling in proof:
            if is_right_sibling:
                proof_hash = hasher.concat(proof_hash, sibling_hash)
            else:
                proof_hash = hasher.concat(sibling_hash, proof_hash)
        return proof_hash

    @staticmethod
    def verify_proof(
        item_data: Union[bytes, bytearray, memoryview, str],
        root_hash: Any,
        proof: Iterable[Tuple[Any, bool]],
        hasher: Optional[MerkleTreeHasher] = None,
    ) -> bool:
        """
        Verify a Merkle proof.

        Recomputes the root hash from the item and proof, then compares it
        with the expected root. Never raises: malformed input is simply
        not a valid proof.

        Args:
            item_data: Original item data (will be hashed)
            root_hash: Trusted root hash
            proof: Proof for the item, as returned by get_proof()
            hasher: Hash function the tree was built with (default: SHA-256)

        Returns:
            True if the proof is valid, False otherwise
        """
        hasher = hasher if hasher is not None else DEFAULT_HASHER

        try:
            steps = list(proof)
            item_hash = hasher.hash(_to_bytes(item_data))
            proof_hash = MerkleTree.calc_proof_hash(item_hash, steps, hasher)
        except (TypeError, ValueError, AttributeError, OverflowError) as e:
            log_merkle_verification(
                logger,
                success=False,
                proof_length=-1,
                failure_reason=f"malformed input: {e}",
            )
            return False

        if isinstance(root_hash, (bytearray, memoryview)):
            root_hash = bytes(root_hash)
        result = type(proof_hash) is type(root_hash) and proof_hash == root_hash

        log_merkle_verification(
            logger,
            success=result,
            proof_length=len(steps),
            failure_reason=None if result else "root mismatch",
        )
        return result
