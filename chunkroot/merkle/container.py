"""
Merkle tree container pairing a tree with the items it was built from.
"""

from typing import Any, Generic, Optional, Sequence, Tuple, TypeVar

from chunkroot.merkle.hasher import MerkleTreeHasher
from chunkroot.merkle.tree import MerkleProof, MerkleTree

Item = TypeVar("Item")


class MerkleTreeContainer(Generic[Item]):
    """
    Keeps the original items alongside their Merkle tree.

    items[i] is always leaf i of the tree, so an item and its proof can be
    fetched together by index.

    Example:
        >>> container = MerkleTreeContainer([b"hello", b"world"])
        >>> item, proof = container.get_item(1)
        >>> MerkleTree.verify_proof(item, container.get_root(), proof)
        True
    """

    def __init__(self, items: Sequence[Item], hasher: Optional[MerkleTreeHasher] = None):
        self._items: Tuple[Item, ...] = tuple(items)
        self._tree = MerkleTree.from_data_items(self._items, hasher=hasher)

    def __len__(self) -> int:
        return len(self._items)

    @property
    def tree(self) -> MerkleTree:
        return self._tree

    @property
    def items(self) -> Tuple[Item, ...]:
        return self._items

    def get_root(self) -> Optional[Any]:
        """Root hash of the underlying tree, None if there are no items."""
        return self._tree.get_root()

    def get_item(self, item_index: int) -> Optional[Tuple[Item, MerkleProof]]:
        """
        Get an item together with its inclusion proof.

        Args:
            item_index: Index of the item (0-based)

        Returns:
            Tuple of (item, proof), or None if item_index is out of range
        """
        proof = self._tree.get_proof(item_index)
        if proof is None:
            return None
        return self._items[item_index], proof
