"""Flat prefix-order tree nodes.

A tree is a list of ``TreeNode`` in prefix (Polish) order. Each node stores
its subtree size, so the subtree rooted at ``i`` is exactly
``nodes[i:i + nodes[i].subtree_size]`` and siblings are reached by skipping
whole spans.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence

from evoforge.expression.types import TreeGeneType


@dataclass(frozen=True)
class TreeNode:
    """One slot in a flat tree.

    Attributes:
        gene_type: Node type (operator or terminal)
        subtree_size: Slots spanned by this node's subtree, itself included
        coefficient: Optional numeric payload (constants)
    """

    gene_type: TreeGeneType
    subtree_size: int = 1
    coefficient: float | None = None

    @property
    def allows_coefficient(self) -> bool:
        return self.gene_type.allows_coefficient

    def to_dict(self) -> dict:
        return {
            "type": self.gene_type.name,
            "subtree_size": self.subtree_size,
            "coefficient": self.coefficient,
        }

    @property
    def child_count(self) -> int:
        return self.gene_type.child_count


def compute_subtree_sizes(gene_types: Sequence[TreeGeneType]) -> list[int]:
    """Recompute subtree sizes bottom-up in one reverse pass.

    Each node is 1 plus the sizes of its ``child_count`` immediately
    following children, stepping over each child's own span. Children that
    would lie past the end of the array are ignored; ``check_subtree_sizes``
    reports such trees as broken.
    """
    count = len(gene_types)
    sizes = [0] * count
    for i in range(count - 1, -1, -1):
        size = 1
        child = i + 1
        for _ in range(gene_types[i].child_count):
            if child < count:
                size += sizes[child]
                child += sizes[child]
        sizes[i] = size
    return sizes


def with_subtree_sizes(nodes: Sequence[TreeNode]) -> list[TreeNode]:
    """Return ``nodes`` with every subtree size recomputed."""
    sizes = compute_subtree_sizes([node.gene_type for node in nodes])
    return [
        node if node.subtree_size == size else replace(node, subtree_size=size)
        for node, size in zip(nodes, sizes)
    ]


def check_subtree_sizes(nodes: Sequence[TreeNode]) -> None:
    """Verify the prefix-order invariant.

    Raises:
        ValueError: If the array is empty, a node is missing children, or a
            stored subtree size disagrees with the structure
    """
    if not nodes:
        raise ValueError("A tree must contain at least one node")

    expected = compute_subtree_sizes([node.gene_type for node in nodes])
    if expected[0] != len(nodes):
        raise ValueError(
            f"Root spans {expected[0]} of {len(nodes)} nodes; "
            "the array is not exactly one complete tree"
        )

    for i, (node, size) in enumerate(zip(nodes, expected)):
        if node.subtree_size != size:
            raise ValueError(
                f"Node {i} ({node.gene_type}) stores subtree size "
                f"{node.subtree_size}, structure gives {size}"
            )
        if i + size > len(nodes):
            raise ValueError(f"Subtree of node {i} runs past the end of the tree")

        # Children must tile the span exactly
        child = i + 1
        for _ in range(node.child_count):
            if child >= i + size:
                raise ValueError(f"Node {i} ({node.gene_type}) is missing children")
            child += expected[child]
        if child != i + size:
            raise ValueError(f"Children of node {i} do not tile its span")
