"""Expression-tree genomes for genetic programming.

Trees are stored as flat prefix-order node arrays with precomputed subtree
sizes; see ``evoforge.expression.tree``.
"""

from evoforge.expression.types import ArithmeticGene, TreeGeneType, TreeTemplate
from evoforge.expression.nodes import TreeNode
from evoforge.expression.tree import TreeGenome
from evoforge.expression.forest import ForestGenome
from evoforge.expression.compiler import evaluate_tree

__all__ = [
    "ArithmeticGene",
    "TreeGeneType",
    "TreeTemplate",
    "TreeNode",
    "TreeGenome",
    "ForestGenome",
    "evaluate_tree",
]
