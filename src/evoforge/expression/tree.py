"""Array-encoded expression tree genome.

A ``TreeGenome`` holds its nodes as a flat list in prefix order. Structural
edits splice contiguous spans of that list, then recompute every subtree
size in one reverse pass, so the prefix invariant holds after each edit.

Mutation, per visited node with probability ``rate``:
- Deletion: a non-leaf becomes a random leaf and its subtree is dropped
- Addition: a leaf becomes a random non-leaf with freshly generated
  children; the new children are skipped for the rest of the pass
- Substitution: a different type of the same arity, structure unchanged

A single-leaf tree only ever undergoes substitution.
"""

from __future__ import annotations

import json
from typing import Iterator, Sequence

from evoforge.evolution.environment import Environment
from evoforge.exceptions import ConfigurationError
from evoforge.expression.nodes import TreeNode, check_subtree_sizes, with_subtree_sizes
from evoforge.expression.types import TreeGeneType, TreeTemplate
from evoforge.genomes.primitives import ContinuousParameter


class TreeGenome:
    """An evolvable expression tree in flat prefix encoding.

    Attributes:
        nodes: Nodes in prefix order
        template: Type catalogs used by structural mutation
        individual_mutation_rate: Optional override of the environment rate
        individual_crossover_rate: Optional override of the environment rate
    """

    def __init__(
        self,
        nodes: Sequence[TreeNode],
        template: TreeTemplate,
        individual_mutation_rate: float | None = None,
        individual_crossover_rate: float | None = None,
    ) -> None:
        self.nodes = list(nodes)
        self.template = template
        self.individual_mutation_rate = individual_mutation_rate
        self.individual_crossover_rate = individual_crossover_rate

    @classmethod
    def from_types(
        cls, gene_types: Sequence[TreeGeneType], template: TreeTemplate
    ) -> "TreeGenome":
        """Build a tree from gene types in prefix order, computing sizes."""
        genome = cls([TreeNode(gene_type) for gene_type in gene_types], template)
        genome.recalculate_subtree_sizes()
        return genome

    # Properties

    @property
    def size(self) -> int:
        return len(self.nodes)

    @property
    def depth(self) -> int:
        """Number of levels (a single leaf has depth 1)."""
        if not self.nodes:
            return 0
        deepest = 0
        # Each stack entry is the number of children still expected at a level
        pending: list[int] = []
        for node in self.nodes:
            pending.append(node.child_count)
            deepest = max(deepest, len(pending))
            while pending and pending[-1] == 0:
                pending.pop()
                if pending:
                    pending[-1] -= 1
        return deepest

    def subtree_span(self, index: int) -> tuple[int, int]:
        """Half-open range of the subtree rooted at ``index``."""
        return index, index + self.nodes[index].subtree_size

    def children_of(self, index: int) -> Iterator[int]:
        """Indices of the immediate children of ``index``."""
        child = index + 1
        for _ in range(self.nodes[index].child_count):
            yield child
            child += self.nodes[child].subtree_size

    def recalculate_subtree_sizes(self) -> None:
        self.nodes = with_subtree_sizes(self.nodes)

    def validate(self) -> None:
        """Raise ``ValueError`` if the prefix invariant is broken."""
        check_subtree_sizes(self.nodes)

    # Mutation

    def mutate(self, rate: float, environment: Environment) -> None:
        rng = environment.random_source
        i = 0
        while i < len(self.nodes):
            if rng.uniform() < rate:
                gene_type = self.nodes[i].gene_type
                if (
                    not gene_type.is_leaf_type
                    and rng.uniform() < environment.structural_mutation_deletion_rate
                ):
                    self._collapse(i, environment)
                elif (
                    gene_type.is_leaf_type
                    and len(self.nodes) > 1
                    and rng.uniform() < environment.structural_mutation_addition_rate
                ):
                    i += self._grow(i, environment)
                else:
                    self._substitute(i, environment)
            i += 1

    def _collapse(self, index: int, environment: Environment) -> None:
        """Replace the subtree at ``index`` with a single random leaf."""
        if not self.template.leaf_types:
            raise ConfigurationError("Deletion mutation needs at least one leaf type")
        rng = environment.random_source
        leaf = rng.choice(self.template.leaf_types)
        start, end = self.subtree_span(index)
        self.nodes[start:end] = [self._new_node(leaf, environment)]
        self.recalculate_subtree_sizes()

    def _grow(self, index: int, environment: Environment) -> int:
        """Turn the leaf at ``index`` into a random operator; return nodes inserted."""
        if not self.template.non_leaf_types:
            raise ConfigurationError("Addition mutation needs at least one non-leaf type")
        rng = environment.random_source
        operator = rng.choice(self.template.non_leaf_types)

        children: list[TreeNode] = []
        for _ in range(operator.child_count):
            children.extend(self._generate_subtree(1, self.template, environment))

        self.nodes[index : index + 1] = [TreeNode(operator)] + children
        self.recalculate_subtree_sizes()
        return len(children)

    def _substitute(self, index: int, environment: Environment) -> None:
        """Swap to another type of the same arity and nudge any coefficient."""
        rng = environment.random_source
        node = self.nodes[index]
        alternatives = [
            t for t in self.template.same_arity_types(node.gene_type) if t != node.gene_type
        ]
        new_type = rng.choice(alternatives) if alternatives else node.gene_type

        coefficient = None
        if new_type.allows_coefficient:
            if node.coefficient is None:
                coefficient = rng.gaussian(0.0, 1.0)
            else:
                size = float(
                    environment.parameter(ContinuousParameter.MUTATION_SIZE, 0.1, (int, float))
                )
                coefficient = node.coefficient + rng.gaussian(0.0, size)

        self.nodes[index] = TreeNode(new_type, node.subtree_size, coefficient)

    # Crossover

    def crossover(
        self, partner: "TreeGenome", rate: float, environment: Environment
    ) -> tuple["TreeGenome", "TreeGenome"]:
        """Swap one random subtree of each parent into the other."""
        rng = environment.random_source
        if rng.uniform() >= rate:
            return self, partner

        index_a = rng.int_in_range(0, len(self.nodes))
        index_b = rng.int_in_range(0, len(partner.nodes))
        start_a, end_a = self.subtree_span(index_a)
        start_b, end_b = partner.subtree_span(index_b)

        nodes_a = self.nodes[:start_a] + partner.nodes[start_b:end_b] + self.nodes[end_a:]
        nodes_b = partner.nodes[:start_b] + self.nodes[start_a:end_a] + partner.nodes[end_b:]

        child_a = TreeGenome(
            nodes_a, self.template, self.individual_mutation_rate, self.individual_crossover_rate
        )
        child_b = TreeGenome(
            nodes_b, partner.template, partner.individual_mutation_rate, partner.individual_crossover_rate
        )
        child_a.recalculate_subtree_sizes()
        child_b.recalculate_subtree_sizes()
        return child_a, child_b

    # Genesis

    @classmethod
    def random(
        cls, depth: int, template: TreeTemplate, environment: Environment
    ) -> "TreeGenome":
        """Generate a random tree whose root sits at ``depth``.

        Nodes deeper than ``environment.max_generation_depth`` are always
        leaves, so a larger starting depth yields a shallower tree.
        """
        nodes = cls._generate_subtree(depth, template, environment)
        genome = cls(nodes, template)
        genome.recalculate_subtree_sizes()
        return genome

    @classmethod
    def _generate_subtree(
        cls, depth: int, template: TreeTemplate, environment: Environment
    ) -> list[TreeNode]:
        if not template.leaf_types:
            raise ConfigurationError("Tree generation needs at least one leaf type")
        rng = environment.random_source

        if (
            depth > environment.max_generation_depth
            or rng.uniform() < environment.leaf_bias
            or not template.non_leaf_types
        ):
            gene_type = rng.choice(template.leaf_types)
        else:
            gene_type = rng.choice(template.non_leaf_types)

        subtree = [cls._new_node(gene_type, environment)]
        for _ in range(gene_type.child_count):
            subtree.extend(cls._generate_subtree(depth + 1, template, environment))

        subtree[0] = TreeNode(subtree[0].gene_type, len(subtree), subtree[0].coefficient)
        return subtree

    @staticmethod
    def _new_node(gene_type: TreeGeneType, environment: Environment) -> TreeNode:
        coefficient = None
        if gene_type.allows_coefficient:
            coefficient = environment.random_source.gaussian(0.0, 1.0)
        return TreeNode(gene_type, 1, coefficient)

    # Serialization

    def to_dict(self) -> dict:
        """Convert to dictionary; gene types are stored by name."""
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "individual_mutation_rate": self.individual_mutation_rate,
            "individual_crossover_rate": self.individual_crossover_rate,
        }

    @classmethod
    def from_dict(cls, data: dict, template: TreeTemplate) -> "TreeGenome":
        """Create from dictionary, resolving gene types against ``template``.

        Raises:
            ConfigurationError: If a gene type is not in the template
            ValueError: If the stored nodes do not form one complete tree
        """
        nodes = [
            TreeNode(
                template.gene_type_named(node["type"]),
                node.get("subtree_size", 1),
                node.get("coefficient"),
            )
            for node in data["nodes"]
        ]
        genome = cls(
            nodes,
            template,
            data.get("individual_mutation_rate"),
            data.get("individual_crossover_rate"),
        )
        genome.validate()
        return genome

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str, template: TreeTemplate) -> "TreeGenome":
        return cls.from_dict(json.loads(json_str), template)

    # Value semantics

    def copy(self) -> "TreeGenome":
        return TreeGenome(
            list(self.nodes),
            self.template,
            self.individual_mutation_rate,
            self.individual_crossover_rate,
        )

    def to_string(self) -> str:
        """Render in prefix form, e.g. ``add(x, mul(y, 0.5))``."""
        if not self.nodes:
            return ""
        return self._render(0)

    def _render(self, index: int) -> str:
        node = self.nodes[index]
        if node.coefficient is not None and node.gene_type.is_leaf_type:
            label = f"{node.coefficient:.4g}"
        else:
            label = node.gene_type.name.lower()
        if node.gene_type.is_leaf_type:
            return label
        args = ", ".join(self._render(child) for child in self.children_of(index))
        return f"{label}({args})"

    def __len__(self) -> int:
        return len(self.nodes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TreeGenome):
            return NotImplemented
        return self.nodes == other.nodes

    def __hash__(self) -> int:
        return hash(tuple(self.nodes))

    def __repr__(self) -> str:
        return f"TreeGenome({self.to_string()})"
