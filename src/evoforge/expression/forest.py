from __future__ import annotations

from typing import Sequence

from evoforge.evolution.environment import Environment
from evoforge.expression.tree import TreeGenome
from evoforge.expression.types import TreeTemplate


class ForestGenome:
    """An evolvable forest of independent trees sharing one catalog.

    Crossover recombines trees pairwise by position, the way chromosomes
    pair up; trees beyond the shorter forest are dropped from the children.
    """

    def __init__(
        self,
        trees: Sequence[TreeGenome],
        individual_mutation_rate: float | None = None,
        individual_crossover_rate: float | None = None,
    ) -> None:
        self.trees = list(trees)
        self.individual_mutation_rate = individual_mutation_rate
        self.individual_crossover_rate = individual_crossover_rate

    def mutate(self, rate: float, environment: Environment) -> None:
        for tree in self.trees:
            tree.mutate(rate, environment)

    def crossover(
        self, partner: "ForestGenome", rate: float, environment: Environment
    ) -> tuple["ForestGenome", "ForestGenome"]:
        trees_a: list[TreeGenome] = []
        trees_b: list[TreeGenome] = []
        for tree_a, tree_b in zip(self.trees, partner.trees):
            child_a, child_b = tree_a.crossover(tree_b, rate, environment)
            # Pass-through hands back the parents' own trees
            trees_a.append(child_a.copy() if child_a is tree_a else child_a)
            trees_b.append(child_b.copy() if child_b is tree_b else child_b)

        return (
            ForestGenome(trees_a, self.individual_mutation_rate, self.individual_crossover_rate),
            ForestGenome(trees_b, partner.individual_mutation_rate, partner.individual_crossover_rate),
        )

    def to_dict(self) -> dict:
        return {
            "trees": [tree.to_dict() for tree in self.trees],
            "individual_mutation_rate": self.individual_mutation_rate,
            "individual_crossover_rate": self.individual_crossover_rate,
        }

    @classmethod
    def from_dict(cls, data: dict, template: TreeTemplate) -> "ForestGenome":
        return cls(
            [TreeGenome.from_dict(tree, template) for tree in data["trees"]],
            data.get("individual_mutation_rate"),
            data.get("individual_crossover_rate"),
        )

    def copy(self) -> "ForestGenome":
        return ForestGenome(
            [tree.copy() for tree in self.trees],
            self.individual_mutation_rate,
            self.individual_crossover_rate,
        )

    def __len__(self) -> int:
        return len(self.trees)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ForestGenome):
            return NotImplemented
        return self.trees == other.trees

    def __hash__(self) -> int:
        return hash(tuple(self.trees))

    def __repr__(self) -> str:
        return f"ForestGenome({', '.join(t.to_string() for t in self.trees)})"
