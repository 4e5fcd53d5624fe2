"""Permutation genome for ordering problems (TSP, scheduling, ...).

Mutation swaps two positions; crossover is Order Crossover (OX1), which
always yields a valid permutation of the parents' element set.
"""

from __future__ import annotations

from typing import Hashable, Sequence

from evoforge.evolution.environment import Environment
from evoforge.exceptions import ConfigurationError
from evoforge.random_source import RandomSource


def order_crossover(
    parent1: Sequence[Hashable],
    parent2: Sequence[Hashable],
    rng: RandomSource,
) -> list[Hashable]:
    """Build one OX1 child.

    Copies the slice ``[p1, p2]`` from ``parent1`` verbatim, then fills the
    remaining positions circularly (starting after ``p2``) with ``parent2``'s
    elements in order, skipping those already placed.
    """
    size = len(parent1)
    p1 = rng.int_in_range(0, size - 1)
    p2 = rng.int_in_range(p1 + 1, size)

    child: list[Hashable | None] = [None] * size
    placed = set()
    for i in range(p1, p2 + 1):
        child[i] = parent1[i]
        placed.add(parent1[i])

    source = (p2 + 1) % size
    target = (p2 + 1) % size
    while target != p1:
        candidate = parent2[source]
        if candidate not in placed:
            child[target] = candidate
            placed.add(candidate)
            target = (target + 1) % size
        source = (source + 1) % size

    return child  # type: ignore[return-value]


class PermutationGenome:
    """A unique ordering of elements."""

    def __init__(
        self,
        elements: Sequence[Hashable],
        individual_mutation_rate: float | None = None,
        individual_crossover_rate: float | None = None,
    ) -> None:
        self.elements = list(elements)
        if len(set(self.elements)) != len(self.elements):
            raise ConfigurationError(
                f"Permutation elements must be unique, got {self.elements}"
            )
        self.individual_mutation_rate = individual_mutation_rate
        self.individual_crossover_rate = individual_crossover_rate

    def mutate(self, rate: float, environment: Environment) -> None:
        """Swap two random positions with probability ``rate``."""
        rng = environment.random_source
        if rng.uniform() >= rate:
            return
        if len(self.elements) < 2:
            return

        i = rng.int_in_range(0, len(self.elements))
        j = rng.int_in_range(0, len(self.elements))
        self.elements[i], self.elements[j] = self.elements[j], self.elements[i]

    def crossover(
        self, partner: "PermutationGenome", rate: float, environment: Environment
    ) -> tuple["PermutationGenome", "PermutationGenome"]:
        rng = environment.random_source
        if rng.uniform() >= rate:
            return self, partner
        if len(self.elements) < 2:
            return self, partner
        if set(self.elements) != set(partner.elements) or len(self.elements) != len(partner.elements):
            raise ConfigurationError("Order crossover requires permutations of the same element set")

        child_a = order_crossover(self.elements, partner.elements, rng)
        child_b = order_crossover(partner.elements, self.elements, rng)
        return (
            PermutationGenome(child_a, self.individual_mutation_rate, self.individual_crossover_rate),
            PermutationGenome(child_b, partner.individual_mutation_rate, partner.individual_crossover_rate),
        )

    def to_dict(self) -> dict:
        return {
            "elements": list(self.elements),
            "individual_mutation_rate": self.individual_mutation_rate,
            "individual_crossover_rate": self.individual_crossover_rate,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PermutationGenome":
        return cls(
            data["elements"],
            data.get("individual_mutation_rate"),
            data.get("individual_crossover_rate"),
        )

    def copy(self) -> "PermutationGenome":
        return PermutationGenome(
            list(self.elements),
            self.individual_mutation_rate,
            self.individual_crossover_rate,
        )

    def __len__(self) -> int:
        return len(self.elements)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PermutationGenome):
            return NotImplemented
        return self.elements == other.elements

    def __hash__(self) -> int:
        return hash(tuple(self.elements))

    def __repr__(self) -> str:
        return f"PermutationGenome({self.elements!r})"
