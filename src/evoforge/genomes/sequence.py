from __future__ import annotations

from typing import Any, Callable, Sequence

from evoforge.evolution.environment import Environment
from evoforge.genomes.primitives import gene_from_dict


class SequenceGenome:
    """An evolvable flat sequence of genes.

    Crossover is single-point and proportional: one fraction is drawn and
    each parent is cut at that fraction of its own length, so parents of
    different lengths recombine cleanly.
    """

    def __init__(
        self,
        genes: Sequence[Any],
        individual_mutation_rate: float | None = None,
        individual_crossover_rate: float | None = None,
    ) -> None:
        self.genes = list(genes)
        self.individual_mutation_rate = individual_mutation_rate
        self.individual_crossover_rate = individual_crossover_rate

    def mutate(self, rate: float, environment: Environment) -> None:
        for gene in self.genes:
            gene.mutate(rate, environment)

    def crossover(
        self, partner: "SequenceGenome", rate: float, environment: Environment
    ) -> tuple["SequenceGenome", "SequenceGenome"]:
        rng = environment.random_source
        if rng.uniform() >= rate:
            return self, partner
        if len(self.genes) < 2 or len(partner.genes) < 2:
            return self, partner

        fraction = rng.uniform()
        cut_a = int(len(self.genes) * fraction)
        cut_b = int(len(partner.genes) * fraction)

        genes_a = [g.copy() for g in self.genes[:cut_a]] + [g.copy() for g in partner.genes[cut_b:]]
        genes_b = [g.copy() for g in partner.genes[:cut_b]] + [g.copy() for g in self.genes[cut_a:]]

        return (
            SequenceGenome(genes_a, self.individual_mutation_rate, self.individual_crossover_rate),
            SequenceGenome(genes_b, partner.individual_mutation_rate, partner.individual_crossover_rate),
        )

    def to_dict(self) -> dict:
        return {
            "genes": [gene.to_dict() for gene in self.genes],
            "individual_mutation_rate": self.individual_mutation_rate,
            "individual_crossover_rate": self.individual_crossover_rate,
        }

    @classmethod
    def from_dict(
        cls, data: dict, decode_gene: Callable[[dict], Any] = gene_from_dict
    ) -> "SequenceGenome":
        """Create from dictionary; ``decode_gene`` rebuilds each gene."""
        return cls(
            [decode_gene(gene) for gene in data["genes"]],
            data.get("individual_mutation_rate"),
            data.get("individual_crossover_rate"),
        )

    def copy(self) -> "SequenceGenome":
        return SequenceGenome(
            [gene.copy() for gene in self.genes],
            self.individual_mutation_rate,
            self.individual_crossover_rate,
        )

    def __len__(self) -> int:
        return len(self.genes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SequenceGenome):
            return NotImplemented
        return self.genes == other.genes

    def __hash__(self) -> int:
        return hash(tuple(self.genes))

    def __repr__(self) -> str:
        return f"SequenceGenome({self.genes!r})"
