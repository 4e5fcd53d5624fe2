from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass(eq=False)
class Organism:
    """A genome plus its evaluation results and lineage metadata.

    Attributes:
        genotype: The organism's genome
        fitness: Scalar fitness, or None until evaluated
        objectives: Objective vector (multi-objective mode), or None
        birth_generation: Generation the organism was created in, or -1
        dominance_rank: Pareto front index (multi-objective mode only)
        crowding_distance: Crowding distance within its front (multi-objective mode only)
        id: Unique identity
    """

    genotype: Any
    fitness: float | None = None
    objectives: list[float] | None = None
    birth_generation: int = -1
    dominance_rank: int = 0
    crowding_distance: float = 0.0
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def has_result(self, multi_objective: bool) -> bool:
        """Check whether the result for the given mode is present."""
        if multi_objective:
            return self.objectives is not None
        return self.fitness is not None

    def clone(self) -> "Organism":
        """Copy with a fresh identity and an independent genotype."""
        return Organism(
            genotype=self.genotype.copy(),
            fitness=self.fitness,
            objectives=list(self.objectives) if self.objectives is not None else None,
            birth_generation=self.birth_generation,
            dominance_rank=self.dominance_rank,
            crowding_distance=self.crowding_distance,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary; the genotype must provide ``to_dict``."""
        return {
            "id": self.id,
            "genotype": self.genotype.to_dict(),
            "fitness": self.fitness,
            "objectives": self.objectives,
            "birth_generation": self.birth_generation,
            "dominance_rank": self.dominance_rank,
            "crowding_distance": self.crowding_distance,
        }

    @classmethod
    def from_dict(cls, data: dict, decode_genotype: Callable[[dict], Any]) -> "Organism":
        """Create from dictionary; ``decode_genotype`` rebuilds the genome."""
        objectives = data.get("objectives")
        return cls(
            genotype=decode_genotype(data["genotype"]),
            fitness=data.get("fitness"),
            objectives=list(objectives) if objectives is not None else None,
            birth_generation=data.get("birth_generation", -1),
            dominance_rank=data.get("dominance_rank", 0),
            crowding_distance=data.get("crowding_distance", 0.0),
            id=data.get("id") or str(uuid.uuid4()),
        )

    def __repr__(self) -> str:
        return (
            f"Organism(id={self.id[:8]}, fitness={self.fitness}, "
            f"objectives={self.objectives}, born={self.birth_generation})"
        )
