"""Evaluator contract between the engine and caller-supplied fitness code."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from evoforge.evolution.organism import Organism
from evoforge.random_source import RandomSource


@dataclass
class FitnessResult:
    """Result of one organism's evaluation.

    Built from a single fitness (objectives become ``[fitness]``) or from an
    objective vector (fitness becomes its first entry).
    """

    fitness: float
    objectives: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.objectives:
            self.objectives = [self.fitness]

    @classmethod
    def from_objectives(cls, objectives: Sequence[float]) -> "FitnessResult":
        values = [float(v) for v in objectives]
        return cls(fitness=values[0] if values else 0.0, objectives=values)


class FitnessEvaluator(ABC):
    """Computes fitness (and optionally objectives) for organisms.

    Implementations are called concurrently from worker threads and must
    not mutate the organism. ``rng`` is a stream forked for the calling
    chunk; use it instead of global randomness to keep runs reproducible.
    """

    @abstractmethod
    def fitness_for(self, organism: Organism, rng: RandomSource) -> float:
        """Return the organism's scalar fitness."""

    def objectives_for(self, organism: Organism, rng: RandomSource) -> list[float]:
        """Return the objective vector; defaults to the fitness alone."""
        return [self.fitness_for(organism, rng)]


class FunctionEvaluator(FitnessEvaluator):
    """Adapts plain functions over genomes to the evaluator contract.

    Args:
        fitness_fn: Maps a genome to its fitness
        objectives_fn: Maps a genome to its objective vector (optional)
    """

    def __init__(
        self,
        fitness_fn: Callable[[Any], float],
        objectives_fn: Callable[[Any], Sequence[float]] | None = None,
    ) -> None:
        self.fitness_fn = fitness_fn
        self.objectives_fn = objectives_fn

    def fitness_for(self, organism: Organism, rng: RandomSource) -> float:
        return float(self.fitness_fn(organism.genotype))

    def objectives_for(self, organism: Organism, rng: RandomSource) -> list[float]:
        if self.objectives_fn is None:
            return super().objectives_for(organism, rng)
        return [float(v) for v in self.objectives_fn(organism.genotype)]
