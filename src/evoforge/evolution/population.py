"""Population management and the epoch (generation transition).

A population moves through needs-evaluation -> evaluated -> advancing ->
needs-evaluation. ``epoch()`` only runs on an evaluated generation; the
scheduler evaluates and, in multi-objective mode, truncates afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

from evoforge.evolution.environment import Environment, SelectionKind
from evoforge.evolution.organism import Organism
from evoforge.evolution.protocol import crossover_rate_for, mutation_rate_for
from evoforge.exceptions import ConfigurationError, EvolutionFailed
from evoforge.operators.nsga2 import sort_and_truncate
from evoforge.operators.selection import (
    crowded_binary_tournament,
    elites_from_population,
    organism_from_roulette,
    organism_from_tournament,
    organism_from_truncation,
    sort_by_fitness,
)

logger = logging.getLogger(__name__)


class EvolutionType(Enum):
    """Evolution mode of a population."""

    STANDARD = "standard"
    MULTI_OBJECTIVE = "multi_objective"


@dataclass
class PopulationStats:
    """Statistics about a population."""

    generation: int
    size: int
    evaluated: int
    best_fitness: float | None
    average_fitness: float
    unique_genomes: int
    pareto_front_size: int


@dataclass
class Population:
    """Ordered collection of organisms evolving in an environment.

    Attributes:
        environment: Shared, read-only configuration
        evolution_type: Standard or multi-objective evolution
        organisms: The current generation
        generation: Generation counter
    """

    environment: Environment
    evolution_type: EvolutionType = EvolutionType.STANDARD
    organisms: list[Organism] = field(default_factory=list)
    generation: int = 0

    total_fitness: float = field(default=0.0, init=False)
    average_fitness: float = field(default=0.0, init=False)
    best_organism_in_generation: Organism | None = field(default=None, init=False)
    best_organism: Organism | None = field(default=None, init=False)

    def __len__(self) -> int:
        return len(self.organisms)

    def __iter__(self) -> Iterator[Organism]:
        return iter(self.organisms)

    def __getitem__(self, idx: int) -> Organism:
        return self.organisms[idx]

    @property
    def is_multi_objective(self) -> bool:
        return self.evolution_type is EvolutionType.MULTI_OBJECTIVE

    def add_genome(self, genome: Any) -> Organism:
        """Add a genome as a new, unevaluated organism of the current generation."""
        organism = Organism(genotype=genome, birth_generation=self.generation)
        self.organisms.append(organism)
        return organism

    def needs_evaluation(self) -> bool:
        """Check whether any organism lacks a result for the active mode."""
        return any(not org.has_result(self.is_multi_objective) for org in self.organisms)

    def is_evaluated(self) -> bool:
        return bool(self.organisms) and not self.needs_evaluation()

    # Epoch

    def epoch(self) -> None:
        """Advance one generation: selection, elitism, crossover and mutation.

        Standard mode replaces the generation with exactly ``population_size``
        organisms. Multi-objective mode keeps the evaluated parents and
        appends ``population_size`` offspring; the caller truncates after
        evaluation.

        Raises:
            EvolutionFailed: If the population is empty or not evaluated
            ConfigurationError: On an invalid environment (odd elite product,
                zero selectable organisms, ...)
        """
        if not self.organisms:
            raise EvolutionFailed("Cannot run an epoch on an empty population.")
        if self.needs_evaluation():
            raise EvolutionFailed(
                "The current generation must be evaluated before running an epoch."
            )

        if self.is_multi_objective:
            next_generation = self._multi_objective_generation()
        else:
            next_generation = self._standard_generation()

        self.organisms = next_generation
        self.generation += 1
        logger.debug(
            "Generation %d assembled with %d organisms", self.generation, len(self.organisms)
        )

    def _standard_generation(self) -> list[Organism]:
        env = self.environment
        if env.selection_method.kind is SelectionKind.MULTI_OBJECTIVE:
            raise ConfigurationError(
                "Multi-objective selection requires a multi-objective population."
            )

        sort_by_fitness(self.organisms, env)
        next_generation = elites_from_population(self.organisms, env)

        draws = 0
        while len(next_generation) < env.population_size:
            parent_a = self._select_parent(draws)
            parent_b = self._select_parent(draws + 1)
            draws += 2
            next_generation.extend(self._breed(parent_a, parent_b))

        return next_generation[: env.population_size]

    def _multi_objective_generation(self) -> list[Organism]:
        env = self.environment
        rng = env.random_source

        offspring: list[Organism] = []
        while len(offspring) < env.population_size:
            parent_a = crowded_binary_tournament(self.organisms, rng)
            parent_b = crowded_binary_tournament(self.organisms, rng)
            offspring.extend(self._breed(parent_a, parent_b))

        return list(self.organisms) + offspring[: env.population_size]

    def _select_parent(self, draw_index: int) -> Organism:
        env = self.environment
        method = env.selection_method
        if method.kind is SelectionKind.ROULETTE:
            return organism_from_roulette(self.organisms, env)
        if method.kind is SelectionKind.TOURNAMENT:
            return organism_from_tournament(self.organisms, method.tournament_size, env)
        if method.kind is SelectionKind.TRUNCATION:
            return organism_from_truncation(self.organisms, method.fraction, draw_index)
        raise ConfigurationError(f"Unsupported selection method: {method}")

    def _breed(self, parent_a: Organism, parent_b: Organism) -> tuple[Organism, Organism]:
        """Crossover then mutation; children are stamped with the next generation."""
        env = self.environment
        genome_a = parent_a.genotype
        genome_b = parent_b.genotype

        rate = getattr(genome_a, "individual_crossover_rate", None)
        if rate is None:
            rate = crossover_rate_for(genome_b, env)

        child_a, child_b = genome_a.crossover(genome_b, rate, env)

        # Pass-through crossover hands back the parents themselves
        if child_a is genome_a or child_a is genome_b:
            child_a = child_a.copy()
        if child_b is genome_a or child_b is genome_b:
            child_b = child_b.copy()

        children = []
        for genome in (child_a, child_b):
            genome.mutate(mutation_rate_for(genome, env), env)
            children.append(Organism(genotype=genome, birth_generation=self.generation + 1))
        return children[0], children[1]

    # Survival and metrics

    def truncate_multi_objective(self) -> None:
        """Rank the population and truncate it back to ``population_size``."""
        self.organisms = sort_and_truncate(
            self.organisms, self.environment.population_size, self.environment.sense
        )
        self.update_fitness_metrics()

    def update_fitness_metrics(self) -> None:
        """Recompute total, average and best fitness."""
        evaluated = [org for org in self.organisms if org.fitness is not None]
        self.total_fitness = sum(org.fitness for org in evaluated)
        self.average_fitness = self.total_fitness / len(evaluated) if evaluated else 0.0

        if not evaluated:
            self.best_organism_in_generation = None
            return

        score = self.environment.sense.score
        best = max(evaluated, key=lambda org: score(org.fitness))
        self.best_organism_in_generation = best
        if self.best_organism is None or score(best.fitness) > score(self.best_organism.fitness):
            self.best_organism = best.clone()

    def get_pareto_front(self) -> list[Organism]:
        """Organisms on the first Pareto front (multi-objective mode)."""
        return [org for org in self.organisms if org.dominance_rank == 0]

    def compute_stats(self) -> PopulationStats:
        """Compute population statistics."""
        evaluated = [org for org in self.organisms if org.fitness is not None]
        best = None
        if evaluated:
            score = self.environment.sense.score
            best = max(evaluated, key=lambda org: score(org.fitness)).fitness

        return PopulationStats(
            generation=self.generation,
            size=len(self.organisms),
            evaluated=len(evaluated),
            best_fitness=best,
            average_fitness=(
                sum(org.fitness for org in evaluated) / len(evaluated) if evaluated else 0.0
            ),
            unique_genomes=len({org.genotype for org in self.organisms}),
            pareto_front_size=len(self.get_pareto_front()) if self.is_multi_objective else 0,
        )
