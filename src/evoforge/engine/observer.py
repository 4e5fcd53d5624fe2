"""Observers notified as evolution progresses.

Observers are read-only: they may inspect the population they are handed
but must not change it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from evoforge.evolution.population import Population

logger = logging.getLogger(__name__)


class EvolutionObserver:
    """Base observer; every hook is a no-op."""

    def evolution_starting_epoch(self, epoch: int) -> None:
        pass

    def evolution_finished_epoch(
        self, epoch: int, duration: float, population: "Population"
    ) -> None:
        """Called after an epoch's evaluation and truncation.

        ``population`` is the live population, not a copy. Read its stats,
        organisms and genomes, but do not mutate them.
        """

    def evolution_found_solution(self, genotype: Any, fitness: float) -> None:
        pass


class LoggingObserver(EvolutionObserver):
    """Reports epochs at INFO and individual evaluations at DEBUG."""

    def evolution_starting_epoch(self, epoch: int) -> None:
        logger.debug("Starting epoch %d", epoch)

    def evolution_finished_epoch(
        self, epoch: int, duration: float, population: "Population"
    ) -> None:
        best = population.best_organism
        logger.info(
            "Epoch %d finished in %.3fs: size=%d avg=%.6g best=%s",
            epoch,
            duration,
            len(population),
            population.average_fitness,
            f"{best.fitness:.6g}" if best is not None and best.fitness is not None else "n/a",
        )

    def evolution_found_solution(self, genotype: Any, fitness: float) -> None:
        logger.debug("Evaluated %r -> %.6g", genotype, fitness)


class RecordingObserver(EvolutionObserver):
    """Keeps a history of epoch summaries (handy for tests and reports)."""

    def __init__(self) -> None:
        self.started: list[int] = []
        self.history: list[dict[str, Any]] = []
        self.solutions = 0

    def evolution_starting_epoch(self, epoch: int) -> None:
        self.started.append(epoch)

    def evolution_finished_epoch(
        self, epoch: int, duration: float, population: "Population"
    ) -> None:
        stats = population.compute_stats()
        self.history.append({
            "epoch": epoch,
            "duration": duration,
            "size": stats.size,
            "best_fitness": stats.best_fitness,
            "average_fitness": stats.average_fitness,
            "pareto_front_size": stats.pareto_front_size,
        })

    def evolution_found_solution(self, genotype: Any, fitness: float) -> None:
        self.solutions += 1
