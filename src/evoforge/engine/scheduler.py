"""Generation loop and concurrent, cached fitness evaluation.

The coordinator thread runs epochs one after another. Within an epoch the
population is split into contiguous chunks, one per worker, and the chunks
are evaluated on a thread pool. Each chunk gets its own random stream,
forked on the coordinator in chunk order, so a fixed seed and worker count
give the same run every time. Results come back as
``(index, fitness, objectives)`` records and are written into the
population only after every chunk has finished.
"""

from __future__ import annotations

import concurrent.futures
import logging
import math
import os
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, NamedTuple, Sequence

from evoforge.engine.cache import FitnessCache
from evoforge.engine.evaluator import FitnessEvaluator, FitnessResult
from evoforge.engine.observer import EvolutionObserver
from evoforge.evolution.organism import Organism
from evoforge.evolution.population import Population
from evoforge.exceptions import ConfigurationError, EvaluationError
from evoforge.random_source import RandomSource

logger = logging.getLogger(__name__)


@dataclass
class EvolutionConfig:
    """Configuration for a run of the generation loop.

    Attributes:
        max_epochs: Number of epochs to run
        workers: Evaluation threads (None = os.cpu_count())
        evaluation_timeout: Seconds allowed per evaluator call (None = unbounded)
        use_cache: Consult and fill the fitness cache
    """

    max_epochs: int = 100
    workers: int | None = None
    evaluation_timeout: float | None = None
    use_cache: bool = True

    def __post_init__(self) -> None:
        if self.max_epochs < 0:
            raise ConfigurationError(f"max_epochs cannot be negative, got {self.max_epochs}")
        if self.workers is not None and self.workers < 1:
            raise ConfigurationError(f"workers must be at least 1, got {self.workers}")
        if self.evaluation_timeout is not None and self.evaluation_timeout <= 0:
            raise ConfigurationError(
                f"evaluation_timeout must be positive, got {self.evaluation_timeout}"
            )

    @property
    def worker_count(self) -> int:
        return self.workers or os.cpu_count() or 1


class EvaluationRecord(NamedTuple):
    """One organism's evaluation outcome, addressed by population index.

    ``objectives`` is None for standard evaluation, and for a failed
    multi-objective evaluation.
    """

    index: int
    fitness: float
    objectives: list[float] | None


def chunk_bounds(total: int, workers: int) -> list[tuple[int, int]]:
    """Split ``range(total)`` into contiguous chunks, about one per worker."""
    if total <= 0:
        return []
    chunk_size = max(1, math.ceil(total / max(1, workers)))
    return [(start, min(start + chunk_size, total)) for start in range(0, total, chunk_size)]


class GeneticAlgorithm:
    """Drives evolution of a population with concurrent fitness evaluation.

    Example:
        >>> ga = GeneticAlgorithm(FunctionEvaluator(score), config=EvolutionConfig(max_epochs=50))
        >>> ga.evolve(population)
        >>> population.best_organism
    """

    def __init__(
        self,
        fitness_evaluator: FitnessEvaluator,
        observer: EvolutionObserver | None = None,
        config: EvolutionConfig | None = None,
        cache: FitnessCache | None = None,
    ) -> None:
        self.fitness_evaluator = fitness_evaluator
        self.observer = observer or EvolutionObserver()
        self.config = config or EvolutionConfig()
        self.cache = cache if cache is not None else FitnessCache()
        self.after_each_epoch_fns: list[Callable[[int], None]] = []

    def after_each_epoch(self, fn: Callable[[int], None]) -> Callable[[int], None]:
        """Register a callback run with the epoch index after every epoch.

        Returns ``fn`` so it can be used as a decorator.
        """
        self.after_each_epoch_fns.append(fn)
        return fn

    def evolve(self, population: Population, config: EvolutionConfig | None = None) -> Population:
        """Run ``max_epochs`` epochs on ``population`` in place.

        The first generation is evaluated before the first epoch if any
        organism lacks a result.

        Raises:
            ConfigurationError: On an invalid environment
            EvolutionFailed: If the population is empty
        """
        config = config or self.config
        logger.info(
            "Evolving %d organisms for %d epochs (%s, %d workers)",
            len(population),
            config.max_epochs,
            population.evolution_type.value,
            config.worker_count,
        )

        if population.organisms and population.needs_evaluation():
            self.evaluate_population(population, config)
            if population.is_multi_objective:
                population.truncate_multi_objective()

        for epoch in range(config.max_epochs):
            self.observer.evolution_starting_epoch(epoch)
            start = time.perf_counter()

            population.epoch()
            self.evaluate_population(population, config)
            if population.is_multi_objective:
                population.truncate_multi_objective()

            duration = time.perf_counter() - start
            # Observers and callbacks see the live population; they must not mutate it
            self.observer.evolution_finished_epoch(epoch, duration, population)

            for fn in self.after_each_epoch_fns:
                fn(epoch)

        return population

    # Evaluation

    def evaluate_population(
        self, population: Population, config: EvolutionConfig | None = None
    ) -> None:
        """Evaluate every organism lacking a result for the population's mode."""
        config = config or self.config
        organisms = list(population.organisms)
        multi = population.is_multi_objective
        if not any(not org.has_result(multi) for org in organisms):
            return

        bounds = chunk_bounds(len(organisms), config.worker_count)
        # Forked in chunk order on this thread, before any task starts
        streams = [population.environment.random_source.fork(k) for k in range(len(bounds))]
        logger.debug("Evaluating %d organisms in %d chunks", len(organisms), len(bounds))

        records: list[EvaluationRecord] = []
        with ThreadPoolExecutor(
            max_workers=config.worker_count, thread_name_prefix="evoforge-eval"
        ) as executor:
            futures = [
                executor.submit(self._evaluate_chunk, organisms[start:end], start, multi, rng, config)
                for (start, end), rng in zip(bounds, streams)
            ]
            # Barrier: nothing is written back until every chunk is done
            for future in futures:
                records.extend(future.result())

        self._merge(population, records, multi)

    def _merge(self, population: Population, records: Sequence[EvaluationRecord], multi: bool) -> None:
        objective_count = self._objective_count(population, records) if multi else 0

        for record in records:
            organism = population.organisms[record.index]
            organism.fitness = record.fitness
            if multi:
                organism.objectives = (
                    record.objectives
                    if record.objectives is not None
                    else [0.0] * objective_count
                )
            self.observer.evolution_found_solution(organism.genotype, record.fitness)

        population.update_fitness_metrics()

    @staticmethod
    def _objective_count(population: Population, records: Sequence[EvaluationRecord]) -> int:
        for record in records:
            if record.objectives is not None:
                return len(record.objectives)
        for organism in population.organisms:
            if organism.objectives is not None:
                return len(organism.objectives)
        return 1

    def _evaluate_chunk(
        self,
        organisms: Sequence[Organism],
        offset: int,
        multi: bool,
        rng: RandomSource,
        config: EvolutionConfig,
    ) -> list[EvaluationRecord]:
        records = []
        for position, organism in enumerate(organisms):
            if organism.has_result(multi):
                continue
            index = offset + position
            try:
                result = self._evaluate_organism(organism, multi, rng, config)
            except Exception:
                logger.warning(
                    "Evaluation failed for organism %d (%s); substituting a zero score",
                    index,
                    organism.id,
                    exc_info=True,
                )
                records.append(EvaluationRecord(index, 0.0, None))
                continue
            records.append(
                EvaluationRecord(index, result.fitness, result.objectives if multi else None)
            )
        return records

    def _evaluate_organism(
        self,
        organism: Organism,
        multi: bool,
        rng: RandomSource,
        config: EvolutionConfig,
    ) -> FitnessResult:
        genome = organism.genotype

        if multi:
            cached = self.cache.objectives(genome) if config.use_cache else None
            if cached is None:
                raw = self._call(self.fitness_evaluator.objectives_for, organism, rng, config)
                cached = [float(v) for v in raw]
                if config.use_cache:
                    self.cache.set_objectives(cached, genome)
            return FitnessResult.from_objectives(cached)

        fitness = self.cache.fitness(genome) if config.use_cache else None
        if fitness is None:
            fitness = float(self._call(self.fitness_evaluator.fitness_for, organism, rng, config))
            if config.use_cache:
                self.cache.set_fitness(fitness, genome)
        return FitnessResult(fitness)

    @staticmethod
    def _call(fn, organism, rng, config):
        if config.evaluation_timeout is None:
            return fn(organism, rng)

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="evoforge-call")
        future = executor.submit(fn, organism, rng)
        try:
            return future.result(timeout=config.evaluation_timeout)
        except concurrent.futures.TimeoutError as e:
            raise EvaluationError(
                f"Evaluation of organism {organism.id} exceeded {config.evaluation_timeout}s"
            ) from e
        finally:
            # An overrunning call keeps its thread until it returns
            executor.shutdown(wait=False)
