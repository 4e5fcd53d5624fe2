"""Parent selection strategies.

Every function expects organisms sorted ascending by goodness, so the best
organisms live at the high end of the list:
- Roulette: fitness-proportional sampling over the whole population
- Tournament: best of k draws from the top ``selectable_proportion``
- Truncation: deterministic walk over the top fraction
- Crowded binary tournament: rank, then crowding distance (multi-objective)
- Elites: the top organisms, replicated
"""

from __future__ import annotations

import math

from evoforge.evolution.environment import Environment, OptimizationSense
from evoforge.evolution.organism import Organism
from evoforge.exceptions import ConfigurationError, EvolutionFailed
from evoforge.random_source import RandomSource


def sort_by_fitness(organisms: list[Organism], environment: Environment) -> None:
    """Sort in place, ascending by goodness (best last)."""
    organisms.sort(key=lambda org: environment.sense.score(org.fitness or 0.0))


def _require_organisms(organisms: list[Organism]) -> None:
    if not organisms:
        raise EvolutionFailed("Cannot sample from an empty population.")


def organism_from_roulette(
    organisms: list[Organism],
    environment: Environment,
) -> Organism:
    """Select an organism by fitness-proportional (roulette wheel) sampling.

    Under minimization the wheel is weighted by distance from the worst
    fitness. A non-positive total falls back to a uniform draw.

    Args:
        organisms: Population sorted ascending by goodness
        environment: Environment providing the random source and sense

    Returns:
        The selected organism
    """
    _require_organisms(organisms)
    rng = environment.random_source

    fitnesses = [org.fitness or 0.0 for org in organisms]
    if environment.sense is OptimizationSense.MINIMIZE:
        worst = max(fitnesses)
        weights = [worst - f for f in fitnesses]
    else:
        weights = fitnesses

    total = sum(weights)
    if total <= 0:
        return rng.choice(organisms)

    slice_point = rng.uniform() * total
    cumulative = 0.0
    for organism, weight in zip(organisms, weights):
        cumulative += weight
        if cumulative >= slice_point:
            return organism

    # Floating-point residue
    return organisms[0]


def organism_from_tournament(
    organisms: list[Organism],
    size: int,
    environment: Environment,
) -> Organism:
    """Select the best of ``size`` random draws from the selectable top slice."""
    _require_organisms(organisms)
    selectable_count = int(len(organisms) * environment.selectable_proportion)
    if selectable_count <= 0:
        raise ConfigurationError(
            "Selectable proportion resulted in 0 selectable organisms."
        )
    if size < 1:
        raise ConfigurationError(f"Tournament size must be at least 1, got {size}")

    rng = environment.random_source
    low = len(organisms) - selectable_count
    players = [rng.int_in_range(low, len(organisms)) for _ in range(size)]
    return organisms[max(players)]


def organism_from_truncation(
    organisms: list[Organism],
    fraction: float,
    draw_index: int,
) -> Organism:
    """Return the ``draw_index``-th pick from the top ``fraction``.

    Picks cycle deterministically from the best organism downwards.
    """
    _require_organisms(organisms)
    if not 0.0 < fraction <= 1.0:
        raise ConfigurationError(f"Truncation fraction must be in (0, 1], got {fraction}")
    count = max(1, math.ceil(len(organisms) * fraction))
    count = min(count, len(organisms))
    return organisms[len(organisms) - 1 - (draw_index % count)]


def crowded_binary_tournament(
    organisms: list[Organism],
    rng: RandomSource,
) -> Organism:
    """Binary tournament on Pareto rank, then crowding distance.

    Lower rank wins; on equal rank the larger crowding distance wins.
    """
    _require_organisms(organisms)
    first = rng.choice(organisms)
    second = rng.choice(organisms)

    if first.dominance_rank < second.dominance_rank:
        return first
    if second.dominance_rank < first.dominance_rank:
        return second
    if first.crowding_distance > second.crowding_distance:
        return first
    return second


def elites_from_population(
    organisms: list[Organism],
    environment: Environment,
) -> list[Organism]:
    """Top ``number_of_elites`` organisms, each replicated ``number_of_elite_copies`` times.

    Elites are cloned so that later in-place mutation of offspring cannot
    touch them. Requires a sorted population.
    """
    n_elites = environment.number_of_elites
    n_copies = environment.number_of_elite_copies
    if (n_elites * n_copies) % 2 != 0:
        raise ConfigurationError(
            "Must be an even number of elite copies for mating to work correctly."
        )
    if n_elites == 0 or n_copies == 0:
        return []

    top = organisms[-n_elites:]
    elites = []
    for _ in range(n_copies):
        elites.extend(org.clone() for org in top)
    return elites
