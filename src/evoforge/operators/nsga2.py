"""NSGA-II ranking engine: Pareto dominance, fronts and crowding distance.

Pure functions over evaluated organisms. The default convention is
MINIMIZATION (lower is better per objective); pass
``OptimizationSense.MAXIMIZE`` to rank the other way round.

Organisms without an objective vector fall back to their scalar fitness as
a single objective.

Based on:
- Deb, Pratap, Agarwal & Meyarivan (2002) "A Fast and Elitist Multiobjective
  Genetic Algorithm: NSGA-II", IEEE TEC 6(2), 182-197
"""

from __future__ import annotations

import numpy as np

from evoforge.evolution.environment import OptimizationSense
from evoforge.evolution.organism import Organism
from evoforge.exceptions import ConfigurationError


def _objective_vector(organism: Organism) -> list[float]:
    if organism.objectives is not None:
        return list(organism.objectives)
    return [organism.fitness or 0.0]


def dominates(
    p: Organism,
    q: Organism,
    sense: OptimizationSense = OptimizationSense.MINIMIZE,
) -> bool:
    """Check if ``p`` Pareto-dominates ``q``.

    Dominates means: no worse in every objective and strictly better in at
    least one. Irreflexive and asymmetric.
    """
    p_obj = _objective_vector(p)
    q_obj = _objective_vector(q)
    if p.objectives is None or q.objectives is None or len(p_obj) != len(q_obj):
        p_obj = [p.fitness or 0.0]
        q_obj = [q.fitness or 0.0]

    better_in_any = False
    for p_val, q_val in zip(p_obj, q_obj):
        p_score = -sense.score(p_val)
        q_score = -sense.score(q_val)
        if p_score > q_score:
            return False
        if p_score < q_score:
            better_in_any = True
    return better_in_any


def _build_objective_matrix(
    organisms: list[Organism], sense: OptimizationSense
) -> np.ndarray:
    """Matrix of shape (n, m), oriented so that lower is better."""
    vectors = [_objective_vector(org) for org in organisms]
    lengths = {len(v) for v in vectors}
    all_vectors = all(org.objectives is not None for org in organisms)
    if not all_vectors or len(lengths) > 1:
        vectors = [[org.fitness or 0.0] for org in organisms]

    matrix = np.asarray(vectors, dtype=float)
    if sense is OptimizationSense.MAXIMIZE:
        matrix = -matrix
    return matrix


def _dominance_matrix(matrix: np.ndarray) -> np.ndarray:
    """Boolean matrix where [i, j] means i dominates j (minimization)."""
    leq = np.all(matrix[:, None, :] <= matrix[None, :, :], axis=2)
    lt = np.any(matrix[:, None, :] < matrix[None, :, :], axis=2)
    dominance = leq & lt
    np.fill_diagonal(dominance, False)
    return dominance


def fast_non_dominated_sort(
    organisms: list[Organism],
    sense: OptimizationSense = OptimizationSense.MINIMIZE,
) -> list[list[int]]:
    """Group organism indices into Pareto fronts.

    Front 0 holds the organisms nobody dominates; each subsequent front is
    peeled off by decrementing the domination counts of the sets dominated
    by the previous front.

    Args:
        organisms: Evaluated organisms
        sense: Optimization direction

    Returns:
        List of fronts, each a list of indices into ``organisms``
    """
    size = len(organisms)
    if size == 0:
        return []

    dominance = _dominance_matrix(_build_objective_matrix(organisms, sense))

    # dominated_sets[p]: organisms p dominates; counts[p]: organisms dominating p
    dominated_sets = [np.flatnonzero(dominance[p]).tolist() for p in range(size)]
    counts = dominance.sum(axis=0).astype(int).tolist()

    fronts: list[list[int]] = []
    current = [p for p in range(size) if counts[p] == 0]
    while current:
        fronts.append(current)
        next_front = []
        for p in current:
            for q in dominated_sets[p]:
                counts[q] -= 1
                if counts[q] == 0:
                    next_front.append(q)
        current = next_front

    return fronts


def assign_crowding_distance(front: list[Organism]) -> None:
    """Compute crowding distances for one front, in place.

    For each objective the two boundary members get infinite distance;
    interior members accumulate their neighbours' normalized gap. Objectives
    with zero range contribute nothing to interior members.
    """
    if not front:
        return

    for organism in front:
        organism.crowding_distance = 0.0

    vectors = [_objective_vector(org) for org in front]
    n_objectives = min(len(v) for v in vectors)
    size = len(front)

    for m in range(n_objectives):
        order = sorted(range(size), key=lambda i: vectors[i][m])

        front[order[0]].crowding_distance = float("inf")
        front[order[-1]].crowding_distance = float("inf")

        value_range = vectors[order[-1]][m] - vectors[order[0]][m]
        if value_range <= 0:
            continue

        for k in range(1, size - 1):
            gap = vectors[order[k + 1]][m] - vectors[order[k - 1]][m]
            front[order[k]].crowding_distance += gap / value_range


def sort_and_truncate(
    organisms: list[Organism],
    n: int,
    sense: OptimizationSense = OptimizationSense.MINIMIZE,
) -> list[Organism]:
    """Survival selection: keep the best ``n`` organisms by front, then crowding.

    Whole fronts are appended (assigning rank and crowding distance) while
    they fit; the front that would overflow is sorted by descending crowding
    distance and only its most isolated members are kept.
    """
    if n < 0:
        raise ConfigurationError(f"Cannot truncate to a negative size ({n})")

    fronts = fast_non_dominated_sort(organisms, sense)
    survivors: list[Organism] = []

    for rank, indices in enumerate(fronts):
        if len(survivors) >= n:
            break

        front = [organisms[i] for i in indices]
        assign_crowding_distance(front)
        for organism in front:
            organism.dominance_rank = rank

        if len(survivors) + len(front) <= n:
            survivors.extend(front)
        else:
            front.sort(key=lambda org: org.crowding_distance, reverse=True)
            survivors.extend(front[: n - len(survivors)])
            break

    return survivors
