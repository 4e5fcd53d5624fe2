"""Selection and Pareto-ranking operators.

Selection functions sample parents from a population sorted by goodness;
the NSGA-II functions rank organisms into fronts for survival selection.
"""

from evoforge.operators.selection import (
    crowded_binary_tournament,
    elites_from_population,
    organism_from_roulette,
    organism_from_tournament,
    organism_from_truncation,
    sort_by_fitness,
)
from evoforge.operators.nsga2 import (
    assign_crowding_distance,
    dominates,
    fast_non_dominated_sort,
    sort_and_truncate,
)

__all__ = [
    "crowded_binary_tournament",
    "elites_from_population",
    "organism_from_roulette",
    "organism_from_tournament",
    "organism_from_truncation",
    "sort_by_fitness",
    "assign_crowding_distance",
    "dominates",
    "fast_non_dominated_sort",
    "sort_and_truncate",
]
