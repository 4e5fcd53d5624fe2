from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from evoforge.evolution.environment import Environment


@runtime_checkable
class Genome(Protocol):
    """Protocol for evolvable genomes (trees, sequences, permutations, ...).

    Implementations must also define structural ``__eq__`` and ``__hash__``;
    genomes are used as fitness-cache keys.
    """

    def mutate(self, rate: float, environment: "Environment") -> None:
        """Perturb in place; each independent decision fires with probability ``rate``."""
        ...

    def crossover(
        self, partner: Any, rate: float, environment: "Environment"
    ) -> tuple[Any, Any]:
        """Recombine with ``partner``; with probability ``1 - rate`` return both unchanged."""
        ...

    def copy(self) -> Any:
        """Deep copy sharing no mutable state with the original."""
        ...


def mutation_rate_for(genome: Any, environment: "Environment") -> float:
    """Individual mutation-rate override, else the environment default."""
    rate = getattr(genome, "individual_mutation_rate", None)
    return environment.mutation_rate if rate is None else rate


def crossover_rate_for(genome: Any, environment: "Environment") -> float:
    """Individual crossover-rate override, else the environment default."""
    rate = getattr(genome, "individual_crossover_rate", None)
    return environment.crossover_rate if rate is None else rate
