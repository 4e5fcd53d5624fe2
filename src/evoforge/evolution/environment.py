"""Evolution environment: the configuration shared by every genetic operator.

An environment is read-only for the duration of a run. Gene-specific tuning
lives in the free-form ``parameters`` bag, whose values are restricted to
str, bool, int, float, list and dict.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from evoforge.exceptions import ConfigurationError
from evoforge.random_source import RandomSource

ParameterValue = Union[str, bool, int, float, list, dict]

_PARAMETER_TYPES = (str, bool, int, float, list, dict)


class OptimizationSense(Enum):
    """Whether lower or higher results are better for a whole run."""

    MINIMIZE = "minimize"
    MAXIMIZE = "maximize"

    def score(self, value: float) -> float:
        """Map a raw result onto a scale where higher is always better."""
        return value if self is OptimizationSense.MAXIMIZE else -value


class SelectionKind(Enum):
    ROULETTE = "roulette"
    TOURNAMENT = "tournament"
    TRUNCATION = "truncation"
    MULTI_OBJECTIVE = "multi_objective"


@dataclass(frozen=True)
class SelectionMethod:
    """Parent selection method and its parameters.

    Use the constructors ``roulette()``, ``tournament(size)``,
    ``truncation(fraction)`` and ``multi_objective()``.
    """

    kind: SelectionKind
    tournament_size: int = 3
    fraction: float = 0.5

    def __post_init__(self) -> None:
        if self.kind is SelectionKind.TOURNAMENT and self.tournament_size < 1:
            raise ConfigurationError(
                f"Tournament size must be at least 1, got {self.tournament_size}"
            )
        if self.kind is SelectionKind.TRUNCATION and not 0.0 < self.fraction <= 1.0:
            raise ConfigurationError(
                f"Truncation fraction must be in (0, 1], got {self.fraction}"
            )

    @classmethod
    def roulette(cls) -> "SelectionMethod":
        return cls(SelectionKind.ROULETTE)

    @classmethod
    def tournament(cls, size: int = 3) -> "SelectionMethod":
        return cls(SelectionKind.TOURNAMENT, tournament_size=size)

    @classmethod
    def truncation(cls, fraction: float = 0.5) -> "SelectionMethod":
        return cls(SelectionKind.TRUNCATION, fraction=fraction)

    @classmethod
    def multi_objective(cls) -> "SelectionMethod":
        return cls(SelectionKind.MULTI_OBJECTIVE)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "tournament_size": self.tournament_size,
            "fraction": self.fraction,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SelectionMethod":
        try:
            kind = SelectionKind(data["kind"])
        except ValueError as e:
            raise ConfigurationError(f"Unknown selection method: {data['kind']!r}") from e
        return cls(
            kind=kind,
            tournament_size=data.get("tournament_size", 3),
            fraction=data.get("fraction", 0.5),
        )

    def __str__(self) -> str:
        if self.kind is SelectionKind.TOURNAMENT:
            return f"tournament({self.tournament_size})"
        if self.kind is SelectionKind.TRUNCATION:
            return f"truncation({self.fraction})"
        return self.kind.value


@dataclass
class Environment:
    """Configuration for a population's evolution.

    Attributes:
        population_size: Target number of organisms per generation
        selection_method: Parent selection method
        selectable_proportion: Top fraction of the population eligible for tournaments
        mutation_rate: Default per-decision mutation probability
        crossover_rate: Default probability of recombining a parent pair
        number_of_elites: Top organisms carried into the next generation
        number_of_elite_copies: Copies of each elite (elites * copies must be even)
        parameters: Named parameter bag for gene-specific tuning
        random_source: Random stream shared by all operators
        sense: Optimization direction for fitness and objectives
        structural_mutation_deletion_rate: Tree genomes: chance a mutated non-leaf collapses
        structural_mutation_addition_rate: Tree genomes: chance a mutated leaf grows
        max_generation_depth: Tree genomes: past this depth, generation emits leaves only
        leaf_bias: Tree genomes: chance a generated node is a leaf above that depth
    """

    population_size: int = 100
    selection_method: SelectionMethod = field(
        default_factory=lambda: SelectionMethod.tournament(3)
    )
    selectable_proportion: float = 1.0
    mutation_rate: float = 0.05
    crossover_rate: float = 0.8
    number_of_elites: int = 2
    number_of_elite_copies: int = 1
    parameters: dict[str, ParameterValue] = field(default_factory=dict)
    random_source: RandomSource = field(default_factory=RandomSource.from_entropy)
    sense: OptimizationSense = OptimizationSense.MAXIMIZE
    structural_mutation_deletion_rate: float = 0.1
    structural_mutation_addition_rate: float = 0.1
    max_generation_depth: int = 3
    leaf_bias: float = 0.5

    def __post_init__(self) -> None:
        if self.population_size < 1:
            raise ConfigurationError(
                f"Population size must be at least 1, got {self.population_size}"
            )
        for name in (
            "selectable_proportion",
            "mutation_rate",
            "crossover_rate",
            "structural_mutation_deletion_rate",
            "structural_mutation_addition_rate",
            "leaf_bias",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name} must be in [0, 1], got {value}")
        if self.number_of_elites < 0 or self.number_of_elite_copies < 0:
            raise ConfigurationError("Elite counts cannot be negative")
        for key, value in self.parameters.items():
            if not isinstance(value, _PARAMETER_TYPES):
                raise ConfigurationError(
                    f"Parameter {key!r} has unsupported type {type(value).__name__}"
                )

    def parameter(self, key: str, default: Any = None, expected: type | tuple[type, ...] | None = None) -> Any:
        """Look up a named parameter, optionally checking its type."""
        value = self.parameters.get(key, default)
        if expected is not None and value is not None and not isinstance(value, expected):
            raise ConfigurationError(
                f"Parameter {key!r} should be {expected}, got {type(value).__name__}"
            )
        return value

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization.

        The random stream is stored as its seed, so a restored environment
        replays the run from the start rather than from the current state.
        """
        return {
            "population_size": self.population_size,
            "selection_method": self.selection_method.to_dict(),
            "selectable_proportion": self.selectable_proportion,
            "mutation_rate": self.mutation_rate,
            "crossover_rate": self.crossover_rate,
            "number_of_elites": self.number_of_elites,
            "number_of_elite_copies": self.number_of_elite_copies,
            "parameters": dict(self.parameters),
            "seed": self.random_source.seed,
            "sense": self.sense.value,
            "structural_mutation_deletion_rate": self.structural_mutation_deletion_rate,
            "structural_mutation_addition_rate": self.structural_mutation_addition_rate,
            "max_generation_depth": self.max_generation_depth,
            "leaf_bias": self.leaf_bias,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Environment":
        """Create from dictionary; a missing seed draws one from entropy."""
        seed = data.get("seed")
        return cls(
            population_size=data.get("population_size", 100),
            selection_method=SelectionMethod.from_dict(data["selection_method"])
            if "selection_method" in data
            else SelectionMethod.tournament(3),
            selectable_proportion=data.get("selectable_proportion", 1.0),
            mutation_rate=data.get("mutation_rate", 0.05),
            crossover_rate=data.get("crossover_rate", 0.8),
            number_of_elites=data.get("number_of_elites", 2),
            number_of_elite_copies=data.get("number_of_elite_copies", 1),
            parameters=dict(data.get("parameters", {})),
            random_source=RandomSource(seed) if seed is not None else RandomSource.from_entropy(),
            sense=OptimizationSense(data.get("sense", OptimizationSense.MAXIMIZE.value)),
            structural_mutation_deletion_rate=data.get("structural_mutation_deletion_rate", 0.1),
            structural_mutation_addition_rate=data.get("structural_mutation_addition_rate", 0.1),
            max_generation_depth=data.get("max_generation_depth", 3),
            leaf_bias=data.get("leaf_bias", 0.5),
        )

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> "Environment":
        """Create from JSON string."""
        return cls.from_dict(json.loads(json_str))
