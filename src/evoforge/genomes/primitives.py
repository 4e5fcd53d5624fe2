"""Primitive genes: a real value and a discrete choice.

Genes share the genome contract (``mutate`` / ``copy``) so they can be
collected into a ``SequenceGenome``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Hashable, Sequence

from evoforge.evolution.environment import Environment
from evoforge.exceptions import ConfigurationError


class ContinuousMutationType(Enum):
    """How a real-valued gene is perturbed."""

    UNIFORM = "uniform"    # add U(-size, size)
    GAUSSIAN = "gaussian"  # add N(0, size)


class ContinuousParameter:
    """Keys into ``Environment.parameters`` read by ``ContinuousGene``."""

    MUTATION_SIZE = "mutation_size"  # float, default 0.1
    MUTATION_TYPE = "mutation_type"  # "uniform" | "gaussian"


class ContinuousGene:
    """A single evolvable real value."""

    def __init__(self, value: float) -> None:
        self.value = float(value)

    def mutate(self, rate: float, environment: Environment) -> None:
        rng = environment.random_source
        if rng.uniform() >= rate:
            return

        size = float(
            environment.parameter(ContinuousParameter.MUTATION_SIZE, 0.1, (int, float))
        )
        raw_type = environment.parameter(
            ContinuousParameter.MUTATION_TYPE, ContinuousMutationType.UNIFORM.value, str
        )
        try:
            mutation_type = ContinuousMutationType(raw_type)
        except ValueError as e:
            raise ConfigurationError(f"Unknown continuous mutation type: {raw_type!r}") from e

        if mutation_type is ContinuousMutationType.UNIFORM:
            self.value += rng.uniform_in_range(-size, size)
        else:
            self.value += rng.gaussian(0.0, size)

    def to_dict(self) -> dict:
        return {"type": "continuous", "value": self.value}

    @classmethod
    def from_dict(cls, data: dict) -> "ContinuousGene":
        return cls(data["value"])

    def copy(self) -> "ContinuousGene":
        return ContinuousGene(self.value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContinuousGene):
            return NotImplemented
        return self.value == other.value

    def __hash__(self) -> int:
        return hash(("continuous", self.value))

    def __repr__(self) -> str:
        return f"ContinuousGene({self.value!r})"


class DiscreteChoiceGene:
    """A gene holding one option out of a fixed set of choices."""

    def __init__(self, choice: Hashable, choices: Sequence[Hashable]) -> None:
        self.choices = tuple(choices)
        if choice not in self.choices:
            raise ConfigurationError(f"{choice!r} is not one of {self.choices}")
        self.choice = choice

    def mutate(self, rate: float, environment: Environment) -> None:
        rng = environment.random_source
        if rng.uniform() >= rate:
            return
        alternatives = [c for c in self.choices if c != self.choice]
        if alternatives:
            self.choice = rng.choice(alternatives)

    def to_dict(self) -> dict:
        return {"type": "choice", "choice": self.choice, "choices": list(self.choices)}

    @classmethod
    def from_dict(cls, data: dict) -> "DiscreteChoiceGene":
        return cls(data["choice"], data["choices"])

    def copy(self) -> "DiscreteChoiceGene":
        return DiscreteChoiceGene(self.choice, self.choices)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DiscreteChoiceGene):
            return NotImplemented
        return self.choice == other.choice and self.choices == other.choices

    def __hash__(self) -> int:
        return hash(("choice", self.choice, self.choices))

    def __repr__(self) -> str:
        return f"DiscreteChoiceGene({self.choice!r})"


def continuous_values(genes: Sequence[Any]) -> list[float]:
    """Extract values from a sequence of continuous genes."""
    return [gene.value for gene in genes]


def gene_from_dict(data: dict) -> Any:
    """Rebuild a primitive gene from its ``to_dict`` form."""
    gene_type = data.get("type")
    if gene_type == "continuous":
        return ContinuousGene.from_dict(data)
    if gene_type == "choice":
        return DiscreteChoiceGene.from_dict(data)
    raise ConfigurationError(f"Unknown gene type: {gene_type!r}")
