"""Run configuration for the command line, validated with pydantic."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from evoforge.engine.scheduler import EvolutionConfig
from evoforge.evolution.environment import Environment, OptimizationSense, SelectionMethod
from evoforge.random_source import RandomSource

SelectionName = Literal["roulette", "tournament", "truncation", "multi-objective"]


class RunConfig(BaseModel):
    """Everything needed to run one built-in problem."""

    model_config = ConfigDict(extra="forbid")

    problem: Literal["symbolic-regression", "ordering", "zdt1-like"] = "symbolic-regression"
    seed: int | None = Field(default=None, ge=0)
    population_size: int = Field(default=50, ge=2)
    selection: SelectionName = "tournament"
    tournament_size: int = Field(default=3, ge=1)
    truncation_fraction: float = Field(default=0.5, gt=0.0, le=1.0)
    selectable_proportion: float = Field(default=1.0, gt=0.0, le=1.0)
    mutation_rate: float = Field(default=0.1, ge=0.0, le=1.0)
    crossover_rate: float = Field(default=0.8, ge=0.0, le=1.0)
    number_of_elites: int = Field(default=2, ge=0)
    number_of_elite_copies: int = Field(default=1, ge=0)
    epochs: int = Field(default=20, ge=0)
    workers: int | None = Field(default=None, ge=1)
    timeout: float | None = Field(default=None, gt=0.0)
    use_cache: bool = True
    sense: Literal["minimize", "maximize"] | None = None
    parameters: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_elites(self) -> "RunConfig":
        if (self.number_of_elites * self.number_of_elite_copies) % 2 != 0:
            raise ValueError("number_of_elites * number_of_elite_copies must be even")
        return self

    @classmethod
    def from_file(cls, path: str | Path) -> "RunConfig":
        """Load and validate a JSON configuration file."""
        return cls.model_validate_json(Path(path).read_text())

    def selection_method(self) -> SelectionMethod:
        if self.selection == "roulette":
            return SelectionMethod.roulette()
        if self.selection == "truncation":
            return SelectionMethod.truncation(self.truncation_fraction)
        if self.selection == "multi-objective":
            return SelectionMethod.multi_objective()
        return SelectionMethod.tournament(self.tournament_size)

    def to_environment(
        self, default_sense: OptimizationSense = OptimizationSense.MAXIMIZE
    ) -> Environment:
        """Build the environment; ``default_sense`` applies when ``sense`` is unset."""
        random_source = (
            RandomSource(self.seed) if self.seed is not None else RandomSource.from_entropy()
        )
        return Environment(
            population_size=self.population_size,
            selection_method=self.selection_method(),
            selectable_proportion=self.selectable_proportion,
            mutation_rate=self.mutation_rate,
            crossover_rate=self.crossover_rate,
            number_of_elites=self.number_of_elites,
            number_of_elite_copies=self.number_of_elite_copies,
            parameters=dict(self.parameters),
            random_source=random_source,
            sense=OptimizationSense(self.sense) if self.sense else default_sense,
        )

    def to_evolution_config(self) -> EvolutionConfig:
        return EvolutionConfig(
            max_epochs=self.epochs,
            workers=self.workers,
            evaluation_timeout=self.timeout,
            use_cache=self.use_cache,
        )
