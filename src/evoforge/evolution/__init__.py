"""Evolution core: environment, organisms and population epochs."""

from evoforge.evolution.protocol import Genome
from evoforge.evolution.environment import (
    Environment,
    OptimizationSense,
    SelectionKind,
    SelectionMethod,
)
from evoforge.evolution.organism import Organism
from evoforge.evolution.population import EvolutionType, Population, PopulationStats

__all__ = [
    "Genome",
    "Environment",
    "OptimizationSense",
    "SelectionKind",
    "SelectionMethod",
    "Organism",
    "EvolutionType",
    "Population",
    "PopulationStats",
]
