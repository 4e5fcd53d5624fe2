"""
evoforge: evolutionary optimization engine.

Evolves populations of genomes (expression trees, sequences, permutations)
by selection, recombination and mutation, with:
- Concurrent, cached fitness evaluation
- NSGA-II Pareto ranking for multi-objective runs
- Array-encoded expression trees with O(1) subtree addressing
"""

__version__ = "0.1.0"

from evoforge.random_source import RandomSource
from evoforge.exceptions import (
    ConfigurationError,
    EvaluationError,
    EvolutionFailed,
    GeneticError,
)
from evoforge.evolution import (
    Environment,
    EvolutionType,
    Organism,
    OptimizationSense,
    Population,
    SelectionMethod,
)
from evoforge.engine import (
    EvolutionConfig,
    FitnessCache,
    FitnessEvaluator,
    FunctionEvaluator,
    GeneticAlgorithm,
)

__all__ = [
    "__version__",
    "RandomSource",
    "GeneticError",
    "ConfigurationError",
    "EvolutionFailed",
    "EvaluationError",
    "Environment",
    "EvolutionType",
    "Organism",
    "OptimizationSense",
    "Population",
    "SelectionMethod",
    "EvolutionConfig",
    "FitnessCache",
    "FitnessEvaluator",
    "FunctionEvaluator",
    "GeneticAlgorithm",
]
