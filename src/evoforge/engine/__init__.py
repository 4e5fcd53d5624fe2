"""Evaluation engine: fitness cache, evaluators, observers and the scheduler."""

from evoforge.engine.cache import CacheStats, FitnessCache
from evoforge.engine.evaluator import FitnessEvaluator, FitnessResult, FunctionEvaluator
from evoforge.engine.observer import EvolutionObserver, LoggingObserver, RecordingObserver
from evoforge.engine.scheduler import EvolutionConfig, GeneticAlgorithm

__all__ = [
    "CacheStats",
    "FitnessCache",
    "FitnessEvaluator",
    "FitnessResult",
    "FunctionEvaluator",
    "EvolutionObserver",
    "LoggingObserver",
    "RecordingObserver",
    "EvolutionConfig",
    "GeneticAlgorithm",
]
