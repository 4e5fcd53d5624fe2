"""Errors raised by genetic operations."""


class GeneticError(Exception):
    """Base class for all evoforge errors."""


class ConfigurationError(GeneticError, ValueError):
    """Invalid environment or template configuration.

    Fatal to the current operation: never retried, never silently corrected.
    """


class EvolutionFailed(GeneticError):
    """An evolution step could not run (e.g. empty or unevaluated population)."""


class EvaluationError(GeneticError):
    """A single fitness evaluation failed or timed out."""
