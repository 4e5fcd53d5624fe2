"""Thread-safe memo of evaluation results keyed by genome value.

Scalar fitness and objective vectors live in separate tables. Entries are
written whole and may be overwritten; last write wins, which is only sound
when evaluators are pure functions of the genome.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Hashable


@dataclass
class CacheStats:
    """Lookup counters."""

    hits: int = 0
    misses: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


class FitnessCache:
    """Caches fitness values and objective vectors by structural genome equality."""

    def __init__(self) -> None:
        self._single: dict[Hashable, float] = {}
        self._multi: dict[Hashable, list[float]] = {}
        self._lock = threading.Lock()
        self.stats = CacheStats()

    def fitness(self, genome: Any) -> float | None:
        """Cached scalar fitness for ``genome``, or None."""
        with self._lock:
            value = self._single.get(genome)
            self._count(value is not None)
            return value

    def objectives(self, genome: Any) -> list[float] | None:
        """Cached objective vector for ``genome`` (a fresh list), or None."""
        with self._lock:
            values = self._multi.get(genome)
            self._count(values is not None)
            return list(values) if values is not None else None

    def set_fitness(self, value: float, genome: Any) -> None:
        key = genome.copy()
        with self._lock:
            self._single[key] = value

    def set_objectives(self, values: list[float], genome: Any) -> None:
        key = genome.copy()
        with self._lock:
            self._multi[key] = list(values)

    def clear(self) -> None:
        """Drop every entry and reset the counters."""
        with self._lock:
            self._single.clear()
            self._multi.clear()
            self.stats = CacheStats()

    def _count(self, hit: bool) -> None:
        if hit:
            self.stats.hits += 1
        else:
            self.stats.misses += 1

    def __len__(self) -> int:
        with self._lock:
            return len(self._single) + len(self._multi)

    def __repr__(self) -> str:
        return (
            f"FitnessCache(entries={len(self)}, hits={self.stats.hits}, "
            f"misses={self.stats.misses})"
        )
