"""Deterministic, forkable random source shared by all genetic operators.

A single 64-bit seed fully determines the output sequence: numpy's
``SeedSequence`` mixing expands it into the full PCG64 state. Every entry
point holds a lock so a shared instance can be used from several threads;
for reproducible parallel work, ``fork`` a child stream per task instead.
"""

from __future__ import annotations

import math
import threading
from typing import Sequence, TypeVar

import numpy as np

from evoforge.exceptions import ConfigurationError

T = TypeVar("T")

MASK_64 = (1 << 64) - 1

# Odeh & Evans (1974) rational approximation coefficients.
_P = (0.322232431088, 1.0, 0.342242088547, 0.204231210245e-1, 0.453642210148e-4)
_Q = (0.099348462606, 0.588581570495, 0.531103462366, 0.103537752850, 0.385607006340e-2)


class RandomSource:
    """Thread-safe random number provider.

    Attributes:
        seed: The 64-bit seed this source was created from
    """

    def __init__(self, seed: int) -> None:
        self.seed = int(seed) & MASK_64
        self._bit_generator = np.random.PCG64(self.seed)
        self._generator = np.random.Generator(self._bit_generator)
        self._lock = threading.Lock()

    @classmethod
    def from_entropy(cls) -> "RandomSource":
        """Create a source seeded from operating-system entropy."""
        entropy = np.random.SeedSequence().entropy
        return cls(int(entropy) & MASK_64)

    def fork(self, index: int) -> "RandomSource":
        """Create an independent child stream.

        The child seed is the next raw 64-bit value of this stream combined
        with ``index``, so forks taken in the same order are reproducible.
        """
        with self._lock:
            raw = int(self._bit_generator.random_raw())
        return RandomSource(raw ^ (index & MASK_64))

    def next_raw(self) -> int:
        """Return the next raw 64-bit value."""
        with self._lock:
            return int(self._bit_generator.random_raw())

    # Sampling

    def uniform(self) -> float:
        """Return a float in [0, 1)."""
        with self._lock:
            return float(self._generator.random())

    def uniform_in_range(self, low: float, high: float) -> float:
        """Return a float in [low, high)."""
        if high < low:
            raise ConfigurationError(f"Empty range [{low}, {high})")
        with self._lock:
            return low + (high - low) * float(self._generator.random())

    def int_in_range(self, low: int, high: int) -> int:
        """Return an int in the half-open range [low, high)."""
        if high <= low:
            raise ConfigurationError(f"Empty integer range [{low}, {high})")
        with self._lock:
            return int(self._generator.integers(low, high))

    def choice(self, collection: Sequence[T]) -> T:
        """Return a random element of a non-empty sequence."""
        if len(collection) == 0:
            raise ConfigurationError("Cannot choose from an empty collection")
        return collection[self.int_in_range(0, len(collection))]

    def shuffle(self, items: list[T]) -> list[T]:
        """Shuffle a list in place (Fisher-Yates) and return it."""
        for i in range(len(items) - 1, 0, -1):
            j = self.int_in_range(0, i + 1)
            items[i], items[j] = items[j], items[i]
        return items

    def sample_indices(self, k: int, n: int) -> list[int]:
        """Draw ``k`` distinct indices from ``range(n)``."""
        if not 0 <= k <= n:
            raise ConfigurationError(f"Cannot sample {k} distinct indices from {n}")
        return self.shuffle(list(range(n)))[:k]

    def gaussian(self, mu: float = 0.0, sigma: float = 1.0) -> float:
        """Sample a normal variate via rational-approximation inverse transform."""
        with self._lock:
            u = float(self._generator.random())

        tail = u if u < 0.5 else 1.0 - u
        # u == 0 would make log() blow up
        tail = max(tail, 1e-300)
        t = math.sqrt(-2.0 * math.log(tail))
        p = _P[0] + t * (_P[1] + t * (_P[2] + t * (_P[3] + t * _P[4])))
        q = _Q[0] + t * (_Q[1] + t * (_Q[2] + t * (_Q[3] + t * _Q[4])))
        z = (p / q) - t if u < 0.5 else t - (p / q)
        return mu + sigma * z

    def __deepcopy__(self, memo: dict) -> "RandomSource":
        # Shared by reference across everything that copies an environment.
        return self

    def __repr__(self) -> str:
        return f"RandomSource(seed={self.seed})"
