"""NTuple Framework - Running Statistics

Additive statistics records used by the landscape model (one per observed
address) and a small max-tracking selector.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class StatSummary:
    """Running count/mean/spread of a stream of values."""

    name: str = ""
    n: int = 0
    sum: float = 0.0
    sum_sq: float = 0.0
    min: float = math.inf
    max: float = -math.inf

    def add(self, value: float) -> "StatSummary":
        v = float(value)
        self.n += 1
        self.sum += v
        self.sum_sq += v * v
        if v < self.min:
            self.min = v
        if v > self.max:
            self.max = v
        return self

    def add_summary(self, other: "StatSummary") -> "StatSummary":
        """Merge another record; the merged mean is weighted by count."""
        if other.n <= 0:
            return self
        self.n += other.n
        self.sum += other.sum
        self.sum_sq += other.sum_sq
        self.min = min(self.min, other.min)
        self.max = max(self.max, other.max)
        return self

    def mean(self) -> float:
        if self.n <= 0:
            return 0.0
        return self.sum / self.n

    def sd(self) -> float:
        if self.n <= 1:
            return 0.0
        mean = self.sum / self.n
        # sample variance
        var = (self.sum_sq - self.n * mean * mean) / (self.n - 1)
        return math.sqrt(max(0.0, var))

    def std_err(self) -> float:
        if self.n <= 0:
            return 0.0
        return self.sd() / math.sqrt(self.n)

    def __str__(self) -> str:
        if self.n == 0:
            return f"{self.name} n=0"
        return (
            f"{self.name} n={self.n} mean={self.mean():.4f} sd={self.sd():.4f} "
            f"se={self.std_err():.4f} min={self.min:.4f} max={self.max:.4f}"
        ).strip()


class Picker(Generic[T]):
    """Keeps the item with the highest score seen so far.

    Ties keep the first item added.
    """

    def __init__(self) -> None:
        self.n = 0
        self.best_score: Optional[float] = None
        self._best: Optional[T] = None

    def add(self, score: float, item: T) -> None:
        s = float(score)
        self.n += 1
        if self.best_score is None or s > self.best_score:
            self.best_score = s
            self._best = item

    def get_best(self) -> Optional[T]:
        return self._best
