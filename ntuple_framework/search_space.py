"""
NTuple Framework - Search Space Module

A search space describes the discrete candidates an optimizer may propose:
a fixed number of positions (dimensions), each taking one of a finite number
of values. The landscape model only needs it for exact duplicate detection,
which maps every candidate to a unique canonical index.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Sequence

import numpy as np

from .errors import ConfigurationError


def positive_int(name: str, value: Any) -> int:
    """Coerce an integral setting, rejecting fractions and values below 1."""
    v = int(value)
    if v != value:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if v < 1:
        raise ConfigurationError(f"{name} must be >= 1")
    return v


class SearchSpace(Protocol):
    """Descriptor of a discrete search space."""

    @property
    def n_dims(self) -> int:
        ...

    def n_values_at(self, i: int) -> int:
        ...

    def index_of(self, candidate: Sequence[int]) -> int:
        ...


@dataclass(frozen=True)
class UniformSearchSpace:
    """
    Search space where every position has the same number of values.

    Candidates are indexed in mixed radix with position 0 as the least
    significant digit, so ``index_of`` and ``point_at`` are inverse to each
    other over ``[0, size())``.

    Examples
    --------
    >>> space = UniformSearchSpace(n_dims=3, n_values=2)
    >>> space.size()
    8
    >>> space.index_of([1, 0, 1])
    5
    >>> space.point_at(5).tolist()
    [1, 0, 1]
    """

    n_dims: int
    n_values: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "n_dims", positive_int("n_dims", self.n_dims))
        object.__setattr__(self, "n_values", positive_int("n_values", self.n_values))

    def n_values_at(self, i: int) -> int:
        if not 0 <= i < self.n_dims:
            raise IndexError(f"position {i} out of range for n_dims={self.n_dims}")
        return self.n_values

    def size(self) -> int:
        # exact, may exceed int64
        return int(self.n_values) ** int(self.n_dims)

    def index_of(self, candidate: Sequence[int]) -> int:
        values = [int(v) for v in candidate]
        if len(values) != self.n_dims:
            raise ConfigurationError(
                f"candidate has {len(values)} positions, search space has {self.n_dims}"
            )
        index = 0
        for v in reversed(values):
            if not 0 <= v < self.n_values:
                raise ConfigurationError(f"value {v} outside [0, {self.n_values})")
            index = index * self.n_values + v
        return index

    def point_at(self, index: int) -> np.ndarray:
        index = int(index)
        if not 0 <= index < self.size():
            raise IndexError(f"index {index} out of range for space of size {self.size()}")
        out = np.zeros(self.n_dims, dtype=np.int64)
        for i in range(self.n_dims):
            index, out[i] = divmod(index, self.n_values)
        return out

    def random_point(self, rng: np.random.Generator) -> np.ndarray:
        return rng.integers(0, self.n_values, size=self.n_dims, dtype=np.int64)
