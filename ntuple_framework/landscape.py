"""
NTuple Framework - Bandit Landscape Model

This module implements the N-tuple surrogate ("landscape") model used by
discrete search algorithms to estimate the fitness of candidates without
calling the true evaluator, together with a UCB-style exploration bonus.

Every candidate is projected onto each tuple of a fixed tuple set; each
projection is encoded as an exact integer address and keeps its own running
statistics. The fitness estimate of a candidate is the average of the per-tuple
means it hits, and its exploration bonus is the average UCB term over the
visit counts of its addresses.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

import numpy as np

from .errors import ConfigurationError, UnsupportedOperationError
from .search_space import SearchSpace
from .stats import Picker, StatSummary
from .tuples import ConvTupleIndexer, IndexTuple, TupleIndexer, address, address_space_size

logger = logging.getLogger(__name__)

_INT64_MAX = int(np.iinfo(np.int64).max)

# (tuple position in the tuple set, address within that tuple's space)
StatsKey = Tuple[int, int]


class BanditLandscapeModel(Protocol):
    """Capability surface a search driver relies on."""

    def add_point(self, x: Sequence[int], value: float) -> None:
        ...

    def get_mean_estimate(self, x: Sequence[int]) -> float:
        ...

    def get_exploration_estimate(self, x: Sequence[int]) -> float:
        ...

    def get_best_of_sampled(self) -> Optional[np.ndarray]:
        ...

    def get_best_of_all_sampled(self) -> Optional[np.ndarray]:
        ...

    def get_best_solution(self) -> np.ndarray:
        ...

    def get_solutions(self) -> List[np.ndarray]:
        ...

    def n_samples(self) -> int:
        ...

    def n_entries(self) -> int:
        ...

    def set_search_space(self, search_space: Optional[SearchSpace]) -> "BanditLandscapeModel":
        ...

    def get_search_space(self) -> Optional[SearchSpace]:
        ...


class NTupleLandscapeModel:
    """
    N-tuple landscape model over a tuple set supplied by a TupleIndexer.

    Parameters
    ----------
    indexer : TupleIndexer
        Produces the tuple set (e.g. ConvTupleIndexer, FullTupleIndexer).
    n_values : int
        Number of values each position can take (the address radix).
    n_dims : Optional[int]
        Candidate length. Taken from ``indexer.n_dims`` when omitted.
    k_explore : float
        Weight of the exploration bonus.
    epsilon : float
        Added to visit counts so unseen addresses get a finite bonus.
    default_mean_estimate : float
        Estimate returned for a candidate none of whose addresses was seen.
    use_weighted_mean : bool
        If True, per-tuple means are combined weighted by their counts.
    search_space : Optional[SearchSpace]
        Pass-through descriptor used by duplicate rejection.

    Notes
    -----
    ``n_samples`` starts at 1 so the logarithm in the exploration bonus is
    always defined. The statistics table is never pruned; call ``reset()``
    between independent runs.
    """

    def __init__(
        self,
        indexer: TupleIndexer,
        n_values: int,
        *,
        n_dims: Optional[int] = None,
        k_explore: float = 2.0,
        epsilon: float = 0.1,
        default_mean_estimate: float = 0.0,
        use_weighted_mean: bool = False,
        search_space: Optional[SearchSpace] = None,
    ) -> None:
        self.indexer = indexer
        self.n_values = int(n_values)
        if n_dims is None:
            n_dims = getattr(indexer, "n_dims", None)
        self.n_dims: Optional[int] = None if n_dims is None else int(n_dims)
        self.k_explore = float(k_explore)
        self.epsilon = float(epsilon)
        self.default_mean_estimate = float(default_mean_estimate)
        self.use_weighted_mean = bool(use_weighted_mean)
        self.search_space = search_space

        if self.n_values < 1:
            raise ConfigurationError("n_values must be >= 1")
        if self.n_dims is not None and self.n_dims < 1:
            raise ConfigurationError("n_dims must be >= 1")
        if self.k_explore < 0.0:
            raise ConfigurationError("k_explore must be >= 0")
        if not self.epsilon > 0.0:
            raise ConfigurationError("epsilon must be > 0")

        self.tuples: List[IndexTuple] = []
        self.stats: Dict[StatsKey, StatSummary] = {}
        self.solutions: List[np.ndarray] = []
        self._index_arrays: List[np.ndarray] = []
        self._weights: List[Optional[np.ndarray]] = []
        self._picker: Picker[np.ndarray] = Picker()
        self._n_samples = 1
        self.make_indices()

    @classmethod
    def convolutional(
        cls,
        image_width: int,
        image_height: int,
        filter_width: int,
        filter_height: int,
        n_values: int,
        stride: int = 1,
        **kwargs: Any,
    ) -> "NTupleLandscapeModel":
        """Convolutional N-tuple over flattened ``image_width x image_height`` candidates."""
        indexer = ConvTupleIndexer(
            image_width=image_width,
            image_height=image_height,
            filter_width=filter_width,
            filter_height=filter_height,
            stride=stride,
        )
        return cls(indexer, n_values, **kwargs)

    # -------------------------------------------------------------------------
    # Setup
    # -------------------------------------------------------------------------

    def make_indices(self) -> "NTupleLandscapeModel":
        """Rebuild the tuple set from the indexer and clear all statistics."""
        self.tuples = [tuple(int(i) for i in t) for t in self.indexer.make_tuples()]
        self._index_arrays = [np.asarray(t, dtype=np.intp) for t in self.tuples]
        self._weights = []
        for t in self.tuples:
            if address_space_size(len(t), self.n_values) - 1 <= _INT64_MAX:
                self._weights.append(self.n_values ** np.arange(len(t), dtype=np.int64))
            else:
                # too wide for int64, fall back to Python ints
                self._weights.append(None)

        if self.n_dims is not None:
            for t in self.tuples:
                if t and max(t) >= self.n_dims:
                    raise ConfigurationError(
                        f"tuple index {max(t)} out of range for n_dims={self.n_dims}"
                    )

        if self.tuples:
            logger.debug("Made %d index vectors", len(self.tuples))
        else:
            logger.warning("Tuple indexer %r produced no tuples; the model cannot estimate", self.indexer)
        self.reset()
        return self

    def reset(self) -> "NTupleLandscapeModel":
        self._n_samples = 1
        self.stats = {}
        self.solutions = []
        self._picker = Picker()
        return self

    def set_search_space(self, search_space: Optional[SearchSpace]) -> "NTupleLandscapeModel":
        self.search_space = search_space
        return self

    def get_search_space(self) -> Optional[SearchSpace]:
        return self.search_space

    # -------------------------------------------------------------------------
    # Addressing
    # -------------------------------------------------------------------------

    def _require_tuples(self) -> None:
        if not self.tuples:
            raise ConfigurationError(
                f"{self.indexer!r} produced an empty tuple set; check the filter fits the image"
            )

    def _as_candidate(self, x: Sequence[int]) -> np.ndarray:
        arr = np.asarray(x)
        if arr.ndim != 1:
            raise ConfigurationError(f"candidate must be 1-d, got shape {arr.shape}")
        if self.n_dims is not None and arr.shape[0] != self.n_dims:
            raise ConfigurationError(
                f"candidate has {arr.shape[0]} positions, model expects {self.n_dims}"
            )
        if arr.dtype.kind not in "iub":
            if not np.all(np.isfinite(arr)) or not np.all(arr == np.round(arr)):
                raise ConfigurationError("candidate values must be integers")
        arr = arr.astype(np.int64)
        if arr.size and (arr.min() < 0 or arr.max() >= self.n_values):
            raise ConfigurationError(f"candidate values must lie in [0, {self.n_values})")
        return arr

    def _addresses(self, arr: np.ndarray) -> List[int]:
        out: List[int] = []
        for t, idx, w in zip(self.tuples, self._index_arrays, self._weights):
            if w is not None:
                out.append(int(np.dot(arr[idx], w)))
            else:
                out.append(address(arr, t, self.n_values))
        return out

    def addresses(self, x: Sequence[int]) -> List[int]:
        """Address of ``x`` under every tuple, in tuple order."""
        return self._addresses(self._as_candidate(x))

    def address_space_size(self) -> int:
        """Size of the largest per-tuple address space."""
        if not self.tuples:
            return 0
        return address_space_size(max(len(t) for t in self.tuples), self.n_values)

    def get_stats_force_create(self, key: StatsKey) -> StatSummary:
        ss = self.stats.get(key)
        if ss is None:
            ss = StatSummary()
            self.stats[key] = ss
        return ss

    # -------------------------------------------------------------------------
    # Observations
    # -------------------------------------------------------------------------

    def add_point(self, x: Sequence[int], value: float) -> None:
        self._require_tuples()
        arr = self._as_candidate(x)
        v = float(value)
        for k, addr in enumerate(self._addresses(arr)):
            self.get_stats_force_create((k, addr)).add(v)
        p = arr.copy()
        self.solutions.append(p)
        self._picker.add(v, p)
        self._n_samples += 1

    def n_samples(self) -> int:
        return self._n_samples

    def n_entries(self) -> int:
        return len(self.stats)

    # -------------------------------------------------------------------------
    # Estimates
    # -------------------------------------------------------------------------

    def get_mean_estimate(self, x: Sequence[int]) -> float:
        self._require_tuples()
        arr = self._as_candidate(x)
        total = StatSummary("Summary stats exploit")
        for k, addr in enumerate(self._addresses(arr)):
            ss = self.stats.get((k, addr))
            if ss is not None and ss.n > 0:
                if self.use_weighted_mean:
                    total.add_summary(ss)
                else:
                    total.add(ss.mean())
        if total.n == 0:
            return self.default_mean_estimate
        return total.mean()

    def explore(self, n_i: int) -> float:
        """UCB bonus of an address visited ``n_i`` times."""
        return self.k_explore * math.sqrt(math.log(self._n_samples) / (self.epsilon + n_i))

    def get_exploration_estimate(self, x: Sequence[int]) -> float:
        self._require_tuples()
        arr = self._as_candidate(x)
        explore_stats = StatSummary("Summary stats explore")
        for k, addr in enumerate(self._addresses(arr)):
            ss = self.stats.get((k, addr))
            explore_stats.add(self.explore(0 if ss is None else ss.n))
        return explore_stats.mean()

    def get_novelty_stats(self, x: Sequence[int]) -> StatSummary:
        """Visit counts of the addresses of ``x`` (0 for unseen ones)."""
        self._require_tuples()
        arr = self._as_candidate(x)
        novelty = StatSummary("Novelty")
        for k, addr in enumerate(self._addresses(arr)):
            ss = self.stats.get((k, addr))
            novelty.add(0 if ss is None else ss.n)
        return novelty

    # -------------------------------------------------------------------------
    # Best candidates
    # -------------------------------------------------------------------------

    def get_best_of_sampled(self) -> Optional[np.ndarray]:
        """Sampled candidate with the highest true value seen at insertion."""
        best = self._picker.get_best()
        return None if best is None else best.copy()

    def get_best_of_all_sampled(self) -> Optional[np.ndarray]:
        """Sampled candidate with the highest current mean estimate.

        Re-scores the whole history, so it is meant for the end of a run.
        """
        self._require_tuples()
        picker: Picker[np.ndarray] = Picker()
        for p in self.solutions:
            picker.add(self.get_mean_estimate(p), p)
        best = picker.get_best()
        return None if best is None else best.copy()

    def get_solutions(self) -> List[np.ndarray]:
        """Copies of every sampled candidate, in insertion order."""
        return [p.copy() for p in self.solutions]

    def get_best_solution(self) -> np.ndarray:
        raise UnsupportedOperationError(
            f"{type(self).__name__} does not search its address space for a best solution"
        )

    def get_best_of_sampled_plus_neighbours(self, n_neighbours: int) -> np.ndarray:
        raise UnsupportedOperationError(
            f"{type(self).__name__} does not sample neighbours of stored solutions"
        )
