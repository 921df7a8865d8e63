"""
NTuple Framework - Adaptive Probability Model

Per-position categorical distributions used to generate discrete candidate
values and reinforced from pairwise winner/loser outcomes.

Each update moves a fixed amount of probability mass (1/K) from the losing
value to the winning value. The transfer is clamped to the mass the loser
still has and the vector is renormalised afterwards, so probabilities stay in
[0, 1] and sum to 1 however many updates are applied.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np

from .errors import ConfigurationError, DistributionError


class GeneModel:
    """
    Categorical distribution over the values of one position.

    Parameters
    ----------
    n_values : int
        Number of values the position can take.
    k : float
        Inverse of the probability mass moved by one update.
    rng : Optional[np.random.Generator]
        Generator shared with the owning model; created from ``seed`` if None.
    seed : Optional[int]
        Seed used only when ``rng`` is None.
    init : int
        Pseudo-count of the win/count tallies after a reset.
    """

    def __init__(
        self,
        n_values: int,
        *,
        k: float = 2000.0,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
        init: int = 100,
    ) -> None:
        self.n_values = int(n_values)
        self.k = float(k)
        self.init = int(init)
        self.rng = rng if rng is not None else np.random.default_rng(seed)

        if self.n_values < 1:
            raise ConfigurationError("n_values must be >= 1")
        if not self.k > 0.0:
            raise ConfigurationError("k must be > 0")
        if self.init < 1:
            raise ConfigurationError("init must be >= 1")

        self.p = np.zeros(self.n_values, dtype=float)
        self.n_wins = np.zeros(self.n_values, dtype=float)
        self.count = np.zeros(self.n_values, dtype=float)
        self.reset_stats()

    @property
    def probabilities(self) -> np.ndarray:
        return self.p.copy()

    def _check_value(self, v: int) -> int:
        v = int(v)
        if not 0 <= v < self.n_values:
            raise ConfigurationError(f"value {v} outside [0, {self.n_values})")
        return v

    def generate(self) -> int:
        """Sample a value from the current distribution."""
        x = float(self.rng.random())
        # first index whose cumulative mass reaches x
        i = int(np.searchsorted(np.cumsum(self.p), x, side="left"))
        if i >= self.n_values:
            raise DistributionError(
                f"Failed to return a valid option: draw {x:.6f} exceeds total mass {float(np.sum(self.p)):.6f}"
            )
        return i

    def generate_by_win_rate(self) -> int:
        """Pick the value maximising ``uniform * wins / count``."""
        scores = self.rng.random(self.n_values) * self.n_wins / self.count
        return int(np.argmax(scores))

    def update(self, winner: int, loser: int, weight: float = 1.0) -> None:
        winner = self._check_value(winner)
        loser = self._check_value(loser)
        w = float(weight)

        self.n_wins[winner] += w
        self.count[winner] += w
        self.count[loser] += w

        if winner == loser:
            return
        step = min(1.0 / self.k, float(self.p[loser]))
        self.p[winner] += step
        self.p[loser] -= step
        self.p /= np.sum(self.p)

    def argmax(self) -> int:
        """Most probable value; exact ties are broken at random."""
        dithered = self.p + self.rng.random(self.n_values) * 1e-10
        return int(np.argmax(dithered))

    def reset_stats(self) -> None:
        # every value starts with a 50% win rate
        self.n_wins[:] = 0.5 * self.init
        self.count[:] = self.init
        self.p[:] = 1.0 / self.n_values

    def __str__(self) -> str:
        return "".join(f"[{v:.2f}]" for v in self.p)


class AdaptiveProbabilityModel:
    """One GeneModel per position, sharing a single generator.

    Examples
    --------
    >>> model = AdaptiveProbabilityModel(n_dims=4, n_values=3, seed=0)
    >>> x = model.generate()
    >>> model.update(winner=[0, 1, 2, 0], loser=[1, 1, 0, 2])
    >>> best = model.argmax()
    """

    def __init__(
        self,
        n_dims: int,
        n_values: int,
        *,
        k: float = 2000.0,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ) -> None:
        if int(n_dims) < 1:
            raise ConfigurationError("n_dims must be >= 1")
        self.n_dims = int(n_dims)
        self.n_values = int(n_values)
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.genes: List[GeneModel] = [
            GeneModel(self.n_values, k=k, rng=self.rng) for _ in range(self.n_dims)
        ]

    def __len__(self) -> int:
        return self.n_dims

    def __getitem__(self, i: int) -> GeneModel:
        return self.genes[i]

    def _check_candidate(self, x: Sequence[int]) -> List[int]:
        values = [int(v) for v in x]
        if len(values) != self.n_dims:
            raise ConfigurationError(
                f"candidate has {len(values)} positions, model has {self.n_dims}"
            )
        return values

    def generate(self) -> np.ndarray:
        return np.array([g.generate() for g in self.genes], dtype=np.int64)

    def update(self, winner: Sequence[int], loser: Sequence[int], weight: float = 1.0) -> None:
        """Reinforce ``winner`` over ``loser`` at every position where they differ."""
        w_vals = self._check_candidate(winner)
        l_vals = self._check_candidate(loser)
        for gene, w, lo in zip(self.genes, w_vals, l_vals):
            if w != lo:
                gene.update(w, lo, weight)

    def argmax(self) -> np.ndarray:
        return np.array([g.argmax() for g in self.genes], dtype=np.int64)

    def reset_stats(self) -> None:
        for g in self.genes:
            g.reset_stats()

    def __str__(self) -> str:
        return "\n".join(str(g) for g in self.genes)
