"""NTuple Framework - Neighbour Selection

Ranks freshly proposed candidates with a landscape model: exploitation
estimate plus a weighted exploration bonus, with a tiny random term to break
exact ties.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence, Set

import numpy as np

from .errors import ConfigurationError
from .landscape import BanditLandscapeModel
from .stats import Picker


class SelectionPolicy:
    """
    Keeps the best of a batch of proposed candidates.

    Parameters
    ----------
    model : BanditLandscapeModel
        Model supplying exploitation and exploration estimates.
    k_explore : float
        Weight of the exploration estimate in the combined score.
    check_unique : bool
        Reject candidates already added, compared by their canonical index in
        the model's search space. Canonicalisation can be expensive, so this is
        only worth enabling for small spaces.
    tie_epsilon : float
        Upper bound of the uniform tie-break noise.
    rng : Optional[np.random.Generator]
        Source of tie-break noise.
    """

    def __init__(
        self,
        model: BanditLandscapeModel,
        k_explore: float,
        *,
        check_unique: bool = False,
        tie_epsilon: float = 1e-6,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.model = model
        self.k_explore = float(k_explore)
        self.check_unique = bool(check_unique)
        self.tie_epsilon = float(tie_epsilon)
        self.rng = rng if rng is not None else np.random.default_rng(seed)

        if self.k_explore < 0.0:
            raise ConfigurationError("k_explore must be >= 0")
        if self.tie_epsilon < 0.0:
            raise ConfigurationError("tie_epsilon must be >= 0")

        self.picker: Picker[np.ndarray] = Picker()
        self.indices: Set[int] = set()
        self.n_accepted = 0
        self.n_rejected = 0

    def combined_score(self, p: Sequence[int]) -> float:
        exploit = self.model.get_mean_estimate(p)
        explore = self.model.get_exploration_estimate(p)
        return exploit + self.k_explore * explore + float(self.rng.random()) * self.tie_epsilon

    def add(self, p: Sequence[int]) -> bool:
        """Score ``p`` and keep it if it beats the current best.

        Returns False when ``p`` was rejected as a duplicate.
        """
        if self.check_unique:
            space = self.model.get_search_space()
            if space is None:
                raise ConfigurationError("check_unique requires the model to have a search space")
            ix = space.index_of(p)
            if ix in self.indices:
                self.n_rejected += 1
                return False
            self.indices.add(ix)

        self.picker.add(self.combined_score(p), np.array(p))
        self.n_accepted += 1
        return True

    def add_all(self, candidates: Iterable[Sequence[int]]) -> "SelectionPolicy":
        for p in candidates:
            self.add(p)
        return self

    def get_best(self) -> Optional[np.ndarray]:
        return self.picker.get_best()

    @property
    def best_score(self) -> Optional[float]:
        return self.picker.best_score

    def n(self) -> int:
        """Effective attempts: rejected duplicates count a quarter each."""
        return self.n_accepted + self.n_rejected // 4
