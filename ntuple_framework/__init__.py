"""
NTuple Framework
================

Online-learned N-tuple surrogate models for discrete search spaces.

The framework provides:
- A tuple-indexed landscape model that estimates candidate fitness from
  running statistics of overlapping projections (convolutional or classic
  N-tuple addressing)
- UCB-style exploration bonuses for under-sampled addresses
- A selection policy ranking proposed candidates by estimate + bonus
- Adaptive per-position categorical models reinforced from winner/loser
  comparisons

The core requires numpy; scipy is used by the diagnostics.

Quick Start
-----------

    >>> import numpy as np
    >>> from ntuple_framework import NTupleLandscapeModel, SelectionPolicy
    >>> model = NTupleLandscapeModel.convolutional(4, 4, 2, 2, n_values=2, stride=2)
    >>> rng = np.random.default_rng(0)
    >>> for _ in range(50):
    ...     x = rng.integers(0, 2, size=16)
    ...     model.add_point(x, float(x.sum()))
    >>> policy = SelectionPolicy(model, k_explore=1.0, rng=rng)
    >>> _ = policy.add_all(rng.integers(0, 2, size=(20, 16)))
    >>> best = policy.get_best()

Modules
-------
- tuples: tuple indexers and address encoding
- landscape: NTupleLandscapeModel and the BanditLandscapeModel interface
- selection: SelectionPolicy
- gene_model: GeneModel and AdaptiveProbabilityModel
- search_space: SearchSpace interface and UniformSearchSpace
- diagnostics: model reports and JSONL tracing
"""

__version__ = "1.0.0"

from .errors import ConfigurationError, DistributionError, UnsupportedOperationError
from .stats import Picker, StatSummary
from .search_space import SearchSpace, UniformSearchSpace
from .tuples import (
    ConvTupleIndexer,
    FullTupleIndexer,
    TupleIndexer,
    address,
    address_space_size,
    decode_address,
)
from .landscape import BanditLandscapeModel, NTupleLandscapeModel
from .selection import SelectionPolicy
from .gene_model import AdaptiveProbabilityModel, GeneModel
from .diagnostics import Evaluator, ModelReport, TraceJSONLWriter, rank_correlation, report, to_jsonable

__all__ = [
    "ConfigurationError",
    "DistributionError",
    "UnsupportedOperationError",
    "Picker",
    "StatSummary",
    "SearchSpace",
    "UniformSearchSpace",
    "TupleIndexer",
    "ConvTupleIndexer",
    "FullTupleIndexer",
    "address",
    "address_space_size",
    "decode_address",
    "BanditLandscapeModel",
    "NTupleLandscapeModel",
    "SelectionPolicy",
    "GeneModel",
    "AdaptiveProbabilityModel",
    "Evaluator",
    "ModelReport",
    "TraceJSONLWriter",
    "rank_correlation",
    "report",
    "to_jsonable",
    "__version__",
]
