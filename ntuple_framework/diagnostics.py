"""Diagnostics helpers for landscape models.

Offline utilities, not meant for the evaluation hot path:
- compare a model's estimates against a true evaluator (absolute error
  statistics and Spearman rank correlation)
- convert report payloads (with numpy objects) into JSON-serializable structures
- write report events to a JSONL file (one event per line)
"""

from __future__ import annotations

import json
import logging
import math
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol, Sequence, Union

import numpy as np
from scipy import stats

from .landscape import BanditLandscapeModel
from .stats import StatSummary

logger = logging.getLogger(__name__)

JsonLike = Union[None, bool, int, float, str, Dict[str, Any], list]


def _finite(value: float) -> Optional[float]:
    """Non-finite statistics (empty summaries, undefined correlations) become None."""
    v = float(value)
    return v if math.isfinite(v) else None


class Evaluator(Protocol):
    """Ground-truth fitness of a candidate."""

    def evaluate(self, x: Sequence[int]) -> float:
        ...


@dataclass
class ModelReport:
    n_entries: int
    n_samples: int
    n_solutions: int
    error_stats: Optional[StatSummary] = None
    rank_correlation: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "n_entries": self.n_entries,
            "n_samples": self.n_samples,
            "n_solutions": self.n_solutions,
        }
        if self.error_stats is not None:
            out["error"] = {
                "n": self.error_stats.n,
                "mean": _finite(self.error_stats.mean()),
                "sd": _finite(self.error_stats.sd()),
                "min": _finite(self.error_stats.min),
                "max": _finite(self.error_stats.max),
            }
        if self.rank_correlation is not None:
            out["rank_correlation"] = _finite(self.rank_correlation)
        return out


def rank_correlation(a: Sequence[float], b: Sequence[float]) -> float:
    """Spearman correlation of two equally long sequences (nan if undefined)."""
    a_arr = np.asarray(a, dtype=float)
    b_arr = np.asarray(b, dtype=float)
    if a_arr.shape != b_arr.shape:
        raise ValueError(f"rank_correlation needs equal lengths, got {a_arr.shape} and {b_arr.shape}")
    if a_arr.size < 2:
        return math.nan
    with warnings.catch_warnings():
        # constant input has no defined correlation; scipy returns nan
        warnings.simplefilter("ignore")
        rho = stats.spearmanr(a_arr, b_arr)[0]
    return float(rho)


def report(
    model: BanditLandscapeModel,
    evaluator: Optional[Evaluator] = None,
    *,
    trace_hook: Optional[Callable[[Dict[str, Any]], None]] = None,
) -> ModelReport:
    """
    Summarise a model, optionally against the true fitness of its history.

    Parameters
    ----------
    model : BanditLandscapeModel
        Model to inspect; its history comes from ``get_solutions()``.
    evaluator : Optional[Evaluator]
        When given, every stored solution is re-evaluated and compared with
        ``model.get_mean_estimate``.
    trace_hook : Optional[Callable[[Dict[str, Any]], None]]
        Receives the report as a plain dict (e.g. a TraceJSONLWriter).

    Returns
    -------
    ModelReport
    """
    if trace_hook is not None and not callable(trace_hook):
        raise TypeError("trace_hook must be callable or None")

    solutions = model.get_solutions()
    result = ModelReport(
        n_entries=model.n_entries(),
        n_samples=model.n_samples(),
        n_solutions=len(solutions),
    )

    if evaluator is not None:
        errors = StatSummary("Error Stats")
        fitness, estimates = [], []
        for p in solutions:
            f = float(evaluator.evaluate(p))
            e = float(model.get_mean_estimate(p))
            errors.add(abs(f - e))
            fitness.append(f)
            estimates.append(e)
        result.error_stats = errors
        result.rank_correlation = rank_correlation(fitness, estimates)
        logger.info("Indexes used: %d; %s; rank correlation %.4f",
                    result.n_entries, errors, result.rank_correlation)
    else:
        logger.info("Indexes used: %d", result.n_entries)

    if trace_hook is not None:
        trace_hook({"event": "model_report", **result.to_dict()})
    return result


def to_jsonable(obj: Any) -> JsonLike:
    """Best-effort conversion of (possibly numpy-heavy) objects into JSON-serializable values."""
    if isinstance(obj, float):
        return _finite(obj)
    if obj is None or isinstance(obj, (bool, int, str)):
        return obj
    if isinstance(obj, np.generic):
        return to_jsonable(obj.item())
    if isinstance(obj, np.ndarray):
        return to_jsonable(obj.tolist())
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [to_jsonable(v) for v in obj]
    return str(obj)


class TraceJSONLWriter:
    """Callable trace hook that appends JSONL events to a file."""

    def __init__(
        self,
        path: Union[str, Path],
        *,
        flush: bool = True,
    ) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = open(self.path, "a", buffering=1)
        self._flush = bool(flush)

    def __call__(self, trace: Dict[str, Any]) -> None:
        self.write(trace)

    def write(self, trace: Dict[str, Any]) -> None:
        json.dump(to_jsonable(trace), self._fh, allow_nan=False)
        self._fh.write("\n")
        if self._flush:
            self._fh.flush()

    def close(self) -> None:
        if not self._fh.closed:
            self._fh.close()

    def __enter__(self) -> "TraceJSONLWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
