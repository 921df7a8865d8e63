import json
import math
import tempfile
import unittest
from pathlib import Path

import numpy as np

from ntuple_framework import NTupleLandscapeModel, TraceJSONLWriter, rank_correlation, report, to_jsonable


class CountOnes:
    def evaluate(self, x):
        return float(np.sum(x))


def trained_model(n=60, seed=0):
    model = NTupleLandscapeModel.convolutional(6, 6, 3, 3, n_values=2, stride=3)
    rng = np.random.default_rng(seed)
    for _ in range(n):
        p = rng.random()
        x = (rng.random(36) < p).astype(int)
        model.add_point(x, float(x.sum()))
    return model


class TestReport(unittest.TestCase):
    def test_report_without_evaluator(self):
        model = trained_model(n=5)
        result = report(model)
        self.assertEqual(result.n_entries, model.n_entries())
        self.assertEqual(result.n_samples, 6)
        self.assertEqual(result.n_solutions, 5)
        self.assertIsNone(result.error_stats)
        self.assertIsNone(result.rank_correlation)

    def test_report_against_evaluator(self):
        model = trained_model()
        result = report(model, CountOnes())
        self.assertEqual(result.error_stats.n, 60)
        self.assertGreaterEqual(result.error_stats.min, 0.0)
        # estimates of the training points track the true ordering
        self.assertGreater(result.rank_correlation, 0.8)

    def test_trace_hook_receives_report(self):
        events = []
        report(trained_model(n=10), CountOnes(), trace_hook=events.append)
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0]["event"], "model_report")
        self.assertIn("rank_correlation", events[0])
        self.assertEqual(events[0]["error"]["n"], 10)

    def test_trace_hook_must_be_callable(self):
        with self.assertRaises(TypeError):
            report(trained_model(n=2), trace_hook=42)

    def test_jsonl_writer(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "trace" / "report.jsonl"
            with TraceJSONLWriter(path) as writer:
                report(trained_model(n=10), CountOnes(), trace_hook=writer)
                writer({"event": "extra", "x": np.arange(3)})
            lines = path.read_text().splitlines()
        self.assertEqual(len(lines), 2)
        self.assertEqual(json.loads(lines[0])["n_solutions"], 10)
        self.assertEqual(json.loads(lines[1])["x"], [0, 1, 2])


def strict_loads(line):
    def reject(token):
        raise ValueError(f"non-standard JSON constant {token}")

    return json.loads(line, parse_constant=reject)


class HistoryOnlyModel:
    """Minimal landscape model exposing only the capability surface."""

    def __init__(self, points):
        self.points = [np.asarray(p) for p in points]

    def get_solutions(self):
        return [p.copy() for p in self.points]

    def get_mean_estimate(self, x):
        return 2.0 * float(np.sum(x))

    def n_samples(self):
        return len(self.points) + 1

    def n_entries(self):
        return 0


class TestReportSerialisation(unittest.TestCase):
    def test_empty_model_report_is_strict_json(self):
        model = NTupleLandscapeModel.convolutional(6, 6, 3, 3, n_values=2, stride=3)
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "report.jsonl"
            with TraceJSONLWriter(path) as writer:
                report(model, CountOnes(), trace_hook=writer)
                report(trained_model(n=1), CountOnes(), trace_hook=writer)
            lines = path.read_text().splitlines()
        empty = strict_loads(lines[0])
        self.assertEqual(empty["error"]["n"], 0)
        self.assertIsNone(empty["error"]["min"])
        self.assertIsNone(empty["error"]["max"])
        self.assertIsNone(empty["rank_correlation"])
        single = strict_loads(lines[1])
        self.assertEqual(single["error"]["n"], 1)
        self.assertIsNone(single["rank_correlation"])

    def test_non_finite_values_become_null(self):
        out = to_jsonable([math.nan, np.float64(math.inf), np.array([1.0, -math.inf])])
        self.assertEqual(out, [None, None, [1.0, None]])

    def test_report_uses_model_interface(self):
        model = HistoryOnlyModel([[0, 1], [1, 1], [0, 0]])
        result = report(model, CountOnes())
        self.assertEqual(result.n_solutions, 3)
        self.assertEqual(result.n_samples, 4)
        self.assertAlmostEqual(result.rank_correlation, 1.0)
        self.assertAlmostEqual(result.error_stats.mean(), 1.0)


class TestRankCorrelation(unittest.TestCase):
    def test_perfect_and_reversed(self):
        self.assertAlmostEqual(rank_correlation([1, 2, 3, 4], [10, 20, 30, 40]), 1.0)
        self.assertAlmostEqual(rank_correlation([1, 2, 3, 4], [4, 3, 2, 1]), -1.0)

    def test_undefined(self):
        self.assertTrue(math.isnan(rank_correlation([1.0], [2.0])))
        self.assertTrue(math.isnan(rank_correlation([1, 2, 3], [5, 5, 5])))

    def test_length_mismatch(self):
        with self.assertRaises(ValueError):
            rank_correlation([1, 2], [1, 2, 3])


class TestToJsonable(unittest.TestCase):
    def test_numpy_values(self):
        out = to_jsonable({"a": np.int64(3), 1: (np.float64(0.5), np.array([1, 2]))})
        self.assertEqual(out, {"a": 3, "1": [0.5, [1, 2]]})


if __name__ == "__main__":
    unittest.main()
