import unittest

import numpy as np

from ntuple_framework import ConfigurationError, UniformSearchSpace


class TestUniformSearchSpace(unittest.TestCase):
    def test_index_round_trip_is_exhaustive(self):
        space = UniformSearchSpace(n_dims=4, n_values=3)
        self.assertEqual(space.size(), 81)
        seen = set()
        for ix in range(space.size()):
            p = space.point_at(ix)
            self.assertEqual(space.index_of(p), ix)
            seen.add(tuple(p))
        self.assertEqual(len(seen), 81)

    def test_position_zero_least_significant(self):
        space = UniformSearchSpace(n_dims=3, n_values=2)
        self.assertEqual(space.index_of([1, 0, 0]), 1)
        self.assertEqual(space.index_of([0, 0, 1]), 4)

    def test_large_space_is_exact(self):
        space = UniformSearchSpace(n_dims=100, n_values=4)
        self.assertEqual(space.size(), 4 ** 100)
        self.assertEqual(space.index_of([3] * 100), 4 ** 100 - 1)

    def test_random_point(self):
        space = UniformSearchSpace(n_dims=10, n_values=5)
        p = space.random_point(np.random.default_rng(0))
        self.assertEqual(p.shape, (10,))
        self.assertTrue(np.all((p >= 0) & (p < 5)))

    def test_integral_settings_coerced(self):
        space = UniformSearchSpace(n_dims=3.0, n_values=2.0)
        self.assertEqual(space.size(), 8)
        self.assertEqual(space.point_at(5).tolist(), [1, 0, 1])
        with self.assertRaises(ConfigurationError):
            UniformSearchSpace(n_dims=2.5, n_values=2)

    def test_validation(self):
        space = UniformSearchSpace(n_dims=3, n_values=2)
        with self.assertRaises(ConfigurationError):
            space.index_of([0, 1])
        with self.assertRaises(ConfigurationError):
            space.index_of([0, 2, 0])
        with self.assertRaises(IndexError):
            space.point_at(8)
        with self.assertRaises(IndexError):
            space.n_values_at(3)
        self.assertEqual(space.n_values_at(2), 2)
        with self.assertRaises(ConfigurationError):
            UniformSearchSpace(n_dims=0, n_values=2)


if __name__ == "__main__":
    unittest.main()
