import unittest

import numpy as np
import polars as pl

from polyselect.errors import InvalidFoldCountError
from polyselect.resample import fold_ids, initial_split, vfold_split


class TestInitialSplit(unittest.TestCase):
    def setUp(self) -> None:
        self.data = pl.DataFrame({"x": np.arange(101), "y": np.arange(101) * 2.0})

    def test_sizes(self):
        train, test = initial_split(self.data, 0.8, seed=3)
        self.assertEqual(len(train), 80)
        self.assertEqual(len(test), 21)

    def test_partition(self):
        train, test = initial_split(self.data, 0.8, seed=3)
        x_train = set(train["x"].to_list())
        x_test = set(test["x"].to_list())
        self.assertEqual(x_train & x_test, set(), "overlapping split")
        self.assertEqual(x_train | x_test, set(range(101)), "rows lost in split")

    def test_seeded(self):
        a, _ = initial_split(self.data, 0.8, seed=11)
        b, _ = initial_split(self.data, 0.8, seed=11)
        c, _ = initial_split(self.data, 0.8, seed=12)
        self.assertListEqual(a["x"].to_list(), b["x"].to_list())
        self.assertNotEqual(a["x"].to_list(), c["x"].to_list())

    def test_invalid_prop(self):
        for prop in (0, 1, 1.5, -0.2):
            with self.assertRaises(ValueError):
                initial_split(self.data, prop)

    def test_empty_part(self):
        with self.assertRaises(ValueError):
            initial_split(self.data.head(2), 0.4)


class TestFolds(unittest.TestCase):
    def test_balanced(self):
        ids = fold_ids(103, 10, seed=0)
        counts = np.bincount(ids)[1:]
        self.assertEqual(len(counts), 10)
        self.assertEqual(counts.sum(), 103)
        self.assertLessEqual(counts.max() - counts.min(), 1)

    def test_seeded(self):
        self.assertListEqual(
            fold_ids(50, 5, seed=4).tolist(),
            fold_ids(50, 5, seed=4).tolist(),
        )

    def test_leave_one_out(self):
        ids = fold_ids(15, 15, seed=1)
        self.assertListEqual(sorted(ids.tolist()), list(range(1, 16)))

    def test_invalid_k(self):
        for k in (1, 0, -3, 16, 2.0, True):
            with self.assertRaises(InvalidFoldCountError):
                fold_ids(15, k)


class TestVfoldSplit(unittest.TestCase):
    def test_union(self):
        data = pl.DataFrame({"x": np.arange(23), "y": np.zeros(23)})
        splits = vfold_split(data, 4, seed=9)
        self.assertEqual(len(splits), 4)

        held_out = []
        for analysis, assessment in splits:
            self.assertEqual(len(analysis) + len(assessment), 23)
            a = set(analysis["x"].to_list())
            b = set(assessment["x"].to_list())
            self.assertEqual(a & b, set())
            held_out.extend(b)

        self.assertListEqual(sorted(held_out), list(range(23)), "folds not a partition")

    def test_precomputed(self):
        data = pl.DataFrame({"x": np.arange(6), "y": np.zeros(6)})
        folds = np.array([1, 2, 1, 2, 1, 2])
        (_, first), (_, second) = vfold_split(data, 2, folds=folds)
        self.assertListEqual(first["x"].to_list(), [0, 2, 4])
        self.assertListEqual(second["x"].to_list(), [1, 3, 5])

        with self.assertRaises(ValueError):
            vfold_split(data, 2, folds=folds[:4])


if __name__ == "__main__":
    unittest.main()
