import math
import unittest

import polars as pl

from polyselect.stats import rmse, summarize


class TestRmse(unittest.TestCase):
    def test_known(self):
        self.assertEqual(rmse([0, 0, 0, 0], [1, -1, 1, -1]), 1.0)
        self.assertAlmostEqual(rmse([1, 2], [1, 4]), math.sqrt(2))

    def test_zero(self):
        self.assertEqual(rmse([3.0, 4.0], [3.0, 4.0]), 0.0)

    def test_invalid(self):
        with self.assertRaises(ValueError):
            rmse([1, 2, 3], [1, 2])
        with self.assertRaises(ValueError):
            rmse([], [])


class TestSummarize(unittest.TestCase):
    def test_per_degree(self):
        results = pl.DataFrame(
            {
                "degree": [2, 1, 2, 1],
                "fold": [1, 1, 2, 2],
                "rmse": [1.0, 4.0, 3.0, 2.0],
            }
        )
        s = summarize(results)
        self.assertListEqual(s["degree"].to_list(), [1, 2])
        self.assertListEqual(s["mean"].to_list(), [3.0, 2.0])
        self.assertListEqual(s["min"].to_list(), [2.0, 1.0])
        self.assertListEqual(s["n"].to_list(), [2, 2])

    def test_single_stat(self):
        results = pl.DataFrame({"degree": [1, 1], "rmse": [1.0, 3.0]})
        s = summarize(results, stat="max")
        self.assertListEqual(s.columns, ["degree", "max"])


if __name__ == "__main__":
    unittest.main()
