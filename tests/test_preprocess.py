import unittest

import polars as pl

from polyselect.preprocess import Centerer


class TestCenterer(unittest.TestCase):
    def setUp(self) -> None:
        self.analysis = pl.DataFrame({"x": [1.0, 2.0, 6.0], "y": [0.0, 0.0, 0.0]})
        self.assessment = pl.DataFrame({"x": [10.0], "y": [1.0]})

    def test_fit_transform(self):
        c = Centerer("x")
        centered = c.fit_transform(self.analysis)
        self.assertEqual(c.mean, 3.0)
        self.assertListEqual(centered["x"].to_list(), [-2.0, -1.0, 3.0])
        self.assertListEqual(centered["y"].to_list(), [0.0, 0.0, 0.0])

    def test_uses_fitted_mean(self):
        c = Centerer("x").fit(self.analysis)
        self.assertListEqual(c.transform(self.assessment)["x"].to_list(), [7.0])
        self.assertEqual(c.mean, 3.0, "transform changed the offset")

    def test_inverse(self):
        c = Centerer("x").fit(self.analysis)
        back = c.inverse(c.transform(self.analysis))
        self.assertListEqual(back["x"].to_list(), self.analysis["x"].to_list())

    def test_scale(self):
        c = Centerer("x", scale=True).fit(self.analysis)
        self.assertEqual(c.scale, 3.0)
        self.assertListEqual(c.transform(self.analysis)["x"].to_list(), [-2 / 3, -1 / 3, 1.0])
        self.assertListEqual(c.transform(self.assessment)["x"].to_list(), [7 / 3])

        back = c.inverse(c.transform(self.analysis))
        for a, b in zip(back["x"].to_list(), self.analysis["x"].to_list()):
            self.assertAlmostEqual(a, b)

    def test_scale_constant_column(self):
        c = Centerer("x", scale=True).fit(pl.DataFrame({"x": [4.0, 4.0]}))
        self.assertEqual(c.scale, 1.0)

    def test_no_scale_by_default(self):
        c = Centerer("x").fit(self.analysis)
        self.assertEqual(c.scale, 1.0)

    def test_not_fitted(self):
        with self.assertRaises(ValueError):
            Centerer("x").transform(self.analysis)

    def test_empty(self):
        with self.assertRaises(ValueError):
            Centerer("x").fit(self.analysis.clear())


if __name__ == "__main__":
    unittest.main()
