"""
Utilities

- synthetic polynomial data
- synthetic age/wage data
"""

import numpy as np
import polars as pl


def make_polynomial_data(
    coef: list[float],
    n: int = 100,
    x_range: tuple[float, float] = (-3.0, 3.0),
    noise: float = 0.5,
    seed: int | None = None,
    predictor: str = "x",
    response: str = "y",
) -> pl.DataFrame:
    """Sample a known polynomial with gaussian noise.

    ## parameters
    - coef (list[float]): coefficients, lowest degree first
    - n (int): number of observations
    - x_range (tuple): predictor drawn uniformly from this range
    - noise (float): standard deviation of the noise
    - seed (int|None): seed for x and noise
    """
    rng = np.random.default_rng(seed)
    x = rng.uniform(*x_range, size=n)
    y = np.polynomial.Polynomial(coef)(x) + rng.normal(0, noise, size=n)
    return pl.DataFrame({predictor: x, response: y})


def make_wage_like_data(n: int = 3000, seed: int | None = None) -> pl.DataFrame:
    """Integer ages 18..80 and a wage curve peaking in middle age."""
    rng = np.random.default_rng(seed)
    age = rng.integers(18, 81, size=n)
    t = (age - 45) / 20
    wage = 110 + 25 * t - 30 * t**2 + 8 * t**3 + rng.normal(0, 35, size=n)
    return pl.DataFrame({"age": age, "wage": wage})
