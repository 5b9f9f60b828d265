"""
Resampling

- initial train/test split
- k-fold assignment
- (analysis, assessment) pairs

Every function takes its seed explicitly and builds its own generator.
"""

import math

import numpy as np
import polars as pl

from polyselect.errors import InvalidFoldCountError


def initial_split(
    data: pl.DataFrame,
    prop: float = 0.8,
    seed: int | np.random.SeedSequence | None = None,
) -> tuple[pl.DataFrame, pl.DataFrame]:
    """Split data once into training and test sets.

    ## parameters
    - data (DataFrame): full dataset
    - prop (float): proportion of rows used for training, 0 < prop < 1
    - seed: seed for the row permutation

    ## returns
    - train, test (DataFrame): `floor(n * prop)` rows and the rest,
        both in original row order.
    """
    if not 0 < prop < 1:
        raise ValueError(f"prop must be in (0, 1), not {prop}")

    n = len(data)
    n_train = math.floor(n * prop)
    if n_train == 0 or n_train == n:
        raise ValueError(f"Split of {n} rows with prop={prop} leaves an empty set")

    rng = np.random.default_rng(seed)
    in_train = np.zeros(n, dtype=bool)
    in_train[rng.permutation(n)[:n_train]] = True

    mask = pl.Series("in_train", in_train)
    return data.filter(mask), data.filter(~mask)


def validate_fold_count(n: int, k: int):
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)):
        raise InvalidFoldCountError(f"Fold count must be an int, not {k!r}")
    if k < 2:
        raise InvalidFoldCountError(f"Needs at least 2 folds, got {k}")
    if k > n:
        raise InvalidFoldCountError(f"More folds than observations: {k} > {n}")


def fold_ids(
    n: int,
    k: int,
    seed: int | np.random.SeedSequence | None = None,
) -> np.ndarray:
    """Assign n rows to k folds, numbered 1..k.

    Fold sizes differ by at most one.
    """
    validate_fold_count(n, k)

    rng = np.random.default_rng(seed)
    ids = np.empty(n, dtype=np.int64)
    ids[rng.permutation(n)] = np.arange(n) % k + 1
    return ids


def vfold_split(
    data: pl.DataFrame,
    k: int,
    seed: int | np.random.SeedSequence | None = None,
    folds: np.ndarray | None = None,
) -> list[tuple[pl.DataFrame, pl.DataFrame]]:
    """(analysis, assessment) pairs for folds 1..k.

    Pass `folds` to reuse a precomputed assignment instead of drawing one.
    """
    if folds is None:
        folds = fold_ids(len(data), k, seed)
    elif len(folds) != len(data):
        raise ValueError(f"Inconsistent fold assignment: {len(folds)}!={len(data)}")

    splits = []
    for i in range(1, k + 1):
        held_out = pl.Series("held_out", folds == i)
        splits.append((data.filter(~held_out), data.filter(held_out)))
    return splits
