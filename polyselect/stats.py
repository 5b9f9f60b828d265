from typing import Literal

import numpy as np
import polars as pl

stat_type = Literal["all", "mean", "std", "median", "min", "max", "n"]


def rmse(y_true, y_pred) -> float:
    """Root-mean-square error."""
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)

    if y_true.shape != y_pred.shape:
        raise ValueError(f"Inconsistent shapes: {y_true.shape} != {y_pred.shape}")
    if y_true.size == 0:
        raise ValueError("rmse of empty arrays")

    return float(np.sqrt(np.mean((y_true - y_pred) ** 2)))


def summarize(
    fold_results: pl.DataFrame,
    by: str = "degree",
    target: str = "rmse",
    stat: stat_type | list[stat_type] = "all",
) -> pl.DataFrame:
    """Aggregate fold errors over unique values of `by`.

    ## Returns
    - summary (DataFrame): columns `by` and the requested stats, sorted by `by`.
    """

    if stat == "all":
        stat = ["mean", "std", "median", "min", "max", "n"]
    elif isinstance(stat, str):
        stat = [stat]

    aggs = {
        "mean": pl.col(target).mean().alias("mean"),
        "std": pl.col(target).std().alias("std"),
        "median": pl.col(target).median().alias("median"),
        "min": pl.col(target).min().alias("min"),
        "max": pl.col(target).max().alias("max"),
        "n": pl.col(target).count().alias("n"),
    }

    return fold_results.group_by(by).agg(*[aggs[k] for k in stat]).sort(by)
