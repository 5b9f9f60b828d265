import hashlib
import math
import os
from timeit import default_timer
from typing import Iterable, Literal

import joblib
import numpy as np
import polars as pl
from tqdm import tqdm

from polyselect.errors import (
    AllDegreesFailedError,
    InvalidDegreeError,
    NumericInstabilityError,
)
from polyselect.models import PolynomialModel, validate_degree
from polyselect.resample import fold_ids, validate_fold_count
from polyselect.stats import rmse, summarize

DEFAULT_DEGREES = range(1, 11)
DEFAULT_FOLDS = 10

RESULT_SCHEMA = {
    "degree": pl.Int64,
    "fold": pl.Int64,
    "k": pl.Int64,
    # seeds can exceed int64, store as text
    "seed": pl.String,
    "data": pl.String,
    "rmse": pl.Float64,
    "center": pl.Float64,
    "runtime": pl.Float64,
    "error": pl.String,
}


class DegreeSelector:
    """Choose a polynomial degree by k-fold cross-validation.

    Folds are drawn once, so every degree is compared on identical splits.
    """

    def __init__(
        self,
        data: pl.DataFrame,
        degrees: Iterable[int] = DEFAULT_DEGREES,
        k: int = DEFAULT_FOLDS,
        tolerance: float = 0.0,
        seed: int | None = None,
        predictor: str = "x",
        response: str = "y",
        n_jobs: int = 1,
        results_file: str | None = None,
    ) -> None:
        """Cross-validation of candidate degrees on a training set.

        ## parameters
        - data (DataFrame): training set with predictor and response columns.
        - degrees (iterable of int): candidate degrees, positive ints.
        - k (int): number of folds, 2 <= k <= len(data).
        - tolerance (float): pick the smallest degree scoring within
            `tolerance` of the best score. Default 0 picks the exact minimum.
        - seed (int|None): seed for the fold assignment.
        - predictor, response (str): column names.
        - n_jobs (int): number of parallel jobs. -1 uses cpu_count.
        - results_file (str|None): file for loading and storing fold results.
            - supported formats: `.parquet`, `.csv`, `.json`.
        """

        ## Argument validation
        for col in (predictor, response):
            if col not in data.columns:
                raise ValueError(f"Missing column: {col}")
            if not data[col].dtype.is_numeric():
                raise ValueError(f"Column {col} is not numeric ({data[col].dtype})")
            if data[col].null_count() > 0:
                raise ValueError(f"Column {col} contains nulls")
            if not data[col].cast(pl.Float64).is_finite().all():
                raise ValueError(f"Column {col} contains NaN or inf")

        self.data = data.select(predictor, response)
        self.predictor = predictor
        self.response = response

        degrees = list(degrees)
        if not degrees:
            raise InvalidDegreeError("Empty degree range")
        for d in degrees:
            validate_degree(d)
        self.degrees = sorted(set(int(d) for d in degrees))

        n_distinct = self.data[predictor].n_unique()
        too_high = [d for d in self.degrees if d >= n_distinct]
        if too_high:
            raise InvalidDegreeError(
                f"Degrees {too_high} need more than {n_distinct} distinct {predictor} values"
            )

        validate_fold_count(len(self.data), k)
        self.k = int(k)

        if not tolerance >= 0:
            raise ValueError(f"Tolerance must be non-negative, not {tolerance}")
        self.tolerance = tolerance

        self.seed = None if seed is None else int(seed)
        self.folds = fold_ids(len(self.data), self.k, self.seed)
        self.fingerprint = data_fingerprint(self.data)

        ## handle number of parallel jobs
        cpu_count = joblib.cpu_count()
        if n_jobs == -1:
            self.n_jobs = cpu_count
        elif n_jobs > cpu_count:
            self.n_jobs = cpu_count
            print(f"Note: setting n_jobs to cpu_count = {cpu_count}")
        elif 0 < n_jobs:
            self.n_jobs = n_jobs
        else:
            raise ValueError(f"Invalid number of jobs: {n_jobs} ({type(n_jobs)})")

        # init empty results-frame
        self.fold_results = pl.DataFrame(schema=RESULT_SCHEMA)

        ## handle save file
        self.results_file = results_file
        if results_file:
            if self.seed is None:
                raise ValueError("Storing results requires a fixed seed")
            if os.path.isfile(results_file) and os.path.getsize(results_file) > 0:
                self._load_results()
            else:
                self._save_results()

    def __str__(self):
        return "\n".join(
            [
                f"{self.k}-fold cross-validation of degrees {self.degrees}",
                f"  - {len(self.data)} observations",
                f"  - has {len(self.fold_results)} fold results",
            ],
        )

    def run(self, verbose: Literal[0, 1, 2] = 1) -> dict[int, float]:
        """Evaluate every (degree, fold) pair not already in `fold_results`.

        ## returns
        - scores (dict[int, float]): mean fold rmse per degree.
        """

        t_start = default_timer()

        todo = pl.DataFrame(
            [(d, i) for d in self.degrees for i in range(1, self.k + 1)],
            schema={"degree": pl.Int64, "fold": pl.Int64},
            orient="row",
        ).join(
            self.fold_results.select("degree", "fold"),
            on=["degree", "fold"],
            how="anti",
        )

        if verbose >= 1:
            print(f"Evaluating {len(todo)} (degree, fold) pairs")

        pairs = todo.iter_rows()
        if verbose >= 1:
            pairs = tqdm(pairs, total=len(todo))

        args = (self.data, self.folds, self.predictor, self.response)
        if self.n_jobs > 1:
            para = joblib.Parallel(n_jobs=self.n_jobs)
            rows = para(joblib.delayed(evaluate_fold)(*args, d, i) for d, i in pairs)
        else:
            rows = [evaluate_fold(*args, d, i) for d, i in pairs]

        new = pl.DataFrame(
            [
                {**r, "k": self.k, "seed": seed_label(self.seed), "data": self.fingerprint}
                for r in rows
            ],
            schema=RESULT_SCHEMA,
        )
        self.fold_results = pl.concat([self.fold_results, new], how="vertical").sort(
            "degree", "fold"
        )
        if self.results_file:
            self._save_results()

        scores = self.scores

        if verbose >= 2:
            for d, s in scores.items():
                print(f"  degree {d:>2}: rmse {s:.4f}")
        if verbose >= 1:
            rt_sum = new["runtime"].sum()
            rt_total = default_timer() - t_start
            print(f"Sum of runtime: {rt_sum:.2f} s. Elapsed time {rt_total:.2f} s.")
            for d, e in self.failures.items():
                print(f"Note: degree {d} failed ({e})")

        return scores

    @property
    def scores(self) -> dict[int, float]:
        """Mean fold rmse per requested degree, nan for failed degrees."""
        results = self.fold_results.filter(pl.col("degree").is_in(self.degrees))
        if len(results) < len(self.degrees) * self.k:
            raise ValueError("Missing fold results, call `run` first")

        per_degree = results.group_by("degree").agg(
            pl.col("rmse").mean().alias("mean"),
            pl.col("error").is_not_null().any().alias("failed"),
        )
        scores = dict.fromkeys(self.degrees, math.nan)
        for d, mean, failed in per_degree.iter_rows():
            if not failed:
                scores[d] = mean
        return scores

    @property
    def failures(self) -> dict[int, NumericInstabilityError]:
        """First failure per failed degree."""
        failed = (
            self.fold_results.filter(
                pl.col("degree").is_in(self.degrees) & pl.col("error").is_not_null()
            )
            .group_by("degree")
            .agg(pl.col("fold").first(), pl.col("error").first())
            .sort("degree")
        )
        return {
            d: NumericInstabilityError(e, degree=d, fold=i)
            for d, i, e in failed.iter_rows()
        }

    @property
    def best_degree(self) -> int:
        return choose_degree(self.scores, self.tolerance, self.failures)

    def summary(self) -> pl.DataFrame:
        """Fold rmse statistics per successful degree."""
        return summarize(
            self.fold_results.filter(
                pl.col("degree").is_in(self.degrees) & pl.col("error").is_null()
            )
        )

    def _load_results(self):
        """Load fold results from file"""

        fp = self.results_file
        if fp is None:
            raise ValueError("No filepath provided")
        _, ext = os.path.splitext(fp)

        # load file based on extension
        if ext == ".parquet":
            loaded = pl.read_parquet(fp)
            if loaded.schema != self.fold_results.schema:
                raise ValueError(f"Incorrect file schema: {loaded.schema}")
        elif ext == ".csv":
            loaded = pl.read_csv(fp, schema=RESULT_SCHEMA)
        elif ext == ".json":
            loaded = pl.read_json(fp, schema=RESULT_SCHEMA)
        else:
            raise ValueError(f"Unsupported file format: {ext}")

        mismatched = loaded.filter(
            (pl.col("k") != self.k) | (pl.col("seed") != seed_label(self.seed))
        )
        if not mismatched.is_empty():
            raise ValueError(f"Results in {fp} were computed with other k or seed")
        if not loaded.filter(pl.col("data") != self.fingerprint).is_empty():
            raise ValueError(f"Results in {fp} were computed on other data")

        self.fold_results = loaded.sort("degree", "fold")

    def _save_results(self):
        """Save fold results to file"""
        fp = self.results_file
        if fp is None:
            raise ValueError("No filepath provided")
        _, ext = os.path.splitext(fp)

        # save file based on extension
        if ext == ".parquet":
            self.fold_results.write_parquet(fp)
        elif ext == ".csv":
            self.fold_results.write_csv(fp)
        elif ext == ".json":
            self.fold_results.write_json(fp)
        else:
            raise ValueError(f"Unsupported file format: {ext}")


def seed_label(seed: int | None) -> str | None:
    return None if seed is None else str(seed)


def data_fingerprint(data: pl.DataFrame) -> str:
    """Row count plus a digest of the row hashes, in row order."""
    digest = hashlib.sha1(data.hash_rows().to_numpy().tobytes()).hexdigest()
    return f"{len(data)}:{digest}"


def evaluate_fold(
    data: pl.DataFrame,
    folds: np.ndarray,
    predictor: str,
    response: str,
    degree: int,
    fold: int,
) -> dict:
    """Fit on all folds but `fold`, and compute rmse on `fold`.

    ## returns
    - row (dict): degree, fold, rmse, center, runtime, error
        - `rmse` is None and `error` holds the message if the fit failed.
    """
    ts = default_timer()

    held_out = pl.Series("held_out", folds == fold)
    analysis = data.filter(~held_out)
    assessment = data.filter(held_out)

    model = PolynomialModel(degree, predictor, response)
    row = {"degree": degree, "fold": fold, "rmse": None, "center": None, "error": None}
    try:
        model.fit(analysis)
        y_pred = model.predict(assessment)
    except NumericInstabilityError as e:
        row["error"] = str(e)
    else:
        row["rmse"] = rmse(assessment[response].to_numpy(), y_pred)
    row["center"] = model.center
    row["runtime"] = default_timer() - ts
    return row


def choose_degree(
    scores: dict[int, float],
    tolerance: float = 0.0,
    failures: dict | None = None,
) -> int:
    """Smallest degree scoring within `tolerance` of the best score."""
    if not tolerance >= 0:
        raise ValueError(f"Tolerance must be non-negative, not {tolerance}")

    valid = {d: s for d, s in scores.items() if not math.isnan(s)}
    if not valid:
        raise AllDegreesFailedError(failures or {})

    best = min(valid.values())
    return min(d for d, s in valid.items() if s <= best + tolerance)


def select_best_degree(
    training_set: pl.DataFrame,
    degree_range: Iterable[int] = DEFAULT_DEGREES,
    k: int = DEFAULT_FOLDS,
    tolerance: float = 0.0,
    seed: int | None = None,
    predictor: str = "x",
    response: str = "y",
    n_jobs: int = 1,
    verbose: Literal[0, 1, 2] = 0,
) -> tuple[dict[int, float], int]:
    """Cross-validated rmse per degree, and the selected degree."""
    selector = DegreeSelector(
        training_set,
        degrees=degree_range,
        k=k,
        tolerance=tolerance,
        seed=seed,
        predictor=predictor,
        response=response,
        n_jobs=n_jobs,
    )
    scores = selector.run(verbose=verbose)
    return scores, selector.best_degree
