"""
Full degree-selection workflow: split, cross-validate, refit, test.
"""

from dataclasses import dataclass
from typing import Iterable, Literal

import numpy as np
import polars as pl

from polyselect.models import PolynomialModel
from polyselect.resample import initial_split
from polyselect.selection import DEFAULT_DEGREES, DEFAULT_FOLDS, DegreeSelector
from polyselect.stats import rmse

DEFAULT_PROP = 0.8


@dataclass(frozen=True)
class FinalFit:
    model: PolynomialModel
    train_rmse: float
    test_rmse: float


@dataclass(frozen=True)
class WorkflowResult:
    n_train: int
    n_test: int
    scores: dict[int, float]
    best_degree: int
    final: FinalFit
    selector: DegreeSelector

    def __str__(self) -> str:
        lines = [
            f"train/test: {self.n_train}/{self.n_test}",
            f"selected degree: {self.best_degree}",
            f"train rmse: {self.final.train_rmse:.4f}",
            f"test rmse: {self.final.test_rmse:.4f}",
        ]
        return "\n".join(lines)


def fit_final(
    train: pl.DataFrame,
    test: pl.DataFrame,
    degree: int,
    predictor: str = "x",
    response: str = "y",
    verbose=False,
) -> FinalFit:
    """Refit a degree on the whole training set and evaluate on the test set.

    Centering uses the training mean only.
    """
    model = PolynomialModel(degree, predictor, response).fit(train, verbose=verbose)
    return FinalFit(
        model=model,
        train_rmse=rmse(train[response].to_numpy(), model.predict(train)),
        test_rmse=rmse(test[response].to_numpy(), model.predict(test)),
    )


def degree_workflow(
    data: pl.DataFrame,
    degree_range: Iterable[int] = DEFAULT_DEGREES,
    k: int = DEFAULT_FOLDS,
    prop: float = DEFAULT_PROP,
    tolerance: float = 0.0,
    seed: int | None = None,
    predictor: str = "x",
    response: str = "y",
    n_jobs: int = 1,
    verbose: Literal[0, 1, 2] = 1,
) -> WorkflowResult:
    """Split data, select a degree on the training set, test the refit model.

    The split and fold seeds are both derived from `seed`.
    """
    split_seed, fold_seed = (int(s) for s in np.random.SeedSequence(seed).generate_state(2))

    train, test = initial_split(data, prop=prop, seed=split_seed)
    if verbose >= 1:
        print(f"Split {len(data)} rows: {len(train)} train, {len(test)} test")

    selector = DegreeSelector(
        train,
        degrees=degree_range,
        k=k,
        tolerance=tolerance,
        seed=fold_seed,
        predictor=predictor,
        response=response,
        n_jobs=n_jobs,
    )
    scores = selector.run(verbose=verbose)
    best = selector.best_degree

    final = fit_final(train, test, best, predictor, response, verbose=verbose >= 2)
    if verbose >= 1:
        print(f"Selected degree {best}, test rmse {final.test_rmse:.4f}")

    return WorkflowResult(
        n_train=len(train),
        n_test=len(test),
        scores=scores,
        best_degree=best,
        final=final,
        selector=selector,
    )
