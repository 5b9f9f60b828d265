import numpy as np
import polars as pl

from polyselect.errors import InvalidDegreeError, NumericInstabilityError
from polyselect.preprocess import Centerer


class PolynomialModel:
    """Univariate polynomial regression on a centered and scaled predictor."""

    def __init__(
        self,
        degree: int = 1,
        predictor: str = "x",
        response: str = "y",
    ) -> None:
        validate_degree(degree)

        self.degree = degree
        self.predictor = predictor
        self.response = response

        self.centerer = Centerer(predictor, scale=True)
        self.coef: np.ndarray | None = None
        self.rank: int | None = None
        self.n_samples = 0

    def __str__(self) -> str:
        lines = [f"Polynomial model (degree: {self.degree})"]
        if self.coef is not None:
            lines.append(f"{self.n_samples} samples, center {self.center:.4g}")
        return "\n".join(lines)

    @property
    def center(self) -> float | None:
        return self.centerer.mean

    @property
    def scale(self) -> float:
        return self.centerer.scale

    def fit(self, samples: pl.DataFrame, verbose=False):
        """Fit model by least squares.

        The predictor is centered and scaled with statistics of `samples` only.
        """
        centered = self.centerer.fit_transform(samples)
        X = polynomial_features(centered[self.predictor].to_numpy(), self.degree)
        y = samples[self.response].to_numpy().astype(float)
        M, N = X.shape

        if verbose:
            print(f"{M} samples\n{N} poly features")

        if M < N:
            raise NumericInstabilityError(
                f"Under-determined system: {M} samples < {N} coefficients",
                degree=self.degree,
            )

        beta, _, rank, _ = np.linalg.lstsq(X, y, rcond=None)

        if rank < N:
            raise NumericInstabilityError(
                f"Rank deficient design matrix: rank {rank} < {N}",
                degree=self.degree,
            )
        if not np.isfinite(beta).all():
            raise NumericInstabilityError(
                "Non-finite coefficients", degree=self.degree
            )

        self.coef = beta
        self.rank = int(rank)
        self.n_samples = M

        if verbose:
            print(f"coefficients: {beta}")

        return self

    @property
    def polynomial(self) -> np.polynomial.Polynomial:
        """Fitted polynomial in the centered, scaled predictor."""
        if self.coef is None:
            raise ValueError("Model is not fitted")
        return np.polynomial.Polynomial(self.coef)

    def predict(self, samples: pl.DataFrame) -> np.ndarray:
        """Predict responses, using the offset and scale stored at fit."""
        if self.coef is None:
            raise ValueError("Model is not fitted")

        x = self.centerer.transform(samples)[self.predictor].to_numpy()
        y_pred = polynomial_features(x, self.degree) @ self.coef

        if not np.isfinite(y_pred).all():
            raise NumericInstabilityError(
                "Non-finite predictions", degree=self.degree
            )
        return y_pred


def validate_degree(degree):
    if isinstance(degree, bool) or not isinstance(degree, (int, np.integer)):
        raise InvalidDegreeError(f"Degree must be an int, not {degree!r}")
    if degree < 1:
        raise InvalidDegreeError(f"Degree must be positive, not {degree}")


def polynomial_features(x: np.ndarray, d: int) -> np.ndarray:
    """Powers of x up to degree d (including constant).
    ## parameters
    - x (ndarray): predictor values, shape (N,)
    - d (int): maximum degree
    ## returns
    - X (ndarray): feature matrix, shape (N, d + 1), columns 1, x, ..., x^d
    """
    x = np.asarray(x, dtype=float).ravel()
    return np.vander(x, d + 1, increasing=True)
