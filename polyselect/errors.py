"""Errors raised while selecting a polynomial degree.

All of them are `ValueError`s, so callers validating arguments the usual way
still catch them. The `code` attribute names the failure kind.
"""


class PolySelectError(ValueError):
    code = "POLYSELECT_ERROR"


class InvalidDegreeError(PolySelectError):
    """Degree is not a positive int, or the fit would be underdetermined."""

    code = "INVALID_DEGREE"


class InvalidFoldCountError(PolySelectError):
    """Number of folds outside 2..n."""

    code = "INVALID_FOLD_COUNT"


class NumericInstabilityError(PolySelectError):
    """A fit was rank deficient or produced non-finite values."""

    code = "NUMERIC_INSTABILITY"

    def __init__(self, message: str, degree: int | None = None, fold: int | None = None):
        super().__init__(message)
        self.degree = degree
        self.fold = fold


class AllDegreesFailedError(NumericInstabilityError):
    def __init__(self, failures: dict):
        self.failures = failures
        lines = [f"  - degree {d}: {e}" for d, e in failures.items()]
        super().__init__("\n".join(["Every candidate degree failed:"] + lines))
