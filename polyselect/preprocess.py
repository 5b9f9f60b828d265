import polars as pl


class Centerer:
    """Subtract a reference mean from one column, optionally dividing by a scale.

    The mean and scale come only from the frame passed to `fit`; `transform`
    applies the stored values to any frame. The scale is the half-range
    max|x - mean| of the fitted frame, so fitted values land in [-1, 1].
    """

    def __init__(self, column: str = "x", scale: bool = False) -> None:
        self.column = column
        self.use_scale = scale
        self.mean: float | None = None
        self.scale: float = 1.0

    def __str__(self) -> str:
        if self.mean is None:
            return f"Centerer({self.column}, not fitted)"
        return f"Centerer(({self.column} - {self.mean:.4g}) / {self.scale:.4g})"

    def fit(self, frame: pl.DataFrame):
        if frame.is_empty():
            raise ValueError("Cannot center on an empty frame")
        self.mean = float(frame[self.column].mean())
        if self.use_scale:
            half_range = float((frame[self.column] - self.mean).abs().max())
            # constant column: keep unit scale
            self.scale = half_range if half_range > 0 else 1.0
        return self

    def transform(self, frame: pl.DataFrame) -> pl.DataFrame:
        if self.mean is None:
            raise ValueError("Centerer must be fitted before transform")
        return frame.with_columns((pl.col(self.column) - self.mean) / self.scale)

    def fit_transform(self, frame: pl.DataFrame) -> pl.DataFrame:
        return self.fit(frame).transform(frame)

    def inverse(self, frame: pl.DataFrame) -> pl.DataFrame:
        if self.mean is None:
            raise ValueError("Centerer must be fitted before inverse")
        return frame.with_columns(pl.col(self.column) * self.scale + self.mean)
