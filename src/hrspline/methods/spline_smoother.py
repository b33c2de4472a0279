"""Cubic smoothing spline for noisy pointwise estimates.

The smoother sorts the (x, y) pairs by x and collapses tied x values to
their mean y, weighted by multiplicity. It then fits a penalised cubic
smoothing spline whose roughness penalty is chosen by generalised
cross-validation. The spline is evaluated on the distinct x values, or on an
evenly spaced grid when one is requested.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from scipy import interpolate

from ..exceptions import InsufficientDataError, LengthMismatchError

MIN_DISTINCT_X = 4

# scipy's make_smoothing_spline needs at least this many distinct knots
_MIN_PENALISED_KNOTS = 5


@dataclass(frozen=True)
class SmoothedCurve:
    """Smoothed (x, y) curve on a strictly increasing grid.

    Attributes:
        x: Grid positions, strictly increasing.
        y: Smoothed values at each grid position.
    """

    x: NDArray
    y: NDArray

    def __post_init__(self):
        x = np.asarray(self.x, dtype=np.float64)
        y = np.asarray(self.y, dtype=np.float64)
        if x.shape != y.shape or x.ndim != 1:
            raise ValueError(
                f"x and y must be 1-D with equal shape, got {x.shape} and {y.shape}"
            )
        if np.any(np.diff(x) <= 0):
            raise ValueError("SmoothedCurve x must be strictly increasing")
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)

    def __len__(self) -> int:
        return len(self.x)

    def x_at_minimum(self) -> float:
        """Grid position of the smallest y (the first one on ties)."""
        return float(self.x[np.argmin(self.y)])

    def x_at_minima(self) -> NDArray:
        """Every grid position where y equals its minimum, in increasing order."""
        return self.x[self.y == self.y.min()]


def collapse_ties(x: NDArray, y: NDArray) -> tuple[NDArray, NDArray, NDArray]:
    """Sort pairs by x and average y over tied x values.

    Args:
        x: Abscissae, any order, ties allowed.
        y: Values paired with x by index.

    Returns:
        Tuple of (distinct sorted x, mean y per x, number of ties per x).
    """
    unique_x, inverse, counts = np.unique(x, return_inverse=True, return_counts=True)
    mean_y = np.bincount(inverse.ravel(), weights=y) / counts
    return unique_x, mean_y, counts.astype(np.float64)


def smooth(
    x: NDArray,
    y: NDArray,
    lam: float | None = None,
    n_grid: int | None = None,
) -> SmoothedCurve:
    """Fit a cubic smoothing spline through (x, y) and evaluate it.

    With exactly four distinct x values the penalised fit is undefined in
    scipy, and the natural cubic interpolant (the zero-penalty limit of the
    same smoother) is used instead.

    Args:
        x: Abscissae; need not be sorted.
        y: Noisy values paired with x by index.
        lam: Roughness penalty. If None, chosen by generalised cross-validation.
        n_grid: If given, evaluate on this many evenly spaced points spanning
            min(x)..max(x) instead of on the distinct x values.

    Returns:
        SmoothedCurve of the fitted spline.

    Raises:
        LengthMismatchError: If x and y differ in length.
        ValueError: If x or y contain non-finite values.
        InsufficientDataError: If fewer than four distinct x values are given.

    Examples:
        >>> x = np.array([3.0, 1.0, 2.0, 5.0, 4.0, 2.0])
        >>> y = np.array([9.0, 1.0, 4.0, 25.0, 16.0, 4.0])
        >>> curve = smooth(x, y)
        >>> curve.x
        array([1., 2., 3., 4., 5.])
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    if x.shape != y.shape:
        raise LengthMismatchError(
            f"x and y must have equal length, got {len(x)} and {len(y)}"
        )
    if not (np.all(np.isfinite(x)) and np.all(np.isfinite(y))):
        raise ValueError("x and y must be finite; drop missing values first")

    knots, mean_y, weights = collapse_ties(x, y)
    if len(knots) < MIN_DISTINCT_X:
        raise InsufficientDataError(
            f"Need at least {MIN_DISTINCT_X} distinct x values to fit a "
            f"smoothing spline, got {len(knots)}"
        )

    if len(knots) < _MIN_PENALISED_KNOTS:
        spline = interpolate.CubicSpline(knots, mean_y, bc_type="natural")
    else:
        spline = interpolate.make_smoothing_spline(knots, mean_y, w=weights, lam=lam)

    grid = knots if n_grid is None else np.linspace(knots[0], knots[-1], n_grid)
    return SmoothedCurve(x=grid, y=spline(grid))
