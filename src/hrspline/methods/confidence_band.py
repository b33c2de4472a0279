"""Smoothed hazard-ratio curve with a pointwise 95% confidence band.

Each observation's centered log hazard and standard error are turned into
three hazard ratios: exp(fit), exp(fit + 1.96 se) and exp(fit - 1.96 se).
Each series is then smoothed on its own. Exponentiating before smoothing,
not after, gives the curve shape expected for these plots.
"""

import warnings
from typing import NamedTuple

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from ..exceptions import BandOrderingWarning, LengthMismatchError
from .spline_smoother import SmoothedCurve, smooth

# Asymptotic normal critical value for a 95% interval
Z_95 = 1.96

ORDERING_ATOL = 1e-8


class HazardRatioBand(NamedTuple):
    """Center curve and band bounds on a shared x grid."""

    center: SmoothedCurve
    lower: SmoothedCurve
    upper: SmoothedCurve

    def ordering_violations(self, atol: float = ORDERING_ATOL) -> NDArray:
        """Boolean mask of grid points where lower <= center <= upper fails."""
        return (self.lower.y > self.center.y + atol) | (
            self.center.y > self.upper.y + atol
        )

    def x_at_minimum_hr(self) -> float:
        """Exposure value with the smallest smoothed hazard ratio."""
        return self.center.x_at_minimum()

    def to_frame(self) -> pd.DataFrame:
        """Numeric curve data with columns x, y, y_lower, y_upper."""
        return pd.DataFrame(
            {
                "x": self.center.x,
                "y": self.center.y,
                "y_lower": self.lower.y,
                "y_upper": self.upper.y,
            }
        )


def pointwise_hazard_ratios(
    fit: NDArray, se: NDArray
) -> tuple[NDArray, NDArray, NDArray]:
    """Exponentiate the log-hazard estimate and its 95% bounds.

    Args:
        fit: Centered log hazard ratio per observation.
        se: Standard error of fit per observation.

    Returns:
        Tuple of (center, lower, upper) hazard ratios.

    Examples:
        >>> center, lower, upper = pointwise_hazard_ratios(np.zeros(1), np.ones(1))
        >>> float(center[0]), round(float(upper[0]), 4)
        (1.0, 7.0993)
    """
    fit = np.asarray(fit, dtype=np.float64)
    se = np.asarray(se, dtype=np.float64)
    if fit.shape != se.shape:
        raise LengthMismatchError(
            f"fit and se must have equal length, got {len(fit)} and {len(se)}"
        )

    center = np.exp(fit)
    lower = np.exp(fit - Z_95 * se)
    upper = np.exp(fit + Z_95 * se)
    return center, lower, upper


def build_confidence_band(
    x: NDArray,
    fit: NDArray,
    se: NDArray,
    lam: float | None = None,
    n_grid: int | None = None,
) -> HazardRatioBand:
    """Smooth the hazard ratio and its 95% bounds against the exposure.

    Args:
        x: Exposure values without missing entries.
        fit: Centered log hazard ratio per observation, paired with x.
        se: Standard error of fit per observation.
        lam: Roughness penalty passed to the smoother (GCV if None).
        n_grid: Optional evenly spaced evaluation grid size.

    Returns:
        HazardRatioBand of (center, lower, upper) on the same x grid.

    Raises:
        LengthMismatchError: If x, fit and se are not all the same length.
        InsufficientDataError: If x has fewer than four distinct values.
    """
    x = np.asarray(x, dtype=np.float64)
    center_y, lower_y, upper_y = pointwise_hazard_ratios(fit, se)
    if len(x) != len(center_y):
        raise LengthMismatchError(
            f"Exposure series has length {len(x)} but term predictions have "
            f"length {len(center_y)}"
        )

    band = HazardRatioBand(
        center=smooth(x, center_y, lam=lam, n_grid=n_grid),
        lower=smooth(x, lower_y, lam=lam, n_grid=n_grid),
        upper=smooth(x, upper_y, lam=lam, n_grid=n_grid),
    )

    violations = band.ordering_violations()
    if violations.any():
        warnings.warn(
            f"Smoothed band crosses the center curve at {int(violations.sum())} "
            f"of {len(violations)} grid points; this is a smoothing artifact "
            "typical of small samples",
            BandOrderingWarning,
            stacklevel=2,
        )

    return band
