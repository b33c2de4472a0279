"""Axis scaling with human-readable tick spacing.

Tick spacing is picked from a fixed table keyed by the span of the axis, and
axis limits are rounded outward to multiples of five tick distances. The
same rules work for proportions, ages, concentrations and so on, because
only the order of magnitude of the span matters.

Example:
    ```python
    from hrspline.methods.axis_scaling import compute_x_axis

    axis = compute_x_axis(albumin, limits_override=(2.5, None))
    axis.minor_ticks()  # every 0.1 g/dL
    axis.major_ticks()  # every 0.5 g/dL
    ```
"""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from ..exceptions import InvalidRangeError

# (exclusive upper bound of span, tick distance), checked in order
TICK_DISTANCE_TABLE: tuple[tuple[float, float], ...] = (
    (0.01, 0.005),
    (0.1, 0.01),
    (1.0, 0.05),
    (10.0, 0.1),
    (100.0, 1.0),
)
LARGEST_TICK_DISTANCE = 10.0
MAJOR_TICK_MULTIPLE = 5

Y_AXIS_MIN = 0.0
Y_ROUNDING_UNIT = 0.5
Y_TICK_DISTANCE = 0.5

# Display-only extension below y = 0 that leaves room for the distribution box
DISTRIBUTION_INSET_OFFSET = -0.2

# R's seq() tolerance when deciding whether the end point is reached
_SEQ_EPS = 1e-10


@dataclass(frozen=True)
class AxisSpec:
    """Tick spacing and limits for one axis.

    Attributes:
        tick_distance: Spacing between minor ticks.
        rounded_min: Lower end of the tick grid, a multiple of the major spacing.
        rounded_max: Upper end of the tick grid, a multiple of the major spacing.
        axis_limit_min: Lower view limit of the logical axis domain.
        axis_limit_max: Upper view limit of the logical axis domain.
    """

    tick_distance: float
    rounded_min: float
    rounded_max: float
    axis_limit_min: float
    axis_limit_max: float

    @property
    def major_tick_multiple(self) -> float:
        """Spacing between major (labeled) ticks."""
        return self.tick_distance * MAJOR_TICK_MULTIPLE

    def minor_ticks(self) -> NDArray:
        return tick_positions(self.rounded_min, self.rounded_max, self.tick_distance)

    def major_ticks(self) -> NDArray:
        return tick_positions(
            self.rounded_min, self.rounded_max, self.major_tick_multiple
        )


def compute_tick_distance(span: float) -> float:
    """Pick the minor tick distance for an axis span.

    Args:
        span: Width of the axis range (max - min).

    Returns:
        Tick distance from the fixed table.

    Raises:
        InvalidRangeError: If span is zero, negative or not finite.

    Examples:
        >>> compute_tick_distance(9.0)
        0.1
        >>> compute_tick_distance(0.1)
        0.05
        >>> compute_tick_distance(250.0)
        10.0
    """
    if not np.isfinite(span) or span <= 0:
        raise InvalidRangeError(
            f"Axis span must be positive and finite, got {span}. "
            "Is the exposure constant?"
        )

    for upper_bound, tick_distance in TICK_DISTANCE_TABLE:
        if span < upper_bound:
            return tick_distance
    return LARGEST_TICK_DISTANCE


def compute_rounded_limits(
    values: Sequence[float] | NDArray, tick_distance: float
) -> tuple[float, float]:
    """Round the range of values outward to the major tick grid.

    Args:
        values: Values the limits must contain.
        tick_distance: Minor tick distance; the grid uses 5x this spacing.

    Returns:
        Tuple of (lower, upper) limits, both multiples of 5 * tick_distance.

    Raises:
        InvalidRangeError: If values is empty.
    """
    values = np.asarray(values, dtype=np.float64)
    if values.size == 0:
        raise InvalidRangeError("Cannot round limits of an empty range")

    major = tick_distance * MAJOR_TICK_MULTIPLE
    lower = np.floor(values.min() / major) * major
    upper = np.ceil(values.max() / major) * major
    return float(lower), float(upper)


def tick_positions(start: float, stop: float, step: float) -> NDArray:
    """Evenly spaced positions from start to stop inclusive.

    Follows R's ``seq(from, to, by)``: positions are start + k * step for
    every k that does not overshoot stop beyond a small tolerance.
    """
    if stop < start:
        return np.empty(0)
    n_steps = int(np.floor((stop - start) / step + _SEQ_EPS))
    return start + np.arange(n_steps + 1) * step


def compute_x_axis(
    x: NDArray,
    limits_override: tuple[float | None, float | None] = (None, None),
) -> AxisSpec:
    """Compute the exposure axis.

    Each bound of ``limits_override`` that is not None replaces the data
    minimum or maximum independently. The tick distance comes from the span
    of the resulting limits, while the tick grid is the data range rounded
    outward to the major spacing. A widening override therefore leaves the
    ticks over the data only.

    Args:
        x: Exposure values without missing entries.
        limits_override: Optional (min, max) override; either may be None.

    Returns:
        AxisSpec for the x-axis.

    Raises:
        InvalidRangeError: If x is empty or the limits span nothing.
    """
    x = np.asarray(x, dtype=np.float64)
    if x.size == 0:
        raise InvalidRangeError("Cannot scale an axis for an empty exposure series")

    override_min, override_max = limits_override
    limit_min = float(x.min()) if override_min is None else float(override_min)
    limit_max = float(x.max()) if override_max is None else float(override_max)

    tick_distance = compute_tick_distance(limit_max - limit_min)
    rounded_min, rounded_max = compute_rounded_limits(
        [x.min(), x.max()], tick_distance
    )
    return AxisSpec(
        tick_distance=tick_distance,
        rounded_min=rounded_min,
        rounded_max=rounded_max,
        axis_limit_min=limit_min,
        axis_limit_max=limit_max,
    )


def compute_y_axis(center_y: NDArray, y_max_override: float | None = None) -> AxisSpec:
    """Compute the hazard-ratio axis.

    The minimum is always 0. The maximum is the curve peak rounded up to a
    multiple of 0.5 unless overridden. The display extension below 0 (see
    DISTRIBUTION_INSET_OFFSET) is not part of this axis.

    Args:
        center_y: Smoothed hazard ratios of the center curve.
        y_max_override: Optional fixed maximum.

    Returns:
        AxisSpec for the y-axis.

    Raises:
        InvalidRangeError: If the resulting maximum is not above 0.
    """
    if y_max_override is None:
        center_y = np.asarray(center_y, dtype=np.float64)
        if center_y.size == 0:
            raise InvalidRangeError("Cannot scale an axis for an empty curve")
        y_max = float(
            np.ceil(center_y.max() / Y_ROUNDING_UNIT) * Y_ROUNDING_UNIT
        )
    else:
        y_max = float(y_max_override)

    if not np.isfinite(y_max) or y_max <= Y_AXIS_MIN:
        raise InvalidRangeError(f"y-axis maximum must be above 0, got {y_max}")

    return AxisSpec(
        tick_distance=Y_TICK_DISTANCE,
        rounded_min=Y_AXIS_MIN,
        rounded_max=y_max,
        axis_limit_min=Y_AXIS_MIN,
        axis_limit_max=y_max,
    )
