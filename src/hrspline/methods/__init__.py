"""Numeric core: axis scaling, spline smoothing and confidence bands."""

from .axis_scaling import (
    AxisSpec,
    compute_rounded_limits,
    compute_tick_distance,
    compute_x_axis,
    compute_y_axis,
)
from .confidence_band import HazardRatioBand, build_confidence_band
from .spline_smoother import SmoothedCurve, smooth

__all__ = [
    "AxisSpec",
    "HazardRatioBand",
    "SmoothedCurve",
    "build_confidence_band",
    "compute_rounded_limits",
    "compute_tick_distance",
    "compute_x_axis",
    "compute_y_axis",
    "smooth",
]
