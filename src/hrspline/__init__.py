"""Hazard-ratio curves for spline exposure terms of proportional-hazards models.

This package turns the per-observation prediction of a spline term from an
already-fitted Cox model into a smoothed hazard-ratio curve with a pointwise
95% confidence band, scales the axes to readable tick spacings, and draws
the figure with matplotlib.
"""

from . import config, exceptions, methods, model, viz
from .config import GridLines, LineStyle, RenderConfig
from .model import PrecomputedTermModel, TermPrediction, TermPredictor
from .viz import compose, plot_cox_spline, render

__version__ = "0.1.0"

__all__ = [
    "config",
    "exceptions",
    "methods",
    "model",
    "viz",
    # Configuration
    "GridLines",
    "LineStyle",
    "RenderConfig",
    # Model interface
    "PrecomputedTermModel",
    "TermPrediction",
    "TermPredictor",
    # Plotting
    "compose",
    "plot_cox_spline",
    "render",
]
