"""Figure composition and matplotlib rendering."""

from .compose import Composition, compose
from .instructions import DrawInstruction, InstructionKind, PlotFrame
from .render import plot_cox_spline, render

__all__ = [
    "Composition",
    "DrawInstruction",
    "InstructionKind",
    "PlotFrame",
    "compose",
    "plot_cox_spline",
    "render",
]
