"""Declarative draw instructions for a hazard-ratio spline figure.

A composed figure is an ordered tuple of these records. A renderer draws them
strictly in sequence, later ones on top of earlier ones. Geometry is stored
as tuples of floats so that two compositions of the same inputs compare
equal.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Literal, Union

from numpy.typing import NDArray

from ..config import LineStyle

# Tick lengths as a fraction of the plot region
MINOR_TICK_LENGTH = 0.009
MAJOR_TICK_LENGTH = 0.02


class InstructionKind(str, Enum):
    """Layer kinds, listed in drawing order."""

    BACKGROUND = "background"
    AXIS_TICKS = "axis-ticks"
    REFERENCE_LINE = "reference-line"
    GRID_LINE = "grid-line"
    CURVE = "curve"
    CONFIDENCE_BAND = "confidence-band"
    LEGEND = "legend"
    DISTRIBUTION_BOX = "distribution-box"


def as_float_tuple(values: NDArray) -> tuple[float, ...]:
    return tuple(float(v) for v in values)


@dataclass(frozen=True)
class PlotFrame:
    """Text and view limits of the plot region."""

    title: str
    subtitle: str
    x_label: str
    y_label: str
    x_limits: tuple[float, float]
    y_limits: tuple[float, float]


@dataclass(frozen=True)
class Background:
    color: str

    kind: ClassVar[InstructionKind] = InstructionKind.BACKGROUND


@dataclass(frozen=True)
class AxisTicks:
    """One set of tick marks on an axis.

    Attributes:
        axis: "x" or "y".
        positions: Tick positions in data coordinates.
        length: Outward tick length as a fraction of the plot region.
        labeled: Whether the ticks carry value labels.
    """

    axis: Literal["x", "y"]
    positions: tuple[float, ...]
    length: float
    labeled: bool

    kind: ClassVar[InstructionKind] = InstructionKind.AXIS_TICKS


@dataclass(frozen=True)
class ReferenceLine:
    """Horizontal line marking no effect (hazard ratio of 1)."""

    y: float
    style: LineStyle

    kind: ClassVar[InstructionKind] = InstructionKind.REFERENCE_LINE


@dataclass(frozen=True)
class GridLine:
    orientation: Literal["horizontal", "vertical"]
    position: float
    style: LineStyle

    kind: ClassVar[InstructionKind] = InstructionKind.GRID_LINE


@dataclass(frozen=True)
class CurveLine:
    """The smoothed hazard-ratio curve."""

    x: tuple[float, ...]
    y: tuple[float, ...]
    style: LineStyle

    kind: ClassVar[InstructionKind] = InstructionKind.CURVE


@dataclass(frozen=True)
class BandLine:
    """One bound of the 95% confidence band."""

    bound: Literal["upper", "lower"]
    x: tuple[float, ...]
    y: tuple[float, ...]
    style: LineStyle

    kind: ClassVar[InstructionKind] = InstructionKind.CONFIDENCE_BAND


@dataclass(frozen=True)
class Legend:
    """Text-only legend, e.g. the spline term's p-value.

    Attributes:
        text: Legend text.
        location: Matplotlib location string.
        inset: Distance from the plot edge as a fraction of the plot region.
    """

    text: str
    location: str
    inset: float = 0.03

    kind: ClassVar[InstructionKind] = InstructionKind.LEGEND


@dataclass(frozen=True)
class DistributionBox:
    """Horizontal box-and-whisker summary of the exposure.

    Attributes:
        position: Vertical centre of the box in data coordinates.
        width: Box height in y-axis units.
        q1: First quartile.
        median: Median.
        q3: Third quartile.
        whisker_low: Most extreme value within 1.5 IQR below q1.
        whisker_high: Most extreme value within 1.5 IQR above q3.
        outliers: Values beyond the whiskers.
        facecolor: Box fill colour.
    """

    position: float
    width: float
    q1: float
    median: float
    q3: float
    whisker_low: float
    whisker_high: float
    outliers: tuple[float, ...]
    facecolor: str

    kind: ClassVar[InstructionKind] = InstructionKind.DISTRIBUTION_BOX


DrawInstruction = Union[
    Background,
    AxisTicks,
    ReferenceLine,
    GridLine,
    CurveLine,
    BandLine,
    Legend,
    DistributionBox,
]
