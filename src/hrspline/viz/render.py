"""Draw a composed hazard-ratio spline figure with matplotlib.

The renderer walks the instruction tuple in order and draws each layer on an
explicit Axes. Without an Axes it builds a standalone Figure that is not
registered with pyplot, so no global "current figure" is involved and a
failed call leaves nothing behind.

Example usage:
    ```python
    from hrspline import plot_cox_spline

    fig, values = plot_cox_spline(
        x=data["albumin"],
        model=model,
        x_label="Albumin (g/dL)",
        title="Circulating albumin and risk of mortality",
        legend_position="topleft",
        return_values=True,
    )
    fig.savefig("albumin_hr.pdf")
    ```
"""

from collections.abc import Callable, Sequence

import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.axes import Axes
from matplotlib.collections import LineCollection
from matplotlib.figure import Figure
from matplotlib.offsetbox import AnchoredText
from matplotlib.patches import Rectangle
from numpy.typing import NDArray
from torch import Tensor

from ..config import LineStyle, RenderConfig
from ..model import TermPredictor
from .compose import Composition, compose
from .instructions import (
    AxisTicks,
    Background,
    BandLine,
    CurveLine,
    DistributionBox,
    DrawInstruction,
    GridLine,
    Legend,
    PlotFrame,
    ReferenceLine,
)
from .style import configure_publication_style, resolve_color, resolve_linestyle

DEFAULT_FIGSIZE = (7.0, 6.0)

BOX_EDGE_COLOR = "black"
BOX_MEDIAN_LINEWIDTH = 2.5
BOX_LINEWIDTH = 1.0
# Whisker caps span this fraction of the box height
BOX_CAP_FRACTION = 0.5
OUTLIER_MARKERSIZE = 3.0


def _line_kwargs(style: LineStyle) -> dict:
    return {
        "color": resolve_color(style.color),
        "linestyle": resolve_linestyle(style.linestyle),
        "linewidth": style.linewidth,
    }


def _setup_frame(ax: Axes, frame: PlotFrame) -> None:
    ax.set_xlabel(frame.x_label)
    ax.set_ylabel(frame.y_label)
    if frame.subtitle:
        ax.set_title(frame.title, pad=22)
        ax.text(
            0.5,
            1.015,
            frame.subtitle,
            transform=ax.transAxes,
            ha="center",
            va="bottom",
            fontsize="medium",
        )
    else:
        ax.set_title(frame.title)
    ax.minorticks_off()


def _draw_background(ax: Axes, instruction: Background, frame: PlotFrame) -> None:
    ax.set_facecolor(resolve_color(instruction.color))


def _tick_length_points(ax: Axes, axis: str, fraction: float) -> float:
    """Convert a tick length given as a fraction of the plot region to points."""
    position = ax.get_position()
    width, height = ax.figure.get_size_inches()
    extent = position.height * height if axis == "x" else position.width * width
    return fraction * extent * 72


def _draw_ticks(ax: Axes, instruction: AxisTicks, frame: PlotFrame) -> None:
    if instruction.labeled:
        if instruction.axis == "x":
            ax.set_xticks(instruction.positions)
        else:
            ax.set_yticks(instruction.positions)
        ax.tick_params(
            axis=instruction.axis,
            which="major",
            length=_tick_length_points(ax, instruction.axis, instruction.length),
        )
        return

    # Unlabeled ticks are drawn as outward segments, only inside the view
    low, high = frame.x_limits if instruction.axis == "x" else frame.y_limits
    visible = [p for p in instruction.positions if low <= p <= high]
    if not visible:
        return

    if instruction.axis == "x":
        segments = [[(p, 0.0), (p, -instruction.length)] for p in visible]
        transform = ax.get_xaxis_transform()
    else:
        segments = [[(0.0, p), (-instruction.length, p)] for p in visible]
        transform = ax.get_yaxis_transform()

    ax.add_collection(
        LineCollection(
            segments,
            transform=transform,
            colors=plt.rcParams[f"{instruction.axis}tick.color"],
            linewidths=plt.rcParams[f"{instruction.axis}tick.major.width"],
            clip_on=False,
        ),
        autolim=False,
    )


def _draw_reference_line(ax: Axes, instruction: ReferenceLine, frame: PlotFrame) -> None:
    ax.axhline(instruction.y, **_line_kwargs(instruction.style))


def _draw_grid_line(ax: Axes, instruction: GridLine, frame: PlotFrame) -> None:
    if instruction.orientation == "horizontal":
        ax.axhline(instruction.position, **_line_kwargs(instruction.style))
    else:
        ax.axvline(instruction.position, **_line_kwargs(instruction.style))


def _draw_curve(ax: Axes, instruction: CurveLine | BandLine, frame: PlotFrame) -> None:
    ax.plot(instruction.x, instruction.y, **_line_kwargs(instruction.style))


def _draw_legend(ax: Axes, instruction: Legend, frame: PlotFrame) -> None:
    inset = instruction.inset
    ax.add_artist(
        AnchoredText(
            instruction.text,
            loc=instruction.location,
            frameon=False,
            borderpad=0.0,
            bbox_to_anchor=(inset, inset, 1 - 2 * inset, 1 - 2 * inset),
            bbox_transform=ax.transAxes,
        )
    )


def _draw_distribution_box(
    ax: Axes, instruction: DistributionBox, frame: PlotFrame
) -> None:
    center = instruction.position
    half = instruction.width / 2
    cap = half * BOX_CAP_FRACTION
    edge = {"color": BOX_EDGE_COLOR, "linewidth": BOX_LINEWIDTH}

    ax.add_patch(
        Rectangle(
            (instruction.q1, center - half),
            instruction.q3 - instruction.q1,
            instruction.width,
            facecolor=resolve_color(instruction.facecolor),
            edgecolor=BOX_EDGE_COLOR,
            linewidth=BOX_LINEWIDTH,
        )
    )
    ax.plot(
        [instruction.median, instruction.median],
        [center - half, center + half],
        color=BOX_EDGE_COLOR,
        linewidth=BOX_MEDIAN_LINEWIDTH,
    )

    # Whiskers and caps
    for end, hinge in (
        (instruction.whisker_low, instruction.q1),
        (instruction.whisker_high, instruction.q3),
    ):
        ax.plot([end, hinge], [center, center], linestyle="--", **edge)
        ax.plot([end, end], [center - cap, center + cap], linestyle="-", **edge)

    if instruction.outliers:
        ax.plot(
            instruction.outliers,
            [center] * len(instruction.outliers),
            linestyle="none",
            marker="o",
            markersize=OUTLIER_MARKERSIZE,
            color=BOX_EDGE_COLOR,
        )


_DRAWERS: dict[type, Callable[[Axes, DrawInstruction, PlotFrame], None]] = {
    Background: _draw_background,
    AxisTicks: _draw_ticks,
    ReferenceLine: _draw_reference_line,
    GridLine: _draw_grid_line,
    CurveLine: _draw_curve,
    BandLine: _draw_curve,
    Legend: _draw_legend,
    DistributionBox: _draw_distribution_box,
}


def render(
    composition: Composition,
    ax: Axes | None = None,
    figsize: tuple[float, float] = DEFAULT_FIGSIZE,
) -> Figure:
    """Draw a composition.

    Args:
        composition: Output of compose().
        ax: Axes to draw on. If None, a new standalone Figure is created.
            The caller owns the Axes for the duration of the call.
        figsize: Size of the new Figure when ax is None.

    Returns:
        The Figure containing the drawing.
    """
    frame = composition.frame
    with plt.rc_context(configure_publication_style()):
        if ax is None:
            fig = Figure(figsize=figsize)
            ax = fig.add_subplot()
        else:
            fig = ax.figure

        _setup_frame(ax, frame)
        for instruction in composition.instructions:
            _DRAWERS[type(instruction)](ax, instruction, frame)

        # Set limits last; set_xticks/set_yticks would otherwise widen them
        ax.set_xlim(*frame.x_limits)
        ax.set_ylim(*frame.y_limits)

    return fig


def plot_cox_spline(
    x: Sequence[float | None] | NDArray | Tensor | pd.Series,
    model: TermPredictor,
    x_label: str,
    title: str,
    ax: Axes | None = None,
    **options,
) -> tuple[Figure, pd.DataFrame | None]:
    """Plot the smoothed hazard ratio of a spline exposure term.

    Args:
        x: Exposure values used in the model's spline term.
        model: Fitted regression providing ``predict_term`` and
            ``coefficient_summary``.
        x_label: Exposure axis label.
        title: Figure title.
        ax: Optional Axes to draw on.
        **options: Any other RenderConfig field, e.g. ``subtitle``,
            ``legend_position``, ``show_distribution_box``, ``return_values``.

    Returns:
        Tuple of (figure, values); values is the numeric curve data when
        ``return_values=True`` and None otherwise.
    """
    config = RenderConfig(x_label=x_label, title=title, **options)
    composition = compose(x, model, config)
    fig = render(composition, ax=ax)
    return fig, composition.values
