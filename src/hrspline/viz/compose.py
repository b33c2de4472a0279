"""Compose a hazard-ratio spline figure as an ordered list of draw instructions.

Composition is a pure function of the exposure series, the fitted model and
the RenderConfig. Nothing is drawn here: every fatal error surfaces before a
canvas is touched, and the same inputs always give equal instruction tuples.

Example usage:
    ```python
    from hrspline.config import RenderConfig
    from hrspline.model import PrecomputedTermModel
    from hrspline.viz import compose, render

    composition = compose(
        x=albumin,
        model=PrecomputedTermModel(fit=fit, se=se, summary=summary),
        config=RenderConfig(
            x_label="Albumin (g/dL)",
            title="Circulating albumin and risk of mortality",
            legend_position="topleft",
            show_distribution_box=True,
        ),
    )
    fig = render(composition)
    fig.savefig("albumin_hr.png")
    ```
"""

import warnings
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import pandas as pd
from matplotlib import cbook
from numpy.typing import NDArray
from torch import Tensor

from ..config import LineStyle, RenderConfig
from ..exceptions import LegendExtractionWarning, MissingRequiredInputError
from ..methods.axis_scaling import (
    DISTRIBUTION_INSET_OFFSET,
    AxisSpec,
    compute_x_axis,
    compute_y_axis,
    tick_positions,
)
from ..methods.confidence_band import HazardRatioBand, build_confidence_band
from ..methods.method_utils import align_observations, as_float_array
from ..model import (
    SPLINE_TERM_INDEX,
    TermPrediction,
    TermPredictor,
    extract_term_p_value,
)
from .instructions import (
    MAJOR_TICK_LENGTH,
    MINOR_TICK_LENGTH,
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
    as_float_tuple,
)
from .style import (
    BAND_CURVE_COLOR,
    CENTER_CURVE_COLOR,
    CURVE_LINEWIDTH,
    format_p_value,
    resolve_legend_location,
)

NO_EFFECT_HR = 1.0

# y-axis tick sets: half units always, whole units always, quarters below 5
Y_HALF_TICK = 0.5
Y_UNIT_TICK = 1.0
Y_QUARTER_TICK = 0.25
Y_QUARTER_TICK_BELOW = 5.0
# Below this y max the half-unit ticks carry the labels
Y_LABEL_UNIT_FROM = 2.0

# Box height is the y-axis span divided by this
DISTRIBUTION_BOX_WIDTH_DIVISOR = 20
BOX_WHISKER_RANGE = 1.5


@dataclass(frozen=True, eq=False)
class Composition:
    """A fully composed figure and the numbers behind it.

    Attributes:
        frame: Title, labels and view limits.
        instructions: Draw instructions in drawing order.
        x_axis: Exposure axis scaling.
        y_axis: Hazard-ratio axis scaling.
        band: Smoothed center curve and band.
        values: Numeric curve data if requested, else None.
    """

    frame: PlotFrame
    instructions: tuple[DrawInstruction, ...]
    x_axis: AxisSpec
    y_axis: AxisSpec
    band: HazardRatioBand
    values: pd.DataFrame | None = None


def _axis_tick_instructions(x_axis: AxisSpec, y_axis: AxisSpec) -> list[AxisTicks]:
    y_min, y_max = y_axis.rounded_min, y_axis.rounded_max
    label_units = y_max >= Y_LABEL_UNIT_FROM

    ticks = [
        AxisTicks(
            axis="x",
            positions=as_float_tuple(x_axis.minor_ticks()),
            length=MINOR_TICK_LENGTH,
            labeled=False,
        ),
        AxisTicks(
            axis="x",
            positions=as_float_tuple(x_axis.major_ticks()),
            length=MAJOR_TICK_LENGTH,
            labeled=True,
        ),
        AxisTicks(
            axis="y",
            positions=as_float_tuple(tick_positions(y_min, y_max, Y_HALF_TICK)),
            length=MINOR_TICK_LENGTH,
            labeled=not label_units,
        ),
        AxisTicks(
            axis="y",
            positions=as_float_tuple(tick_positions(y_min, y_max, Y_UNIT_TICK)),
            length=MAJOR_TICK_LENGTH,
            labeled=label_units,
        ),
    ]
    if y_max < Y_QUARTER_TICK_BELOW:
        ticks.append(
            AxisTicks(
                axis="y",
                positions=as_float_tuple(tick_positions(y_min, y_max, Y_QUARTER_TICK)),
                length=MINOR_TICK_LENGTH,
                labeled=False,
            )
        )
    return ticks


def _legend_instruction(model: TermPredictor, location: str) -> Legend | None:
    try:
        p_value = extract_term_p_value(model)
    except (AttributeError, LookupError, ValueError, TypeError) as e:
        warnings.warn(
            f"Could not read the spline term p-value, legend omitted: {e}",
            LegendExtractionWarning,
            stacklevel=3,
        )
        return None
    return Legend(text=f"Spline P = {format_p_value(p_value)}", location=location)


def _distribution_box(x: NDArray, y_axis: AxisSpec, facecolor: str) -> DistributionBox:
    stats = cbook.boxplot_stats(x, whis=BOX_WHISKER_RANGE)[0]
    return DistributionBox(
        position=DISTRIBUTION_INSET_OFFSET,
        width=y_axis.rounded_max / DISTRIBUTION_BOX_WIDTH_DIVISOR,
        q1=float(stats["q1"]),
        median=float(stats["med"]),
        q3=float(stats["q3"]),
        whisker_low=float(stats["whislo"]),
        whisker_high=float(stats["whishi"]),
        outliers=as_float_tuple(np.sort(stats["fliers"])),
        facecolor=facecolor,
    )


def compose(
    x: Sequence[float | None] | NDArray | Tensor | pd.Series,
    model: TermPredictor,
    config: RenderConfig,
) -> Composition:
    """Compose the hazard-ratio spline figure.

    Args:
        x: Exposure values used in the model's spline term; missing values
            (NaN or None) are dropped together with their predictions.
        model: Fitted regression providing ``predict_term`` and
            ``coefficient_summary``.
        config: Display options.

    Returns:
        Composition holding the frame, the ordered draw instructions and,
        with ``config.return_values``, the numeric curve data.

    Raises:
        MissingRequiredInputError: If x, model or config is missing.
        LengthMismatchError: If predictions cannot be paired with x.
        InsufficientDataError: If fewer than four distinct exposures remain.
        InvalidRangeError: If an axis range is degenerate.
    """
    if x is None:
        raise MissingRequiredInputError("Need to provide vector of x data: x=...")
    if model is None:
        raise MissingRequiredInputError(
            "Need to provide a fitted model with a spline term: model=..."
        )
    if config is None:
        raise MissingRequiredInputError("Need to provide a RenderConfig: config=...")
    legend_location = (
        None
        if config.legend_position is None
        else resolve_legend_location(config.legend_position)
    )

    # Pair exposures with predictions and drop missing exposures
    prediction = TermPrediction.coerce(model.predict_term(SPLINE_TERM_INDEX))
    x_obs, fit, se = align_observations(
        as_float_array(x), prediction.fit, prediction.se
    )

    band = build_confidence_band(x_obs, fit, se)
    x_axis = compute_x_axis(x_obs, config.x_limits_override)
    y_axis = compute_y_axis(band.center.y, config.y_max_override)

    instructions: list[DrawInstruction] = [Background(color=config.background_color)]
    instructions.extend(_axis_tick_instructions(x_axis, y_axis))
    instructions.append(
        ReferenceLine(y=NO_EFFECT_HR, style=config.reference_line_style)
    )

    if config.horizontal_grid_lines is not None:
        instructions.extend(
            GridLine("horizontal", position, config.horizontal_grid_lines.style)
            for position in config.horizontal_grid_lines.positions
        )
    if config.vertical_grid_lines is not None:
        instructions.extend(
            GridLine("vertical", position, config.vertical_grid_lines.style)
            for position in config.vertical_grid_lines.positions
        )

    curve_style = LineStyle("-", CENTER_CURVE_COLOR, CURVE_LINEWIDTH)
    band_style = LineStyle("--", BAND_CURVE_COLOR, CURVE_LINEWIDTH)
    instructions.append(
        CurveLine(
            x=as_float_tuple(band.center.x),
            y=as_float_tuple(band.center.y),
            style=curve_style,
        )
    )
    for bound, curve in (("upper", band.upper), ("lower", band.lower)):
        instructions.append(
            BandLine(
                bound=bound,
                x=as_float_tuple(curve.x),
                y=as_float_tuple(curve.y),
                style=band_style,
            )
        )

    if legend_location is not None:
        legend = _legend_instruction(model, legend_location)
        if legend is not None:
            instructions.append(legend)

    if config.show_distribution_box:
        instructions.append(_distribution_box(x_obs, y_axis, config.background_color))

    values = None
    if config.return_values:
        values = band.to_frame()
        for x_min in band.center.x_at_minima():
            print(f"X value with minimum HR = {x_min:.15g}")

    frame = PlotFrame(
        title=config.title,
        subtitle=config.subtitle,
        x_label=config.x_label,
        y_label=config.y_label,
        x_limits=(x_axis.axis_limit_min, x_axis.axis_limit_max),
        y_limits=(DISTRIBUTION_INSET_OFFSET, y_axis.axis_limit_max),
    )
    return Composition(
        frame=frame,
        instructions=tuple(instructions),
        x_axis=x_axis,
        y_axis=y_axis,
        band=band,
        values=values,
    )
