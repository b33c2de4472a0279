"""Display options for a hazard-ratio spline figure.

All options live in one immutable RenderConfig. Colours and line types use
the same vocabulary as R graphics (``"grey60"``, ``lty = 2``) as well as
anything matplotlib understands; see hrspline.viz.style for the translation.

| option                  | default                          |
|-------------------------|----------------------------------|
| x_label                 | required                         |
| title                   | required                         |
| subtitle                | ""                               |
| y_label                 | "Hazard Ratio"                   |
| return_values           | False                            |
| legend_position         | None (no legend)                 |
| show_distribution_box   | False                            |
| y_max_override          | None                             |
| x_limits_override       | (None, None)                     |
| background_color        | "grey98"                         |
| reference_line_style    | dashed, "grey60", width 1.5      |
| horizontal_grid_lines   | None                             |
| vertical_grid_lines     | None                             |
"""

from dataclasses import dataclass, field

from .exceptions import InvalidRangeError, MissingRequiredInputError


@dataclass(frozen=True)
class LineStyle:
    """Line type, colour and width.

    Attributes:
        linestyle: Matplotlib dash style or an R ``lty`` code (0-6).
        color: Matplotlib colour or an R grey level such as "grey60".
        linewidth: Line width.
    """

    linestyle: str | int = "--"
    color: str = "grey60"
    linewidth: float = 1.0


@dataclass(frozen=True)
class GridLines:
    """Custom reference lines at fixed axis positions."""

    positions: tuple[float, ...]
    style: LineStyle = field(default_factory=LineStyle)

    def __post_init__(self):
        object.__setattr__(
            self, "positions", tuple(float(p) for p in self.positions)
        )


def _reference_line_default() -> LineStyle:
    return LineStyle(linestyle="--", color="grey60", linewidth=1.5)


@dataclass(frozen=True)
class RenderConfig:
    """Immutable bundle of figure options.

    Attributes:
        x_label: Exposure axis label, e.g. "Serum albumin (g/dL)".
        title: Figure title.
        subtitle: Text placed just above the plot region.
        y_label: Hazard-ratio axis label.
        return_values: Whether compose() returns the numeric curve data.
        legend_position: Where to show the spline p-value, e.g. "topleft" or
            "upper left". None shows no legend.
        show_distribution_box: Whether to draw a box plot of the exposure
            below the curve.
        y_max_override: Fixed y-axis maximum (the minimum is always 0).
        x_limits_override: Fixed x-axis (min, max); either bound may be None.
        background_color: Plot region fill, also used for the box plot.
        reference_line_style: Style of the hazard ratio = 1 line.
        horizontal_grid_lines: Extra horizontal lines, drawn in order.
        vertical_grid_lines: Extra vertical lines, drawn in order.
    """

    x_label: str
    title: str
    subtitle: str = ""
    y_label: str = "Hazard Ratio"
    return_values: bool = False
    legend_position: str | None = None
    show_distribution_box: bool = False
    y_max_override: float | None = None
    x_limits_override: tuple[float | None, float | None] = (None, None)
    background_color: str = "grey98"
    reference_line_style: LineStyle = field(default_factory=_reference_line_default)
    horizontal_grid_lines: GridLines | None = None
    vertical_grid_lines: GridLines | None = None

    def __post_init__(self):
        if self.x_label is None or self.x_label == "":
            raise MissingRequiredInputError("Provide an x-axis label: x_label=...")
        if self.title is None or self.title == "":
            raise MissingRequiredInputError("Provide a title: title=...")

        limits = self.x_limits_override
        if limits is None:
            limits = (None, None)
        if not hasattr(limits, "__len__") or len(limits) != 2:
            raise ValueError(
                "x_limits_override must be a (min, max) pair; "
                f"use None for a bound that should follow the data, got {limits!r}"
            )
        limits = tuple(None if bound is None else float(bound) for bound in limits)
        if None not in limits and limits[0] >= limits[1]:
            raise InvalidRangeError(
                f"x_limits_override min must be below max, got {limits}"
            )
        object.__setattr__(self, "x_limits_override", limits)
