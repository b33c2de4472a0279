"""Styling helpers: rcParams, colours, line types, legend placement, p-values.

Options accept R graphics vocabulary (grey levels, ``lty`` codes, legend
keywords such as "topleft") as well as native matplotlib values, so
figure settings carried over from R scripts keep working.
"""

import re
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Any

# Curve colours and widths
CENTER_CURVE_COLOR = "red"
BAND_CURVE_COLOR = "orange"
CURVE_LINEWIDTH = 1.5

_GREY_LEVEL = re.compile(r"^gr[ae]y(\d{1,3})$")

# R lty codes -> matplotlib dash styles
_R_LINE_TYPES: dict[int, str | tuple] = {
    0: "None",
    1: "-",
    2: "--",
    3: ":",
    4: "-.",
    5: (0, (8, 3)),
    6: (0, (2, 2, 6, 2)),
}

# R legend keywords -> matplotlib legend locations
_R_LEGEND_LOCATIONS: dict[str, str] = {
    "topleft": "upper left",
    "top": "upper center",
    "topright": "upper right",
    "left": "center left",
    "center": "center",
    "right": "center right",
    "bottomleft": "lower left",
    "bottom": "lower center",
    "bottomright": "lower right",
}

_P_VALUE_SIGNIFICANT_DIGITS = 2


def configure_publication_style() -> dict[str, Any]:
    """Return matplotlib rcParams for publication-quality plots."""
    return {
        "font.family": "sans-serif",
        "font.sans-serif": ["Arial", "Helvetica", "DejaVu Sans"],
        "font.size": 11,
        "axes.labelsize": 12,
        "axes.titlesize": 13,
        "axes.titleweight": "bold",
        "xtick.labelsize": 10,
        "ytick.labelsize": 10,
        "legend.fontsize": 10,
        "axes.linewidth": 1.0,
        "lines.linewidth": 1.5,
        "xtick.major.width": 1.0,
        "ytick.major.width": 1.0,
        "xtick.direction": "out",
        "ytick.direction": "out",
        "figure.dpi": 150,
        "savefig.dpi": 300,
        "savefig.bbox": "tight",
    }


def resolve_color(color: str) -> str:
    """Translate R grey levels to hex; pass other colours through.

    Examples:
        >>> resolve_color("grey60")
        '#999999'
        >>> resolve_color("gray98")
        '#fafafa'
        >>> resolve_color("steelblue")
        'steelblue'
    """
    match = _GREY_LEVEL.match(color)
    if match is None:
        return color

    level = int(match.group(1))
    if level > 100:
        raise ValueError(f"Grey level must be between 0 and 100, got {color!r}")
    channel = round(level * 255 / 100)
    return f"#{channel:02x}{channel:02x}{channel:02x}"


def resolve_linestyle(linestyle: str | int) -> str | tuple:
    """Translate an R ``lty`` code to a matplotlib dash style."""
    if isinstance(linestyle, bool) or not isinstance(linestyle, int):
        return linestyle
    if linestyle not in _R_LINE_TYPES:
        raise ValueError(f"R line type must be between 0 and 6, got {linestyle}")
    return _R_LINE_TYPES[linestyle]


def resolve_legend_location(position: str) -> str:
    """Translate a legend position to a matplotlib location string.

    Raises:
        ValueError: If the position is neither an R legend keyword nor a
            matplotlib location.
    """
    if position in _R_LEGEND_LOCATIONS:
        return _R_LEGEND_LOCATIONS[position]
    if position in _R_LEGEND_LOCATIONS.values():
        return position
    valid = sorted(set(_R_LEGEND_LOCATIONS) | set(_R_LEGEND_LOCATIONS.values()))
    raise ValueError(f"Unknown legend position {position!r}; choose one of {valid}")


def format_p_value(p_value: float) -> str:
    """Format a p-value to two significant figures.

    Rounding is half-to-even on the shortest decimal representation of the
    float, so 0.0125 gives "0.012" and 0.0135 gives "0.014". The result uses
    ``%g`` notation, switching to an exponent below 1e-4.

    Examples:
        >>> format_p_value(0.04321)
        '0.043'
        >>> format_p_value(0.0125)
        '0.012'
        >>> format_p_value(0.000012345)
        '1.2e-05'
    """
    if p_value == 0:
        return "0"
    value = Decimal(repr(float(p_value)))
    exponent = value.adjusted() - (_P_VALUE_SIGNIFICANT_DIGITS - 1)
    rounded = value.quantize(Decimal(1).scaleb(exponent), rounding=ROUND_HALF_EVEN)
    return f"{float(rounded):g}"
