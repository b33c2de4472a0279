"""Interface to the fitted proportional-hazards regression.

hrspline never fits a model. It needs two things from one: the spline term's
per-observation prediction with standard errors, and the coefficient summary
table holding the term's p-value. Any object providing ``predict_term`` and
``coefficient_summary`` works; PrecomputedTermModel wraps plain arrays.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import numpy as np
import pandas as pd
from numpy.typing import NDArray
from torch import Tensor

from .exceptions import LengthMismatchError
from .methods.method_utils import as_float_array

# The exposure spline is the first model term
SPLINE_TERM_INDEX = 0

# Position of the spline term's p-value in the coefficient summary
# (columns: coef, se(coef), se2, Chisq, DF, p)
P_VALUE_ROW = 0
P_VALUE_COLUMN = 5


@dataclass(frozen=True)
class TermPrediction:
    """Per-observation prediction of one model term.

    Attributes:
        fit: Centered log hazard ratio.
        se: Standard error of fit.
    """

    fit: NDArray
    se: NDArray

    def __post_init__(self):
        fit = as_float_array(self.fit)
        se = as_float_array(self.se)
        if len(fit) != len(se):
            raise LengthMismatchError(
                f"fit and se must have equal length, got {len(fit)} and {len(se)}"
            )
        object.__setattr__(self, "fit", fit)
        object.__setattr__(self, "se", se)

    def __len__(self) -> int:
        return len(self.fit)

    @classmethod
    def coerce(cls, prediction: "TermPrediction | Mapping") -> "TermPrediction":
        """Accept a TermPrediction or any mapping with "fit" and "se" keys."""
        if isinstance(prediction, cls):
            return prediction
        return cls(fit=prediction["fit"], se=prediction["se"])


@runtime_checkable
class TermPredictor(Protocol):
    """What hrspline needs from a fitted proportional-hazards model."""

    def predict_term(self, term_index: int) -> TermPrediction | Mapping: ...

    def coefficient_summary(self) -> pd.DataFrame: ...


@dataclass(frozen=True)
class PrecomputedTermModel:
    """Regression collaborator backed by predictions the caller already has.

    Useful when the model was fit elsewhere and its term predictions and
    coefficient table were exported.

    Attributes:
        fit: Centered log hazard ratio of the spline term per observation.
        se: Standard error of fit.
        summary: Coefficient summary table, or None if unavailable.
    """

    fit: Sequence[float] | NDArray | Tensor
    se: Sequence[float] | NDArray | Tensor
    summary: pd.DataFrame | None = None

    def predict_term(self, term_index: int = SPLINE_TERM_INDEX) -> TermPrediction:
        if term_index != SPLINE_TERM_INDEX:
            raise IndexError(
                f"Only the spline term ({SPLINE_TERM_INDEX}) is available, "
                f"got term_index={term_index}"
            )
        return TermPrediction(fit=self.fit, se=self.se)

    def coefficient_summary(self) -> pd.DataFrame:
        if self.summary is None:
            raise LookupError("No coefficient summary was provided")
        return self.summary


def extract_term_p_value(model: TermPredictor) -> float:
    """Read the spline term's p-value from the model's coefficient summary.

    Args:
        model: Fitted regression collaborator.

    Returns:
        The p-value at row P_VALUE_ROW, column P_VALUE_COLUMN.

    Raises:
        LookupError: If the table is too small or unavailable.
        ValueError: If the cell is not a finite number in [0, 1].
    """
    summary = model.coefficient_summary()
    table = np.asarray(summary, dtype=object)
    if (
        table.ndim != 2
        or table.shape[0] <= P_VALUE_ROW
        or table.shape[1] <= P_VALUE_COLUMN
    ):
        raise LookupError(
            f"Coefficient summary of shape {table.shape} has no cell "
            f"({P_VALUE_ROW}, {P_VALUE_COLUMN})"
        )

    p_value = float(table[P_VALUE_ROW, P_VALUE_COLUMN])
    if not np.isfinite(p_value) or not 0.0 <= p_value <= 1.0:
        raise ValueError(f"Spline term p-value is not a probability: {p_value}")
    return p_value
