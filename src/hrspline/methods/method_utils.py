"""Shared input handling for the numeric methods."""

from collections.abc import Sequence

import numpy as np
import pandas as pd
from numpy.typing import NDArray
from torch import Tensor

from ..exceptions import LengthMismatchError


def torch_to_numpy(tensor: Tensor | NDArray) -> NDArray:
    """Convert tensor or numpy array to numpy array.

    Args:
        tensor: Input PyTorch tensor or numpy array.

    Returns:
        Numpy array with preserved dtype.
    """
    # If already numpy array, return as-is
    if isinstance(tensor, np.ndarray):
        return tensor

    # If tensor, convert to numpy (moving to CPU if necessary)
    return tensor.detach().cpu().numpy()


def as_float_array(values: Sequence[float | None] | NDArray | Tensor | pd.Series) -> NDArray:
    """Coerce a one-dimensional sequence to a float64 numpy array.

    ``None`` and pandas missing values become ``NaN``.

    Args:
        values: List, tuple, numpy array, pandas Series or torch tensor.

    Returns:
        1-D float64 array.

    Raises:
        ValueError: If the input is not one-dimensional.
    """
    if isinstance(values, Tensor):
        arr = torch_to_numpy(values).astype(np.float64)
    elif isinstance(values, pd.Series):
        arr = values.to_numpy(dtype=np.float64, na_value=np.nan)
    elif isinstance(values, np.ndarray) and values.dtype != object:
        arr = values.astype(np.float64)
    else:
        arr = np.asarray(
            [np.nan if v is None else v for v in values], dtype=np.float64
        )

    if arr.ndim != 1:
        raise ValueError(f"Expected a 1-D sequence, got shape {arr.shape}")
    return arr


def align_observations(
    x: NDArray, fit: NDArray, se: NDArray
) -> tuple[NDArray, NDArray, NDArray]:
    """Drop missing exposures and pair the remaining ones with their predictions.

    A fitted regression usually drops incomplete rows itself, so predictions
    may arrive either with one entry per exposure value (missing ones
    included) or with one entry per non-missing exposure value. Both are
    accepted; in the first case predictions are dropped by the same index as
    the missing exposures.

    Args:
        x: Exposure values, NaN for missing.
        fit: Centered log-hazard estimates for the spline term.
        se: Standard errors of ``fit``.

    Returns:
        Tuple of (x, fit, se) restricted to non-missing exposures, in the
        original order.

    Raises:
        LengthMismatchError: If ``fit`` and ``se`` differ in length, or their
            length matches neither the full nor the reduced exposure series.
    """
    if len(fit) != len(se):
        raise LengthMismatchError(
            f"fit and se must have equal length, got {len(fit)} and {len(se)}"
        )

    observed = ~np.isnan(x)
    n_observed = int(observed.sum())

    if len(fit) == len(x):
        return x[observed], fit[observed], se[observed]
    if len(fit) == n_observed:
        return x[observed], fit, se

    raise LengthMismatchError(
        f"Term predictions have length {len(fit)}; expected {len(x)} "
        f"(all observations) or {n_observed} (non-missing exposures)"
    )
