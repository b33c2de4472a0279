"""
Unit tests for spline_smoother and method_utils modules.

Critical behaviors tested:
1. Unsorted input is sorted with x/y pairing preserved
2. Tied x values collapse to their mean y, weighted by multiplicity
3. Fewer than four distinct x values raise InsufficientDataError
4. The smoother reduces roughness of noisy data and preserves straight lines
5. Missing exposures are dropped together with their predictions
"""

import numpy as np
import pandas as pd
import pytest
import torch

from hrspline.exceptions import InsufficientDataError, LengthMismatchError
from hrspline.methods.method_utils import align_observations, as_float_array
from hrspline.methods.spline_smoother import SmoothedCurve, collapse_ties, smooth


@pytest.fixture
def rng():
    """Fixed RNG for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def noisy_sine(rng):
    """Noisy samples of a smooth curve on an unsorted grid."""
    x = rng.uniform(0, 2 * np.pi, size=80)
    y = np.sin(x) + rng.normal(scale=0.3, size=x.size)
    return x, y


# =============================================================================
# SmoothedCurve
# =============================================================================


class TestSmoothedCurve:
    def test_requires_increasing_x(self):
        with pytest.raises(ValueError):
            SmoothedCurve(x=np.array([1.0, 3.0, 2.0]), y=np.zeros(3))

    def test_requires_equal_shapes(self):
        with pytest.raises(ValueError):
            SmoothedCurve(x=np.array([1.0, 2.0]), y=np.zeros(3))

    def test_x_at_minimum_takes_first_tie(self):
        curve = SmoothedCurve(x=np.array([1.0, 2.0, 3.0]), y=np.array([2.0, 1.0, 1.0]))
        assert curve.x_at_minimum() == 2.0

    def test_x_at_minima_returns_all_ties(self):
        curve = SmoothedCurve(x=np.array([1.0, 2.0, 3.0]), y=np.array([2.0, 1.0, 1.0]))
        np.testing.assert_array_equal(curve.x_at_minima(), [2.0, 3.0])


# =============================================================================
# Tie Handling
# =============================================================================


class TestCollapseTies:
    def test_means_and_counts(self):
        x = np.array([3.0, 1.0, 3.0, 2.0, 1.0, 1.0])
        y = np.array([6.0, 1.0, 8.0, 5.0, 2.0, 3.0])
        knots, mean_y, weights = collapse_ties(x, y)

        np.testing.assert_array_equal(knots, [1.0, 2.0, 3.0])
        np.testing.assert_allclose(mean_y, [2.0, 5.0, 7.0])
        np.testing.assert_array_equal(weights, [3.0, 1.0, 2.0])


# =============================================================================
# Smoothing
# =============================================================================


class TestSmooth:
    def test_grid_is_distinct_sorted_x(self, noisy_sine):
        x, y = noisy_sine
        curve = smooth(x, y)

        np.testing.assert_array_equal(curve.x, np.unique(x))
        assert np.all(np.isfinite(curve.y))

    def test_order_of_input_does_not_matter(self, noisy_sine, rng):
        x, y = noisy_sine
        perm = rng.permutation(x.size)
        a = smooth(x, y)
        b = smooth(x[perm], y[perm])

        np.testing.assert_allclose(a.y, b.y, rtol=1e-8, atol=1e-10)

    def test_reduces_roughness(self, noisy_sine):
        """Smoothed second differences are smaller than the raw ones."""
        x, y = noisy_sine
        order = np.argsort(x)
        curve = smooth(x, y)

        raw_roughness = np.sum(np.diff(y[order], 2) ** 2)
        smooth_roughness = np.sum(np.diff(curve.y, 2) ** 2)
        assert smooth_roughness < raw_roughness

    def test_straight_line_is_preserved(self):
        """A line has no curvature penalty, so the fit reproduces it."""
        x = np.arange(10.0)
        y = 2.0 * x + 1.0
        curve = smooth(x, y, lam=1.0)

        np.testing.assert_allclose(curve.y, y, atol=1e-6)

    def test_four_distinct_values_interpolate(self):
        """With four knots the natural cubic interpolant is used."""
        x = np.array([4.0, 1.0, 3.0, 2.0])
        y = np.array([16.0, 1.0, 9.0, 4.0])
        curve = smooth(x, y)

        np.testing.assert_array_equal(curve.x, [1.0, 2.0, 3.0, 4.0])
        np.testing.assert_allclose(curve.y, [1.0, 4.0, 9.0, 16.0], atol=1e-10)

    def test_duplicates_are_averaged(self):
        x = np.array([1.0, 2.0, 2.0, 3.0, 4.0])
        y = np.array([1.0, 3.0, 5.0, 9.0, 16.0])
        curve = smooth(x, y)

        assert len(curve) == 4
        assert curve.y[1] == pytest.approx(4.0)

    @pytest.mark.parametrize(
        "x",
        [
            [1.0, 2.0, 3.0],
            [1.0, 1.0, 2.0, 2.0, 3.0, 3.0],
            [5.0, 5.0, 5.0, 5.0, 5.0],
        ],
        ids=["three_values", "three_distinct_with_ties", "constant"],
    )
    def test_too_few_distinct_values_raise(self, x):
        with pytest.raises(InsufficientDataError):
            smooth(np.array(x), np.ones(len(x)))

    def test_even_grid(self, noisy_sine):
        x, y = noisy_sine
        curve = smooth(x, y, n_grid=25)

        assert len(curve) == 25
        assert curve.x[0] == pytest.approx(x.min())
        assert curve.x[-1] == pytest.approx(x.max())

    def test_length_mismatch_raises(self):
        with pytest.raises(LengthMismatchError):
            smooth(np.arange(6.0), np.arange(5.0))

    def test_non_finite_raises(self):
        y = np.arange(6.0)
        y[2] = np.nan
        with pytest.raises(ValueError):
            smooth(np.arange(6.0), y)


# =============================================================================
# Input Coercion and Alignment
# =============================================================================


class TestAsFloatArray:
    def test_none_becomes_nan(self):
        arr = as_float_array([1, None, 3])
        assert arr.dtype == np.float64
        assert np.isnan(arr[1])

    def test_series_with_missing(self):
        arr = as_float_array(pd.Series([1.0, pd.NA, 2.5], dtype="Float64"))
        assert np.isnan(arr[1])
        assert arr[2] == 2.5

    def test_tensor(self):
        arr = as_float_array(torch.tensor([1.0, 2.0], dtype=torch.float32))
        assert arr.dtype == np.float64
        np.testing.assert_array_equal(arr, [1.0, 2.0])

    def test_two_dimensional_raises(self):
        with pytest.raises(ValueError):
            as_float_array(np.zeros((2, 2)))


class TestAlignObservations:
    @pytest.fixture
    def x_with_missing(self):
        return np.array([1.0, np.nan, 3.0, 4.0, np.nan, 6.0])

    def test_full_length_predictions_dropped_by_index(self, x_with_missing):
        fit = np.arange(6.0)
        se = np.arange(6.0) / 10
        x, fit_obs, se_obs = align_observations(x_with_missing, fit, se)

        np.testing.assert_array_equal(x, [1.0, 3.0, 4.0, 6.0])
        np.testing.assert_array_equal(fit_obs, [0.0, 2.0, 3.0, 5.0])
        np.testing.assert_allclose(se_obs, [0.0, 0.2, 0.3, 0.5])

    def test_reduced_predictions_used_as_is(self, x_with_missing):
        fit = np.array([10.0, 30.0, 40.0, 60.0])
        x, fit_obs, _ = align_observations(x_with_missing, fit, fit / 10)

        np.testing.assert_array_equal(x, [1.0, 3.0, 4.0, 6.0])
        np.testing.assert_array_equal(fit_obs, fit)

    def test_other_lengths_raise(self, x_with_missing):
        with pytest.raises(LengthMismatchError):
            align_observations(x_with_missing, np.zeros(5), np.zeros(5))

    def test_fit_se_mismatch_raises(self, x_with_missing):
        with pytest.raises(LengthMismatchError):
            align_observations(x_with_missing, np.zeros(6), np.zeros(4))
