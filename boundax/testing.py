"""Assertion helpers for comparing floating-point results in tests."""

from __future__ import annotations

import jax
import numpy as np

from .float_equal import DEFAULT_MAX_ULP, float_equal
from .types import BoundingBoxes


def assert_float_equal(
    actual,
    expected,
    *,
    max_ulp: int = DEFAULT_MAX_ULP,
    equal_nan: bool = False,
) -> None:
    """Assert that two float arrays agree to within ``max_ulp`` ULPs.

    ``expected`` is cast to the dtype of ``actual`` before comparing.
    """

    actual = np.asarray(jax.device_get(actual))
    expected = np.asarray(jax.device_get(expected), dtype=actual.dtype)
    if actual.shape != expected.shape:
        raise AssertionError(f"shape mismatch: {actual.shape} != {expected.shape}")

    equal = np.asarray(float_equal(actual, expected, max_ulp))
    if equal_nan:
        equal = equal | (np.isnan(actual) & np.isnan(expected))
    if not equal.all():
        mismatched = np.argwhere(~equal)
        first = tuple(int(i) for i in mismatched[0])
        raise AssertionError(
            f"{mismatched.shape[0]} of {equal.size} values differ by more than "
            f"{max_ulp} ULP; first at index {first}: "
            f"{actual[first]!r} != {expected[first]!r}"
        )


def assert_bounding_boxes_equal(
    actual: BoundingBoxes,
    expected,
    *,
    max_ulp: int = DEFAULT_MAX_ULP,
) -> None:
    """Assert box-by-box agreement; NaN matches NaN in the same slot."""

    expected_minima, expected_maxima = expected
    actual_count = int(np.shape(actual.minima)[0])
    expected_count = int(np.shape(expected_minima)[0])
    if actual_count != expected_count:
        raise AssertionError(f"box count mismatch: {actual_count} != {expected_count}")
    assert_float_equal(
        actual.minima, expected_minima, max_ulp=max_ulp, equal_nan=True
    )
    assert_float_equal(
        actual.maxima, expected_maxima, max_ulp=max_ulp, equal_nan=True
    )


__all__ = ["assert_bounding_boxes_equal", "assert_float_equal"]
