"""Segmented min/max reduction of id-tagged points into bounding boxes.

Each point is first inflated into a box by the expansion radius, then boxes
sharing a contiguous run of identical ids are merged with :func:`merge_boxes`.
Grouping is segmented: an id compares only against its predecessor, so an id
that reappears after a different id opens a new run and a new box.

NaN handling is explicit and independent of the backend's min/max primitive:
if any expanded coordinate of a run is NaN on an axis, that axis of the run's
box is NaN. A segment that receives no points produces an all-NaN box.
"""

from __future__ import annotations

import logging
from typing import Optional

import jax.numpy as jnp

from .protocols import ExecutionContext
from .types import BoundingBoxes

logger = logging.getLogger(__name__)


def expand_points(xp, points, radius):
    """Inflate every point into the box ``{p - (r, r), p + (r, r)}``."""

    return points - radius, points + radius


def _poison_nan_axes(xp, minima, maxima):
    # A NaN anywhere on an axis makes both bounds of that axis NaN.
    poisoned = xp.isnan(minima) | xp.isnan(maxima)
    nan = xp.asarray(xp.nan, dtype=minima.dtype)
    return xp.where(poisoned, nan, minima), xp.where(poisoned, nan, maxima)


def merge_boxes(a: BoundingBoxes, b: BoundingBoxes, xp=jnp) -> BoundingBoxes:
    """Combine two boxes (or equal-length box arrays) into their union.

    Follows the same NaN rule as the segmented reduction.
    """

    minima, maxima = _poison_nan_axes(
        xp,
        xp.minimum(a.minima, b.minima),
        xp.maximum(a.maxima, b.maxima),
    )
    return BoundingBoxes(minima=minima, maxima=maxima)


def run_segment_ids(xp, ids):
    """Number contiguous runs of equal ids 0, 1, 2, ... in order."""

    starts = (ids[1:] != ids[:-1]).astype(xp.int64)
    return xp.concatenate([xp.zeros((1,), dtype=xp.int64), xp.cumsum(starts)])


def _stage_reduction_inputs(xp, points, radius):
    lower, upper = expand_points(xp, points, radius)
    nan_flags = (xp.isnan(lower) | xp.isnan(upper)).astype(points.dtype)
    present = xp.ones((points.shape[0], 1), dtype=points.dtype)
    # Columns: max x, max y, nan x, nan y, present.
    return lower, xp.concatenate([upper, nan_flags, present], axis=1)


def _finalize_boxes(xp, minima, upper):
    maxima = upper[:, 0:2]
    poisoned = upper[:, 2:4] > 0
    empty = upper[:, 4:5] <= 0
    invalid = poisoned | empty
    nan = xp.asarray(xp.nan, dtype=minima.dtype)
    return xp.where(invalid, nan, minima), xp.where(invalid, nan, maxima)


def reduce_bounding_boxes(
    segment_ids,
    points,
    expansion_radius,
    num_segments: int,
    context: ExecutionContext,
) -> BoundingBoxes:
    """Reduce points into one box per dense, sorted segment id.

    ``segment_ids`` must be non-decreasing values in ``[0, num_segments)``.
    All arrays must already live on ``context``.
    """

    lower, upper = context.elementwise_map(
        _stage_reduction_inputs, points, expansion_radius
    )
    minima = context.segmented_reduce(lower, segment_ids, num_segments, op="min")
    upper = context.segmented_reduce(upper, segment_ids, num_segments, op="max")
    minima, maxima = context.elementwise_map(_finalize_boxes, minima, upper)
    return BoundingBoxes(minima=minima, maxima=maxima)


def segmented_bounding_boxes(
    ids,
    points,
    expansion_radius,
    context: ExecutionContext,
    num_boxes: Optional[int] = None,
) -> BoundingBoxes:
    """Reduce points into one box per contiguous run of identical ids.

    When ``num_boxes`` is omitted the run count is read back to the host,
    which waits for the run detection to finish. Passing the known run count
    keeps the whole call asynchronous. A given ``num_boxes`` must equal the
    run count: the JAX context drops runs past it and the NumPy context
    raises ``ValueError``.
    """

    segment_ids = context.elementwise_map(run_segment_ids, ids)
    if num_boxes is None:
        num_boxes = int(context.synchronize(segment_ids)[-1]) + 1
        logger.debug("Counted %d id runs on context '%s'", num_boxes, context.name)
    return reduce_bounding_boxes(
        segment_ids, points, expansion_radius, num_boxes, context
    )


__all__ = [
    "expand_points",
    "merge_boxes",
    "reduce_bounding_boxes",
    "run_segment_ids",
    "segmented_bounding_boxes",
]
