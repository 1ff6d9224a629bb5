"""Result containers for boundax."""

from __future__ import annotations

from typing import NamedTuple, Optional

import jax.numpy as jnp
import numpy as np
from jaxtyping import Array

from .protocols import ExecutionContext


class BoundingBoxes(NamedTuple):
    """One axis-aligned box per geometry (or per contiguous id run)."""

    minima: Array  # (num_boxes, 2)
    maxima: Array  # (num_boxes, 2)

    @property
    def num_boxes(self) -> int:
        return int(self.minima.shape[0])

    @property
    def dtype(self):
        return self.minima.dtype


def empty_bounding_boxes(
    dtype=jnp.float64,
    context: Optional[ExecutionContext] = None,
) -> BoundingBoxes:
    """Return a zero-length result of the given coordinate dtype."""

    empty = np.zeros((0, 2), dtype=dtype)
    if context is None:
        empty = jnp.asarray(empty)
    else:
        empty = context.put(empty)
    return BoundingBoxes(minima=empty, maxima=empty)


__all__ = ["BoundingBoxes", "empty_bounding_boxes"]
