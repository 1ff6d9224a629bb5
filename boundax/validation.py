"""Consistency checks for offset-encoded geometry buffers.

Size checks only look at array lengths. Value checks read the offsets back to
the host, so they run once, synchronously, before any work is issued.
"""

from __future__ import annotations

import logging

import jax
import numpy as np

from .dtypes import is_integer
from .errors import InvalidGeometryError, TypeConstraintError

logger = logging.getLogger(__name__)

# A closed ring needs at least three distinct vertices plus the closing one.
MIN_RING_VERTICES = 4


def validate_polygon_sizes(
    num_vertices: int,
    num_polygon_offsets: int,
    num_ring_offsets: int,
) -> None:
    """Check that polygon offsets, ring offsets and vertices can agree."""

    if num_polygon_offsets < 1:
        raise InvalidGeometryError("polygon offsets must contain at least one value")
    if num_ring_offsets < 1:
        raise InvalidGeometryError("ring offsets must contain at least one value")
    if num_ring_offsets < num_polygon_offsets:
        raise InvalidGeometryError(
            "each polygon must have at least one ring: "
            f"{num_polygon_offsets - 1} polygons, {num_ring_offsets - 1} rings"
        )
    if num_vertices < MIN_RING_VERTICES * (num_ring_offsets - 1):
        raise InvalidGeometryError(
            f"each ring must have at least {MIN_RING_VERTICES} vertices: "
            f"{num_ring_offsets - 1} rings, {num_vertices} vertices"
        )


def require_integer_offsets(offsets, *, name: str) -> None:
    """Reject offset arrays that are not one-dimensional integer arrays."""

    if not is_integer(offsets.dtype):
        raise TypeConstraintError(f"{name} must be integer, got dtype {offsets.dtype}")
    if offsets.ndim != 1:
        raise InvalidGeometryError(
            f"{name} must be one-dimensional, got shape {tuple(offsets.shape)}"
        )


def validate_offsets(offsets, num_children: int, *, name: str) -> None:
    """Check an offset array against the length of the array it indexes."""

    require_integer_offsets(offsets, name=name)
    host = np.asarray(jax.device_get(offsets))
    logger.debug("Read back %s (%d values) for validation", name, host.shape[0])
    if host.shape[0] == 0:
        raise InvalidGeometryError(f"{name} must contain at least one value")
    if int(host[0]) != 0:
        raise InvalidGeometryError(f"{name} must start at 0, got {int(host[0])}")
    if np.any(np.diff(host) < 0):
        raise InvalidGeometryError(f"{name} must be non-decreasing")
    if int(host[-1]) != num_children:
        raise InvalidGeometryError(
            f"{name} must end at {num_children}, got {int(host[-1])}"
        )


def validate_linestring_offsets(linestring_offsets, num_vertices: int) -> None:
    validate_offsets(linestring_offsets, num_vertices, name="linestring_offsets")


def validate_polygon_offsets(polygon_offsets, ring_offsets, num_vertices: int) -> None:
    validate_offsets(
        polygon_offsets,
        int(ring_offsets.shape[0]) - 1,
        name="polygon_offsets",
    )
    validate_offsets(ring_offsets, num_vertices, name="ring_offsets")


__all__ = [
    "MIN_RING_VERTICES",
    "require_integer_offsets",
    "validate_linestring_offsets",
    "validate_offsets",
    "validate_polygon_offsets",
    "validate_polygon_sizes",
]
