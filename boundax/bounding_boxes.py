"""Public bounding-box API for points, linestrings and polygons.

Every entry point checks its inputs synchronously, then issues the id
expansion and the segmented reduction to an execution context. With the JAX
context the call returns once the work is enqueued; synchronize the result
(``context.synchronize(boxes)``) before timing or reading it on the host.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

import numpy as np
from beartype import beartype
from jaxtyping import ArrayLike, jaxtyped

from .config import BoundingBoxConfig
from .contexts import get_execution_context
from .dtypes import is_floating, is_integer
from .errors import InvalidGeometryError, TypeConstraintError
from .geometry_ids import linestring_geometry_ids, polygon_geometry_ids
from .protocols import ExecutionContext
from .reduce import reduce_bounding_boxes, segmented_bounding_boxes
from .types import BoundingBoxes, empty_bounding_boxes
from .validation import (
    require_integer_offsets,
    validate_linestring_offsets,
    validate_polygon_offsets,
    validate_polygon_sizes,
)

logger = logging.getLogger(__name__)

ContextLike = Union[ExecutionContext, str, None]


def _resolve_context(
    context: ContextLike, config: Optional[BoundingBoxConfig]
) -> ExecutionContext:
    if config is not None and config.context is not None:
        context = config.context
    return get_execution_context(context)


def _resolve_points(points, context: ExecutionContext, *, name: str):
    array = context.put(points)
    if not is_floating(array.dtype):
        raise TypeConstraintError(
            f"{name} must be floating-point, got dtype {array.dtype}"
        )
    if array.ndim != 2 or array.shape[1] != 2:
        raise InvalidGeometryError(
            f"{name} must have shape (n, 2), got {tuple(array.shape)}"
        )
    return array


def _resolve_radius(expansion_radius, dtype, context: ExecutionContext):
    # A bare Python float adopts the coordinate dtype; anything else must
    # already carry exactly that dtype.
    if type(expansion_radius) is not float:
        radius_dtype = getattr(expansion_radius, "dtype", None)
        if radius_dtype is None or not is_floating(radius_dtype):
            raise TypeConstraintError(
                "expansion radius must be floating-point, "
                f"got {type(expansion_radius).__name__}"
            )
        if np.dtype(radius_dtype) != np.dtype(dtype):
            raise TypeConstraintError(
                f"expansion radius dtype {radius_dtype} does not match "
                f"coordinate dtype {dtype}"
            )
        if np.ndim(expansion_radius) != 0:
            raise ValueError("expansion radius must be a scalar")
    if float(expansion_radius) < 0.0:
        raise ValueError(
            f"expansion radius must be non-negative, got {float(expansion_radius)}"
        )
    return context.put(expansion_radius, dtype=dtype)


@jaxtyped(typechecker=beartype)
def point_bounding_boxes(
    ids: ArrayLike,
    points: ArrayLike,
    expansion_radius: ArrayLike = 0.0,
    *,
    context: ContextLike = None,
    num_boxes: Optional[int] = None,
    config: Optional[BoundingBoxConfig] = None,
) -> BoundingBoxes:
    """Compute one box per contiguous run of identical ``ids``.

    Parameters
    ----------
    ids : ArrayLike
        Integer group id per point. Runs need not be sorted; an id that
        reappears after a different id starts a separate box.
    points : ArrayLike
        Floating-point coordinates of shape ``(n, 2)``.
    expansion_radius : ArrayLike
        Non-negative distance added on every side of each point.
    context : ExecutionContext or str, optional
        Execution context instance or registered name.
    num_boxes : int, optional
        Known number of id runs. Omitting it reads the run count back to the
        host. It must equal the actual run count; it is not checked on the
        JAX context, where runs past ``num_boxes`` are dropped.
    config : BoundingBoxConfig, optional
        Overrides ``expansion_radius`` and ``context`` when given.

    Returns
    -------
    BoundingBoxes
        Boxes in first-appearance order of the runs.
    """

    radius_arg = config.expansion_radius if config else expansion_radius
    ctx = _resolve_context(context, config)
    points_arr = _resolve_points(points, ctx, name="points")
    ids_arr = ctx.put(ids)
    if not is_integer(ids_arr.dtype):
        raise TypeConstraintError(f"ids must be integer, got dtype {ids_arr.dtype}")
    if ids_arr.ndim != 1 or ids_arr.shape[0] != points_arr.shape[0]:
        raise InvalidGeometryError(
            f"ids shape {tuple(ids_arr.shape)} does not match "
            f"{points_arr.shape[0]} points"
        )
    radius = _resolve_radius(radius_arg, points_arr.dtype, ctx)

    if points_arr.shape[0] == 0:
        logger.debug("point_bounding_boxes: no points, returning empty result")
        return empty_bounding_boxes(points_arr.dtype, ctx)

    return segmented_bounding_boxes(ids_arr, points_arr, radius, ctx, num_boxes)


@jaxtyped(typechecker=beartype)
def linestring_bounding_boxes(
    linestring_offsets: ArrayLike,
    vertices: ArrayLike,
    expansion_radius: ArrayLike = 0.0,
    *,
    context: ContextLike = None,
    config: Optional[BoundingBoxConfig] = None,
) -> BoundingBoxes:
    """Compute one box per linestring.

    ``linestring_offsets`` has one entry per linestring plus a final entry
    equal to the number of vertices. A linestring without vertices gets an
    all-NaN box.
    """

    cfg = config or BoundingBoxConfig()
    radius_arg = cfg.expansion_radius if config else expansion_radius
    ctx = _resolve_context(context, config)
    offsets = ctx.put(linestring_offsets)
    require_integer_offsets(offsets, name="linestring_offsets")
    vertices_arr = _resolve_points(vertices, ctx, name="vertices")
    radius = _resolve_radius(radius_arg, vertices_arr.dtype, ctx)

    num_linestrings = max(int(offsets.shape[0]) - 1, 0)
    num_vertices = int(vertices_arr.shape[0])
    if num_linestrings == 0 or num_vertices == 0:
        logger.debug(
            "linestring_bounding_boxes: empty input (%d linestrings, %d vertices)",
            num_linestrings,
            num_vertices,
        )
        return empty_bounding_boxes(vertices_arr.dtype, ctx)

    if cfg.validate_offsets:
        validate_linestring_offsets(offsets, num_vertices)

    logger.debug(
        "linestring_bounding_boxes: %d linestrings, %d vertices on '%s'",
        num_linestrings,
        num_vertices,
        ctx.name,
    )
    geometry_ids = linestring_geometry_ids(offsets, num_vertices).materialize(ctx)
    return reduce_bounding_boxes(
        geometry_ids, vertices_arr, radius, num_linestrings, ctx
    )


@jaxtyped(typechecker=beartype)
def polygon_bounding_boxes(
    polygon_offsets: ArrayLike,
    ring_offsets: ArrayLike,
    vertices: ArrayLike,
    expansion_radius: ArrayLike = 0.0,
    *,
    context: ContextLike = None,
    config: Optional[BoundingBoxConfig] = None,
) -> BoundingBoxes:
    """Compute one box per polygon, covering its exterior and all holes.

    Raises
    ------
    InvalidGeometryError
        If the polygon offsets, ring offsets and vertex count disagree. The
        check runs before any work is issued.
    """

    cfg = config or BoundingBoxConfig()
    radius_arg = cfg.expansion_radius if config else expansion_radius
    ctx = _resolve_context(context, config)
    poly_offsets = ctx.put(polygon_offsets)
    rng_offsets = ctx.put(ring_offsets)
    require_integer_offsets(poly_offsets, name="polygon_offsets")
    require_integer_offsets(rng_offsets, name="ring_offsets")
    vertices_arr = _resolve_points(vertices, ctx, name="vertices")
    radius = _resolve_radius(radius_arg, vertices_arr.dtype, ctx)

    num_polygons = max(int(poly_offsets.shape[0]) - 1, 0)
    num_rings = max(int(rng_offsets.shape[0]) - 1, 0)
    num_vertices = int(vertices_arr.shape[0])

    if num_polygons > 0:
        validate_polygon_sizes(
            num_vertices,
            int(poly_offsets.shape[0]),
            int(rng_offsets.shape[0]),
        )
        if cfg.validate_offsets:
            validate_polygon_offsets(poly_offsets, rng_offsets, num_vertices)

    if num_polygons == 0 or num_rings == 0 or num_vertices == 0:
        logger.debug(
            "polygon_bounding_boxes: empty input "
            "(%d polygons, %d rings, %d vertices)",
            num_polygons,
            num_rings,
            num_vertices,
        )
        return empty_bounding_boxes(vertices_arr.dtype, ctx)

    logger.debug(
        "polygon_bounding_boxes: %d polygons, %d rings, %d vertices on '%s'",
        num_polygons,
        num_rings,
        num_vertices,
        ctx.name,
    )
    geometry_ids = polygon_geometry_ids(
        poly_offsets, rng_offsets, num_vertices
    ).materialize(ctx)
    return reduce_bounding_boxes(geometry_ids, vertices_arr, radius, num_polygons, ctx)


__all__ = [
    "linestring_bounding_boxes",
    "point_bounding_boxes",
    "polygon_bounding_boxes",
]
