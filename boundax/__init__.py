"""boundax: data-parallel bounding boxes for offset-encoded 2D geometry."""

from jax import config as _jax_config

# float64 coordinates and their uint64 bit patterns need 64-bit types.
_jax_config.update("jax_enable_x64", True)

from .bounding_boxes import (
    linestring_bounding_boxes,
    point_bounding_boxes,
    polygon_bounding_boxes,
)
from .config import BoundingBoxConfig
from .contexts import (
    JaxExecutionContext,
    NumpyExecutionContext,
    available_execution_contexts,
    get_execution_context,
    register_execution_context,
)
from .errors import BoundaxError, InvalidGeometryError, TypeConstraintError
from .float_equal import DEFAULT_MAX_ULP, float_equal, ulp_distance
from .geometry_ids import GeometryIds, linestring_geometry_ids, polygon_geometry_ids
from .protocols import ExecutionContext
from .reduce import merge_boxes
from .types import BoundingBoxes, empty_bounding_boxes
from .validation import validate_polygon_sizes

__all__ = [
    "DEFAULT_MAX_ULP",
    "BoundaxError",
    "BoundingBoxConfig",
    "BoundingBoxes",
    "ExecutionContext",
    "GeometryIds",
    "InvalidGeometryError",
    "JaxExecutionContext",
    "NumpyExecutionContext",
    "TypeConstraintError",
    "available_execution_contexts",
    "empty_bounding_boxes",
    "float_equal",
    "get_execution_context",
    "linestring_bounding_boxes",
    "linestring_geometry_ids",
    "merge_boxes",
    "point_bounding_boxes",
    "polygon_bounding_boxes",
    "polygon_geometry_ids",
    "register_execution_context",
    "ulp_distance",
    "validate_polygon_sizes",
]
