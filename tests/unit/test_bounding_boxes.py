"""Tests for the point/linestring/polygon bounding-box entry points."""

import numpy as np
import pytest

from boundax import (
    BoundingBoxConfig,
    InvalidGeometryError,
    NumpyExecutionContext,
    TypeConstraintError,
    linestring_bounding_boxes,
    point_bounding_boxes,
    polygon_bounding_boxes,
)
from boundax.testing import assert_bounding_boxes_equal
from tests.unit.context_fixtures import RecordingContext, context_adapters

_ADAPTERS = pytest.mark.parametrize(
    "adapter", context_adapters(), ids=lambda adapter: adapter.name
)


def _square(x0: float, y0: float, size: float) -> list[list[float]]:
    return [
        [x0, y0],
        [x0 + size, y0],
        [x0 + size, y0 + size],
        [x0, y0 + size],
        [x0, y0],
    ]


def _random_linestrings(seed: int, n: int = 12):
    rng = np.random.default_rng(seed)
    counts = rng.integers(2, 9, size=n)
    offsets = np.concatenate([[0], np.cumsum(counts)])
    vertices = rng.normal(scale=10.0, size=(int(offsets[-1]), 2)).astype(np.float32)
    return offsets, vertices


@_ADAPTERS
def test_linestrings_one_box_each(adapter):
    offsets = np.asarray([0, 3, 5])
    vertices = np.asarray(
        [[0.0, 0.0], [1.0, 4.0], [-2.0, 1.0], [10.0, 10.0], [12.0, 9.0]]
    )
    boxes = linestring_bounding_boxes(offsets, vertices, context=adapter.make())

    assert boxes.num_boxes == 2
    np.testing.assert_array_equal(
        np.asarray(boxes.minima), [[-2.0, 0.0], [10.0, 9.0]]
    )
    np.testing.assert_array_equal(
        np.asarray(boxes.maxima), [[1.0, 4.0], [12.0, 10.0]]
    )


@_ADAPTERS
def test_linestrings_with_expansion_radius(adapter):
    offsets = np.asarray([0, 2])
    vertices = np.asarray([[0.0, 0.0], [1.0, 2.0]], dtype=np.float32)
    boxes = linestring_bounding_boxes(
        offsets, vertices, np.float32(0.5), context=adapter.make()
    )
    np.testing.assert_array_equal(np.asarray(boxes.minima), [[-0.5, -0.5]])
    np.testing.assert_array_equal(np.asarray(boxes.maxima), [[1.5, 2.5]])


@_ADAPTERS
def test_linestrings_empty_inputs_return_empty(adapter):
    context = adapter.make()
    no_lines = linestring_bounding_boxes(
        np.asarray([0]), np.zeros((0, 2)), context=context
    )
    # Inconsistent offsets are not checked when there is nothing to reduce.
    no_vertices = linestring_bounding_boxes(
        np.asarray([0, 3, 5]), np.zeros((0, 2), dtype=np.float32), context=context
    )

    assert no_lines.num_boxes == 0
    assert no_vertices.num_boxes == 0
    assert no_vertices.dtype == np.float32


@_ADAPTERS
def test_empty_linestring_gets_nan_box(adapter):
    offsets = np.asarray([0, 2, 2, 3])
    vertices = np.asarray([[0.0, 0.0], [1.0, 1.0], [5.0, 6.0]])
    boxes = linestring_bounding_boxes(offsets, vertices, context=adapter.make())

    minima = np.asarray(boxes.minima)
    maxima = np.asarray(boxes.maxima)
    assert boxes.num_boxes == 3
    assert np.all(np.isnan(minima[1])) and np.all(np.isnan(maxima[1]))
    np.testing.assert_array_equal(minima[[0, 2]], [[0.0, 0.0], [5.0, 6.0]])
    np.testing.assert_array_equal(maxima[[0, 2]], [[1.0, 1.0], [5.0, 6.0]])


@_ADAPTERS
def test_linestring_offsets_must_end_at_vertex_count(adapter):
    with pytest.raises(InvalidGeometryError, match="must end at"):
        linestring_bounding_boxes(
            np.asarray([0, 3, 4]), np.zeros((5, 2)), context=adapter.make()
        )


def test_linestring_offset_value_checks_can_be_disabled():
    config = BoundingBoxConfig(validate_offsets=False, context="numpy")
    boxes = linestring_bounding_boxes(
        np.asarray([0, 2, 1, 3]),
        np.zeros((3, 2)),
        config=config,
    )
    assert boxes.num_boxes == 3

    with pytest.raises(InvalidGeometryError, match="non-decreasing"):
        linestring_bounding_boxes(
            np.asarray([0, 2, 1, 3]), np.zeros((3, 2)), context="numpy"
        )


@_ADAPTERS
def test_polygon_box_includes_holes(adapter):
    exterior = _square(0.0, 0.0, 4.0)
    # The hole deliberately pokes outside the exterior ring.
    hole = _square(1.0, 1.0, 5.0)
    vertices = np.asarray(exterior + hole)
    boxes = polygon_bounding_boxes(
        np.asarray([0, 2]),
        np.asarray([0, 5, 10]),
        vertices,
        context=adapter.make(),
    )

    np.testing.assert_array_equal(np.asarray(boxes.minima), [[0.0, 0.0]])
    np.testing.assert_array_equal(np.asarray(boxes.maxima), [[6.0, 6.0]])


@_ADAPTERS
def test_multiple_polygons(adapter):
    vertices = np.asarray(
        _square(0.0, 0.0, 10.0) + _square(2.0, 2.0, 1.0) + _square(-8.0, 3.0, 2.0)
    )
    boxes = polygon_bounding_boxes(
        np.asarray([0, 2, 3]),
        np.asarray([0, 5, 10, 15]),
        vertices,
        1.0,
        context=adapter.make(),
    )

    assert_bounding_boxes_equal(
        boxes,
        (
            np.asarray([[-1.0, -1.0], [-9.0, 2.0]]),
            np.asarray([[11.0, 11.0], [-5.0, 6.0]]),
        ),
        max_ulp=0,
    )


@_ADAPTERS
def test_polygon_inconsistent_sizes_raise_before_any_work(adapter):
    context = RecordingContext(inner=adapter.make())
    # Two rings need at least eight vertices.
    with pytest.raises(InvalidGeometryError, match="at least 4 vertices"):
        polygon_bounding_boxes(
            np.asarray([0, 2]),
            np.asarray([0, 4, 7]),
            np.zeros((7, 2)),
            context=context,
        )
    assert context.calls == []


def test_polygon_offsets_must_reference_all_rings():
    with pytest.raises(InvalidGeometryError, match="polygon_offsets must end at 2"):
        polygon_bounding_boxes(
            np.asarray([0, 1]),
            np.asarray([0, 4, 8]),
            np.zeros((8, 2)),
            context="numpy",
        )


def test_zero_polygons_skip_validation():
    context = RecordingContext(inner=NumpyExecutionContext())
    boxes = polygon_bounding_boxes(
        np.asarray([0]),
        np.asarray([0, 4, 99]),
        np.zeros((3, 2)),
        context=context,
    )
    assert boxes.num_boxes == 0
    assert context.calls == []


def test_polygon_issues_one_id_stage_and_two_reductions():
    context = RecordingContext(inner=NumpyExecutionContext())
    polygon_bounding_boxes(
        np.asarray([0, 1]),
        np.asarray([0, 5]),
        np.asarray(_square(0.0, 0.0, 1.0)),
        context=context,
    )
    assert context.calls == [
        "expand_geometry_ids",
        "_stage_reduction_inputs",
        "segmented_reduce:min",
        "segmented_reduce:max",
        "_finalize_boxes",
    ]


def test_contexts_agree_bit_for_bit():
    offsets, vertices = _random_linestrings(seed=5)
    results = [
        linestring_bounding_boxes(offsets, vertices, np.float32(0.25), context=a.make())
        for a in context_adapters()
    ]
    reference = results[0]
    for boxes in results[1:]:
        assert np.asarray(boxes.minima).tobytes() == np.asarray(reference.minima).tobytes()
        assert np.asarray(boxes.maxima).tobytes() == np.asarray(reference.maxima).tobytes()


def test_boxes_enclose_their_vertices():
    offsets, vertices = _random_linestrings(seed=9)
    boxes = linestring_bounding_boxes(offsets, vertices)
    minima = np.asarray(boxes.minima)
    maxima = np.asarray(boxes.maxima)

    assert np.all(minima <= maxima)
    for i in range(len(offsets) - 1):
        members = vertices[offsets[i] : offsets[i + 1]]
        assert np.all(members >= minima[i]) and np.all(members <= maxima[i])


def test_config_overrides_keyword_arguments():
    config = BoundingBoxConfig(expansion_radius=2.0, context="numpy")
    boxes = point_bounding_boxes(
        np.asarray([0]),
        np.asarray([[1.0, 1.0]]),
        0.0,
        config=config,
    )
    assert isinstance(boxes.minima, np.ndarray)
    np.testing.assert_array_equal(boxes.minima, [[-1.0, -1.0]])
    np.testing.assert_array_equal(boxes.maxima, [[3.0, 3.0]])


def test_point_ids_must_match_points():
    with pytest.raises(InvalidGeometryError, match="does not match"):
        point_bounding_boxes(np.asarray([0, 0]), np.zeros((3, 2)))


def test_point_ids_must_be_integer():
    with pytest.raises(TypeConstraintError):
        point_bounding_boxes(np.asarray([0.0, 1.0]), np.zeros((2, 2)))


def test_empty_points_return_empty():
    boxes = point_bounding_boxes(
        np.zeros((0,), dtype=np.int32), np.zeros((0, 2), dtype=np.float32)
    )
    assert boxes.num_boxes == 0
    assert boxes.dtype == np.float32


def test_integer_coordinates_raise():
    with pytest.raises(TypeConstraintError, match="floating-point"):
        linestring_bounding_boxes(np.asarray([0, 2]), np.zeros((2, 2), dtype=np.int32))


def test_integer_radius_raises():
    with pytest.raises(TypeConstraintError, match="expansion radius"):
        linestring_bounding_boxes(np.asarray([0, 2]), np.zeros((2, 2)), 1)


def test_radius_width_must_match_coordinates():
    with pytest.raises(TypeConstraintError, match="does not match"):
        linestring_bounding_boxes(
            np.asarray([0, 2]),
            np.zeros((2, 2), dtype=np.float32),
            np.float64(1.0),
        )


def test_negative_radius_raises():
    with pytest.raises(ValueError, match="non-negative"):
        point_bounding_boxes(np.asarray([0]), np.zeros((1, 2)), -1.0)


def test_float_offsets_raise():
    with pytest.raises(TypeConstraintError, match="linestring_offsets"):
        linestring_bounding_boxes(np.asarray([0.0, 2.0]), np.zeros((2, 2)))


def test_vertices_must_be_pairs():
    with pytest.raises(InvalidGeometryError, match=r"shape \(n, 2\)"):
        linestring_bounding_boxes(np.asarray([0, 2]), np.zeros((2, 3)))
