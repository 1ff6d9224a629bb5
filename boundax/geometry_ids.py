"""Per-vertex geometry ids for offset-encoded geometry collections.

Linestrings are encoded as one offset array over vertices; polygons nest a
second level (polygon -> ring -> vertex). Every vertex is tagged with the index
of the top-level geometry that owns it, so all rings of a polygon share an id
and ids form contiguous, non-decreasing runs in vertex order.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Any, Iterator

import jax
import numpy as np

from .protocols import ExecutionContext


def expand_geometry_ids(xp, *offset_levels, num_vertices: int):
    """Map every vertex index to the index of its top-level geometry.

    ``offset_levels`` are ordered outermost first, e.g.
    ``(polygon_offsets, ring_offsets)``. Levels are resolved innermost first:
    a vertex finds its ring, the ring finds its polygon.
    """

    ids = xp.arange(num_vertices, dtype=xp.int64)
    for offsets in reversed(offset_levels):
        # offsets[i] <= v < offsets[i + 1]; empty groups are skipped.
        ids = xp.searchsorted(offsets, ids, side="right") - 1
    return ids.astype(xp.int64)


@dataclass(frozen=True, eq=False)
class GeometryIds:
    """Finite, restartable, lazily evaluated sequence of geometry ids.

    Nothing is materialized until :meth:`materialize` stages the ids into a
    single buffer on an execution context. Indexing and iteration run on the
    host and never build the full id array.
    """

    offset_levels: tuple[Any, ...]
    num_vertices: int

    def __len__(self) -> int:
        return self.num_vertices

    @property
    def num_geometries(self) -> int:
        return max(int(self.offset_levels[0].shape[0]) - 1, 0)

    @cached_property
    def _host_levels(self) -> tuple[np.ndarray, ...]:
        return tuple(np.asarray(jax.device_get(level)) for level in self.offset_levels)

    def vertex_offsets(self) -> np.ndarray:
        """Collapse the nested levels into one offset array over vertices."""

        levels = self._host_levels
        offsets = levels[0]
        for inner in levels[1:]:
            offsets = inner[offsets]
        return offsets

    def __getitem__(self, vertex: int) -> int:
        if vertex < 0:
            vertex += self.num_vertices
        if not 0 <= vertex < self.num_vertices:
            raise IndexError(f"vertex {vertex} out of range for {self.num_vertices}")
        index = vertex
        for offsets in reversed(self._host_levels):
            index = int(np.searchsorted(offsets, index, side="right")) - 1
        return index

    def __iter__(self) -> Iterator[int]:
        remaining = self.num_vertices
        counts = np.diff(self.vertex_offsets())
        for geometry_id, count in enumerate(counts):
            take = min(int(count), remaining)
            for _ in range(take):
                yield geometry_id
            remaining -= take
            if not remaining:
                return

    def materialize(self, context: ExecutionContext):
        """Stage the ids into one integer buffer on ``context``."""

        levels = tuple(context.put(level) for level in self.offset_levels)
        return context.elementwise_map(
            expand_geometry_ids,
            *levels,
            num_vertices=self.num_vertices,
        )


def linestring_geometry_ids(linestring_offsets, num_vertices: int) -> GeometryIds:
    """One-level ids: the linestring owning each vertex."""

    return GeometryIds(offset_levels=(linestring_offsets,), num_vertices=int(num_vertices))


def polygon_geometry_ids(polygon_offsets, ring_offsets, num_vertices: int) -> GeometryIds:
    """Two-level ids: the polygon owning each vertex, holes included."""

    return GeometryIds(
        offset_levels=(polygon_offsets, ring_offsets),
        num_vertices=int(num_vertices),
    )


__all__ = [
    "GeometryIds",
    "expand_geometry_ids",
    "linestring_geometry_ids",
    "polygon_geometry_ids",
]
