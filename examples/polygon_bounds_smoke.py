"""Smoke test comparing polygon bounding boxes across execution contexts.

Run from the repository root:
    python examples/polygon_bounds_smoke.py --n-polygons 500
"""

from __future__ import annotations

import argparse
import logging
import time

import numpy as np

from boundax import (
    available_execution_contexts,
    float_equal,
    get_execution_context,
    polygon_bounding_boxes,
)


def _make_polygons(
    n_polygons: int, max_holes: int, seed: int
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Random star-shaped rings around random centres, holes included."""
    rng = np.random.default_rng(seed)
    ring_counts = 1 + rng.integers(0, max_holes + 1, size=n_polygons)
    polygon_offsets = np.concatenate([[0], np.cumsum(ring_counts)])
    n_rings = int(polygon_offsets[-1])

    vertex_counts = rng.integers(4, 16, size=n_rings)
    ring_offsets = np.concatenate([[0], np.cumsum(vertex_counts)])

    centres = np.repeat(
        rng.uniform(-1_000.0, 1_000.0, size=(n_polygons, 2)), ring_counts, axis=0
    )
    rings = []
    for centre, count in zip(centres, vertex_counts):
        angles = np.sort(rng.uniform(0.0, 2.0 * np.pi, size=count - 1))
        radii = rng.uniform(1.0, 25.0, size=count - 1)
        ring = centre + np.stack([np.cos(angles), np.sin(angles)], axis=1) * radii[:, None]
        rings.append(np.concatenate([ring, ring[:1]], axis=0))
    vertices = np.concatenate(rings, axis=0)
    return polygon_offsets, ring_offsets, vertices


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--n-polygons", type=int, default=1_000)
    parser.add_argument("--max-holes", type=int, default=2)
    parser.add_argument("--radius", type=float, default=0.0)
    parser.add_argument("--max-ulp", type=int, default=0)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    polygon_offsets, ring_offsets, vertices = _make_polygons(
        args.n_polygons, args.max_holes, args.seed
    )
    print(
        "[input]",
        {
            "polygons": len(polygon_offsets) - 1,
            "rings": len(ring_offsets) - 1,
            "vertices": len(vertices),
        },
    )

    results = {}
    for name in available_execution_contexts():
        context = get_execution_context(name)
        start = time.perf_counter()
        boxes = polygon_bounding_boxes(
            polygon_offsets, ring_offsets, vertices, args.radius, context=context
        )
        boxes = context.synchronize(boxes)
        elapsed = time.perf_counter() - start
        results[name] = boxes
        print(f"[{name}] {boxes.num_boxes} boxes in {elapsed * 1e3:.2f} ms")

    names = sorted(results)
    reference = results[names[0]]
    for name in names[1:]:
        other = results[name]
        same_min = bool(np.all(float_equal(reference.minima, other.minima, args.max_ulp)))
        same_max = bool(np.all(float_equal(reference.maxima, other.maxima, args.max_ulp)))
        print(f"[{names[0]} vs {name}] minima match: {same_min}, maxima match: {same_max}")


if __name__ == "__main__":
    main()
