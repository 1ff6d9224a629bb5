"""Configuration objects for bounding-box computation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class BoundingBoxConfig:
    """Resolved options shared by the bounding-box entry points.

    ``validate_offsets`` enables the offset-value checks, which read the
    offset arrays back to the host before any work is issued. ``context``
    names a registered execution context.
    """

    expansion_radius: float = 0.0
    validate_offsets: bool = True
    context: Optional[str] = None


__all__ = ["BoundingBoxConfig"]
