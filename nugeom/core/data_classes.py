"""
Data classes for the geometry traversal engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

import numpy as np

from .errors import DegenerateDirectionError


def normalize_direction(direction) -> np.ndarray:
    """Return ``direction`` as a unit vector, rejecting degenerate input."""
    d = np.array(direction, dtype=float).reshape(3)
    if not np.all(np.isfinite(d)):
        raise DegenerateDirectionError(f"Direction {d} contains non-finite components")
    norm = np.linalg.norm(d)
    if norm == 0.0:
        raise DegenerateDirectionError("Direction vector must be non-zero")
    return d / norm


@dataclass
class MeshGeometry:
    """Preprocessed data for fast(ish) ray intersections with an STL mesh."""

    vertices0: np.ndarray
    edge1: np.ndarray
    edge2: np.ndarray
    normals: np.ndarray


@dataclass(frozen=True)
class Ray:
    """A straight line starting at ``origin``, travelling along ``direction``.

    The direction is normalised on construction.
    """

    origin: np.ndarray
    direction: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, 'origin', np.array(self.origin, dtype=float).reshape(3))
        object.__setattr__(self, 'direction', normalize_direction(self.direction))


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box given by its center and half extents."""

    center: np.ndarray
    half_extents: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, 'center', np.array(self.center, dtype=float).reshape(3))
        object.__setattr__(self, 'half_extents', np.array(self.half_extents, dtype=float).reshape(3))

    @property
    def lower(self) -> np.ndarray:
        return self.center - self.half_extents

    @property
    def upper(self) -> np.ndarray:
        return self.center + self.half_extents

    def contains(self, point: np.ndarray, tolerance: float = 0.0) -> bool:
        offset = np.abs(np.asarray(point, dtype=float) - self.center)
        return bool(np.all(offset <= self.half_extents + tolerance))

    def translated(self, offset: np.ndarray) -> "BoundingBox":
        return BoundingBox(self.center + np.asarray(offset, dtype=float), self.half_extents)


@dataclass(frozen=True)
class BoundaryStep:
    """Distance to the next boundary along a direction.

    ``entering`` is True when the boundary leads into a volume (from the
    outside world or from a mother into a daughter).
    """

    distance: float
    entering: bool


@dataclass(frozen=True)
class Segment:
    """One isotope's share of a boundary-to-boundary step.

    Attributes
    ----------
    isotope : int or None
        Isotope identifier, or None for a step taken outside the geometry.
    length : float
        Geometric length of the step (geometry units).
    density : float
        Mass density of the traversed material (geometry density units).
    fraction : float
        Mass fraction of the isotope in the traversed material.
    start : np.ndarray
        Cursor position at the start of the step.
    volume : str or None
        Name of the traversed volume.
    """

    isotope: Optional[int]
    length: float
    density: float
    fraction: float
    start: np.ndarray
    volume: Optional[str] = None

    @property
    def weighted_length(self) -> float:
        return self.length * self.density


class VertexStatus(Enum):
    """Outcome of a vertex sampling request."""

    FOUND = "found"
    NOT_FOUND = "not_found"   # target isotope never crossed by the ray
    ZERO_MASS = "zero_mass"   # crossed, but with zero density-weighted length


@dataclass
class VertexSample:
    """Result of :func:`sample_vertex`.

    Unpacks as ``(point, found)``.
    """

    point: np.ndarray
    status: VertexStatus
    total_weighted_length: float = 0.0

    @property
    def found(self) -> bool:
        return self.status is VertexStatus.FOUND

    def __iter__(self) -> Iterator:
        return iter((self.point, self.found))
