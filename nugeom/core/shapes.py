"""
Solid shapes used by volumes.

Every shape is expressed in its own local frame (centered on the volume's
placement point) and answers two questions:

- ``contains(point)``: is the point inside or on the surface?
- ``distance_to_surface(point, direction)``: distance along a unit direction
  to the next surface crossing strictly ahead of the point, or ``inf``.

The second works from either side of the surface, so a volume can use it both
to find its exit and to find where a ray enters it.
"""

from __future__ import annotations

import math
from typing import Iterable

import numpy as np

from .data_classes import BoundingBox, MeshGeometry
from .geometry import (
    mesh_bounding_box,
    nearest_surface_distance,
    point_in_mesh,
    point_on_mesh,
    prepare_mesh_geometry,
)

INF = float("inf")


def _smallest_positive(candidates: Iterable[float]) -> float:
    best = INF
    for t in candidates:
        if 0.0 < t < best:
            best = t
    return best


class Shape:
    """Base class for solids."""

    kind = "shape"

    def contains(self, point: np.ndarray) -> bool:
        raise NotImplementedError

    def distance_to_surface(self, point: np.ndarray, direction: np.ndarray) -> float:
        raise NotImplementedError

    def bounding_box(self) -> BoundingBox:
        raise NotImplementedError

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v!r}" for k, v in vars(self).items() if not k.startswith("_"))
        return f"{type(self).__name__}({params})"


class Box(Shape):
    """Axis-aligned box given by its half extents."""

    kind = "box"

    def __init__(self, dx: float, dy: float, dz: float):
        if min(dx, dy, dz) <= 0.0:
            raise ValueError("Box half extents must be positive")
        self.dx, self.dy, self.dz = float(dx), float(dy), float(dz)
        self._half = np.array([self.dx, self.dy, self.dz])

    def contains(self, point: np.ndarray) -> bool:
        return bool(np.all(np.abs(point) <= self._half))

    def distance_to_surface(self, point: np.ndarray, direction: np.ndarray) -> float:
        t_near, t_far = -INF, INF
        for axis in range(3):
            p, d, h = point[axis], direction[axis], self._half[axis]
            if d == 0.0:
                if abs(p) > h:
                    return INF
                continue
            ta = (-h - p) / d
            tb = (h - p) / d
            if ta > tb:
                ta, tb = tb, ta
            t_near = max(t_near, ta)
            t_far = min(t_far, tb)
        if t_near > t_far:
            return INF
        return _smallest_positive((t_near, t_far))

    def bounding_box(self) -> BoundingBox:
        return BoundingBox(np.zeros(3), self._half.copy())


class Sphere(Shape):
    """Solid sphere of the given radius."""

    kind = "sphere"

    def __init__(self, radius: float):
        if radius <= 0.0:
            raise ValueError("Sphere radius must be positive")
        self.radius = float(radius)

    def contains(self, point: np.ndarray) -> bool:
        return float(np.dot(point, point)) <= self.radius * self.radius

    def distance_to_surface(self, point: np.ndarray, direction: np.ndarray) -> float:
        b = float(np.dot(point, direction))
        c = float(np.dot(point, point)) - self.radius * self.radius
        disc = b * b - c
        if disc < 0.0:
            return INF
        root = math.sqrt(disc)
        return _smallest_positive((-b - root, -b + root))

    def bounding_box(self) -> BoundingBox:
        return BoundingBox(np.zeros(3), np.full(3, self.radius))


class Tube(Shape):
    """Cylinder along the local z axis, optionally hollow.

    Parameters
    ----------
    rmax : float
        Outer radius.
    dz : float
        Half length along z.
    rmin : float, optional
        Inner radius; 0 gives a solid cylinder.
    """

    kind = "tube"

    def __init__(self, rmax: float, dz: float, rmin: float = 0.0):
        if rmax <= 0.0 or dz <= 0.0 or not 0.0 <= rmin < rmax:
            raise ValueError("Tube needs 0 <= rmin < rmax and dz > 0")
        self.rmax, self.dz, self.rmin = float(rmax), float(dz), float(rmin)

    def contains(self, point: np.ndarray) -> bool:
        r2 = point[0] * point[0] + point[1] * point[1]
        return abs(point[2]) <= self.dz and self.rmin * self.rmin <= r2 <= self.rmax * self.rmax

    def _cylinder_roots(self, point, direction, radius):
        a = direction[0] * direction[0] + direction[1] * direction[1]
        if a == 0.0 or radius == 0.0:
            return ()
        b = point[0] * direction[0] + point[1] * direction[1]
        c = point[0] * point[0] + point[1] * point[1] - radius * radius
        disc = b * b - a * c
        if disc < 0.0:
            return ()
        root = math.sqrt(disc)
        return ((-b - root) / a, (-b + root) / a)

    def distance_to_surface(self, point: np.ndarray, direction: np.ndarray) -> float:
        candidates = []
        for radius in (self.rmax, self.rmin):
            for t in self._cylinder_roots(point, direction, radius):
                if abs(point[2] + t * direction[2]) <= self.dz:
                    candidates.append(t)
        if direction[2] != 0.0:
            for plane in (-self.dz, self.dz):
                t = (plane - point[2]) / direction[2]
                x = point[0] + t * direction[0]
                y = point[1] + t * direction[1]
                r2 = x * x + y * y
                if self.rmin * self.rmin <= r2 <= self.rmax * self.rmax:
                    candidates.append(t)
        return _smallest_positive(candidates)

    def bounding_box(self) -> BoundingBox:
        return BoundingBox(np.zeros(3), np.array([self.rmax, self.rmax, self.dz]))


class MeshShape(Shape):
    """Closed triangle mesh, typically loaded from an STL file."""

    kind = "mesh"

    def __init__(self, facets: np.ndarray, source: str = ""):
        self.source = source
        self._geometry: MeshGeometry = prepare_mesh_geometry(facets)
        self._bbox = mesh_bounding_box(self._geometry)
        self.n_facets = int(self._geometry.vertices0.shape[0])

    def contains(self, point: np.ndarray) -> bool:
        if not self._bbox.contains(point, tolerance=1e-12):
            return False
        if point_on_mesh(point, self._geometry):
            return True
        return point_in_mesh(point, self._geometry)

    def distance_to_surface(self, point: np.ndarray, direction: np.ndarray) -> float:
        return nearest_surface_distance(point, direction, self._geometry)

    def bounding_box(self) -> BoundingBox:
        return self._bbox


def build_shape(spec: dict, facets_loader=None) -> Shape:
    """Create a shape from a description dictionary.

    ``facets_loader`` resolves mesh descriptions to facet arrays; it is only
    needed for ``{"type": "mesh"}`` entries.
    """
    kind = str(spec.get("type", "")).lower()
    if kind == "box":
        return Box(spec["dx"], spec["dy"], spec["dz"])
    if kind == "sphere":
        return Sphere(spec["radius"])
    if kind == "tube":
        return Tube(spec["rmax"], spec["dz"], spec.get("rmin", 0.0))
    if kind == "mesh":
        if facets_loader is None:
            raise ValueError("Mesh shapes need a facets loader")
        return MeshShape(facets_loader(spec), source=str(spec.get("file", "")))
    raise ValueError(f"Unknown shape type '{spec.get('type')}'")
