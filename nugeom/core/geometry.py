"""
Triangle-mesh processing and ray-mesh intersection utilities.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from .constants import DEBUG
from .data_classes import BoundingBox, MeshGeometry

# Directions used for the ray-parity inside test. They are deliberately
# skewed so that rays from axis-aligned points do not graze mesh edges.
_PARITY_DIRECTIONS = np.array([
    [0.8716, 0.4390, 0.2180],
    [-0.3311, 0.8437, 0.4226],
    [0.2754, -0.3652, 0.8893],
])


def prepare_mesh_geometry(mesh: np.ndarray) -> MeshGeometry:
    """Precompute edge vectors and normals for an STL mesh.

    Parameters
    ----------
    mesh : np.ndarray
        Mesh data with shape (n_facets, 4, 3) where each facet contains
        [normal, v0, v1, v2], or (n_facets, 3, 3) with just vertices.
    """
    triangles = np.asarray(mesh, dtype=float)
    if triangles.ndim != 3 or triangles.shape[0] == 0:
        raise ValueError("Mesh must be a non-empty (n_facets, 3|4, 3) array")

    if triangles.shape[1] == 4:
        v0, v1, v2 = triangles[:, 1, :], triangles[:, 2, :], triangles[:, 3, :]
    else:
        v0, v1, v2 = triangles[:, 0, :], triangles[:, 1, :], triangles[:, 2, :]

    edge1 = v1 - v0
    edge2 = v2 - v0
    # Recompute normals from the winding; STL normals are often unreliable
    normals = np.cross(edge1, edge2)
    norms = np.linalg.norm(normals, axis=1, keepdims=True)
    norms = np.where(norms > 0, norms, 1.0)

    return MeshGeometry(vertices0=v0, edge1=edge1, edge2=edge2, normals=normals / norms)


def mesh_bounding_box(geometry: MeshGeometry) -> BoundingBox:
    """Axis-aligned bounding box of a prepared mesh."""
    v0 = geometry.vertices0
    vertices = np.concatenate([v0, v0 + geometry.edge1, v0 + geometry.edge2], axis=0)
    lower = vertices.min(axis=0)
    upper = vertices.max(axis=0)
    return BoundingBox(center=(lower + upper) / 2.0, half_extents=(upper - lower) / 2.0)


def ray_triangle_distances(
    origin: np.ndarray,
    direction: np.ndarray,
    geometry: MeshGeometry,
    epsilon: float = 1e-12,
) -> Tuple[np.ndarray, np.ndarray]:
    """Vectorised Möller–Trumbore test of one ray against every facet.

    Returns
    -------
    distances : np.ndarray
        Ray parameters ``t > epsilon`` of every facet hit.
    indices : np.ndarray
        Facet indices matching ``distances``.
    """
    v0 = geometry.vertices0
    edge1 = geometry.edge1
    edge2 = geometry.edge2
    empty = (np.empty(0), np.empty(0, dtype=int))

    pvec = np.cross(direction[np.newaxis, :], edge2)
    det = np.einsum("ij,ij->i", edge1, pvec)
    mask = np.abs(det) > epsilon
    if not np.any(mask):
        return empty
    inv_det = np.zeros_like(det)
    inv_det[mask] = 1.0 / det[mask]

    tvec = origin[np.newaxis, :] - v0
    u = np.einsum("ij,ij->i", tvec, pvec) * inv_det
    mask &= (u >= 0.0) & (u <= 1.0)
    if not np.any(mask):
        return empty

    qvec = np.cross(tvec, edge1)
    v = (qvec @ direction) * inv_det
    mask &= (v >= 0.0) & (u + v <= 1.0)
    if not np.any(mask):
        return empty

    t = np.einsum("ij,ij->i", edge2, qvec) * inv_det
    mask &= t > epsilon
    indices = np.nonzero(mask)[0]
    return t[indices], indices


def ray_mesh_intersection(
    origin: np.ndarray,
    direction: np.ndarray,
    geometry: MeshGeometry,
    epsilon: float = 1e-12,
) -> Optional[Tuple[float, np.ndarray, np.ndarray]]:
    """Return the nearest intersection between a ray and the mesh, if any."""
    distances, indices = ray_triangle_distances(origin, direction, geometry, epsilon)
    if distances.size == 0:
        return None
    best = int(np.argmin(distances))
    distance = float(distances[best])
    return distance, origin + distance * direction, geometry.normals[indices[best]]


def nearest_surface_distance(
    position: np.ndarray,
    direction: np.ndarray,
    geometry: MeshGeometry,
    max_retries: int = 4,
    base_offset: float = 1e-9,
) -> float:
    """Distance to the nearest mesh facet ahead of ``position``.

    Small gaps between facets can let a ray slip through the surface. When no
    facet is found the search origin is nudged forward by growing offsets
    before giving up; ``inf`` is returned if the ray never meets the mesh.
    """
    hit = ray_mesh_intersection(position, direction, geometry)
    if hit is not None:
        return hit[0]

    for retry in range(max_retries):
        offset = base_offset * (10 ** retry)
        hit = ray_mesh_intersection(position + direction * offset, direction, geometry)
        if hit is not None:
            if DEBUG:
                print(f"[Geometry] Surface found on retry {retry}, offset={offset:.2e}")
            return hit[0] + offset
    return float("inf")


def count_surface_crossings(
    origin: np.ndarray,
    direction: np.ndarray,
    geometry: MeshGeometry,
    merge_tolerance: float = 1e-9,
) -> int:
    """Number of distinct surface crossings along a ray.

    Hits on a shared edge between two facets show up twice with the same
    distance, so distances closer than ``merge_tolerance`` count once.
    """
    distances, _ = ray_triangle_distances(origin, direction, geometry)
    if distances.size <= 1:
        return int(distances.size)
    distances = np.sort(distances)
    return 1 + int(np.count_nonzero(np.diff(distances) > merge_tolerance))


def point_on_mesh(point: np.ndarray, geometry: MeshGeometry, tolerance: float = 1e-10) -> bool:
    """True when ``point`` lies on a facet to within ``tolerance``."""
    point = np.asarray(point, dtype=float)
    offset = point[np.newaxis, :] - geometry.vertices0
    height = np.einsum("ij,ij->i", offset, geometry.normals)
    near = np.abs(height) <= tolerance
    if not np.any(near):
        return False

    # Barycentric coordinates of the projection onto each nearby facet
    e1 = geometry.edge1[near]
    e2 = geometry.edge2[near]
    w = offset[near] - height[near, np.newaxis] * geometry.normals[near]
    d00 = np.einsum("ij,ij->i", e1, e1)
    d01 = np.einsum("ij,ij->i", e1, e2)
    d11 = np.einsum("ij,ij->i", e2, e2)
    d20 = np.einsum("ij,ij->i", w, e1)
    d21 = np.einsum("ij,ij->i", w, e2)
    denom = d00 * d11 - d01 * d01
    valid = denom > 0.0
    denom = np.where(valid, denom, 1.0)
    u = (d11 * d20 - d01 * d21) / denom
    v = (d00 * d21 - d01 * d20) / denom
    slack = 1e-12
    inside = valid & (u >= -slack) & (v >= -slack) & (u + v <= 1.0 + slack)
    return bool(np.any(inside))


def point_in_mesh(point: np.ndarray, geometry: MeshGeometry) -> bool:
    """Ray-parity inside test, decided by majority over three directions."""
    point = np.asarray(point, dtype=float)
    votes = 0
    for direction in _PARITY_DIRECTIONS:
        direction = direction / np.linalg.norm(direction)
        if count_surface_crossings(point, direction, geometry) % 2 == 1:
            votes += 1
    return votes >= 2
