"""
Random sampling utilities: generators, surface points, inward directions and
density-weighted interaction vertices.
"""

from __future__ import annotations

from typing import Optional, Union

import numpy as np

from .. import config
from .constants import DEBUG
from .data_classes import BoundingBox, VertexSample, VertexStatus, normalize_direction
from .marcher import march
from .path_lengths import check_mixture_policy
from .volumes import VolumeHierarchy

# Bounding-box faces as (axis, outward sign): top, bottom, left, right, back, front
BOX_FACES = ((1, 1), (1, -1), (0, -1), (0, 1), (2, -1), (2, 1))


def make_rng(seed: Union[None, int, np.random.Generator] = None) -> np.random.Generator:
    """Return a numpy Generator; an existing Generator is passed through."""
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def sample_face_point(box: BoundingBox, axis: int, sign: int, rng: np.random.Generator) -> np.ndarray:
    """Uniform point on one face of ``box``.

    The face is the one perpendicular to ``axis`` on the ``sign`` side.
    """
    point = box.center - box.half_extents + 2.0 * box.half_extents * rng.random(3)
    point[axis] = box.center[axis] + sign * box.half_extents[axis]
    return point


def sample_inward_direction(axis: int, sign: int, rng: np.random.Generator) -> np.ndarray:
    """Unit direction pointing into a box through the (axis, sign) face.

    The tangential components are drawn from U(-0.5, 0.5) and the normal
    component from U(0, 1) towards the interior, then normalised.
    """
    u = rng.random(3)
    direction = u - 0.5
    direction[axis] = -sign * u[axis]
    return normalize_direction(direction)


def sample_vertex(
    hierarchy: VolumeHierarchy,
    origin,
    direction,
    target: int,
    rng: Optional[np.random.Generator] = None,
    method: str = config.DEFAULT_VERTEX_METHOD,
    step: float = config.VERTEX_STEP,
    mixture_policy: str = config.DEFAULT_MIXTURE_POLICY,
) -> VertexSample:
    """Pick a point along a ray inside isotope ``target``.

    The probability of a position is proportional to the local mass density
    of the material containing the target isotope, so the vertex follows the
    mass traversed.

    Parameters
    ----------
    hierarchy : VolumeHierarchy
        Geometry to traverse.
    origin, direction : array-like
        Ray start point and direction.
    target : int
        Isotope identifier.
    rng : np.random.Generator, optional
        Random stream; a fresh unseeded generator is used if omitted.
    method : {"boundary", "fixed_step"}
        "boundary" solves for the vertex inside the crossed segment.
        "fixed_step" walks the ray in increments of ``step`` and is only
        precise to within ``step``.
    step : float
        Increment for the "fixed_step" method.
    mixture_policy : {"full", "fraction"}
        "fraction" also weights a mixture's density by the target's mass
        fraction.

    Returns
    -------
    VertexSample
        Status NOT_FOUND when the ray never crosses the target isotope and
        ZERO_MASS when it does with zero weighted length. In both cases the
        point is the zero vector.
    """
    rng = make_rng(rng)
    d = normalize_direction(direction)
    use_fraction = check_mixture_policy(mixture_policy) == "fraction"

    segments = [seg for seg in march(hierarchy, origin, d) if seg.isotope == target]
    total = 0.0
    for seg in segments:
        total += seg.weighted_length * (seg.fraction if use_fraction else 1.0)

    if not segments:
        if DEBUG:
            print(f"[Vertex] Isotope {target} not found along ray from {origin}")
        return VertexSample(np.zeros(3), VertexStatus.NOT_FOUND, 0.0)
    if total <= 0.0:
        if DEBUG:
            print(f"[Vertex] Isotope {target} has zero mass along ray from {origin}")
        return VertexSample(np.zeros(3), VertexStatus.ZERO_MASS, 0.0)

    threshold = rng.random() * total

    if method == "boundary":
        point = _locate_in_segments(segments, d, threshold, use_fraction)
    elif method == "fixed_step":
        point = _locate_by_stepping(hierarchy, origin, d, target, threshold, step, use_fraction)
    else:
        raise ValueError(f"Unknown vertex method '{method}'")

    return VertexSample(point, VertexStatus.FOUND, total)


def _locate_in_segments(segments, direction, threshold, use_fraction) -> np.ndarray:
    accumulated = 0.0
    for seg in segments:
        weight = seg.density * (seg.fraction if use_fraction else 1.0)
        mass = seg.length * weight
        if mass > 0.0 and accumulated + mass >= threshold:
            return seg.start + ((threshold - accumulated) / weight) * direction
        accumulated += mass
    # Rounding left the threshold just past the end of the last segment
    last = segments[-1]
    return last.start + last.length * direction


def _locate_by_stepping(hierarchy, origin, direction, target, threshold, step, use_fraction) -> np.ndarray:
    point = np.array(origin, dtype=float).reshape(3)
    has_entered = False
    accumulated = 0.0

    while accumulated < threshold:
        point = point + step * direction
        current = hierarchy.resolve(point)
        if current is None:
            if has_entered:
                break
            # Jump to the geometry instead of creeping towards it
            boundary = hierarchy.distance_to_next_boundary(point, direction, current=None)
            if boundary is None:
                break
            point = point + boundary.distance * direction
            continue
        has_entered = True
        material = hierarchy.material(current)
        for isotope, fraction in material.constituents():
            if isotope == target:
                accumulated += step * material.density * (fraction if use_fraction else 1.0)

    return point - step * direction
