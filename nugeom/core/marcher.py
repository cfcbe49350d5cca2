"""
Straight-line ray marching through a volume hierarchy.
"""

from __future__ import annotations

from typing import Iterator, Optional

import numpy as np

from .. import config
from .constants import DEBUG, MARCH_STATS
from .data_classes import Ray, Segment
from .errors import ConfigurationError, MarchLimitExceeded
from .volumes import VolumeHierarchy


def march(
    hierarchy: VolumeHierarchy,
    origin,
    direction,
    max_crossings: Optional[int] = None,
    boundary_push: float = config.BOUNDARY_PUSH,
    hard_limit: int = config.MAX_MARCH_CROSSINGS,
) -> Iterator[Segment]:
    """Walk a ray through the geometry one boundary crossing at a time.

    Segments are produced lazily. A step taken outside the world (before the
    ray reaches the geometry) yields one segment with ``isotope=None``. A step
    through a volume yields one segment per constituent of its material, each
    carrying the full boundary-to-boundary length.

    The march ends when the ray leaves the world after having been inside,
    or immediately if the ray never reaches the world.

    Parameters
    ----------
    hierarchy : VolumeHierarchy
        Geometry to traverse.
    origin, direction : array-like
        Ray start point and direction (normalised here).
    max_crossings : int, optional
        Stop quietly after this many crossings (bounded probe). When None the
        march runs until the ray exits, up to ``hard_limit``.
    boundary_push : float
        Distance the cursor is moved past each boundary so that the next
        lookup lands in the next region. It is included in the segment length.
    hard_limit : int
        Safety cap for unbounded marches; exceeding it raises
        :class:`MarchLimitExceeded`.

    Yields
    ------
    Segment
    """
    ray = Ray(origin, direction)
    d = ray.direction
    point = ray.origin.copy()
    has_entered = False
    crossings = 0
    MARCH_STATS['rays'] += 1

    while True:
        if max_crossings is not None and crossings >= max_crossings:
            MARCH_STATS['bounded_cap_hits'] += 1
            return
        if crossings >= hard_limit:
            raise MarchLimitExceeded(hard_limit, point.copy())

        current = hierarchy.resolve(point)

        if current is None:
            if has_entered:
                return
            step = hierarchy.distance_to_next_boundary(point, d, current=None)
            if step is None:
                MARCH_STATS['missed_geometry'] += 1
                if DEBUG:
                    print(f"[March] Ray from {point} along {d} misses the geometry")
                return
            length = step.distance + boundary_push
            yield Segment(None, length, 0.0, 0.0, point.copy(), None)
        else:
            material = hierarchy.material(current)
            has_entered = True
            step = hierarchy.distance_to_next_boundary(point, d, current=current)
            if step is None:
                raise ConfigurationError(f"No boundary found from inside volume '{current.name}'")
            length = step.distance + boundary_push
            start = point.copy()
            # A zero step leaves through the surface the ray starts on
            if step.distance > 0.0:
                for isotope, fraction in material.constituents():
                    if DEBUG:
                        print(f"[March] {current.name}: isotope {isotope} step {length:.6g}")
                    yield Segment(isotope, length, material.density, fraction, start, current.name)

        point = point + length * d
        crossings += 1
        MARCH_STATS['crossings'] += 1
