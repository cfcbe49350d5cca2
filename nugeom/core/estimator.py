"""
Monte-Carlo estimate of the maximum path length through an isotope.

Rays are launched from random points on the six faces of the top volume's
bounding box towards its interior; the largest (density-weighted) length
found in the target isotope is kept. The result is an under-estimate of the
true supremum that converges with the number of trials, so it is used as a
normalisation constant rather than a hard bound.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, Optional, Tuple

import numpy as np
from tqdm import tqdm

from .. import config
from .constants import DEBUG
from .errors import ConfigurationError
from .isotopes import isotope_label
from .marcher import march
from .path_lengths import check_mixture_policy
from .sampling import BOX_FACES, make_rng, sample_face_point, sample_inward_direction
from .volumes import VolumeHierarchy


def iter_surface_rays(
    hierarchy: VolumeHierarchy,
    rng: np.random.Generator,
    points_per_face: int = config.ESTIMATOR_POINTS_PER_FACE,
    rays_per_point: int = config.ESTIMATOR_RAYS_PER_POINT,
    progress: bool = False,
) -> Iterator[Tuple[np.ndarray, np.ndarray]]:
    """Yield ``(point, direction)`` trial rays face by face."""
    box = hierarchy.bounding_box()
    bar = tqdm(total=len(BOX_FACES) * points_per_face, desc="surface points",
               disable=not progress, leave=False)
    try:
        for axis, sign in BOX_FACES:
            for _ in range(points_per_face):
                point = sample_face_point(box, axis, sign, rng)
                for _ in range(rays_per_point):
                    yield point, sample_inward_direction(axis, sign, rng)
                bar.update(1)
    finally:
        bar.close()


def probe_path_length(
    hierarchy: VolumeHierarchy,
    point,
    direction,
    target: int,
    max_crossings: int = config.ESTIMATOR_MAX_CROSSINGS,
    density_weighted: bool = True,
    mixture_policy: str = config.DEFAULT_MIXTURE_POLICY,
) -> float:
    """Bounded march accumulating the length spent in ``target``."""
    use_fraction = mixture_policy == "fraction"
    length = 0.0
    for seg in march(hierarchy, point, direction, max_crossings=max_crossings):
        if seg.isotope != target:
            continue
        step = seg.length
        if density_weighted:
            step *= seg.density
        if use_fraction:
            step *= seg.fraction
        length += step
    return length


def estimate_max_path_length(
    hierarchy: VolumeHierarchy,
    target: int,
    rng: Optional[np.random.Generator] = None,
    points_per_face: int = config.ESTIMATOR_POINTS_PER_FACE,
    rays_per_point: int = config.ESTIMATOR_RAYS_PER_POINT,
    max_crossings: int = config.ESTIMATOR_MAX_CROSSINGS,
    density_weighted: bool = True,
    mixture_policy: str = config.DEFAULT_MIXTURE_POLICY,
    initial: float = 0.0,
    progress: bool = config.ESTIMATOR_PROGRESS,
) -> float:
    """Largest path length through ``target`` over ``6 * P * R`` random rays.

    Parameters
    ----------
    hierarchy : VolumeHierarchy
        Geometry to probe.
    target : int
        Isotope identifier; must be registered in the geometry.
    rng : np.random.Generator, optional
        Random stream. Continuing the same stream with ``initial`` set to a
        previous result extends the search instead of restarting it.
    points_per_face, rays_per_point : int
        P surface points per face and R directions per point.
    max_crossings : int
        Boundary-crossing cap of each probe.
    density_weighted : bool
        Weight lengths by material density (mass per area). False gives the
        purely geometric length.
    mixture_policy : {"full", "fraction"}
        Same meaning as for :func:`compute_path_lengths`.
    initial : float
        Starting value of the running maximum.
    progress : bool
        Show a tqdm progress bar.
    """
    if target not in hierarchy.isotopes():
        raise ConfigurationError(f"Isotope {target} does not exist in the geometry")
    check_mixture_policy(mixture_policy)
    rng = make_rng(rng)

    max_length = float(initial)
    trials = iter_surface_rays(hierarchy, rng, points_per_face, rays_per_point, progress)
    for point, direction in trials:
        length = probe_path_length(hierarchy, point, direction, target,
                                   max_crossings, density_weighted, mixture_policy)
        if length > max_length:
            max_length = length

    if DEBUG:
        print(f"[Estimator] {isotope_label(target)}: max path length {max_length:.6g}")
    return max_length


def estimate_max_path_lengths(
    hierarchy: VolumeHierarchy,
    isotopes: Optional[Iterable[int]] = None,
    rng: Optional[np.random.Generator] = None,
    **kwargs,
) -> Dict[int, float]:
    """Estimate the max path length of each isotope (all registered by default)."""
    rng = make_rng(rng)
    if isotopes is None:
        isotopes = sorted(hierarchy.isotopes())
    return {iso: estimate_max_path_length(hierarchy, iso, rng=rng, **kwargs) for iso in isotopes}
