"""
Per-isotope path-length bookkeeping.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Dict, Iterable, Iterator, Optional

from .. import config
from .errors import ConfigurationError
from .isotopes import isotope_label
from .marcher import march
from .volumes import VolumeHierarchy

MIXTURE_POLICIES = ("full", "fraction")


def check_mixture_policy(policy: str) -> str:
    if policy not in MIXTURE_POLICIES:
        raise ConfigurationError(
            f"Unknown mixture policy '{policy}', expected one of {MIXTURE_POLICIES}"
        )
    return policy


class PathLengthList(Mapping):
    """Accumulated length (or mass) per isotope.

    The keys are fixed when the list is created: only isotopes registered in
    the geometry can ever receive a path length.
    """

    def __init__(self, isotopes: Iterable[int]):
        self._lengths: Dict[int, float] = {iso: 0.0 for iso in sorted(isotopes)}

    def __getitem__(self, isotope: int) -> float:
        return self._lengths[isotope]

    def __iter__(self) -> Iterator[int]:
        return iter(self._lengths)

    def __len__(self) -> int:
        return len(self._lengths)

    def set_all_to_zero(self) -> None:
        for iso in self._lengths:
            self._lengths[iso] = 0.0

    def add_path_length(self, isotope: int, length: float) -> None:
        if isotope not in self._lengths:
            raise ConfigurationError(f"Isotope {isotope} is not registered in the geometry")
        self._lengths[isotope] += length

    def set_path_length(self, isotope: int, length: float) -> None:
        if isotope not in self._lengths:
            raise ConfigurationError(f"Isotope {isotope} is not registered in the geometry")
        self._lengths[isotope] = float(length)

    def scale(self, factor: float) -> None:
        for iso in self._lengths:
            self._lengths[iso] *= factor

    def total(self) -> float:
        return float(sum(self._lengths.values()))

    def is_zero(self) -> bool:
        return all(length == 0.0 for length in self._lengths.values())

    def copy(self) -> "PathLengthList":
        other = PathLengthList(self._lengths)
        other._lengths.update(self._lengths)
        return other

    def as_dict(self) -> Dict[int, float]:
        return dict(self._lengths)

    def __repr__(self) -> str:
        body = ", ".join(f"{isotope_label(iso)}: {length:.6g}" for iso, length in self._lengths.items())
        return f"PathLengthList({{{body}}})"


def accumulate(
    segments,
    path_lengths: PathLengthList,
    mixture_policy: str = config.DEFAULT_MIXTURE_POLICY,
    weighted: bool = False,
) -> PathLengthList:
    """Add every material segment to ``path_lengths`` (no reset)."""
    use_fraction = check_mixture_policy(mixture_policy) == "fraction"
    for segment in segments:
        if segment.isotope is None:
            continue
        length = segment.length
        if use_fraction:
            length *= segment.fraction
        if weighted:
            length *= segment.density
        path_lengths.add_path_length(segment.isotope, length)
    return path_lengths


def compute_path_lengths(
    hierarchy: VolumeHierarchy,
    origin,
    direction,
    path_lengths: Optional[PathLengthList] = None,
    mixture_policy: str = config.DEFAULT_MIXTURE_POLICY,
    weighted: bool = False,
) -> PathLengthList:
    """Path length in each isotope for a ray crossing the whole geometry.

    Parameters
    ----------
    hierarchy : VolumeHierarchy
        Geometry to traverse.
    origin, direction : array-like
        Ray start point and direction.
    path_lengths : PathLengthList, optional
        List to reuse; it is reset before marching. A new list keyed by the
        hierarchy's isotopes is created when omitted.
    mixture_policy : {"full", "fraction"}
        How a mixture's step is shared between its constituents.
    weighted : bool
        Accumulate length x density instead of length.

    Notes
    -----
    With the "full" policy the lengths of a mixture's constituents each equal
    the geometric step, so the total is not the distance travelled.
    """
    if path_lengths is None:
        path_lengths = PathLengthList(hierarchy.isotopes())
    path_lengths.set_all_to_zero()
    return accumulate(march(hierarchy, origin, direction), path_lengths, mixture_policy, weighted)
