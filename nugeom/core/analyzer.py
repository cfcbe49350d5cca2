"""
Geometry analyzers: the interface the interaction-generation driver uses.

``GeometryAnalyzer`` wraps a volume hierarchy and answers the three questions
an event generation job asks of its detector geometry: how much of each
isotope does a ray cross, where along the ray does an interaction on a given
isotope happen, and how large can that crossing ever be.

Coordinates (ray origins, sampled vertices) are always in the geometry's own
length unit. Path lengths and max path lengths are multiplied by the unit
factors configured on the analyzer (metres and kg/m³ when units are given).
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Mapping, Optional, Union

import numpy as np

from .. import config
from .constants import DENSITY_UNITS, LENGTH_UNITS
from .data_classes import VertexSample, VertexStatus, normalize_direction
from .errors import ConfigurationError
from .estimator import estimate_max_path_length
from .io_utils import load_geometry, read_max_path_lengths_csv
from .path_lengths import PathLengthList, check_mixture_policy, compute_path_lengths
from .sampling import make_rng, sample_vertex
from .volumes import VolumeHierarchy


def unit_factor(units: Optional[str], table: Mapping[str, float], kind: str) -> float:
    if units is None:
        return 1.0
    try:
        return table[units]
    except KeyError:
        raise ConfigurationError(f"Unknown {kind} unit '{units}'; known: {sorted(table)}") from None


class GeometryAnalyzer:
    """Path lengths, vertices and max path lengths for a detector geometry.

    Parameters
    ----------
    hierarchy : VolumeHierarchy
        Loaded geometry.
    top_volume : str, optional
        Restrict event generation to the subtree of this volume.
    length_units, density_units : str, optional
        Units the geometry is written in (keys of ``LENGTH_UNITS`` and
        ``DENSITY_UNITS``). When None, results stay in geometry units.
    mixture_policy : {"full", "fraction"}
        Attribution of a mixture's step to its constituents.
    seed : int or np.random.Generator, optional
        Seed for (or instance of) the random stream used for all sampling.
    """

    def __init__(
        self,
        hierarchy: VolumeHierarchy,
        top_volume: Optional[str] = None,
        length_units: Optional[str] = None,
        density_units: Optional[str] = None,
        mixture_policy: str = config.DEFAULT_MIXTURE_POLICY,
        seed: Union[None, int, np.random.Generator] = config.DEFAULT_SEED,
    ):
        if hierarchy is None:
            raise ConfigurationError("Load a geometry before creating an analyzer")
        self.hierarchy = hierarchy.with_top_volume(top_volume) if top_volume else hierarchy
        self.length_unit = unit_factor(length_units, LENGTH_UNITS, "length")
        self.density_unit = unit_factor(density_units, DENSITY_UNITS, "density")
        self.mixture_policy = check_mixture_policy(mixture_policy)
        self.rng = make_rng(seed)
        self._path_lengths = PathLengthList(self.hierarchy.isotopes())
        self._max_path_lengths: Dict[tuple, float] = {}

    @classmethod
    def from_file(cls, file_path: Union[str, Path], **kwargs) -> "GeometryAnalyzer":
        """Load a JSON geometry description and wrap it."""
        return cls(load_geometry(file_path), **kwargs)

    def list_registered_isotopes(self) -> frozenset:
        return self.hierarchy.isotopes()

    def _check_isotope(self, isotope: int) -> None:
        if isotope not in self.hierarchy.isotopes():
            raise ConfigurationError(f"Isotope {isotope} does not exist in the geometry")

    def compute_path_lengths(self, origin, direction, weighted: bool = False) -> PathLengthList:
        """Path length per isotope along the ray.

        The returned list is owned by the analyzer and is reset by the next
        call; copy it to keep it.
        """
        compute_path_lengths(self.hierarchy, origin, direction, self._path_lengths,
                             self.mixture_policy, weighted)
        factor = self.length_unit * (self.density_unit if weighted else 1.0)
        if factor != 1.0:
            self._path_lengths.scale(factor)
        return self._path_lengths

    def sample_vertex(self, origin, direction, isotope: int, method: str = config.DEFAULT_VERTEX_METHOD) -> VertexSample:
        """Density-weighted random vertex in ``isotope`` along the ray."""
        return sample_vertex(self.hierarchy, origin, direction, isotope, rng=self.rng,
                             method=method, mixture_policy=self.mixture_policy)

    def _estimator_settings(self, kwargs: Mapping) -> tuple:
        """Estimator arguments that change the result (``progress`` does not)."""
        return (
            kwargs.get('points_per_face', config.ESTIMATOR_POINTS_PER_FACE),
            kwargs.get('rays_per_point', config.ESTIMATOR_RAYS_PER_POINT),
            kwargs.get('max_crossings', config.ESTIMATOR_MAX_CROSSINGS),
            kwargs.get('density_weighted', True),
            kwargs.get('mixture_policy', self.mixture_policy),
            kwargs.get('initial', 0.0),
        )

    def estimate_max_path_length(self, isotope: int, **kwargs) -> float:
        """Max path length in ``isotope``, cached per isotope and estimator settings."""
        self._check_isotope(isotope)
        key = (isotope, self._estimator_settings(kwargs))
        if key not in self._max_path_lengths:
            kwargs.setdefault('mixture_policy', self.mixture_policy)
            raw = estimate_max_path_length(self.hierarchy, isotope, rng=self.rng, **kwargs)
            weighted = kwargs.get('density_weighted', True)
            factor = self.length_unit * (self.density_unit if weighted else 1.0)
            self._max_path_lengths[key] = raw * factor
        return self._max_path_lengths[key]

    def max_path_lengths(self, **kwargs) -> Dict[int, float]:
        """Max path length of every registered isotope (estimated on demand)."""
        return {iso: self.estimate_max_path_length(iso, **kwargs)
                for iso in sorted(self.hierarchy.isotopes())}

    def use_max_path_lengths(self, source: Union[str, Path, Mapping[int, float]]) -> None:
        """Use an externally computed max path-length table.

        ``source`` is a mapping or a CSV file; values are taken as already
        expressed in the analyzer's output units. The table replaces the
        estimate made with default settings; isotopes missing from it are
        still estimated on demand.
        """
        if isinstance(source, (str, Path)):
            table = read_max_path_lengths_csv(str(source))
            print(f"[info] Loaded max path lengths for {len(table)} isotopes from {source}")
        else:
            table = dict(source)
        for iso, value in table.items():
            self._check_isotope(iso)
            self._max_path_lengths[(iso, self._estimator_settings({}))] = float(value)

    def __repr__(self) -> str:
        return f"GeometryAnalyzer({self.hierarchy!r}, mixture_policy={self.mixture_policy!r})"


class PointGeometryAnalyzer:
    """Geometry-free analyzer for a fixed target mix.

    Every ray "crosses" each target with a path length equal to its weight and
    interacts at its own origin.

    Parameters
    ----------
    target_mix : Mapping[int, float]
        Isotope identifier -> weight (e.g. mass fraction).
    """

    def __init__(self, target_mix: Mapping[int, float]):
        if not target_mix:
            raise ConfigurationError("Target mix is empty")
        if any(weight < 0.0 for weight in target_mix.values()):
            raise ConfigurationError("Target mix weights must be non-negative")
        self.target_mix = {int(iso): float(w) for iso, w in target_mix.items()}
        self._path_lengths = PathLengthList(self.target_mix)

    def list_registered_isotopes(self) -> frozenset:
        return frozenset(self.target_mix)

    def compute_path_lengths(self, origin, direction) -> PathLengthList:
        normalize_direction(direction)
        for iso, weight in self.target_mix.items():
            self._path_lengths.set_path_length(iso, weight)
        return self._path_lengths

    def sample_vertex(self, origin, direction, isotope: int) -> VertexSample:
        normalize_direction(direction)
        if self.target_mix.get(isotope, 0.0) <= 0.0:
            status = VertexStatus.NOT_FOUND if isotope not in self.target_mix else VertexStatus.ZERO_MASS
            return VertexSample(np.zeros(3), status, 0.0)
        return VertexSample(np.array(origin, dtype=float).reshape(3), VertexStatus.FOUND,
                            self.target_mix[isotope])

    def estimate_max_path_length(self, isotope: int) -> float:
        if isotope not in self.target_mix:
            raise ConfigurationError(f"Isotope {isotope} is not in the target mix")
        return self.target_mix[isotope]

    def max_path_lengths(self) -> Dict[int, float]:
        return dict(self.target_mix)
