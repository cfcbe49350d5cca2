"""
Volume hierarchy and the navigation queries the ray marcher relies on.

A geometry is a tree of volumes. Each volume has a shape, an optional
material and a placement offset relative to its mother. Daughters must lie
inside their mother and must not overlap each other; the innermost volume
containing a point is the one that determines its material.

All queries take the point and direction explicitly. The hierarchy keeps no
cursor state between calls, so any number of rays can be traced against one
instance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

import numpy as np

from .. import config
from .data_classes import BoundaryStep, BoundingBox
from .errors import ConfigurationError, MissingMaterialError
from .materials import Material, MaterialTable
from .shapes import Shape


@dataclass
class Volume:
    """Logical description of one volume in the tree.

    Attributes
    ----------
    name : str
        Unique volume name.
    shape : Shape
        Solid in the volume's local frame.
    material : str or None
        Name of the material filling the volume (minus its daughters).
    position : np.ndarray
        Offset of the local frame relative to the mother's frame.
    daughters : list of Volume
        Volumes placed inside this one.
    """

    name: str
    shape: Shape
    material: Optional[str] = None
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    daughters: List["Volume"] = field(default_factory=list)

    def __post_init__(self):
        self.position = np.array(self.position, dtype=float).reshape(3)

    def add_daughter(self, daughter: "Volume") -> "Volume":
        self.daughters.append(daughter)
        return daughter


class PlacedVolume:
    """A volume together with its absolute placement in the hierarchy."""

    __slots__ = ("volume", "origin", "mother", "children", "depth")

    def __init__(self, volume: Volume, origin: np.ndarray, mother: Optional["PlacedVolume"], depth: int):
        self.volume = volume
        self.origin = origin
        self.mother = mother
        self.children: List[PlacedVolume] = []
        self.depth = depth

    @property
    def name(self) -> str:
        return self.volume.name

    @property
    def shape(self) -> Shape:
        return self.volume.shape

    def contains(self, point: np.ndarray) -> bool:
        return self.volume.shape.contains(point - self.origin)

    def distance_to_surface(self, point: np.ndarray, direction: np.ndarray) -> float:
        return self.volume.shape.distance_to_surface(point - self.origin, direction)

    def __repr__(self) -> str:
        return f"PlacedVolume({self.name!r}, origin={self.origin.tolist()})"


class VolumeHierarchy:
    """Navigator over a tree of volumes.

    Parameters
    ----------
    world : Volume
        Outermost (top) volume.
    materials : MaterialTable
        Materials referenced by name from the volumes.
    offset : array-like, optional
        Absolute position of the world's mother frame.
    """

    def __init__(self, world: Volume, materials: MaterialTable, offset=None):
        self.world_volume = world
        self.materials = materials
        base = np.zeros(3) if offset is None else np.array(offset, dtype=float).reshape(3)
        self._placed: Dict[str, PlacedVolume] = {}
        self.world = self._place(world, base, None, 0)
        self._isotopes = self._collect_isotopes()

    def _place(self, volume: Volume, mother_origin: np.ndarray, mother, depth: int) -> PlacedVolume:
        if volume.name in self._placed:
            raise ConfigurationError(f"Volume name '{volume.name}' is used more than once")
        if volume.material is not None and volume.material not in self.materials:
            raise ConfigurationError(
                f"Volume '{volume.name}' references unknown material '{volume.material}'"
            )
        placed = PlacedVolume(volume, mother_origin + volume.position, mother, depth)
        self._placed[volume.name] = placed
        for daughter in volume.daughters:
            placed.children.append(self._place(daughter, placed.origin, placed, depth + 1))
        return placed

    def _collect_isotopes(self) -> frozenset:
        isotopes = set()
        for placed in self._placed.values():
            if placed.volume.material is not None:
                isotopes.update(self.materials.get(placed.volume.material).isotopes)
        return frozenset(isotopes)

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def iter_volumes(self) -> Iterator[PlacedVolume]:
        """Depth-first walk over all placed volumes."""
        stack = [self.world]
        while stack:
            placed = stack.pop()
            yield placed
            stack.extend(reversed(placed.children))

    def volume(self, name: str) -> PlacedVolume:
        try:
            return self._placed[name]
        except KeyError:
            raise ConfigurationError(f"No volume named '{name}' in the geometry") from None

    def with_top_volume(self, name: str) -> "VolumeHierarchy":
        """Hierarchy restricted to the subtree rooted at volume ``name``."""
        placed = self.volume(name)
        if placed is self.world:
            return self
        return VolumeHierarchy(placed.volume, self.materials, offset=placed.origin - placed.volume.position)

    def isotopes(self) -> frozenset:
        """Every isotope identifier occurring in any volume's material."""
        return self._isotopes

    def bounding_box(self) -> BoundingBox:
        return self.world.shape.bounding_box().translated(self.world.origin)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def resolve(self, point) -> Optional[PlacedVolume]:
        """Innermost volume containing ``point``, or None when outside the world."""
        point = np.asarray(point, dtype=float)
        node = self.world
        if not node.contains(point):
            return None
        while True:
            for child in node.children:
                if child.contains(point):
                    node = child
                    break
            else:
                return node

    def distance_to_next_boundary(self, point, direction, current=None) -> Optional[BoundaryStep]:
        """Distance along ``direction`` to the next volume boundary.

        Parameters
        ----------
        point, direction : array-like
            Ray position and unit direction.
        current : PlacedVolume, optional
            Result of :meth:`resolve` for ``point``, when already known.

        Returns
        -------
        BoundaryStep or None
            None when the point is outside the world and the ray never
            reaches it. A zero distance means the point sits on the surface
            of its volume and the ray leaves it immediately.
        """
        point = np.asarray(point, dtype=float)
        direction = np.asarray(direction, dtype=float)
        if current is None:
            current = self.resolve(point)

        if current is None:
            distance = self.world.distance_to_surface(point, direction)
            if not np.isfinite(distance):
                return None
            return BoundaryStep(distance, True)

        best = current.distance_to_surface(point, direction)
        entering = False
        for child in current.children:
            distance = child.distance_to_surface(point, direction)
            if distance < best:
                best, entering = distance, True
        if not np.isfinite(best):
            # On the surface and heading out: the exit is right here
            if not current.contains(point + config.BOUNDARY_PUSH * direction):
                return BoundaryStep(0.0, False)
            raise ConfigurationError(
                f"Ray inside volume '{current.name}' never reaches its surface; "
                "the shape is probably not closed"
            )
        return BoundaryStep(best, entering)

    def material(self, placed: PlacedVolume) -> Material:
        """Material of a resolved volume; a missing material is fatal."""
        if placed.volume.material is None:
            raise MissingMaterialError(placed.name)
        return self.materials.get(placed.volume.material)

    def __repr__(self) -> str:
        return (f"VolumeHierarchy(world={self.world.name!r}, volumes={len(self._placed)}, "
                f"isotopes={len(self._isotopes)})")
