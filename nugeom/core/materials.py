"""
Material compositions and the material table.

A material is either a single isotope or a mixture of isotopes sharing one
overall mass density. Mass fractions are kept as given: they are not required
to sum to one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Tuple

from .errors import ConfigurationError
from .isotopes import isotope_id


@dataclass(frozen=True)
class Element:
    """One constituent of a material."""

    mass_number: int
    atomic_number: int
    fraction: float = 1.0

    @property
    def isotope(self) -> int:
        return isotope_id(self.mass_number, self.atomic_number)


@dataclass(frozen=True)
class Material:
    """Material with an overall density and one or more constituents.

    Parameters
    ----------
    name : str
        Unique material name.
    density : float
        Mass density in the geometry's density units. Must be positive.
    elements : tuple of Element
        Ordered constituents.
    """

    name: str
    density: float
    elements: Tuple[Element, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, 'elements', tuple(self.elements))
        if not self.elements:
            raise ConfigurationError(f"Material '{self.name}' has no constituents")
        if not self.density > 0.0:
            raise ConfigurationError(
                f"Material '{self.name}' must have a positive density, got {self.density}"
            )
        for element in self.elements:
            if element.fraction < 0.0:
                raise ConfigurationError(
                    f"Material '{self.name}' has a negative mass fraction"
                )

    @classmethod
    def single(cls, name: str, mass_number: int, atomic_number: int, density: float) -> "Material":
        return cls(name, density, (Element(mass_number, atomic_number, 1.0),))

    @classmethod
    def mixture(cls, name: str, density: float, components: Iterable[Tuple[int, int, float]]) -> "Material":
        """Build a mixture from ``(A, Z, mass_fraction)`` triples."""
        return cls(name, density, tuple(Element(a, z, w) for a, z, w in components))

    @property
    def is_mixture(self) -> bool:
        return len(self.elements) > 1

    @property
    def isotopes(self) -> List[int]:
        return [element.isotope for element in self.elements]

    def constituents(self) -> Iterator[Tuple[int, float]]:
        """Yield ``(isotope_id, mass_fraction)`` in declaration order."""
        for element in self.elements:
            yield element.isotope, element.fraction


class MaterialTable:
    """Maps material names to :class:`Material` definitions."""

    def __init__(self, materials: Iterable[Material] = ()):
        self._materials: Dict[str, Material] = {}
        for material in materials:
            self.add(material)

    def add(self, material: Material) -> Material:
        if material.name in self._materials:
            raise ConfigurationError(f"Material '{material.name}' defined twice")
        self._materials[material.name] = material
        return material

    def get(self, name: str) -> Material:
        try:
            return self._materials[name]
        except KeyError:
            raise ConfigurationError(f"Unknown material '{name}'") from None

    def __contains__(self, name: str) -> bool:
        return name in self._materials

    def __iter__(self) -> Iterator[Material]:
        return iter(self._materials.values())

    def __len__(self) -> int:
        return len(self._materials)

    def isotopes(self) -> frozenset:
        """All isotope identifiers used by any material in the table."""
        return frozenset(iso for material in self for iso in material.isotopes)
