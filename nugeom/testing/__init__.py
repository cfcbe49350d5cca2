"""
Testing subpackage for the nugeom geometry engine.

This subpackage provides tools for testing and debugging:
- Simple analytical geometries with known path lengths
- Mesh generators producing STL-format facet arrays
- Validation functions for meshes and volume hierarchies

Example usage:
    from nugeom.testing import single_cube_geometry, validate_hierarchy

    hierarchy = single_cube_geometry(half_extent=10.0)
    ok, problems = validate_hierarchy(hierarchy)
"""

from .simple_geometry import (
    ARGON,
    CARBON,
    HYDROGEN,
    IRON,
    OXYGEN,
    create_box_mesh,
    create_sphere_mesh,
    single_cube_geometry,
    layered_slab_geometry,
    water_tank_geometry,
)

from .validation import (
    validate_mesh,
    validate_hierarchy,
)

__all__ = [
    # Isotopes
    "ARGON",
    "CARBON",
    "HYDROGEN",
    "IRON",
    "OXYGEN",
    # Simple geometry
    "create_box_mesh",
    "create_sphere_mesh",
    "single_cube_geometry",
    "layered_slab_geometry",
    "water_tank_geometry",
    # Validation
    "validate_mesh",
    "validate_hierarchy",
]
