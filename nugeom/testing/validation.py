"""
Validation utilities for meshes and volume hierarchies.

The marcher assumes that daughters lie inside their mother and that sibling
volumes do not overlap. These checks catch the common violations cheaply
(using bounding boxes) before a long job starts.
"""

from __future__ import annotations

from typing import List, Tuple

import numpy as np

from ..core.volumes import VolumeHierarchy


def validate_mesh(mesh: np.ndarray, name: str = "Mesh") -> Tuple[bool, str]:
    """Validate mesh data for correctness.

    Parameters
    ----------
    mesh : np.ndarray
        Mesh data to validate.
    name : str
        Name for error messages.

    Returns
    -------
    valid : bool
        True if mesh is valid.
    message : str
        Description of validation result.
    """
    errors = []

    if mesh.ndim != 3:
        errors.append(f"Expected 3D array, got {mesh.ndim}D")
    elif mesh.shape[1] not in (3, 4):
        errors.append(f"Expected shape (n, 3, 3) or (n, 4, 3), got {mesh.shape}")
    elif mesh.shape[2] != 3:
        errors.append(f"Expected 3D coordinates, got {mesh.shape[2]}D")

    if errors:
        return False, f"{name}: " + "; ".join(errors)

    if not np.all(np.isfinite(mesh)):
        errors.append("Contains NaN or Inf values")

    vertices = mesh[:, -3:, :]
    areas = 0.5 * np.linalg.norm(
        np.cross(vertices[:, 1] - vertices[:, 0], vertices[:, 2] - vertices[:, 0]), axis=1
    )
    n_degenerate = int(np.count_nonzero(areas <= 1e-14))
    if n_degenerate:
        errors.append(f"{n_degenerate} degenerate facets")

    if errors:
        return False, f"{name}: " + "; ".join(errors)

    return True, f"{name}: Valid ({mesh.shape[0]} facets)"


def _boxes_overlap(a, b, tolerance: float) -> bool:
    return bool(np.all(a.lower < b.upper - tolerance) and np.all(b.lower < a.upper - tolerance))


def validate_hierarchy(hierarchy: VolumeHierarchy, tolerance: float = 1e-9) -> Tuple[bool, List[str]]:
    """Bounding-box sanity checks of a volume hierarchy.

    Reports daughters sticking out of their mother, sibling volumes whose
    bounding boxes overlap, and volumes without material.

    Returns
    -------
    valid : bool
        True if no problem was found.
    problems : list of str
        One message per problem.
    """
    problems = []
    for placed in hierarchy.iter_volumes():
        if placed.volume.material is None:
            problems.append(f"{placed.name}: no material assigned")

        mother_box = placed.shape.bounding_box().translated(placed.origin)
        child_boxes = []
        for child in placed.children:
            box = child.shape.bounding_box().translated(child.origin)
            if np.any(box.lower < mother_box.lower - tolerance) or np.any(box.upper > mother_box.upper + tolerance):
                problems.append(f"{child.name}: extends outside mother '{placed.name}'")
            child_boxes.append((child.name, box))

        for i, (name_a, box_a) in enumerate(child_boxes):
            for name_b, box_b in child_boxes[i + 1:]:
                if _boxes_overlap(box_a, box_b, tolerance):
                    problems.append(f"{name_a}, {name_b}: bounding boxes overlap in '{placed.name}'")

    return not problems, problems
