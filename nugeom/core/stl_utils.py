"""
STL file loading for mesh-shaped volumes.
"""

from __future__ import annotations

import os
from typing import List, Optional

import numpy as np

# Binary STL facet record: normal, three vertices, attribute byte count
_BINARY_FACET = np.dtype([
    ('normal', '<f4', (3,)),
    ('vertices', '<f4', (3, 3)),
    ('attributes', '<u2'),
])


def _read_binary_stl(file_path: str, triangle_count: int) -> Optional[np.ndarray]:
    with open(file_path, 'rb') as f:
        f.seek(84)
        records = np.fromfile(f, dtype=_BINARY_FACET, count=triangle_count)
    if records.shape[0] != triangle_count or triangle_count == 0:
        return None
    facets = np.empty((triangle_count, 4, 3), dtype=float)
    facets[:, 0, :] = records['normal']
    facets[:, 1:, :] = records['vertices']
    return facets


def _read_ascii_stl(file_path: str) -> Optional[np.ndarray]:
    facets: List[np.ndarray] = []
    vertices: List[List[float]] = []
    normal: Optional[List[float]] = None
    with open(file_path, 'r', encoding='utf-8', errors='ignore') as f:
        for line in f:
            tokens = line.split()
            if not tokens:
                continue
            keyword = tokens[0].lower()
            if keyword == 'facet' and len(tokens) >= 5:
                normal = [float(x) for x in tokens[2:5]]
                vertices = []
            elif keyword == 'vertex' and len(tokens) >= 4:
                vertices.append([float(x) for x in tokens[1:4]])
            elif keyword == 'endfacet':
                if len(vertices) >= 3:
                    facets.append(np.array([normal or [0.0, 0.0, 0.0]] + vertices[:3], dtype=float))
                normal = None
                vertices = []
    if not facets:
        return None
    return np.stack(facets, axis=0)


def load_stl_mesh(file_path: str, scale: float = 1.0) -> np.ndarray:
    """Load a mesh from an ASCII or binary STL file.

    Parameters
    ----------
    file_path : str
        Path to the STL file on disk.
    scale : float, optional
        Factor applied to all vertex coordinates (e.g. to convert mm to the
        geometry's length unit).

    Returns
    -------
    np.ndarray, shape (n_facets, 4, 3)
        Facets as [normal, v0, v1, v2]. Normals are passed through unscaled.
    """
    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"STL file '{file_path}' does not exist")

    file_size = os.path.getsize(file_path)
    with open(file_path, 'rb') as f:
        header = f.read(80)
        count_bytes = f.read(4)
    triangle_count = int.from_bytes(count_bytes, byteorder='little') if len(count_bytes) == 4 else 0
    is_binary_size = triangle_count > 0 and 84 + triangle_count * 50 == file_size
    looks_ascii = header.decode(errors='ignore').strip().lower().startswith('solid')

    if is_binary_size:
        facets = _read_binary_stl(file_path, triangle_count)
        if facets is None and looks_ascii:
            facets = _read_ascii_stl(file_path)
    else:
        facets = _read_ascii_stl(file_path)

    if facets is None:
        raise ValueError(f"No facets were found in '{file_path}' - the file may be corrupt")
    facets[:, 1:, :] *= scale
    return facets
