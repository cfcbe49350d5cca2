"""
Geometry description loading and max path-length table import/export.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from .isotopes import decode_isotope_id
from .materials import Element, Material, MaterialTable
from .shapes import build_shape
from .stl_utils import load_stl_mesh
from .volumes import Volume, VolumeHierarchy

MAX_PATH_LENGTH_HEADERS = ['isotope_id', 'A', 'Z', 'max_path_length']


def parse_material(entry: dict) -> Material:
    """Build a material from its description.

    Either ``elements`` (list of ``{"A", "Z", "fraction"}``) or a single
    ``A``/``Z`` pair must be given, plus ``name`` and ``density``.
    """
    if 'elements' in entry:
        elements = tuple(
            Element(int(round(e['A'])), int(e['Z']), float(e.get('fraction', 1.0)))
            for e in entry['elements']
        )
    else:
        elements = (Element(int(round(entry['A'])), int(entry['Z']), 1.0),)
    return Material(str(entry['name']), float(entry['density']), elements)


def parse_volume(entry: dict, base_dir: Path) -> Volume:
    """Recursively build a volume (and its daughters) from its description."""

    def load_facets(shape_spec: dict):
        return load_stl_mesh(str(base_dir / shape_spec['file']), scale=float(shape_spec.get('scale', 1.0)))

    return Volume(
        name=str(entry['name']),
        shape=build_shape(entry['shape'], facets_loader=load_facets),
        material=entry.get('material'),
        position=entry.get('position', (0.0, 0.0, 0.0)),
        daughters=[parse_volume(child, base_dir) for child in entry.get('daughters', [])],
    )


def build_hierarchy(description: dict, base_dir: Union[str, Path] = ".") -> VolumeHierarchy:
    """Build a :class:`VolumeHierarchy` from a parsed geometry description."""
    materials = MaterialTable(parse_material(m) for m in description.get('materials', []))
    if 'world' not in description:
        raise ValueError("Geometry description has no 'world' volume")
    world = parse_volume(description['world'], Path(base_dir))
    return VolumeHierarchy(world, materials)


def load_geometry(file_path: Union[str, Path]) -> VolumeHierarchy:
    """Load a JSON geometry description.

    Mesh shapes reference STL files relative to the JSON file.
    """
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(f"Geometry file '{path}' does not exist")
    with open(path, 'r', encoding='utf-8') as f:
        description = json.load(f)
    return build_hierarchy(description, base_dir=path.parent)


def write_max_path_lengths_csv(table: Mapping[int, float], filename: str) -> Optional[Path]:
    """Export a max path-length table to CSV.

    Parameters
    ----------
    table : Mapping[int, float]
        Isotope identifier -> max path length.
    filename : str
        Output CSV filename; parent directories are created.
    """
    if not table:
        print("[warning] No max path lengths to export.")
        return None

    output_path = Path(filename)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', newline='', encoding='utf-8') as csvfile:
        writer = csv.writer(csvfile)
        writer.writerow(MAX_PATH_LENGTH_HEADERS)
        for iso in sorted(table):
            a, z = decode_isotope_id(iso)
            writer.writerow([iso, a, z, repr(float(table[iso]))])

    print(f"[info] Exported {len(table)} max path lengths to {output_path}")
    return output_path


def read_max_path_lengths_csv(filename: str) -> Dict[int, float]:
    """Read a table written by :func:`write_max_path_lengths_csv`."""
    path = Path(filename)
    if not path.is_file():
        raise FileNotFoundError(f"Max path-length file '{path}' does not exist")

    table: Dict[int, float] = {}
    with open(path, 'r', newline='', encoding='utf-8') as csvfile:
        reader = csv.DictReader(csvfile)
        missing = set(MAX_PATH_LENGTH_HEADERS) - set(reader.fieldnames or [])
        if missing:
            raise ValueError(f"'{path}' is missing columns: {sorted(missing)}")
        for row in reader:
            table[int(row['isotope_id'])] = float(row['max_path_length'])
    return table
