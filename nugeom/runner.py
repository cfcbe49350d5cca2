"""
nugeom Runner Module

This module provides the max path-length job that can be called from scripts
or imported directly, plus the command-line entry point.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Sequence

import numpy as np

from . import config
from .core.analyzer import GeometryAnalyzer
from .core.constants import print_march_stats, reset_march_stats
from .core.io_utils import write_max_path_lengths_csv
from .core.marcher import march
from .plotting import plot_path_lengths, plot_ray_segments, print_path_lengths


def inspect_ray(
    analyzer: GeometryAnalyzer,
    origin: Sequence[float],
    direction: Sequence[float],
    save_base: Optional[str] = None,
    generate_plots: bool = True,
):
    """Print (and optionally plot) the path lengths along one ray."""
    lengths = analyzer.compute_path_lengths(origin, direction).copy()
    print_path_lengths(lengths, title=f"PATH LENGTHS: origin={list(origin)} direction={list(direction)}")

    if generate_plots:
        segments = list(march(analyzer.hierarchy, origin, direction))
        plot_path_lengths(lengths, save_path=save_base, show=False)
        plot_ray_segments(segments, save_path=save_base, show=False)
    return lengths


def run_max_path_lengths(
    geometry_file: Path,
    output_dir: Optional[Path] = None,
    top_volume: Optional[str] = None,
    length_units: Optional[str] = config.DEFAULT_LENGTH_UNITS,
    density_units: Optional[str] = config.DEFAULT_DENSITY_UNITS,
    points_per_face: int = config.ESTIMATOR_POINTS_PER_FACE,
    rays_per_point: int = config.ESTIMATOR_RAYS_PER_POINT,
    mixture_policy: str = config.DEFAULT_MIXTURE_POLICY,
    seed: Optional[int] = config.DEFAULT_SEED,
    ray: Optional[Sequence[float]] = None,
    save_results: bool = True,
    generate_plots: bool = True,
    progress: bool = config.ESTIMATOR_PROGRESS,
) -> Dict[int, float]:
    """Compute the max path-length table of a geometry.

    This is the main entry point for preparing an event generation job. It:
    1. Loads the JSON geometry (and any STL meshes it references)
    2. Estimates the max density-weighted path length of every isotope
    3. Exports the table to CSV
    4. Optionally inspects a single ray

    Parameters
    ----------
    geometry_file : Path
        JSON geometry description.
    output_dir : Path, optional
        Directory for output files (Data/, Figures/). If None, uses current
        working directory.
    top_volume : str, optional
        Restrict the job to the subtree of this volume.
    length_units, density_units : str, optional
        Units of the geometry description; None keeps geometry units.
    points_per_face, rays_per_point : int
        Estimator sample sizes.
    mixture_policy : {"full", "fraction"}
        Attribution of mixture steps.
    seed : int, optional
        Seed of the random stream.
    ray : sequence of 6 floats, optional
        ``x y z dx dy dz`` of a ray whose path lengths are printed.
    save_results : bool
        Whether to write the CSV table.
    generate_plots : bool
        Whether to generate figures.
    progress : bool
        Show a tqdm progress bar per isotope.

    Returns
    -------
    Dict[int, float]
        Isotope identifier -> max path length.
    """
    output_dir = Path.cwd() if output_dir is None else Path(output_dir)

    analyzer = GeometryAnalyzer.from_file(
        geometry_file,
        top_volume=top_volume,
        length_units=length_units,
        density_units=density_units,
        mixture_policy=mixture_policy,
        seed=seed,
    )

    print("\n" + "="*70)
    print("GEOMETRY CONFIGURATION")
    print("="*70)
    print(f"Geometry file: {geometry_file}")
    print(f"Top volume: {analyzer.hierarchy.world.name}")
    print(f"Units: length={length_units or 'geometry'}, density={density_units or 'geometry'}")
    print(f"Mixture policy: {mixture_policy}")
    print(f"Registered isotopes: {len(analyzer.list_registered_isotopes())}")
    print(f"Trials per isotope: 6 x {points_per_face} x {rays_per_point}")
    print("="*70 + "\n")

    reset_march_stats()
    print("[info] Estimating max path lengths...")
    table = analyzer.max_path_lengths(
        points_per_face=points_per_face,
        rays_per_point=rays_per_point,
        progress=progress,
    )
    print_path_lengths(table, title="MAX PATH LENGTHS")
    print_march_stats()

    if save_results:
        csv_filename = str(output_dir / config.DATA_OUTPUT_DIR / config.MAX_PATH_LENGTHS_CSV)
        write_max_path_lengths_csv(table, csv_filename)

    if ray is not None:
        values = np.asarray(ray, dtype=float)
        save_base = str(output_dir / config.FIGURES_OUTPUT_DIR / config.PATH_LENGTH_FIGURE_BASE)
        inspect_ray(analyzer, values[:3], values[3:], save_base=save_base, generate_plots=generate_plots)

    return table


def main(argv: Optional[Sequence[str]] = None):
    """Command-line entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Compute max path lengths of a detector geometry")
    parser.add_argument("-g", "--geometry", type=Path, required=True,
                        help="JSON geometry description")
    parser.add_argument("-t", "--top-volume", default=None,
                        help="Restrict the job to this volume and its daughters")
    parser.add_argument("-L", "--length-units", default=config.DEFAULT_LENGTH_UNITS,
                        help="Length unit of the geometry (m, cm, mm, ...)")
    parser.add_argument("-D", "--density-units", default=config.DEFAULT_DENSITY_UNITS,
                        help="Density unit of the geometry (kg_m3, g_cm3, ...)")
    parser.add_argument("-n", "--points", type=int, default=config.ESTIMATOR_POINTS_PER_FACE,
                        help="Surface points per bounding-box face")
    parser.add_argument("-r", "--rays", type=int, default=config.ESTIMATOR_RAYS_PER_POINT,
                        help="Rays per surface point")
    parser.add_argument("--mixture-policy", choices=("full", "fraction"),
                        default=config.DEFAULT_MIXTURE_POLICY,
                        help="How mixture steps are attributed to constituents")
    parser.add_argument("--seed", type=int, default=config.DEFAULT_SEED,
                        help="Random seed")
    parser.add_argument("--ray", type=float, nargs=6, default=None,
                        metavar=("X", "Y", "Z", "DX", "DY", "DZ"),
                        help="Print path lengths along this ray")
    parser.add_argument("--no-save", action="store_true",
                        help="Don't save the table to CSV")
    parser.add_argument("--no-plot", action="store_true",
                        help="Don't generate figures")
    parser.add_argument("--progress", action="store_true",
                        help="Show a progress bar")
    parser.add_argument("--output-dir", type=Path, default=None,
                        help="Output directory for results and figures")

    args = parser.parse_args(argv)

    return run_max_path_lengths(
        geometry_file=args.geometry,
        output_dir=args.output_dir,
        top_volume=args.top_volume,
        length_units=args.length_units,
        density_units=args.density_units,
        points_per_face=args.points,
        rays_per_point=args.rays,
        mixture_policy=args.mixture_policy,
        seed=args.seed,
        ray=args.ray,
        save_results=not args.no_save,
        generate_plots=not args.no_plot,
        progress=args.progress,
    )


if __name__ == "__main__":
    main()
