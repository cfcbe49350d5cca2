"""
Plotting subpackage for geometry traversal results.

Example usage:
    from nugeom.plotting import plot_path_lengths, print_path_lengths

    lengths = analyzer.compute_path_lengths(origin, direction)
    print_path_lengths(lengths)
    plot_path_lengths(lengths, save_path='Figures/path_lengths')
"""

from .results import (
    plot_path_lengths,
    plot_ray_segments,
    plot_vertex_distribution,
    print_path_lengths,
)

__all__ = [
    "plot_path_lengths",
    "plot_ray_segments",
    "plot_vertex_distribution",
    "print_path_lengths",
]
