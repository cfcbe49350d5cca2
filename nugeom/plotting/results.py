"""
Path-length and vertex visualization.

This module provides plots and printed summaries of geometry traversal
results: path lengths per isotope, the segments a ray crossed and the
distribution of sampled vertices along a ray.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence

import numpy as np
import matplotlib.pyplot as plt

from .. import config
from ..core.data_classes import Segment, normalize_direction
from ..core.isotopes import isotope_label


def _finish(fig, save_path: Optional[str], suffix: str, show: bool) -> Optional[str]:
    plt.tight_layout()
    output = None
    if save_path:
        output = f"{save_path}_{suffix}.png"
        Path(output).parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output, dpi=config.PLOT_DPI, bbox_inches='tight')
        print(f"[info] Saved {suffix.replace('_', ' ')} figure to {output}")
    if show:
        plt.show()
    else:
        plt.close(fig)
    return output


def plot_path_lengths(
    path_lengths: Mapping[int, float],
    save_path: Optional[str] = None,
    show: bool = True,
    unit_label: str = "length",
) -> Optional[str]:
    """Bar chart of path length per isotope.

    Parameters
    ----------
    path_lengths : Mapping[int, float]
        Isotope identifier -> path length (e.g. a PathLengthList).
    save_path : str, optional
        Base path for saving the figure.
    show : bool
        Display the figure; otherwise it is closed after saving.
    unit_label : str
        Y axis label.
    """
    if not path_lengths:
        print("[warning] No path lengths to plot.")
        return None

    isotopes = sorted(path_lengths)
    labels = [isotope_label(iso) for iso in isotopes]
    values = [path_lengths[iso] for iso in isotopes]

    fig, ax = plt.subplots(figsize=config.PATH_LENGTH_FIGSIZE)
    ax.bar(labels, values, color='steelblue', alpha=0.8)
    ax.set_xlabel('Isotope')
    ax.set_ylabel(unit_label)
    ax.set_title('Path Length per Isotope')
    ax.grid(True, axis='y', alpha=0.3)
    return _finish(fig, save_path, "path_lengths", show)


def plot_ray_segments(
    segments: Iterable[Segment],
    save_path: Optional[str] = None,
    show: bool = True,
) -> Optional[str]:
    """Strip chart of the volumes crossed along a ray.

    Each boundary-to-boundary step is drawn once (mixture constituents share
    a bar), colored by volume and annotated with its density.
    """
    steps: List[Segment] = []
    for seg in segments:
        if seg.isotope is None:
            continue
        if steps and np.array_equal(steps[-1].start, seg.start):
            continue
        steps.append(seg)

    if not steps:
        print("[warning] Ray crossed no material - nothing to plot.")
        return None

    origin = steps[0].start
    names = sorted({seg.volume for seg in steps})
    colors = plt.cm.tab10(np.linspace(0, 1, max(len(names), 1)))
    color_of = dict(zip(names, colors))

    fig, ax = plt.subplots(figsize=(config.PATH_LENGTH_FIGSIZE[0], 2.5))
    for seg in steps:
        offset = float(np.linalg.norm(seg.start - origin))
        ax.barh(0, seg.length, left=offset, color=color_of[seg.volume], edgecolor='black',
                label=seg.volume)
        ax.text(offset + seg.length / 2, 0, f"{seg.density:.3g}", ha='center', va='center', fontsize=8)

    handles, labels = ax.get_legend_handles_labels()
    unique = dict(zip(labels, handles))
    ax.legend(unique.values(), unique.keys(), loc='upper right', fontsize=8)
    ax.set_yticks([])
    ax.set_xlabel('Distance from first material boundary')
    ax.set_title('Volumes Along Ray (labels: density)')
    return _finish(fig, save_path, "ray_segments", show)


def plot_vertex_distribution(
    vertices: Sequence[np.ndarray],
    origin,
    direction,
    save_path: Optional[str] = None,
    show: bool = True,
    bins: int = config.VERTEX_HIST_BINS,
) -> Optional[str]:
    """Histogram of sampled vertex positions along a ray."""
    if len(vertices) == 0:
        print("[warning] No vertices to plot.")
        return None

    d = normalize_direction(direction)
    distances = (np.asarray(vertices, dtype=float) - np.asarray(origin, dtype=float)) @ d

    fig, ax = plt.subplots(figsize=config.PATH_LENGTH_FIGSIZE)
    ax.hist(distances, bins=bins, color='purple', alpha=0.7)
    ax.axvline(np.mean(distances), color='red', linestyle='--', linewidth=2,
               label=f'Mean: {np.mean(distances):.3f}')
    ax.set_xlabel('Distance along ray')
    ax.set_ylabel('Count')
    ax.set_title(f'Sampled Vertex Positions (n={len(distances)})')
    ax.legend()
    ax.grid(True, alpha=0.3)
    return _finish(fig, save_path, "vertices", show)


def print_path_lengths(path_lengths: Mapping[int, float], title: str = "PATH LENGTHS"):
    """Print a path-length table."""
    print("\n" + "="*60)
    print(title)
    print("="*60)
    if not path_lengths:
        print("  (no isotopes)")
    for iso in sorted(path_lengths):
        print(f"  {isotope_label(iso):>10s}  ({iso})  {path_lengths[iso]:.6g}")
    print(f"  {'total':>10s}  {'':12s}  {sum(path_lengths.values()):.6g}")
    print("="*60 + "\n")
