"""
nugeom - Detector Geometry Traversal for Interaction Generation
===============================================================

This package answers the geometry questions an interaction-generation job
asks of a detector description: the path length through each isotope along
a straight ray, a density-weighted interaction vertex on a chosen isotope,
and a Monte-Carlo estimate of the largest path length any ray can achieve.

Modules:
--------
- config: Tunable defaults (units, marching, sampling, estimation)
- core.isotopes / core.materials: Isotope codes and material compositions
- core.shapes / core.volumes: Solids and the volume hierarchy navigator
- core.marcher: Boundary-to-boundary ray marching
- core.path_lengths: Per-isotope path-length bookkeeping
- core.sampling: Random generators and vertex sampling
- core.estimator: Maximum path-length estimation
- core.analyzer: GeometryAnalyzer / PointGeometryAnalyzer facades
- core.io_utils: JSON geometry loading and CSV tables
- plotting: Path-length and vertex figures
- testing: Analytical test geometries and validation helpers
"""

from . import config
from .core import *
from .core import __all__ as _core_all

__version__ = "1.0.0"
__all__ = ["config"] + list(_core_all)
