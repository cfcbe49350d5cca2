"""
Configuration settings for the nugeom geometry engine.

This module contains the tunable defaults used by the ray marcher, the vertex
sampler and the max path-length estimator. Users can modify these values (or
pass explicit arguments) to customise a job without changing the core code.
"""

from __future__ import annotations

# =============================================================================
# Output Paths
# =============================================================================

# Output directories (user working directory)
DATA_OUTPUT_DIR = "Data"
FIGURES_OUTPUT_DIR = "Figures"

# Output file names
MAX_PATH_LENGTHS_CSV = "max_path_lengths.csv"
PATH_LENGTH_FIGURE_BASE = "path_lengths"

# =============================================================================
# Geometry Units
# =============================================================================

# Units the geometry description is written in
DEFAULT_LENGTH_UNITS = "mm"
DEFAULT_DENSITY_UNITS = "g_cm3"

# =============================================================================
# Ray Marching
# =============================================================================

# Distance the cursor is pushed past each boundary (geometry units)
BOUNDARY_PUSH = 1.0e-9

# Safety cap for the general (unbounded) traversal
MAX_MARCH_CROSSINGS = 100000

# Mixture attribution: "full" gives every constituent the whole segment,
# "fraction" scales the segment by the constituent mass fraction
DEFAULT_MIXTURE_POLICY = "full"

# =============================================================================
# Vertex Sampling
# =============================================================================

# "boundary" solves for the vertex inside the crossed segment,
# "fixed_step" walks the ray in VERTEX_STEP increments
DEFAULT_VERTEX_METHOD = "boundary"
VERTEX_STEP = 0.001

# =============================================================================
# Max Path-Length Estimation
# =============================================================================

ESTIMATOR_POINTS_PER_FACE = 200
ESTIMATOR_RAYS_PER_POINT = 200
ESTIMATOR_MAX_CROSSINGS = 100

# Show a tqdm progress bar while estimating
ESTIMATOR_PROGRESS = False

# =============================================================================
# Random Numbers
# =============================================================================

DEFAULT_SEED = 1989

# =============================================================================
# Visualization Settings
# =============================================================================

PLOT_DPI = 300
PATH_LENGTH_FIGSIZE = (10, 6)
VERTEX_HIST_BINS = 50
