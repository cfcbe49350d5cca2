"""
Unit constants, debug flag and traversal diagnostics.
"""

from scipy import constants

# Length units expressed in metres
LENGTH_UNITS = {
    'm': 1.0,
    'cm': constants.centi,
    'mm': constants.milli,
    'um': constants.micro,
    'km': constants.kilo,
}

# Density units expressed in kg/m³
_G_PER_CM3 = constants.gram / constants.centi**3
DENSITY_UNITS = {
    'kg_m3': 1.0,
    'g_cm3': _G_PER_CM3,
    'mg_cm3': constants.milli * _G_PER_CM3,
}

# Ion code convention: 10LZZZAAAI
ION_CODE_BASE = 1000000000
ION_CODE_Z_FACTOR = 10000
ION_CODE_A_FACTOR = 10

# Debug flag
DEBUG = False

# Global statistics for ray-march monitoring
MARCH_STATS = {
    'rays': 0,
    'crossings': 0,
    'missed_geometry': 0,
    'bounded_cap_hits': 0,
}


def reset_march_stats():
    """Reset ray-march statistics counters."""
    for key in MARCH_STATS:
        MARCH_STATS[key] = 0


def print_march_stats():
    """Print statistics about ray marching.

    A high fraction of bounded cap hits means the estimator probe is being
    cut short, usually by a very finely segmented geometry.
    """
    stats = MARCH_STATS
    total = stats['rays']

    if total == 0:
        print("No rays marched.")
        return

    print("\n" + "="*60)
    print("RAY MARCH STATISTICS")
    print("="*60)
    print(f"Rays marched:              {total:,}")
    print(f"Boundary crossings:        {stats['crossings']:,} "
          f"({stats['crossings']/total:.2f} per ray)")
    print(f"Rays missing geometry:     {stats['missed_geometry']:,} "
          f"({100*stats['missed_geometry']/total:.2f}%)")
    print(f"Bounded probes capped:     {stats['bounded_cap_hits']:,} "
          f"({100*stats['bounded_cap_hits']/total:.2f}%)")
    print("="*60)

    if stats['bounded_cap_hits'] > 0.01 * total:
        print("WARNING: more than 1% of bounded probes hit the crossing cap")
        print("   Max path lengths may be underestimated:")
        print("   - Raise config.ESTIMATOR_MAX_CROSSINGS")
        print("   - Check for needlessly fine volume segmentation")
    print()
