"""
Isotope identifiers derived from mass and atomic numbers.
"""

from __future__ import annotations

from typing import Tuple

from .constants import ION_CODE_A_FACTOR, ION_CODE_BASE, ION_CODE_Z_FACTOR


def isotope_id(mass_number: int, atomic_number: int) -> int:
    """Return the ion code identifying the isotope (A, Z).

    Parameters
    ----------
    mass_number : int
        Mass number A. Non-integer values (e.g. molar masses) are rounded.
    atomic_number : int
        Atomic number Z.

    Returns
    -------
    int
        ``1000000000 + Z*10000 + A*10``.
    """
    a = int(round(mass_number))
    z = int(round(atomic_number))
    if z < 0 or a < 1 or z > a:
        raise ValueError(f"Invalid isotope A={mass_number}, Z={atomic_number}")
    return ION_CODE_BASE + z * ION_CODE_Z_FACTOR + a * ION_CODE_A_FACTOR


def decode_isotope_id(code: int) -> Tuple[int, int]:
    """Return (A, Z) for an ion code produced by :func:`isotope_id`."""
    if code < ION_CODE_BASE:
        raise ValueError(f"{code} is not an ion code")
    body = code - ION_CODE_BASE
    z = (body // ION_CODE_Z_FACTOR) % 1000
    a = (body // ION_CODE_A_FACTOR) % 1000
    return a, z


def isotope_label(code: int) -> str:
    """Short human readable label such as ``A16Z8``."""
    a, z = decode_isotope_id(code)
    return f"A{a}Z{z}"
