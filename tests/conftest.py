"""
测试公共夹具
"""

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest

from nugeom.core.constants import reset_march_stats
from nugeom.testing import single_cube_geometry, layered_slab_geometry, water_tank_geometry


@pytest.fixture(autouse=True)
def _reset_stats():
    reset_march_stats()
    yield


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def cube():
    """O-16 立方体，半边长 10，密度 1"""
    return single_cube_geometry(half_extent=10.0)


@pytest.fixture
def slabs():
    """两层 O-16 平板（密度 1 和 3），置于氩气中"""
    return layered_slab_geometry(densities=(1.0, 3.0), thickness=10.0)


@pytest.fixture
def tank():
    """空气中的水箱，水箱中放一个铁球"""
    return water_tank_geometry()
