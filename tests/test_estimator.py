"""
最大路径长度估计的单元测试
"""

import numpy as np
import pytest

from nugeom.core.constants import MARCH_STATS
from nugeom.core.errors import ConfigurationError
from nugeom.core.estimator import (
    estimate_max_path_length,
    estimate_max_path_lengths,
    iter_surface_rays,
    probe_path_length,
)
from nugeom.core.isotopes import isotope_id
from nugeom.testing import single_cube_geometry

O16 = isotope_id(16, 8)
H1 = isotope_id(1, 1)
FE56 = isotope_id(56, 26)

SPACE_DIAGONAL = 20.0 * np.sqrt(3.0)
SMALL = dict(points_per_face=4, rays_per_point=4)


class TestSurfaceRays:
    """测试表面射线生成"""

    def test_trial_count(self, cube, rng):
        """测试射线总数为 6 x P x R"""
        assert sum(1 for _ in iter_surface_rays(cube, rng, 3, 2)) == 36

    def test_rays_enter_box(self, cube, rng):
        """测试射线从包围盒表面指向内部"""
        for point, direction in iter_surface_rays(cube, rng, 2, 2):
            axis = int(np.argmax(np.abs(point)))
            assert abs(point[axis]) == pytest.approx(10.0)
            assert point[axis] * direction[axis] <= 0.0


class TestProbe:
    """测试单条有限探测"""

    def test_density_weighted(self):
        """测试密度加权"""
        cube = single_cube_geometry(density=2.5)
        point, direction = (-10.0, 0.0, 0.0), (1.0, 0.0, 0.0)
        assert probe_path_length(cube, point, direction, O16) == pytest.approx(50.0, abs=1e-6)
        assert probe_path_length(cube, point, direction, O16, density_weighted=False) == pytest.approx(20.0, abs=1e-6)

    def test_crossing_cap(self, slabs):
        """测试穿越次数上限截断探测"""
        full = probe_path_length(slabs, (-15.0, 0.0, 0.0), (1.0, 0.0, 0.0), O16, density_weighted=False)
        capped = probe_path_length(slabs, (-15.0, 0.0, 0.0), (1.0, 0.0, 0.0), O16,
                                   max_crossings=2, density_weighted=False)
        assert full == pytest.approx(20.0, abs=1e-6)
        assert capped == pytest.approx(10.0, abs=1e-6)


class TestMeshFaces:
    """测试网格世界体积表面上的探测"""

    @pytest.mark.parametrize("point, direction", [
        ((1.0, 2.0, -10.0), (0.0, 0.0, 1.0)),
        ((1.0, 2.0, 10.0), (0.0, 0.0, -1.0)),
        ((10.0, 2.0, 1.0), (-1.0, 0.0, 0.0)),
        ((-10.0, 2.0, 1.0), (1.0, 0.0, 0.0)),
        ((1.0, 10.0, 1.0), (0.0, -1.0, 0.0)),
        ((1.0, -10.0, 1.0), (0.0, 1.0, 0.0)),
    ])
    def test_face_probe(self, point, direction):
        """测试从每个面出发的探测穿过整个立方体"""
        mesh = single_cube_geometry(use_mesh=True)
        length = probe_path_length(mesh, point, direction, O16, density_weighted=False)
        assert length == pytest.approx(20.0, abs=1e-6)
        assert MARCH_STATS['missed_geometry'] == 0

    def test_matches_analytic(self):
        """测试网格立方体与解析立方体的估计值一致"""
        mesh = single_cube_geometry(use_mesh=True)
        analytic = single_cube_geometry(use_mesh=False)
        b = estimate_max_path_length(mesh, O16, rng=np.random.default_rng(21), **SMALL)
        assert MARCH_STATS['missed_geometry'] == 0
        a = estimate_max_path_length(analytic, O16, rng=np.random.default_rng(21), **SMALL)
        assert b == pytest.approx(a, rel=1e-6)


class TestEstimateMaxPathLength:
    """测试最大路径长度估计"""

    def test_cube_bounds(self, cube, rng):
        """测试估计值不超过立方体空间对角线"""
        estimate = estimate_max_path_length(cube, O16, rng=rng, **SMALL)
        assert 0.0 < estimate <= SPACE_DIAGONAL + 1e-6

    def test_cube_reaches_side(self, cube, rng):
        """测试足够多的射线至少达到边长"""
        estimate = estimate_max_path_length(cube, O16, rng=rng, points_per_face=10, rays_per_point=10)
        assert estimate >= 20.0

    def test_density_scaling(self, rng):
        """测试结果按密度缩放"""
        dense = single_cube_geometry(density=4.0)
        weighted = estimate_max_path_length(dense, O16, rng=np.random.default_rng(5), **SMALL)
        geometric = estimate_max_path_length(dense, O16, rng=np.random.default_rng(5),
                                             density_weighted=False, **SMALL)
        assert weighted == pytest.approx(4.0 * geometric, rel=1e-9)

    def test_monotone_continuation(self, tank):
        """测试延续同一随机流时估计值单调不减"""
        rng = np.random.default_rng(11)
        first = estimate_max_path_length(tank, FE56, rng=rng, **SMALL)
        second = estimate_max_path_length(tank, FE56, rng=rng, initial=first, **SMALL)
        assert second >= first

    def test_nested_target_bounded(self, tank, rng):
        """测试嵌套目标的估计值不超过其直径乘密度"""
        estimate = estimate_max_path_length(tank, FE56, rng=rng, **SMALL)
        assert 0.0 <= estimate <= 10.0 * 7.87 + 1e-6

    def test_bounded_probes(self, cube, rng):
        """测试估计器使用有限探测"""
        estimate_max_path_length(cube, O16, rng=rng, points_per_face=1, rays_per_point=3)
        assert MARCH_STATS['rays'] == 18

    def test_unregistered_isotope(self, cube, rng):
        """测试未注册的同位素"""
        with pytest.raises(ConfigurationError):
            estimate_max_path_length(cube, H1, rng=rng, **SMALL)

    def test_reproducible(self, cube):
        """测试相同种子结果相同"""
        a = estimate_max_path_length(cube, O16, rng=np.random.default_rng(3), **SMALL)
        b = estimate_max_path_length(cube, O16, rng=np.random.default_rng(3), **SMALL)
        assert a == b

    def test_all_isotopes(self, tank, rng):
        """测试所有注册同位素的估计表"""
        table = estimate_max_path_lengths(tank, rng=rng, points_per_face=2, rays_per_point=2)
        assert set(table) == tank.isotopes()
        assert all(value >= 0.0 for value in table.values())
