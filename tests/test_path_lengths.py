"""
路径长度计算的单元测试
"""

import numpy as np
import pytest

from nugeom.core.errors import ConfigurationError, DegenerateDirectionError
from nugeom.core.isotopes import isotope_id
from nugeom.core.path_lengths import PathLengthList, check_mixture_policy, compute_path_lengths
from nugeom.testing import single_cube_geometry

O16 = isotope_id(16, 8)
H1 = isotope_id(1, 1)
N14 = isotope_id(14, 7)
FE56 = isotope_id(56, 26)
AR40 = isotope_id(40, 18)

RAY = ((-60.0, 0.0, 0.0), (1.0, 0.0, 0.0))


class TestPathLengthList:
    """测试路径长度列表"""

    def test_fixed_keys(self):
        """测试键在创建时固定"""
        lengths = PathLengthList([O16, H1])
        assert set(lengths) == {O16, H1}
        assert lengths.is_zero()
        with pytest.raises(ConfigurationError):
            lengths.add_path_length(FE56, 1.0)

    def test_add_and_reset(self):
        """测试累加与清零"""
        lengths = PathLengthList([O16])
        lengths.add_path_length(O16, 1.5)
        lengths.add_path_length(O16, 2.5)
        assert lengths[O16] == pytest.approx(4.0)
        lengths.set_all_to_zero()
        assert lengths[O16] == 0.0

    def test_scale_and_copy(self):
        """测试缩放与复制"""
        lengths = PathLengthList([O16, H1])
        lengths.set_path_length(O16, 2.0)
        snapshot = lengths.copy()
        lengths.scale(10.0)
        assert lengths[O16] == pytest.approx(20.0)
        assert snapshot[O16] == pytest.approx(2.0)
        assert lengths.total() == pytest.approx(20.0)
        assert lengths.as_dict() == {H1: 0.0, O16: 20.0}

    def test_unknown_policy(self):
        """测试未知的混合物策略"""
        with pytest.raises(ConfigurationError):
            check_mixture_policy("average")


class TestComputePathLengths:
    """测试沿射线的路径长度"""

    def test_cube_chord(self, cube):
        """测试均匀立方体的弦长"""
        lengths = compute_path_lengths(cube, (-20.0, 0.0, 0.0), (1.0, 0.0, 0.0))
        assert dict(lengths) == pytest.approx({O16: 20.0}, abs=1e-6)

    def test_diagonal_chord(self, cube):
        """测试斜向弦长"""
        direction = np.array([1.0, 1.0, 0.0])
        lengths = compute_path_lengths(cube, (-20.0, -20.0, 0.0), direction)
        assert lengths[O16] == pytest.approx(20.0 * np.sqrt(2.0), abs=1e-6)

    def test_mesh_matches_analytic(self):
        """测试网格立方体与解析立方体路径长度一致"""
        analytic = single_cube_geometry(use_mesh=False)
        mesh = single_cube_geometry(use_mesh=True)
        origin = (-20.0, 0.3, -0.2)
        for direction in ([1.0, 0.0, 0.0], [1.0, 0.2, 0.1], [0.8, -0.3, 0.4]):
            a = compute_path_lengths(analytic, origin, direction)[O16]
            b = compute_path_lengths(mesh, origin, direction)[O16]
            assert b == pytest.approx(a, abs=1e-6)

    def test_miss_gives_zero(self, cube):
        """测试未命中时全部为零"""
        lengths = compute_path_lengths(cube, (-20.0, 50.0, 0.0), (1.0, 0.0, 0.0))
        assert list(lengths) == [O16]
        assert lengths.is_zero()

    def test_on_surface_leaving(self, cube):
        """测试从表面出发向外的射线全部为零"""
        lengths = compute_path_lengths(cube, (10.0, 0.0, 0.0), (1.0, 0.0, 0.0))
        assert list(lengths) == [O16]
        assert lengths.is_zero()

    def test_start_on_inner_boundary(self, slabs):
        """测试从两层平板的交界面出发"""
        # The shared face resolves to Layer0, which the ray leaves at once
        lengths = compute_path_lengths(slabs, (0.0, 0.0, 0.0), (1.0, 0.0, 0.0))
        assert lengths[O16] == pytest.approx(10.0, abs=1e-6)
        assert lengths[AR40] == pytest.approx(5.0, abs=1e-6)

    def test_idempotent(self, tank):
        """测试重复计算结果相同且列表被重置"""
        lengths = compute_path_lengths(tank, *RAY)
        first = lengths.as_dict()
        again = compute_path_lengths(tank, *RAY, path_lengths=lengths)
        assert again is lengths
        assert again.as_dict() == first

    def test_nested_regions(self, slabs):
        """测试嵌套体积各区域长度之和等于弦长"""
        lengths = compute_path_lengths(slabs, (-20.0, 0.0, 0.0), (1.0, 0.0, 0.0))
        assert lengths[O16] == pytest.approx(20.0, abs=1e-6)
        assert lengths[AR40] == pytest.approx(10.0, abs=1e-6)
        assert lengths.total() == pytest.approx(30.0, abs=1e-6)

    def test_mixture_full_policy(self, tank):
        """测试混合物每个成分获得完整步长"""
        lengths = compute_path_lengths(tank, *RAY, mixture_policy="full")
        assert lengths[N14] == pytest.approx(60.0, abs=1e-6)
        assert lengths[O16] == pytest.approx(90.0, abs=1e-6)
        assert lengths[H1] == pytest.approx(30.0, abs=1e-6)
        assert lengths[FE56] == pytest.approx(10.0, abs=1e-6)

    def test_mixture_fraction_policy(self, tank):
        """测试混合物按质量分数分配步长"""
        lengths = compute_path_lengths(tank, *RAY, mixture_policy="fraction")
        assert lengths[N14] == pytest.approx(60.0 * 0.755, abs=1e-6)
        assert lengths[O16] == pytest.approx(60.0 * 0.245 + 30.0 * 0.888, abs=1e-6)
        assert lengths[H1] == pytest.approx(30.0 * 0.112, abs=1e-6)
        assert lengths[FE56] == pytest.approx(10.0, abs=1e-6)
        # Fractions sum to one, so the chord through the world is recovered
        assert lengths.total() == pytest.approx(100.0, abs=1e-6)

    def test_density_weighted(self, tank):
        """测试按密度加权的路径长度"""
        lengths = compute_path_lengths(tank, *RAY, weighted=True)
        assert lengths[FE56] == pytest.approx(78.7, abs=1e-6)
        assert lengths[H1] == pytest.approx(30.0, abs=1e-6)

    def test_degenerate_direction(self, cube):
        """测试零方向向量"""
        with pytest.raises(DegenerateDirectionError):
            compute_path_lengths(cube, (0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
