"""
体积层级与导航的单元测试
"""

import numpy as np
import pytest

from nugeom.core.errors import ConfigurationError, MissingMaterialError
from nugeom.core.isotopes import isotope_id
from nugeom.core.materials import Material, MaterialTable
from nugeom.core.shapes import Box, Sphere
from nugeom.core.volumes import Volume, VolumeHierarchy
from nugeom.testing import validate_hierarchy

X = np.array([1.0, 0.0, 0.0])


class TestStructure:
    """测试层级构建"""

    def test_isotopes(self, tank):
        """测试注册的同位素集合"""
        expected = {isotope_id(14, 7), isotope_id(16, 8), isotope_id(1, 1), isotope_id(56, 26)}
        assert tank.isotopes() == expected

    def test_iter_volumes(self, tank):
        """测试深度优先遍历"""
        assert [v.name for v in tank.iter_volumes()] == ["World", "Tank", "Ball"]

    def test_absolute_origin(self, tank):
        """测试子体积的绝对位置"""
        np.testing.assert_allclose(tank.volume("Ball").origin, [10.0, 0.0, 0.0])
        assert tank.volume("Ball").depth == 2

    def test_unknown_volume(self, tank):
        """测试未知体积名称"""
        with pytest.raises(ConfigurationError):
            tank.volume("Cryostat")

    def test_duplicate_volume_name(self):
        """测试重复的体积名称"""
        materials = MaterialTable([Material.single("Iron", 56, 26, 7.87)])
        world = Volume("World", Box(10, 10, 10), "Iron")
        world.add_daughter(Volume("Part", Sphere(1.0), "Iron", position=(-5, 0, 0)))
        world.add_daughter(Volume("Part", Sphere(1.0), "Iron", position=(5, 0, 0)))
        with pytest.raises(ConfigurationError):
            VolumeHierarchy(world, materials)

    def test_unknown_material(self):
        """测试引用未定义的材料"""
        with pytest.raises(ConfigurationError):
            VolumeHierarchy(Volume("World", Box(1, 1, 1), "Lead"), MaterialTable())

    def test_bounding_box(self, tank):
        """测试顶层体积的包围盒"""
        box = tank.with_top_volume("Tank").bounding_box()
        np.testing.assert_allclose(box.center, [10.0, 0.0, 0.0])
        np.testing.assert_allclose(box.half_extents, [20.0, 20.0, 20.0])

    def test_validation(self, tank):
        """测试几何检查"""
        valid, problems = validate_hierarchy(tank)
        assert valid, problems


class TestNavigation:
    """测试点定位与边界距离"""

    @pytest.mark.parametrize("point, name", [
        ((10.0, 0.0, 0.0), "Ball"),
        ((0.0, 0.0, 0.0), "Tank"),
        ((-30.0, 0.0, 0.0), "World"),
    ])
    def test_resolve(self, tank, point, name):
        """测试定位到最内层体积"""
        assert tank.resolve(point).name == name

    def test_resolve_outside(self, tank):
        """测试世界体积之外"""
        assert tank.resolve((100.0, 0.0, 0.0)) is None

    def test_entry_from_outside(self, tank):
        """测试从外部进入世界体积"""
        step = tank.distance_to_next_boundary(np.array([-60.0, 0.0, 0.0]), X)
        assert step.distance == pytest.approx(10.0)
        assert step.entering

    def test_outside_miss(self, tank):
        """测试外部射线未命中"""
        assert tank.distance_to_next_boundary(np.array([-60.0, 80.0, 0.0]), X) is None

    def test_daughter_boundary(self, tank):
        """测试最近边界为子体积"""
        step = tank.distance_to_next_boundary(np.zeros(3), X)
        assert step.distance == pytest.approx(5.0)
        assert step.entering

    def test_mother_boundary(self, tank):
        """测试最近边界为所在体积的表面"""
        step = tank.distance_to_next_boundary(np.zeros(3), -X)
        assert step.distance == pytest.approx(10.0)
        assert not step.entering

    def test_missing_material(self):
        """测试没有材料的体积是致命错误"""
        materials = MaterialTable([Material.single("Target", 16, 8, 1.0)])
        world = Volume("World", Box(10, 10, 10), None)
        world.add_daughter(Volume("Core", Sphere(2.0), "Target"))
        hierarchy = VolumeHierarchy(world, materials)
        assert hierarchy.isotopes() == {isotope_id(16, 8)}
        with pytest.raises(MissingMaterialError) as excinfo:
            hierarchy.material(hierarchy.resolve((5.0, 0.0, 0.0)))
        assert excinfo.value.volume_name == "World"

    def test_on_surface_leaving(self, tank):
        """测试位于表面且向外运动时边界距离为零"""
        step = tank.distance_to_next_boundary(np.array([50.0, 0.0, 0.0]), X)
        assert step.distance == 0.0
        assert not step.entering

    def test_on_daughter_surface_leaving(self, tank):
        """测试位于子体积表面且向外运动"""
        # The ball surface point resolves to the ball itself
        point = np.array([15.0, 0.0, 0.0])
        assert tank.resolve(point).name == "Ball"
        step = tank.distance_to_next_boundary(point, X)
        assert step.distance == 0.0
        assert not step.entering


class TestTopVolume:
    """测试顶层生成体积的选择"""

    def test_subtree(self, tank):
        """测试只保留子树"""
        sub = tank.with_top_volume("Tank")
        assert sub.world.name == "Tank"
        assert [v.name for v in sub.iter_volumes()] == ["Tank", "Ball"]
        assert sub.isotopes() == {isotope_id(1, 1), isotope_id(16, 8), isotope_id(56, 26)}

    def test_subtree_keeps_placement(self, tank):
        """测试子树保持绝对位置"""
        sub = tank.with_top_volume("Tank")
        assert sub.resolve((10.0, 0.0, 0.0)).name == "Ball"
        assert sub.resolve((-30.0, 0.0, 0.0)) is None

    def test_world_is_identity(self, tank):
        """测试选择世界体积"""
        assert tank.with_top_volume("World") is tank

    def test_unknown(self, tank):
        """测试未知的顶层体积"""
        with pytest.raises(ConfigurationError):
            tank.with_top_volume("Cavern")
