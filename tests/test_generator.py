"""Tests for the random spheres scene generator."""

import numpy as np
import pytest


class TestRandomColors:
    """Tests for host-side color helpers."""

    def test_random_color_range(self):
        """Test components are floats in [0, 1)."""
        from spheretracer.scene.generator import random_color

        rng = np.random.default_rng(0)
        for _ in range(100):
            color = random_color(rng)
            assert len(color) == 3
            assert all(isinstance(c, float) and 0.0 <= c < 1.0 for c in color)

    def test_random_color_in_range(self):
        """Test components stay inside the requested interval."""
        from spheretracer.scene.generator import random_color_in_range

        rng = np.random.default_rng(0)
        for _ in range(100):
            color = random_color_in_range(rng, 0.5, 1.0)
            assert all(0.5 <= c < 1.0 for c in color)


class TestRandomSpheresScene:
    """Tests for create_random_spheres_scene."""

    def test_fixed_spheres(self):
        """Test the ground and three feature spheres come first."""
        from spheretracer.scene.generator import create_random_spheres_scene
        from spheretracer.scene.manager import MaterialType

        scene = create_random_spheres_scene(seed=1)
        first = scene.spheres[:4]

        assert [s.center for s in first] == [
            (0.0, -1000.0, 0.0),
            (-4.0, 1.0, 0.0),
            (0.0, 1.0, 0.0),
            (4.0, 1.0, 0.0),
        ]
        assert [s.radius for s in first] == [1000.0, 1.0, 1.0, 1.0]

        materials = [scene.get_material_info(s.material_id) for s in first]
        assert [m.material_type for m in materials] == [
            MaterialType.DIFFUSE,
            MaterialType.DIFFUSE,
            MaterialType.DIELECTRIC,
            MaterialType.REFLECTIVE,
        ]
        assert materials[0].params["albedo"] == (0.5, 0.5, 0.5)
        assert materials[1].params["albedo"] == pytest.approx((0.4, 0.2, 0.1))
        assert materials[2].params["refractive_index"] == 1.5
        assert materials[3].params["albedo"] == pytest.approx((0.7, 0.6, 0.5))
        assert materials[3].params["fuzz"] == 0.0

    def test_small_spheres_layout(self):
        """Test small spheres rest on the ground and clear the metal sphere."""
        from spheretracer.scene.generator import create_random_spheres_scene

        scene = create_random_spheres_scene(seed=7)
        small = scene.spheres[4:]

        assert 0 < len(small) <= 22 * 22
        assert scene.get_sphere_count() == len(scene.spheres)
        for sphere in small:
            x, y, z = sphere.center
            assert sphere.radius == 0.2
            assert y == 0.2
            assert -11.0 <= x < -11.0 + 22 + 0.2
            assert -11.0 <= z < -11.0 + 22 + 0.2
            assert np.linalg.norm(np.array(sphere.center) - np.array([4.0, 1.0, 0.0])) > 1.2

    def test_small_sphere_materials_are_valid(self):
        """Test small sphere material parameters stay inside their ranges."""
        from spheretracer.scene.generator import create_random_spheres_scene
        from spheretracer.scene.manager import MaterialType

        scene = create_random_spheres_scene(seed=11)
        seen = set()

        for sphere in scene.spheres[4:]:
            info = scene.get_material_info(sphere.material_id)
            seen.add(info.material_type)
            if info.material_type == MaterialType.DIFFUSE:
                assert all(0.0 <= c < 1.0 for c in info.params["albedo"])
            elif info.material_type == MaterialType.REFLECTIVE:
                assert all(0.5 <= c < 1.0 for c in info.params["albedo"])
                assert 0.0 <= info.params["fuzz"] < 0.5
            else:
                assert info.params["refractive_index"] == 1.5

        # Several hundred draws cover every material kind
        assert seen == set(MaterialType)

    def test_same_seed_same_scene(self):
        """Test a fixed seed reproduces the scene exactly."""
        from spheretracer.scene.generator import create_random_spheres_scene

        first = create_random_spheres_scene(seed=42).to_dict()
        second = create_random_spheres_scene(seed=42).to_dict()
        other = create_random_spheres_scene(seed=43).to_dict()

        assert first == second
        assert first != other
