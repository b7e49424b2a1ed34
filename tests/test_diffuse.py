"""Unit tests for the diffuse (Lambertian) material module.

Tests cover:
- Scattered rays leave from the hit point into the normal's hemisphere
- Attenuation equals albedo
- Material registry operations and albedo validation
"""

import pytest
import taichi as ti


class TestDiffuseScatter:
    """Tests for scatter_diffuse."""

    def test_scatter_stays_in_normal_hemisphere(self):
        """Test normal + unit vector never points below the surface."""
        from spheretracer.core.hit_point import HitPoint
        from spheretracer.core.ray import make_ray
        from spheretracer.core.vec3 import vec3
        from spheretracer.materials.diffuse import scatter_diffuse

        min_cos = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            min_cos[None] = 1.0
            for _ in range(1000):
                ray = make_ray(vec3(0.0, 5.0, 0.0), vec3(0.3, -1.0, 0.2))
                hit = HitPoint(
                    hit=1,
                    t=5.0,
                    point=vec3(1.5, 0.0, 1.0),
                    normal=vec3(0.0, 1.0, 0.0),
                    front_face=1,
                    material_id=0,
                )
                scattered = scatter_diffuse(vec3(0.5, 0.5, 0.5), ray, hit)
                ti.atomic_min(min_cos[None], scattered.ray.direction.y)

        test_kernel()
        assert min_cos[None] >= 0.0

    def test_scatter_origin_and_attenuation(self):
        """Test the scattered ray starts at the hit point, tinted by albedo."""
        from spheretracer.core.hit_point import HitPoint
        from spheretracer.core.ray import make_ray
        from spheretracer.core.vec3 import vec3
        from spheretracer.materials.diffuse import scatter_diffuse

        origin = ti.field(dtype=ti.math.vec3, shape=())
        attenuation = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 5.0, 0.0), vec3(0.0, -1.0, 0.0))
            hit = HitPoint(
                hit=1,
                t=5.0,
                point=vec3(0.0, 0.0, 0.0),
                normal=vec3(0.0, 1.0, 0.0),
                front_face=1,
                material_id=0,
            )
            scattered = scatter_diffuse(vec3(0.25, 0.5, 0.75), ray, hit)
            origin[None] = scattered.ray.origin
            attenuation[None] = scattered.attenuation

        test_kernel()
        assert origin.to_numpy().tolist() == [0.0, 0.0, 0.0]
        assert attenuation.to_numpy().tolist() == [0.25, 0.5, 0.75]

    def test_scatter_mean_direction_follows_normal(self):
        """Test the average scattered direction points along the normal."""
        from spheretracer.core.hit_point import HitPoint
        from spheretracer.core.ray import make_ray
        from spheretracer.core.vec3 import unit_vector, vec3
        from spheretracer.materials.diffuse import scatter_diffuse

        total = ti.Vector.field(3, dtype=ti.f32, shape=())
        n = 10000

        @ti.kernel
        def test_kernel():
            total[None] = vec3(0.0, 0.0, 0.0)
            for _ in range(n):
                ray = make_ray(vec3(0.0, 0.0, 5.0), vec3(0.0, 0.0, -1.0))
                hit = HitPoint(
                    hit=1,
                    t=4.0,
                    point=vec3(0.0, 0.0, 1.0),
                    normal=vec3(0.0, 0.0, 1.0),
                    front_face=1,
                    material_id=0,
                )
                scattered = scatter_diffuse(vec3(1.0, 1.0, 1.0), ray, hit)
                total[None] += unit_vector(scattered.ray.direction)

        test_kernel()
        mean = total.to_numpy() / n
        assert abs(mean[0]) < 0.05
        assert abs(mean[1]) < 0.05
        # Cosine-weighted hemisphere: E[cos] = 2/3
        assert mean[2] == pytest.approx(2.0 / 3.0, abs=0.05)

    def test_scatter_direction_is_never_degenerate(self):
        """Test scattered directions are never near zero, so they normalize cleanly."""
        from spheretracer.core.hit_point import HitPoint
        from spheretracer.core.ray import make_ray
        from spheretracer.core.vec3 import length_squared, near_zero, unit_vector, vec3
        from spheretracer.materials.diffuse import scatter_diffuse

        degenerate = ti.field(dtype=ti.i32, shape=())
        max_error = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            degenerate[None] = 0
            max_error[None] = 0.0
            for _ in range(100000):
                ray = make_ray(vec3(0.0, 5.0, 0.0), vec3(0.0, -1.0, 0.0))
                hit = HitPoint(
                    hit=1,
                    t=5.0,
                    point=vec3(0.0, 0.0, 0.0),
                    normal=vec3(0.0, 1.0, 0.0),
                    front_face=1,
                    material_id=0,
                )
                d = scatter_diffuse(vec3(0.5, 0.5, 0.5), ray, hit).ray.direction
                if near_zero(d) == 1 or not length_squared(d) > 0.0:
                    ti.atomic_add(degenerate[None], 1)
                else:
                    error = ti.abs(length_squared(unit_vector(d)) - 1.0)
                    ti.atomic_max(max_error[None], error)

        test_kernel()
        assert degenerate[None] == 0
        assert max_error[None] < 1e-4


class TestDiffuseRegistry:
    """Tests for the diffuse material registry."""

    def test_add_and_get_material(self):
        """Test storing and reading back an albedo."""
        from spheretracer.materials.diffuse import (
            add_diffuse_material,
            get_diffuse_albedo,
            get_diffuse_material_count,
        )

        idx = add_diffuse_material((0.1, 0.2, 0.3))
        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            result[None] = get_diffuse_albedo(mat_idx)

        test_kernel(idx)
        assert idx == 0
        assert get_diffuse_material_count() == 1
        assert result.to_numpy().tolist() == pytest.approx([0.1, 0.2, 0.3], abs=1e-6)

    def test_scatter_by_id(self):
        """Test scattering through a registry index uses the stored albedo."""
        from spheretracer.core.hit_point import HitPoint
        from spheretracer.core.ray import make_ray
        from spheretracer.core.vec3 import vec3
        from spheretracer.materials.diffuse import add_diffuse_material, scatter_diffuse_by_id

        add_diffuse_material((0.9, 0.9, 0.9))
        idx = add_diffuse_material((0.4, 0.2, 0.1))
        attenuation = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            ray = make_ray(vec3(0.0, 5.0, 0.0), vec3(0.0, -1.0, 0.0))
            hit = HitPoint(
                hit=1,
                t=5.0,
                point=vec3(0.0, 0.0, 0.0),
                normal=vec3(0.0, 1.0, 0.0),
                front_face=1,
                material_id=0,
            )
            attenuation[None] = scatter_diffuse_by_id(mat_idx, ray, hit).attenuation

        test_kernel(idx)
        assert attenuation.to_numpy().tolist() == pytest.approx([0.4, 0.2, 0.1], abs=1e-6)

    @pytest.mark.parametrize("albedo", [(1.2, 0.5, 0.5), (0.5, -0.1, 0.5)])
    def test_invalid_albedo(self, albedo):
        """Test albedo components outside [0, 1] are rejected."""
        from spheretracer.materials.diffuse import add_diffuse_material

        with pytest.raises(ValueError, match="outside"):
            add_diffuse_material(albedo)

    def test_clear(self):
        """Test clearing resets the count."""
        from spheretracer.materials.diffuse import (
            add_diffuse_material,
            clear_diffuse_materials,
            get_diffuse_material_count,
        )

        add_diffuse_material((0.5, 0.5, 0.5))
        clear_diffuse_materials()
        assert get_diffuse_material_count() == 0
