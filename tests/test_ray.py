"""Unit tests for Ray, ScatteredRay and HitPoint.

Tests cover:
- Evaluating points along a ray
- Building scattered rays
- Front-face normal correction in hit records
- The miss record
"""

import taichi as ti


class TestRay:
    """Tests for the Ray structure."""

    def test_ray_at(self):
        """Test ray_at(t) == origin + t * direction, including negative t."""
        from spheretracer.core.ray import make_ray, ray_at
        from spheretracer.core.vec3 import vec3

        results = ti.Vector.field(3, dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 2.0, 3.0), vec3(0.0, 0.0, -2.0))
            results[0] = ray_at(ray, 0.0)
            results[1] = ray_at(ray, 2.5)
            results[2] = ray_at(ray, -1.0)

        test_kernel()
        values = results.to_numpy().tolist()
        assert values[0] == [1.0, 2.0, 3.0]
        assert values[1] == [1.0, 2.0, -2.0]
        assert values[2] == [1.0, 2.0, 5.0]

    def test_make_scattered_ray(self):
        """Test a scattered ray keeps origin, direction and attenuation."""
        from spheretracer.core.ray import make_scattered_ray
        from spheretracer.core.vec3 import vec3

        origin = ti.field(dtype=ti.math.vec3, shape=())
        direction = ti.field(dtype=ti.math.vec3, shape=())
        attenuation = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            scattered = make_scattered_ray(
                vec3(1.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0), vec3(0.5, 0.25, 1.0)
            )
            origin[None] = scattered.ray.origin
            direction[None] = scattered.ray.direction
            attenuation[None] = scattered.attenuation

        test_kernel()
        assert origin.to_numpy().tolist() == [1.0, 0.0, 0.0]
        assert direction.to_numpy().tolist() == [0.0, 1.0, 0.0]
        assert attenuation.to_numpy().tolist() == [0.5, 0.25, 1.0]


class TestHitPoint:
    """Tests for hit record construction."""

    def test_front_face_keeps_normal(self):
        """Test a ray against the outward normal keeps it, front_face == 1."""
        from spheretracer.core.hit_point import make_hit_point
        from spheretracer.core.vec3 import vec3

        normal = ti.field(dtype=ti.math.vec3, shape=())
        front_face = ti.field(dtype=ti.i32, shape=())
        material_id = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = make_hit_point(
                vec3(0.0, 0.0, 1.0), 4.0, vec3(0.0, 0.0, 1.0), vec3(0.0, 0.0, -1.0), 7
            )
            normal[None] = rec.normal
            front_face[None] = rec.front_face
            material_id[None] = rec.material_id

        test_kernel()
        assert normal.to_numpy().tolist() == [0.0, 0.0, 1.0]
        assert front_face[None] == 1
        assert material_id[None] == 7

    def test_back_face_flips_normal(self):
        """Test a ray leaving through the surface sees a flipped normal."""
        from spheretracer.core.hit_point import make_hit_point
        from spheretracer.core.vec3 import vec3

        normal = ti.field(dtype=ti.math.vec3, shape=())
        front_face = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = make_hit_point(
                vec3(0.0, 0.0, 1.0), 1.0, vec3(0.0, 0.0, 1.0), vec3(0.0, 0.0, 1.0), 0
            )
            normal[None] = rec.normal
            front_face[None] = rec.front_face

        test_kernel()
        assert normal.to_numpy().tolist() == [0.0, 0.0, -1.0]
        assert front_face[None] == 0

    def test_perpendicular_ray_counts_as_back_face(self):
        """Test dot(direction, normal) == 0 takes the flipped branch."""
        from spheretracer.core.hit_point import make_hit_point
        from spheretracer.core.vec3 import vec3

        front_face = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = make_hit_point(
                vec3(0.0, 0.0, 1.0), 1.0, vec3(0.0, 0.0, 1.0), vec3(1.0, 0.0, 0.0), 0
            )
            front_face[None] = rec.front_face

        test_kernel()
        assert front_face[None] == 0

    def test_make_miss(self):
        """Test the miss record."""
        from spheretracer.core.hit_point import make_miss

        hit = ti.field(dtype=ti.i32, shape=())
        material_id = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = make_miss()
            hit[None] = rec.hit
            material_id[None] = rec.material_id

        test_kernel()
        assert hit[None] == 0
        assert material_id[None] == -1
