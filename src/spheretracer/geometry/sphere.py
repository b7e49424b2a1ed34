"""Sphere primitive with analytic ray-sphere intersection.

A point P lies on the sphere when |P - C|^2 = r^2. Substituting the ray
P(t) = O + tD gives the quadratic

    a*t^2 + 2*half_b*t + c = 0

with
    a = D . D
    half_b = (O - C) . D
    c = |O - C|^2 - r^2

whose discriminant (in half-b form) is half_b^2 - a*c.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5, material_id=0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti

from spheretracer.core.hit_point import HitPoint, make_hit_point, make_miss
from spheretracer.core.ray import Ray
from spheretracer.core.vec3 import Point3, vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere (positive).
        material_id: Index of the sphere's material in the material table.
    """

    center: vec3
    radius: ti.f32
    material_id: ti.i32


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: ti.f32, t_max: ti.f32) -> HitPoint:
    """Test for ray-sphere intersection within the open interval (t_min, t_max).

    The smaller root is tested first, then the larger one, so the nearest
    intersection in the window is the one reported. A tangent ray has a
    zero discriminant and both roots coincide; it is reported once.

    The quadratic and the hit point are evaluated in f64, so a ray leaving
    the surface of a large sphere (such as the r=1000 ground) does not hit
    it again beyond t_min.

    Args:
        ray: The ray to test.
        sphere: The sphere to test against.
        t_min: Hits at or below this distance are ignored.
        t_max: Hits at or beyond this distance are ignored.

    Returns:
        A HitPoint for the nearest root inside the window, or a miss record.
    """
    origin = ti.cast(ray.origin, ti.f64)
    direction = ti.cast(ray.direction, ti.f64)
    center = ti.cast(sphere.center, ti.f64)
    radius = ti.cast(sphere.radius, ti.f64)

    oc = origin - center
    a = direction.dot(direction)
    half_b = oc.dot(direction)
    c = oc.dot(oc) - radius * radius
    discriminant = half_b * half_b - a * c

    result = make_miss()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        lo = ti.cast(t_min, ti.f64)
        hi = ti.cast(t_max, ti.f64)

        t = (-half_b - sqrt_d) / a
        valid = lo < t < hi

        if not valid:
            t = (-half_b + sqrt_d) / a
            valid = lo < t < hi

        if valid:
            point = origin + t * direction
            outward_normal = (point - center) / radius
            result = make_hit_point(
                ti.cast(point, ti.f32),
                ti.cast(t, ti.f32),
                ti.cast(outward_normal, ti.f32),
                ray.direction,
                sphere.material_id,
            )

    return result


@ti.func
def make_sphere(center: Point3, radius: ti.f32, material_id: ti.i32) -> Sphere:
    """Create a sphere from center, radius and material id."""
    return Sphere(center=center, radius=radius, material_id=material_id)
