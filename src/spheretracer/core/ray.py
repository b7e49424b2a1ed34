"""Ray and scattered-ray data structures.

A Ray is a parametric line origin + t * direction. It is both the primary
visibility ray shot by the camera and the continuation ray produced when
light scatters off a surface. A ScatteredRay pairs that continuation with
the attenuation color the surface applies to the light it carries.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.core.ray import make_ray, ray_at
    >>> from spheretracer.core.vec3 import vec3
    >>> @ti.kernel
    ... def point() -> vec3:
    ...     ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0))
    ...     return ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti

from spheretracer.core.vec3 import Color, Point3, vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction of the ray. Not required to be unit length;
            camera rays and scattered rays generally are not.
    """

    origin: vec3
    direction: vec3


@ti.dataclass
class ScatteredRay:
    """The outgoing continuation of a ray after it strikes a material.

    Attributes:
        ray: The continuation ray, starting at the hit point.
        attenuation: The color the carried light is multiplied by.
    """

    ray: Ray
    attenuation: vec3


@ti.func
def make_ray(origin: Point3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> Point3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_scattered_ray(origin: Point3, direction: vec3, attenuation: Color) -> ScatteredRay:
    """Create a scattered ray starting at origin.

    Args:
        origin: The hit point the light leaves from.
        direction: The direction the light continues in.
        attenuation: The color attenuation applied by the surface.

    Returns:
        A new ScatteredRay.
    """
    return ScatteredRay(ray=make_ray(origin, direction), attenuation=attenuation)
