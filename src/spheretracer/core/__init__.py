"""Core rendering module.

Components:
    vec3: Vector algebra and random direction sampling
    ray: Ray and ScatteredRay structures
    hit_point: Surface intersection record
    tracer: Light transport along a single path
    render: Scanline render driver and render target

All compute-intensive operations use Taichi kernels.
"""

from .hit_point import HitPoint, make_hit_point, make_miss
from .ray import Ray, ScatteredRay, make_ray, make_scattered_ray, ray_at
from .vec3 import (
    Color,
    Point3,
    cross,
    dot,
    length,
    length_squared,
    near_zero,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    random_vec3,
    random_vec3_in_range,
    reflect,
    unit_vector,
    vec3,
)

# Note: tracer and render are NOT imported here to avoid circular imports.
# Import directly from spheretracer.core.tracer or spheretracer.core.render.

__all__ = [
    "vec3",
    "Point3",
    "Color",
    "dot",
    "cross",
    "length",
    "length_squared",
    "unit_vector",
    "near_zero",
    "reflect",
    "random_vec3",
    "random_vec3_in_range",
    "random_in_unit_sphere",
    "random_in_unit_disk",
    "random_unit_vector",
    "Ray",
    "ScatteredRay",
    "make_ray",
    "make_scattered_ray",
    "ray_at",
    "HitPoint",
    "make_hit_point",
    "make_miss",
]
