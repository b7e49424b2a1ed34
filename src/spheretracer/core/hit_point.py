"""Surface intersection record.

A HitPoint describes where a ray struck a primitive: the position, the
distance t along the ray, the surface normal corrected to face against the
ray, whether the ray struck the outside (front face) and which material
was hit. The material is referenced by its id in the scene's material
table, so a HitPoint never owns material data.

A HitPoint with hit == 0 is the "no intersection" record. Missing is the
normal outcome for most ray/primitive pairs and is not an error.
"""

import taichi as ti
import taichi.math as tm

from spheretracer.core.vec3 import Point3, vec3


@ti.dataclass
class HitPoint:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: 1 if the ray intersected a primitive, 0 if it missed.
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: The unit surface normal, always pointing against the
            incoming ray. Only valid if hit == 1.
        front_face: 1 if the ray hit the outside of the primitive, 0 if it
            hit the inside. Only valid if hit == 1.
        material_id: Index of the struck material in the scene's material
            table. -1 for a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_hit_point(
    point: Point3,
    t: ti.f32,
    outward_normal: vec3,
    ray_direction: vec3,
    material_id: ti.i32,
) -> HitPoint:
    """Build a hit record, orienting the normal against the ray.

    If the ray direction and the outward normal point the same way
    (dot >= 0) the ray started inside the primitive: the stored normal is
    flipped and front_face is 0. Otherwise the normal is kept and
    front_face is 1. Materials only ever see the corrected normal.

    Args:
        point: The intersection point.
        t: The ray parameter of the intersection.
        outward_normal: The unit normal pointing out of the primitive.
        ray_direction: The direction of the incoming ray.
        material_id: The material of the struck primitive.

    Returns:
        A HitPoint with hit == 1.
    """
    normal = outward_normal
    front_face = 1
    if tm.dot(ray_direction, outward_normal) >= 0.0:
        normal = -outward_normal
        front_face = 0

    return HitPoint(
        hit=1,
        t=t,
        point=point,
        normal=normal,
        front_face=front_face,
        material_id=material_id,
    )


@ti.func
def make_miss() -> HitPoint:
    """Create a HitPoint indicating no intersection."""
    return HitPoint(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )
