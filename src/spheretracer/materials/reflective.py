"""Reflective (metal) material implementation.

A reflective surface mirrors the incoming direction about the surface
normal:

    R = D - 2(D . N)N

A fuzz value in [0, 1] moves the end of the reflected vector to a random
point inside a sphere of radius fuzz, blurring the reflection the way a
brushed or rough metal does. With large fuzz or grazing angles the
perturbed direction can point below the surface. Such rays are returned
as-is; they are not clamped or absorbed here.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.materials.reflective import scatter_reflective
    >>> # Use within a Taichi kernel:
    >>> # scattered = scatter_reflective(albedo, fuzz, ray, hit_point)
"""

import taichi as ti
import taichi.math as tm

from spheretracer.core.hit_point import HitPoint
from spheretracer.core.ray import Ray, ScatteredRay, make_scattered_ray
from spheretracer.core.vec3 import random_in_unit_sphere, reflect, unit_vector

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class ReflectiveMaterial:
    """Reflective material properties.

    Attributes:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzz: Perturbation radius in [0, 1]. 0 = perfect mirror.
    """

    albedo: vec3
    fuzz: ti.f32


@ti.func
def scatter_reflective(albedo: vec3, fuzz: ti.f32, ray: Ray, hit: HitPoint) -> ScatteredRay:
    """Reflect a ray off a (possibly fuzzy) mirror surface.

    Args:
        albedo: The reflective color.
        fuzz: The perturbation radius.
        ray: The incoming ray.
        hit: The intersection being shaded.

    Returns:
        A ScatteredRay leaving hit.point with attenuation == albedo.
    """
    reflected = reflect(unit_vector(ray.direction), hit.normal)
    direction = reflected + fuzz * random_in_unit_sphere()
    return make_scattered_ray(hit.point, direction, albedo)


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of reflective materials in the scene
MAX_REFLECTIVE_MATERIALS = 1024

# Storage for reflective material properties
reflective_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_REFLECTIVE_MATERIALS)
reflective_fuzz = ti.field(dtype=ti.f32, shape=MAX_REFLECTIVE_MATERIALS)
num_reflective_materials = ti.field(dtype=ti.i32, shape=())


def clear_reflective_materials() -> None:
    """Clear all reflective materials."""
    num_reflective_materials[None] = 0


def add_reflective_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Add a reflective material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple.
            Each component must be in [0, 1].
        fuzz: The perturbation radius in [0, 1]. Default is 0 (mirror).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
        ValueError: If fuzz is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    if fuzz < 0.0 or fuzz > 1.0:
        raise ValueError(f"Fuzz = {fuzz} is outside [0, 1].")

    idx = num_reflective_materials[None]
    if idx >= MAX_REFLECTIVE_MATERIALS:
        raise RuntimeError(
            f"Maximum number of reflective materials ({MAX_REFLECTIVE_MATERIALS}) exceeded"
        )

    reflective_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    reflective_fuzz[idx] = fuzz
    num_reflective_materials[None] = idx + 1
    return idx


def get_reflective_material_count() -> int:
    """Get the number of reflective materials in the registry."""
    return int(num_reflective_materials[None])


@ti.func
def get_reflective_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a reflective material by registry index."""
    return reflective_albedos[material_idx]


@ti.func
def get_reflective_fuzz(material_idx: ti.i32) -> ti.f32:
    """Get the fuzz for a reflective material by registry index."""
    return reflective_fuzz[material_idx]


@ti.func
def scatter_reflective_by_id(material_idx: ti.i32, ray: Ray, hit: HitPoint) -> ScatteredRay:
    """Scatter off the reflective material stored at material_idx."""
    return scatter_reflective(
        get_reflective_albedo(material_idx),
        get_reflective_fuzz(material_idx),
        ray,
        hit,
    )
