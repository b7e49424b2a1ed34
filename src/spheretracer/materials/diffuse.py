"""Diffuse (Lambertian) material implementation.

A diffuse surface scatters incoming light in a random direction and tints
it with its albedo. Offsetting a uniformly distributed unit vector by the
surface normal produces directions with a cosine-weighted distribution
around the normal, which is exactly Lambertian reflection:

    scattered = normal + random_unit_vector()
    attenuation = albedo

with one addition to that rule: when the random unit vector almost
exactly cancels the normal, the sum is a zero vector and the scattered
direction falls back to the normal itself. A zero direction would turn
into NaN once normalized.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.materials.diffuse import scatter_diffuse
    >>> # Use within a Taichi kernel:
    >>> # scattered = scatter_diffuse(albedo, ray, hit_point)
"""

import taichi as ti
import taichi.math as tm

from spheretracer.core.hit_point import HitPoint
from spheretracer.core.ray import Ray, ScatteredRay, make_scattered_ray
from spheretracer.core.vec3 import near_zero, random_unit_vector

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class DiffuseMaterial:
    """Diffuse material properties.

    Attributes:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
    """

    albedo: vec3


@ti.func
def scatter_diffuse(albedo: vec3, ray: Ray, hit: HitPoint) -> ScatteredRay:
    """Scatter a ray off a diffuse surface.

    The incoming direction does not influence the outgoing one. If the
    random unit vector almost exactly cancels the normal, the scattered
    direction would be degenerate; the normal is used instead.

    Args:
        albedo: The diffuse reflectance color.
        ray: The incoming ray (unused, kept for a uniform scatter signature).
        hit: The intersection being shaded.

    Returns:
        A ScatteredRay leaving hit.point with attenuation == albedo.
    """
    direction = hit.normal + random_unit_vector()
    if near_zero(direction):
        direction = hit.normal
    return make_scattered_ray(hit.point, direction, albedo)


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of diffuse materials in the scene
MAX_DIFFUSE_MATERIALS = 1024

# Storage for diffuse material properties
diffuse_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_DIFFUSE_MATERIALS)
num_diffuse_materials = ti.field(dtype=ti.i32, shape=())


def clear_diffuse_materials() -> None:
    """Clear all diffuse materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_diffuse_materials[None] = 0


def add_diffuse_material(albedo: tuple[float, float, float]) -> int:
    """Add a diffuse material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.
            Each component must be in [0, 1].

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    idx = num_diffuse_materials[None]
    if idx >= MAX_DIFFUSE_MATERIALS:
        raise RuntimeError(
            f"Maximum number of diffuse materials ({MAX_DIFFUSE_MATERIALS}) exceeded"
        )

    diffuse_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_diffuse_materials[None] = idx + 1
    return idx


def get_diffuse_material_count() -> int:
    """Get the number of diffuse materials in the registry."""
    return int(num_diffuse_materials[None])


@ti.func
def get_diffuse_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a diffuse material by registry index."""
    return diffuse_albedos[material_idx]


@ti.func
def scatter_diffuse_by_id(material_idx: ti.i32, ray: Ray, hit: HitPoint) -> ScatteredRay:
    """Scatter off the diffuse material stored at material_idx."""
    return scatter_diffuse(get_diffuse_albedo(material_idx), ray, hit)
