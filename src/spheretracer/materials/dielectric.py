"""Dielectric (glass/water) material implementation.

Dielectrics both reflect and refract light. Since a traced path can only
follow one of the two, the choice is made at random, weighted by the
Fresnel reflectance. Glass absorbs nothing, so the attenuation is white.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when (n1 / n2) * sin(theta1) > 1

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # scattered = scatter_dielectric(refractive_index, ray, hit_point)
"""

import taichi as ti
import taichi.math as tm

from spheretracer.core.hit_point import HitPoint
from spheretracer.core.ray import Ray, ScatteredRay, make_scattered_ray
from spheretracer.core.vec3 import length_squared, reflect, unit_vector

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class DielectricMaterial:
    """Dielectric material properties.

    Attributes:
        refractive_index: Index of refraction. Common values:
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    refractive_index: ti.f32


@ti.func
def refract(unit_direction: vec3, normal: vec3, etai_over_etat: ti.f32) -> vec3:
    """Refract a unit direction through a surface (Snell's law, vector form).

    The refracted ray is split into a part perpendicular to the normal and
    a part parallel to it:

        perp = eta * (d + cos_theta * n)
        parallel = -n * sqrt(|1 - |perp|^2|)

    Args:
        unit_direction: The incoming direction (unit length).
        normal: The unit normal, facing against the incoming direction.
        etai_over_etat: Ratio of refractive indices (incident / transmitted).

    Returns:
        The refracted direction.
    """
    cos_theta = tm.min(-tm.dot(unit_direction, normal), 1.0)
    perpendicular = etai_over_etat * (unit_direction + cos_theta * normal)
    parallel = -ti.sqrt(ti.abs(1.0 - length_squared(perpendicular))) * normal
    return perpendicular + parallel


@ti.func
def schlick(cosine: ti.f32, etai_over_etat: ti.f32) -> ti.f32:
    """Approximate the Fresnel reflectance (Schlick).

    Real glass turns into a mirror at steep viewing angles; this closed
    form estimates how much.

    Args:
        cosine: Cosine of the angle between incoming ray and normal.
        etai_over_etat: Ratio of refractive indices.

    Returns:
        The probability of reflection in [0, 1].
    """
    r0 = (1.0 - etai_over_etat) / (1.0 + etai_over_etat)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def _etai_over_etat(refractive_index: ti.f32, front_face: ti.i32) -> ti.f32:
    """Air-to-material ratio on the front face, material-to-air on the back."""
    ratio = 1.0 / refractive_index
    if front_face == 0:
        ratio = refractive_index
    return ratio


@ti.func
def will_reflect(refractive_index: ti.f32, ray: Ray, hit: HitPoint) -> ti.i32:
    """Determine if total internal reflection will occur.

    Args:
        refractive_index: Index of refraction of the material.
        ray: The incoming ray.
        hit: The intersection being shaded.

    Returns:
        1 if the ray cannot refract and must reflect, 0 otherwise.
    """
    etai_over_etat = _etai_over_etat(refractive_index, hit.front_face)
    unit_direction = unit_vector(ray.direction)
    cos_theta = tm.min(-tm.dot(unit_direction, hit.normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)
    return 1 if etai_over_etat * sin_theta > 1.0 else 0


@ti.func
def scatter_dielectric(refractive_index: ti.f32, ray: Ray, hit: HitPoint) -> ScatteredRay:
    """Reflect or refract a ray at a dielectric boundary.

    Total internal reflection always reflects. Otherwise one uniform draw
    is compared against Schlick's reflectance to pick reflection or
    refraction.

    Args:
        refractive_index: Index of refraction of the material.
        ray: The incoming ray.
        hit: The intersection being shaded. hit.front_face selects whether
            the ray is entering (1) or leaving (0) the material.

    Returns:
        A ScatteredRay leaving hit.point with white attenuation.
    """
    attenuation = vec3(1.0, 1.0, 1.0)

    etai_over_etat = _etai_over_etat(refractive_index, hit.front_face)
    unit_direction = unit_vector(ray.direction)
    cos_theta = tm.min(-tm.dot(unit_direction, hit.normal), 1.0)

    direction = vec3(0.0, 0.0, 0.0)
    if will_reflect(refractive_index, ray, hit) == 1:
        direction = reflect(unit_direction, hit.normal)
    elif ti.random(ti.f32) < schlick(cos_theta, etai_over_etat):
        direction = reflect(unit_direction, hit.normal)
    else:
        direction = refract(unit_direction, hit.normal, etai_over_etat)

    return make_scattered_ray(hit.point, direction, attenuation)


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 1024

# Storage for dielectric material properties
dielectric_indices = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials."""
    num_dielectric_materials[None] = 0


def add_dielectric_material(refractive_index: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        refractive_index: Index of refraction. Default is 1.5 (glass).
            Must be positive. Values below 1 model a bubble of a thinner
            medium, such as air inside water.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If the refractive index is not positive.
    """
    if refractive_index <= 0.0:
        raise ValueError(f"Refractive index = {refractive_index} must be positive.")

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_indices[idx] = refractive_index
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_refractive_index(material_idx: ti.i32) -> ti.f32:
    """Get the refractive index for a dielectric material by registry index."""
    return dielectric_indices[material_idx]


@ti.func
def scatter_dielectric_by_id(material_idx: ti.i32, ray: Ray, hit: HitPoint) -> ScatteredRay:
    """Scatter off the dielectric material stored at material_idx."""
    return scatter_dielectric(get_dielectric_refractive_index(material_idx), ray, hit)
