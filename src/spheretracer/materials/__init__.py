"""Materials module for light scattering.

Components:
    diffuse: Lambertian diffuse reflection
    reflective: Mirror reflection with optional fuzz
    dielectric: Glass-like refraction with Schlick-weighted reflection

Each material turns an incoming ray and a HitPoint into a ScatteredRay
(the outgoing ray and its attenuation). Material parameters are kept in
per-type registries of Taichi fields.
"""

from .dielectric import (
    DielectricMaterial,
    add_dielectric_material,
    clear_dielectric_materials,
    get_dielectric_material_count,
    get_dielectric_refractive_index,
    refract,
    scatter_dielectric,
    scatter_dielectric_by_id,
    schlick,
    will_reflect,
)
from .diffuse import (
    DiffuseMaterial,
    add_diffuse_material,
    clear_diffuse_materials,
    get_diffuse_albedo,
    get_diffuse_material_count,
    scatter_diffuse,
    scatter_diffuse_by_id,
)
from .reflective import (
    ReflectiveMaterial,
    add_reflective_material,
    clear_reflective_materials,
    get_reflective_albedo,
    get_reflective_fuzz,
    get_reflective_material_count,
    scatter_reflective,
    scatter_reflective_by_id,
)

__all__ = [
    # Diffuse
    "DiffuseMaterial",
    "scatter_diffuse",
    "scatter_diffuse_by_id",
    "add_diffuse_material",
    "clear_diffuse_materials",
    "get_diffuse_material_count",
    "get_diffuse_albedo",
    # Reflective
    "ReflectiveMaterial",
    "scatter_reflective",
    "scatter_reflective_by_id",
    "add_reflective_material",
    "clear_reflective_materials",
    "get_reflective_material_count",
    "get_reflective_albedo",
    "get_reflective_fuzz",
    # Dielectric
    "DielectricMaterial",
    "refract",
    "schlick",
    "will_reflect",
    "scatter_dielectric",
    "scatter_dielectric_by_id",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_refractive_index",
]
