"""Scene module: sphere storage, materials table and scene generation.

Components:
    world: Sphere fields and nearest-hit queries over all spheres
    manager: SceneManager coordinating spheres and materials
    generator: The random spheres scene

Scene data uses a Structure-of-Arrays layout in Taichi fields and is
read-only while rendering.
"""

from .generator import create_random_spheres_scene, random_color, random_color_in_range
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)
from .world import (
    MAX_SPHERES,
    add_sphere,
    clear_world,
    get_sphere_count,
    intersect_world,
)

__all__ = [
    # World
    "add_sphere",
    "clear_world",
    "get_sphere_count",
    "intersect_world",
    "MAX_SPHERES",
    # Manager
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Generator
    "create_random_spheres_scene",
    "random_color",
    "random_color_in_range",
]
