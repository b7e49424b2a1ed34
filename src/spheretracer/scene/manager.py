"""Scene builder owning the spheres and the material table.

Each material lives in the registry of its kind (diffuse, reflective,
dielectric). The manager gives every material a scene-wide material_id and
records, in Taichi fields, which kind it is and where it sits in that
kind's registry. Spheres refer to materials only through that id, and the
tracer reads the table to pick the scattering function.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> scene.add_diffuse_sphere((0, -1000, 0), 1000, albedo=(0.5, 0.5, 0.5))
    (0, 0)
    >>> scene.add_dielectric_sphere((0, 1, 0), 1.0, refractive_index=1.5)
    (1, 1)
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Sequence

import taichi as ti
import taichi.math as tm

from spheretracer.materials.dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
)
from spheretracer.materials.diffuse import (
    add_diffuse_material,
    clear_diffuse_materials,
)
from spheretracer.materials.reflective import (
    add_reflective_material,
    clear_reflective_materials,
)
from spheretracer.scene.world import (
    MAX_SPHERES,
    add_sphere,
    clear_world,
    get_sphere_count,
)

logger = logging.getLogger(__name__)

vec3 = tm.vec3


class MaterialType(IntEnum):
    """Kind of material behind a material_id; the tracer dispatches on it."""

    DIFFUSE = 0
    REFLECTIVE = 1
    DIELECTRIC = 2


# Capacity of the material table (all kinds together)
MAX_MATERIALS = 2048

# Indexed by material_id
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    """Empty the material table."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """MaterialType of a material_id, or -1 if the id is not in the table."""
    kind = -1
    if 0 <= material_id < num_materials[None]:
        kind = material_types[material_id]
    return kind


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Slot of a material_id in its kind's registry, or -1 if unknown.

    For example, if material 5 is the second reflective material added,
    this returns 1 and the reflective registry holds its parameters at 1.
    """
    slot = -1
    if 0 <= material_id < num_materials[None]:
        slot = material_type_indices[material_id]
    return slot


@dataclass
class MaterialInfo:
    """Host-side record of one entry in the material table.

    Attributes:
        material_id: Scene-wide id of the material.
        material_type: Kind of the material.
        type_index: Slot in the registry for that kind.
        params: Parameters the material was created with.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Host-side record of one sphere.

    Attributes:
        sphere_index: Slot in the world's sphere fields.
        center: Sphere center.
        radius: Sphere radius.
        material_id: Material the sphere is made of.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """A scene as plain lists of dicts, ready for JSON.

    Materials are listed in material_id order, so a sphere's material_id
    is an index into ``materials``.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _as_triple(values: Sequence[float]) -> tuple[float, float, float]:
    if len(values) != 3:
        raise ValueError(f"Expected 3 components, got {len(values)}: {values!r}")
    return (float(values[0]), float(values[1]), float(values[2]))


def _require(entry: dict[str, Any], key: str, what: str) -> Any:
    if key not in entry:
        raise ValueError(f"{what} entry is missing required key {key!r}: {entry!r}")
    return entry[key]


class SceneManager:
    """Builds the one live scene: spheres plus the materials they use.

    The sphere and material storage is global, so constructing a manager
    (or calling clear) wipes whatever scene was there before. The scene
    must not change while a render is running.

    Attributes:
        materials: MaterialInfo per material_id.
        spheres: SphereInfo per sphere, in insertion order.

    Example:
        >>> scene = SceneManager()
        >>> red = scene.add_diffuse_material(albedo=(0.8, 0.1, 0.1))
        >>> gold = scene.add_reflective_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        >>> scene.add_sphere((0, 0, -1), 0.5, red)
        0
        >>> scene.add_sphere((1, 0, -1), 0.5, gold)
        1
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.clear()

    def clear(self) -> None:
        """Remove every sphere and material, on the host and in the fields."""
        clear_world()
        clear_diffuse_materials()
        clear_reflective_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()

    # -- materials -----------------------------------------------------------

    def _register_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        """Append a registry entry to the material table and return its id."""
        next_id = int(num_materials[None])
        if next_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[next_id] = int(material_type)
        material_type_indices[next_id] = type_index
        num_materials[None] = next_id + 1

        self.materials.append(MaterialInfo(next_id, material_type, type_index, params))
        return next_id

    def add_diffuse_material(self, albedo: Sequence[float]) -> int:
        """Add a Lambertian material.

        Args:
            albedo: (R, G, B) reflectance, each in [0, 1].

        Returns:
            The new material_id.

        Raises:
            ValueError: If albedo does not have three components in [0, 1].
            RuntimeError: If the material table is full.
        """
        albedo = _as_triple(albedo)
        slot = add_diffuse_material(albedo)
        return self._register_material(MaterialType.DIFFUSE, slot, {"albedo": albedo})

    def add_reflective_material(self, albedo: Sequence[float], fuzz: float = 0.0) -> int:
        """Add a metal material; fuzz 0 is a perfect mirror.

        Raises:
            ValueError: If albedo or fuzz is outside [0, 1].
            RuntimeError: If the material table is full.
        """
        albedo = _as_triple(albedo)
        slot = add_reflective_material(albedo, fuzz)
        return self._register_material(
            MaterialType.REFLECTIVE, slot, {"albedo": albedo, "fuzz": fuzz}
        )

    def add_dielectric_material(self, refractive_index: float = 1.5) -> int:
        """Add a clear refractive material (1.5 is glass).

        Raises:
            ValueError: If refractive_index is not positive.
            RuntimeError: If the material table is full.
        """
        slot = add_dielectric_material(refractive_index)
        return self._register_material(
            MaterialType.DIELECTRIC, slot, {"refractive_index": refractive_index}
        )

    def get_material_count(self) -> int:
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """MaterialInfo for material_id, or None for an unknown id."""
        if material_id in range(len(self.materials)):
            return self.materials[material_id]
        return None

    # -- spheres -------------------------------------------------------------

    def add_sphere(
        self,
        center: Sequence[float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere made of an already registered material.

        Several spheres may share one material_id.

        Returns:
            The sphere's slot in the world.

        Raises:
            ValueError: If material_id is unknown or radius is not positive.
            RuntimeError: If the world is full.
        """
        if not 0 <= material_id < num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")
        if radius <= 0.0:
            raise ValueError(f"Sphere radius = {radius} must be positive.")

        center = _as_triple(center)
        index = add_sphere(vec3(*center), radius, material_id)
        self.spheres.append(SphereInfo(index, center, radius, material_id))
        return index

    def add_diffuse_sphere(
        self,
        center: Sequence[float],
        radius: float,
        albedo: Sequence[float],
    ) -> tuple[int, int]:
        """Add a sphere with a diffuse material of its own.

        Returns:
            (sphere_index, material_id)
        """
        material_id = self.add_diffuse_material(albedo)
        return self.add_sphere(center, radius, material_id), material_id

    def add_reflective_sphere(
        self,
        center: Sequence[float],
        radius: float,
        albedo: Sequence[float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with a metal material of its own.

        Returns:
            (sphere_index, material_id)
        """
        material_id = self.add_reflective_material(albedo, fuzz)
        return self.add_sphere(center, radius, material_id), material_id

    def add_dielectric_sphere(
        self,
        center: Sequence[float],
        radius: float,
        refractive_index: float = 1.5,
    ) -> tuple[int, int]:
        """Add a sphere with a dielectric material of its own.

        Returns:
            (sphere_index, material_id)
        """
        material_id = self.add_dielectric_material(refractive_index)
        return self.add_sphere(center, radius, material_id), material_id

    def get_sphere_count(self) -> int:
        return get_sphere_count()

    # -- serialization -------------------------------------------------------

    def to_config(self) -> SceneConfig:
        """Snapshot the scene as a SceneConfig of JSON-compatible values."""
        materials = []
        for info in self.materials:
            entry: dict[str, Any] = {"type": info.material_type.name.lower()}
            entry.update(
                (key, list(value) if isinstance(value, tuple) else value)
                for key, value in info.params.items()
            )
            materials.append(entry)

        spheres = [
            {
                "center": list(sphere.center),
                "radius": sphere.radius,
                "material_id": sphere.material_id,
            }
            for sphere in self.spheres
        ]
        return SceneConfig(materials=materials, spheres=spheres)

    def _load_material(self, entry: dict[str, Any]) -> int:
        kind = str(_require(entry, "type", "Material")).lower()
        if kind == "diffuse":
            return self.add_diffuse_material(_require(entry, "albedo", "Diffuse material"))
        if kind == "reflective":
            # fuzz may be left out for a perfect mirror
            return self.add_reflective_material(
                _require(entry, "albedo", "Reflective material"),
                float(entry.get("fuzz", 0.0)),
            )
        if kind == "dielectric":
            return self.add_dielectric_material(
                float(_require(entry, "refractive_index", "Dielectric material"))
            )
        raise ValueError(f"Unknown material type: {kind!r}")

    def from_config(self, config: SceneConfig) -> None:
        """Replace the current scene with the one described by config.

        Materials are added first, in order, so the ids the spheres refer
        to line up with the positions in ``config.materials``.

        Raises:
            ValueError: On a missing required key, an unknown material
                type, an invalid parameter or a sphere referring to a
                missing material.
        """
        self.clear()

        for entry in config.materials:
            self._load_material(entry)
        for entry in config.spheres:
            self.add_sphere(
                _require(entry, "center", "Sphere"),
                float(_require(entry, "radius", "Sphere")),
                int(_require(entry, "material_id", "Sphere")),
            )

        logger.debug(
            "Loaded scene with %d materials and %d spheres",
            len(self.materials),
            len(self.spheres),
        )

    def to_dict(self) -> dict[str, Any]:
        """The scene as ``{"materials": [...], "spheres": [...]}``."""
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene written by to_dict (for example from a JSON file).

        Raises:
            ValueError: If "materials" or "spheres" is missing, or on any
                error from_config reports.
        """
        self.from_config(
            SceneConfig(
                materials=list(_require(data, "materials", "Scene")),
                spheres=list(_require(data, "spheres", "Scene")),
            )
        )

    @staticmethod
    def get_max_spheres() -> int:
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        return MAX_MATERIALS
