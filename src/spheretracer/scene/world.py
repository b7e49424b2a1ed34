"""Scene-level ray intersection over all spheres.

The world stores its spheres in Taichi fields and answers "what is the
nearest thing this ray hits?" the same way a single sphere does, so it can
be queried as one intersectable object.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.scene.world import add_sphere, clear_world, intersect_world
    >>> clear_world()
    >>> add_sphere(ti.math.vec3(0, 0, -1), 0.5, material_id=0)
    >>> # Use intersect_world within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from spheretracer.core.hit_point import HitPoint, make_miss
from spheretracer.core.ray import Ray
from spheretracer.geometry.sphere import Sphere, hit_sphere

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Maximum number of spheres supported in the world
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_world() -> None:
    """Remove all spheres from the world.

    Resets the sphere count to zero. The field data is overwritten when new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Append a sphere to the world.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere.
        material_id: The material id to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the world."""
    return int(num_spheres[None])


@ti.func
def get_sphere(index: ti.i32) -> Sphere:
    """Load the sphere at index from field storage."""
    return Sphere(
        center=sphere_centers[index],
        radius=sphere_radii[index],
        material_id=sphere_material_ids[index],
    )


@ti.func
def intersect_world(ray: Ray, t_min: ti.f32, t_max: ti.f32) -> HitPoint:
    """Find the nearest sphere hit by a ray within (t_min, t_max).

    Scans every sphere, querying each on (t_min, closest_so_far). Every hit
    shrinks closest_so_far to its distance, so later spheres can only
    replace the result with something nearer. The answer does not depend
    on the order the spheres are stored in.

    Args:
        ray: The ray to trace.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        The nearest HitPoint, or a miss record if nothing was hit.
    """
    closest_so_far = t_max
    result = make_miss()

    for i in range(num_spheres[None]):
        rec = hit_sphere(ray, get_sphere(i), t_min, closest_so_far)
        if rec.hit == 1:
            closest_so_far = rec.t
            result = rec

    return result
