"""Ray tracer: light transport along a single camera path.

A ray that escapes the scene picks up the sky color. A ray that hits a
sphere is scattered by the sphere's material, and the color that comes back
along the scattered ray is tinted by the material's attenuation. After
max_depth intersections the path is cut off and contributes black.

Taichi functions cannot recurse, so the bounces run as a loop: the product
of attenuations seen so far (the throughput) multiplies whatever radiance
the path finally reaches.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.core.tracer import trace_ray_from
    >>> # Straight up in an empty world: pure sky blue
    >>> trace_ray_from((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), max_depth=50)
    (0.5, 0.7, 1.0)
"""

import taichi as ti
import taichi.math as tm

from spheretracer.core.hit_point import HitPoint
from spheretracer.core.ray import Ray, ScatteredRay, make_ray, make_scattered_ray
from spheretracer.core.vec3 import unit_vector
from spheretracer.materials.dielectric import scatter_dielectric_by_id
from spheretracer.materials.diffuse import scatter_diffuse_by_id
from spheretracer.materials.reflective import scatter_reflective_by_id
from spheretracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)
from spheretracer.scene.world import intersect_world

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Tracing Constants
# =============================================================================

# Default bounce limit per camera path
DEFAULT_MAX_DEPTH = 50

# Hits closer than T_MIN are ignored so a scattered ray does not re-hit the
# surface it leaves from (shadow acne)
T_MIN = 0.001
T_MAX = tm.inf

# Sky gradient endpoints
SKY_HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = vec3(0.5, 0.7, 1.0)


@ti.func
def background_color(ray: Ray) -> vec3:
    """Sky color seen along a ray that escapes the scene.

    Blends linearly from white (looking straight down) to light blue
    (looking straight up) on the y component of the unit direction.
    """
    unit_direction = unit_vector(ray.direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * SKY_HORIZON_COLOR + t * SKY_ZENITH_COLOR


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def scatter_material(ray: Ray, hit: HitPoint) -> ScatteredRay:
    """Scatter a ray off the material recorded in the hit.

    Looks up the material type and registry index for hit.material_id and
    calls the matching scatter function. An unknown material id absorbs the
    ray (black attenuation).

    Args:
        ray: The incoming ray.
        hit: The intersection being shaded.

    Returns:
        The scattered ray and its attenuation.
    """
    mat_type = get_material_type(hit.material_id)
    type_index = get_material_type_index(hit.material_id)

    scattered = make_scattered_ray(hit.point, ray.direction, vec3(0.0, 0.0, 0.0))

    if mat_type == int(MaterialType.DIFFUSE):
        scattered = scatter_diffuse_by_id(type_index, ray, hit)
    elif mat_type == int(MaterialType.REFLECTIVE):
        scattered = scatter_reflective_by_id(type_index, ray, hit)
    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered = scatter_dielectric_by_id(type_index, ray, hit)

    return scattered


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def trace_ray(ray: Ray, max_depth: ti.i32) -> vec3:
    """Estimate the color seen along a ray.

    Args:
        ray: The ray to trace (direction need not be normalized).
        max_depth: Maximum number of surface intersections on the path.
            0 returns black without touching the scene.

    Returns:
        The color carried back along the ray.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = ray

    # Taichi doesn't support break in ti.func loops
    active = 1

    for _ in range(max_depth):
        if active == 1:
            hit = intersect_world(current, T_MIN, T_MAX)

            if hit.hit == 0:
                color = throughput * background_color(current)
                active = 0
            else:
                scattered = scatter_material(current, hit)
                throughput *= scattered.attenuation
                current = scattered.ray

    return color


# =============================================================================
# Python-callable Helpers
# =============================================================================

_trace_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _trace_samples(origin: vec3, direction: vec3, max_depth: ti.i32, num_samples: ti.i32):
    _trace_result[None] = vec3(0.0, 0.0, 0.0)
    for _ in range(num_samples):
        _trace_result[None] += trace_ray(make_ray(origin, direction), max_depth)


def trace_ray_from(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = DEFAULT_MAX_DEPTH,
    num_samples: int = 1,
) -> tuple[float, float, float]:
    """Trace a ray from Python and return the averaged color.

    Intended for debugging and tests; rendering goes through
    spheretracer.core.render.

    Args:
        origin: Ray origin (x, y, z).
        direction: Ray direction (x, y, z).
        max_depth: Bounce limit for each path.
        num_samples: Number of independent paths to average.

    Returns:
        The mean color as (R, G, B).

    Raises:
        ValueError: If max_depth is negative or num_samples is not positive.
    """
    if max_depth < 0:
        raise ValueError(f"max_depth = {max_depth} must not be negative.")
    if num_samples < 1:
        raise ValueError(f"num_samples = {num_samples} must be positive.")

    _trace_samples(vec3(*origin), vec3(*direction), max_depth, num_samples)
    total = _trace_result[None]
    return (
        float(total[0]) / num_samples,
        float(total[1]) / num_samples,
        float(total[2]) / num_samples,
    )
