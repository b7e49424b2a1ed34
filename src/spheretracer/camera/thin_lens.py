"""Thin-lens camera model with depth of field.

The camera generates primary rays from a circular lens aperture toward a
virtual image plane placed at the focus distance. Geometry exactly on the
focus plane stays sharp; everything nearer or farther blurs in proportion
to the aperture. An aperture of zero degenerates to a pinhole camera.

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from look_at toward look_from (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.camera.thin_lens import ThinLensCamera, setup_camera
    >>> camera = ThinLensCamera(
    ...     look_from=(13.0, 2.0, 3.0),
    ...     look_at=(0.0, 0.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=3.0 / 2.0,
    ...     aperture=0.1,
    ...     focus_distance=10.0,
    ... )
    >>> setup_camera(camera)
    >>> # Use shoot_ray_at(s, t) within a Taichi kernel
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from spheretracer.core.ray import Ray, make_ray
from spheretracer.core.vec3 import random_in_unit_disk

# Type alias for 3D vectors
vec3 = tm.vec3

# Below this length a basis vector is treated as degenerate
_DEGENERATE_LENGTH = 1e-8


# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class ThinLensCamera:
    """Configuration for a thin-lens camera.

    Attributes:
        look_from: Camera position in world space (x, y, z).
        look_at: Point the camera is looking at in world space (x, y, z).
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 gives a pinhole camera.
        focus_distance: Distance from look_from to the plane of focus.
        vup: Up direction vector for camera orientation.
    """

    look_from: tuple[float, float, float]
    look_at: tuple[float, float, float]
    vfov: float
    aspect_ratio: float
    aperture: float
    focus_distance: float
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

# Image plane at the focus distance
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())

_lens_radius = ti.field(dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side)
# =============================================================================


def _validate_camera(camera: ThinLensCamera) -> None:
    """Raise ValueError for camera parameters that cannot form an image."""
    if not 0.0 < camera.vfov < 180.0:
        raise ValueError(f"vfov = {camera.vfov} must be in (0, 180) degrees.")
    if camera.aspect_ratio <= 0.0:
        raise ValueError(f"aspect_ratio = {camera.aspect_ratio} must be positive.")
    if camera.focus_distance <= 0.0:
        raise ValueError(f"focus_distance = {camera.focus_distance} must be positive.")
    if camera.aperture < 0.0:
        raise ValueError(f"aperture = {camera.aperture} must not be negative.")


def setup_camera(camera: ThinLensCamera) -> None:
    """Initialize camera state from configuration.

    Computes the orthonormal basis and the image plane at the focus
    distance, then stores them in Taichi fields. Must be called before
    rendering, from Python (not from within a Taichi kernel).

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If look_from equals look_at, vup is parallel to the
            view direction, or a scalar parameter is out of range.
    """
    _validate_camera(camera)

    theta = math.radians(camera.vfov)
    half_height = math.tan(theta / 2.0)
    half_width = camera.aspect_ratio * half_height

    look_from = np.array(camera.look_from, dtype=np.float64)
    look_at = np.array(camera.look_at, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    w = look_from - look_at
    w_length = np.linalg.norm(w)
    if w_length < _DEGENERATE_LENGTH:
        raise ValueError("look_from and look_at must be different points.")
    w = w / w_length

    u = np.cross(vup, w)
    u_length = np.linalg.norm(u)
    if u_length < _DEGENERATE_LENGTH:
        raise ValueError("vup must not be parallel to the view direction.")
    u = u / u_length

    v = np.cross(w, u)

    focus = camera.focus_distance
    horizontal = focus * 2.0 * half_width * u
    vertical = focus * 2.0 * half_height * v
    lower_left = look_from - horizontal / 2.0 - vertical / 2.0 - focus * w

    _camera_origin[None] = look_from.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()
    _lens_radius[None] = camera.aperture / 2.0


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def shoot_ray_at(s: ti.f32, t: ti.f32) -> Ray:
    """Generate a ray through normalized image coordinates (s, t).

    The ray starts at a random point on the lens disk and passes through
    the point (s, t) of the image plane at the focus distance:
    - s = 0: left edge, s = 1: right edge
    - t = 0: bottom edge, t = 1: top edge

    The direction is not normalized.

    Args:
        s: Horizontal coordinate in [0, 1].
        t: Vertical coordinate in [0, 1].

    Returns:
        The primary ray.
    """
    rd = _lens_radius[None] * random_in_unit_disk()
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y
    origin = _camera_origin[None]
    direction = (
        _lower_left_corner[None]
        + s * _viewport_horizontal[None]
        + t * _viewport_vertical[None]
        - origin
        - offset
    )
    return make_ray(origin + offset, direction)


# =============================================================================
# Utility Functions
# =============================================================================


def _to_tuple(vector) -> tuple[float, float, float]:
    return (float(vector[0]), float(vector[1]), float(vector[2]))


def get_camera_info() -> dict[str, object]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left
        and lens_radius.
    """
    return {
        "origin": _to_tuple(_camera_origin[None]),
        "u": _to_tuple(_camera_u[None]),
        "v": _to_tuple(_camera_v[None]),
        "w": _to_tuple(_camera_w[None]),
        "horizontal": _to_tuple(_viewport_horizontal[None]),
        "vertical": _to_tuple(_viewport_vertical[None]),
        "lower_left": _to_tuple(_lower_left_corner[None]),
        "lens_radius": float(_lens_radius[None]),
    }
