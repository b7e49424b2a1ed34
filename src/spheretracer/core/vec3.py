"""Vector algebra and random sampling for the path tracer.

One 3-component type serves as geometric point, direction and RGB color.
Arithmetic (+, -, componentwise *, scalar * in either order, scalar /,
unary -) comes from Taichi's vector type; this module adds the named
operations and the Monte Carlo sampling routines used by materials and
the camera.

All functions are Taichi functions (@ti.func) and must be called from
inside a kernel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.core.vec3 import vec3, unit_vector, random_unit_vector
    >>> @ti.kernel
    ... def sample() -> vec3:
    ...     return unit_vector(vec3(3.0, 0.0, 4.0)) + random_unit_vector()
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# The same type used as a position and as an RGB color
Point3 = vec3
Color = vec3

# Bound on rejection-sampling attempts. The acceptance rate is ~52% for the
# sphere and ~79% for the disk, so the bound is never reached in practice.
MAX_REJECTION_ATTEMPTS = 100


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def unit_vector(v: vec3) -> vec3:
    """Scale a vector to unit length.

    Args:
        v: The input vector. Must not be zero-length; every call site builds
            its input from non-degenerate geometry, so this is not checked.

    Returns:
        v / length(v).
    """
    return v / length(v)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Return 1 if all components are within 1e-8 of zero, 0 otherwise."""
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(direction: vec3, normal: vec3) -> vec3:
    """Mirror a direction about a normal: d - 2(d . n)n.

    Args:
        direction: The incoming direction (pointing toward the surface).
        normal: The unit surface normal.

    Returns:
        The reflected direction.
    """
    return direction - 2.0 * tm.dot(direction, normal) * normal


# =============================================================================
# Random Sampling
# =============================================================================


@ti.func
def random_vec3() -> vec3:
    """Each component uniform in [0, 1)."""
    return vec3(ti.random(ti.f32), ti.random(ti.f32), ti.random(ti.f32))


@ti.func
def random_vec3_in_range(min_value: ti.f32, max_value: ti.f32) -> vec3:
    """Each component uniform in [min_value, max_value)."""
    span = max_value - min_value
    return vec3(
        min_value + span * ti.random(ti.f32),
        min_value + span * ti.random(ti.f32),
        min_value + span * ti.random(ti.f32),
    )


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point strictly inside the unit sphere.

    Rejection-samples the cube [-1, 1]^3 until the squared length is
    below one. Used to perturb reflections on fuzzy metals.

    Returns:
        A random point p with |p|^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            p = random_vec3_in_range(-1.0, 1.0)
            if length_squared(p) < 1.0:
                found = True
    return p


@ti.func
def random_in_unit_disk() -> vec3:
    """Generate a random point inside the unit disk in the z=0 plane.

    Used to sample the camera lens for defocus blur.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            p = vec3(
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
                0.0,
            )
            if length_squared(p) < 1.0:
                found = True
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Generate a unit vector uniformly distributed on the sphere.

    Samples the azimuth a in [0, 2pi) and the height z in [-1, 1), then
    places the point on the circle of radius sqrt(1 - z^2) at that height.
    Adding the result to a surface normal gives a cosine-weighted
    (Lambertian) scatter direction.

    Returns:
        A random unit vector.
    """
    a = ti.random(ti.f32) * 2.0 * tm.pi
    z = ti.random(ti.f32) * 2.0 - 1.0
    r = ti.sqrt(1.0 - z * z)
    return vec3(r * ti.cos(a), r * ti.sin(a), z)
