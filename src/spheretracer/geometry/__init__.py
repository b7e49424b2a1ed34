"""Geometry module: the sphere primitive.

Intersection routines are Taichi functions (@ti.func) returning a
HitPoint, with hit == 0 meaning the ray missed.
"""

from .sphere import Sphere, hit_sphere, make_sphere

__all__ = [
    "Sphere",
    "hit_sphere",
    "make_sphere",
]
