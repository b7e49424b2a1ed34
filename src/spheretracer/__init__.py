"""Taichi-based Monte Carlo ray tracer for scenes of spheres.

This package renders spheres with diffuse, reflective (metal) and
dielectric (glass) materials, seen through a thin-lens camera with depth
of field, under a sky gradient.

Subpackages:
    core: Vector algebra, rays, hit records, the tracer and the render driver
    geometry: Sphere primitive and ray-sphere intersection
    materials: Diffuse, reflective and dielectric scattering
    scene: Sphere storage, the scene manager and the random scene generator
    camera: Thin-lens camera with ray generation
    image: PPM and PNG output

Taichi must be initialized (ti.init) before importing the subpackages,
since they allocate Taichi fields at import time.
"""

__version__ = "0.1.0"
