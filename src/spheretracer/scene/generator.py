"""Random "final scene" generator.

Builds the classic cover image scene: a huge gray ground sphere, three
large feature spheres (diffuse, glass and mirror metal) and a grid of small
spheres with randomly chosen materials scattered around them.

Scene randomness is drawn on the host from a NumPy generator, so the same
seed always produces the same scene.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.scene.generator import create_random_spheres_scene
    >>> scene = create_random_spheres_scene(seed=42)
    >>> scene.get_sphere_count() > 4
    True
"""

import logging

import numpy as np

from spheretracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# =============================================================================
# Scene Layout
# =============================================================================

GROUND_CENTER = (0.0, -1000.0, 0.0)
GROUND_RADIUS = 1000.0
GROUND_ALBEDO = (0.5, 0.5, 0.5)

FEATURE_RADIUS = 1.0
DIFFUSE_FEATURE_CENTER = (-4.0, 1.0, 0.0)
DIFFUSE_FEATURE_ALBEDO = (0.4, 0.2, 0.1)
GLASS_FEATURE_CENTER = (0.0, 1.0, 0.0)
METAL_FEATURE_CENTER = (4.0, 1.0, 0.0)
METAL_FEATURE_ALBEDO = (0.7, 0.6, 0.5)

GLASS_REFRACTIVE_INDEX = 1.5

# Small spheres sit on a grid [-GRID_EXTENT, GRID_EXTENT) in x and z
GRID_EXTENT = 11
SMALL_RADIUS = 0.2
JITTER = 1.2

# Small spheres closer than this to METAL_FEATURE_CENTER are skipped
CLEARANCE = 1.2

# Material choice thresholds for small spheres
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.15


def random_color(rng: np.random.Generator) -> tuple[float, float, float]:
    """Random color with components uniform in [0, 1)."""
    return tuple(float(c) for c in rng.random(3))


def random_color_in_range(
    rng: np.random.Generator,
    min_value: float,
    max_value: float,
) -> tuple[float, float, float]:
    """Random color with components uniform in [min_value, max_value)."""
    return tuple(float(c) for c in rng.uniform(min_value, max_value, 3))


def _add_small_sphere(scene: SceneManager, rng: np.random.Generator, center) -> None:
    choose_material = rng.random()

    if choose_material < DIFFUSE_PROBABILITY:
        first = random_color(rng)
        second = random_color(rng)
        albedo = tuple(a * b for a, b in zip(first, second))
        scene.add_diffuse_sphere(center, SMALL_RADIUS, albedo=albedo)
    elif choose_material < DIFFUSE_PROBABILITY + METAL_PROBABILITY:
        albedo = random_color_in_range(rng, 0.5, 1.0)
        fuzz = float(rng.uniform(0.0, 0.5))
        scene.add_reflective_sphere(center, SMALL_RADIUS, albedo=albedo, fuzz=fuzz)
    else:
        scene.add_dielectric_sphere(
            center, SMALL_RADIUS, refractive_index=GLASS_REFRACTIVE_INDEX
        )


def create_random_spheres_scene(seed: int | None = None) -> SceneManager:
    """Create the random spheres scene.

    Args:
        seed: Seed for the scene's random choices. None draws fresh entropy.

    Returns:
        The populated SceneManager.
    """
    rng = np.random.default_rng(seed)
    scene = SceneManager()

    scene.add_diffuse_sphere(GROUND_CENTER, GROUND_RADIUS, albedo=GROUND_ALBEDO)
    scene.add_diffuse_sphere(
        DIFFUSE_FEATURE_CENTER, FEATURE_RADIUS, albedo=DIFFUSE_FEATURE_ALBEDO
    )
    scene.add_dielectric_sphere(
        GLASS_FEATURE_CENTER, FEATURE_RADIUS, refractive_index=GLASS_REFRACTIVE_INDEX
    )
    scene.add_reflective_sphere(
        METAL_FEATURE_CENTER, FEATURE_RADIUS, albedo=METAL_FEATURE_ALBEDO, fuzz=0.0
    )

    avoid = np.array(METAL_FEATURE_CENTER)
    for i in range(-GRID_EXTENT, GRID_EXTENT):
        for j in range(-GRID_EXTENT, GRID_EXTENT):
            center = (
                i + float(rng.random()) * JITTER,
                SMALL_RADIUS,
                j + float(rng.random()) * JITTER,
            )
            if np.linalg.norm(np.array(center) - avoid) > CLEARANCE:
                _add_small_sphere(scene, rng, center)

    logger.info(
        "Generated random spheres scene: %d spheres, %d materials",
        scene.get_sphere_count(),
        scene.get_material_count(),
    )
    return scene
