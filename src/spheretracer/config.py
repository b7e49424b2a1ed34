"""Render configuration.

RenderConfig gathers the image, sampling and camera settings for one
render. The defaults reproduce the classic random-spheres cover image: a
3:2 image 1200 pixels wide, 500 samples per pixel, looking at the origin
from (13, 2, 3) with a slight depth of field.

Example:
    >>> from spheretracer.config import RenderConfig
    >>> config = RenderConfig(image_width=400, samples_per_pixel=50)
    >>> config.image_height
    266
    >>> config.validate()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from spheretracer.camera.thin_lens import ThinLensCamera

# Matches spheretracer.core.tracer.DEFAULT_MAX_DEPTH; importing the tracer
# here would create Taichi fields before ti.init
DEFAULT_MAX_DEPTH = 50


@dataclass
class RenderConfig:
    """Settings for a single render.

    Attributes:
        image_width: Output width in pixels.
        aspect_ratio: Width divided by height.
        samples_per_pixel: Number of samples averaged into each pixel.
        max_depth: Bounce limit per camera path.
        look_from: Camera position.
        look_at: Point the camera looks at.
        vup: Camera up direction.
        vfov: Vertical field of view in degrees.
        aperture: Lens diameter (0 = pinhole).
        focus_distance: Distance from the camera to the plane of focus.
        seed: Seed for scene generation and Taichi's random generator.
            None picks a random seed.
    """

    image_width: int = 1200
    aspect_ratio: float = 3.0 / 2.0
    samples_per_pixel: int = 500
    max_depth: int = DEFAULT_MAX_DEPTH
    look_from: tuple[float, float, float] = (13.0, 2.0, 3.0)
    look_at: tuple[float, float, float] = (0.0, 0.0, 0.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 20.0
    aperture: float = 0.1
    focus_distance: float = 10.0
    seed: int | None = None

    @property
    def image_height(self) -> int:
        """Output height in pixels, derived from width and aspect ratio."""
        return int(self.image_width / self.aspect_ratio)

    def validate(self) -> None:
        """Check that the settings can produce an image.

        Raises:
            ValueError: If any setting is out of range.
        """
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio = {self.aspect_ratio} must be positive.")
        if self.image_width < 2 or self.image_height < 2:
            raise ValueError(
                f"Image size {self.image_width}x{self.image_height} must be at least 2x2."
            )
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel = {self.samples_per_pixel} must be positive.")
        if self.max_depth < 0:
            raise ValueError(f"max_depth = {self.max_depth} must not be negative.")
        if self.vfov <= 0.0:
            raise ValueError(f"vfov = {self.vfov} must be positive.")
        if self.aperture < 0.0:
            raise ValueError(f"aperture = {self.aperture} must not be negative.")
        if self.focus_distance <= 0.0:
            raise ValueError(f"focus_distance = {self.focus_distance} must be positive.")

    def make_camera(self) -> ThinLensCamera:
        """Build the camera described by these settings."""
        from spheretracer.camera.thin_lens import ThinLensCamera

        return ThinLensCamera(
            look_from=self.look_from,
            look_at=self.look_at,
            vfov=self.vfov,
            aspect_ratio=self.aspect_ratio,
            aperture=self.aperture,
            focus_distance=self.focus_distance,
            vup=self.vup,
        )
