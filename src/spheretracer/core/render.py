"""Render driver: scanline-by-scanline Monte Carlo rendering.

Each pixel is sampled samples_per_pixel times with a random sub-pixel
offset (anti-aliasing) and a random lens position (depth of field). The
render target stores the unnormalized sum of all samples per pixel along
with the number of samples taken; averaging and gamma are applied when the
image is written out (see spheretracer.image.ppm).

Scanlines are rendered from the top of the image down so progress can be
reported in the same order the image is written. Within a scanline,
Taichi runs one parallel lane per pixel column.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.camera.thin_lens import setup_camera
    >>> from spheretracer.config import RenderConfig
    >>> from spheretracer.core.render import Renderer
    >>> from spheretracer.scene.generator import create_random_spheres_scene
    >>>
    >>> config = RenderConfig(image_width=300, samples_per_pixel=10)
    >>> scene = create_random_spheres_scene(seed=7)
    >>> setup_camera(config.make_camera())
    >>> renderer = Renderer(config.image_width, config.image_height)
    >>> renderer.render(config.samples_per_pixel, config.max_depth)
    >>> sums = renderer.get_color_sums_numpy()
"""

import logging
import time
from collections.abc import Callable

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from spheretracer.camera.thin_lens import shoot_ray_at
from spheretracer.core.tracer import DEFAULT_MAX_DEPTH, trace_ray

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Pixel coordinates need width - 1 and height - 1 to be positive
MIN_IMAGE_SIZE = 2

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Sum of sample colors per pixel, indexed [x, y] with y = 0 the bottom row
_color_sum = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Number of samples accumulated per pixel
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.

    Raises:
        ValueError: If a dimension is below MIN_IMAGE_SIZE or above the
            preallocated maximum.
    """
    if width < MIN_IMAGE_SIZE or height < MIN_IMAGE_SIZE:
        raise ValueError(
            f"Image dimensions ({width}x{height}) must be at least "
            f"{MIN_IMAGE_SIZE}x{MIN_IMAGE_SIZE}"
        )
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1
    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_sum.fill(0.0)
    _sample_count.fill(0)


def reset_render_target() -> None:
    """Clear the buffers and mark the render target as not set up."""
    clear_render_target()
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_scanline(
    row: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
):
    """Render and accumulate samples_per_pixel samples for every pixel of a row.

    Args:
        row: Scanline index, 0 = bottom of the image.
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of samples to add to each pixel.
        max_depth: Bounce limit per path.
    """
    for i in range(width):
        color = vec3(0.0, 0.0, 0.0)
        for _ in range(samples_per_pixel):
            s = (ti.cast(i, ti.f32) + ti.random(ti.f32)) / ti.cast(width - 1, ti.f32)
            t = (ti.cast(row, ti.f32) + ti.random(ti.f32)) / ti.cast(height - 1, ti.f32)
            color += trace_ray(shoot_ray_at(s, t), max_depth)

        _color_sum[i, row] += color
        _sample_count[i, row] += samples_per_pixel


def render_scanline(row: int, samples_per_pixel: int, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
    """Render one scanline into the render target.

    Args:
        row: Scanline index, 0 = bottom of the image.
        samples_per_pixel: Number of samples to add to each pixel.
        max_depth: Bounce limit per path.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If row is outside the image.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    if not 0 <= row < height:
        raise ValueError(f"Row {row} is outside the image (height {height})")

    _render_scanline(row, width, height, samples_per_pixel, max_depth)


# =============================================================================
# Renderer
# =============================================================================


class Renderer:
    """Renders the current scene through the current camera.

    The scene (spheres and materials) and the camera must be set up before
    calling render(). Both are read-only while rendering.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        """Initialize the renderer and its render target.

        Raises:
            ValueError: If the dimensions are out of range.
        """
        self._width = width
        self._height = height
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def sample_count(self) -> int:
        """Get the number of samples accumulated in the top-left pixel."""
        _check_render_target_initialized()
        return int(_sample_count[0, self._height - 1])

    def reset(self) -> None:
        """Clear the accumulated samples, keeping the image dimensions."""
        clear_render_target()

    def render(
        self,
        samples_per_pixel: int,
        max_depth: int = DEFAULT_MAX_DEPTH,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render every scanline, top of the image first.

        Args:
            samples_per_pixel: Number of samples to add to each pixel.
            max_depth: Bounce limit per path.
            callback: Optional callback called after each scanline.
                Receives (rows_done, total_rows).

        Raises:
            ValueError: If samples_per_pixel is not positive or max_depth is
                negative.
        """
        if samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel = {samples_per_pixel} must be positive.")
        if max_depth < 0:
            raise ValueError(f"max_depth = {max_depth} must not be negative.")

        _check_render_target_initialized()

        logger.info(
            "Rendering %dx%d at %d samples per pixel (max depth %d)",
            self._width,
            self._height,
            samples_per_pixel,
            max_depth,
        )
        start_time = time.perf_counter()

        for rows_done, row in enumerate(range(self._height - 1, -1, -1), start=1):
            _render_scanline(row, self._width, self._height, samples_per_pixel, max_depth)
            if callback is not None:
                callback(rows_done, self._height)

        ti.sync()
        logger.info("Render finished in %.2fs", time.perf_counter() - start_time)

    def get_color_sums_numpy(self) -> npt.NDArray[np.float32]:
        """Get the unnormalized per-pixel color sums.

        Returns:
            NumPy array of shape (height, width, 3), top row first.
        """
        _check_render_target_initialized()

        full_sums = _color_sum.to_numpy()
        sums = full_sums[: self._width, : self._height, :]

        # Transpose from (width, height, 3) to (height, width, 3) for standard image format
        sums = np.transpose(sums, (1, 0, 2))

        # Flip vertically (row 0 is the bottom of the image)
        return np.flipud(sums).astype(np.float32)

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the per-pixel mean color (linear, unclamped).

        Returns:
            NumPy array of shape (height, width, 3), top row first.
        """
        sums = self.get_color_sums_numpy()
        counts = _sample_count.to_numpy()[: self._width, : self._height]
        counts = np.flipud(np.transpose(counts)).astype(np.float32)
        return sums / np.maximum(counts, 1.0)[..., np.newaxis]

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return f"Renderer(width={self.width}, height={self.height}, samples={self.sample_count})"
