"""Image output: PPM (plain text P3) and PNG.

Rendered pixels arrive as unnormalized sums of samples. Writing an image
divides by the sample count, applies gamma 2 (square root), clamps to
[0, 0.999] and scales by 256, so every channel lands in 0..255.

The P3 format is plain text:

    P3
    <width> <height>
    255
    <r> <g> <b>        one line per pixel, rows top to bottom

Example:
    >>> import numpy as np
    >>> from spheretracer.image.ppm import format_ppm
    >>> sums = np.full((2, 2, 3), 4.0, dtype=np.float32)
    >>> print(format_ppm(sums, samples_per_pixel=4), end="")
    P3
    2 2
    255
    255 255 255
    255 255 255
    255 255 255
    255 255 255
"""

import io
import logging
from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

# Largest channel value in the output
RGB_MAXIMUM_VALUE = 255

# Gamma-corrected intensities are clamped below 1 before scaling by 256
_MAX_INTENSITY = 0.999

# File suffixes handled by save_image
PPM_SUFFIXES = (".ppm",)
PNG_SUFFIXES = (".png",)


def to_rgb8(
    color_sums: npt.NDArray[np.floating],
    samples_per_pixel: int,
) -> npt.NDArray[np.uint8]:
    """Convert per-pixel sample sums to 8-bit gamma-2 colors.

    Args:
        color_sums: Array of shape (..., 3) holding the sum of all samples.
        samples_per_pixel: Number of samples summed into each pixel.

    Returns:
        Array of the same shape with dtype uint8.

    Raises:
        ValueError: If samples_per_pixel is not positive.
    """
    if samples_per_pixel < 1:
        raise ValueError(f"samples_per_pixel = {samples_per_pixel} must be positive.")

    mean = np.asarray(color_sums, dtype=np.float64) / samples_per_pixel
    # Negative or NaN sums map to black
    mean = np.nan_to_num(np.maximum(mean, 0.0), nan=0.0, posinf=1.0)
    corrected = np.clip(np.sqrt(mean), 0.0, _MAX_INTENSITY)
    return (256.0 * corrected).astype(np.uint8)


def ppm_header(width: int, height: int) -> str:
    """Return the P3 header for an image of the given size."""
    return f"P3\n{width} {height}\n{RGB_MAXIMUM_VALUE}\n"


def write_ppm(
    stream: TextIO,
    color_sums: npt.NDArray[np.floating],
    samples_per_pixel: int,
) -> None:
    """Write an image as plain-text PPM.

    Args:
        stream: Text stream to write to (for example sys.stdout).
        color_sums: Array of shape (height, width, 3), top row first.
        samples_per_pixel: Number of samples summed into each pixel.
    """
    pixels = to_rgb8(color_sums, samples_per_pixel)
    height, width = pixels.shape[:2]

    stream.write(ppm_header(width, height))
    for row in pixels:
        stream.write("".join(f"{r} {g} {b}\n" for r, g, b in row.tolist()))


def format_ppm(color_sums: npt.NDArray[np.floating], samples_per_pixel: int) -> str:
    """Return an image as a plain-text PPM string."""
    buffer = io.StringIO()
    write_ppm(buffer, color_sums, samples_per_pixel)
    return buffer.getvalue()


def save_png(
    color_sums: npt.NDArray[np.floating],
    samples_per_pixel: int,
    filepath: str | Path,
) -> None:
    """Save an image as an 8-bit PNG using Pillow.

    Applies the same averaging and gamma as the PPM writer.
    """
    pixels = to_rgb8(color_sums, samples_per_pixel)
    pil_image = PILImage.fromarray(pixels)
    pil_image.save(filepath)


def save_image(
    color_sums: npt.NDArray[np.floating],
    samples_per_pixel: int,
    filepath: str | Path,
) -> None:
    """Save an image, choosing the format from the file suffix.

    Args:
        color_sums: Array of shape (height, width, 3), top row first.
        samples_per_pixel: Number of samples summed into each pixel.
        filepath: Output path ending in .ppm or .png.

    Raises:
        ValueError: If the suffix is not a supported format.
    """
    path = Path(filepath)
    suffix = path.suffix.lower()

    if suffix in PPM_SUFFIXES:
        with path.open("w", encoding="ascii") as stream:
            write_ppm(stream, color_sums, samples_per_pixel)
    elif suffix in PNG_SUFFIXES:
        save_png(color_sums, samples_per_pixel, path)
    else:
        raise ValueError(f"Unsupported image format {suffix!r}; use .ppm or .png")

    logger.info("Saved image to %s", path)
