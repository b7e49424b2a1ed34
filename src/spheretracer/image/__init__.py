"""Image output in plain-text PPM and PNG."""

from .ppm import format_ppm, ppm_header, save_image, save_png, to_rgb8, write_ppm

__all__ = [
    "to_rgb8",
    "ppm_header",
    "write_ppm",
    "format_ppm",
    "save_png",
    "save_image",
]
