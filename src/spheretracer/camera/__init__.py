"""Camera module: thin-lens camera with depth of field.

Ray generation uses normalized image coordinates:
    s in [0, 1]: left to right across the image
    t in [0, 1]: bottom to top across the image
"""

from .thin_lens import (
    ThinLensCamera,
    get_camera_info,
    setup_camera,
    shoot_ray_at,
)

__all__ = [
    "ThinLensCamera",
    "setup_camera",
    "shoot_ray_at",
    "get_camera_info",
]
