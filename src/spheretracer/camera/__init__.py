"""Camera module for view and ray generation.

Components:
    thin_lens: Positionable camera with defocus blur (pinhole when the
        aperture is zero)

Ray generation uses normalized image coordinates:
    s in [0, 1]: left to right across image
    t in [0, 1]: bottom to top across image

Camera state lives in Taichi fields written once by setup_camera() and
read by every row task of a render.
"""

from .thin_lens import (
    ThinLensCamera,
    get_camera_info,
    get_ray,
    get_ray_for_pixel,
    get_ray_jittered,
    setup_camera,
)

__all__ = [
    "ThinLensCamera",
    "setup_camera",
    "get_ray",
    "get_ray_for_pixel",
    "get_ray_jittered",
    "get_camera_info",
]
