"""Preview module for image output.

Components:
    export: Gamma encoding, PPM (P3) and PNG writers

Example:
    >>> from spheretracer.preview import save_ppm
    >>> from spheretracer.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(384, 216)
    >>> renderer.render(settings)
    >>> save_ppm(renderer, "image.ppm")
"""

from spheretracer.preview.export import (
    compute_rmse,
    encode_pixels,
    save_png,
    save_png_from_array,
    save_ppm,
    save_ppm_from_array,
    write_ppm,
)

__all__ = [
    "encode_pixels",
    "write_ppm",
    "save_ppm",
    "save_ppm_from_array",
    "save_png",
    "save_png_from_array",
    "compute_rmse",
]
