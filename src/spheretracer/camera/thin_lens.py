"""Thin-lens camera model for perspective ray generation with defocus blur.

This module implements a positionable camera that generates primary rays for
rendering. The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view specification
- Arbitrary aspect ratios
- Depth of field through a finite aperture and a focus distance
- Jittered sampling for anti-aliasing

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The image plane sits at ``focus_dist`` in front of the camera, so points at
that distance stay sharp while ray origins are spread over a lens disk of
radius ``aperture / 2``. With ``aperture = 0`` the camera is a pinhole.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretracer.camera.thin_lens import ThinLensCamera, setup_camera, get_ray
    >>>
    >>> camera = ThinLensCamera(
    ...     lookfrom=(3.0, 3.0, 2.0),
    ...     lookat=(0.0, 0.0, -1.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=16.0 / 9.0,
    ...     aperture=2.0,
    ...     focus_dist=5.196,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through image center
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from spheretracer.core.ray import Ray, make_ray
from spheretracer.core.vector import random_in_unit_disk, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class ThinLensCamera:
    """Configuration for a thin-lens (perspective) camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 disables depth of field.
        focus_dist: Distance from the camera to the plane of perfect focus.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float]
    vfov: float
    aspect_ratio: float
    aperture: float = 0.0
    focus_dist: float = 1.0


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

# Camera origin (position)
_camera_origin = ti.Vector.field(3, dtype=ti.f64, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f64, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f64, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f64, shape=())  # Backward (opposite view)

# Viewport vectors for ray computation, scaled to the focus plane
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f64, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=ti.f64, shape=())  # Full height
_lower_left_corner = ti.Vector.field(3, dtype=ti.f64, shape=())  # Lower-left of viewport

_lens_radius = ti.field(dtype=ti.f64, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def _validate_camera(camera: ThinLensCamera) -> None:
    """Reject configurations that would produce degenerate rays."""
    if not 0.0 < camera.vfov < 180.0:
        raise ValueError(f"vfov = {camera.vfov} is outside (0, 180) degrees")
    if camera.aspect_ratio <= 0.0:
        raise ValueError(f"aspect_ratio = {camera.aspect_ratio} must be positive")
    if camera.aperture < 0.0:
        raise ValueError(f"aperture = {camera.aperture} must not be negative")
    if camera.focus_dist <= 0.0:
        raise ValueError(f"focus_dist = {camera.focus_dist} must be positive")


def setup_camera(camera: ThinLensCamera) -> None:
    """Initialize camera state from configuration.

    Computes the camera's orthonormal basis (u, v, w), the viewport on the
    focus plane and the lens radius. This must be called before rendering,
    and the camera state must not change while a render is running.

    Args:
        camera: Camera configuration with position, orientation, FOV and lens.

    Raises:
        ValueError: If the configuration is degenerate: lookfrom equals
            lookat, vup is parallel to the view direction, or a scalar
            parameter is out of range.
    """
    _validate_camera(camera)

    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)

    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    # w points from lookat toward lookfrom (backward)
    w = lookfrom - lookat
    w_norm = np.linalg.norm(w)
    if w_norm == 0.0:
        raise ValueError("lookfrom and lookat must be different points")
    w = w / w_norm

    # u points right (perpendicular to w and vup)
    u = np.cross(vup, w)
    u_norm = np.linalg.norm(u)
    if u_norm < 1e-12:
        raise ValueError("vup must not be parallel to the view direction")
    u = u / u_norm

    # v points up in the camera's frame
    v = np.cross(w, u)

    horizontal = camera.focus_dist * viewport_width * u
    vertical = camera.focus_dist * viewport_height * v
    lower_left = lookfrom - horizontal / 2.0 - vertical / 2.0 - camera.focus_dist * w

    _camera_origin[None] = lookfrom.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()
    _lens_radius[None] = camera.aperture / 2.0


# =============================================================================
# Ray Generation (Taichi functions)
# =============================================================================


@ti.func
def get_ray(s: ti.f64, t: ti.f64) -> Ray:
    """Generate a ray through normalized image coordinates (s, t).

    The ray origin is sampled on the lens disk around the camera position and
    the ray passes through the point (s, t) of the viewport on the focus
    plane:
    - s = 0: left edge, s = 1: right edge
    - t = 0: bottom edge, t = 1: top edge

    Args:
        s: Horizontal coordinate in [0, 1] (left to right).
        t: Vertical coordinate in [0, 1] (bottom to top).

    Returns:
        A Ray whose direction is not normalized.
    """
    rd = _lens_radius[None] * random_in_unit_disk()
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y

    origin = _camera_origin[None] + offset
    direction = (
        _lower_left_corner[None]
        + s * _viewport_horizontal[None]
        + t * _viewport_vertical[None]
        - _camera_origin[None]
        - offset
    )

    return make_ray(origin, direction)


@ti.func
def get_ray_for_pixel(
    col: ti.i32,
    row: ti.i32,
    width: ti.i32,
    height: ti.i32,
    offset_u: ti.f64,
    offset_v: ti.f64,
) -> Ray:
    """Generate a ray through a pixel with an explicit sub-pixel offset.

    Pixel (0, 0) maps to the lower-left corner of the viewport and pixel
    (width - 1, height - 1) to the upper-right one.

    Args:
        col: Pixel column (0 = left).
        row: Pixel row (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
        offset_u: Horizontal sub-pixel offset, in pixels.
        offset_v: Vertical sub-pixel offset, in pixels.

    Returns:
        A Ray through the requested image position.
    """
    s = (ti.cast(col, ti.f64) + offset_u) / ti.cast(width - 1, ti.f64)
    t = (ti.cast(row, ti.f64) + offset_v) / ti.cast(height - 1, ti.f64)
    return get_ray(s, t)


@ti.func
def get_ray_jittered(col: ti.i32, row: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate a jittered ray for anti-aliasing.

    Adds a uniform random offset in [0, 1) to both pixel coordinates. When
    accumulated over multiple samples, this produces smooth edges.

    Example:
        @ti.kernel
        def render():
            for row, col in ti.ndrange(height, width):
                ray = get_ray_jittered(col, row, width, height)
    """
    return get_ray_for_pixel(
        col, row, width, height, ti.random(ti.f64), ti.random(ti.f64)
    )


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, object]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left
        (each a 3-tuple of floats) and lens_radius.
    """
    vectors = {
        "origin": _camera_origin,
        "u": _camera_u,
        "v": _camera_v,
        "w": _camera_w,
        "horizontal": _viewport_horizontal,
        "vertical": _viewport_vertical,
        "lower_left": _lower_left_corner,
    }
    info: dict[str, object] = {}
    for name, vec_field in vectors.items():
        vec = vec_field[None]
        info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    info["lens_radius"] = float(_lens_radius[None])
    return info
