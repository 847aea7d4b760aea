"""Path tracing integrator and row-parallel render kernels.

This module implements the Monte Carlo estimate of the color seen along a
camera ray and the data-parallel driver that turns many random rays per
pixel into a pixel buffer.

A path starts at the camera and bounces off surfaces according to their
materials. Each bounce multiplies the running throughput by the material's
attenuation. The path ends when:
    - it escapes the scene: the sky gradient, times the throughput
    - a material absorbs it: black
    - the depth bound is exhausted: black

Rendering is split into row tasks. The outermost loop of the render kernel
runs over image rows, which Taichi distributes over its thread pool. Each
row task writes only the pixels of its own row and then bumps a shared
rows-completed counter atomically.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretracer.core.integrator import (
    ...     RenderSettings, render_image, setup_render_target
    ... )
    >>> from spheretracer.scene.presets import create_demo_scene
    >>> from spheretracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_demo_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(384, 216)
    >>> render_image(RenderSettings(samples_per_pixel=16))
"""

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from spheretracer.camera.thin_lens import get_ray_for_pixel
from spheretracer.core.vector import normalize, vec3
from spheretracer.materials.dielectric import scatter_dielectric_by_id
from spheretracer.materials.lambertian import scatter_lambertian_by_id
from spheretracer.materials.metal import scatter_metal_by_id
from spheretracer.scene.intersection import intersect_scene
from spheretracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# =============================================================================
# Rendering Constants
# =============================================================================

# Default maximum ray bounces (path length)
MAX_DEPTH = 50

# Lower bound of the hit interval; keeps scattered rays from re-hitting
# their own surface (shadow acne)
T_MIN = 0.001
T_MAX = tm.inf

# Sky gradient endpoints
SKY_HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = vec3(0.5, 0.7, 1.0)


@dataclass
class RenderSettings:
    """Per-render sampling parameters.

    Attributes:
        samples_per_pixel: Number of camera rays averaged into each pixel.
        max_depth: Maximum number of surface interactions along a path.
            0 renders black.
        jitter: Randomize the sample position inside each pixel. When False
            every sample goes through the pixel's lower-left corner.
        normal_shading: Shade the first hit with 0.5 * (normal + 1) instead
            of tracing the path. Misses still show the sky.
    """

    samples_per_pixel: int = 128
    max_depth: int = MAX_DEPTH
    jitter: bool = True
    normal_shading: bool = False

    def __post_init__(self) -> None:
        if self.samples_per_pixel < 1:
            raise ValueError(
                f"samples_per_pixel = {self.samples_per_pixel} must be at least 1"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth = {self.max_depth} must not be negative")


# =============================================================================
# Render Target (Pixel Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 1920
MAX_IMAGE_HEIGHT = 1080

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Linear pixel colors indexed [row, col], row 0 at the bottom of the image
_pixels = ti.Vector.field(3, dtype=ti.f64, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Number of rows finished since the last reset
_rows_completed = ti.field(dtype=ti.i32, shape=())

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers. The pixel
    buffer is preallocated to MAX_IMAGE_HEIGHT x MAX_IMAGE_WIDTH.

    Args:
        width: Image width in pixels, in [2, MAX_IMAGE_WIDTH].
        height: Image height in pixels, in [2, MAX_IMAGE_HEIGHT].

    Raises:
        ValueError: If dimensions exceed the maximum supported size or are
            smaller than 2 (pixel coordinates are divided by size - 1).
    """
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    if width < 2 or height < 2:
        raise ValueError(f"Image dimensions ({width}x{height}) must be at least 2x2")

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the pixel buffer and the rows-completed counter."""
    _pixels.fill(0.0)
    _rows_completed[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_rows_completed() -> int:
    """Get the number of rows finished since the last reset."""
    return int(_rows_completed[None])


def reset_rows_completed() -> None:
    """Reset the rows-completed counter without touching the pixels."""
    _rows_completed[None] = 0


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch to the scattering function of the hit material.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The unit surface normal, facing the incoming ray.
        front_face: 1 if the ray hit the outside of the surface.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). An
        unknown material ID absorbs the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter = scatter_lambertian_by_id(
            type_index, normal
        )

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal_by_id(
            type_index, incident_direction, normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric_by_id(
            type_index, incident_direction, normal, front_face
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def background(direction: vec3) -> vec3:
    """Sky color seen along a direction that escapes the scene.

    Blends linearly from white at the bottom (y = -1) to light blue at the
    top (y = +1) of the unit direction.
    """
    t = 0.5 * (normalize(direction).y + 1.0)
    return (1.0 - t) * SKY_HORIZON_COLOR + t * SKY_ZENITH_COLOR


@ti.func
def ray_color(
    origin: vec3,
    direction: vec3,
    max_depth: ti.i32,
    normal_shading: ti.i32,
) -> vec3:
    """Estimate the color seen along a ray.

    Iterative form of the recursive estimator: each bounce scales the
    throughput by the attenuation of the material hit, and the sky color
    reached at the end of the path is weighted by the final throughput.

    Args:
        origin: Ray origin.
        direction: Ray direction (any non-zero length).
        max_depth: Maximum number of surface interactions. 0 returns black.
        normal_shading: If 1, return 0.5 * (normal + 1) at the first hit.

    Returns:
        The linear RGB color estimate for this path.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    ray_origin = origin
    ray_direction = direction

    # Active flag for path continuation (no break out of the bounce loop)
    active = 1

    # Bounces depend on each other, never parallelize this loop
    ti.loop_config(serialize=True)
    for _ in range(max_depth):
        if active == 1:
            rec = intersect_scene(ray_origin, ray_direction, T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * background(ray_direction)
                active = 0
            elif normal_shading == 1:
                color = 0.5 * (rec.normal + vec3(1.0, 1.0, 1.0))
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = _scatter_material(
                    rec.material_id, ray_direction, rec.normal, rec.front_face
                )

                if did_scatter == 0:
                    # Absorbed
                    active = 0
                else:
                    throughput *= attenuation
                    ray_origin = rec.point
                    ray_direction = scattered_direction

    return color


@ti.func
def sample_pixel(
    col: ti.i32,
    row: ti.i32,
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
    jitter: ti.i32,
    normal_shading: ti.i32,
) -> vec3:
    """Trace one camera ray through a pixel and return its color estimate."""
    offset_u = ti.cast(0.0, ti.f64)
    offset_v = ti.cast(0.0, ti.f64)
    if jitter == 1:
        offset_u = ti.random(ti.f64)
        offset_v = ti.random(ti.f64)

    ray = get_ray_for_pixel(col, row, width, height, offset_u, offset_v)
    return ray_color(ray.origin, ray.direction, max_depth, normal_shading)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    jitter: ti.i32,
    normal_shading: ti.i32,
):
    """Render the rows in [row_start, row_end).

    The outermost loop is parallelized: one task per row. Each pixel is
    written exactly once, with the average of its samples.
    """
    for row in range(row_start, row_end):
        for col in range(width):
            color = vec3(0.0, 0.0, 0.0)
            for _ in range(samples_per_pixel):
                color += sample_pixel(
                    col, row, width, height, max_depth, jitter, normal_shading
                )
            _pixels[row, col] = color / ti.cast(samples_per_pixel, ti.f64)

        ti.atomic_add(_rows_completed[None], 1)


@ti.kernel
def _render_single_pixel(
    col: ti.i32,
    row: ti.i32,
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
    jitter: ti.i32,
    normal_shading: ti.i32,
) -> vec3:
    """Render a single sample for a specific pixel.

    Used for testing and debugging individual pixel rendering.
    """
    return sample_pixel(col, row, width, height, max_depth, jitter, normal_shading)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_sample(col: int, row: int, settings: RenderSettings) -> tuple[float, float, float]:
    """Render a single sample for a specific pixel.

    This is a Python-callable function for testing. For production rendering,
    use render_image() which processes all rows in parallel. The sample is
    not stored in the pixel buffer.

    Args:
        col: Pixel column (0 = left).
        row: Pixel row (0 = bottom).
        settings: Sampling parameters; samples_per_pixel is ignored.

    Returns:
        Tuple of (R, G, B) linear color values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    color = _render_single_pixel(
        col,
        row,
        width,
        height,
        settings.max_depth,
        int(settings.jitter),
        int(settings.normal_shading),
    )

    return (float(color[0]), float(color[1]), float(color[2]))


def render_rows(row_start: int, row_end: int, settings: RenderSettings) -> None:
    """Render a band of rows into the pixel buffer.

    Returns once every row of the band is written.

    Args:
        row_start: First row to render (0 = bottom).
        row_end: One past the last row to render.
        settings: Sampling parameters.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the band is outside the image.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    if not 0 <= row_start <= row_end <= height:
        raise ValueError(f"Row band [{row_start}, {row_end}) is outside [0, {height})")

    _render_rows(
        row_start,
        row_end,
        width,
        height,
        settings.samples_per_pixel,
        settings.max_depth,
        int(settings.jitter),
        int(settings.normal_shading),
    )


def render_image(settings: RenderSettings) -> None:
    """Render every row of the image into the pixel buffer.

    Resets the rows-completed counter first. Rendering again overwrites the
    previous result.

    Args:
        settings: Sampling parameters.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    _, height = get_image_dimensions()
    reset_rows_completed()
    render_rows(0, height, settings)


def get_pixels_numpy() -> npt.NDArray[np.float64]:
    """Get the linear pixel colors as a NumPy array.

    The array shape is (height, width, 3) with row 0 at the bottom of the
    image. No clamping or gamma is applied.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _pixels.to_numpy()
    return np.ascontiguousarray(full_image[:height, :width, :], dtype=np.float64)
