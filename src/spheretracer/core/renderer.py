"""Host-side render driver with band-wise progress reporting.

This module provides a convenient wrapper around the integrator kernels that
supports:
- Rendering the image in bands of rows
- Progress callbacks between bands
- A generator variant yielding progress
- Saving the result as PPM or PNG

Each band is one kernel launch. Rows inside a band are rendered in parallel;
the launch returns only when every row of the band is done, so progress is
reported between bands from the shared rows-completed counter.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretracer.core.integrator import RenderSettings
    >>> from spheretracer.core.renderer import Renderer
    >>> from spheretracer.scene.presets import create_demo_scene
    >>> from spheretracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_demo_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = Renderer(384, 216)
    >>> renderer.render(RenderSettings(samples_per_pixel=32))
    >>> renderer.save_ppm("image.ppm")
"""

import logging
import time
from collections.abc import Callable, Generator
from pathlib import Path

import numpy as np
import numpy.typing as npt

from spheretracer.core.integrator import (
    RenderSettings,
    clear_render_target,
    get_pixels_numpy,
    get_rows_completed,
    render_rows,
    reset_rows_completed,
    setup_render_target,
)

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (rows_completed, total_rows)
ProgressCallback = Callable[[int, int], None]

# Default number of rows per kernel launch
DEFAULT_BAND_SIZE = 16


class Renderer:
    """Render driver owning the pixel buffer dimensions.

    The renderer delegates to the global integrator buffers (which are
    Taichi fields), so only one image can be in flight at a time.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        """Initialize the renderer.

        Args:
            width: Image width in pixels (max 1920).
            height: Image height in pixels (max 1080).

        Raises:
            ValueError: If dimensions are outside the supported range.
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
    def rows_completed(self) -> int:
        """Get the number of rows finished in the current render."""
        return get_rows_completed()

    def reset(self) -> None:
        """Clear the pixel buffer and progress counter."""
        clear_render_target()

    def render_bands(
        self,
        settings: RenderSettings,
        band_size: int = DEFAULT_BAND_SIZE,
    ) -> Generator[tuple[int, int], None, None]:
        """Render the image band by band, yielding progress after each band.

        Bands run from the bottom row upward.

        Args:
            settings: Sampling parameters.
            band_size: Number of rows per kernel launch.

        Yields:
            Tuple of (rows_completed, total_rows).

        Raises:
            ValueError: If band_size is not positive.

        Example:
            >>> for done, total in renderer.render_bands(settings, band_size=8):
            ...     print(f"{done}/{total} rows")
        """
        if band_size < 1:
            raise ValueError(f"band_size = {band_size} must be at least 1")

        reset_rows_completed()
        for row_start in range(0, self._height, band_size):
            row_end = min(row_start + band_size, self._height)
            render_rows(row_start, row_end, settings)
            done = self.rows_completed
            logger.debug("Rendered rows %d-%d (%d/%d)", row_start, row_end - 1, done, self._height)
            yield (done, self._height)

    def render(
        self,
        settings: RenderSettings,
        band_size: int = DEFAULT_BAND_SIZE,
        callback: ProgressCallback | None = None,
    ) -> float:
        """Render the full image with optional progress callback.

        Overwrites any previous result in the pixel buffer.

        Args:
            settings: Sampling parameters.
            band_size: Number of rows per kernel launch. Smaller bands give
                more frequent progress updates at some launch overhead.
            callback: Optional callback function called after each band.
                Receives (rows_completed, total_rows).

        Returns:
            Elapsed wall-clock time in seconds.

        Example:
            >>> def progress(done, total):
            ...     print(f"\\rrendering {100.0 * done / total:6.2f}%", end="")
            >>> renderer.render(settings, callback=progress)
        """
        logger.info(
            "Rendering %dx%d at %d spp, max depth %d",
            self._width,
            self._height,
            settings.samples_per_pixel,
            settings.max_depth,
        )
        start = time.perf_counter()

        for done, total in self.render_bands(settings, band_size):
            if callback is not None:
                callback(done, total)

        elapsed = time.perf_counter() - start
        logger.info("Rendering took %.2fs", elapsed)
        return elapsed

    def get_pixels_numpy(self) -> npt.NDArray[np.float64]:
        """Get the linear pixel colors, shape (height, width, 3), bottom row first."""
        return get_pixels_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the gamma-encoded 8-bit image, shape (height, width, 3), top row first."""
        from spheretracer.preview.export import encode_pixels

        return encode_pixels(self.get_pixels_numpy())

    def save_ppm(self, filepath: str | Path) -> None:
        """Save the rendered image as a plain-text PPM (P3) file."""
        from spheretracer.preview.export import save_ppm

        save_ppm(self, filepath)

    def save_png(self, filepath: str | Path) -> None:
        """Save the rendered image as a PNG file."""
        from spheretracer.preview.export import save_png

        save_png(self, filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"rows_completed={self.rows_completed})"
        )
