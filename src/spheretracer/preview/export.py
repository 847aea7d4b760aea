"""Image export utilities for rendered images.

This module turns the linear pixel buffer into 8-bit color and writes it to
files. Encoding is the same for every format:

    - gamma 2 correction (square root of each channel)
    - quantization to floor(256 * value), clamped to [0, 255]
    - rows reordered from bottom-to-top to top-to-bottom

Supported formats:
    - PPM P3 (plain-text portable pixmap)
    - PNG (8-bit via Pillow)

Example:
    >>> from spheretracer.preview.export import save_ppm
    >>> from spheretracer.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(384, 216)
    >>> renderer.render(settings)
    >>> save_ppm(renderer, "image.ppm")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from spheretracer.core.renderer import Renderer

logger = logging.getLogger(__name__)

# Maximum color value written in the PPM header
PPM_MAX_VALUE = 255


def encode_pixels(pixels: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert linear bottom-to-top pixels to 8-bit top-to-bottom color.

    Args:
        pixels: Linear color array of shape (H, W, 3), row 0 at the bottom.
            Negative and NaN values are treated as 0.

    Returns:
        Array of shape (H, W, 3) with dtype uint8, row 0 at the top.

    Raises:
        ValueError: If the array is not of shape (H, W, 3).
    """
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected pixels of shape (H, W, 3), got {pixels.shape}")

    linear = np.maximum(np.nan_to_num(pixels.astype(np.float64), nan=0.0), 0.0)
    gamma_corrected = np.sqrt(linear)
    quantized = np.clip(np.floor(256.0 * gamma_corrected), 0, PPM_MAX_VALUE)

    return quantized[::-1].astype(np.uint8)


def write_ppm(pixels: npt.NDArray[np.floating], stream: TextIO) -> None:
    """Write linear pixels to a text stream in PPM P3 format.

    The output is the header lines ``P3``, ``<width> <height>`` and ``255``,
    followed by one ``r g b`` line per pixel, top row first, left to right.

    Args:
        pixels: Linear color array of shape (H, W, 3), row 0 at the bottom.
        stream: Writable text stream.
    """
    encoded = encode_pixels(pixels)
    height, width, _ = encoded.shape

    stream.write("P3\n")
    stream.write(f"{width} {height}\n")
    stream.write(f"{PPM_MAX_VALUE}\n")
    np.savetxt(stream, encoded.reshape(-1, 3), fmt="%d")


def save_ppm_from_array(
    pixels: npt.NDArray[np.floating],
    filepath: str | Path,
) -> None:
    """Save linear bottom-to-top pixels as a PPM P3 file.

    Raises:
        OSError: If the file cannot be written.
    """
    with open(filepath, "w", encoding="ascii") as stream:
        write_ppm(pixels, stream)
    logger.info("Wrote %dx%d PPM image to %s", pixels.shape[1], pixels.shape[0], filepath)


def save_ppm(renderer: Renderer, filepath: str | Path) -> None:
    """Save the renderer's current image as a PPM P3 file.

    Args:
        renderer: The Renderer instance to save.
        filepath: Output file path (should end in .ppm).

    Raises:
        OSError: If the file cannot be written.
    """
    save_ppm_from_array(renderer.get_pixels_numpy(), filepath)


def save_png_from_array(
    pixels: npt.NDArray[np.floating],
    filepath: str | Path,
) -> None:
    """Save linear bottom-to-top pixels as an 8-bit PNG file.

    Uses the same gamma and quantization as the PPM writer.

    Raises:
        OSError: If the file cannot be written.
    """
    image_uint8 = encode_pixels(pixels)
    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath, format="PNG")
    logger.info("Wrote %dx%d PNG image to %s", pixels.shape[1], pixels.shape[0], filepath)


def save_png(renderer: Renderer, filepath: str | Path) -> None:
    """Save the renderer's current image as a PNG file.

    Args:
        renderer: The Renderer instance to save.
        filepath: Output file path (should end in .png).
    """
    save_png_from_array(renderer.get_pixels_numpy(), filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
