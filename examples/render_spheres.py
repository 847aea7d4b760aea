#!/usr/bin/env python3
"""Render the five-sphere demo scene.

This script renders the demo scene (diffuse ground and center spheres, a
hollow glass sphere and a gold mirror sphere) with depth of field, printing
progress as bands of rows finish, and writes a PPM image.

Usage:
    python examples/render_spheres.py [options]

Options:
    --width WIDTH             Image width in pixels (default: 1920)
    --aspect-ratio RATIO      Width / height (default: 1.7778)
    --samples SAMPLES         Number of samples per pixel (default: 128)
    --max-depth DEPTH         Maximum bounces per path (default: 50)
    --aperture APERTURE       Lens diameter, 0 for a pinhole (default: 2.0)
    --band-size ROWS          Rows per progress update (default: 16)
    --seed SEED               Random seed (default: 0)
    --arch {cpu,gpu}          Taichi backend (default: cpu)
    --output OUTPUT           Output file, .ppm or .png (default: image.ppm)
    --quiet                   Suppress progress output
    --verbose                 Log render and file-write details

Example:
    python examples/render_spheres.py --width 400 --samples 32 --output small.ppm
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

DEFAULT_ASPECT_RATIO = 16.0 / 9.0


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the five-sphere demo scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1920,
        help="Image width in pixels (default: 1920)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=DEFAULT_ASPECT_RATIO,
        help="Image width divided by height (default: 16/9)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=128,
        help="Number of samples per pixel (default: 128)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum bounces per path (default: 50)",
    )
    parser.add_argument(
        "--aperture",
        type=float,
        default=2.0,
        help="Lens diameter, 0 for a pinhole camera (default: 2.0)",
    )
    parser.add_argument(
        "--band-size",
        type=int,
        default=16,
        help="Rows rendered between progress updates (default: 16)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed (default: 0)",
    )
    parser.add_argument(
        "--arch",
        choices=["cpu", "gpu"],
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="image.ppm",
        help="Output file path, .ppm or .png (default: image.ppm)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log render and file-write details",
    )
    return parser.parse_args()


def render_spheres(
    width: int = 1920,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
    num_samples: int = 128,
    max_depth: int = 50,
    aperture: float = 2.0,
    output_path: str = "image.ppm",
    band_size: int = 16,
    quiet: bool = False,
) -> Path:
    """Render the demo scene and save to file.

    Args:
        width: Image width in pixels. The height is width / aspect_ratio,
            rounded to the nearest integer.
        aspect_ratio: Image width divided by height.
        num_samples: Number of samples per pixel.
        max_depth: Maximum bounces per path.
        aperture: Lens diameter.
        output_path: Output file path. A .png suffix writes PNG, anything
            else writes PPM (P3).
        band_size: Number of rows to render between progress updates.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from spheretracer.camera.thin_lens import setup_camera
    from spheretracer.core.integrator import RenderSettings
    from spheretracer.core.renderer import Renderer
    from spheretracer.preview.export import save_png, save_ppm
    from spheretracer.scene.presets import create_demo_scene

    height = round(width / aspect_ratio)

    if not quiet:
        print(f"Creating demo scene ({width}x{height})...")

    _, camera = create_demo_scene(aspect_ratio=aspect_ratio, aperture=aperture)
    setup_camera(camera)

    settings = RenderSettings(samples_per_pixel=num_samples, max_depth=max_depth)
    renderer = Renderer(width, height)

    def progress_callback(rows_done: int, total_rows: int) -> None:
        if not quiet:
            print(f"\rrendering {100.0 * rows_done / total_rows:6.2f}%", end="", flush=True)

    if not quiet:
        progress_callback(0, height)

    render_time = renderer.render(settings, band_size=band_size, callback=progress_callback)

    if not quiet:
        print(f"\nRendering took {render_time:.2f}s")

    output_file = Path(output_path)
    start_time = time.perf_counter()
    if output_file.suffix.lower() == ".png":
        save_png(renderer, output_file)
    else:
        save_ppm(renderer, output_file)

    if not quiet:
        print(f"Writing took {time.perf_counter() - start_time:.2f}s")
        print(f"Saved to: {output_file.absolute()}")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    arch = ti.gpu if args.arch == "gpu" else ti.cpu
    ti.init(arch=arch, default_fp=ti.f64, random_seed=args.seed)

    try:
        render_spheres(
            width=args.width,
            aspect_ratio=args.aspect_ratio,
            num_samples=args.samples,
            max_depth=args.max_depth,
            aperture=args.aperture,
            output_path=args.output,
            band_size=args.band_size,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
