"""Preset scenes.

This module provides factory functions for ready-made scenes:

- The demo scene: a yellow diffuse ground sphere, a blue diffuse sphere in
  the center, a hollow glass sphere on the left (a glass sphere with a
  slightly smaller negative-radius sphere inside it), and a polished gold
  metal sphere on the right, seen from above with a wide aperture.
- The two-sphere scene: a small diffuse sphere resting on a huge ground
  sphere, seen through a pinhole camera at the origin. Its geometry is simple
  enough to predict pixels exactly, which makes it useful for checks.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretracer.scene.presets import create_demo_scene
    >>> from spheretracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_demo_scene()
    >>> setup_camera(camera)
    >>> # Now render using the scene and camera
"""

import math

from spheretracer.camera.thin_lens import ThinLensCamera
from spheretracer.scene.manager import SceneManager

# =============================================================================
# Demo Scene Constants
# =============================================================================

DEFAULT_ASPECT_RATIO = 16.0 / 9.0

GROUND_ALBEDO = (0.8, 0.8, 0.0)
CENTER_ALBEDO = (0.1, 0.2, 0.5)
GLASS_REFRACTIVE_INDEX = 1.5
GOLD_ALBEDO = (0.8, 0.6, 0.2)
GOLD_FUZZ = 0.0

DEMO_LOOKFROM = (3.0, 3.0, 2.0)
DEMO_LOOKAT = (0.0, 0.0, -1.0)
DEMO_VFOV = 20.0
DEMO_APERTURE = 2.0


def create_demo_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
    aperture: float = DEMO_APERTURE,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the five-sphere demo scene.

    The camera focuses on the center sphere: the focus distance is the
    distance from lookfrom to lookat.

    Args:
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. Pass 0 for a pinhole camera.

    Returns:
        A tuple of (SceneManager, ThinLensCamera).
    """
    scene = SceneManager()

    ground_mat = scene.add_lambertian_material(albedo=GROUND_ALBEDO)
    center_mat = scene.add_lambertian_material(albedo=CENTER_ALBEDO)
    glass_mat = scene.add_dielectric_material(refractive_index=GLASS_REFRACTIVE_INDEX)
    gold_mat = scene.add_metal_material(albedo=GOLD_ALBEDO, fuzz=GOLD_FUZZ)

    scene.add_sphere(center=(0.0, -100.5, -1.0), radius=100.0, material_id=ground_mat)
    scene.add_sphere(center=(0.0, 0.0, -1.0), radius=0.5, material_id=center_mat)
    # Hollow glass: outer shell plus an inner sphere with flipped normals
    scene.add_sphere(center=(-1.0, 0.0, -1.0), radius=0.5, material_id=glass_mat)
    scene.add_sphere(center=(-1.0, 0.0, -1.0), radius=-0.45, material_id=glass_mat)
    scene.add_sphere(center=(1.0, 0.0, -1.0), radius=0.5, material_id=gold_mat)

    focus_dist = math.dist(DEMO_LOOKFROM, DEMO_LOOKAT)
    camera = ThinLensCamera(
        lookfrom=DEMO_LOOKFROM,
        lookat=DEMO_LOOKAT,
        vup=(0.0, 1.0, 0.0),
        vfov=DEMO_VFOV,
        aspect_ratio=aspect_ratio,
        aperture=aperture,
        focus_dist=focus_dist,
    )

    return scene, camera


def create_two_sphere_scene(
    aspect_ratio: float = 2.0,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create a diffuse sphere on a ground sphere, viewed through a pinhole.

    The camera sits at the origin looking down -z with a 90 degree vertical
    field of view and a focus distance of 1, so the viewport spans
    [-aspect_ratio, aspect_ratio] x [-1, 1] on the plane z = -1.

    Args:
        aspect_ratio: Width divided by height of the output image.

    Returns:
        A tuple of (SceneManager, ThinLensCamera).
    """
    scene = SceneManager()

    scene.add_lambertian_sphere(center=(0.0, 0.0, -1.0), radius=0.5, albedo=(0.5, 0.5, 0.5))
    scene.add_lambertian_sphere(
        center=(0.0, -100.5, -1.0), radius=100.0, albedo=(0.5, 0.5, 0.5)
    )

    camera = ThinLensCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_dist=1.0,
    )

    return scene, camera
