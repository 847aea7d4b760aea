"""Core rendering module.

Components:
    vector: 3-component vector kernel and random sampling helpers
    ray: Ray data structure
    integrator: Path integration, render target and row-parallel kernels
    renderer: Host-side render driver with progress reporting

The integrator walks each camera ray through the scene, bouncing off
surfaces according to their materials until it escapes to the sky or the
depth bound is reached. The renderer launches the integrator over bands of
image rows and reports progress between launches.
"""

from .ray import Ray, make_ray, ray_at
from .vector import (
    cross,
    dot,
    length,
    length_squared,
    near_zero,
    normalize,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_on_unit_sphere,
    random_vec,
    random_vec_range,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import them directly from spheretracer.core.integrator or spheretracer.core.renderer.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "random_vec",
    "random_vec_range",
    "random_in_unit_sphere",
    "random_on_unit_sphere",
    "random_in_unit_disk",
]
