"""Ray data structure.

A ray is an origin point plus a direction. The direction is not required to
be unit length: camera rays and scattered rays keep whatever length their
construction produces, and every consumer handles that.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretracer.core.ray import Ray, ray_at
    >>> from spheretracer.core.vector import vec3
    >>> # Within a Taichi kernel:
    >>> # ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    >>> # point = ray_at(ray, 5.0)
"""

import taichi as ti

from spheretracer.core.vector import vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction of the ray (not necessarily normalized).
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f64) -> vec3:
    """Compute the point ``origin + t * direction``."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a Taichi kernel."""
    return Ray(origin=origin, direction=direction)
