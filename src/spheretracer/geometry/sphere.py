"""Sphere primitive with ray-sphere intersection.

The intersection solves the half-b form of the ray-sphere quadratic

    a*t^2 + 2*half_b*t + c = 0

with a = |d|^2, half_b = (o - center) . d and c = |o - center|^2 - r^2.
The near root is tried before the far root, so the accepted hit is always
the smallest t inside the open interval (t_min, t_max).

A negative radius is allowed: it flips the outward normal, which turns the
sphere into a hollow shell (used for the inner surface of glass bubbles).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretracer.geometry.sphere import Sphere, hit_sphere
    >>> # Within a Taichi kernel:
    >>> # sphere = Sphere(center=vec3(0.0, 0.0, -1.0), radius=0.5)
    >>> # rec = hit_sphere(origin, direction, sphere, 0.001, tm.inf)
"""

import taichi as ti
import taichi.math as tm

from spheretracer.core.vector import vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere.
        radius: The radius. Negative values invert the outward normal.
    """

    center: vec3
    radius: ti.f64


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: 1 if the ray intersected the surface, 0 otherwise.
        t: Ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: Unit surface normal, always facing against the incoming ray.
            Only valid if hit == 1.
        front_face: 1 if the ray approached from the outward side, 0 if it
            struck the surface from inside. Only valid if hit == 1.
        material_id: Unified material ID of the surface, -1 if none.
    """

    hit: ti.i32
    t: ti.f64
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f64,
    t_max: ti.f64,
) -> HitRecord:
    """Test a ray against a sphere.

    A discriminant of zero (a tangent ray) counts as a miss. Of the two
    roots, (-half_b - sqrt(D)) / a is tried first and (-half_b + sqrt(D)) / a
    second; the first one strictly inside (t_min, t_max) is accepted.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The ray direction. Must be non-zero; need not be unit.
        sphere: The sphere to test against.
        t_min: Exclusive lower bound on accepted t.
        t_max: Exclusive upper bound on accepted t.

    Returns:
        A HitRecord; check its ``hit`` field. ``material_id`` is left at -1
        for the caller to fill in.
    """
    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    half_b = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    # Taichi requires outer-scope declaration of branch results
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    if discriminant > 0.0:
        root = ti.sqrt(discriminant)

        t = (-half_b - root) / a
        valid = t > t_min and t < t_max

        if not valid:
            t = (-half_b + root) / a
            valid = t > t_min and t < t_max

        if valid:
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction

            # Sign follows the radius, so negative spheres face inward
            outward_normal = (hit_point - sphere.center) / sphere.radius

            if tm.dot(ray_direction, outward_normal) < 0.0:
                is_front_face = 1
                hit_normal = outward_normal
            else:
                is_front_face = 0
                hit_normal = -outward_normal

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
        material_id=-1,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f64) -> Sphere:
    """Create a sphere inside a Taichi kernel."""
    return Sphere(center=center, radius=radius)
