"""Vector kernel for points, directions and colors.

All vectors are Taichi 3-vectors of f64. Component-wise arithmetic and
scalar scaling use the native Taichi operators; this module adds the
geometric helpers and the random constructors used for Monte Carlo sampling.

Randomness comes from ``ti.random``, which keeps one generator state per
Taichi thread, so concurrently traced rows never share a random source.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretracer.core.vector import vec3, reflect
    >>> @ti.kernel
    ... def mirror() -> vec3:
    ...     return reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))
"""

import taichi as ti
import taichi.math as tm

# 3-component f64 vector used for points, directions and linear RGB colors
vec3 = ti.types.vector(3, ti.f64)


@ti.func
def length_squared(v: vec3) -> ti.f64:
    """Compute the squared length of a vector."""
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f64:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(tm.dot(v, v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale a vector to unit length.

    The caller guarantees that ``v`` is not the zero vector; no attempt is
    made to recover from a zero length.

    Args:
        v: The input vector.

    Returns:
        ``v / length(v)``.
    """
    return v / length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f64:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return vec3(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


@ti.func
def reflect(v: vec3, normal: vec3) -> vec3:
    """Reflect a vector about a unit normal: v - 2 (v . n) n."""
    return v - 2.0 * tm.dot(v, normal) * normal


@ti.func
def refract(uv: vec3, normal: vec3, etai_over_etat: ti.f64) -> vec3:
    """Refract a unit vector through a surface using Snell's law.

    The refracted direction is split into the part perpendicular to the
    normal and the part parallel to it:
        r_perp = eta * (uv + cos_theta * n)
        r_parallel = -sqrt(|1 - |r_perp|^2|) * n

    The caller is responsible for checking total internal reflection
    beforehand; this function always returns a direction.

    Args:
        uv: The unit incident direction.
        normal: The unit surface normal, facing against ``uv``.
        etai_over_etat: Ratio of refractive indices (incident / transmitted).

    Returns:
        The refracted direction.
    """
    cos_theta = ti.min(tm.dot(-uv, normal), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * normal)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * normal
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine: ti.f64, ratio: ti.f64) -> ti.f64:
    """Approximate Fresnel reflectance with Schlick's polynomial.

    Args:
        cosine: Cosine of the angle between the incident ray and the normal.
        ratio: Ratio of refractive indices.

    Returns:
        r0 + (1 - r0) * (1 - cosine)^5 with r0 = ((1 - ratio) / (1 + ratio))^2.
    """
    r0 = (1.0 - ratio) / (1.0 + ratio)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Return 1 if every component of ``v`` is close to zero."""
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Random Constructors
# =============================================================================


@ti.func
def random_vec() -> vec3:
    """Sample each component uniformly from [0, 1)."""
    return vec3(ti.random(ti.f64), ti.random(ti.f64), ti.random(ti.f64))


@ti.func
def random_vec_range(min_val: ti.f64, max_val: ti.f64) -> vec3:
    """Sample each component uniformly from [min_val, max_val)."""
    return min_val + (max_val - min_val) * random_vec()


@ti.func
def random_in_unit_sphere() -> vec3:
    """Sample a point uniformly inside the unit ball.

    Rejection sampling: draw from the cube [-1, 1]^3 and accept the first
    point with squared length below 1. Each draw is accepted with
    probability pi/6, so the iteration cap is never reached in practice.

    Returns:
        A random point with length < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    # Loop-carried state: keep serial even when inlined at kernel top level
    ti.loop_config(serialize=True)
    for _ in range(100):
        if not found:
            p = random_vec_range(-1.0, 1.0)
            if length_squared(p) < 1.0:
                found = True
    return p


@ti.func
def random_on_unit_sphere() -> vec3:
    """Sample a point uniformly on the surface of the unit sphere.

    Uses the cylindrical parametrization: phi ~ U(0, 2 pi), z ~ U(-1, 1),
    r = sqrt(1 - z^2). Adding this to a surface normal yields the
    Lambertian (cosine) distribution of scattered directions.

    Returns:
        A random unit vector.
    """
    a = ti.random(ti.f64) * 2.0 * tm.pi
    z = -1.0 + 2.0 * ti.random(ti.f64)
    r = ti.sqrt(1.0 - z * z)
    return vec3(r * ti.cos(a), r * ti.sin(a), z)


@ti.func
def random_in_unit_disk() -> vec3:
    """Sample a point uniformly inside the unit disk in the xy-plane.

    Used for lens sampling in the thin-lens camera.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    ti.loop_config(serialize=True)
    for _ in range(100):
        if not found:
            p = vec3(
                ti.random(ti.f64) * 2.0 - 1.0,
                ti.random(ti.f64) * 2.0 - 1.0,
                0.0,
            )
            if p.x * p.x + p.y * p.y < 1.0:
                found = True
    return p
