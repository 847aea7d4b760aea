"""Lambertian (ideal diffuse) material implementation.

Scattered directions are drawn as the surface normal plus a uniform random
point on the unit sphere. The resulting distribution is proportional to the
cosine of the angle from the normal, which is the true Lambertian
distribution, so the attenuation is simply the albedo.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretracer.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_lambertian(albedo, normal)
"""

import taichi as ti

from spheretracer.core.vector import near_zero, random_on_unit_sphere, vec3


@ti.dataclass
class LambertianMaterial:
    """Lambertian (ideal diffuse) material properties.

    Attributes:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
    """

    albedo: vec3


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3):
    """Sample a diffuse scattering direction.

    Args:
        albedo: The diffuse reflectance color.
        normal: The unit surface normal at the hit point, facing the
            incoming ray.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: normal + random unit vector (not normalized).
        - attenuation: The albedo.
        - did_scatter: Always 1; diffuse surfaces never absorb the ray.
    """
    scattered_direction = normal + random_on_unit_sphere()

    # The random unit vector can cancel the normal exactly
    if near_zero(scattered_direction):
        scattered_direction = normal

    attenuation = albedo
    did_scatter = 1

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 256

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials."""
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.
            Each component must be in [0, 1].

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by registry index."""
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, normal: vec3):
    """Scatter off a registered Lambertian material.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    albedo = get_lambertian_albedo(material_idx)
    return scatter_lambertian(albedo, normal)
