"""Dielectric (glass/water) material implementation.

Dielectrics either reflect or refract every incoming ray:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Total internal reflection when ratio * sin(theta) > 1
    - Otherwise reflection with probability given by Schlick's approximation

The surface never absorbs light, so the attenuation is always white.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretracer.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_dielectric(
    >>> #     refractive_index, incident_dir, normal, front_face
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from spheretracer.core.vector import normalize, reflect, refract, schlick_reflectance, vec3


@ti.dataclass
class DielectricMaterial:
    """Dielectric (glass/water) material properties.

    Attributes:
        refractive_index: Index of refraction. Common values:
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    refractive_index: ti.f64


@ti.func
def refraction_ratio(refractive_index: ti.f64, front_face: ti.i32) -> ti.f64:
    """Ratio of refractive indices for the side the ray arrives from.

    Entering the material (front face) gives 1 / n; leaving it gives n.
    """
    ratio = refractive_index
    if front_face == 1:
        ratio = 1.0 / refractive_index
    return ratio


@ti.func
def will_reflect(
    refractive_index: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """Determine whether total internal reflection occurs.

    Args:
        refractive_index: Index of refraction of the material.
        incident_direction: The incoming ray direction (any non-zero length).
        normal: The unit surface normal, facing the incoming ray.
        front_face: 1 if the ray hits the outside of the surface.

    Returns:
        1 if the ray cannot refract, 0 otherwise.
    """
    ratio = refraction_ratio(refractive_index, front_face)
    unit_direction = normalize(incident_direction)
    cos_theta = ti.min(tm.dot(-unit_direction, normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)

    result = 0
    if ratio * sin_theta > 1.0:
        result = 1
    return result


@ti.func
def fresnel_reflectance(
    refractive_index: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.f64:
    """Compute the Schlick reflectance for an incoming ray.

    Returns:
        The reflection probability in [0, 1].
    """
    ratio = refraction_ratio(refractive_index, front_face)
    unit_direction = normalize(incident_direction)
    cos_theta = ti.min(tm.dot(-unit_direction, normal), 1.0)
    return schlick_reflectance(cos_theta, ratio)


@ti.func
def scatter_dielectric(
    refractive_index: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Compute the scattered direction for a dielectric surface.

    Args:
        refractive_index: Index of refraction of the material.
        incident_direction: The incoming ray direction (any non-zero length).
        normal: The unit surface normal, facing the incoming ray.
        front_face: 1 if the ray hits the outside of the surface,
            0 if it travels inside the material.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The reflected or refracted direction.
        - attenuation: White; clear dielectrics absorb nothing.
        - did_scatter: Always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)

    ratio = refraction_ratio(refractive_index, front_face)
    unit_direction = normalize(incident_direction)

    cos_theta = ti.min(tm.dot(-unit_direction, normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)

    cannot_refract = ratio * sin_theta > 1.0

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract or ti.random(ti.f64) < schlick_reflectance(cos_theta, ratio):
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, ratio)

    did_scatter = 1

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 256

# Storage for dielectric material properties
dielectric_indices = ti.field(dtype=ti.f64, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials."""
    num_dielectric_materials[None] = 0


def add_dielectric_material(refractive_index: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        refractive_index: Index of refraction. Default is 1.5 (typical glass).
            Must be positive.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If the refractive index is not positive.
    """
    if refractive_index <= 0.0:
        raise ValueError(
            f"Refractive index = {refractive_index} is not positive. "
            "The index of refraction must be > 0."
        )

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_indices[idx] = refractive_index
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_index(material_idx: ti.i32) -> ti.f64:
    """Get the refractive index for a dielectric material by registry index."""
    return dielectric_indices[material_idx]


@ti.func
def scatter_dielectric_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Scatter off a registered dielectric material.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    refractive_index = get_dielectric_index(material_idx)
    return scatter_dielectric(refractive_index, incident_direction, normal, front_face)
