"""Materials module for surface scattering models.

Components:
    lambertian: Ideal diffuse reflection (true Lambertian distribution)
    metal: Mirror reflection with optional fuzz
    dielectric: Glass-like refraction with Schlick reflectance

Each material provides a ``scatter_*`` Taichi function returning
``(scattered_direction, attenuation, did_scatter)``; ``did_scatter == 0``
means the ray was absorbed. Material parameters live in per-type registries
(Taichi fields) addressed by integer index, which the scene manager maps to
a unified material ID.
"""

from .dielectric import (
    DielectricMaterial,
    add_dielectric_material,
    clear_dielectric_materials,
    fresnel_reflectance,
    get_dielectric_index,
    get_dielectric_material_count,
    refraction_ratio,
    scatter_dielectric,
    scatter_dielectric_by_id,
    will_reflect,
)
from .lambertian import (
    LambertianMaterial,
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
    scatter_lambertian_by_id,
)
from .metal import (
    MetalMaterial,
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
    scatter_metal_by_id,
)

__all__ = [
    # Lambertian
    "LambertianMaterial",
    "scatter_lambertian",
    "scatter_lambertian_by_id",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    # Metal
    "MetalMaterial",
    "scatter_metal",
    "scatter_metal_by_id",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    # Dielectric
    "DielectricMaterial",
    "scatter_dielectric",
    "scatter_dielectric_by_id",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_index",
    "refraction_ratio",
    "fresnel_reflectance",
    "will_reflect",
]
