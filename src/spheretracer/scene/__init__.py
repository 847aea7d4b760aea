"""Scene module for sphere storage, materials and preset scenes.

Components:
    intersection: Sphere storage and nearest-hit queries
    manager: Unified scene manager coordinating spheres and materials
    presets: Ready-made demo and test scenes

Scene data is organized for kernel access:
    - Structure-of-Arrays layout for sphere data
    - Integer material IDs resolved through a type/index lookup table
"""

from .intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
    material_type_indices,
    material_types,
    num_materials,
)
from .presets import create_demo_scene, create_two_sphere_scene

__all__ = [
    # Intersection module
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    "material_types",
    "material_type_indices",
    "num_materials",
    # Presets
    "create_demo_scene",
    "create_two_sphere_scene",
]
