"""Geometry module for the sphere primitive.

Components:
    sphere: Sphere dataclass, hit record and ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) so they can be called
from the row-parallel render kernels. The scene is intersected by an
exhaustive linear scan; there is no acceleration structure.
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_miss_record, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss_record",
]
