"""Scene-level sphere storage and nearest-hit queries.

Spheres are stored in Taichi fields using a Structure-of-Arrays layout, each
with the unified material ID of the material it references. Spheres are
written from Python scope while the scene is built and are read-only while a
render kernel runs.

The nearest-hit query is an exhaustive linear scan that shrinks the upper
bound to the closest hit found so far, so each later sphere only has to beat
the best hit. Sphere order does not change the result.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretracer.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere(vec3(0, 0, -1), 0.5, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti

from spheretracer.core.vector import vec3
from spheretracer.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_record

# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Resets the sphere count to zero. Field data is overwritten as new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere. Negative values produce a hollow
            shell whose normals point inward.
        material_id: The unified material ID for this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is zero.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if radius == 0.0:
        raise ValueError("Sphere radius must be non-zero")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f64,
    t_max: ti.f64,
) -> HitRecord:
    """Find the nearest intersection of a ray with the scene.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_min: Exclusive lower bound on accepted t.
        t_max: Exclusive upper bound on accepted t.

    Returns:
        The HitRecord of the globally nearest hit in (t_min, t_max) with its
        material_id filled in, or a miss record.
    """
    closest_so_far = ti.cast(t_max, ti.f64)
    result = make_miss_record()

    # closest_so_far is carried across iterations
    ti.loop_config(serialize=True)
    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_so_far)
        if rec.hit == 1:
            closest_so_far = rec.t
            result = _with_material(rec, sphere_material_ids[i])

    return result


@ti.func
def _with_material(rec: HitRecord, material_id: ti.i32) -> HitRecord:
    """Copy a sphere hit record, attaching the sphere's material ID."""
    return HitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
    )
