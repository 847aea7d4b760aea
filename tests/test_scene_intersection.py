"""Unit tests for scene-level intersection.

Tests cover:
- Sphere storage, clearing and capacity
- Material ID propagation into hit records
- Nearest-hit selection among overlapping spheres
- Empty scene misses
"""

import pytest
import taichi as ti


def _make_query_fields():
    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f64, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())
    return hit, t_val, material_id


class TestSceneSphereStorage:
    """Tests for scene sphere storage and management."""

    def test_add_sphere(self):
        """Test adding a sphere to the scene."""
        from spheretracer.scene.intersection import add_sphere, get_sphere_count, vec3

        assert get_sphere_count() == 0
        idx = add_sphere(vec3(1.0, 2.0, 3.0), 0.5, material_id=1)
        assert idx == 0
        assert get_sphere_count() == 1

    def test_add_negative_radius_sphere(self):
        """Test hollow shells with negative radius are accepted."""
        from spheretracer.scene.intersection import add_sphere, get_sphere_count, vec3

        add_sphere(vec3(0.0, 0.0, -1.0), -0.45, material_id=0)
        assert get_sphere_count() == 1

    def test_zero_radius_rejected(self):
        """Test zero radius raises ValueError."""
        from spheretracer.scene.intersection import add_sphere, vec3

        with pytest.raises(ValueError, match="non-zero"):
            add_sphere(vec3(0.0, 0.0, 0.0), 0.0)

    def test_clear_scene(self):
        """Test clearing all spheres from the scene."""
        from spheretracer.scene.intersection import (
            add_sphere,
            clear_scene,
            get_sphere_count,
            vec3,
        )

        add_sphere(vec3(0.0, 0.0, 0.0), 1.0)
        add_sphere(vec3(1.0, 0.0, 0.0), 1.0)
        assert get_sphere_count() == 2

        clear_scene()
        assert get_sphere_count() == 0

    def test_capacity_exceeded(self):
        """Test adding more than MAX_SPHERES raises RuntimeError."""
        from spheretracer.scene.intersection import MAX_SPHERES, add_sphere, num_spheres, vec3

        num_spheres[None] = MAX_SPHERES
        with pytest.raises(RuntimeError, match="Maximum number of spheres"):
            add_sphere(vec3(0.0, 0.0, 0.0), 1.0)


class TestSceneIntersection:
    """Tests for intersect_scene."""

    def test_empty_scene_misses(self):
        """Test a ray through an empty scene misses."""
        from spheretracer.scene.intersection import intersect_scene, vec3

        hit, _, material_id = _make_query_fields()

        @ti.kernel
        def test_kernel():
            rec = intersect_scene(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), 0.001, 1e30)
            hit[None] = rec.hit
            material_id[None] = rec.material_id

        test_kernel()
        assert hit[None] == 0
        assert material_id[None] == -1

    def test_single_sphere_carries_material_id(self):
        """Test the hit record reports the sphere's material ID."""
        from spheretracer.scene.intersection import add_sphere, intersect_scene, vec3

        add_sphere(vec3(0.0, 0.0, -3.0), 1.0, material_id=7)
        hit, t_val, material_id = _make_query_fields()

        @ti.kernel
        def test_kernel():
            rec = intersect_scene(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), 0.001, 1e30)
            hit[None] = rec.hit
            t_val[None] = rec.t
            material_id[None] = rec.material_id

        test_kernel()
        assert hit[None] == 1
        assert t_val[None] == pytest.approx(2.0, abs=1e-9)
        assert material_id[None] == 7

    @pytest.mark.parametrize("near_first", [True, False])
    def test_overlapping_spheres_nearest_wins(self, near_first):
        """Test the smaller t is returned regardless of sphere order."""
        from spheretracer.scene.intersection import add_sphere, intersect_scene, vec3

        near = (vec3(0.0, 0.0, -3.0), 1.0, 1)
        far = (vec3(0.0, 0.0, -3.5), 1.0, 2)
        for center, radius, mat in (near, far) if near_first else (far, near):
            add_sphere(center, radius, material_id=mat)

        hit, t_val, material_id = _make_query_fields()

        @ti.kernel
        def test_kernel():
            rec = intersect_scene(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), 0.001, 1e30)
            hit[None] = rec.hit
            t_val[None] = rec.t
            material_id[None] = rec.material_id

        test_kernel()
        assert hit[None] == 1
        assert t_val[None] == pytest.approx(2.0, abs=1e-9)
        assert material_id[None] == 1

    def test_t_max_limits_scene_hits(self):
        """Test spheres beyond t_max are ignored."""
        from spheretracer.scene.intersection import add_sphere, intersect_scene, vec3

        add_sphere(vec3(0.0, 0.0, -10.0), 1.0, material_id=0)
        hit, _, _ = _make_query_fields()

        @ti.kernel
        def test_kernel():
            rec = intersect_scene(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), 0.001, 5.0)
            hit[None] = rec.hit

        test_kernel()
        assert hit[None] == 0

    def test_hollow_glass_shell(self):
        """Test a ray through a shell hits outer, then inner surface."""
        from spheretracer.scene.intersection import add_sphere, intersect_scene, vec3

        add_sphere(vec3(0.0, 0.0, -5.0), 0.5, material_id=3)
        add_sphere(vec3(0.0, 0.0, -5.0), -0.45, material_id=3)
        hit, t_val, _ = _make_query_fields()
        front_face = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            # Start in the glass between the outer and inner surfaces
            rec = intersect_scene(vec3(0.0, 0.0, -4.52), vec3(0.0, 0.0, -1.0), 0.001, 1e30)
            hit[None] = rec.hit
            t_val[None] = rec.t
            front_face[None] = rec.front_face

        test_kernel()
        assert hit[None] == 1
        # Inner surface at z = -4.55
        assert t_val[None] == pytest.approx(0.03, abs=1e-9)
        # Flipped outward normal points toward the center, so the ray
        # travelling toward the center hits its back face
        assert front_face[None] == 0
