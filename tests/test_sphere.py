"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (front face)
- Ray missing sphere, tangent rays
- Ray starting inside sphere (back face)
- The (t_min, t_max) interval
- Negative radius (hollow shell) normals
"""

import pytest
import taichi as ti


class TestSphereBasics:
    """Tests for Sphere dataclass and basic operations."""

    def test_make_sphere(self):
        """Test make_sphere convenience function."""
        from spheretracer.geometry.sphere import make_sphere, vec3

        center_result = ti.Vector.field(3, dtype=ti.f64, shape=())
        radius_result = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            sphere = make_sphere(vec3(1.0, 2.0, 3.0), 0.5)
            center_result[None] = sphere.center
            radius_result[None] = sphere.radius

        test_kernel()
        c = center_result[None]
        assert abs(c[0] - 1.0) < 1e-12
        assert abs(c[1] - 2.0) < 1e-12
        assert abs(c[2] - 3.0) < 1e-12
        assert abs(radius_result[None] - 0.5) < 1e-12

    def test_miss_record(self):
        """Test the miss record has no hit and no material."""
        from spheretracer.geometry.sphere import make_miss_record

        hit = ti.field(dtype=ti.i32, shape=())
        material_id = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = make_miss_record()
            hit[None] = rec.hit
            material_id[None] = rec.material_id

        test_kernel()
        assert hit[None] == 0
        assert material_id[None] == -1


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    @pytest.mark.parametrize(
        "distance,radius",
        [(5.0, 1.0), (3.0, 0.5), (100.0, 10.0), (1.5, 1.0)],
    )
    def test_hit_through_center_near_root(self, distance, radius):
        """Test a ray through the center hits first at t = d - r."""
        from spheretracer.geometry.sphere import Sphere, hit_sphere, vec3

        hit = ti.field(dtype=ti.i32, shape=())
        t_val = ti.field(dtype=ti.f64, shape=())
        point = ti.Vector.field(3, dtype=ti.f64, shape=())
        normal = ti.Vector.field(3, dtype=ti.f64, shape=())
        front_face = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel(d: ti.f64, r: ti.f64):
            sphere = Sphere(center=vec3(0.0, 0.0, -d), radius=r)
            rec = hit_sphere(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), sphere, 0.001, 1e30)
            hit[None] = rec.hit
            t_val[None] = rec.t
            point[None] = rec.point
            normal[None] = rec.normal
            front_face[None] = rec.front_face

        test_kernel(distance, radius)
        assert hit[None] == 1
        assert t_val[None] == pytest.approx(distance - radius, abs=1e-9)
        assert point[None][2] == pytest.approx(-(distance - radius), abs=1e-9)
        # Outward normal faces the camera
        assert normal[None][2] == pytest.approx(1.0, abs=1e-9)
        assert front_face[None] == 1

    def test_far_root_when_near_root_excluded(self):
        """Test the far root t = d + r is used when d - r is below t_min."""
        from spheretracer.geometry.sphere import Sphere, hit_sphere, vec3

        hit = ti.field(dtype=ti.i32, shape=())
        t_val = ti.field(dtype=ti.f64, shape=())
        normal = ti.Vector.field(3, dtype=ti.f64, shape=())
        front_face = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, -5.0), radius=1.0)
            rec = hit_sphere(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), sphere, 4.5, 1e30)
            hit[None] = rec.hit
            t_val[None] = rec.t
            normal[None] = rec.normal
            front_face[None] = rec.front_face

        test_kernel()
        assert hit[None] == 1
        assert t_val[None] == pytest.approx(6.0, abs=1e-9)
        # Leaving the sphere: back face, normal flipped toward the ray origin
        assert front_face[None] == 0
        assert normal[None][2] == pytest.approx(1.0, abs=1e-9)

    def test_unnormalized_direction(self):
        """Test t scales inversely with the direction length."""
        from spheretracer.geometry.sphere import Sphere, hit_sphere, vec3

        t_val = ti.field(dtype=ti.f64, shape=())
        point = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, -5.0), radius=1.0)
            rec = hit_sphere(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -2.0), sphere, 0.001, 1e30)
            t_val[None] = rec.t
            point[None] = rec.point

        test_kernel()
        assert t_val[None] == pytest.approx(2.0, abs=1e-9)
        assert point[None][2] == pytest.approx(-4.0, abs=1e-9)

    def test_miss(self):
        """Test ray missing sphere entirely."""
        from spheretracer.geometry.sphere import Sphere, hit_sphere, vec3

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, 0.0), radius=1.0)
            rec = hit_sphere(vec3(5.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), sphere, 0.001, 1e30)
            hit[None] = rec.hit

        test_kernel()
        assert hit[None] == 0

    def test_tangent_is_miss(self):
        """Test a ray grazing the sphere (zero discriminant) is a miss."""
        from spheretracer.geometry.sphere import Sphere, hit_sphere, vec3

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, -5.0), radius=1.0)
            rec = hit_sphere(vec3(1.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), sphere, 0.001, 1e30)
            hit[None] = rec.hit

        test_kernel()
        assert hit[None] == 0

    def test_sphere_behind_ray(self):
        """Test roots below t_min are rejected."""
        from spheretracer.geometry.sphere import Sphere, hit_sphere, vec3

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, 5.0), radius=1.0)
            rec = hit_sphere(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), sphere, 0.001, 1e30)
            hit[None] = rec.hit

        test_kernel()
        assert hit[None] == 0

    def test_interval_bounds_are_exclusive(self):
        """Test hits exactly at t_min or t_max are rejected."""
        from spheretracer.geometry.sphere import Sphere, hit_sphere, vec3

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, -4.0), radius=2.0)
            rec = hit_sphere(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), sphere, 2.0, 6.0)
            hit[None] = rec.hit

        test_kernel()
        # Roots are exactly 2 and 6, both on the open interval's boundary
        assert hit[None] == 0

    def test_inside_sphere_back_face(self):
        """Test ray starting inside sphere hits the back face."""
        from spheretracer.geometry.sphere import Sphere, hit_sphere, vec3

        hit = ti.field(dtype=ti.i32, shape=())
        t_val = ti.field(dtype=ti.f64, shape=())
        normal = ti.Vector.field(3, dtype=ti.f64, shape=())
        front_face = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, 0.0), radius=1.0)
            rec = hit_sphere(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, 1.0), sphere, 0.001, 1e30)
            hit[None] = rec.hit
            t_val[None] = rec.t
            normal[None] = rec.normal
            front_face[None] = rec.front_face

        test_kernel()
        assert hit[None] == 1
        assert t_val[None] == pytest.approx(1.0, abs=1e-9)
        assert front_face[None] == 0
        assert normal[None][2] == pytest.approx(-1.0, abs=1e-9)

    def test_negative_radius_flips_normal(self):
        """Test a negative radius sphere reports inward-facing geometry."""
        from spheretracer.geometry.sphere import Sphere, hit_sphere, vec3

        hit = ti.field(dtype=ti.i32, shape=())
        t_val = ti.field(dtype=ti.f64, shape=())
        normal = ti.Vector.field(3, dtype=ti.f64, shape=())
        front_face = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, -5.0), radius=-1.0)
            rec = hit_sphere(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), sphere, 0.001, 1e30)
            hit[None] = rec.hit
            t_val[None] = rec.t
            normal[None] = rec.normal
            front_face[None] = rec.front_face

        test_kernel()
        assert hit[None] == 1
        assert t_val[None] == pytest.approx(4.0, abs=1e-9)
        # Outward normal points away from the camera, so this is a back face
        assert front_face[None] == 0
        # The stored normal still opposes the ray
        assert normal[None][2] == pytest.approx(1.0, abs=1e-9)

    @pytest.mark.parametrize(
        "origin,direction",
        [
            ((0.0, 0.0, 0.0), (0.1, 0.2, -1.0)),
            ((0.0, 0.0, -5.0), (0.3, -0.4, 0.5)),
            ((2.0, 2.0, 2.0), (-2.0, -2.0, -7.0)),
            ((0.0, 1.0, -5.0), (1.0, 0.0, 0.0)),
        ],
    )
    def test_normal_opposes_ray(self, origin, direction):
        """Test dot(direction, normal) <= 0 for every hit."""
        from spheretracer.geometry.sphere import Sphere, hit_sphere, vec3

        result = ti.field(dtype=ti.f64, shape=())
        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel(ox: ti.f64, oy: ti.f64, oz: ti.f64, dx: ti.f64, dy: ti.f64, dz: ti.f64):
            d = vec3(dx, dy, dz)
            sphere = Sphere(center=vec3(0.0, 0.0, -5.0), radius=1.5)
            rec = hit_sphere(vec3(ox, oy, oz), d, sphere, 0.001, 1e30)
            hit[None] = rec.hit
            result[None] = rec.normal.dot(d)

        test_kernel(*origin, *direction)
        assert hit[None] == 1
        assert result[None] <= 0.0
