"""Tests for the preset scenes."""

import math

import pytest


class TestDemoScene:
    """Tests for create_demo_scene."""

    def test_scene_contents(self):
        """Test five spheres share four materials."""
        from spheretracer.scene.manager import MaterialType
        from spheretracer.scene.presets import create_demo_scene

        scene, _ = create_demo_scene()

        assert scene.get_sphere_count() == 5
        assert scene.get_material_count() == 4
        types = [m.material_type for m in scene.materials]
        assert types == [
            MaterialType.LAMBERTIAN,
            MaterialType.LAMBERTIAN,
            MaterialType.DIELECTRIC,
            MaterialType.METAL,
        ]
        radii = sorted(s.radius for s in scene.spheres)
        assert radii == [-0.45, 0.5, 0.5, 0.5, 100.0]

    def test_camera_focuses_on_center_sphere(self):
        """Test the focus distance is the lookfrom-lookat distance."""
        from spheretracer.scene.presets import create_demo_scene

        _, camera = create_demo_scene(aspect_ratio=2.0, aperture=0.5)

        assert camera.focus_dist == pytest.approx(math.sqrt(27.0))
        assert camera.aperture == 0.5
        assert camera.aspect_ratio == 2.0
        assert camera.vfov == 20.0

    def test_camera_setup_succeeds(self):
        """Test the demo camera is a valid configuration."""
        from spheretracer.camera.thin_lens import get_camera_info, setup_camera
        from spheretracer.scene.presets import create_demo_scene

        _, camera = create_demo_scene()
        setup_camera(camera)

        assert get_camera_info()["lens_radius"] == pytest.approx(1.0)


class TestTwoSphereScene:
    """Tests for create_two_sphere_scene."""

    def test_scene_contents(self):
        """Test two diffuse spheres with a pinhole camera."""
        from spheretracer.scene.presets import create_two_sphere_scene

        scene, camera = create_two_sphere_scene(aspect_ratio=2.0)

        assert scene.get_sphere_count() == 2
        assert scene.get_material_count() == 2
        assert camera.aperture == 0.0
        assert camera.lookfrom == (0.0, 0.0, 0.0)
