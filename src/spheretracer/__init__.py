"""Monte Carlo path tracer for scenes of spheres.

This package renders still images of sphere scenes using Taichi kernels, with
support for:
- Diffuse, metallic and dielectric materials
- A thin-lens camera with depth of field
- Row-parallel rendering with stochastic anti-aliasing
- Plain-text PPM (and PNG) output with gamma correction

Subpackages:
    core: Vector kernel, rays, path integrator and the render driver
    geometry: Sphere primitive and ray-sphere intersection
    materials: Lambertian, metal and dielectric scattering
    scene: Scene storage, nearest-hit queries and the scene manager
    camera: Thin-lens camera producing primary rays
    preview: Pixel encoding and image export

Taichi must be initialized before any submodule is imported, since the
submodules allocate their fields at import time:

    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretracer.core.renderer import Renderer
"""

__version__ = "0.1.0"
