"""Stochastic sphere ray tracer built on Taichi.

Renders scenes of spheres with Lambertian and metallic materials into a
scene-linear floating-point frame buffer. Each pixel averages jittered
camera rays whose colors are evaluated by recursive material scattering
against a sky gradient.

Subpackages:
    core: Vector utilities, random streams, configuration, integrator and renderer
    geometry: Sphere primitive and ray-sphere intersection
    materials: Lambertian and metallic scattering
    scene: Scene container, field upload and stock scenes
    camera: Pinhole camera and ray generation
    preview: Tone mapping, preview window and PNG export

Taichi must be initialized by the host (for example ``ti.init(arch=ti.cpu)``)
before any spheretrace module is imported.
"""

__version__ = "0.1.0"
