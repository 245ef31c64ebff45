"""Stock scenes.

Both presets view the scene from the origin looking down -z with a 90 degree
vertical field of view, which gives a viewport of height 2 at unit distance.

Example:
    >>> from spheretrace.scene.presets import create_four_spheres_scene
    >>> scene, camera = create_four_spheres_scene(aspect_ratio=16 / 9)
    >>> scene.get_sphere_count()
    4
"""

from spheretrace.camera.pinhole import PinholeCamera
from spheretrace.scene.manager import Scene

DEFAULT_ASPECT_RATIO = 16.0 / 9.0


def create_default_camera(aspect_ratio: float = DEFAULT_ASPECT_RATIO) -> PinholeCamera:
    """Camera at the origin looking down -z with a 90 degree vertical FOV."""
    return PinholeCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=aspect_ratio,
    )


def create_single_sphere_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[Scene, PinholeCamera]:
    """A single matte red sphere in front of the camera.

    Returns:
        Tuple of (scene, camera).
    """
    scene = Scene()
    scene.add_lambertian_sphere(center=(0.0, 0.0, -1.0), radius=0.5, albedo=(0.7, 0.3, 0.3))
    return scene, create_default_camera(aspect_ratio)


def create_four_spheres_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[Scene, PinholeCamera]:
    """Matte, fuzzy silver and rough gold spheres resting on a large ground sphere.

    Layout:
    - Ground: yellowish matte, radius 100 centered at (0, -100.5, -1)
    - Center: matte red, radius 0.5 at (0, 0, -1)
    - Left: silver metal with fuzz 0.3 at (-1, 0, -1)
    - Right: gold metal with fuzz 1.0 at (1, 0, -1)

    Returns:
        Tuple of (scene, camera).
    """
    scene = Scene()

    ground = scene.add_lambertian_material(albedo=(0.8, 0.8, 0.1))
    center = scene.add_lambertian_material(albedo=(0.7, 0.3, 0.3))
    left = scene.add_metal_material(albedo=(0.8, 0.8, 0.8), fuzz=0.3)
    right = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=1.0)

    scene.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
    scene.add_sphere((0.0, 0.0, -1.0), 0.5, center)
    scene.add_sphere((-1.0, 0.0, -1.0), 0.5, left)
    scene.add_sphere((1.0, 0.0, -1.0), 0.5, right)

    return scene, create_default_camera(aspect_ratio)


PRESETS = {
    "single": create_single_sphere_scene,
    "four_spheres": create_four_spheres_scene,
}


def create_preset_scene(
    name: str,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[Scene, PinholeCamera]:
    """Create a preset scene by name.

    Raises:
        ValueError: If name is not one of PRESETS.
    """
    try:
        factory = PRESETS[name]
    except KeyError:
        raise ValueError(
            f"Unknown scene preset {name!r}, expected one of {sorted(PRESETS)}"
        ) from None
    return factory(aspect_ratio)
