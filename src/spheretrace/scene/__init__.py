"""Scene module for scene representation and ray-scene queries.

Components:
    intersection: Sphere field storage and nearest-hit queries
    manager: Scene container, material ID space and field upload
    presets: Stock scenes with matching cameras
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialType,
    Scene,
    SceneConfig,
    SphereInfo,
    clear_all_fields,
    get_material_type,
    get_material_type_index,
    material_type_indices,
    material_types,
    num_materials,
)
from .presets import (
    PRESETS,
    create_default_camera,
    create_four_spheres_scene,
    create_preset_scene,
    create_single_sphere_scene,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "Scene",
    "MaterialType",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "clear_all_fields",
    "get_material_type",
    "get_material_type_index",
    "material_types",
    "material_type_indices",
    "num_materials",
    # Presets
    "PRESETS",
    "create_default_camera",
    "create_single_sphere_scene",
    "create_four_spheres_scene",
    "create_preset_scene",
]
