"""Scene container coordinating spheres and their materials.

A ``Scene`` is an ordered list of spheres, each referring to a material by a
unified material ID. Materials are immutable values shared by any number of
spheres. The scene is plain Python data until ``Scene.upload`` writes it into
the Taichi fields read by the render kernels, which happens once at the start
of every render pass.

The unified material ID space maps each ID to a (material type, type-local
index) pair so kernels can dispatch to the right scattering function:

    material_types[material_id]        -> MaterialType
    material_type_indices[material_id] -> index into the per-type registry

Example:
    >>> from spheretrace.scene.manager import Scene
    >>> scene = Scene()
    >>> matte = scene.add_lambertian_material(albedo=(0.7, 0.3, 0.3))
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=matte)
    0
    >>> scene.add_metal_sphere((1, 0, -1), 0.5, albedo=(0.8, 0.6, 0.2), fuzz=1.0)
    (1, 1)
"""

import json
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any

import taichi as ti

from spheretrace.core.config import InvalidConfigurationError
from spheretrace.materials.lambertian import (
    MAX_LAMBERTIAN_MATERIALS,
    Lambertian,
    add_lambertian_material,
    clear_lambertian_materials,
)
from spheretrace.materials.metal import (
    MAX_METAL_MATERIALS,
    Metallic,
    add_metal_material,
    clear_metal_materials,
)
from spheretrace.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
)


class MaterialType(IntEnum):
    """Closed set of material variants, used for dispatch in the integrator."""

    LAMBERTIAN = 0
    METAL = 1


# Maximum number of materials across all types
MAX_MATERIALS = MAX_LAMBERTIAN_MATERIALS + MAX_METAL_MATERIALS

_MATERIAL_CAPACITY = {
    MaterialType.LAMBERTIAN: MAX_LAMBERTIAN_MATERIALS,
    MaterialType.METAL: MAX_METAL_MATERIALS,
}

material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_material_tracking() -> None:
    """Clear the unified material ID fields."""
    num_materials[None] = 0


def clear_all_fields() -> None:
    """Reset every scene and material field to an empty scene."""
    clear_scene()
    clear_lambertian_materials()
    clear_metal_materials()
    clear_material_tracking()


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    Returns:
        The material type as an integer (see MaterialType), or -1 for
        invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the index into the type-specific registry for a material ID.

    Returns:
        The type-local index, or -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


def material_type_of(material: Lambertian | Metallic) -> MaterialType:
    """Return the MaterialType tag of a material value.

    Raises:
        TypeError: If material is not a supported material value.
    """
    if isinstance(material, Lambertian):
        return MaterialType.LAMBERTIAN
    if isinstance(material, Metallic):
        return MaterialType.METAL
    raise TypeError(f"Unsupported material: {material!r}")


@dataclass(frozen=True)
class SphereInfo:
    """A sphere entry in a scene.

    Attributes:
        center: The center of the sphere.
        radius: The radius of the sphere. Values <= 0 never intersect.
        material_id: The unified material ID assigned to the sphere.
    """

    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Plain-data form of a scene, used for serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


class Scene:
    """Ordered collection of spheres with shared, immutable materials.

    Attributes:
        materials: Registered materials, indexed by unified material ID.
        spheres: Spheres in insertion order. Order only breaks exact ties.
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[Lambertian | Metallic] = []
        self.spheres: list[SphereInfo] = []

    def clear(self) -> None:
        """Remove all spheres and materials."""
        self.materials.clear()
        self.spheres.clear()

    def __repr__(self) -> str:
        return (
            f"Scene(materials={len(self.materials)}, spheres={len(self.spheres)})"
        )

    # =========================================================================
    # Material Management
    # =========================================================================

    def add_material(self, material: Lambertian | Metallic) -> int:
        """Register a material and return its unified material ID.

        Args:
            material: A Lambertian or Metallic value.

        Returns:
            The unified material ID for this material.

        Raises:
            TypeError: If material is not a supported material value.
            RuntimeError: If the per-type material capacity is exceeded.
        """
        material_type = material_type_of(material)
        count = sum(1 for m in self.materials if material_type_of(m) == material_type)
        if count >= _MATERIAL_CAPACITY[material_type]:
            raise RuntimeError(
                f"Maximum number of {material_type.name.lower()} materials "
                f"({_MATERIAL_CAPACITY[material_type]}) exceeded"
            )
        self.materials.append(material)
        return len(self.materials) - 1

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Add a Lambertian (diffuse) material to the scene.

        Raises:
            ValueError: If any albedo component is outside [0, 1].
        """
        return self.add_material(Lambertian(albedo=albedo))

    def add_metal_material(
        self,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Add a metallic material to the scene.

        Raises:
            ValueError: If any albedo component or fuzz is outside [0, 1].
        """
        return self.add_material(Metallic(albedo=albedo, fuzz=fuzz))

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return len(self.materials)

    def get_material(self, material_id: int) -> Lambertian | Metallic | None:
        """Get a material by ID, or None if the ID is not registered."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type(self, material_id: int) -> MaterialType | None:
        """Get the MaterialType of a material ID, or None if not registered."""
        material = self.get_material(material_id)
        if material is None:
            return None
        return material_type_of(material)

    # =========================================================================
    # Sphere Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere referring to a registered material.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere.
            material_id: The unified material ID to assign to the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid.
        """
        if material_id < 0 or material_id >= len(self.materials):
            raise ValueError(f"Invalid material_id: {material_id}")
        if len(self.spheres) >= MAX_SPHERES:
            raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

        self.spheres.append(
            SphereInfo(
                center=(float(center[0]), float(center[1]), float(center[2])),
                radius=float(radius),
                material_id=material_id,
            )
        )
        return len(self.spheres) - 1

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a new Lambertian material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_lambertian_material(albedo)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with a new metallic material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_metal_material(albedo, fuzz)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return len(self.spheres)

    # =========================================================================
    # Field Upload
    # =========================================================================

    def upload(self) -> None:
        """Write the scene into the Taichi fields read by render kernels.

        Replaces whatever scene was uploaded before. Requires an initialized
        Taichi runtime.
        """
        clear_all_fields()

        for material_id, material in enumerate(self.materials):
            material_type = material_type_of(material)
            if material_type == MaterialType.LAMBERTIAN:
                type_index = add_lambertian_material(material.albedo)
            else:
                type_index = add_metal_material(material.albedo, material.fuzz)
            material_types[material_id] = int(material_type)
            material_type_indices[material_id] = type_index
        num_materials[None] = len(self.materials)

        for sphere in self.spheres:
            add_sphere(sphere.center, sphere.radius, sphere.material_id)

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for material in self.materials:
            if isinstance(material, Metallic):
                config.materials.append(
                    {"type": "metal", "albedo": list(material.albedo), "fuzz": material.fuzz}
                )
            else:
                config.materials.append(
                    {"type": "lambertian", "albedo": list(material.albedo)}
                )

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        return config

    @classmethod
    def from_config(cls, config: SceneConfig) -> "Scene":
        """Build a scene from a configuration object.

        Raises:
            InvalidConfigurationError: If the configuration contains an unknown
                material type, invalid or wrongly typed material parameters,
                an entry that is not an object, or a sphere that refers to a
                missing material.
        """
        scene = cls()

        try:
            for mat_config in config.materials:
                if not isinstance(mat_config, dict):
                    raise InvalidConfigurationError(
                        f"Material entry must be an object, got {mat_config!r}"
                    )
                mat_type = str(mat_config.get("type", "")).lower()
                if mat_type == "lambertian":
                    scene.add_lambertian_material(
                        tuple(mat_config.get("albedo", [0.5, 0.5, 0.5]))
                    )
                elif mat_type == "metal":
                    scene.add_metal_material(
                        tuple(mat_config.get("albedo", [0.8, 0.8, 0.8])),
                        mat_config.get("fuzz", 0.0),
                    )
                else:
                    raise InvalidConfigurationError(f"Unknown material type: {mat_type!r}")

            for sphere_config in config.spheres:
                if not isinstance(sphere_config, dict):
                    raise InvalidConfigurationError(
                        f"Sphere entry must be an object, got {sphere_config!r}"
                    )
                center = sphere_config.get("center", [0.0, 0.0, 0.0])
                if len(center) != 3:
                    raise InvalidConfigurationError(
                        f"Sphere center must have 3 components, got {center!r}"
                    )
                scene.add_sphere(
                    tuple(center),
                    sphere_config.get("radius", 1.0),
                    sphere_config.get("material_id", 0),
                )
        except InvalidConfigurationError:
            raise
        except (TypeError, ValueError, AttributeError) as e:
            raise InvalidConfigurationError(f"Invalid scene configuration: {e}") from e

        return scene

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Scene":
        """Build a scene from a dictionary with 'materials' and 'spheres' keys.

        Raises:
            InvalidConfigurationError: If data is not a dictionary or does not
                describe a valid scene.
        """
        if not isinstance(data, dict):
            raise InvalidConfigurationError(
                f"Scene data must be a dictionary, got {type(data).__name__}"
            )
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
        )
        return cls.from_config(config)

    def save_json(self, filepath: str | Path) -> None:
        """Write the scene to a JSON file, creating parent directories."""
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        filepath.write_text(json.dumps(self.to_dict(), indent=2))

    @classmethod
    def load_json(cls, filepath: str | Path) -> "Scene":
        """Read a scene from a JSON file written by save_json.

        Raises:
            FileNotFoundError: If the file does not exist.
            InvalidConfigurationError: If the file does not describe a valid scene.
        """
        try:
            data = json.loads(Path(filepath).read_text())
        except json.JSONDecodeError as e:
            raise InvalidConfigurationError(f"Invalid scene file {filepath}: {e}") from e
        if not isinstance(data, dict):
            raise InvalidConfigurationError(f"Scene file {filepath} must contain an object")
        return cls.from_dict(data)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS
