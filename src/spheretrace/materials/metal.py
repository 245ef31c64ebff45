"""Metallic (specular reflective) material implementation.

Metals reflect the incoming direction about the surface normal:
    R = I - 2(I . N)N

For rough metals the reflected direction is perturbed by a random point in
the unit sphere scaled by the fuzz parameter. When the perturbed direction
falls on or below the surface (dot with the normal <= 0) the ray is absorbed,
which is how rough metals lose grazing bounces.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.materials.metal import Metallic, scatter_metal
    >>> brushed_gold = Metallic(albedo=(0.8, 0.6, 0.2), fuzz=1.0)
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter, state = scatter_metal(
    >>> #     albedo, fuzz, incident_dir, normal, state
    >>> # )
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from spheretrace.core.ray import normalize, random_in_unit_sphere, reflect
from spheretrace.materials.lambertian import validate_albedo

# Type alias for 3D vectors
vec3 = tm.vec3


def validate_fuzz(fuzz: float) -> float:
    """Check a fuzz value and return it as a float.

    Raises:
        ValueError: If fuzz is outside [0, 1].
    """
    if not 0.0 <= fuzz <= 1.0:
        raise ValueError(
            f"Fuzz = {fuzz} is outside [0, 1]. "
            "Fuzz must be between 0 (perfect mirror) and 1 (maximum fuzz)."
        )
    return float(fuzz)


@dataclass(frozen=True)
class Metallic:
    """Metallic material properties.

    Attributes:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzz: Perturbation radius of reflected rays in [0, 1].
            0 = perfect mirror, 1 = maximum fuzziness.
    """

    albedo: tuple[float, float, float]
    fuzz: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "albedo", validate_albedo(self.albedo))
        object.__setattr__(self, "fuzz", validate_fuzz(self.fuzz))


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Compute the scattered ray direction for a metal surface.

    Args:
        albedo: The reflective color (RGB).
        fuzz: The perturbation radius in [0, 1]. 0 = perfect mirror.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing the incoming ray.
        state: The RNG stream state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, new_state):
        - scattered_direction: The fuzzed reflection, or the zero vector
          when absorbed.
        - attenuation: The albedo.
        - did_scatter: 1 if the ray left above the surface, 0 if absorbed.
        - new_state: The advanced RNG state.
    """
    reflected = reflect(normalize(incident_direction), normal)

    offset, new_state = random_in_unit_sphere(state)
    scattered_direction = reflected + fuzz * offset

    did_scatter = 1
    if tm.dot(scattered_direction, normal) <= 0.0:
        did_scatter = 0
        scattered_direction = vec3(0.0, 0.0, 0.0)

    return scattered_direction, albedo, did_scatter, new_state


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 256

metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_metal_materials[None] = 0


def add_metal_material(albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
    """Add a metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple.
        fuzz: The perturbation radius in [0, 1]. Default is 0 (perfect mirror).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component or fuzz is outside [0, 1].
    """
    r, g, b = validate_albedo(albedo)
    fuzz = validate_fuzz(fuzz)

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(
            f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded"
        )

    metal_albedos[idx] = vec3(r, g, b)
    metal_fuzzes[idx] = fuzz
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a metal material by registry index."""
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f32:
    """Get the fuzz for a metal material by registry index."""
    return metal_fuzzes[material_idx]


@ti.func
def scatter_metal_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Scatter off a registered metal material.

    Args:
        material_idx: The index of the material in the registry.
        incident_direction: The incoming ray direction.
        normal: The unit surface normal at the hit point.
        state: The RNG stream state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, new_state).
    """
    albedo = get_metal_albedo(material_idx)
    fuzz = get_metal_fuzz(material_idx)
    return scatter_metal(albedo, fuzz, incident_direction, normal, state)
