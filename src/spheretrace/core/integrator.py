"""Ray color evaluation and the per-pixel antialiasing loop.

A camera ray is followed through the scene until it misses (and picks up the
sky gradient), is absorbed by a material, or runs out of bounces. Material
attenuations multiply along the path, so the color of a path is

    attenuation_1 * attenuation_2 * ... * attenuation_n * background(direction_n)

Taichi functions cannot recurse, so the recursion ``attenuation *
ray_color(scattered, depth - 1)`` is expressed as a loop of at most
``max_depth`` bounces carrying the running throughput. A path that exhausts
its depth contributes black.

Each pixel averages ``samples_per_pixel`` jittered camera rays. Random
numbers come from a per-pixel stream seeded by ``(rng_seed, pixel index)``,
so the result of a pass does not depend on how rows are batched or how
threads are scheduled.

Example:
    >>> import numpy as np
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.core.config import RenderConfig
    >>> from spheretrace.core.integrator import render_rows
    >>> config = RenderConfig(width=64, height=36, samples_per_pixel=4)
    >>> pixels = np.zeros((36, 64, 3), dtype=np.float32)
    >>> # After Scene.upload() and setup_camera(camera):
    >>> render_rows(pixels, 0, 36, config)
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from spheretrace.camera.pinhole import get_ray, jitter_to_uv
from spheretrace.core.config import RenderConfig
from spheretrace.core.ray import Ray, make_ray, normalize
from spheretrace.core.rng import normalize_seed, seed_pixel
from spheretrace.materials.lambertian import scatter_lambertian_by_id
from spheretrace.materials.metal import scatter_metal_by_id
from spheretrace.scene.intersection import intersect_scene
from spheretrace.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# t_min and t_max for scene intersection (T_MAX stands in for +infinity)
T_MIN = 0.001
T_MAX = 1e10

# Sky gradient endpoints: horizon/below is white, straight up is light blue
SKY_BOTTOM_COLOR = vec3(1.0, 1.0, 1.0)
SKY_TOP_COLOR = vec3(0.5, 0.7, 1.0)


@ti.func
def background_color(direction: vec3) -> vec3:
    """Evaluate the sky gradient seen along a ray direction.

    Args:
        direction: The ray direction (any non-zero length).

    Returns:
        lerp(white, light blue, 0.5 * (unit(direction).y + 1)).
    """
    unit_direction = normalize(direction)
    a = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - a) * SKY_BOTTOM_COLOR + a * SKY_TOP_COLOR


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Dispatch to the scattering function of a material.

    Args:
        material_id: The unified material ID of the hit sphere.
        incident_direction: The incoming ray direction.
        normal: The unit surface normal, facing the incoming ray.
        state: The RNG stream state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, new_state).
        Unknown material IDs absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    s = state

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, s = scatter_lambertian_by_id(type_index, normal, s)
        did_scatter = 1

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter, s = scatter_metal_by_id(
            type_index, incident_direction, normal, s
        )

    return scattered_direction, attenuation, did_scatter, s


# =============================================================================
# Ray Color
# =============================================================================


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32, state: ti.u32):
    """Evaluate the color carried back along a ray.

    Args:
        ray: The ray to follow.
        max_depth: Maximum number of scene intersections. 0 yields black.
        state: The RNG stream state.

    Returns:
        A tuple (color, new_state) with color in linear RGB.
    """
    origin = ray.origin
    direction = ray.direction
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    s = state

    # Active flag for path continuation (no break inside ti.func loops)
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = intersect_scene(origin, direction, T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * background_color(direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter, s = scatter_material(
                    rec.material_id, direction, rec.normal, s
                )
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = rec.point
                    direction = scattered_direction

    return color, s


@ti.func
def _sample_pixel(
    col: ti.i32,
    row: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.u32,
) -> vec3:
    """Average samples_per_pixel jittered ray colors for one pixel."""
    state = seed_pixel(seed, row, col, width)
    total = vec3(0.0, 0.0, 0.0)

    for _ in range(samples_per_pixel):
        u, v, state = jitter_to_uv(col, row, width, height, state)
        color, state = ray_color(get_ray(u, v), max_depth, state)

        # Drop NaN/Inf samples instead of poisoning the average
        for c in ti.static(range(3)):
            if tm.isnan(color[c]) or tm.isinf(color[c]):
                color[c] = 0.0

        total += color

    return total / ti.cast(samples_per_pixel, ti.f32)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    pixels: ti.types.ndarray(),
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.u32,
):
    for row, col in ti.ndrange((row_start, row_end), width):
        color = _sample_pixel(col, row, width, height, samples_per_pixel, max_depth, seed)
        for c in ti.static(range(3)):
            pixels[row, col, c] = color[c]


@ti.kernel
def _render_single_pixel(
    col: ti.i32,
    row: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.u32,
) -> vec3:
    return _sample_pixel(col, row, width, height, samples_per_pixel, max_depth, seed)


@ti.kernel
def _trace_ray(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    max_depth: ti.i32,
    seed: ti.u32,
) -> vec3:
    ray = make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz))
    color, _ = ray_color(ray, max_depth, seed_pixel(seed, 0, 0, 1))
    return color


# =============================================================================
# Public Rendering API
# =============================================================================


def render_rows(pixels: np.ndarray, row_start: int, row_end: int, config: RenderConfig) -> None:
    """Render image rows [row_start, row_end) into a pixel array.

    The scene and camera must already be uploaded (Scene.upload() and
    setup_camera()). Rows are numbered from the top of the image.

    Args:
        pixels: float32 array of shape (config.height, config.width, 3).
        row_start: First row to render.
        row_end: One past the last row to render.
        config: The render configuration.

    Raises:
        ValueError: If the pixel array or row range does not match config.
    """
    expected_shape = (config.height, config.width, 3)
    if pixels.shape != expected_shape or pixels.dtype != np.float32:
        raise ValueError(
            f"pixels must be a float32 array of shape {expected_shape}, "
            f"got {pixels.dtype} {pixels.shape}"
        )
    if not 0 <= row_start <= row_end <= config.height:
        raise ValueError(
            f"Row range [{row_start}, {row_end}) is outside [0, {config.height})"
        )
    if row_start == row_end:
        return

    _render_rows(
        pixels,
        row_start,
        row_end,
        config.width,
        config.height,
        config.samples_per_pixel,
        config.max_depth,
        normalize_seed(config.rng_seed),
    )


def render_pixel(col: int, row: int, config: RenderConfig) -> tuple[float, float, float]:
    """Render one pixel exactly as render_rows would.

    This is a Python-callable function for testing and inspection. The scene
    and camera must already be uploaded.

    Args:
        col: Pixel column (0 = left).
        row: Pixel row (0 = top).
        config: The render configuration.

    Returns:
        Tuple of (R, G, B) linear color values.
    """
    color = _render_single_pixel(
        col,
        row,
        config.width,
        config.height,
        config.samples_per_pixel,
        config.max_depth,
        normalize_seed(config.rng_seed),
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int,
    seed: int = 0,
) -> tuple[float, float, float]:
    """Evaluate ray_color for a single ray against the uploaded scene.

    Args:
        origin: The ray origin.
        direction: The ray direction.
        max_depth: Maximum number of bounces.
        seed: Seed of the random stream used for scattering.

    Returns:
        Tuple of (R, G, B) linear color values.
    """
    color = _trace_ray(
        origin[0],
        origin[1],
        origin[2],
        direction[0],
        direction[1],
        direction[2],
        max_depth,
        normalize_seed(seed),
    )
    return (float(color[0]), float(color[1]), float(color[2]))
