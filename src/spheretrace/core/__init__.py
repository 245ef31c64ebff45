"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities
    rng: Deterministic per-pixel random number streams
    config: Render configuration and configuration errors
    integrator: Ray color evaluation and the antialiasing loop
    renderer: Render passes and frame buffers

All compute-intensive operations use Taichi kernels.
"""

from .config import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_SAMPLES_PER_PIXEL,
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    InvalidConfigurationError,
    RenderConfig,
    SpheretraceError,
)
from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_unit_sphere,
    random_unit_vector,
    ray_at,
    reflect,
    vec3,
)
from .rng import normalize_seed, random_float, seed_pixel, wang_hash

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from spheretrace.core.integrator or spheretrace.core.renderer.

__all__ = [
    # Config
    "RenderConfig",
    "SpheretraceError",
    "InvalidConfigurationError",
    "DEFAULT_SAMPLES_PER_PIXEL",
    "DEFAULT_MAX_DEPTH",
    "MAX_IMAGE_WIDTH",
    "MAX_IMAGE_HEIGHT",
    # Ray
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "near_zero",
    "random_in_unit_sphere",
    "random_unit_vector",
    # RNG
    "wang_hash",
    "seed_pixel",
    "random_float",
    "normalize_seed",
]
