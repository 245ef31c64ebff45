"""Deterministic per-pixel random number streams for Taichi kernels.

Taichi's built-in ``ti.random()`` draws from per-thread states, so the values a
pixel receives depend on how the parallel loop is scheduled. To make a render
pass reproducible for a given seed, every pixel derives its own 32-bit stream
from ``(seed, pixel index)`` and threads that state explicitly through every
sampling function.

Streams are advanced with a 32-bit LCG and whitened with the PCG output
permutation. Seeds are scrambled with Thomas Wang's integer hash.

Example:
    >>> @ti.kernel
    ... def noise(seed: ti.u32):
    ...     for row, col in ti.ndrange(height, width):
    ...         state = seed_pixel(seed, row, col, width)
    ...         value, state = random_float(state)
"""

import taichi as ti

# LCG constants (multiplier = 1 mod 4, odd increment: full 2^32 period)
_LCG_MULTIPLIER = 747796405
_LCG_INCREMENT = 1013904223

# 2^-24, maps the top 24 bits of a word to [0, 1)
_INV_2_24 = 1.0 / 16777216.0

SEED_MASK = 0xFFFFFFFF


@ti.func
def wang_hash(key: ti.u32) -> ti.u32:
    """Scramble a 32-bit key with Thomas Wang's integer hash.

    Args:
        key: The input key.

    Returns:
        The hashed key.
    """
    k = (key ^ ti.u32(61)) ^ (key >> ti.u32(16))
    k = k * ti.u32(9)
    k = k ^ (k >> ti.u32(4))
    k = k * ti.u32(0x27D4EB2D)
    k = k ^ (k >> ti.u32(15))
    return k


@ti.func
def seed_pixel(seed: ti.u32, row: ti.i32, col: ti.i32, width: ti.i32) -> ti.u32:
    """Derive the initial stream state for one pixel.

    Args:
        seed: The render pass seed.
        row: Image row (0 = top).
        col: Image column (0 = left).
        width: Image width in pixels.

    Returns:
        The initial RNG state for the pixel.
    """
    pixel_index = ti.cast(row * width + col, ti.u32)
    return wang_hash(pixel_index ^ wang_hash(seed))


@ti.func
def advance_state(state: ti.u32) -> ti.u32:
    """Advance the LCG by one step."""
    return state * ti.u32(_LCG_MULTIPLIER) + ti.u32(_LCG_INCREMENT)


@ti.func
def random_float(state: ti.u32):
    """Draw a uniform float in [0, 1) and advance the stream.

    Args:
        state: The current stream state.

    Returns:
        A tuple (value, new_state).
    """
    new_state = advance_state(state)
    shift = (new_state >> ti.u32(28)) + ti.u32(4)
    word = ((new_state >> shift) ^ new_state) * ti.u32(277803737)
    word = (word >> ti.u32(22)) ^ word
    value = ti.cast(word >> ti.u32(8), ti.f32) * _INV_2_24
    return value, new_state


def normalize_seed(seed: int) -> int:
    """Fold a Python integer seed into the unsigned 32-bit kernel argument range."""
    return seed & SEED_MASK
