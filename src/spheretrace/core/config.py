"""Render configuration and configuration errors.

A render pass is fully described by a scene, a camera and a ``RenderConfig``.
The config is validated once at pass entry; an invalid config is reported
before any pixel is rendered.

Example:
    >>> config = RenderConfig(width=400, height=225, samples_per_pixel=10)
    >>> config.validate()
    >>> config.aspect_ratio
    1.7777777777777777
"""

from dataclasses import dataclass

from spheretrace.core.rng import SEED_MASK

# Largest image a render pass accepts
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

DEFAULT_SAMPLES_PER_PIXEL = 32
DEFAULT_MAX_DEPTH = 5


class SpheretraceError(Exception):
    """Base class for errors raised by spheretrace."""


class InvalidConfigurationError(SpheretraceError, ValueError):
    """Raised when render, camera or scene parameters cannot be rendered."""


@dataclass(frozen=True)
class RenderConfig:
    """Parameters of a single render pass.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Maximum number of ray bounces. 0 renders black.
        rng_seed: Seed of the per-pixel random streams (unsigned 32-bit).
    """

    width: int
    height: int
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL
    max_depth: int = DEFAULT_MAX_DEPTH
    rng_seed: int = 0

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    def validate(self) -> None:
        """Check that the configuration describes a renderable pass.

        Raises:
            InvalidConfigurationError: If any parameter is out of range.
        """
        if self.width <= 0 or self.height <= 0:
            raise InvalidConfigurationError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.width > MAX_IMAGE_WIDTH or self.height > MAX_IMAGE_HEIGHT:
            raise InvalidConfigurationError(
                f"Image dimensions ({self.width}x{self.height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        if self.samples_per_pixel <= 0:
            raise InvalidConfigurationError(
                f"samples_per_pixel must be positive, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise InvalidConfigurationError(
                f"max_depth must be non-negative, got {self.max_depth}"
            )
        if not 0 <= self.rng_seed <= SEED_MASK:
            raise InvalidConfigurationError(
                f"rng_seed must fit in an unsigned 32-bit integer, got {self.rng_seed}"
            )
