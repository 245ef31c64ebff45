"""Display transforms and a Matplotlib preview for rendered frame buffers.

A frame buffer holds scene-linear radiance. Lambertian and metal surfaces
never return more than they receive, so a sphere scene lit by the sky stays
in [0, 1] and the default display transform is gamma encoding alone. Tone
maps are there for buffers that go above 1, for instance after summing
passes or scaling exposure.

The transform is described by a ``DisplaySettings`` value, so the preview
window and the PNG export in ``spheretrace.preview.export`` agree on what a
given buffer looks like.

Example:
    >>> from spheretrace.core.renderer import render
    >>> from spheretrace.preview.display import show_preview
    >>>
    >>> framebuffer = render(scene, camera, config)
    >>> show_preview(framebuffer, tone_map="reinhard")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Literal

import numpy as np
import numpy.typing as npt

from spheretrace.core.config import InvalidConfigurationError

if TYPE_CHECKING:
    from spheretrace.core.renderer import FrameBuffer


# Type alias for tone mapping options
ToneMapMethod = Literal["none", "reinhard", "exposure"]

# sRGB-like display gamma
DEFAULT_GAMMA = 2.2


def tone_map_reinhard(
    image: npt.NDArray[np.float32],
) -> npt.NDArray[np.float32]:
    """Compress radiance with L / (1 + L). Negative values clamp to zero."""
    radiance = np.maximum(image, 0.0)
    return (radiance / (1.0 + radiance)).astype(np.float32)


def tone_map_exposure(
    image: npt.NDArray[np.float32],
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Compress radiance with 1 - exp(-L * exposure).

    Args:
        image: Linear image array of shape (H, W, 3).
        exposure: Scale applied before the curve. Higher values brighten.

    Returns:
        Tone mapped image in [0, 1).
    """
    radiance = np.maximum(image, 0.0)
    return (1.0 - np.exp(-radiance * exposure)).astype(np.float32)


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = DEFAULT_GAMMA,
) -> npt.NDArray[np.float32]:
    """Encode linear values as in^(1/gamma) after clamping to [0, 1].

    A gamma of 1 returns the input untouched.
    """
    if gamma == 1.0:
        return image
    return np.power(np.clip(image, 0.0, 1.0), 1.0 / gamma).astype(np.float32)


_TONE_MAPS: dict[str, Callable[[npt.NDArray[np.float32], float], npt.NDArray[np.float32]]] = {
    "none": lambda image, exposure: image,
    "reinhard": lambda image, exposure: tone_map_reinhard(image),
    "exposure": tone_map_exposure,
}


@dataclass(frozen=True)
class DisplaySettings:
    """How a linear frame buffer is turned into display values.

    Attributes:
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Display gamma, applied after tone mapping. Must be positive.
        exposure: Exposure scale for the "exposure" tone map. Must be positive.
    """

    tone_map: ToneMapMethod = "none"
    gamma: float = DEFAULT_GAMMA
    exposure: float = 1.0

    def validate(self) -> None:
        """Check the settings.

        Raises:
            InvalidConfigurationError: If the tone map is unknown or gamma or
                exposure is not a positive number.
        """
        if self.tone_map not in _TONE_MAPS:
            raise InvalidConfigurationError(
                f"Unknown tone mapping method: {self.tone_map}. "
                f"Expected one of {sorted(_TONE_MAPS)}"
            )
        if not self.gamma > 0.0:
            raise InvalidConfigurationError(f"Gamma must be positive, got {self.gamma}")
        if not self.exposure > 0.0:
            raise InvalidConfigurationError(f"Exposure must be positive, got {self.exposure}")

    def apply(self, image: npt.NDArray[np.floating]) -> npt.NDArray[np.float32]:
        """Map a linear (H, W, 3) image to float32 display values in [0, 1].

        Non-finite values are shown as black. The input is not modified.
        """
        self.validate()
        linear = np.nan_to_num(
            np.asarray(image, dtype=np.float32), nan=0.0, posinf=0.0, neginf=0.0
        )
        mapped = _TONE_MAPS[self.tone_map](linear, self.exposure)
        return np.clip(apply_gamma(mapped, self.gamma), 0.0, 1.0).astype(np.float32)


def process_image_for_display(
    image: npt.NDArray[np.float32],
    tone_map: ToneMapMethod = "none",
    gamma: float = DEFAULT_GAMMA,
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Apply tone mapping then gamma to a linear image.

    Raises:
        ValueError: If tone_map is not a known method, or gamma or exposure is
            not positive.
    """
    return DisplaySettings(tone_map=tone_map, gamma=gamma, exposure=exposure).apply(image)


def preview_title(framebuffer: FrameBuffer, settings: DisplaySettings) -> str:
    """Default preview title: resolution, plus the tone map when one is used."""
    title = f"Render Preview - {framebuffer.width}x{framebuffer.height}"
    if settings.tone_map != "none":
        title += f" ({settings.tone_map})"
    return title


def show_preview(
    framebuffer: FrameBuffer,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = DEFAULT_GAMMA,
    exposure: float = 1.0,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 4.5),
    block: bool = True,
) -> None:
    """Display a frame buffer in a Matplotlib window.

    Args:
        framebuffer: The rendered frame buffer.
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Display gamma.
        exposure: Exposure scale for the "exposure" tone map.
        title: Custom title (default shows the resolution).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until the window is closed.
    """
    import matplotlib.pyplot as plt

    settings = DisplaySettings(tone_map=tone_map, gamma=gamma, exposure=exposure)
    display_image = settings.apply(framebuffer.pixels)

    fig, ax = plt.subplots(1, 1, figsize=figsize)

    # Row 0 is the top of the image, matching imshow's default origin
    ax.imshow(display_image, interpolation="nearest")
    ax.axis("off")
    ax.set_title(title if title is not None else preview_title(framebuffer, settings))

    fig.tight_layout()
    plt.show(block=block)
