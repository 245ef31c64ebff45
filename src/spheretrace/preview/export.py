"""8-bit conversion and PNG export for rendered frame buffers.

Example:
    >>> from spheretrace.preview.export import save_png
    >>> save_png(framebuffer, "output.png", tone_map="reinhard")
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from spheretrace.preview.display import ToneMapMethod, process_image_for_display

if TYPE_CHECKING:
    from spheretrace.core.renderer import FrameBuffer


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float32 image to uint8 for display/export.

    Args:
        image: Linear HDR image array of shape (H, W, 3).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 2.2 for sRGB).
        exposure: Exposure value for exposure tone mapping (default 1.0).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    processed = process_image_for_display(
        image,
        tone_map=tone_map,
        gamma=gamma,
        exposure=exposure,
    )
    return (processed * 255).astype(np.uint8)


def to_display_rgba(
    framebuffer: FrameBuffer,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
    data_pass: bool = False,
) -> npt.NDArray[np.uint8]:
    """Convert a frame buffer to an 8-bit RGBA preview image.

    Args:
        framebuffer: The rendered frame buffer.
        tone_map: Tone mapping method for color passes.
        gamma: Gamma correction value for color passes.
        exposure: Exposure value for exposure tone mapping.
        data_pass: If True, treat the buffer as non-color data (normals,
            masks) and quantize values clamped to [0, 1] without tone mapping
            or gamma.

    Returns:
        Array of shape (H, W, 4) with dtype uint8 and opaque alpha.
    """
    rgba = framebuffer.to_rgba()

    if data_pass:
        rgb = (np.clip(rgba[:, :, :3], 0.0, 1.0) * 255).astype(np.uint8)
    else:
        rgb = image_to_uint8(rgba[:, :, :3], tone_map=tone_map, gamma=gamma, exposure=exposure)

    alpha = (np.clip(rgba[:, :, 3], 0.0, 1.0) * 255).astype(np.uint8)
    return np.dstack([rgb, alpha])


def save_png(
    framebuffer: FrameBuffer,
    filepath: str | Path,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
) -> None:
    """Save a frame buffer as an 8-bit RGB PNG file.

    Args:
        framebuffer: The rendered frame buffer.
        filepath: Output file path (should end in .png).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 2.2 for sRGB).
        exposure: Exposure value for exposure tone mapping (default 1.0).
    """
    save_png_from_array(
        framebuffer.pixels,
        filepath,
        tone_map=tone_map,
        gamma=gamma,
        exposure=exposure,
    )


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str | Path,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
) -> None:
    """Save a linear (H, W, 3) NumPy array as an 8-bit RGB PNG file."""
    image_uint8 = image_to_uint8(image, tone_map=tone_map, gamma=gamma, exposure=exposure)
    PILImage.fromarray(image_uint8).save(filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
