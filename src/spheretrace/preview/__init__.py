"""Preview module for display and export of rendered frame buffers.

Components:
    display: Tone mapping, gamma and a Matplotlib preview window
    export: 8-bit conversion and PNG export

These are display-referred transforms applied to the scene-linear frame
buffer after a render pass; the renderer itself never tone maps.

Example:
    >>> from spheretrace.preview import show_preview, save_png
    >>> show_preview(framebuffer, tone_map="reinhard")
    >>> save_png(framebuffer, "output.png", gamma=2.2)
"""

from spheretrace.preview.display import (
    DisplaySettings,
    ToneMapMethod,
    apply_gamma,
    process_image_for_display,
    show_preview,
    tone_map_exposure,
    tone_map_reinhard,
)
from spheretrace.preview.export import (
    compute_rmse,
    image_to_uint8,
    save_png,
    save_png_from_array,
    to_display_rgba,
)

__all__ = [
    # Display functions
    "show_preview",
    # Tone mapping
    "tone_map_reinhard",
    "tone_map_exposure",
    "apply_gamma",
    "process_image_for_display",
    "ToneMapMethod",
    "DisplaySettings",
    # Export functions
    "save_png",
    "save_png_from_array",
    "image_to_uint8",
    "to_display_rgba",
    "compute_rmse",
]
