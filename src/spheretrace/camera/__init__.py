"""Camera module for view and ray generation.

Components:
    pinhole: Pinhole (perspective) camera model

Ray generation uses normalized image-plane coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image
"""

from .pinhole import (
    PinholeCamera,
    get_camera_basis,
    get_camera_info,
    get_camera_origin,
    get_ray,
    get_view_direction,
    jitter_to_uv,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_ray",
    "jitter_to_uv",
    "get_camera_origin",
    "get_camera_basis",
    "get_view_direction",
    "get_camera_info",
]
