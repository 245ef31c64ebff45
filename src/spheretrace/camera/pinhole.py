"""Pinhole camera model for perspective projection ray generation.

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

and a viewport rectangle at unit distance in front of the camera. Both are
derived once per render pass by ``setup_camera`` and stored in Taichi fields;
``get_ray`` is then a pure function of the image-plane coordinates.

Image-plane orientation: u = 0 is the left edge, v = 0 is the bottom edge.
Pixel rows are numbered from the top of the image, so ``jitter_to_uv`` maps
row 0 to the top of the viewport.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>>
    >>> camera = PinholeCamera(aspect_ratio=16.0 / 9.0)  # origin, looking down -z
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through image center
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from spheretrace.core.config import InvalidConfigurationError
from spheretrace.core.ray import Ray, make_ray, normalize, vec3
from spheretrace.core.rng import random_float

# Below this norm the basis construction is treated as degenerate
_BASIS_EPSILON = 1e-8

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
    """

    lookfrom: tuple[float, float, float] = (0.0, 0.0, 0.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 90.0
    aspect_ratio: float = 16.0 / 9.0

    def validate(self) -> None:
        """Check that the camera defines a usable view.

        Raises:
            InvalidConfigurationError: If lookfrom equals lookat, vup is
                parallel to the view direction, vfov is outside (0, 180) or
                aspect_ratio is not positive.
        """
        if not 0.0 < self.vfov < 180.0:
            raise InvalidConfigurationError(
                f"vfov must be in (0, 180) degrees, got {self.vfov}"
            )
        if self.aspect_ratio <= 0.0:
            raise InvalidConfigurationError(
                f"aspect_ratio must be positive, got {self.aspect_ratio}"
            )
        w = np.subtract(self.lookfrom, self.lookat).astype(np.float64)
        if np.linalg.norm(w) < _BASIS_EPSILON:
            raise InvalidConfigurationError("lookfrom and lookat must differ")
        if np.linalg.norm(np.cross(np.asarray(self.vup, dtype=np.float64), w)) < _BASIS_EPSILON:
            raise InvalidConfigurationError("vup must not be parallel to the view direction")


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full height
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per render pass)
# =============================================================================


def setup_camera(camera: PinholeCamera) -> None:
    """Derive the camera basis and viewport and store them in Taichi fields.

    The viewport is a virtual image plane at unit distance from the camera
    with height 2 * tan(vfov / 2).

    Args:
        camera: Camera configuration with position, orientation, and FOV.

    Raises:
        InvalidConfigurationError: If the camera is degenerate.
    """
    camera.validate()

    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)

    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    w = lookfrom - lookat
    w = w / np.linalg.norm(w)

    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)

    v = np.cross(w, u)

    horizontal = viewport_width * u
    vertical = viewport_height * v

    # Origin - w (move forward) - horizontal/2 (left) - vertical/2 (down)
    lower_left = lookfrom - w - horizontal / 2.0 - vertical / 2.0

    _camera_origin[None] = lookfrom.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Generate a ray through normalized image coordinates (u, v).

    Args:
        u: Horizontal coordinate in [0, 1] (0 = left edge).
        v: Vertical coordinate in [0, 1] (0 = bottom edge).

    Returns:
        A Ray from the camera position with a unit direction toward the
        corresponding viewport point.
    """
    point_on_viewport = (
        _lower_left_corner[None] + u * _viewport_horizontal[None] + v * _viewport_vertical[None]
    )
    origin = _camera_origin[None]
    return make_ray(origin, normalize(point_on_viewport - origin))


@ti.func
def jitter_to_uv(col: ti.i32, row: ti.i32, width: ti.i32, height: ti.i32, state: ti.u32):
    """Map a pixel plus a uniform [0, 1)^2 jitter to image-plane coordinates.

    Args:
        col: Pixel column (0 = left).
        row: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
        state: The RNG stream state.

    Returns:
        A tuple (u, v, new_state) with v = 0 at the bottom of the image.
    """
    jitter_u, s = random_float(state)
    jitter_v, s = random_float(s)

    y = height - 1 - row
    u = (ti.cast(col, ti.f32) + jitter_u) / ti.cast(width, ti.f32)
    v = (ti.cast(y, ti.f32) + jitter_v) / ti.cast(height, ti.f32)
    return u, v, s


@ti.func
def get_camera_origin() -> vec3:
    """Get the camera position in world space."""
    return _camera_origin[None]


@ti.func
def get_camera_basis():
    """Get the camera's orthonormal basis vectors.

    Returns:
        A tuple (u, v, w) of right, up and backward directions.
    """
    return _camera_u[None], _camera_v[None], _camera_w[None]


@ti.func
def get_view_direction() -> vec3:
    """Get the unit direction the camera looks along (-w)."""
    return -tm.normalize(_camera_w[None])


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get the current camera state for inspection.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left.
    """
    fields = {
        "origin": _camera_origin,
        "u": _camera_u,
        "v": _camera_v,
        "w": _camera_w,
        "horizontal": _viewport_horizontal,
        "vertical": _viewport_vertical,
        "lower_left": _lower_left_corner,
    }
    info = {}
    for name, vector_field in fields.items():
        vec = vector_field[None]
        info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    return info
