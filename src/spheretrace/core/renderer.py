"""Render passes producing linear-light frame buffers.

A render pass is a pure function of (scene, camera, config): the same inputs
always produce a bit-identical ``FrameBuffer``. ``Renderer`` runs a pass in
batches of image rows so a host can report progress or stop between batches;
it never stops in the middle of a row.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.camera.pinhole import PinholeCamera
    >>> from spheretrace.core.config import RenderConfig
    >>> from spheretrace.core.renderer import Renderer
    >>> from spheretrace.scene.presets import create_four_spheres_scene
    >>>
    >>> scene, camera = create_four_spheres_scene(aspect_ratio=16 / 9)
    >>> renderer = Renderer(scene, camera, RenderConfig(width=400, height=225))
    >>> for rows_done, total_rows in renderer.render_progressive(rows_per_batch=16):
    ...     print(f"{rows_done}/{total_rows} rows")
    >>> framebuffer = renderer.get_framebuffer()
"""

from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from spheretrace.camera.pinhole import PinholeCamera, setup_camera
from spheretrace.core.config import RenderConfig
from spheretrace.core.integrator import render_rows
from spheretrace.scene.manager import Scene

# Type alias for progress callback
# Callback receives (rows_completed, total_rows)
ProgressCallback = Callable[[int, int], None]

DEFAULT_ROWS_PER_BATCH = 16


class FrameBuffer:
    """A width x height grid of linear-light RGB values.

    Pixels are stored row-major as float32 with shape (height, width, 3).
    Row 0 is the top of the image and column 0 is the left edge.
    """

    def __init__(self, pixels: npt.NDArray[np.float32]) -> None:
        """Wrap a pixel array.

        Args:
            pixels: Array of shape (height, width, 3). It is copied and
                converted to float32.

        Raises:
            ValueError: If the array does not have shape (height, width, 3).
        """
        pixels = np.array(pixels, dtype=np.float32)
        if pixels.ndim != 3 or pixels.shape[2] != 3:
            raise ValueError(f"Expected shape (height, width, 3), got {pixels.shape}")
        pixels.setflags(write=False)
        self._pixels = pixels

    @property
    def width(self) -> int:
        """Get the image width."""
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        """Get the image height."""
        return int(self._pixels.shape[0])

    @property
    def pixels(self) -> npt.NDArray[np.float32]:
        """Read-only view of the (height, width, 3) float32 pixel array."""
        return self._pixels

    def get_pixel(self, col: int, row: int) -> tuple[float, float, float]:
        """Get the linear RGB value at column col, row row (row 0 = top)."""
        r, g, b = self._pixels[row, col]
        return (float(r), float(g), float(b))

    def to_numpy(self) -> npt.NDArray[np.float32]:
        """Return a writable copy of the pixel array."""
        return self._pixels.copy()

    def to_rgba(self) -> npt.NDArray[np.float32]:
        """Return a (height, width, 4) float32 copy with alpha set to 1."""
        rgba = np.ones((self.height, self.width, 4), dtype=np.float32)
        rgba[:, :, :3] = self._pixels
        return rgba

    def is_finite(self) -> bool:
        """Check that no pixel holds NaN or Inf."""
        return bool(np.all(np.isfinite(self._pixels)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FrameBuffer):
            return NotImplemented
        return np.array_equal(self._pixels, other._pixels)

    def __repr__(self) -> str:
        return f"FrameBuffer(width={self.width}, height={self.height})"


class Renderer:
    """Runs one render pass of a scene through a camera.

    The configuration and camera are validated on construction, so an
    invalid pass is rejected before any pixel is rendered. Scene and camera
    are treated as read-only for the lifetime of the renderer.

    Attributes:
        scene: The scene being rendered.
        camera: The camera descriptor.
        config: The render configuration.
    """

    def __init__(self, scene: Scene, camera: PinholeCamera, config: RenderConfig) -> None:
        """Initialize a render pass.

        Raises:
            InvalidConfigurationError: If config or camera are invalid.
        """
        config.validate()
        camera.validate()
        self.scene = scene
        self.camera = camera
        self.config = config
        self._pixels = np.zeros((config.height, config.width, 3), dtype=np.float32)
        self._rows_completed = 0

    @property
    def total_rows(self) -> int:
        """Get the number of rows in the image."""
        return self.config.height

    @property
    def rows_completed(self) -> int:
        """Get the number of rows rendered so far."""
        return self._rows_completed

    @property
    def is_complete(self) -> bool:
        """Check whether every row has been rendered."""
        return self._rows_completed >= self.total_rows

    def reset(self) -> None:
        """Discard rendered rows so the next render starts from the top."""
        self._pixels.fill(0.0)
        self._rows_completed = 0

    def _render_batch(self, rows_per_batch: int) -> None:
        # Fields are shared by all renderers, so upload before every batch
        self.scene.upload()
        setup_camera(self.camera)

        row_start = self._rows_completed
        row_end = min(row_start + rows_per_batch, self.total_rows)
        render_rows(self._pixels, row_start, row_end, self.config)
        self._rows_completed = row_end

    def render_progressive(
        self,
        rows_per_batch: int = DEFAULT_ROWS_PER_BATCH,
    ) -> Generator[tuple[int, int], None, None]:
        """Render the remaining rows, yielding progress after each batch.

        Closing the generator early leaves the renderer resumable: a later
        call continues from rows_completed.

        Args:
            rows_per_batch: Number of rows rendered between yields.

        Yields:
            Tuple of (rows_completed, total_rows).

        Raises:
            ValueError: If rows_per_batch is not positive.
        """
        if rows_per_batch <= 0:
            raise ValueError(f"rows_per_batch must be positive, got {rows_per_batch}")

        while not self.is_complete:
            self._render_batch(rows_per_batch)
            yield (self._rows_completed, self.total_rows)

    def render(
        self,
        callback: ProgressCallback | None = None,
        rows_per_batch: int = DEFAULT_ROWS_PER_BATCH,
    ) -> FrameBuffer:
        """Render all remaining rows and return the finished frame buffer.

        Args:
            callback: Optional function called after each batch with
                (rows_completed, total_rows).
            rows_per_batch: Number of rows rendered between callbacks.

        Returns:
            The completed FrameBuffer.
        """
        for rows_done, total_rows in self.render_progressive(rows_per_batch):
            if callback is not None:
                callback(rows_done, total_rows)
        return self.get_framebuffer()

    def get_framebuffer(self) -> FrameBuffer:
        """Get the finished frame buffer.

        Raises:
            RuntimeError: If the pass has not rendered every row yet.
        """
        if not self.is_complete:
            raise RuntimeError(
                f"Render pass incomplete: {self._rows_completed}/{self.total_rows} rows rendered"
            )
        return FrameBuffer(self._pixels)

    def __repr__(self) -> str:
        return (
            f"Renderer(width={self.config.width}, height={self.config.height}, "
            f"samples_per_pixel={self.config.samples_per_pixel}, "
            f"rows_completed={self._rows_completed})"
        )


def render(scene: Scene, camera: PinholeCamera, config: RenderConfig) -> FrameBuffer:
    """Render a scene in one call.

    Args:
        scene: The scene to render.
        camera: The camera descriptor.
        config: The render configuration.

    Returns:
        The completed FrameBuffer.

    Raises:
        InvalidConfigurationError: If config or camera are invalid.
    """
    return Renderer(scene, camera, config).render(rows_per_batch=config.height)
