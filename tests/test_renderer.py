"""Tests for render passes and frame buffers.

Tests cover:
- RenderConfig validation
- FrameBuffer accessors and immutability
- Determinism across repeated passes and row batch sizes
- Progress reporting and resuming an interrupted pass
- Antialiasing noise falling with more samples
"""

import numpy as np
import pytest


def _single_sphere(width=16, height=16, **kwargs):
    from spheretrace.core.config import RenderConfig
    from spheretrace.scene.presets import create_single_sphere_scene

    scene, camera = create_single_sphere_scene(aspect_ratio=width / height)
    config = RenderConfig(width=width, height=height, **kwargs)
    return scene, camera, config


class TestRenderConfig:
    """Tests for RenderConfig validation."""

    def test_defaults(self):
        """Test default sample count and depth."""
        from spheretrace.core.config import RenderConfig

        config = RenderConfig(width=400, height=225)
        config.validate()
        assert config.samples_per_pixel == 32
        assert config.max_depth == 5
        assert config.rng_seed == 0
        assert abs(config.aspect_ratio - 16.0 / 9.0) < 1e-9

    @pytest.mark.parametrize(
        "kwargs,message",
        [
            ({"width": 0}, "positive"),
            ({"height": -4}, "positive"),
            ({"width": 4096}, "exceed maximum"),
            ({"samples_per_pixel": 0}, "samples_per_pixel"),
            ({"max_depth": -1}, "max_depth"),
            ({"rng_seed": -1}, "rng_seed"),
            ({"rng_seed": 2**32}, "rng_seed"),
        ],
    )
    def test_invalid_config(self, kwargs, message):
        """Test out of range parameters are rejected."""
        from spheretrace.core.config import InvalidConfigurationError, RenderConfig

        params = {"width": 8, "height": 8}
        params.update(kwargs)
        with pytest.raises(InvalidConfigurationError, match=message):
            RenderConfig(**params).validate()

    def test_zero_depth_is_valid(self):
        """Test max_depth 0 is an accepted configuration."""
        from spheretrace.core.config import RenderConfig

        RenderConfig(width=8, height=8, max_depth=0).validate()

    def test_renderer_validates_up_front(self):
        """Test Renderer rejects invalid configs and cameras on construction."""
        from spheretrace.camera.pinhole import PinholeCamera
        from spheretrace.core.config import InvalidConfigurationError, RenderConfig, SpheretraceError
        from spheretrace.core.renderer import Renderer
        from spheretrace.scene.manager import Scene

        with pytest.raises(InvalidConfigurationError):
            Renderer(Scene(), PinholeCamera(), RenderConfig(width=8, height=8, samples_per_pixel=0))
        with pytest.raises(SpheretraceError):
            Renderer(Scene(), PinholeCamera(vfov=200.0), RenderConfig(width=8, height=8))


class TestFrameBuffer:
    """Tests for the FrameBuffer value."""

    def test_accessors(self):
        """Test size, pixel lookup and conversions."""
        from spheretrace.core.renderer import FrameBuffer

        pixels = np.zeros((2, 3, 3), dtype=np.float64)
        pixels[1, 2] = [0.25, 0.5, 2.0]
        fb = FrameBuffer(pixels)

        assert fb.width == 3
        assert fb.height == 2
        assert fb.pixels.dtype == np.float32
        assert fb.get_pixel(2, 1) == (0.25, 0.5, 2.0)
        assert repr(fb) == "FrameBuffer(width=3, height=2)"

        rgba = fb.to_rgba()
        assert rgba.shape == (2, 3, 4)
        assert np.all(rgba[:, :, 3] == 1.0)
        assert np.array_equal(rgba[:, :, :3], fb.pixels)

    def test_pixels_are_read_only(self):
        """Test the frame buffer cannot be modified through its pixels."""
        from spheretrace.core.renderer import FrameBuffer

        source = np.zeros((2, 2, 3), dtype=np.float32)
        fb = FrameBuffer(source)
        source[0, 0] = 1.0

        assert fb.get_pixel(0, 0) == (0.0, 0.0, 0.0)
        with pytest.raises(ValueError):
            fb.pixels[0, 0, 0] = 1.0

        copy = fb.to_numpy()
        copy[0, 0, 0] = 1.0
        assert fb.get_pixel(0, 0) == (0.0, 0.0, 0.0)

    def test_bad_shape(self):
        """Test frame buffers must be (height, width, 3)."""
        from spheretrace.core.renderer import FrameBuffer

        with pytest.raises(ValueError, match="Expected shape"):
            FrameBuffer(np.zeros((2, 2, 4)))

    def test_is_finite_and_equality(self):
        """Test finiteness checks and value equality."""
        from spheretrace.core.renderer import FrameBuffer

        a = FrameBuffer(np.ones((2, 2, 3)))
        b = FrameBuffer(np.ones((2, 2, 3)))
        bad = np.ones((2, 2, 3))
        bad[1, 1, 1] = np.nan

        assert a.is_finite()
        assert a == b
        assert not FrameBuffer(bad).is_finite()
        assert a != FrameBuffer(np.zeros((2, 2, 3)))


class TestDeterminism:
    """Tests for bit-identical output."""

    def test_repeated_render_is_identical(self):
        """Test two passes with the same inputs produce the same buffer."""
        from spheretrace.core.renderer import render

        scene, camera, config = _single_sphere(samples_per_pixel=4, rng_seed=11)
        first = render(scene, camera, config)
        second = render(scene, camera, config)

        assert first == second
        assert first.is_finite()

    def test_batch_size_does_not_change_result(self):
        """Test row batching has no effect on the pixels."""
        from spheretrace.core.renderer import Renderer

        scene, camera, config = _single_sphere(samples_per_pixel=4, rng_seed=5)
        results = [
            Renderer(scene, camera, config).render(rows_per_batch=n) for n in (1, 5, 16, 100)
        ]
        for fb in results[1:]:
            assert fb == results[0]

    def test_seed_changes_noise(self):
        """Test different seeds give different noise."""
        from spheretrace.core.renderer import render

        scene, camera, config = _single_sphere(samples_per_pixel=2, rng_seed=1)
        _, _, other = _single_sphere(samples_per_pixel=2, rng_seed=2)

        assert render(scene, camera, config) != render(scene, camera, other)

    def test_zero_depth_renders_black(self):
        """Test max_depth 0 gives an all black image."""
        from spheretrace.core.renderer import render

        scene, camera, config = _single_sphere(samples_per_pixel=2, max_depth=0)
        fb = render(scene, camera, config)
        assert np.all(fb.pixels == 0.0)

    def test_empty_scene_is_sky(self):
        """Test an empty scene renders the sky gradient, bluer toward the top."""
        from spheretrace.core.renderer import render
        from spheretrace.scene.manager import Scene

        _, camera, config = _single_sphere(samples_per_pixel=2)
        fb = render(Scene(), camera, config)

        red_to_blue = fb.pixels[:, :, 0] / fb.pixels[:, :, 2]
        assert np.allclose(fb.pixels[:, :, 2], 1.0, atol=1e-5)
        assert red_to_blue[0].mean() < red_to_blue[-1].mean()


class TestProgress:
    """Tests for batched progress reporting."""

    def test_callback_reports_batches(self):
        """Test the callback sees cumulative row counts."""
        from spheretrace.core.renderer import Renderer

        scene, camera, config = _single_sphere(samples_per_pixel=1)
        calls = []
        Renderer(scene, camera, config).render(
            callback=lambda done, total: calls.append((done, total)),
            rows_per_batch=5,
        )
        assert calls == [(5, 16), (10, 16), (15, 16), (16, 16)]

    def test_interrupted_pass_resumes(self):
        """Test a pass stopped between batches resumes to the same image."""
        from spheretrace.core.renderer import Renderer, render

        scene, camera, config = _single_sphere(samples_per_pixel=2, rng_seed=9)
        renderer = Renderer(scene, camera, config)

        progress = renderer.render_progressive(rows_per_batch=4)
        assert next(progress) == (4, 16)
        progress.close()

        assert renderer.rows_completed == 4
        assert not renderer.is_complete
        with pytest.raises(RuntimeError, match="incomplete"):
            renderer.get_framebuffer()

        fb = renderer.render()
        assert renderer.is_complete
        assert fb == render(scene, camera, config)

    def test_reset(self):
        """Test reset starts the pass over."""
        from spheretrace.core.renderer import Renderer

        scene, camera, config = _single_sphere(samples_per_pixel=1)
        renderer = Renderer(scene, camera, config)
        renderer.render()
        renderer.reset()

        assert renderer.rows_completed == 0
        assert not renderer.is_complete
        assert "rows_completed=0" in repr(renderer)

    def test_rows_per_batch_must_be_positive(self):
        """Test non-positive batch sizes are rejected."""
        from spheretrace.core.renderer import Renderer

        scene, camera, config = _single_sphere(samples_per_pixel=1)
        with pytest.raises(ValueError, match="rows_per_batch"):
            list(Renderer(scene, camera, config).render_progressive(rows_per_batch=0))


class TestAntialiasing:
    """Tests for multi-sample pixel averaging."""

    def test_edge_pixel_noise_falls_with_samples(self):
        """Test a pixel straddling the sphere edge converges as samples grow."""
        from spheretrace.camera.pinhole import setup_camera
        from spheretrace.core.config import RenderConfig
        from spheretrace.core.integrator import render_pixel

        scene, camera, config = _single_sphere()
        scene.upload()
        setup_camera(camera)

        def spread(samples):
            values = []
            for seed in range(16):
                cfg = RenderConfig(width=16, height=16, samples_per_pixel=samples, rng_seed=seed)
                values.append(render_pixel(12, 8, cfg))
            return np.std(np.array(values), axis=0).mean()

        one, eight, sixty_four = spread(1), spread(8), spread(64)
        assert one > eight > sixty_four
