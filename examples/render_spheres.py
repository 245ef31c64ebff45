#!/usr/bin/env python3
"""Render a sphere scene to a PNG file.

Renders one of the stock scenes (or a scene loaded from JSON) with the
stochastic sphere tracer, reporting progress row batch by row batch.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH           Image width in pixels (default: 400)
    --height HEIGHT         Image height in pixels (default: 225)
    --samples SAMPLES       Samples per pixel (default: 32)
    --max-depth DEPTH       Maximum ray bounces (default: 5)
    --seed SEED             Random seed (default: 0)
    --scene NAME            Stock scene: single, four_spheres (default: four_spheres)
    --scene-file PATH       Load the scene from a JSON file instead
    --output OUTPUT         Output file path (default: spheres.png)
    --rows-per-batch ROWS   Rows per progress update (default: 16)
    --tone-map METHOD       none, reinhard or exposure (default: none)
    --preview               Show the result in a Matplotlib window
    --quiet                 Suppress progress output

Example:
    python -m examples.render_spheres --width 800 --height 450 --samples 100
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=400, help="Image width in pixels (default: 400)")
    parser.add_argument("--height", type=int, default=225, help="Image height in pixels (default: 225)")
    parser.add_argument("--samples", type=int, default=32, help="Samples per pixel (default: 32)")
    parser.add_argument("--max-depth", type=int, default=5, help="Maximum ray bounces (default: 5)")
    parser.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    parser.add_argument(
        "--scene",
        choices=["single", "four_spheres"],
        default="four_spheres",
        help="Stock scene to render (default: four_spheres)",
    )
    parser.add_argument("--scene-file", type=str, default=None, help="Load the scene from a JSON file")
    parser.add_argument("--output", type=str, default="spheres.png", help="Output file path (default: spheres.png)")
    parser.add_argument("--rows-per-batch", type=int, default=16, help="Rows per progress update (default: 16)")
    parser.add_argument(
        "--tone-map",
        choices=["none", "reinhard", "exposure"],
        default="none",
        help="Tone mapping applied before gamma (default: none)",
    )
    parser.add_argument("--preview", action="store_true", help="Show the result in a Matplotlib window")
    parser.add_argument("--cpu", action="store_true", help="Force the Taichi CPU backend")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args(argv)


def render_spheres(
    width: int = 400,
    height: int = 225,
    samples_per_pixel: int = 32,
    max_depth: int = 5,
    seed: int = 0,
    scene_name: str = "four_spheres",
    scene_file: str | None = None,
    output_path: str = "spheres.png",
    rows_per_batch: int = 16,
    tone_map: str = "none",
    preview: bool = False,
    quiet: bool = False,
) -> Path:
    """Render a scene and save it as a PNG.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from spheretrace.core.config import RenderConfig
    from spheretrace.core.renderer import Renderer
    from spheretrace.preview.display import show_preview
    from spheretrace.preview.export import save_png
    from spheretrace.scene.manager import Scene
    from spheretrace.scene.presets import create_default_camera, create_preset_scene

    config = RenderConfig(
        width=width,
        height=height,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
        rng_seed=seed,
    )
    config.validate()

    if scene_file is not None:
        scene = Scene.load_json(scene_file)
        camera = create_default_camera(config.aspect_ratio)
        scene_label = scene_file
    else:
        scene, camera = create_preset_scene(scene_name, config.aspect_ratio)
        scene_label = scene_name

    if not quiet:
        print(
            f"Rendering {scene_label} ({width}x{height}, {samples_per_pixel} spp, "
            f"depth {max_depth}, seed {seed})..."
        )

    renderer = Renderer(scene, camera, config)
    start_time = time.time()

    def progress_callback(rows_done: int, total_rows: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (rows_done / total_rows) * 100 if total_rows > 0 else 0
            print(
                f"\r  Progress: {rows_done}/{total_rows} rows "
                f"({progress_pct:.1f}%) - {elapsed:.1f}s",
                end="",
                flush=True,
            )

    framebuffer = renderer.render(callback=progress_callback, rows_per_batch=rows_per_batch)

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    save_png(framebuffer, output_file, tone_map=tone_map, gamma=2.2)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    if preview:
        show_preview(framebuffer, tone_map=tone_map, gamma=2.2)

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # ti.gpu falls back to CPU when no GPU backend is available
    ti.init(arch=ti.cpu if args.cpu else ti.gpu)

    from spheretrace.core.config import SpheretraceError

    try:
        render_spheres(
            width=args.width,
            height=args.height,
            samples_per_pixel=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            scene_name=args.scene,
            scene_file=args.scene_file,
            output_path=args.output,
            rows_per_batch=args.rows_per_batch,
            tone_map=args.tone_map,
            preview=args.preview,
            quiet=args.quiet,
        )
        return 0
    except (SpheretraceError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
