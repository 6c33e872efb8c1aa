#!/usr/bin/env python3
"""Render the demo scene.

Builds the three-sphere demo scene (optionally with an OBJ mesh), renders
it on the CPU and writes a PPM or PNG image.

Usage:
    python examples/render_demo_scene.py [options]

Options:
    --width WIDTH           Image width in pixels (default: 800)
    --height HEIGHT         Image height in pixels (default: 800)
    --samples SAMPLES       Samples per pixel (default: 1)
    --depth DEPTH           Reflection depth budget (default: 3)
    --fov DEGREES           Vertical field of view (default: 60)
    --seed SEED             Random seed for anti-aliasing jitter (default: 0)
    --threads N             Worker threads (default: all cores)
    --output OUTPUT         Output file, .ppm or .png (default: image.ppm)
    --mesh PATH             OBJ mesh to add to the scene
    --mesh-translate X Y Z  Mesh translation (default: 0 -1 3)
    --mesh-scale S          Uniform mesh scale (default: 1)
    --show                  Show the result in a Matplotlib window
    --verbose / --quiet     More / less log output

Example:
    python examples/render_demo_scene.py --width 400 --height 400 --samples 4 \\
        --mesh examples/assets/pyramid.obj --output demo.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

logger = logging.getLogger("render_demo_scene")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the demo scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=800, help="Image width in pixels (default: 800)")
    parser.add_argument("--height", type=int, default=800, help="Image height in pixels (default: 800)")
    parser.add_argument("--samples", type=int, default=1, help="Samples per pixel (default: 1)")
    parser.add_argument("--depth", type=int, default=3, help="Reflection depth budget (default: 3)")
    parser.add_argument("--fov", type=float, default=60.0, help="Vertical field of view (default: 60)")
    parser.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    parser.add_argument("--threads", type=int, default=None, help="Worker threads (default: all)")
    parser.add_argument(
        "--output",
        type=str,
        default="image.ppm",
        help="Output file path, .ppm or .png (default: image.ppm)",
    )
    parser.add_argument("--mesh", type=str, default=None, help="OBJ mesh to add to the scene")
    parser.add_argument(
        "--mesh-translate",
        type=float,
        nargs=3,
        default=(0.0, -1.0, 3.0),
        metavar=("X", "Y", "Z"),
        help="Mesh translation (default: 0 -1 3)",
    )
    parser.add_argument("--mesh-scale", type=float, default=1.0, help="Uniform mesh scale")
    parser.add_argument("--rows-per-batch", type=int, default=64, help="Rows per progress update")
    parser.add_argument("--show", action="store_true", help="Show the result with Matplotlib")

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", action="store_true", help="Enable debug logging")
    verbosity.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    return parser.parse_args(argv)


def configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def render_demo_scene(args: argparse.Namespace) -> Path:
    """Render the demo scene and save it.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from whitted.core.render import Renderer
    from whitted.core.settings import RenderSettings
    from whitted.geometry.mesh import MeshTransform
    from whitted.preview.export import save_image
    from whitted.scene.demo import create_demo_scene

    settings = RenderSettings(
        width=args.width,
        height=args.height,
        max_depth=args.depth,
        rows_per_batch=args.rows_per_batch,
    )

    mesh_transform = None
    if args.mesh is not None:
        s = args.mesh_scale
        mesh_transform = MeshTransform(translation=tuple(args.mesh_translate), scale=(s, s, s))

    scene = create_demo_scene(
        samples_per_pixel=args.samples,
        field_of_view=args.fov,
        mesh_path=args.mesh,
        mesh_transform=mesh_transform,
    )
    renderer = Renderer(scene, settings)

    start_time = time.perf_counter()

    def progress_callback(done: int, total: int) -> None:
        elapsed = time.perf_counter() - start_time
        logger.debug("Rendered %d/%d rows (%.1fs)", done, total, elapsed)

    framebuffer = renderer.render(callback=progress_callback)

    output_file = Path(args.output)
    save_image(framebuffer, output_file)
    logger.info("Saved to %s", output_file.absolute())

    if args.show:
        from whitted.preview.display import show_preview

        show_preview(framebuffer)

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    from whitted.core.settings import init_taichi

    init_taichi(seed=args.seed, num_threads=args.threads)

    from whitted.geometry.obj_loader import MeshLoadError

    try:
        render_demo_scene(args)
    except (MeshLoadError, ValueError, RuntimeError, OSError) as e:
        logger.error("Render failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
