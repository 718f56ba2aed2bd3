#!/usr/bin/env python3
"""Render the built-in showcase scene.

The scene has a checkered floor, a glass sphere, a striped sphere, a ringed
cylinder, a mirror cube, a small pyramid mesh and a patch of wavy water.

Usage:
    python -m examples.render_showcase [options]

Options:
    --width WIDTH       Image width in pixels (default: 400)
    --height HEIGHT     Image height in pixels (default: 200)
    --max-depth N       Recursion budget (default: 5)
    --output OUTPUT     Output file path (default: showcase.png)
    --rows-per-batch N  Rows per progress update (default: 32)
    --quiet             Suppress progress output

Example:
    python -m examples.render_showcase --width 800 --height 400 --output showcase.ppm
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the showcase scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=400, help="Image width in pixels (default: 400)")
    parser.add_argument("--height", type=int, default=200, help="Image height in pixels (default: 200)")
    parser.add_argument("--max-depth", type=int, default=5, help="Recursion budget (default: 5)")
    parser.add_argument(
        "--output",
        type=str,
        default="showcase.png",
        help="Output file path (default: showcase.png)",
    )
    parser.add_argument(
        "--rows-per-batch",
        type=int,
        default=32,
        help="Rows per progress update (default: 32)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_showcase(
    width: int = 400,
    height: int = 200,
    max_depth: int = 5,
    output_path: str = "showcase.png",
    rows_per_batch: int = 32,
    quiet: bool = False,
) -> Path:
    """Render the showcase scene and save it.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.whitted.core.render import Renderer
    from src.whitted.scene.default_world import create_showcase_scene

    if not quiet:
        print(f"Creating showcase scene ({width}x{height})...")
    world, camera = create_showcase_scene(width, height, max_depth)

    renderer = Renderer(camera, world)
    start_time = time.time()

    def progress_callback(done: int, total: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            rows_per_sec = done / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {done}/{total} rows "
                f"({100.0 * done / total:.1f}%) - {rows_per_sec:.1f} rows/s",
                end="",
                flush=True,
            )

    renderer.render(rows_per_batch=rows_per_batch, callback=progress_callback)
    if not quiet:
        print()

    output_file = Path(output_path)
    renderer.save_image(output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_showcase(
            width=args.width,
            height=args.height,
            max_depth=args.max_depth,
            output_path=args.output,
            rows_per_batch=args.rows_per_batch,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
