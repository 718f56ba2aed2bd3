"""Command-line renderer for YAML scene files.

Usage:
    whitted SCENE [options]
    python -m src.whitted.cli SCENE [options]

Options:
    -o, --output FILE   Output image; .ppm writes plain PPM, other suffixes
                        go through Pillow (default: render.png)
    --max-depth N       Recursion budget, overriding the scene's max_depth
    --arch {cpu,gpu}    Taichi backend (default: cpu)
    --quiet             Suppress progress output
    --preview           Show the image in a Matplotlib window when done

Example:
    whitted examples/scenes/showcase.yaml -o showcase.png --arch gpu
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on usage errors."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(1, f"Error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="whitted",
        description="Render a YAML scene with a Whitted-style ray tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("scene", metavar="SCENE", help="YAML scene file")
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default="render.png",
        help="Output file path (default: render.png)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Recursion budget for reflection and refraction",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the rendered image when done",
    )
    return parser


def init_taichi(arch: str, quiet: bool = False) -> None:
    """Initialize Taichi, falling back to the CPU if no GPU is usable."""
    if arch == "gpu":
        try:
            ti.init(arch=ti.gpu)
            if not quiet:
                print("Using GPU backend")
            return
        except Exception:
            pass
    ti.init(arch=ti.cpu)
    if not quiet:
        print("Using CPU backend")


def render_scene_file(
    scene_text: str,
    base_dir: Path,
    output_path: str,
    max_depth: int | None = None,
    quiet: bool = False,
    preview: bool = False,
) -> Path:
    """Parse, render and save a scene. Taichi must already be initialized.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports: the modules allocate Taichi fields at import time
    from src.whitted.core.render import Renderer
    from src.whitted.preview.export import save_image
    from src.whitted.scene.loader import parse_scene

    camera, world = parse_scene(scene_text, base_dir=base_dir)
    if max_depth is not None:
        world.set_max_depth(max_depth)

    if not quiet:
        print(
            f"Rendering {camera.width}x{camera.height}: {world.get_shape_count()} shapes, "
            f"{world.get_light_count()} lights, max depth {world.max_depth}"
        )

    def progress_callback(done: int, total: int) -> None:
        if not quiet:
            print(f"\r  Progress: {done}/{total} rows ({100.0 * done / total:.1f}%)", end="", flush=True)

    start_time = time.perf_counter()
    renderer = Renderer(camera, world)
    image = renderer.render(callback=progress_callback)
    render_ms = (time.perf_counter() - start_time) * 1000.0
    if not quiet:
        print()

    output_file = Path(output_path)
    start_time = time.perf_counter()
    save_image(image, output_file)
    write_ms = (time.perf_counter() - start_time) * 1000.0

    if not quiet:
        print(f"Render: {render_ms:.0f} ms")
        print(f"Write: {write_ms:.0f} ms")
        print(f"Saved to: {output_file.absolute()}")

    if preview:
        from src.whitted.preview.display import show_preview

        show_preview(image, title=output_file.name)

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    scene_path = Path(args.scene)
    try:
        scene_text = scene_path.read_text()
    except OSError as e:
        print(f"Error: cannot read {scene_path}: {e.strerror}", file=sys.stderr)
        return 1

    init_taichi(args.arch, args.quiet)

    try:
        render_scene_file(
            scene_text,
            base_dir=scene_path.parent,
            output_path=args.output,
            max_depth=args.max_depth,
            quiet=args.quiet,
            preview=args.preview,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
