"""Command-line renderer.

Renders the random spheres scene (or a scene loaded from JSON) and writes
it as PPM or PNG. With the default output "-" the image goes to stdout as
plain-text PPM, so it can be redirected straight into a file:

    spheretracer --width 400 --samples 50 > image.ppm

Options:
    --width WIDTH           Image width in pixels (default: 1200)
    --aspect-ratio RATIO    Width / height (default: 1.5)
    --samples SAMPLES       Samples per pixel (default: 500)
    --max-depth DEPTH       Bounce limit per path (default: 50)
    --look-from X Y Z       Camera position (default: 13 2 3)
    --look-at X Y Z         Camera target (default: 0 0 0)
    --vfov DEGREES          Vertical field of view (default: 20)
    --aperture APERTURE     Lens diameter (default: 0.1)
    --focus-distance DIST   Distance to the plane of focus (default: 10)
    --seed SEED             Seed for the scene and the sampler
    --scene FILE            Load the scene from a JSON file
    --save-scene FILE       Write the scene to a JSON file
    --output PATH           '-' for PPM on stdout, or a .ppm/.png path
    --arch {cpu,gpu}        Taichi backend (default: cpu)
    --quiet                 Suppress progress output
    --verbose               Enable debug logging
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import numpy as np
import taichi as ti

from spheretracer.config import RenderConfig

logger = logging.getLogger(__name__)

STDOUT_OUTPUT = "-"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    defaults = RenderConfig()
    parser = argparse.ArgumentParser(
        prog="spheretracer",
        description="Render a scene of spheres with a Monte Carlo ray tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=defaults.image_width,
        help=f"Image width in pixels (default: {defaults.image_width})",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=defaults.aspect_ratio,
        help=f"Width / height (default: {defaults.aspect_ratio})",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=defaults.samples_per_pixel,
        help=f"Samples per pixel (default: {defaults.samples_per_pixel})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=defaults.max_depth,
        help=f"Bounce limit per path (default: {defaults.max_depth})",
    )
    parser.add_argument(
        "--look-from",
        type=float,
        nargs=3,
        metavar=("X", "Y", "Z"),
        default=defaults.look_from,
        help="Camera position (default: 13 2 3)",
    )
    parser.add_argument(
        "--look-at",
        type=float,
        nargs=3,
        metavar=("X", "Y", "Z"),
        default=defaults.look_at,
        help="Camera target (default: 0 0 0)",
    )
    parser.add_argument(
        "--vfov",
        type=float,
        default=defaults.vfov,
        help=f"Vertical field of view in degrees (default: {defaults.vfov})",
    )
    parser.add_argument(
        "--aperture",
        type=float,
        default=defaults.aperture,
        help=f"Lens diameter (default: {defaults.aperture})",
    )
    parser.add_argument(
        "--focus-distance",
        type=float,
        default=defaults.focus_distance,
        help=f"Distance to the plane of focus (default: {defaults.focus_distance})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the scene and the sampler (default: random)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="Load the scene from a JSON file instead of generating one",
    )
    parser.add_argument(
        "--save-scene",
        type=str,
        default=None,
        help="Write the scene to a JSON file",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=STDOUT_OUTPUT,
        help="Output path: '-' for PPM on stdout, or a .ppm/.png file (default: -)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    verbosity.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> RenderConfig:
    """Build and validate a RenderConfig from parsed arguments.

    Raises:
        ValueError: If any setting is out of range.
    """
    config = RenderConfig(
        image_width=args.width,
        aspect_ratio=args.aspect_ratio,
        samples_per_pixel=args.samples,
        max_depth=args.max_depth,
        look_from=tuple(args.look_from),
        look_at=tuple(args.look_at),
        vfov=args.vfov,
        aperture=args.aperture,
        focus_distance=args.focus_distance,
        seed=args.seed,
    )
    config.validate()
    return config


def configure_logging(quiet: bool = False, verbose: bool = False) -> None:
    """Send log records to stderr at the requested verbosity."""
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def init_taichi(arch: str, seed: int) -> None:
    """Initialize Taichi, falling back to the CPU if no GPU is usable."""
    if arch == "gpu":
        try:
            ti.init(arch=ti.gpu, random_seed=seed)
            logger.info("Using GPU backend")
            return
        except Exception:
            logger.warning("GPU backend unavailable, falling back to CPU")
    ti.init(arch=ti.cpu, random_seed=seed)
    logger.info("Using CPU backend")


def render(config: RenderConfig, args: argparse.Namespace) -> None:
    """Build the scene, render it and write the image.

    Taichi must be initialized before calling this.
    """
    # Lazy imports to allow Taichi initialization first
    from spheretracer.camera.thin_lens import setup_camera
    from spheretracer.core.render import Renderer
    from spheretracer.image.ppm import save_image, write_ppm
    from spheretracer.scene.generator import create_random_spheres_scene
    from spheretracer.scene.manager import SceneManager

    if args.scene is not None:
        scene = SceneManager()
        with open(args.scene, encoding="utf-8") as f:
            scene.from_dict(json.load(f))
        logger.info("Loaded scene from %s", args.scene)
    else:
        scene = create_random_spheres_scene(seed=config.seed)

    if args.save_scene is not None:
        with open(args.save_scene, "w", encoding="utf-8") as f:
            json.dump(scene.to_dict(), f, indent=2)
        logger.info("Saved scene to %s", args.save_scene)

    setup_camera(config.make_camera())
    renderer = Renderer(config.image_width, config.image_height)

    def progress_callback(rows_done: int, total_rows: int) -> None:
        if not args.quiet:
            print(
                f"\rScanlines remaining: {total_rows - rows_done:<6d}",
                end="",
                file=sys.stderr,
                flush=True,
            )

    renderer.render(config.samples_per_pixel, config.max_depth, callback=progress_callback)

    if not args.quiet:
        print(file=sys.stderr)  # Newline after progress

    sums = renderer.get_color_sums_numpy()
    if args.output == STDOUT_OUTPUT:
        write_ppm(sys.stdout, sums, config.samples_per_pixel)
        sys.stdout.flush()
    else:
        save_image(sums, config.samples_per_pixel, Path(args.output))


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    configure_logging(quiet=args.quiet, verbose=args.verbose)

    try:
        config = config_from_args(args)
        if config.seed is None:
            config.seed = int(np.random.default_rng().integers(2**31 - 1))
        logger.debug("Render configuration: %s", config)

        init_taichi(args.arch, config.seed)
        render(config, args)
        return 0
    except Exception as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
