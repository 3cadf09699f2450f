"""Headless crop entry point.

Reads the source header, fits it into the crop area, applies the requested
zoom and pan exactly as the interactive controller would clamp them, prints
the resulting crop rectangle as JSON and (unless --dry-run) writes the crop.
With --settings, stored defaults fill in flags that were not given and the
output folder is remembered for the next bare output file name.

Exit codes: 0 success, 1 load/crop failure, 2 invalid input.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from dataclasses import replace

from PySide6.QtGui import QColor

from image_cropper.config import CropConfig
from image_cropper.core.fit import RESIZE_MODES, compute_fit
from image_cropper.core.geometry import Size, Transform
from image_cropper.core.gestures import zoom_limits
from image_cropper.core.projector import compute_crop_rect
from image_cropper.core.ranges import clamp_translate, translate_range_x, translate_range_y
from image_cropper.crop.crop import apply_crop_rect_to_file
from image_cropper.errors import (
    CropExecutionError,
    ImageLoadError,
    InvalidConfiguration,
    InvalidImageDimensions,
    InvalidQuality,
)
from image_cropper.image_engine.loader import read_image_size
from image_cropper.logger import get_logger, setup_logger
from image_cropper.settings_manager import SettingsManager

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def _parse_size(text: str) -> Size:
    try:
        w, h = text.lower().split("x", 1)
        return Size(float(w), float(h))
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {text!r}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="image-cropper", description="Crop an image as framed in a pan/zoom viewport")
    parser.add_argument("source", help="Source image path")
    parser.add_argument("-o", "--output", help="Output image path (required unless --dry-run)")
    parser.add_argument("--viewport", type=_parse_size, default=Size(300, 300), help="Crop area, WxH (default 300x300)")
    parser.add_argument("--display", type=_parse_size, help="Widget box, WxH (default: viewport)")
    parser.add_argument("--resize-mode", choices=RESIZE_MODES, help="Initial fit (default contain)")
    zoom = parser.add_mutually_exclusive_group()
    zoom.add_argument("--scale", type=float, help="Absolute scale (rendered px per source px)")
    zoom.add_argument("--zoom", type=float, help="Scale relative to the contain fit (1 = whole image)")
    parser.add_argument("--translate", type=float, nargs=2, metavar=("X", "Y"), default=(0.0, 0.0),
                        help="Pan offset in source pixels from the centred position")
    parser.add_argument("--quality", type=float, help="Output size factor in [0, 1] (default 1)")
    parser.add_argument("--max-zoom", type=float, help="Zoom ceiling (default 5)")
    parser.add_argument("--background", help="Fill colour outside the image (default #FFFFFF)")
    parser.add_argument("--settings", help="JSON settings file supplying defaults and remembering the output folder")
    parser.add_argument("--dry-run", action="store_true", help="Only print the crop rectangle")
    parser.add_argument("--log-level", help="Set log level")
    parser.add_argument("--log-cats", help="Set log categories")
    return parser


def _background_rgb(name: str) -> list[float]:
    color = QColor(name)
    if not color.isValid():
        raise InvalidConfiguration(f"background is not a valid colour: {name!r}")
    return [float(color.red()), float(color.green()), float(color.blue())]


def build_config(args: argparse.Namespace, settings: SettingsManager | None = None) -> CropConfig:
    """Stored defaults (or the built-in ones) with explicit flags on top.

    Raises InvalidConfiguration.
    """
    display = args.display or args.viewport
    if settings is not None:
        base = settings.crop_config(display.width, display.height, args.viewport)
    else:
        base = CropConfig(crop_area=args.viewport, width=display.width, height=display.height)
    overrides = {
        key: value
        for key, value in (
            ("max_zoom", args.max_zoom),
            ("resize_mode", args.resize_mode),
            ("quality", args.quality),
            ("background_color", args.background),
        )
        if value is not None
    }
    # The CLI writes a rectangle; the mask shape only matters on screen.
    return replace(base, crop_shape="rect", **overrides)


def _resolve_output(output: str, settings: SettingsManager | None) -> str:
    # A bare file name goes to the folder of the previous crop.
    if settings is None or os.path.dirname(output):
        return output
    last_dir = settings.last_output_dir
    return os.path.join(last_dir, output) if last_dir else output


def run(argv: list[str] | None = None) -> int:  # noqa: PLR0911
    """CLI entrypoint (packaging-friendly)."""
    args = build_parser().parse_args(sys.argv[1:] if argv is None else argv)

    if args.log_level:
        os.environ["IMAGE_CROPPER_LOG_LEVEL"] = args.log_level
    if args.log_cats:
        os.environ["IMAGE_CROPPER_LOG_CATS"] = args.log_cats
    setup_logger()
    logger = get_logger("main")

    if not args.dry_run and not args.output:
        logger.error("--output is required unless --dry-run is given")
        return EXIT_USAGE

    settings = SettingsManager(args.settings) if args.settings else None
    try:
        config = build_config(args, settings)
        background = _background_rgb(config.background_color)
    except (TypeError, ValueError) as e:
        # InvalidConfiguration, or a stored setting of the wrong type
        logger.error("Invalid configuration: %s", e)
        return EXIT_USAGE

    try:
        image = read_image_size(args.source)
    except ImageLoadError as e:
        logger.error("%s", e)
        return EXIT_FAILURE

    try:
        fit = compute_fit(image, config.crop_area, config.resize_mode, config.display)
        lo, hi = zoom_limits(fit.min_zoom, config.max_zoom)
        if args.scale is not None:
            scale = args.scale
        elif args.zoom is not None:
            scale = fit.min_zoom * args.zoom
        else:
            scale = fit.initial_scale
        scale = min(max(scale, lo), hi)

        tx, ty = args.translate
        transform = Transform(
            scale,
            clamp_translate(tx, translate_range_x(scale, image, config.crop_area, fit.min_zoom)),
            clamp_translate(ty, translate_range_y(scale, image, config.crop_area, fit.min_zoom)),
        )
        rect = compute_crop_rect(transform, image, config.crop_area, fit.min_zoom, config.quality)
    except (InvalidImageDimensions, InvalidQuality) as e:
        logger.error("%s", e)
        return EXIT_USAGE

    report: dict[str, object] = {
        "source": args.source,
        "image": {"width": image.width, "height": image.height, "rotation": image.rotation},
        "minZoom": fit.min_zoom,
        "transform": {
            "scale": transform.scale,
            "translateX": transform.translate_x,
            "translateY": transform.translate_y,
        },
        "crop": rect.as_dict(),
    }

    if not args.dry_run:
        try:
            output = _resolve_output(args.output, settings)
            result = apply_crop_rect_to_file(args.source, rect, output, background)
        except (CropExecutionError, ImportError) as e:
            logger.error("Crop failed: %s", e)
            return EXIT_FAILURE
        if settings is not None:
            settings.set("last_output_dir", result.path)
        report["output"] = {"path": result.path, "width": result.width, "height": result.height}

    print(json.dumps(report, indent=2))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(run())
