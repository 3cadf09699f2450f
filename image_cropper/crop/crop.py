"""Image crop backend using pyvips.

Pure functions for cropping images, no Qt dependencies. The crop rectangle
comes from `image_cropper.core.compute_crop_rect` and is expressed in the
pixel space of the auto-rotated source.
"""

import contextlib
from dataclasses import dataclass
from typing import Any

from image_cropper.core.geometry import CropRect, round_to
from image_cropper.errors import CropExecutionError
from image_cropper.logger import get_logger

_logger = get_logger("crop")

try:
    import pyvips  # type: ignore
except ImportError:
    pyvips = None  # type: ignore
    _logger.warning("pyvips is not available; crop functions will raise ImportError when used")


@dataclass(frozen=True, slots=True)
class CropResult:
    """Artifact produced by a crop: output path plus final pixel size."""

    path: str
    width: int
    height: int


def _get_pyvips_module() -> Any:
    """Return the pyvips module or raise ImportError if unavailable."""
    if pyvips is None:
        _logger.error("pyvips requested but not available")
        raise ImportError("pyvips is not available")
    return pyvips


def _configure_cache(vips: Any) -> None:
    # Avoid memory growth across many crops
    with contextlib.suppress(Exception):
        vips.cache_set_max(0)
        vips.cache_set_max_mem(0)
        vips.cache_set_max_files(0)


def to_pixel_box(rect: CropRect, img_width: int, img_height: int) -> tuple[tuple[int, int, int, int], tuple[int, int]]:
    """Round `rect` to whole pixels that the source can serve.

    Returns ((left, top, width, height), (pad_x, pad_y)). On an axis where the
    rectangle is larger than the image, the image is centred on a padded canvas
    of the rectangle's size: pad is the canvas margin and the origin is 0.
    Otherwise the origin is clamped so the box stays inside the image.
    """
    width = max(1, int(round_to(rect.size.width)))
    height = max(1, int(round_to(rect.size.height)))
    left = int(round_to(rect.offset.x))
    top = int(round_to(rect.offset.y))

    pad_x = pad_y = 0
    if width > img_width:
        pad_x = (width - img_width) // 2
        left = 0
    else:
        left = max(0, min(left, img_width - width))
    if height > img_height:
        pad_y = (height - img_height) // 2
        top = 0
    else:
        top = max(0, min(top, img_height - height))
    return (left, top, width, height), (pad_x, pad_y)


def _background_for(image: Any, rgb: list[float] | None) -> list[float]:
    colour = list(rgb or [255.0, 255.0, 255.0])
    bands = int(image.bands)
    has_alpha = bool(image.hasalpha())
    colour_bands = bands - 1 if has_alpha else bands
    if colour_bands < 3:
        base = [sum(colour[:3]) / 3.0] * colour_bands
    else:
        base = colour[:3] + [colour[-1]] * (colour_bands - 3)
    return base + ([255.0] if has_alpha else [])


def apply_crop_rect_to_file(
    source_path: str,
    rect: CropRect,
    output_path: str,
    background: list[float] | None = None,
) -> CropResult:
    """Crop `source_path` to `rect`, scale to its display size and save.

    Args:
        source_path: Path to source image file
        rect: Crop rectangle in auto-rotated source pixels
        output_path: Path to save cropped image
        background: RGB fill for areas of the rectangle outside the image

    Returns:
        CropResult with the output path and final width/height

    Raises:
        CropExecutionError: If decoding, cropping, resizing or writing fails
    """
    vips = _get_pyvips_module()
    _configure_cache(vips)

    out_w = int(rect.display_size.width)
    out_h = int(rect.display_size.height)
    if out_w <= 0 or out_h <= 0:
        raise CropExecutionError(f"display size must be at least 1x1, got {out_w}x{out_h}")

    try:
        image = vips.Image.new_from_file(source_path)
        # Orientation is applied before cropping: the rect lives in displayed pixel space.
        image = image.autorot()
    except vips.Error as e:
        _logger.error("Failed to open source image %s: %s", source_path, e, exc_info=True)
        raise CropExecutionError(f"Failed to open {source_path}: {e}") from e

    box, (pad_x, pad_y) = to_pixel_box(rect, image.width, image.height)
    left, top, width, height = box
    _logger.debug(
        "Cropping %s: rect=%s box=%s pad=(%d,%d) out=%dx%d -> %s",
        source_path,
        rect.as_dict(),
        box,
        pad_x,
        pad_y,
        out_w,
        out_h,
        output_path,
    )

    try:
        if width > image.width or height > image.height:
            canvas_w = max(width, image.width)
            canvas_h = max(height, image.height)
            image = image.embed(
                pad_x,
                pad_y,
                canvas_w,
                canvas_h,
                extend="background",
                background=_background_for(image, background),
            )
        cropped = image.crop(left, top, width, height)
        if (out_w, out_h) != (width, height):
            cropped = cropped.resize(out_w / width, vscale=out_h / height)
            if (cropped.width, cropped.height) != (out_w, out_h):
                # resize rounds; pin the exact requested size
                cropped = cropped.embed(0, 0, out_w, out_h, extend="copy")
        cropped.write_to_file(output_path)
    except vips.Error as e:
        _logger.error("Error during crop/write operation for %s -> %s: %s", source_path, output_path, e, exc_info=True)
        raise CropExecutionError(f"Crop failed for {source_path}: {e}") from e

    _logger.info("Crop saved: %s (%dx%d)", output_path, out_w, out_h)
    return CropResult(output_path, out_w, out_h)

