"""Crop-rect projector.

Maps the on-screen transform back to a rectangle in source-image pixels.
Called once per crop commit, so the steps are spelled out rather than fused.
"""

from __future__ import annotations

from image_cropper.errors import InvalidImageDimensions, InvalidQuality

from .geometry import CropRect, ImageSize, Point, Size, Transform, clamp, require_dimensions, round_to
from .ranges import scaled_extent, translate_range_x, translate_range_y


def compute_scaled_width(scale: float, image: ImageSize, viewport: Size, min_zoom: float) -> float:
    """Rendered image width at `scale`, never less than the crop area width."""
    eff = require_dimensions(image)
    return max(viewport.width, scaled_extent(scale, eff.width, min_zoom))


def compute_scaled_height(scale: float, image: ImageSize, viewport: Size, min_zoom: float) -> float:
    eff = require_dimensions(image)
    return max(viewport.height, scaled_extent(scale, eff.height, min_zoom))


def compute_scaled_multiplier(image: ImageSize, scaled_width: float, scaled_height: float) -> float:
    """Rendered pixels per source pixel.

    The scaled extents are lifted to the crop area on axes where the image is
    smaller than it, so only the smaller of the two ratios is the real scale.
    """
    eff = require_dimensions(image)
    return min(scaled_width / eff.width, scaled_height / eff.height)


def compute_translate(transform: Transform, max_translate_x: float, max_translate_y: float) -> Point:
    """Image-centre offset in rendered pixels, limited to the legal pan range."""
    tx = clamp(transform.translate_x, -max_translate_x, max_translate_x)
    ty = clamp(transform.translate_y, -max_translate_y, max_translate_y)
    return Point(tx * transform.scale, ty * transform.scale)


def compute_offset(scaled_size: Size, viewport: Size, translate: Point, scaled_multiplier: float) -> Point:
    """Top-left of the crop window in source pixels.

    `scaled_size / 2 - viewport / 2` is the centred origin in rendered pixels;
    moving the image right by `translate.x` moves the window left on the image.
    """
    x = ((scaled_size.width / 2 - viewport.width / 2) - translate.x) / scaled_multiplier
    y = ((scaled_size.height / 2 - viewport.height / 2) - translate.y) / scaled_multiplier
    return Point(x, y)


def compute_size(size: Size, multiplier: float, *, divide: bool = True) -> Size:
    if divide:
        return Size(size.width / multiplier, size.height / multiplier)
    return Size(size.width * multiplier, size.height * multiplier)


def compute_display_size(size: Size, quality: float) -> Size:
    scaled = compute_size(size, quality, divide=False)
    return Size(int(round_to(scaled.width)), int(round_to(scaled.height)))


def compute_crop_rect(
    transform: Transform,
    image: ImageSize,
    viewport: Size,
    min_zoom: float,
    quality: float = 1.0,
) -> CropRect:
    """Project `transform` onto `image` and return the crop in source pixels.

    Raises:
        InvalidQuality: `quality` is outside [0, 1].
        InvalidImageDimensions: the image is zero-sized or never loaded.
    """
    if not (0.0 <= quality <= 1.0):
        raise InvalidQuality(f"quality must be between 0 and 1, got {quality}")
    if not image.is_loaded:
        raise InvalidImageDimensions(f"Invalid image dimensions: {image.width}x{image.height}")

    scale = transform.scale
    scaled_width = compute_scaled_width(scale, image, viewport, min_zoom)
    scaled_height = compute_scaled_height(scale, image, viewport, min_zoom)
    scaled_multiplier = compute_scaled_multiplier(image, scaled_width, scaled_height)

    max_translate_x = translate_range_x(scale, image, viewport, min_zoom).max
    max_translate_y = translate_range_y(scale, image, viewport, min_zoom).max
    translate = compute_translate(transform, max_translate_x, max_translate_y)

    offset = compute_offset(Size(scaled_width, scaled_height), viewport, translate, scaled_multiplier)
    size = compute_size(viewport, scaled_multiplier)
    return CropRect(offset=offset, size=size, display_size=compute_display_size(size, quality))
