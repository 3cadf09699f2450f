"""Fit calculator: contain/cover scales for an image inside the crop area."""

from __future__ import annotations

from dataclasses import dataclass

from image_cropper.errors import InvalidConfiguration

from .geometry import ImageSize, Size, require_dimensions

RESIZE_MODES = ("contain", "cover")


@dataclass(frozen=True, slots=True)
class Fit:
    """Result of `compute_fit`: zoom floor and the scale to start from."""

    min_zoom: float
    initial_scale: float


def compute_contain(image: ImageSize, viewport: Size) -> float:
    """Largest scale at which the whole (rotated) image fits inside `viewport`."""
    eff = require_dimensions(image)
    return min(viewport.width / eff.width, viewport.height / eff.height)


def compute_cover(contain_scale: float, image: ImageSize, display: Size, viewport: Size) -> float:
    """Smallest scale >= `contain_scale` at which the image fills `display`.

    `display` is the widget's own box, which may be larger than `viewport`.
    `viewport` is accepted for call-site symmetry with `compute_contain`;
    covering the display box also covers the crop area it encloses.
    """
    eff = require_dimensions(image)
    return max(contain_scale, display.width / eff.width, display.height / eff.height)


def compute_fit(
    image: ImageSize,
    viewport: Size,
    resize_mode: str = "contain",
    display: Size | None = None,
) -> Fit:
    if resize_mode not in RESIZE_MODES:
        raise InvalidConfiguration(f"resize_mode must be one of {RESIZE_MODES}, got {resize_mode!r}")
    min_zoom = compute_contain(image, viewport)
    if resize_mode == "cover":
        return Fit(min_zoom, compute_cover(min_zoom, image, display or viewport, viewport))
    return Fit(min_zoom, min_zoom)
