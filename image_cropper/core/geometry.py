"""Value types and small numeric helpers shared by the crop engine.

All types are immutable. `effective_size` is the only place that knows how
image rotation swaps width and height.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from image_cropper.errors import InvalidImageDimensions

VALID_ROTATIONS = frozenset({0, 90, 180, 270})


@dataclass(frozen=True, slots=True)
class Size:
    """Width/height pair (viewport, display box, output size)."""

    width: float
    height: float


@dataclass(frozen=True, slots=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class ImageSize:
    """Natural (decoded) size of the source image plus its orientation.

    `rotation` is in degrees and comes from the image orientation metadata.
    """

    width: float
    height: float
    rotation: int = 0

    @property
    def is_loaded(self) -> bool:
        return self.width > 0 and self.height > 0


@dataclass(frozen=True, slots=True)
class Transform:
    """Interactive transform snapshot.

    `scale` is rendered pixels per source pixel. `translate_x`/`translate_y`
    are image-local (source pixel) offsets of the image centre from the
    viewport centre.
    """

    scale: float
    translate_x: float = 0.0
    translate_y: float = 0.0


@dataclass(frozen=True, slots=True)
class Range:
    min: float
    max: float

    def contains(self, value: float) -> bool:
        return is_in_range(value, self.max, self.min)


@dataclass(frozen=True, slots=True)
class CropRect:
    """Crop rectangle in source-image pixel space."""

    offset: Point
    size: Size
    display_size: Size

    def as_dict(self) -> dict[str, dict[str, float]]:
        return {
            "offset": {"x": self.offset.x, "y": self.offset.y},
            "size": {"width": self.size.width, "height": self.size.height},
            "displaySize": {"width": self.display_size.width, "height": self.display_size.height},
        }


def round_to(value: float, digits: int = 0) -> float:
    """Round half-up to `digits` decimals (round(2.5) == 3, round(-2.5) == -2)."""
    factor = 10.0**digits
    return math.floor(value * factor + 0.5) / factor


def is_in_range(value: float, max_value: float, min_value: float) -> bool:
    """Inclusive range check. Note the (value, max, min) argument order."""
    return min_value <= value <= max_value


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def get_alpha(opacity: float) -> str:
    """Encode an opacity in [0, 1] as the two-digit hex alpha of an #RRGGBBAA colour."""
    return f"{int(round_to(opacity * 255)):02x}"


def effective_size(image: ImageSize) -> Size:
    """Return the displayed width/height of `image` after applying its rotation."""
    rotation = int(image.rotation or 0) % 360
    if rotation not in VALID_ROTATIONS:
        raise InvalidImageDimensions(f"unsupported image rotation: {image.rotation}")
    if rotation in (90, 270):
        return Size(float(image.height), float(image.width))
    return Size(float(image.width), float(image.height))


def require_dimensions(image: ImageSize) -> Size:
    """Return the effective size, raising if either dimension is unusable."""
    size = effective_size(image)
    # Also rejects NaN.
    if not (size.width > 0 and size.height > 0):
        raise InvalidImageDimensions(
            f"Invalid image dimensions: {image.width}x{image.height} (rotation {image.rotation})"
        )
    return size
