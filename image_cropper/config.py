"""Validated crop component configuration.

Construction fails eagerly with `InvalidConfiguration`; a `CropConfig` that
exists is always internally consistent.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from image_cropper.core.fit import RESIZE_MODES
from image_cropper.core.geometry import Size, get_alpha, round_to
from image_cropper.errors import InvalidConfiguration

CROP_SHAPES = ("rect", "circle")
DEFAULT_WIDTH = 360.0


def _default_crop_area() -> Size:
    return Size(DEFAULT_WIDTH, DEFAULT_WIDTH)


@dataclass(frozen=True)
class CropConfig:
    crop_area: Size = field(default_factory=_default_crop_area)
    width: float = DEFAULT_WIDTH
    height: float = DEFAULT_WIDTH
    crop_shape: str = "circle"
    max_zoom: float = 5.0
    resize_mode: str = "contain"
    opacity: float = 0.7
    border_width: float = 2.0
    background_color: str = "#FFFFFF"
    border_color: str | None = None
    show_corner_markers: bool = False
    quality: float = 1.0

    def __post_init__(self) -> None:
        # Crop area is kept at 2-decimal precision so layout rounding noise
        # does not leak into the projection.
        area = Size(round_to(float(self.crop_area.width), 2), round_to(float(self.crop_area.height), 2))
        object.__setattr__(self, "crop_area", area)

        if not (area.width > 0 and area.height > 0):
            raise InvalidConfiguration(f"crop area must be positive, got {area.width}x{area.height}")
        if not (0.0 <= self.opacity <= 1.0):
            raise InvalidConfiguration("opacity must be between 0 and 1")
        if self.max_zoom < 1:
            raise InvalidConfiguration("maxZoom must be equal to or greater than 1")
        if self.width < area.width:
            raise InvalidConfiguration("width must be greater than or equal to crop area width")
        if self.height < area.height:
            raise InvalidConfiguration("height must be greater than or equal to crop area height")
        if self.crop_shape not in CROP_SHAPES:
            raise InvalidConfiguration(f"crop_shape must be one of {CROP_SHAPES}, got {self.crop_shape!r}")
        if self.resize_mode not in RESIZE_MODES:
            raise InvalidConfiguration(f"resize_mode must be one of {RESIZE_MODES}, got {self.resize_mode!r}")
        if not (0.0 <= self.quality <= 1.0):
            raise InvalidConfiguration("quality must be between 0 and 1")

    @property
    def display(self) -> Size:
        """The widget's own box; cover mode fills this, not just the crop area."""
        return Size(float(self.width), float(self.height))

    @property
    def border_radius(self) -> float:
        if self.crop_shape == "circle":
            return max(self.crop_area.width, self.crop_area.height)
        return 0.0

    @property
    def overlay_color(self) -> str:
        """Mask colour: background colour with the overlay opacity as #RRGGBBAA."""
        return f"{self.background_color}{get_alpha(self.opacity)}"

    @property
    def effective_border_color(self) -> str:
        return self.border_color or self.background_color
