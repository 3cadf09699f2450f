"""Pure update rules for pan, pinch and the settle ("snap back") correction.

Gesture recognition happens elsewhere; these functions only consume
normalised deltas and return new values. The controller keeps the mutable
state and the animation.
"""

from __future__ import annotations

from dataclasses import dataclass

from .geometry import ImageSize, Size, Transform, clamp
from .ranges import clamp_translate, translate_range_x, translate_range_y

SETTLE_DURATION_MS = 180


@dataclass(frozen=True, slots=True)
class SettleTargets:
    """Per-axis snap-back destination; None means the axis is already in range."""

    x: float | None = None
    y: float | None = None

    @property
    def needed(self) -> bool:
        return self.x is not None or self.y is not None


def zoom_limits(min_zoom: float, max_zoom: float) -> tuple[float, float]:
    # A tiny image can have a contain scale above max_zoom; the floor wins.
    return min_zoom, max(max_zoom, min_zoom)


def apply_pan(
    start: Transform,
    translation_x: float,
    translation_y: float,
    image: ImageSize,
    viewport: Size,
    min_zoom: float,
) -> Transform:
    """Translate from the pan-start transform by an on-screen delta, clamped.

    The delta is divided by the current scale so the image follows the finger.
    """
    scale = start.scale
    range_x = translate_range_x(scale, image, viewport, min_zoom)
    range_y = translate_range_y(scale, image, viewport, min_zoom)
    new_x = start.translate_x + translation_x / scale
    new_y = start.translate_y + translation_y / scale
    return Transform(scale, clamp_translate(new_x, range_x), clamp_translate(new_y, range_y))


def apply_pinch(start_scale: float, scale_delta: float, min_zoom: float, max_zoom: float) -> float:
    """Scale from the pinch-start scale by `scale_delta`, clamped to the zoom limits."""
    lo, hi = zoom_limits(min_zoom, max_zoom)
    return clamp(start_scale * scale_delta, lo, hi)


def compute_settle_targets(
    transform: Transform,
    image: ImageSize,
    viewport: Size,
    min_zoom: float,
) -> SettleTargets:
    """Where each axis has to snap to after a pinch, if anywhere."""
    if not image.is_loaded:
        return SettleTargets()

    targets: dict[str, float | None] = {"x": None, "y": None}
    for axis, value, rng in (
        ("x", transform.translate_x, translate_range_x(transform.scale, image, viewport, min_zoom)),
        ("y", transform.translate_y, translate_range_y(transform.scale, image, viewport, min_zoom)),
    ):
        if not rng.contains(value):
            targets[axis] = rng.max if value > 0 else rng.min
    return SettleTargets(**targets)
