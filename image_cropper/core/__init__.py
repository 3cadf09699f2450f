"""Pure coordinate-transform and fit/clamp engine.

No Qt and no pyvips imports here: everything is plain arithmetic over the
immutable value types in `geometry`, safe to call from any thread.
"""

from .fit import RESIZE_MODES, Fit, compute_contain, compute_cover, compute_fit
from .geometry import (
    CropRect,
    ImageSize,
    Point,
    Range,
    Size,
    Transform,
    clamp,
    effective_size,
    get_alpha,
    is_in_range,
    round_to,
)
from .gestures import SETTLE_DURATION_MS, SettleTargets, apply_pan, apply_pinch, compute_settle_targets, zoom_limits
from .projector import compute_crop_rect
from .ranges import clamp_translate, compute_range_x, compute_range_y, translate_range_x, translate_range_y

__all__ = [
    "RESIZE_MODES",
    "SETTLE_DURATION_MS",
    "CropRect",
    "Fit",
    "ImageSize",
    "Point",
    "Range",
    "SettleTargets",
    "Size",
    "Transform",
    "apply_pan",
    "apply_pinch",
    "clamp",
    "clamp_translate",
    "compute_contain",
    "compute_cover",
    "compute_crop_rect",
    "compute_fit",
    "compute_range_x",
    "compute_range_y",
    "compute_settle_targets",
    "effective_size",
    "get_alpha",
    "is_in_range",
    "round_to",
    "translate_range_x",
    "translate_range_y",
    "zoom_limits",
]
