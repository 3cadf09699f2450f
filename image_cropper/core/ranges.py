"""Pan/zoom range calculator.

Runs on every interactive pan/pinch update, so it stays O(1) and only builds
the small `Range` result.
"""

from __future__ import annotations

from .geometry import ImageSize, Range, Size, effective_size

_ZERO = Range(0.0, 0.0)


def scaled_extent(scale: float, extent: float, min_zoom: float) -> float:
    """On-screen extent of one image axis at `scale`.

    The contain-fitted extent (`extent * min_zoom`) grown by the zoom relative
    to the contain baseline (`scale / min_zoom`), i.e. `extent * scale`.
    """
    if not min_zoom:
        return extent * scale
    return (extent * min_zoom) * (scale / min_zoom)


def _slack(scale: float, extent: float, viewport_extent: float, min_zoom: float) -> float:
    # No slack at or below the contain baseline: the image fits inside the crop area.
    if scale <= 0 or scale <= min_zoom:
        return 0.0
    overflow = scaled_extent(scale, extent, min_zoom) - viewport_extent
    return max(0.0, overflow / 2.0) / scale


def _range(slack: float) -> Range:
    if slack == 0.0:
        return _ZERO
    return Range(-slack, slack)


def translate_range_x(scale: float, image: ImageSize, viewport: Size, min_zoom: float) -> Range:
    """Legal horizontal translate interval (image-local units) at `scale`."""
    eff = effective_size(image)
    return _range(_slack(scale, eff.width, viewport.width, min_zoom))


def translate_range_y(scale: float, image: ImageSize, viewport: Size, min_zoom: float) -> Range:
    """Legal vertical translate interval (image-local units) at `scale`."""
    eff = effective_size(image)
    return _range(_slack(scale, eff.height, viewport.height, min_zoom))


def clamp_translate(value: float, rng: Range) -> float:
    return min(max(value, rng.min), rng.max)


compute_range_x = translate_range_x
compute_range_y = translate_range_y
