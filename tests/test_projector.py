from __future__ import annotations

import numpy as np
import pytest

from image_cropper.core.fit import compute_contain
from image_cropper.core.geometry import ImageSize, Size, Transform, effective_size, round_to
from image_cropper.core.projector import (
    compute_crop_rect,
    compute_scaled_height,
    compute_scaled_multiplier,
    compute_scaled_width,
)
from image_cropper.core.ranges import translate_range_x, translate_range_y
from image_cropper.crop.crop import to_pixel_box
from image_cropper.errors import InvalidImageDimensions, InvalidQuality

VIEWPORT = Size(300, 300)
LANDSCAPE = ImageSize(4000, 3000, 0)
MIN_ZOOM = 300 / 4000
PORTRAIT = ImageSize(1000, 2000, 0)
PORTRAIT_MIN_ZOOM = 300 / 2000


def test_scaled_extent_never_below_viewport() -> None:
    assert compute_scaled_width(MIN_ZOOM, LANDSCAPE, VIEWPORT, MIN_ZOOM) == pytest.approx(300.0)
    assert compute_scaled_height(MIN_ZOOM, LANDSCAPE, VIEWPORT, MIN_ZOOM) == 300.0
    assert compute_scaled_height(0.15, LANDSCAPE, VIEWPORT, MIN_ZOOM) == pytest.approx(450.0)


def test_scaled_multiplier_is_rendered_per_source_pixel() -> None:
    assert compute_scaled_multiplier(LANDSCAPE, 600.0, 450.0) == pytest.approx(0.15)


def test_scaled_multiplier_ignores_lifted_axis() -> None:
    # 1000x2000 at 0.15 renders 150x300; the width was lifted to the 300 px crop area
    assert compute_scaled_multiplier(PORTRAIT, 300.0, 300.0) == pytest.approx(0.15)


def test_centred_crop_at_double_zoom() -> None:
    rect = compute_crop_rect(Transform(0.15, 0.0, 0.0), LANDSCAPE, VIEWPORT, MIN_ZOOM)
    assert rect.offset.x == pytest.approx(1000.0)
    assert rect.offset.y == pytest.approx(500.0)
    assert rect.size.width == pytest.approx(2000.0)
    assert rect.size.height == pytest.approx(2000.0)
    assert rect.display_size == Size(2000, 2000)


def test_panned_to_extremes_lands_on_image_edges() -> None:
    rx = translate_range_x(0.15, LANDSCAPE, VIEWPORT, MIN_ZOOM)
    ry = translate_range_y(0.15, LANDSCAPE, VIEWPORT, MIN_ZOOM)

    # Image pushed right and up: the window shows the left edge and the bottom edge
    rect = compute_crop_rect(Transform(0.15, rx.max, ry.min), LANDSCAPE, VIEWPORT, MIN_ZOOM)
    assert rect.offset.x == pytest.approx(0.0, abs=1e-6)
    assert rect.offset.y + rect.size.height == pytest.approx(3000.0)

    rect = compute_crop_rect(Transform(0.15, rx.min, ry.max), LANDSCAPE, VIEWPORT, MIN_ZOOM)
    assert rect.offset.x + rect.size.width == pytest.approx(4000.0)
    assert rect.offset.y == pytest.approx(0.0, abs=1e-6)


def test_unsettled_translate_is_limited_to_image() -> None:
    wild = compute_crop_rect(Transform(0.15, 99_999.0, -99_999.0), LANDSCAPE, VIEWPORT, MIN_ZOOM)
    rx = translate_range_x(0.15, LANDSCAPE, VIEWPORT, MIN_ZOOM)
    ry = translate_range_y(0.15, LANDSCAPE, VIEWPORT, MIN_ZOOM)
    edge = compute_crop_rect(Transform(0.15, rx.max, ry.min), LANDSCAPE, VIEWPORT, MIN_ZOOM)
    assert wild == edge


def test_min_zoom_crop_takes_full_width() -> None:
    rect = compute_crop_rect(Transform(MIN_ZOOM, 0.0, 0.0), LANDSCAPE, VIEWPORT, MIN_ZOOM)
    assert rect.offset.x == pytest.approx(0.0, abs=1e-6)
    assert rect.offset.y == pytest.approx(0.0, abs=1e-6)
    assert rect.size.width == pytest.approx(4000.0)


def test_rotation_uses_displayed_axes() -> None:
    rotated = compute_crop_rect(Transform(0.15, 200.0, -100.0), ImageSize(3000, 4000, 90), VIEWPORT, MIN_ZOOM)
    plain = compute_crop_rect(Transform(0.15, 200.0, -100.0), LANDSCAPE, VIEWPORT, MIN_ZOOM)
    assert rotated == plain


def test_origin_stays_inside_image_for_settled_transforms() -> None:
    rng = np.random.default_rng(11)
    for _ in range(300):
        iw, ih = (int(v) for v in rng.integers(50, 6000, size=2))
        image = ImageSize(iw, ih, int(rng.choice([0, 90, 180, 270])))
        eff = effective_size(image)
        viewport = Size(*(float(v) for v in rng.uniform(50, 800, size=2)))
        min_zoom = compute_contain(image, viewport)
        scale = min_zoom * float(rng.uniform(1.0, 5.0))
        rx = translate_range_x(scale, image, viewport, min_zoom)
        ry = translate_range_y(scale, image, viewport, min_zoom)
        transform = Transform(scale, float(rng.uniform(rx.min, rx.max)), float(rng.uniform(ry.min, ry.max)))

        rect = compute_crop_rect(transform, image, viewport, min_zoom)
        assert -1e-6 <= rect.offset.x <= eff.width + 1e-6
        assert -1e-6 <= rect.offset.y <= eff.height + 1e-6


def test_projection_is_deterministic() -> None:
    transform = Transform(0.1234567, 321.123, -87.65)
    first = compute_crop_rect(transform, LANDSCAPE, VIEWPORT, MIN_ZOOM, 0.73)
    second = compute_crop_rect(transform, LANDSCAPE, VIEWPORT, MIN_ZOOM, 0.73)
    assert first == second
    assert first.as_dict() == second.as_dict()


@pytest.mark.parametrize("quality", [0.0, 0.25, 0.5, 0.73, 1.0])
def test_quality_law(quality: float) -> None:
    rect = compute_crop_rect(Transform(0.13, 10.0, 5.0), LANDSCAPE, VIEWPORT, MIN_ZOOM, quality)
    assert rect.display_size.width == round_to(rect.size.width * quality)
    assert rect.display_size.height == round_to(rect.size.height * quality)


def test_full_quality_keeps_size() -> None:
    rect = compute_crop_rect(Transform(0.15, 0.0, 0.0), LANDSCAPE, VIEWPORT, MIN_ZOOM, 1.0)
    assert rect.display_size.width == round_to(rect.size.width)
    assert rect.display_size.height == round_to(rect.size.height)


def test_quality_zero_is_valid() -> None:
    rect = compute_crop_rect(Transform(0.15, 0.0, 0.0), LANDSCAPE, VIEWPORT, MIN_ZOOM, 0.0)
    assert rect.display_size == Size(0, 0)


@pytest.mark.parametrize("quality", [1.5, -0.1, float("nan")])
def test_quality_outside_unit_interval_is_rejected(quality: float) -> None:
    with pytest.raises(InvalidQuality):
        compute_crop_rect(Transform(0.15, 0.0, 0.0), LANDSCAPE, VIEWPORT, MIN_ZOOM, quality)


@pytest.mark.parametrize("image", [ImageSize(0, 3000), ImageSize(4000, 0), ImageSize(0, 0)])
def test_unloaded_image_is_rejected(image: ImageSize) -> None:
    with pytest.raises(InvalidImageDimensions):
        compute_crop_rect(Transform(0.15, 0.0, 0.0), image, VIEWPORT, MIN_ZOOM)


def test_portrait_at_min_zoom_frames_whole_image() -> None:
    rect = compute_crop_rect(Transform(PORTRAIT_MIN_ZOOM, 0.0, 0.0), PORTRAIT, VIEWPORT, PORTRAIT_MIN_ZOOM)
    assert rect.size.width == pytest.approx(2000.0)
    assert rect.size.height == pytest.approx(2000.0)
    assert rect.offset.x == pytest.approx(0.0, abs=1e-6)
    assert rect.offset.y == pytest.approx(0.0, abs=1e-6)

    # The 1000 px wide image sits in the middle of the 2000 px window.
    assert to_pixel_box(rect, 1000, 2000) == ((0, 0, 2000, 2000), (500, 0))


def test_portrait_zoomed_crop_is_centred() -> None:
    rect = compute_crop_rect(Transform(0.2, 0.0, 0.0), PORTRAIT, VIEWPORT, PORTRAIT_MIN_ZOOM)
    assert rect.size.width == pytest.approx(1500.0)
    assert rect.size.height == pytest.approx(1500.0)
    assert rect.offset.y == pytest.approx(250.0)
    assert rect.offset.y + rect.size.height / 2 == pytest.approx(1000.0)

    box, pad = to_pixel_box(rect, 1000, 2000)
    assert box == (0, 250, 1500, 1500)
    assert pad == (250, 0)


def test_portrait_panned_to_bottom_edge() -> None:
    ry = translate_range_y(0.3, PORTRAIT, VIEWPORT, PORTRAIT_MIN_ZOOM)
    rect = compute_crop_rect(Transform(0.3, 0.0, ry.min), PORTRAIT, VIEWPORT, PORTRAIT_MIN_ZOOM)
    assert rect.size.height == pytest.approx(1000.0)
    assert rect.offset.y + rect.size.height == pytest.approx(2000.0)
    assert rect.offset.x + rect.size.width / 2 == pytest.approx(500.0)


def test_non_square_viewport_centred_crop() -> None:
    viewport = Size(400, 200)
    min_zoom = compute_contain(LANDSCAPE, viewport)
    assert min_zoom == pytest.approx(200 / 3000)

    rect = compute_crop_rect(Transform(0.2, 0.0, 0.0), LANDSCAPE, viewport, min_zoom)
    assert rect.size.width == pytest.approx(2000.0)
    assert rect.size.height == pytest.approx(1000.0)
    assert rect.offset.x == pytest.approx(1000.0)
    assert rect.offset.y == pytest.approx(1000.0)


def test_crop_matches_visible_window() -> None:
    rng = np.random.default_rng(23)
    for _ in range(300):
        iw, ih = (int(v) for v in rng.integers(50, 6000, size=2))
        image = ImageSize(iw, ih, int(rng.choice([0, 90, 180, 270])))
        eff = effective_size(image)
        viewport = Size(*(float(v) for v in rng.uniform(50, 800, size=2)))
        min_zoom = compute_contain(image, viewport)
        scale = min_zoom * float(rng.uniform(1.0, 5.0))

        rect = compute_crop_rect(Transform(scale, 0.0, 0.0), image, viewport, min_zoom)

        assert rect.size.width == pytest.approx(viewport.width / scale)
        assert rect.size.height == pytest.approx(viewport.height / scale)
        # Axes where the window fits inside the image are centred on it;
        # the others start at 0 and are padded around the image.
        if rect.size.width <= eff.width:
            assert rect.offset.x + rect.size.width / 2 == pytest.approx(eff.width / 2)
        else:
            assert rect.offset.x == pytest.approx(0.0, abs=1e-6)
        if rect.size.height <= eff.height:
            assert rect.offset.y + rect.size.height / 2 == pytest.approx(eff.height / 2)
        else:
            assert rect.offset.y == pytest.approx(0.0, abs=1e-6)
