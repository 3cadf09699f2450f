from __future__ import annotations

import pytest

from image_cropper.config import CropConfig
from image_cropper.core.geometry import Size
from image_cropper.errors import InvalidConfiguration


def test_defaults_are_consistent() -> None:
    cfg = CropConfig()
    assert cfg.crop_shape == "circle"
    assert cfg.max_zoom == 5.0
    assert cfg.resize_mode == "contain"
    assert cfg.display == Size(cfg.width, cfg.height)


def test_crop_area_is_rounded_to_two_decimals() -> None:
    cfg = CropConfig(crop_area=Size(299.99499, 150.006), width=400, height=400)
    assert cfg.crop_area == Size(299.99, 150.01)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_zoom": 0.5},
        {"opacity": 1.2},
        {"opacity": -0.1},
        {"crop_area": Size(500, 100), "width": 400, "height": 400},
        {"crop_area": Size(100, 500), "width": 400, "height": 400},
        {"crop_area": Size(0, 100), "width": 400, "height": 400},
        {"crop_shape": "hexagon"},
        {"resize_mode": "stretch"},
        {"quality": 2.0},
    ],
)
def test_invalid_setups_fail_construction(kwargs: dict) -> None:
    with pytest.raises(InvalidConfiguration):
        CropConfig(**kwargs)


def test_invalid_configuration_is_a_value_error() -> None:
    with pytest.raises(ValueError, match="maxZoom"):
        CropConfig(max_zoom=0)


def test_circle_border_radius_and_rect() -> None:
    area = Size(200, 120)
    assert CropConfig(crop_area=area, width=300, height=300, crop_shape="circle").border_radius == 200
    assert CropConfig(crop_area=area, width=300, height=300, crop_shape="rect").border_radius == 0.0


def test_overlay_colour_carries_opacity() -> None:
    cfg = CropConfig(background_color="#000000", opacity=0.5)
    assert cfg.overlay_color == "#00000080"


def test_border_colour_falls_back_to_background() -> None:
    assert CropConfig(background_color="#123456").effective_border_color == "#123456"
    assert CropConfig(border_color="#ff0000").effective_border_color == "#ff0000"
