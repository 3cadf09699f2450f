from __future__ import annotations

import json
import os
from typing import Any

from PySide6.QtGui import QColor

from .config import CropConfig
from .core.geometry import Size
from .logger import get_logger

_logger = get_logger("settings")


class SettingsManager:
    def __init__(self, settings_path: str):
        self.settings_path = settings_path
        self._settings: dict[str, Any] = {}
        self.load()

    DEFAULTS: dict[str, Any] = {
        "crop_shape": "circle",
        "max_zoom": 5.0,
        "resize_mode": "contain",
        "opacity": 0.7,
        "quality": 1.0,
        "border_width": 2.0,
        "background_color": "#FFFFFF",
        "show_corner_markers": False,
    }

    def load(self) -> None:
        try:
            if os.path.exists(self.settings_path):
                with open(self.settings_path, encoding="utf-8") as f:
                    data = json.load(f)
                    if isinstance(data, dict):
                        self._settings = data
                        _logger.debug("settings loaded: %s", self.settings_path)
                        return
        except (OSError, ValueError) as e:
            _logger.warning("settings load failed: %s", e)
        self._settings = {}

    def save(self) -> None:
        try:
            os.makedirs(os.path.dirname(self.settings_path) or ".", exist_ok=True)
            with open(self.settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, ensure_ascii=False, indent=2)
            _logger.debug("settings saved: %s", self.settings_path)
        except OSError as e:
            _logger.error("settings save failed: %s", e)

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._settings:
            return self._settings[key]
        if default is not None:
            return default
        return self.DEFAULTS.get(key)

    def has(self, key: str) -> bool:
        return key in self._settings

    def set(self, key: str, value: Any) -> None:
        if key == "last_output_dir" and isinstance(value, str):
            value = self._normalize_dir(value)
        self._settings[key] = value
        self.save()

    @property
    def data(self) -> dict[str, Any]:
        return self._settings

    @property
    def last_output_dir(self) -> str | None:
        val = self.get("last_output_dir")
        return val if isinstance(val, str) and os.path.isdir(val) else None

    @staticmethod
    def _normalize_dir(path: str) -> str:
        p = os.path.abspath(os.path.expanduser(path))
        if os.path.isfile(p):
            p = os.path.dirname(p)
        return os.path.normpath(p)

    def background_color(self) -> QColor:
        hexcol = self.get("background_color")
        if isinstance(hexcol, str):
            color = QColor(hexcol)
            if color.isValid():
                return color
            _logger.warning("saved background_color invalid: %s", hexcol)
        return QColor(self.DEFAULTS["background_color"])

    def crop_config(self, width: float, height: float, crop_area: Size | None = None) -> CropConfig:
        """Build a validated CropConfig from the stored defaults.

        Raises InvalidConfiguration when stored values are inconsistent with
        the requested widget size.
        """
        return CropConfig(
            crop_area=crop_area or Size(width, height),
            width=width,
            height=height,
            crop_shape=str(self.get("crop_shape")),
            max_zoom=float(self.get("max_zoom")),
            resize_mode=str(self.get("resize_mode")),
            opacity=float(self.get("opacity")),
            border_width=float(self.get("border_width")),
            background_color=self.background_color().name(),
            show_corner_markers=bool(self.get("show_corner_markers")),
            quality=float(self.get("quality")),
        )
