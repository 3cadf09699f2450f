from __future__ import annotations

from PySide6.QtCore import Property, QObject, Signal

from image_cropper.core.geometry import ImageSize, Transform


class CropState(QObject):
    """State bound by the crop UI.

    Design:
    - Holds the only mutable copy of the transform (scale + translate).
    - Translate is in image-local (source pixel) units from the centred position.
    - The controller is authoritative for clamping; views only read.
    """

    loadedChanged = Signal(bool)
    currentPathChanged = Signal(str)
    imageWidthChanged = Signal(int)
    imageHeightChanged = Signal(int)
    imageRotationChanged = Signal(int)

    scaleChanged = Signal(float)
    translateXChanged = Signal(float)
    translateYChanged = Signal(float)
    minZoomChanged = Signal(float)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._loaded = False
        self._current_path = ""
        self._image_w = 0
        self._image_h = 0
        self._rotation = 0

        self._scale = 1.0
        self._tx = 0.0
        self._ty = 0.0
        self._min_zoom = 1.0

    # ---- read-only properties (mutate via controller) ----
    def _get_loaded(self) -> bool:
        return bool(self._loaded)

    loaded = Property(bool, _get_loaded, notify=loadedChanged)  # type: ignore[arg-type]

    def _get_current_path(self) -> str:
        return str(self._current_path)

    currentPath = Property(str, _get_current_path, notify=currentPathChanged)  # type: ignore[arg-type]

    def _get_image_width(self) -> int:
        return int(self._image_w)

    imageWidth = Property(int, _get_image_width, notify=imageWidthChanged)  # type: ignore[arg-type]

    def _get_image_height(self) -> int:
        return int(self._image_h)

    imageHeight = Property(int, _get_image_height, notify=imageHeightChanged)  # type: ignore[arg-type]

    def _get_image_rotation(self) -> int:
        return int(self._rotation)

    imageRotation = Property(int, _get_image_rotation, notify=imageRotationChanged)  # type: ignore[arg-type]

    def _get_scale(self) -> float:
        return float(self._scale)

    scale = Property(float, _get_scale, notify=scaleChanged)  # type: ignore[arg-type]

    def _get_translate_x(self) -> float:
        return float(self._tx)

    translateX = Property(float, _get_translate_x, notify=translateXChanged)  # type: ignore[arg-type]

    def _get_translate_y(self) -> float:
        return float(self._ty)

    translateY = Property(float, _get_translate_y, notify=translateYChanged)  # type: ignore[arg-type]

    def _get_min_zoom(self) -> float:
        return float(self._min_zoom)

    minZoom = Property(float, _get_min_zoom, notify=minZoomChanged)  # type: ignore[arg-type]

    # ---- snapshots ----
    def image_size(self) -> ImageSize:
        return ImageSize(self._image_w, self._image_h, self._rotation)

    def transform(self) -> Transform:
        """Consistent snapshot of scale + translate."""
        return Transform(float(self._scale), float(self._tx), float(self._ty))

    # ---- internal mutation helpers (called by controller) ----
    def _set_loaded(self, value: bool) -> None:
        v = bool(value)
        if v == self._loaded:
            return
        self._loaded = v
        self.loadedChanged.emit(v)

    def _set_current_path(self, path: str) -> None:
        p = str(path)
        if p == self._current_path:
            return
        self._current_path = p
        self.currentPathChanged.emit(p)

    def _set_image_size(self, size: ImageSize) -> None:
        iw = int(size.width)
        ih = int(size.height)
        rot = int(size.rotation)
        if iw != self._image_w:
            self._image_w = iw
            self.imageWidthChanged.emit(iw)
        if ih != self._image_h:
            self._image_h = ih
            self.imageHeightChanged.emit(ih)
        if rot != self._rotation:
            self._rotation = rot
            self.imageRotationChanged.emit(rot)

    def _set_scale(self, value: float) -> None:
        s = float(value)
        if s == self._scale:
            return
        self._scale = s
        self.scaleChanged.emit(s)

    def _set_translate_x(self, value: float) -> None:
        v = float(value)
        if v == self._tx:
            return
        self._tx = v
        self.translateXChanged.emit(v)

    def _set_translate_y(self, value: float) -> None:
        v = float(value)
        if v == self._ty:
            return
        self._ty = v
        self.translateYChanged.emit(v)

    def _set_transform(self, transform: Transform) -> None:
        self._set_scale(transform.scale)
        self._set_translate_x(transform.translate_x)
        self._set_translate_y(transform.translate_y)

    def _set_min_zoom(self, value: float) -> None:
        z = float(value)
        if z == self._min_zoom:
            return
        self._min_zoom = z
        self.minZoomChanged.emit(z)
