from __future__ import annotations

import contextlib
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from PySide6.QtCore import Property, QAbstractAnimation, QEasingCurve, QObject, QVariantAnimation, Signal, Slot
from PySide6.QtGui import QColor

from image_cropper.app.state.crop_state import CropState
from image_cropper.config import CropConfig
from image_cropper.core.fit import compute_fit
from image_cropper.core.geometry import CropRect, ImageSize, Transform
from image_cropper.core.gestures import SETTLE_DURATION_MS, apply_pan, apply_pinch, compute_settle_targets
from image_cropper.core.projector import compute_crop_rect
from image_cropper.crop.crop import CropResult, apply_crop_rect_to_file
from image_cropper.errors import CropError, CropExecutionError, ImageLoadError
from image_cropper.image_engine.loader import ImageLoader
from image_cropper.logger import get_logger

_logger = get_logger("controller")

CropFn = Callable[[str, CropRect, str, list[float] | None], CropResult]


class CropController(QObject):
    """Single crop object exposed to the UI.

    UI → Python: gesture slots or controller.dispatch(cmd, payload)
    Python → UI: controller.event(dict), controller.taskEvent(dict)
    UI bindings: controller.state

    Gesture updates run on the GUI thread against `CropState`; header reads
    and pixel crops run on worker pools and report back through signals.
    """

    # QObject already has an .event() handler method, so we must not shadow it.
    event_ = Signal(object, name="event")
    taskEvent = Signal(object, name="taskEvent")

    def __init__(
        self,
        config: CropConfig | None = None,
        loader: ImageLoader | None = None,
        crop_fn: CropFn = apply_crop_rect_to_file,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._config = config or CropConfig()
        self._loader = loader or ImageLoader()
        self._crop_fn = crop_fn
        self._crop_pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="crop")

        self._state = CropState(self)

        # Image identity: bumped on every load so late crop results can be dropped.
        self._generation = 0
        self._lock = threading.Lock()

        self._pan_start: Transform | None = None
        self._pinch_start_scale: float | None = None
        self._anim_x: QVariantAnimation | None = None
        self._anim_y: QVariantAnimation | None = None

        self._loader.image_loaded.connect(self._on_image_loaded)

    # ---- expose state ----
    def _get_state(self) -> QObject:
        return self._state

    state = Property(QObject, _get_state, constant=True)  # type: ignore[arg-type]

    @property
    def config(self) -> CropConfig:
        return self._config

    @property
    def generation(self) -> int:
        return self._generation

    # ---- image loading ----
    @Slot(str)
    def load_image(self, path: str) -> None:
        self._stop_settle()
        with self._lock:
            self._generation += 1
        self._state._set_loaded(False)
        self._state._set_current_path(path)
        self._state._set_image_size(ImageSize(0, 0, 0))
        self._state._set_transform(Transform(1.0, 0.0, 0.0))
        _logger.debug("load_image: path=%s generation=%s", path, self._generation)
        self._loader.request_load(path)

    @Slot(int, str, object, object)
    def _on_image_loaded(self, req_id: int, path: str, size: object, error: object) -> None:
        if path != self._state._get_current_path():
            _logger.debug("image_loaded ignored: path=%s id=%s (image changed)", path, req_id)
            return
        if error is not None or not isinstance(size, ImageSize):
            # Non-fatal: show the placeholder, keep the crop handler inert.
            _logger.error("Failed to load image %s: %s", path, error)
            self._state._set_loaded(True)
            self.event_.emit({"type": "image", "name": "loadFailed", "path": path, "message": str(error)})
            return
        try:
            self.set_image(size)
        except CropError as e:
            _logger.error("Image %s rejected: %s", path, e)
            self._state._set_loaded(True)
            self.event_.emit({"type": "image", "name": "loadFailed", "path": path, "message": str(e)})
            return
        self.event_.emit(
            {
                "type": "image",
                "name": "loaded",
                "path": path,
                "width": size.width,
                "height": size.height,
                "rotation": size.rotation,
            }
        )

    def set_image(self, size: ImageSize) -> None:
        """Install a loaded image size, fit it, and centre it.

        Raises InvalidImageDimensions for zero-sized images.
        """
        cfg = self._config
        fit = compute_fit(size, cfg.crop_area, cfg.resize_mode, cfg.display)
        self._state._set_image_size(size)
        self._state._set_min_zoom(fit.min_zoom)
        self._state._set_transform(Transform(fit.initial_scale, 0.0, 0.0))
        self._state._set_loaded(True)
        _logger.debug("set_image: size=%s min_zoom=%s initial_scale=%s", size, fit.min_zoom, fit.initial_scale)

    # ---- gestures ----
    @Slot()
    def pan_begin(self) -> None:
        self._stop_settle()
        self._pan_start = self._state.transform()

    @Slot(float, float)
    def pan_update(self, translation_x: float, translation_y: float) -> None:
        image = self._state.image_size()
        if self._pan_start is None or not image.is_loaded:
            return
        start = Transform(self._state._get_scale(), self._pan_start.translate_x, self._pan_start.translate_y)
        moved = apply_pan(start, translation_x, translation_y, image, self._config.crop_area, self._min_zoom())
        self._state._set_translate_x(moved.translate_x)
        self._state._set_translate_y(moved.translate_y)

    @Slot()
    def pan_end(self) -> None:
        self._pan_start = None

    @Slot()
    def pinch_begin(self) -> None:
        self._stop_settle()
        self._pinch_start_scale = self._state._get_scale()

    @Slot(float)
    def pinch_change(self, scale_delta: float) -> None:
        if self._pinch_start_scale is None or not self._state.image_size().is_loaded:
            return
        scale = apply_pinch(self._pinch_start_scale, scale_delta, self._min_zoom(), self._config.max_zoom)
        self._state._set_scale(scale)

    @Slot()
    def pinch_end(self) -> None:
        self._pinch_start_scale = None
        self.settle()

    # ---- settle ("snap back") ----
    def settle(self) -> bool:
        """Animate out-of-range axes back to the nearest bound.

        Returns True if at least one axis animation was started.
        """
        if not self._state._get_loaded():
            return False
        image = self._state.image_size()
        targets = compute_settle_targets(self._state.transform(), image, self._config.crop_area, self._min_zoom())
        if not targets.needed:
            return False
        _logger.debug("settle: transform=%s targets=%s", self._state.transform(), targets)
        if targets.x is not None:
            self._anim_x = self._animate(self._state._get_translate_x(), targets.x, self._state._set_translate_x)
        if targets.y is not None:
            self._anim_y = self._animate(self._state._get_translate_y(), targets.y, self._state._set_translate_y)
        return True

    def is_settling(self) -> bool:
        return any(
            anim is not None and anim.state() == QAbstractAnimation.State.Running
            for anim in (self._anim_x, self._anim_y)
        )

    def _animate(self, start: float, end: float, setter: Callable[[float], None]) -> QVariantAnimation:
        anim = QVariantAnimation(self)
        anim.setDuration(SETTLE_DURATION_MS)
        anim.setStartValue(float(start))
        anim.setEndValue(float(end))
        anim.setEasingCurve(QEasingCurve.Type.InOutQuad)
        anim.valueChanged.connect(lambda v: setter(float(v)))
        # Land exactly on the bound regardless of interpolation rounding.
        anim.finished.connect(lambda: setter(float(end)))
        anim.start(QAbstractAnimation.DeletionPolicy.KeepWhenStopped)
        return anim

    def _stop_settle(self) -> None:
        for anim in (self._anim_x, self._anim_y):
            if anim is not None:
                with contextlib.suppress(RuntimeError):
                    anim.stop()
        self._anim_x = None
        self._anim_y = None

    # ---- crop ----
    def compute_crop_rect(self, quality: float | None = None) -> CropRect:
        """Project the current transform onto the source image.

        Raises InvalidQuality / InvalidImageDimensions.
        """
        q = self._config.quality if quality is None else float(quality)
        return compute_crop_rect(
            self._state.transform(), self._state.image_size(), self._config.crop_area, self._min_zoom(), q
        )

    def crop(self, output_path: str, quality: float | None = None) -> Future:
        """Commit the crop: project now, run the pixel crop on the worker pool.

        The transform snapshot is taken here on the GUI thread. The returned
        future resolves to a CropResult; `taskEvent` reports the outcome.

        Raises InvalidQuality / InvalidImageDimensions synchronously.
        """
        rect = self.compute_crop_rect(quality)
        source = self._state._get_current_path()
        generation = self._generation
        background = self._background_rgb()
        _logger.info("crop requested: %s -> %s rect=%s", source, output_path, rect.as_dict())

        self.taskEvent.emit({"type": "task", "name": "cropSave", "state": "started", "outputPath": output_path})
        future = self._crop_pool.submit(self._crop_fn, source, rect, output_path, background)
        future.add_done_callback(lambda f: self._on_crop_finished(f, generation, output_path))
        return future

    def _on_crop_finished(self, future: Future, generation: int, output_path: str) -> None:
        if generation != self._generation:
            _logger.warning("crop result dropped: image changed while cropping (%s)", output_path)
            self.taskEvent.emit({"type": "task", "name": "cropSave", "state": "canceled", "outputPath": output_path})
            return
        try:
            result = future.result()
        except (CropExecutionError, ImageLoadError, ImportError) as e:
            _logger.error("Crop failed: %s", e, exc_info=True)
            self.taskEvent.emit({"type": "task", "name": "cropSave", "state": "error", "message": str(e)})
            return
        except Exception as e:
            _logger.exception("Unexpected crop failure for %s", output_path)
            self.taskEvent.emit({"type": "task", "name": "cropSave", "state": "error", "message": str(e)})
            return
        self.taskEvent.emit(
            {
                "type": "task",
                "name": "cropSave",
                "state": "finished",
                "outputPath": result.path,
                "width": result.width,
                "height": result.height,
            }
        )

    # ---- command entry ----
    @Slot(str, "QVariant")  # type: ignore[call-overload]
    def dispatch(self, cmd: str, payload: object | None = None) -> None:  # noqa: PLR0911, PLR0912
        command = str(cmd or "").strip()
        if not command:
            self.event_.emit({"type": "event", "name": "error", "level": "error", "message": "Empty cmd"})
            return

        if command == "load":
            self.load_image(str(_get_payload_value(payload, "path", default="")))
            return
        if command == "panBegin":
            self.pan_begin()
            return
        if command == "panUpdate":
            self.pan_update(
                float(_get_payload_value(payload, "translationX", default=0.0)),
                float(_get_payload_value(payload, "translationY", default=0.0)),
            )
            return
        if command == "panEnd":
            self.pan_end()
            return
        if command == "pinchBegin":
            self.pinch_begin()
            return
        if command == "pinchChange":
            self.pinch_change(float(_get_payload_value(payload, "scale", default=1.0)))
            return
        if command == "pinchEnd":
            self.pinch_end()
            return
        if command == "crop":
            out = str(_get_payload_value(payload, "outputPath", default=""))
            quality = _get_payload_value(payload, "quality", default=None)
            try:
                self.crop(out, None if quality is None else float(quality))
            except CropError as e:
                self.taskEvent.emit({"type": "task", "name": "cropSave", "state": "error", "message": str(e)})
            return

        self.event_.emit({"type": "event", "name": "error", "level": "warning", "message": f"Unknown cmd: {command}"})

    # ---- helpers ----
    def _min_zoom(self) -> float:
        return self._state._get_min_zoom()

    def _background_rgb(self) -> list[float]:
        color = QColor(self._config.background_color)
        if not color.isValid():
            color = QColor(255, 255, 255)
        return [float(color.red()), float(color.green()), float(color.blue())]

    def shutdown(self) -> None:
        self._stop_settle()
        self._loader.shutdown()
        self._crop_pool.shutdown(wait=False, cancel_futures=True)


def _get_payload_value(payload: object | None, key: str, *, default: Any) -> Any:
    """Extract a value from a UI payload (dict, QJSValue or None)."""
    if payload is None:
        return default

    # QML often passes a JS object which arrives as QJSValue/QVariant.
    if payload.__class__.__name__ == "QJSValue" and hasattr(payload, "toVariant"):
        with contextlib.suppress(Exception):
            payload = payload.toVariant()  # type: ignore[assignment, attr-defined]

    if isinstance(payload, dict):
        return payload.get(key, default)

    return default
