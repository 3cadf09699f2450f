"""Image header loader.

Reads natural size and EXIF orientation with pyvips off the GUI thread and
reports back through a Qt signal. Only the header is touched; pixels are
decoded later by the crop backend.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from PySide6.QtCore import QObject, Signal

from image_cropper.core.geometry import ImageSize
from image_cropper.errors import ImageLoadError
from image_cropper.logger import get_logger

_logger = get_logger("loader")

# EXIF orientation -> clockwise rotation in degrees (mirrored variants share the rotation)
_ORIENTATION_ROTATION = {
    1: 0,
    2: 0,
    3: 180,
    4: 180,
    5: 90,
    6: 90,
    7: 270,
    8: 270,
}

_pyvips: Any | None = None


def _get_pyvips_module() -> Any:
    global _pyvips
    if _pyvips is None:
        import pyvips  # type: ignore

        _pyvips = pyvips
    return _pyvips


def orientation_to_rotation(orientation: int | None) -> int:
    if orientation is None:
        return 0
    return _ORIENTATION_ROTATION.get(int(orientation), 0)


def read_image_size(path: str) -> ImageSize:
    """Return natural width/height and rotation of the image at `path`.

    Raises:
        ImageLoadError: the file is missing, unreadable or has no pixels.
    """
    try:
        pyvips = _get_pyvips_module()
        image = pyvips.Image.new_from_file(path, access="sequential")
        orientation = image.get("orientation") if image.get_typeof("orientation") != 0 else None
    except ImportError as e:
        raise ImageLoadError(f"pyvips is not available: {e}") from e
    except Exception as e:
        # pyvips.Error and friends; keep the original as __cause__
        raise ImageLoadError(f"Failed to load image {path}: {e}") from e

    if image.width <= 0 or image.height <= 0:
        raise ImageLoadError(f"Image {path} has no pixels ({image.width}x{image.height})")

    size = ImageSize(int(image.width), int(image.height), orientation_to_rotation(orientation))
    _logger.debug("read_image_size: path=%s size=%s orientation=%s", path, size, orientation)
    return size


class ImageLoader(QObject):
    """Loads image headers on a small thread pool.

    Each request gets an id; only the latest id per path is delivered, so a
    slow load for a replaced image never overwrites a newer one.
    """

    image_loaded = Signal(int, str, object, object)  # req_id, path, ImageSize|None, error|None

    def __init__(self, read_fn=read_image_size, max_workers: int = 2):
        super().__init__()
        self._read_fn = read_fn
        self.io_pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="image-loader")
        self._next_id = 1
        self._latest_id: dict[str, int] = {}
        self._lock = threading.Lock()
        _logger.debug("ImageLoader init: io_workers=%s", max_workers)

    def request_load(self, path: str) -> int:
        with self._lock:
            req_id = self._next_id
            self._next_id += 1
            self._latest_id[path] = req_id
        _logger.debug("request_load queued: path=%s id=%s", path, req_id)
        future = self.io_pool.submit(self._read_fn, path)
        future.add_done_callback(lambda f: self._on_load_finished(req_id, path, f))
        return req_id

    def _on_load_finished(self, req_id: int, path: str, future: Future) -> None:
        with self._lock:
            latest = self._latest_id.get(path)
            # Every request registers its id before submitting, so a missing
            # entry means the latest result for this path was already delivered.
            if latest != req_id:
                _logger.debug("load_finished stale: path=%s id=%s latest=%s (dropped)", path, req_id, latest)
                return
            del self._latest_id[path]

        try:
            size = future.result()
        except ImageLoadError as e:
            _logger.warning("load failed: path=%s id=%s err=%s", path, req_id, e)
            self.image_loaded.emit(req_id, path, None, e)
            return
        except Exception as e:
            _logger.exception("load future failed: path=%s id=%s", path, req_id)
            self.image_loaded.emit(req_id, path, None, ImageLoadError(str(e)))
            return
        _logger.debug("load_finished emit: path=%s id=%s size=%s", path, req_id, size)
        self.image_loaded.emit(req_id, path, size, None)

    def shutdown(self) -> None:
        self.io_pool.shutdown(wait=False, cancel_futures=True)
