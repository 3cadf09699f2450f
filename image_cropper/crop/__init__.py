"""Crop package public API.

Expose the pyvips pixel crop primitive as `image_cropper.crop`.

Important: keep this module lightweight; no Qt imports here.
The interactive controller lives in `image_cropper.app.controller`.
"""

from .crop import CropResult, apply_crop_rect_to_file, to_pixel_box

__all__ = [
    "CropResult",
    "apply_crop_rect_to_file",
    "to_pixel_box",
]
