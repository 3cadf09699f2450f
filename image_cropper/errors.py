"""Exception types raised by the crop engine and its collaborators.

The pure core (`image_cropper.core`) raises these and never catches them.
The Qt controller and the CLI decide how to surface them.
"""

from __future__ import annotations


class CropError(Exception):
    """Base class for all image_cropper errors."""


class InvalidConfiguration(CropError, ValueError):
    """Crop setup is inconsistent (zoom limits, widget vs crop area, ...)."""


class InvalidImageDimensions(CropError, ValueError):
    """Image size is zero, unset, or carries an unsupported rotation."""


class InvalidQuality(CropError, ValueError):
    """Output quality factor outside [0, 1]."""


class ImageLoadError(CropError, OSError):
    """Source image header could not be read."""


class CropExecutionError(CropError, RuntimeError):
    """Pixel crop failed (decode, crop, resize or write)."""
