"""Image loading for the crop component (pyvips header reads)."""

from image_cropper.image_engine.loader import ImageLoader, orientation_to_rotation, read_image_size

__all__ = ["ImageLoader", "orientation_to_rotation", "read_image_size"]
