"""Qt-facing shell around the crop engine.

- `state.crop_state.CropState`: bindable state (transform, image size, flags)
- `controller.CropController`: gesture slots, settle animation, crop commit
"""
