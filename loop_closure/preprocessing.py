"""
Image checks and conversion ahead of descriptor extraction.

Images are numpy arrays in RGB (3 channels), RGBA (4 channels) or
grayscale (2-D) layout, uint8 or float in [0, 1].
"""

import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def is_valid_image(image) -> bool:
    """True for a non-empty, numeric 2-D or 3-D numpy array."""
    if not isinstance(image, np.ndarray):
        return False
    if not (np.issubdtype(image.dtype, np.number) or image.dtype == bool):
        return False
    if image.size == 0 or image.ndim not in (2, 3):
        return False
    if image.ndim == 3 and image.shape[2] not in (1, 3, 4):
        return False
    return True


def normalize_image(image_np: np.ndarray) -> np.ndarray:
    """Ensure image is uint8."""
    if image_np.dtype != np.uint8:
        if image_np.max() <= 1.0:
            image_np = (image_np * 255).astype(np.uint8)
        else:
            image_np = np.clip(image_np, 0, 255).astype(np.uint8)
    return image_np


def to_grayscale(image_np: np.ndarray) -> np.ndarray:
    """
    Convert an image to single-channel uint8 for keypoint detection.

    Raises:
        ValueError: If the image is empty or has an unsupported shape.
    """
    if not is_valid_image(image_np):
        shape = getattr(image_np, "shape", None)
        raise ValueError(f"Invalid image with shape {shape}")

    image_np = normalize_image(image_np)
    if image_np.ndim == 2:
        return np.ascontiguousarray(image_np)

    channels = image_np.shape[2]
    if channels == 1:
        return np.ascontiguousarray(image_np[:, :, 0])
    if channels == 4:
        return cv2.cvtColor(image_np, cv2.COLOR_RGBA2GRAY)
    return cv2.cvtColor(image_np, cv2.COLOR_RGB2GRAY)
