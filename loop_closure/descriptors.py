"""
SIFT descriptor extraction.

The loop closure detector treats extraction as a collaborator: image in,
descriptor matrix out. Any callable with that shape can be used; this
module provides the default, backed by OpenCV's SIFT.

Raw SIFT descriptors hold values up to a few hundred. The hasher expects
values roughly in [-1, 1], so rows are L2-normalized by default.
"""

import logging

import cv2
import numpy as np

from .preprocessing import to_grayscale

logger = logging.getLogger(__name__)

SIFT_DIM = 128


def _empty_descriptors() -> np.ndarray:
    return np.empty((0, SIFT_DIM), dtype=np.float32)


def extract_sift_descriptors(image_np: np.ndarray,
                             n_features: int,
                             normalize: bool = True) -> np.ndarray:
    """
    Detect SIFT keypoints and compute their descriptors.

    Args:
        image_np: RGB, RGBA or grayscale image.
        n_features: Number of keypoints to request. SIFT may return a
            few more than this.
        normalize: L2-normalize every descriptor row.

    Returns:
        Float32 array of shape (N, 128). Empty (0, 128) if no keypoints
        were found or extraction failed.
    """
    try:
        gray = to_grayscale(image_np)
        sift = cv2.SIFT_create(nfeatures=n_features)
        _, descriptors = sift.detectAndCompute(gray, None)
    except (ValueError, cv2.error) as e:
        logger.error(f"SIFT extraction error: {e}")
        return _empty_descriptors()

    if descriptors is None or len(descriptors) == 0:
        logger.debug("No SIFT keypoints found")
        return _empty_descriptors()

    descriptors = descriptors.astype(np.float32)
    if normalize:
        norms = np.linalg.norm(descriptors, axis=1, keepdims=True)
        norms[norms == 0] = 1.0
        descriptors = descriptors / norms

    logger.debug(f"Extracted {len(descriptors)} SIFT descriptors")
    return descriptors


class SiftExtractor:
    """Callable SIFT extractor with fixed parameters."""

    def __init__(self, n_features: int, normalize: bool = True):
        self.n_features = n_features
        self.normalize = normalize

    def __call__(self, image_np: np.ndarray) -> np.ndarray:
        return extract_sift_descriptors(
            image_np, self.n_features, normalize=self.normalize
        )

    def __repr__(self) -> str:
        return (f"SiftExtractor(n_features={self.n_features}, "
                f"normalize={self.normalize})")
