"""Shared test fixtures for loop closure tests."""

import numpy as np
import cv2
import pytest


class StubExtractor:
    """
    Extractor returning pre-registered descriptors.

    Images are tagged by the value of their first pixel, so tests can
    decide exactly which descriptors each image yields.
    """

    def __init__(self):
        self.descriptors = {}
        self.calls = 0

    def register(self, tag: int, descriptors: np.ndarray) -> np.ndarray:
        self.descriptors[tag] = np.asarray(descriptors, dtype=np.float64)
        return make_tagged_image(tag)

    def __call__(self, image):
        self.calls += 1
        return self.descriptors.get(int(image.flat[0]), np.empty((0, 16)))


def make_tagged_image(tag: int) -> np.ndarray:
    return np.full((8, 8), tag, dtype=np.uint8)


def random_descriptors(seed: int, rows: int = 40, cols: int = 16) -> np.ndarray:
    """Descriptors with values in [-1, 1)."""
    rng = np.random.default_rng(seed)
    return rng.uniform(-1.0, 1.0, size=(rows, cols))


@pytest.fixture
def stub_extractor():
    return StubExtractor()


@pytest.fixture
def descriptors():
    return random_descriptors(seed=0)


@pytest.fixture
def noise_image():
    """Generate a 200x200 random noise image (plenty of SIFT keypoints)."""
    rng = np.random.RandomState(42)
    return rng.randint(0, 255, (200, 200, 3), dtype=np.uint8)


@pytest.fixture
def other_noise_image():
    rng = np.random.RandomState(7)
    return rng.randint(0, 255, (200, 200, 3), dtype=np.uint8)


@pytest.fixture
def textured_image():
    """Generate a 200x200 checkerboard with circles."""
    img = np.ones((200, 200, 3), dtype=np.uint8) * 200
    for y in range(0, 200, 20):
        for x in range(0, 200, 20):
            if (x // 20 + y // 20) % 2 == 0:
                img[y:y+20, x:x+20] = [50, 50, 50]
    cv2.circle(img, (60, 140), 25, (200, 30, 30), -1)
    cv2.circle(img, (150, 50), 15, (30, 30, 200), -1)
    return img


@pytest.fixture
def blank_image():
    """Uniform gray image: no keypoints at all."""
    return np.full((200, 200, 3), 128, dtype=np.uint8)
