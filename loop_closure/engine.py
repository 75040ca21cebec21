"""
Loop closure detector.

Orchestrates the per-frame pipeline:
    1. Extract local descriptors from the image
    2. Project them onto the random basis → fixed-length hash
    3. Store the hash under the caller's image id
    4. Compare it with every other stored hash → ranked candidates

Failures never raise out of process(); they come back as an absent result.
process_with_status() keeps the reason (bad input, internal failure, or
simply no candidates yet) for callers that need to tell them apart.
"""

import enum
import logging
import threading
from typing import Callable, Iterable, List, Optional

import numpy as np

from .config import (
    DEFAULT_MAX_DESC, DEFAULT_NUM_PROJ, DEFAULT_SEED,
    target_descriptor_count, validate_engine_config,
)
from .descriptors import SiftExtractor
from .hashing import Hasher
from .preprocessing import is_valid_image
from .similarity import rank_candidates
from .store import FingerprintStore

logger = logging.getLogger(__name__)


class ResultKind(enum.Enum):
    OK = "ok"
    INPUT_ERROR = "input_error"
    INTERNAL_ERROR = "internal_error"
    NO_CANDIDATES = "no_candidates"


class ProcessResult:
    """Outcome of processing one image."""

    def __init__(self, kind: ResultKind,
                 candidates: Optional[List[int]] = None,
                 message: str = ""):
        self.kind = kind
        self.candidates = list(candidates) if candidates else []
        self.message = message

    @property
    def ok(self) -> bool:
        return self.kind is ResultKind.OK

    def __bool__(self) -> bool:
        return self.ok

    def __repr__(self) -> str:
        return (f"ProcessResult(kind={self.kind.name}, "
                f"candidates={self.candidates}, message={self.message!r})")


class LoopClosureDetector:
    """
    Hash-based loop closure detector.

    Keeps one hash per processed image and, for every new image, returns
    the ids of the most similar images seen so far.
    """

    def __init__(self,
                 num_proj: int = DEFAULT_NUM_PROJ,
                 max_desc: int = DEFAULT_MAX_DESC,
                 seed: Optional[int] = DEFAULT_SEED,
                 extractor: Optional[Callable[[np.ndarray], np.ndarray]] = None):
        """
        Args:
            num_proj: Number of projections (hash length = num_proj * D).
            max_desc: Maximum number of descriptors per image.
            seed: Random seed for the basis and descriptor subsampling.
                None derives one from the current time.
            extractor: Callable mapping an image to a descriptor matrix.
                Defaults to SIFT asking for slightly fewer than max_desc
                keypoints.

        Raises:
            ValueError: If num_proj > max_desc or either is not positive.
        """
        validate_engine_config(num_proj, max_desc)
        self.hasher = Hasher(num_proj, max_desc, seed=seed)
        self.store = FingerprintStore()
        if extractor is None:
            extractor = SiftExtractor(target_descriptor_count(max_desc))
        self.extractor = extractor
        self._lock = threading.Lock()

        logger.info(
            f"Loop closure detector: num_proj={num_proj}, "
            f"max_desc={max_desc}, seed={self.hasher.seed}, "
            f"extractor={self.extractor!r}"
        )

    @property
    def num_stored(self) -> int:
        return len(self.store)

    def process(self,
                image_id: int,
                image: np.ndarray,
                num_candidates: int,
                images_to_ignore: Iterable[int] = ()) -> Optional[List[int]]:
        """
        Process an image and get its loop closure candidates.

        Args:
            image_id: Unique non-negative image identifier.
            image: The image.
            num_candidates: Maximum number of candidates to return.
            images_to_ignore: Image ids never returned as candidates.

        Returns:
            Candidate image ids, best match first, or None if the image
            could not be processed or no candidate is available.
        """
        result = self.process_with_status(
            image_id, image, num_candidates, images_to_ignore
        )
        return result.candidates if result.ok else None

    def process_with_status(self,
                            image_id: int,
                            image: np.ndarray,
                            num_candidates: int,
                            images_to_ignore: Iterable[int] = ()) -> ProcessResult:
        """Same as process(), but returns a ProcessResult with the outcome kind."""
        with self._lock:
            return self._process(image_id, image, num_candidates, images_to_ignore)

    def _process(self, image_id, image, num_candidates, images_to_ignore):
        if not is_valid_image(image):
            logger.error(f"Image {image_id} is empty or invalid")
            return ProcessResult(ResultKind.INPUT_ERROR, message="The image is empty")

        if (isinstance(num_candidates, bool)
                or not isinstance(num_candidates, (int, np.integer))
                or num_candidates < 0):
            logger.error(
                f"num_candidates must be an integer >= 0, got {num_candidates!r}"
            )
            return ProcessResult(
                ResultKind.INPUT_ERROR,
                message=f"Invalid num_candidates: {num_candidates!r}",
            )

        try:
            descriptors = self.extractor(image)
        except Exception as e:
            logger.error(f"Descriptor extraction failed for image {image_id}: {e}")
            return ProcessResult(ResultKind.INTERNAL_ERROR, message=str(e))

        try:
            hash_vec = self.hasher.calc_hash(descriptors)
        except ValueError as e:
            logger.error(f"Hash computation failed for image {image_id}: {e}")
            return ProcessResult(ResultKind.INTERNAL_ERROR, message=str(e))

        try:
            self.store.upsert(image_id, hash_vec)
        except ValueError as e:
            logger.error(f"Cannot store image {image_id}: {e}")
            return ProcessResult(ResultKind.INPUT_ERROR, message=str(e))

        excluded = set(images_to_ignore or ())
        excluded.add(image_id)
        similarities = self.store.similarities_to(hash_vec, exclude=excluded)

        candidates = rank_candidates(similarities, num_candidates)
        if not candidates:
            logger.warning(f"No candidates found for image {image_id}")
            return ProcessResult(ResultKind.NO_CANDIDATES,
                                 message="No candidates found")

        logger.debug(
            f"Image {image_id}: {len(similarities)} compared → "
            f"candidates {candidates}"
        )
        return ProcessResult(ResultKind.OK, candidates)
