"""
In-memory fingerprint store mapping image ids to hashes.

The store only grows: entries are inserted or overwritten, never removed.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional

import numpy as np

from .similarity import calc_similarity

logger = logging.getLogger(__name__)


class FingerprintStore:
    """Mapping of image id to hash with overwrite-on-duplicate semantics."""

    def __init__(self):
        self._hashes: Dict[int, np.ndarray] = {}

    def upsert(self, image_id: int, hash_vec) -> None:
        """
        Store the hash for image_id, replacing any previous one.

        Raises:
            ValueError: If image_id is not a non-negative integer.
        """
        if isinstance(image_id, bool) or not isinstance(image_id, (int, np.integer)):
            raise ValueError(f"Image id must be an integer, got {image_id!r}")
        if image_id < 0:
            raise ValueError(f"Image id must be non-negative, got {image_id}")

        stored = np.array(hash_vec, dtype=np.float64)
        stored.setflags(write=False)
        if image_id in self._hashes:
            logger.debug(f"Overwriting hash for image {image_id}")
        self._hashes[int(image_id)] = stored

    def get(self, image_id: int) -> Optional[np.ndarray]:
        return self._hashes.get(image_id)

    def ids(self) -> List[int]:
        return sorted(self._hashes)

    @property
    def is_empty(self) -> bool:
        return not self._hashes

    def similarities_to(self, hash_vec,
                        exclude: Iterable[int] = ()) -> Dict[int, float]:
        """
        Compare a hash against every stored hash.

        Args:
            hash_vec: Query hash.
            exclude: Image ids to skip.

        Returns:
            Dict of image id to similarity. Entries that could not be
            compared (negative similarity) are left out.
        """
        excluded = set(exclude)
        similarities = {}
        for image_id in self.ids():
            if image_id in excluded:
                continue
            similarity = calc_similarity(hash_vec, self._hashes[image_id])
            if not np.isfinite(similarity) or similarity < 0.0:
                continue
            similarities[image_id] = similarity
        return similarities

    def __contains__(self, image_id) -> bool:
        return image_id in self._hashes

    def __len__(self) -> int:
        return len(self._hashes)

    def __iter__(self) -> Iterator[int]:
        return iter(self.ids())
