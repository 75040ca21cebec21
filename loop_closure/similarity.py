"""
Hash similarity and candidate ranking.

Similarity is the Euclidean distance between two hashes: 0 for identical
hashes, larger for less similar ones, with no fixed upper bound. A negative
value is never a distance; it signals that the hashes could not be
compared.
"""

import logging
from typing import Dict, List

import numpy as np

logger = logging.getLogger(__name__)

# Returned when two hashes cannot be compared
INVALID_SIMILARITY = -1.0


def calc_similarity(hash_a, hash_b) -> float:
    """
    Compute the similarity between two hashes. The smaller, the more similar.

    Args:
        hash_a: First hash.
        hash_b: Second hash.

    Returns:
        Euclidean distance between the hashes, or INVALID_SIMILARITY if
        their lengths differ.
    """
    a = np.asarray(hash_a, dtype=np.float64)
    b = np.asarray(hash_b, dtype=np.float64)
    if a.shape != b.shape:
        logger.error(
            f"Hashes have different sizes: {a.size} vs {b.size}"
        )
        return INVALID_SIMILARITY

    return float(np.sqrt(np.sum((a - b) ** 2)))


def rank_candidates(similarities: Dict[int, float],
                    num_candidates: int) -> List[int]:
    """
    Pick the num_candidates most similar image ids.

    Sorted by similarity ascending (best match first); equal similarities
    are ordered by ascending image id.

    Args:
        similarities: Mapping of image id to similarity.
        num_candidates: Maximum number of ids to return.

    Returns:
        Up to num_candidates image ids, fewer if fewer are available.
    """
    if num_candidates <= 0:
        return []
    ranked = sorted(similarities.items(), key=lambda item: (item[1], item[0]))
    return [image_id for image_id, _ in ranked[:num_candidates]]
