"""
Engine configuration for hash-based loop closure detection.

All settings are fixed for the lifetime of a detector instance. Defaults
come from environment variables so deployments can tune them without code
changes; every constructor also accepts explicit overrides.

    HALOC_NUM_PROJ     Number of projection vectors (hash length = num_proj * D)
    HALOC_MAX_DESC     Projection vector length and per-image descriptor cap
    HALOC_SEED         Random seed (unset = time-derived)
    HALOC_DESC_MARGIN  Keypoints requested below max_desc, since detectors
                       tend to return a few more than asked for
"""

import os
import time
import logging
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_NUM_PROJ = int(os.environ.get("HALOC_NUM_PROJ", "3"))
DEFAULT_MAX_DESC = int(os.environ.get("HALOC_MAX_DESC", "300"))
DESCRIPTOR_MARGIN = int(os.environ.get("HALOC_DESC_MARGIN", "5"))

_env_seed = os.environ.get("HALOC_SEED")
DEFAULT_SEED = int(_env_seed) if _env_seed else None


def validate_engine_config(num_proj: int, max_desc: int) -> None:
    """
    Reject configurations the projection basis cannot be built for.

    Each new projection vector solves a k×k system on the trailing k
    components of the previous vectors, so at most max_desc vectors fit.

    Raises:
        ValueError: If num_proj or max_desc is not positive, or if
            num_proj exceeds max_desc.
    """
    if num_proj < 1:
        raise ValueError(f"num_proj must be >= 1, got {num_proj}")
    if max_desc < 1:
        raise ValueError(f"max_desc must be >= 1, got {max_desc}")
    if num_proj > max_desc:
        raise ValueError(
            f"num_proj ({num_proj}) cannot exceed max_desc ({max_desc})"
        )


def resolve_seed(seed: Optional[int] = None) -> int:
    """Return the given seed, or a time-derived one when seed is None."""
    if seed is None:
        seed = time.time_ns() & 0xFFFFFFFF
        logger.info(f"No seed configured, using time-derived seed {seed}")
    return int(seed)


def target_descriptor_count(max_desc: int,
                            margin: int = DESCRIPTOR_MARGIN) -> int:
    """Number of keypoints to request from the descriptor extractor."""
    return max(max_desc - margin, 1)
