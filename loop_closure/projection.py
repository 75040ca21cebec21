"""
Near-orthogonal random projection basis.

The basis is a set of num_proj unit vectors of length max_desc. Instead of
orthogonalizing every new random vector against all previous ones, each
step draws max_desc - k random leading components and solves a small k×k
linear system for the k trailing components that make the new vector
orthogonal to the k vectors already accepted:

    A[n, :] = prior_n[max_desc - k:]
    b[n]    = -dot(new_leading, prior_n[:max_desc - k])
    A @ x   = b

The solved components are appended and the vector is normalized.
"""

import logging
import threading

import numpy as np

from .config import validate_engine_config

logger = logging.getLogger(__name__)


def _unit_vector(x: np.ndarray) -> np.ndarray:
    return x / np.linalg.norm(x)


def build_projection_basis(num_proj: int,
                           max_desc: int,
                           rng: np.random.Generator) -> np.ndarray:
    """
    Build num_proj mutually orthogonal unit vectors of length max_desc.

    Args:
        num_proj: Number of projection vectors.
        max_desc: Length of each vector.
        rng: Generator supplying the uniform [0, 1) draws. The basis is
            deterministic for a generator in a given state.

    Returns:
        Float64 array of shape (num_proj, max_desc), one vector per row.

    Raises:
        ValueError: If the configuration is invalid (see
            validate_engine_config).
    """
    validate_engine_config(num_proj, max_desc)

    basis = np.empty((num_proj, max_desc), dtype=np.float64)
    basis[0] = _unit_vector(rng.random(max_desc))

    for k in range(1, num_proj):
        lead = max_desc - k
        new_v = rng.random(lead)

        prior = basis[:k]
        b = -(prior[:, :lead] @ new_v)
        a = prior[:, lead:]
        x, _, rank, _ = np.linalg.lstsq(a, b, rcond=None)
        if rank < k:
            logger.warning(
                f"Rank-deficient system at projection {k} "
                f"(rank {rank} < {k}), using least-squares solution"
            )

        basis[k] = _unit_vector(np.concatenate([new_v, x]))

    logger.debug(f"Built projection basis: {num_proj} x {max_desc}")
    return basis


class ProjectionBasis:
    """
    Lazily-built projection basis owned by a hasher.

    The vectors are computed on first access, exactly once, and never
    rebuilt. Construction is guarded so concurrent first accesses still
    build a single basis.
    """

    def __init__(self, num_proj: int, max_desc: int, rng: np.random.Generator):
        validate_engine_config(num_proj, max_desc)
        self.num_proj = num_proj
        self.max_desc = max_desc
        self._rng = rng
        self._vectors = None
        self._lock = threading.Lock()

    @property
    def is_built(self) -> bool:
        return self._vectors is not None

    @property
    def vectors(self) -> np.ndarray:
        """Read-only (num_proj, max_desc) array, built on first access."""
        if self._vectors is None:
            self.build()
        return self._vectors

    def build(self) -> np.ndarray:
        """Build the basis if it does not exist yet. Idempotent."""
        with self._lock:
            if self._vectors is None:
                vectors = build_projection_basis(
                    self.num_proj, self.max_desc, self._rng
                )
                vectors.setflags(write=False)
                self._vectors = vectors
                logger.info(
                    f"Projection basis ready: {self.num_proj} vectors "
                    f"of length {self.max_desc}"
                )
        return self._vectors

    def __len__(self) -> int:
        return self.num_proj
