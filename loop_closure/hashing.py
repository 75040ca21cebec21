"""
Image hashing by projection of local descriptors onto a random basis.

A descriptor matrix with a variable number of rows (one per keypoint) and
D columns is reduced to a fixed-length hash of num_proj * D floats: for
every projection vector p_i and descriptor column n, the rows are weighted
by p_i, each product is mapped to [0, 1] with (value + 1) / 2, and the sum
is averaged over the number of descriptors.

Descriptor values are expected to lie roughly in [-1, 1]. Values outside
that range are not corrected here; normalize them before hashing (the SIFT
extractor in this package does so by default).
"""

import logging
from typing import Optional

import numpy as np

from .config import validate_engine_config, resolve_seed
from .projection import ProjectionBasis

logger = logging.getLogger(__name__)


class Hasher:
    """
    Computes fixed-length image hashes from descriptor matrices.

    Owns the random generator used for both basis construction and row
    subsampling, so a fixed seed makes every hash reproducible.
    """

    def __init__(self, num_proj: int, max_desc: int, seed: Optional[int] = None):
        """
        Args:
            num_proj: Number of projection vectors.
            max_desc: Projection vector length. Descriptor matrices with
                more rows than this are randomly subsampled down to it.
            seed: Random seed. None derives one from the current time.

        Raises:
            ValueError: If num_proj > max_desc or either is not positive.
        """
        validate_engine_config(num_proj, max_desc)
        self.num_proj = num_proj
        self.max_desc = max_desc
        self.seed = resolve_seed(seed)
        self._rng = np.random.default_rng(self.seed)
        self.basis = ProjectionBasis(num_proj, max_desc, self._rng)

    def hash_length(self, dim: int) -> int:
        """Length of the hash produced for descriptors with dim columns."""
        return self.num_proj * dim

    def calc_hash(self, descriptors) -> np.ndarray:
        """
        Calculate the hash of a descriptor matrix.

        The hash is laid out row-major over (projection, column): the value
        for projection i and descriptor column n is at index i * D + n.

        Args:
            descriptors: Array-like of shape (R, D), one row per keypoint.

        Returns:
            Read-only float64 array of length num_proj * D.

        Raises:
            ValueError: If descriptors is not a 2-D numeric matrix, has no
                rows, or holds NaN or infinite values.
        """
        try:
            desc = np.asarray(descriptors, dtype=np.float64)
        except TypeError as e:
            raise ValueError(f"Descriptor matrix is not numeric: {e}") from e
        if desc.ndim != 2:
            raise ValueError(
                f"Descriptor matrix must be 2-D, got shape {desc.shape}"
            )
        if desc.shape[0] == 0:
            logger.error("Descriptor matrix is empty")
            raise ValueError("Descriptor matrix is empty")
        if not np.all(np.isfinite(desc)):
            raise ValueError("Descriptor matrix contains NaN or infinite values")

        projections = self.basis.vectors
        num_rows = desc.shape[0]

        # Should be rare: extractors are asked for fewer than max_desc rows
        if num_rows > self.max_desc:
            keep = self._rng.choice(num_rows, size=self.max_desc, replace=False)
            logger.debug(
                f"Subsampled descriptors: {num_rows} -> {self.max_desc} rows"
            )
            used = desc[keep]
        else:
            used = desc

        used_rows = used.shape[0]
        # sum_m ((p[i, m] * d[m, n]) + 1) / 2 for every (i, n)
        grid = (projections[:, :used_rows] @ used + used_rows) / 2.0
        grid /= num_rows

        hash_vec = grid.reshape(-1)
        hash_vec.setflags(write=False)
        return hash_vec
