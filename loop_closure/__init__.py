"""
loop_closure — Hash-based loop closure detection.

Reduces the local feature descriptors of each image to a compact hash by
projecting them onto a near-orthogonal random basis, then retrieves the
most similar previously-seen images by hash distance.

Modules:
    engine         LoopClosureDetector (process / ranked retrieval)
    projection     Near-orthogonal random projection basis
    hashing        Descriptor matrix → fixed-length hash
    similarity     Hash distance and candidate ranking
    store          In-memory id → hash store
    descriptors    SIFT descriptor extraction
    preprocessing  Image validation and grayscale conversion
    sequence       Replay a directory of frames through a detector
    config         Environment-driven defaults and validation
"""

from .engine import LoopClosureDetector, ProcessResult, ResultKind
from .hashing import Hasher
from .similarity import calc_similarity

__version__ = "1.0.0"

__all__ = [
    "LoopClosureDetector",
    "ProcessResult",
    "ResultKind",
    "Hasher",
    "calc_similarity",
]
