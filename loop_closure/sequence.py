"""
Replay a directory of frames through a loop closure detector.

Frames are processed in filename order and numbered 0..N-1, the way a
mapping pipeline would feed them one by one. The most recent frames can be
ignored when querying, since consecutive frames of a trajectory are always
similar and are not loop closures.
"""

import os
import logging
from typing import List

import cv2

from .engine import LoopClosureDetector

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.bmp', '.pgm', '.ppm', '.tif', '.tiff'}


def list_images(image_dir: str) -> List[str]:
    """Sorted filenames in image_dir with a known image extension."""
    return sorted(
        f for f in os.listdir(image_dir)
        if os.path.splitext(f)[1].lower() in IMAGE_EXTENSIONS
    )


def run_sequence(image_dir: str,
                 detector: LoopClosureDetector,
                 num_candidates: int = 1,
                 skip_recent: int = 0) -> dict:
    """
    Process every image in image_dir and collect loop closure candidates.

    Args:
        image_dir: Directory containing the frames.
        detector: Detector to feed. Its store keeps the processed frames.
        num_candidates: Candidates to request per frame.
        skip_recent: Number of immediately preceding frames to ignore.

    Returns:
        Dict with 'success', 'processed', 'errors' counts and 'candidates',
        mapping each filename to its candidate filenames (best first).
        Frames without candidates are left out.
    """
    filenames = list_images(image_dir)
    if not filenames:
        return {"success": False, "error": f"No images found in {image_dir}"}

    logger.info(f"Replaying {len(filenames)} frames from {image_dir}")

    candidates = {}
    processed = 0
    errors = 0

    for image_id, filename in enumerate(filenames):
        image = cv2.imread(os.path.join(image_dir, filename))
        if image is None:
            logger.warning(f"Could not read: {filename}")
            errors += 1
            continue

        image_rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        ignore = set(range(max(0, image_id - skip_recent), image_id))

        found = detector.process(image_id, image_rgb, num_candidates, ignore)
        processed += 1
        if found:
            candidates[filename] = [filenames[i] for i in found]

    logger.info(
        f"Sequence done: {processed} frames, {len(candidates)} with "
        f"candidates, {errors} errors"
    )

    return {
        "success": True,
        "processed": processed,
        "errors": errors,
        "candidates": candidates,
    }
