"""
Distance and similarity between normalized landmark frames.
"""
from typing import Optional

import numpy as np

from .types import NormalizedFrame

DEFAULT_FALLOFF = 0.5


def average_distance(frame_a: Optional[NormalizedFrame],
                     frame_b: Optional[NormalizedFrame]) -> Optional[float]:
    """
    Mean 3D Euclidean distance between corresponding landmarks.

    Returns:
        The average distance, or None if either frame is missing or the
        frames have different numbers of landmarks
    """
    if frame_a is None or frame_b is None:
        return None

    a = np.asarray(frame_a, dtype=np.float64)
    b = np.asarray(frame_b, dtype=np.float64)
    if a.shape != b.shape or a.ndim != 2 or a.shape[0] == 0:
        return None

    return float(np.linalg.norm(a - b, axis=1).mean())


def similarity(frame_a: Optional[NormalizedFrame],
               frame_b: Optional[NormalizedFrame],
               falloff: float = DEFAULT_FALLOFF) -> float:
    """
    Similarity in [0, 1] between two normalized frames.

    Linear falloff: identical frames score 1.0 and the score reaches 0 once
    the average landmark distance is ``falloff`` or more. Incomparable frames
    score 0.
    """
    distance = average_distance(frame_a, frame_b)
    if distance is None:
        return 0.0

    return max(0.0, 1.0 - distance / falloff)
