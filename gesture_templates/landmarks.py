"""
Hand landmark coercion and normalization.
"""
import logging
from collections.abc import Mapping
from typing import Optional

import numpy as np

from .errors import MalformedFrameError
from .types import LandmarkFrame, NormalizedFrame

logger = logging.getLogger(__name__)

AXES = ("x", "y", "z")


def _point_to_xyz(point) -> tuple:
    """Read one joint from a tuple, a mapping or a MediaPipe landmark object."""
    if isinstance(point, Mapping):
        return tuple(point[axis] for axis in AXES)
    if all(hasattr(point, axis) for axis in AXES):
        return tuple(getattr(point, axis) for axis in AXES)
    values = tuple(point)
    if len(values) != 3:
        raise MalformedFrameError(f"Expected 3 coordinates per landmark, got {len(values)}")
    return values


def to_array(raw_frame: LandmarkFrame) -> np.ndarray:
    """
    Convert a raw landmark frame to an (N, 3) float64 array.

    Args:
        raw_frame: Sequence of (x, y, z) tuples, {"x", "y", "z"} mappings,
            objects with x/y/z attributes, or an (N, 3) array

    Returns:
        (N, 3) array of finite coordinates

    Raises:
        MalformedFrameError: if the frame is absent, empty, has the wrong
            shape or contains NaN/inf
    """
    if raw_frame is None:
        raise MalformedFrameError("Landmark frame is missing")

    # MediaPipe NormalizedLandmarkList wraps its points in .landmark
    if hasattr(raw_frame, "landmark") and not isinstance(raw_frame, (Mapping, np.ndarray)):
        raw_frame = raw_frame.landmark

    try:
        if isinstance(raw_frame, np.ndarray):
            points = np.asarray(raw_frame, dtype=np.float64)
        else:
            points = np.asarray([_point_to_xyz(p) for p in raw_frame], dtype=np.float64)
    except (TypeError, KeyError, ValueError) as e:
        raise MalformedFrameError(f"Unreadable landmark frame: {e}") from e

    if points.ndim != 2 or points.shape[0] == 0 or points.shape[1] != 3:
        raise MalformedFrameError(f"Expected (N, 3) landmarks, got shape {points.shape}")
    if not np.all(np.isfinite(points)):
        raise MalformedFrameError("Landmark frame contains non-finite coordinates")

    return points


def coerce_frame(raw_frame: Optional[LandmarkFrame]) -> Optional[np.ndarray]:
    """Like :func:`to_array`, but returns None for absent or malformed input."""
    if raw_frame is None:
        return None
    try:
        return to_array(raw_frame)
    except MalformedFrameError as e:
        logger.debug(f"Ignoring malformed frame: {e}")
        return None


def normalize_landmarks(raw_frame: LandmarkFrame) -> NormalizedFrame:
    """
    Rescale every axis of a frame into [0, 1] using its own bounding box.

    The result is independent of where the hand sits in camera space and of
    its size along each axis, but not of its rotation.

    Args:
        raw_frame: Any input accepted by :func:`to_array`

    Returns:
        (N, 3) normalized frame
    """
    points = to_array(raw_frame)

    # Bring each axis to unit magnitude first so max - min cannot overflow
    scale = np.abs(points).max(axis=0)
    scale[scale == 0] = 1.0
    points = points / scale

    mins = points.min(axis=0)
    extent = points.max(axis=0) - mins
    # Flat axis: divide by 1 so values stay at 0 instead of NaN
    extent[extent == 0] = 1.0

    return (points - mins) / extent


def try_normalize(raw_frame: Optional[LandmarkFrame]) -> Optional[NormalizedFrame]:
    """Normalize a frame, returning None when it is absent or malformed."""
    points = coerce_frame(raw_frame)
    if points is None:
        return None
    return normalize_landmarks(points)


def frame_to_points(frame: NormalizedFrame) -> list:
    """Serialize a frame as a list of {"x", "y", "z"} dicts."""
    return [{"x": float(x), "y": float(y), "z": float(z)} for x, y, z in frame]
