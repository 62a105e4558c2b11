"""
Exceptions raised by the gesture template pipeline.
"""
from typing import Optional


class GestureTemplateError(Exception):
    """Base class for every error raised by this package."""

    def __init__(self, message: str, gesture_name: Optional[str] = None):
        super().__init__(message)
        self.gesture_name = gesture_name


class MalformedFrameError(GestureTemplateError, ValueError):
    """A landmark frame is empty, not N x 3, or holds non-finite values."""


class RecordingError(GestureTemplateError):
    """A recording could not be started or completed."""


class EmptyGestureNameError(RecordingError):
    """Recording was requested without a gesture name."""


class DuplicateGestureError(RecordingError):
    """A template with the same (case-insensitive) name already exists."""


class RecordingInProgressError(RecordingError):
    """A second recording was started before the first one finished."""


class InsufficientFramesError(RecordingError):
    """Too few distinct frames were captured to build a template."""

    def __init__(self, message: str, gesture_name: Optional[str] = None,
                 frame_count: int = 0, min_frames: int = 0):
        super().__init__(message, gesture_name)
        self.frame_count = frame_count
        self.min_frames = min_frames


class TemplateStoreError(GestureTemplateError):
    """The persistence collaborator failed to save the template collection."""


class UnknownGestureError(GestureTemplateError, KeyError):
    """No template with the requested name exists."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
