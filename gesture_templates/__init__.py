"""
Hand Gesture Template Recognition

Records named hand poses from a stream of 3D hand landmarks and recognizes
them later by comparing live frames against the stored templates.
"""

__version__ = "0.1.0"

from .types import GestureTemplate, RecognitionEvent, RecognitionState
from .config import load_config, Cfg
from .errors import (
    GestureTemplateError,
    MalformedFrameError,
    RecordingError,
    EmptyGestureNameError,
    DuplicateGestureError,
    RecordingInProgressError,
    InsufficientFramesError,
    TemplateStoreError,
    UnknownGestureError,
)
from .landmarks import normalize_landmarks, coerce_frame
from .similarity import average_distance, similarity
from .scheduler import AsyncioScheduler, ManualScheduler
from .store import JsonTemplateStore, MemoryTemplateStore
from .library import TemplateLibrary
from .recognizer import Recognizer
from .recorder import Recorder
from .session import GestureSession

__all__ = [
    "GestureTemplate",
    "RecognitionEvent",
    "RecognitionState",
    "load_config",
    "Cfg",
    "GestureTemplateError",
    "MalformedFrameError",
    "RecordingError",
    "EmptyGestureNameError",
    "DuplicateGestureError",
    "RecordingInProgressError",
    "InsufficientFramesError",
    "TemplateStoreError",
    "UnknownGestureError",
    "normalize_landmarks",
    "coerce_frame",
    "average_distance",
    "similarity",
    "AsyncioScheduler",
    "ManualScheduler",
    "JsonTemplateStore",
    "MemoryTemplateStore",
    "TemplateLibrary",
    "Recognizer",
    "Recorder",
    "GestureSession",
]
