"""
Type definitions for template-based gesture recognition.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol, Sequence, Tuple, runtime_checkable

import numpy as np


# (x, y, z) joint coordinate
Landmark = Tuple[float, float, float]

# Raw input as delivered by the hand tracker: 3-tuples, MediaPipe landmark
# objects, {"x", "y", "z"} mappings or an (N, 3) array
LandmarkFrame = Any

# (N, 3) float64 array with every axis rescaled into [0, 1]
NormalizedFrame = np.ndarray


@dataclass(frozen=True, eq=False)
class GestureTemplate:
    """A named reference pose recorded from live input (compared by identity)."""
    name: str
    frames: Tuple[NormalizedFrame, ...]
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def first_frame(self) -> Optional[NormalizedFrame]:
        """Representative pose used for matching."""
        return self.frames[0] if self.frames else None

    def matches_name(self, name: str) -> bool:
        """Case-insensitive name comparison."""
        return self.name.lower() == name.strip().lower()

    def renamed(self, name: str) -> "GestureTemplate":
        """Return a copy of this template under a new name."""
        return GestureTemplate(name=name, frames=self.frames, created_at=self.created_at)


@dataclass(frozen=True)
class RecognitionEvent:
    """Emitted once per steady hold of a stored gesture."""
    name: str
    score: float
    timestamp: float


@dataclass
class RecognitionState:
    """Debounce state for one recognition session."""
    steady_frame_count: int = 0
    last_recognized_name: Optional[str] = None
    cooldown_active: bool = False
    held_name: Optional[str] = None  # template matched by the previous frame

    def reset(self) -> None:
        """Restore the initial values."""
        self.steady_frame_count = 0
        self.held_name = None
        self.last_recognized_name = None
        self.cooldown_active = False


@runtime_checkable
class TimerHandle(Protocol):
    """Cancellation token for a scheduled callback."""

    def cancel(self) -> None:
        """Prevent the callback from running if it has not run yet."""
        ...


@runtime_checkable
class Scheduler(Protocol):
    """Clock and timer source shared by the recognizer and recorder."""

    def now(self) -> float:
        """Current time in seconds."""
        ...

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay_s`` seconds."""
        ...


@runtime_checkable
class TemplateStore(Protocol):
    """Persistence collaborator holding the full template collection."""

    def load(self) -> list:
        """Return every stored template, or an empty list."""
        ...

    def save(self, templates: Sequence[GestureTemplate]) -> None:
        """Replace the stored collection."""
        ...


@runtime_checkable
class RecordingProbe(Protocol):
    """What the recognizer needs to know about an attached recorder."""

    @property
    def is_recording(self) -> bool:
        ...

    def add_frame(self, raw_frame: LandmarkFrame) -> bool:
        ...


@runtime_checkable
class FrameSink(Protocol):
    """Consumer side of the hand tracker."""

    def process_frame(self, raw_frame: Optional[LandmarkFrame]) -> Optional[RecognitionEvent]:
        """Handle one tracker tick (``None`` when no hand is tracked)."""
        ...


RecognitionSink = Callable[[RecognitionEvent], None]
StatusSink = Callable[[str], None]
