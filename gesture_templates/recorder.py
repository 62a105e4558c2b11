"""
Recording of new gesture templates from live hand frames.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from .config import Cfg
from .errors import (
    DuplicateGestureError,
    EmptyGestureNameError,
    InsufficientFramesError,
    RecordingError,
    RecordingInProgressError,
    TemplateStoreError,
)
from .landmarks import try_normalize
from .library import TemplateLibrary
from .similarity import average_distance
from .types import (
    GestureTemplate,
    LandmarkFrame,
    NormalizedFrame,
    Scheduler,
    StatusSink,
    TimerHandle,
)

logger = logging.getLogger(__name__)

STATUS_READY = "Ready to record"
STATUS_RECORDING = "Recording..."
STATUS_SAVED = "Gesture saved successfully!"
STATUS_NO_HAND = ("Could not detect the hand during recording. "
                  "Try again and make sure your hand is visible to the camera.")


class Recorder:
    """
    Captures a short burst of hand frames into a new gesture template.

    Features:
    - Fixed-length recording window driven by the scheduler
    - Near-duplicate frames are dropped so a static pose stays compact
    - Periodic progress status while recording
    - Templates with too few distinct frames are rejected
    """

    def __init__(self, library: TemplateLibrary, cfg: Cfg, scheduler: Scheduler,
                 on_status: Optional[StatusSink] = None,
                 on_saved: Optional[Callable[[GestureTemplate], None]] = None):
        self.library = library
        self.cfg = cfg
        self.scheduler = scheduler
        self.on_status = on_status
        self.on_saved = on_saved

        self.status = STATUS_READY
        self.last_error: Optional[Exception] = None

        self._recording = False
        self._name: Optional[str] = None
        self._frames: List[NormalizedFrame] = []
        self._completion_timer: Optional[TimerHandle] = None
        self._progress_timer: Optional[TimerHandle] = None

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def name(self) -> Optional[str]:
        """Name of the gesture being recorded."""
        return self._name

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def frames(self) -> List[NormalizedFrame]:
        """Copy of the frames buffered so far."""
        return list(self._frames)

    def start(self, name: str) -> None:
        """
        Begin recording a gesture.

        Args:
            name: Gesture name, unique among stored templates (case-insensitive)

        Raises:
            EmptyGestureNameError: if the name is blank
            DuplicateGestureError: if the name is taken or is being recorded
            RecordingInProgressError: if another recording is running
        """
        name = (name or "").strip()
        if not name:
            raise EmptyGestureNameError("Please enter a name for the gesture.")

        if self._recording and self._name.lower() == name.lower():
            raise DuplicateGestureError(f'"{name}" is already being recorded.', name)

        # Storage may have changed since the library was last read
        self.library.reload()
        if self.library.contains(name):
            raise DuplicateGestureError(
                f'A gesture named "{name}" already exists. Please choose another name.', name
            )

        if self._recording:
            raise RecordingInProgressError(
                f'Cannot record "{name}" while "{self._name}" is being recorded.', name
            )

        rcfg = self.cfg.recording
        self._recording = True
        self._name = name
        self._frames = []
        self.last_error = None

        self._completion_timer = self.scheduler.call_later(
            rcfg.duration_ms / 1000.0, self._on_duration_elapsed
        )
        self._progress_timer = self.scheduler.call_later(
            rcfg.progress_interval_ms / 1000.0, self._on_progress_tick
        )

        logger.info(f"🔴 Recording gesture '{name}' for {rcfg.duration_ms} ms")
        self._set_status(STATUS_RECORDING)

    def add_frame(self, raw_frame: Optional[LandmarkFrame]) -> bool:
        """
        Buffer one frame of the current recording.

        Args:
            raw_frame: Hand landmarks (None if no hand detected)

        Returns:
            True if the frame was kept, False if it was ignored or dropped
            as a near-duplicate of the previous frame
        """
        if not self._recording or raw_frame is None:
            return False

        normalized = try_normalize(raw_frame)
        if normalized is None:
            return False

        if self._frames:
            distance = average_distance(normalized, self._frames[-1])
            if distance is None:
                logger.debug("Dropping frame with a different landmark count")
                return False
            if distance < self.cfg.recording.dedup_distance_threshold:
                return False

        self._frames.append(normalized)
        return True

    def finish(self) -> Optional[GestureTemplate]:
        """
        Complete the recording and save the template.

        Returns:
            The saved template, or None if nothing was being recorded

        Raises:
            InsufficientFramesError: if fewer than ``min_frames`` distinct
                frames were captured (the buffer is discarded)
            TemplateStoreError: if the template could not be persisted
        """
        if not self._recording:
            return None

        name, frames = self._name, self._frames
        self._stop()

        min_frames = self.cfg.recording.min_frames
        if len(frames) < min_frames:
            error = InsufficientFramesError(
                f"Only {len(frames)} distinct frame(s) captured for '{name}', "
                f"need at least {min_frames}",
                name, frame_count=len(frames), min_frames=min_frames,
            )
            self.last_error = error
            logger.warning(f"⚠️ {error}")
            self._set_status(STATUS_NO_HAND)
            raise error

        template = GestureTemplate(
            name=name, frames=tuple(frames), created_at=datetime.now(timezone.utc)
        )
        try:
            self.library.add(template)
        except (TemplateStoreError, DuplicateGestureError) as e:
            self.last_error = e
            logger.error(f"❌ Could not save gesture '{name}': {e}")
            self._set_status(f"Could not save gesture: {e}")
            raise

        self._set_status(STATUS_SAVED)
        if self.on_saved is not None:
            self.on_saved(template)
        return template

    def cancel(self) -> None:
        """Abort the recording without saving anything."""
        was_recording = self._recording
        self._stop()
        if was_recording:
            logger.info("⏹️ Recording cancelled")
        self._set_status(STATUS_READY)

    def _stop(self) -> None:
        for timer in (self._completion_timer, self._progress_timer):
            if timer is not None:
                timer.cancel()
        self._completion_timer = None
        self._progress_timer = None
        self._recording = False
        self._name = None
        self._frames = []

    def _on_duration_elapsed(self) -> None:
        self._completion_timer = None
        try:
            self.finish()
        except (RecordingError, TemplateStoreError):
            # Already reported through status and last_error
            pass

    def _on_progress_tick(self) -> None:
        if not self._recording:
            return
        self._set_status(f"{STATUS_RECORDING} ({len(self._frames)} frames)")
        self._progress_timer = self.scheduler.call_later(
            self.cfg.recording.progress_interval_ms / 1000.0, self._on_progress_tick
        )

    def _set_status(self, text: str) -> None:
        self.status = text
        if self.on_status is not None:
            self.on_status(text)
