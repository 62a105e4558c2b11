"""
Template matching with a steady-hold debounce.
"""
import logging
from typing import Optional, Tuple

from .config import Cfg
from .landmarks import try_normalize
from .library import TemplateLibrary
from .similarity import similarity
from .types import (
    GestureTemplate,
    LandmarkFrame,
    NormalizedFrame,
    RecognitionEvent,
    RecognitionSink,
    RecognitionState,
    RecordingProbe,
    Scheduler,
    TimerHandle,
)

logger = logging.getLogger(__name__)


class Recognizer:
    """
    Matches live hand frames against stored gesture templates.

    Features:
    - Bounding-box normalization, so hand position and size do not matter
    - Average landmark distance converted to a [0, 1] similarity
    - A gesture fires only after it has been held for N consecutive frames
    - Wall-clock cooldown after each recognition
    - The same gesture never fires twice in a row while its cooldown runs
    - Frames are handed to the recorder instead while it is recording

    One instance holds the state of one tracked hand.
    """

    def __init__(self, library: TemplateLibrary, cfg: Cfg, scheduler: Scheduler,
                 recorder: Optional[RecordingProbe] = None,
                 on_recognized: Optional[RecognitionSink] = None):
        """Initialize the recognizer for one session."""
        self.library = library
        self.cfg = cfg
        self.scheduler = scheduler
        self.recorder = recorder
        self.on_recognized = on_recognized

        self.state = RecognitionState()
        self._cooldown_timer: Optional[TimerHandle] = None

    def process_frame(self, raw_frame: Optional[LandmarkFrame]) -> Optional[RecognitionEvent]:
        """
        Process one tracker tick and return a recognition event if a held
        gesture has just been confirmed.

        Args:
            raw_frame: Hand landmarks (None if no hand detected)

        Returns:
            RecognitionEvent for a newly confirmed gesture, None otherwise
        """
        if raw_frame is None:
            return None

        # Recording and recognition never share a frame
        if self.recorder is not None and self.recorder.is_recording:
            self.recorder.add_frame(raw_frame)
            return None

        if len(self.library) == 0:
            return None

        normalized = try_normalize(raw_frame)
        if normalized is None:
            self.state.steady_frame_count = 0
            self.state.held_name = None
            return None

        template, score = self.best_match(normalized)
        rcfg = self.cfg.recognition

        if template is None or score < rcfg.match_threshold:
            # Any break in the hold restarts accumulation
            self.state.steady_frame_count = 0
            self.state.held_name = None
            return None

        if rcfg.per_template_hold and template.name != self.state.held_name:
            self.state.steady_frame_count = 0
        self.state.held_name = template.name
        self.state.steady_frame_count += 1

        if (self.state.steady_frame_count >= rcfg.required_steady_frames
                and template.name != self.state.last_recognized_name
                and not self.state.cooldown_active):
            return self._emit(template, score)

        return None

    def best_match(self, normalized: NormalizedFrame) -> Tuple[Optional[GestureTemplate], float]:
        """
        Find the stored template closest to a normalized frame.

        Ties keep the template that comes first in stored order.

        Returns:
            (best template or None, its similarity score)
        """
        best_template = None
        best_score = 0.0

        for template in self.library.templates:
            score = self._score_template(normalized, template)
            if score > best_score:
                best_score = score
                best_template = template

        return best_template, best_score

    def _score_template(self, normalized: NormalizedFrame, template: GestureTemplate) -> float:
        falloff = self.cfg.recognition.similarity_falloff

        if self.cfg.recognition.match_strategy == "best_frame":
            return max((similarity(normalized, frame, falloff) for frame in template.frames),
                       default=0.0)

        # Templates are matched on their first recorded frame only
        return similarity(normalized, template.first_frame, falloff)

    def _emit(self, template: GestureTemplate, score: float) -> RecognitionEvent:
        event = RecognitionEvent(name=template.name, score=score, timestamp=self.scheduler.now())

        self.state.last_recognized_name = template.name
        self.state.cooldown_active = True
        self._cooldown_timer = self.scheduler.call_later(
            self.cfg.recognition.cooldown_ms / 1000.0, self._end_cooldown
        )

        logger.info(f"✋ Recognized gesture '{template.name}' (score={score:.3f})")
        if self.on_recognized is not None:
            self.on_recognized(event)
        return event

    def _end_cooldown(self) -> None:
        self._cooldown_timer = None
        self.state.cooldown_active = False
        self.state.last_recognized_name = None
        logger.debug("Recognition cooldown elapsed")

    def reload_templates(self) -> None:
        """Pick up templates added or removed outside this session."""
        self.library.reload()

    def reset(self) -> None:
        """Cancel any pending cooldown and return to the idle state."""
        if self._cooldown_timer is not None:
            self._cooldown_timer.cancel()
            self._cooldown_timer = None
        self.state.reset()
