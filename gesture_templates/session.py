"""
One recognition/recording session per tracked hand.
"""
import logging
from typing import Optional

from .config import Cfg, load_config
from .library import TemplateLibrary
from .recognizer import Recognizer
from .recorder import Recorder
from .scheduler import AsyncioScheduler
from .types import (
    GestureTemplate,
    LandmarkFrame,
    RecognitionEvent,
    RecognitionSink,
    Scheduler,
    StatusSink,
    TemplateStore,
)

logger = logging.getLogger(__name__)


class GestureSession:
    """
    Wires a template library, a recorder and a recognizer together.

    Frames from the hand tracker go to :meth:`process_frame`; while a
    recording is running they are captured, otherwise they are matched.
    """

    def __init__(self, store: TemplateStore, cfg: Optional[Cfg] = None,
                 scheduler: Optional[Scheduler] = None,
                 on_recognized: Optional[RecognitionSink] = None,
                 on_status: Optional[StatusSink] = None):
        self.cfg = cfg if cfg is not None else load_config()
        self.scheduler = scheduler if scheduler is not None else AsyncioScheduler()
        self.library = TemplateLibrary(store)

        self.recorder = Recorder(
            self.library, self.cfg, self.scheduler,
            on_status=on_status, on_saved=self._on_template_saved,
        )
        self.recognizer = Recognizer(
            self.library, self.cfg, self.scheduler,
            recorder=self.recorder, on_recognized=on_recognized,
        )

    def process_frame(self, raw_frame: Optional[LandmarkFrame]) -> Optional[RecognitionEvent]:
        """Handle one tracker tick (None when no hand is tracked)."""
        return self.recognizer.process_frame(raw_frame)

    def start_recording(self, name: str) -> None:
        self.recorder.start(name)

    def stop_recording(self) -> Optional[GestureTemplate]:
        """Finish the running recording early and save it."""
        return self.recorder.finish()

    def cancel_recording(self) -> None:
        self.recorder.cancel()

    def delete_gesture(self, name: str) -> GestureTemplate:
        removed = self.library.remove(name)
        self.recognizer.reset()
        return removed

    def close(self) -> None:
        """Cancel every pending timer."""
        if self.recorder.is_recording:
            self.recorder.cancel()
        self.recognizer.reset()

    def _on_template_saved(self, template: GestureTemplate) -> None:
        logger.debug(f"Reloading templates after saving '{template.name}'")
        self.recognizer.reload_templates()
