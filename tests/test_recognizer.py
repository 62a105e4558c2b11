"""
Test cases for the steady-hold recognizer with a simulated clock.
"""
import unittest
import sys
from dataclasses import replace
from pathlib import Path

import numpy as np

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from gesture_templates.config import load_config
from gesture_templates.library import TemplateLibrary
from gesture_templates.recognizer import Recognizer
from gesture_templates.scheduler import ManualScheduler
from gesture_templates.store import MemoryTemplateStore
from gesture_templates.types import GestureTemplate, RecognitionEvent

FRAME_DT = 0.033  # ~30 fps


def make_hand(seed: int, n: int = 21) -> np.ndarray:
    """Synthetic hand frame already spanning the unit cube on every axis."""
    rng = np.random.default_rng(seed)
    frame = np.empty((n, 3))
    frame[0] = (0.0, 0.0, 0.0)
    frame[1] = (1.0, 1.0, 1.0)
    frame[2:] = rng.uniform(0.05, 0.95, size=(n - 2, 3))
    return frame


class FakeRecorder:
    """Stand-in for the recorder's recording probe."""

    def __init__(self, recording: bool = True):
        self.is_recording = recording
        self.frames = []

    def add_frame(self, raw_frame) -> bool:
        self.frames.append(raw_frame)
        return True


class RecognizerTestCase(unittest.TestCase):
    """Shared fixture: a library with two distinct gestures."""

    def setUp(self):
        """Set up test configuration."""
        self.cfg = load_config()
        self.scheduler = ManualScheduler()
        self.store = MemoryTemplateStore()
        self.fist = make_hand(1)
        self.palm = make_hand(2)
        self.store.save([
            GestureTemplate(name="Fist", frames=(self.fist, make_hand(3))),
            GestureTemplate(name="Palm", frames=(self.palm,)),
        ])
        self.library = TemplateLibrary(self.store)
        self.events = []
        self.recognizer = Recognizer(self.library, self.cfg, self.scheduler,
                                     on_recognized=self.events.append)

    def feed(self, frame, count: int, dt: float = FRAME_DT) -> list:
        """Feed the same frame ``count`` times, advancing the clock between frames."""
        results = []
        for _ in range(count):
            results.append(self.recognizer.process_frame(frame))
            self.scheduler.advance(dt)
        return results


class TestSteadyHold(RecognizerTestCase):
    """Test the steady-frame debounce."""

    def test_nine_frames_do_not_fire(self):
        """A hold shorter than required_steady_frames yields no event."""
        results = self.feed(self.fist, 9)

        self.assertEqual(results, [None] * 9)
        self.assertEqual(self.recognizer.state.steady_frame_count, 9)
        self.assertEqual(self.events, [])

    def test_tenth_frame_fires_once(self):
        """The 10th consecutive matching frame yields exactly one event."""
        results = self.feed(self.fist, 10)

        self.assertEqual(results[:9], [None] * 9)
        self.assertIsInstance(results[9], RecognitionEvent)
        self.assertEqual(results[9].name, "Fist")
        self.assertEqual(results[9].score, 1.0)
        self.assertEqual([e.name for e in self.events], ["Fist"])

    def test_translated_and_scaled_frame_still_matches(self):
        """Live frames anywhere in camera space match the normalized template."""
        live = self.fist * [0.2, 0.3, 0.05] + [0.4, 0.3, -0.02]

        results = self.feed(live, 10)

        self.assertEqual(results[9].name, "Fist")

    def test_break_in_hold_restarts_count(self):
        """A single non-matching frame resets accumulation to zero."""
        self.feed(self.fist, 9)
        self.feed(make_hand(99), 1)
        self.assertEqual(self.recognizer.state.steady_frame_count, 0)

        results = self.feed(self.fist, 9)
        self.assertEqual(results, [None] * 9)

        results = self.feed(self.fist, 1)
        self.assertEqual(results[0].name, "Fist")

    def test_switching_gesture_keeps_counting(self):
        """Every above-threshold frame extends the hold, whichever template matched."""
        self.feed(self.fist, 5)
        results = self.feed(self.palm, 5)

        self.assertEqual(results[:4], [None] * 4)
        self.assertEqual(results[4].name, "Palm")
        self.assertEqual(self.recognizer.state.steady_frame_count, 10)

    def test_per_template_hold_restarts_on_switch(self):
        """With per_template_hold a different template starts a new run."""
        cfg = replace(self.cfg, recognition=replace(self.cfg.recognition,
                                                    per_template_hold=True))
        self.recognizer = Recognizer(self.library, cfg, self.scheduler)

        self.feed(self.fist, 5)
        results = self.feed(self.palm, 9)
        self.assertEqual(results, [None] * 9)
        self.assertEqual(self.recognizer.state.held_name, "Palm")

        results = self.feed(self.palm, 1)
        self.assertEqual(results[0].name, "Palm")

    def test_missing_frames_do_not_change_state(self):
        """Untracked ticks are ignored."""
        self.feed(self.fist, 5)
        self.assertIsNone(self.recognizer.process_frame(None))
        self.assertEqual(self.recognizer.state.steady_frame_count, 5)

    def test_malformed_frame_counts_as_no_match(self):
        """Malformed input is treated as nothing detected."""
        self.feed(self.fist, 5)

        self.assertIsNone(self.recognizer.process_frame([(0.1, 0.2)]))
        self.assertEqual(self.recognizer.state.steady_frame_count, 0)

    def test_wrong_landmark_count_never_matches(self):
        """Frames with a different joint count score 0 against every template."""
        results = self.feed(make_hand(1, n=20), 15)

        self.assertEqual(results, [None] * 15)
        self.assertEqual(self.recognizer.state.steady_frame_count, 0)

    def test_matches_first_frame_only(self):
        """Only a template's first frame is used for matching by default."""
        results = self.feed(make_hand(3), 12)

        self.assertEqual(results, [None] * 12)

    def test_best_frame_strategy_matches_any_frame(self):
        """The best_frame strategy scores against every template frame."""
        cfg = replace(self.cfg, recognition=replace(self.cfg.recognition,
                                                    match_strategy="best_frame"))
        self.recognizer = Recognizer(self.library, cfg, self.scheduler)

        results = self.feed(make_hand(3), 10)

        self.assertEqual(results[9].name, "Fist")

    def test_tie_goes_to_first_stored_template(self):
        """Equal scores resolve to the earliest template in stored order."""
        frame = make_hand(50)
        self.store.save([
            GestureTemplate(name="First", frames=(frame,)),
            GestureTemplate(name="Second", frames=(frame.copy(),)),
        ])
        self.recognizer.reload_templates()

        results = self.feed(frame, 10)

        self.assertEqual(results[9].name, "First")

    def test_best_match_reports_score(self):
        """best_match returns the closest template and its similarity."""
        template, score = self.recognizer.best_match(self.palm)

        self.assertEqual(template.name, "Palm")
        self.assertEqual(score, 1.0)


class TestCooldown(RecognizerTestCase):
    """Test cooldown and repeat suppression."""

    def test_no_repeat_while_holding_within_cooldown(self):
        """Holding the same pose during the cooldown yields no further events."""
        self.feed(self.fist, 10)
        self.assertEqual(len(self.events), 1)
        self.assertTrue(self.recognizer.state.cooldown_active)

        # 20 frames * 33 ms = 660 ms < 1000 ms cooldown
        results = self.feed(self.fist, 20)

        self.assertEqual(results, [None] * 20)
        self.assertEqual(len(self.events), 1)

    def test_fires_again_after_cooldown_elapses(self):
        """A hold that continues past the cooldown may fire again."""
        self.feed(self.fist, 10)
        fired_at = self.events[0].timestamp

        self.scheduler.advance_to(fired_at + 1.0)
        self.assertFalse(self.recognizer.state.cooldown_active)
        self.assertIsNone(self.recognizer.state.last_recognized_name)

        event = self.recognizer.process_frame(self.fist)

        self.assertIsNotNone(event)
        self.assertEqual(event.name, "Fist")
        self.assertEqual(len(self.events), 2)

    def test_cooldown_is_wall_clock_not_frames(self):
        """Many frames arriving quickly do not end the cooldown."""
        self.feed(self.fist, 10, dt=0.0)
        results = self.feed(self.fist, 200, dt=0.001)  # 200 ms

        self.assertEqual(results, [None] * 200)
        self.assertEqual(len(self.events), 1)

    def test_other_gesture_suppressed_during_cooldown(self):
        """No event of any kind fires while the cooldown is active."""
        self.feed(self.fist, 10)
        results = self.feed(self.palm, 15)

        self.assertEqual(results, [None] * 15)
        self.assertEqual(len(self.events), 1)

    def test_other_gesture_fires_after_cooldown(self):
        """A hold that switches gesture during the cooldown fires as soon as it ends."""
        self.feed(self.fist, 10)
        self.scheduler.advance(1.0)

        results = self.feed(self.palm, 3)

        self.assertEqual(results[0].name, "Palm")
        self.assertEqual(results[1:], [None, None])

    def test_other_gesture_after_cooldown_with_per_template_hold(self):
        """With per_template_hold the new gesture needs its own full hold."""
        cfg = replace(self.cfg, recognition=replace(self.cfg.recognition,
                                                    per_template_hold=True))
        self.recognizer = Recognizer(self.library, cfg, self.scheduler)
        self.feed(self.fist, 10)
        self.scheduler.advance(1.0)

        results = self.feed(self.palm, 10)

        self.assertEqual(results[:9], [None] * 9)
        self.assertEqual(results[9].name, "Palm")

    def test_reset_cancels_cooldown(self):
        """reset() drops the pending cooldown timer and returns to idle."""
        self.feed(self.fist, 10)
        self.recognizer.reset()

        self.assertEqual(self.scheduler.pending, 0)
        self.assertEqual(self.recognizer.state.steady_frame_count, 0)
        self.assertFalse(self.recognizer.state.cooldown_active)


class TestTemplatesAndRecording(RecognizerTestCase):
    """Test template reloads, empty libraries and recording hand-off."""

    def test_empty_library_is_a_no_op(self):
        """No templates means no match and no error."""
        recognizer = Recognizer(TemplateLibrary(MemoryTemplateStore()), self.cfg, self.scheduler)

        for _ in range(15):
            self.assertIsNone(recognizer.process_frame(self.fist))

    def test_reload_drops_deleted_template(self):
        """Templates removed elsewhere stop matching after a reload."""
        TemplateLibrary(self.store).remove("Fist")
        self.recognizer.reload_templates()

        results = self.feed(self.fist, 12)

        self.assertEqual(results, [None] * 12)

    def test_reload_picks_up_new_template(self):
        """Templates added elsewhere match after a reload."""
        wave = make_hand(30)
        TemplateLibrary(self.store).add(GestureTemplate(name="Wave", frames=(wave,)))
        self.recognizer.reload_templates()

        results = self.feed(wave, 10)

        self.assertEqual(results[9].name, "Wave")

    def test_frames_go_to_recorder_while_recording(self):
        """While recording, frames are forwarded and never matched."""
        recorder = FakeRecorder(recording=True)
        self.recognizer.recorder = recorder

        results = self.feed(self.fist, 12)

        self.assertEqual(results, [None] * 12)
        self.assertEqual(len(recorder.frames), 12)
        self.assertEqual(self.recognizer.state.steady_frame_count, 0)

    def test_matching_resumes_when_recording_stops(self):
        """Recognition works again once the recorder is idle."""
        recorder = FakeRecorder(recording=False)
        self.recognizer.recorder = recorder

        results = self.feed(self.fist, 10)

        self.assertEqual(results[9].name, "Fist")
        self.assertEqual(recorder.frames, [])


if __name__ == '__main__':
    unittest.main()
