"""
Command line tool for managing the gesture library and replaying recorded
landmark streams.

Landmark files are JSON lines, one tracker tick per line:

    {"t": 0.033, "landmarks": [[0.41, 0.62, -0.01], ...]}
    {"t": 0.066, "landmarks": null}
"""
import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from dotenv import load_dotenv

from .config import Cfg, load_config
from .errors import GestureTemplateError
from .library import TemplateLibrary
from .scheduler import ManualScheduler
from .session import GestureSession
from .store import JsonTemplateStore
from .types import RecognitionEvent

logger = logging.getLogger(__name__)


def read_landmark_stream(path) -> Iterator[Tuple[float, Optional[list]]]:
    """Yield (timestamp, landmarks) pairs from a JSON lines file."""
    with open(path, 'r', encoding='utf-8') as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
                yield float(record["t"]), record.get("landmarks")
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                raise ValueError(f"{path}:{line_no}: invalid landmark record ({e})") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gesture-templates",
        description="Record and recognize hand gestures from landmark templates",
    )
    parser.add_argument("--config", default=os.getenv("GESTURE_TEMPLATES_CONFIG"),
                        help="YAML config file (default: packaged config.default.yaml)")
    parser.add_argument("--store", default=os.getenv("GESTURE_TEMPLATES_STORE"),
                        help="Template store JSON file (default: storage.path from config)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List stored gestures")

    delete = sub.add_parser("delete", help="Delete a gesture")
    delete.add_argument("name")

    rename = sub.add_parser("rename", help="Rename a gesture")
    rename.add_argument("old_name")
    rename.add_argument("new_name")

    record = sub.add_parser("record", help="Record a gesture from a landmark file")
    record.add_argument("name")
    record.add_argument("file", type=Path)

    recognize = sub.add_parser("recognize", help="Replay a landmark file through the recognizer")
    recognize.add_argument("file", type=Path)

    return parser


def _open_store(cfg: Cfg, store_path: Optional[str]) -> JsonTemplateStore:
    return JsonTemplateStore(store_path or cfg.storage.path, key=cfg.storage.key)


def cmd_list(store: JsonTemplateStore) -> int:
    library = TemplateLibrary(store)
    if len(library) == 0:
        print("No gestures registered")
        return 0
    for template in library:
        created = template.created_at.strftime("%Y-%m-%d %H:%M:%S")
        print(f"{template.name}\t{len(template.frames)} frames\t{created}")
    return 0


def cmd_delete(store: JsonTemplateStore, name: str) -> int:
    removed = TemplateLibrary(store).remove(name)
    print(f"Deleted gesture '{removed.name}'")
    return 0


def cmd_rename(store: JsonTemplateStore, old_name: str, new_name: str) -> int:
    renamed = TemplateLibrary(store).rename(old_name, new_name)
    print(f"Renamed gesture '{old_name}' to '{renamed.name}'")
    return 0


def cmd_record(cfg: Cfg, store: JsonTemplateStore, name: str, file: Path) -> int:
    stream = list(read_landmark_stream(file))
    start = stream[0][0] if stream else 0.0
    scheduler = ManualScheduler(start=start)
    session = GestureSession(store, cfg, scheduler, on_status=lambda text: logger.info(text))

    session.start_recording(name)
    deadline = start + cfg.recording.duration_ms / 1000.0
    for t, landmarks in stream:
        if t > deadline:
            break
        scheduler.advance_to(t)
        session.process_frame(landmarks)
    scheduler.advance_to(deadline)

    error = session.recorder.last_error
    if error is not None:
        print(f"❌ {error}")
        return 1

    template = session.library.get(name)
    print(f"✅ Saved gesture '{template.name}' with {len(template.frames)} frames")
    return 0


def cmd_recognize(cfg: Cfg, store: JsonTemplateStore, file: Path) -> int:
    events: List[RecognitionEvent] = []
    stream = read_landmark_stream(file)
    scheduler: Optional[ManualScheduler] = None
    session: Optional[GestureSession] = None

    for t, landmarks in stream:
        if scheduler is None:
            scheduler = ManualScheduler(start=t)
            session = GestureSession(store, cfg, scheduler, on_recognized=events.append)
            if len(session.library) == 0:
                print("No gestures registered")
                return 1
        scheduler.advance_to(t)
        session.process_frame(landmarks)

    for event in events:
        print(f"{event.timestamp:.3f}\t{event.name}\t{event.score:.3f}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the command line tool."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        cfg = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    level = logging.DEBUG if args.verbose else getattr(logging, cfg.logging.level, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    store = _open_store(cfg, args.store)
    try:
        if args.command == "list":
            return cmd_list(store)
        if args.command == "delete":
            return cmd_delete(store, args.name)
        if args.command == "rename":
            return cmd_rename(store, args.old_name, args.new_name)
        if args.command == "record":
            return cmd_record(cfg, store, args.name, args.file)
        if args.command == "recognize":
            return cmd_recognize(cfg, store, args.file)
    except (GestureTemplateError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 2


if __name__ == "__main__":
    sys.exit(main())
