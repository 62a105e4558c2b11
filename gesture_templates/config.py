"""
Configuration management for template-based gesture recognition.
"""
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass, field


MATCH_STRATEGIES = ("first_frame", "best_frame")


@dataclass
class RecognitionConfig:
    """Recognizer debounce and scoring settings."""
    match_threshold: float = 0.85
    required_steady_frames: int = 10
    cooldown_ms: int = 1000
    similarity_falloff: float = 0.5  # avg distance at which similarity reaches 0
    match_strategy: str = "first_frame"
    per_template_hold: bool = False  # restart the steady count when the best template changes


@dataclass
class RecordingConfig:
    """Recorder capture settings."""
    duration_ms: int = 3000
    progress_interval_ms: int = 100
    min_frames: int = 5
    dedup_distance_threshold: float = 0.01


@dataclass
class StorageConfig:
    """Template store settings."""
    path: str = "gestures.json"
    key: str = "handGestures"


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"


@dataclass
class Cfg:
    """Main configuration class."""
    recognition: RecognitionConfig = field(default_factory=RecognitionConfig)
    recording: RecordingConfig = field(default_factory=RecordingConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: Optional[str] = None) -> Cfg:
    """
    Load configuration from YAML file.

    Args:
        path: Path to config file. If None, uses the packaged config.default.yaml

    Returns:
        Configuration object with all settings
    """
    if path is None:
        path = Path(__file__).parent / "config.default.yaml"

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")

    return _dict_to_config(data)


def _dict_to_config(data: Dict[str, Any]) -> Cfg:
    """Convert dictionary to configuration object."""
    defaults = Cfg()

    recognition_data = data.get('recognition') or {}
    recognition = RecognitionConfig(
        match_threshold=float(recognition_data.get(
            'match_threshold', defaults.recognition.match_threshold)),
        required_steady_frames=int(recognition_data.get(
            'required_steady_frames', defaults.recognition.required_steady_frames)),
        cooldown_ms=int(recognition_data.get(
            'cooldown_ms', defaults.recognition.cooldown_ms)),
        similarity_falloff=float(recognition_data.get(
            'similarity_falloff', defaults.recognition.similarity_falloff)),
        match_strategy=str(recognition_data.get(
            'match_strategy', defaults.recognition.match_strategy)),
        per_template_hold=bool(recognition_data.get(
            'per_template_hold', defaults.recognition.per_template_hold)),
    )
    if recognition.match_strategy not in MATCH_STRATEGIES:
        raise ValueError(
            f"Unknown match_strategy {recognition.match_strategy!r}, "
            f"expected one of {MATCH_STRATEGIES}"
        )
    if recognition.similarity_falloff <= 0:
        raise ValueError("similarity_falloff must be positive")

    recording_data = data.get('recording') or {}
    recording = RecordingConfig(
        duration_ms=int(recording_data.get(
            'duration_ms', defaults.recording.duration_ms)),
        progress_interval_ms=int(recording_data.get(
            'progress_interval_ms', defaults.recording.progress_interval_ms)),
        min_frames=int(recording_data.get(
            'min_frames', defaults.recording.min_frames)),
        dedup_distance_threshold=float(recording_data.get(
            'dedup_distance_threshold', defaults.recording.dedup_distance_threshold)),
    )

    storage_data = data.get('storage') or {}
    storage = StorageConfig(
        path=str(storage_data.get('path', defaults.storage.path)),
        key=str(storage_data.get('key', defaults.storage.key)),
    )

    logging_data = data.get('logging') or {}
    logging_cfg = LoggingConfig(
        level=str(logging_data.get('level', defaults.logging.level)).upper(),
    )

    return Cfg(
        recognition=recognition,
        recording=recording,
        storage=storage,
        logging=logging_cfg,
    )
