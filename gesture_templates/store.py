"""
Template persistence.

Templates are stored as one list under a single key of a JSON key-value
document, using the same layout the browser recorder writes to localStorage:

    {"handGestures": [{"name": ..., "frames": [[{"x":..,"y":..,"z":..}, ...], ...],
                       "createdAt": "2024-05-01T10:00:00.000Z"}]}
"""
import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .errors import TemplateStoreError
from .landmarks import frame_to_points
from .types import GestureTemplate

logger = logging.getLogger(__name__)

DEFAULT_KEY = "handGestures"


class StoredLandmark(BaseModel):
    """One joint as it appears on disk."""
    x: float
    y: float
    z: float


class StoredTemplate(BaseModel):
    """Wire format of a gesture template."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    frames: List[List[StoredLandmark]] = Field(min_length=1)
    created_at: datetime = Field(alias="createdAt")

    @classmethod
    def from_template(cls, template: GestureTemplate) -> "StoredTemplate":
        return cls(
            name=template.name,
            frames=[frame_to_points(frame) for frame in template.frames],
            created_at=template.created_at,
        )

    def to_template(self) -> GestureTemplate:
        frames = tuple(
            np.array([[p.x, p.y, p.z] for p in frame], dtype=np.float64)
            for frame in self.frames
        )
        return GestureTemplate(name=self.name, frames=frames, created_at=self.created_at)


_TEMPLATE_LIST = TypeAdapter(List[StoredTemplate])


def decode_templates(payload: Optional[str]) -> List[GestureTemplate]:
    """Parse a serialized template list; malformed input yields an empty list."""
    if not payload:
        return []
    try:
        stored = _TEMPLATE_LIST.validate_json(payload)
    except ValidationError as e:
        logger.warning(f"⚠️ Ignoring malformed template list: {e.error_count()} error(s)")
        return []
    return [item.to_template() for item in stored]


def encode_templates(templates: Sequence[GestureTemplate]) -> list:
    """Serialize templates to JSON-compatible data."""
    stored = [StoredTemplate.from_template(t) for t in templates]
    return _TEMPLATE_LIST.dump_python(stored, mode="json", by_alias=True)


class MemoryTemplateStore:
    """
    In-process key-value store holding the serialized template list.

    Every load decodes a fresh copy, so callers never share mutable state
    with the store.
    """

    def __init__(self, key: str = DEFAULT_KEY, capacity_bytes: Optional[int] = None):
        """
        Args:
            key: Storage key for the template list
            capacity_bytes: Optional quota; saves larger than this fail
        """
        self.key = key
        self.capacity_bytes = capacity_bytes
        self._items: Dict[str, str] = {}

    def load(self) -> List[GestureTemplate]:
        return decode_templates(self._items.get(self.key))

    def save(self, templates: Sequence[GestureTemplate]) -> None:
        payload = json.dumps(encode_templates(templates))
        if self.capacity_bytes is not None and len(payload.encode("utf-8")) > self.capacity_bytes:
            raise TemplateStoreError(
                f"Template list of {len(payload)} bytes exceeds quota of {self.capacity_bytes}"
            )
        self._items[self.key] = payload

    def get_raw(self) -> Optional[str]:
        """Serialized list as stored, or None."""
        return self._items.get(self.key)

    def set_raw(self, payload: str) -> None:
        """Overwrite the stored payload without validation."""
        self._items[self.key] = payload


class JsonTemplateStore:
    """Template store backed by a JSON key-value file."""

    def __init__(self, path, key: str = DEFAULT_KEY):
        self.path = Path(path)
        self.key = key

    def _read_document(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"⚠️ Could not read template store {self.path}: {e}")
            return {}
        if not isinstance(document, dict):
            logger.warning(f"⚠️ Template store {self.path} is not a JSON object")
            return {}
        return document

    def load(self) -> List[GestureTemplate]:
        templates = self._read_document().get(self.key)
        if templates is None:
            return []
        return decode_templates(json.dumps(templates))

    def save(self, templates: Sequence[GestureTemplate]) -> None:
        document = self._read_document()
        document[self.key] = encode_templates(templates)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(document, f)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise TemplateStoreError(f"Could not write template store {self.path}: {e}") from e

        logger.debug(f"Saved {len(templates)} template(s) to {self.path}")
