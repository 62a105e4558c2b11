"""
Shared in-memory view of the stored gesture templates.
"""
import logging
from typing import Callable, Iterator, List, Optional, Tuple

from .errors import DuplicateGestureError, EmptyGestureNameError, UnknownGestureError
from .types import GestureTemplate, TemplateStore

logger = logging.getLogger(__name__)


class TemplateLibrary:
    """
    Template collection shared by a recognizer and a recorder.

    Every change is written to the store first and only then becomes the
    visible snapshot, so a failed save leaves the held collection as it was.
    """

    def __init__(self, store: TemplateStore, autoload: bool = True):
        self.store = store
        self._templates: Tuple[GestureTemplate, ...] = ()
        self._listeners: List[Callable[[Tuple[GestureTemplate, ...]], None]] = []
        if autoload:
            self.reload()

    @property
    def templates(self) -> Tuple[GestureTemplate, ...]:
        """Current snapshot in stored order."""
        return self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def __iter__(self) -> Iterator[GestureTemplate]:
        return iter(self._templates)

    def names(self) -> List[str]:
        return [t.name for t in self._templates]

    def reload(self) -> Tuple[GestureTemplate, ...]:
        """Re-read the collection from the store."""
        self._templates = tuple(self.store.load())
        logger.debug(f"Loaded {len(self._templates)} gesture template(s)")
        return self._templates

    def get(self, name: str) -> Optional[GestureTemplate]:
        """Case-insensitive lookup."""
        for template in self._templates:
            if template.matches_name(name):
                return template
        return None

    def contains(self, name: str) -> bool:
        return self.get(name) is not None

    def subscribe(self, callback: Callable[[Tuple[GestureTemplate, ...]], None]) -> None:
        """Call ``callback(templates)`` after every successful change."""
        self._listeners.append(callback)

    def unsubscribe(self, callback: Callable[[Tuple[GestureTemplate, ...]], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def add(self, template: GestureTemplate) -> None:
        """Append a new template and persist the collection."""
        if not template.name.strip():
            raise EmptyGestureNameError("Gesture name must not be empty")
        if self.contains(template.name):
            raise DuplicateGestureError(
                f'A gesture named "{template.name}" already exists', template.name
            )
        self._commit(self._templates + (template,))
        logger.info(f"💾 Saved gesture '{template.name}' ({len(template.frames)} frames)")

    def remove(self, name: str) -> GestureTemplate:
        """Delete a template by name and persist the collection."""
        template = self.get(name)
        if template is None:
            raise UnknownGestureError(f'No gesture named "{name}"', name)
        self._commit(tuple(t for t in self._templates if t is not template))
        logger.info(f"🗑️ Deleted gesture '{template.name}'")
        return template

    def rename(self, old_name: str, new_name: str) -> GestureTemplate:
        """Replace a template with a copy under a new name, keeping its position."""
        new_name = new_name.strip()
        if not new_name:
            raise EmptyGestureNameError("Gesture name must not be empty")
        template = self.get(old_name)
        if template is None:
            raise UnknownGestureError(f'No gesture named "{old_name}"', old_name)
        existing = self.get(new_name)
        if existing is not None and existing is not template:
            raise DuplicateGestureError(f'A gesture named "{new_name}" already exists', new_name)

        replacement = template.renamed(new_name)
        self._commit(tuple(replacement if t is template else t for t in self._templates))
        logger.info(f"✏️ Renamed gesture '{template.name}' to '{new_name}'")
        return replacement

    def _commit(self, templates: Tuple[GestureTemplate, ...]) -> None:
        # save raises before the snapshot is swapped
        self.store.save(list(templates))
        self._templates = templates
        for callback in list(self._listeners):
            callback(self._templates)
