"""
In-memory note store: the single owner of the note collection.
Every mutation persists the whole collection before returning and then
notifies subscribers with a snapshot.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, List, Optional

from .datamodel import Note, now_ms
from .storage import NotesStorage

logger = logging.getLogger(__name__)

Subscriber = Callable[[List[Note]], None]


class NoteStore:
    """Ordered note collection with a create/update/delete API."""

    def __init__(self, storage: NotesStorage, clock: Callable[[], int] = now_ms):
        self.storage = storage
        self.clock = clock
        self._lock = threading.RLock()
        self._subscribers: List[Subscriber] = []
        self._last_issued_id = 0
        self._notes: List[Note] = storage.load()

    # -----------------------------
    # Reads
    # -----------------------------
    def all(self) -> List[Note]:
        """Snapshot of the collection in insertion order."""
        with self._lock:
            return [note.model_copy(deep=True) for note in self._notes]

    def get(self, note_id: str) -> Optional[Note]:
        with self._lock:
            index = self._index_of(note_id)
            if index is None:
                return None
            return self._notes[index].model_copy(deep=True)

    def __len__(self) -> int:
        with self._lock:
            return len(self._notes)

    # -----------------------------
    # Mutations
    # -----------------------------
    def create(self, title: str = "", content: str = "") -> str:
        """Append a new empty note and return its id."""
        with self._lock:
            now = self.clock()
            note = Note(
                id=self._allocate_id(now),
                title=title,
                content=content,
                created=now,
                last_edited=now,
            )
            self._commit([*self._notes, note])
            logger.info("Created note %s: '%s'", note.id, note.title)
            return note.id

    def update(self, note: Note):
        """
        Replace the entry with the same id, refreshing lastEdited.
        An unknown id leaves the collection as it is but still persists.
        """
        with self._lock:
            notes = list(self._notes)
            index = self._index_of(note.id)
            if index is None:
                logger.debug("Update for unknown note %s ignored", note.id)
            else:
                replacement = note.model_copy(deep=True)
                replacement.touch(self.clock())
                notes[index] = replacement
            self._commit(notes)

    def update_tags(self, note_id: str, tags: Iterable[str]) -> Optional[Note]:
        """Replace a note's tags as given; duplicates are kept."""
        with self._lock:
            note = self.get(note_id)
            if note is None:
                return None
            note.tags = list(tags)
            self.update(note)
            return self.get(note_id)

    def delete(self, note_id: str):
        """
        Remove the matching note. Deleting an unknown id is a no-op that
        still persists. Callers holding a selection must clear it themselves.
        """
        with self._lock:
            notes = [note for note in self._notes if note.id != note_id]
            removed = len(notes) < len(self._notes)
            self._commit(notes)
            if removed:
                logger.info("Deleted note %s", note_id)

    def replace_all(self, notes: Iterable[Note]):
        """Swap in a whole new collection, e.g. after an import."""
        with self._lock:
            self._commit([note.model_copy(deep=True) for note in notes])
            self._last_issued_id = 0
            logger.info("Replaced collection with %d notes", len(self._notes))

    # -----------------------------
    # Subscriptions
    # -----------------------------
    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback for post-mutation snapshots; returns an unsubscribe."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # -----------------------------
    # Internals
    # -----------------------------
    def _index_of(self, note_id: str) -> Optional[int]:
        for i, note in enumerate(self._notes):
            if note.id == note_id:
                return i
        return None

    def _allocate_id(self, now: int) -> str:
        candidate = max(now, self._last_issued_id + 1)
        while self._index_of(str(candidate)) is not None:
            candidate += 1
        self._last_issued_id = candidate
        return str(candidate)

    def _commit(self, notes: List[Note]):
        """Persist notes, then make them the live collection."""
        self.storage.save(notes)
        self._notes = notes
        if not self._subscribers:
            return
        snapshot = [note.model_copy(deep=True) for note in notes]
        for callback in list(self._subscribers):
            callback(snapshot)
