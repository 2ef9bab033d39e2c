"""
Version history for notes: append snapshots, restore live content from them.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Union

from .datamodel import Note, NoteVersion
from .store import NoteStore

logger = logging.getLogger(__name__)


class VersionManager:
    """Appends immutable snapshots and restores content from them."""

    def __init__(self, store: NoteStore):
        self.store = store

    def save_version(self, note_id: str, description: str) -> Optional[Note]:
        """Snapshot the note's current content under a label."""
        note = self.store.get(note_id)
        if note is None:
            logger.debug("save_version: note %s not found", note_id)
            return None

        version = NoteVersion(
            content=note.content,
            timestamp=self.store.clock(),
            description=description,
        )
        note.versions = [*note.versions, version]
        self.store.update(note)
        logger.info("Saved version '%s' of note %s", description, note_id)
        return self.store.get(note_id)

    def restore_version(
        self, note_id: str, version: Union[NoteVersion, int]
    ) -> Optional[Note]:
        """
        Replace the note's live content with a snapshot's content.
        The history is left as is and no new snapshot is taken, so unsaved
        live content is lost.
        """
        note = self.store.get(note_id)
        if note is None:
            logger.debug("restore_version: note %s not found", note_id)
            return None

        if isinstance(version, int):
            if not 0 <= version < len(note.versions):
                logger.debug("restore_version: no version %d on note %s", version, note_id)
                return None
            version = note.versions[version]

        note.content = version.content
        self.store.update(note)
        logger.info("Restored note %s to version '%s'", note_id, version.description)
        return self.store.get(note_id)

    def list_versions(self, note_id: str) -> List[NoteVersion]:
        note = self.store.get(note_id)
        return list(note.versions) if note else []
