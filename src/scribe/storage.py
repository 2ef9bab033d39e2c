"""
Storage layer for the scribe notes engine.
The whole collection lives as one JSON document under a single key of a
durable key-value store.
"""

import json
import logging
import os
import tempfile
import uuid
from pathlib import Path
from typing import Any, List, Optional

from pydantic import ValidationError

from .datamodel import Note, NoteVersion, now_ms
from .migrations.defaults import migrate_record

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "notes"


class JsonKeyValueStore:
    """Durable key-value store: one file per key inside a directory."""

    def __init__(self, base_path: Path):
        self.base_path = Path(base_path)
        self.data_dir = self.base_path / ".scribe_db"

        self._ensure_directories()

    def _ensure_directories(self):
        """Create necessary directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _key_path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key was never written."""
        path = self._key_path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str):
        """Overwrite the value stored under key; the old value stays intact until the swap."""
        with tempfile.NamedTemporaryFile(
            "w", dir=self.data_dir, suffix=".tmp", delete=False, encoding="utf-8"
        ) as fh:
            fh.write(value)
            tmp_path = Path(fh.name)
        try:
            os.replace(tmp_path, self._key_path(key))
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise


def _valid_version(value: Any) -> bool:
    try:
        NoteVersion.model_validate(value)
    except ValidationError:
        return False
    return True


def _load_record(record: Any, now: int) -> Optional[Note]:
    """
    Validate one stored record. Fields that fail validation are dropped so
    their defaults apply; a record without a usable id gets a fresh one.
    """
    if not isinstance(record, dict):
        logger.warning("Skipping stored record that is not an object: %r", record)
        return None

    migrated = migrate_record(record, now)
    try:
        return Note.model_validate(migrated)
    except ValidationError as exc:
        bad_fields = {err["loc"][0] for err in exc.errors() if err["loc"]}
        logger.warning(
            "Stored note %r has invalid fields %s, using defaults",
            record.get("id"),
            sorted(map(str, bad_fields)),
        )

    repaired = {k: v for k, v in migrated.items() if k not in bad_fields}
    if "versions" in bad_fields and isinstance(migrated["versions"], list):
        repaired["versions"] = [v for v in migrated["versions"] if _valid_version(v)]
    if "id" in bad_fields:
        repaired["id"] = str(uuid.uuid4())
    repaired = migrate_record(repaired, now)
    try:
        return Note.model_validate(repaired)
    except ValidationError as exc:
        logger.error("Skipping unrecoverable stored note %r: %s", record.get("id"), exc)
        return None


class NotesStorage:
    """Loads and saves the full note collection as one document."""

    def __init__(self, kv_store: JsonKeyValueStore, key: str = DEFAULT_STORAGE_KEY):
        self.kv_store = kv_store
        self.key = key

    def load(self) -> List[Note]:
        """
        Read the stored collection, migrating older record shapes.
        A missing document yields an empty collection. An unparsable
        document is logged and also yields an empty collection; the stored
        value is not touched. Individual bad records are repaired field by
        field rather than rejecting the document.
        """
        raw = self.kv_store.get_item(self.key)
        if raw is None:
            logger.info("No stored notes under key '%s', starting empty", self.key)
            return []

        try:
            data = json.loads(raw)
        except ValueError as exc:
            logger.error("Error parsing stored notes: %s, starting empty", exc)
            return []
        if not isinstance(data, list):
            logger.error(
                "Error parsing stored notes: expected a JSON array, got %s, starting empty",
                type(data).__name__,
            )
            return []

        now = now_ms()
        notes = [note for note in (_load_record(record, now) for record in data) if note is not None]
        logger.info("Loaded %d notes from key '%s'", len(notes), self.key)
        return notes

    def save(self, notes: List[Note]):
        """Serialize the entire collection, replacing the previous document."""
        payload = json.dumps([note.to_record() for note in notes], ensure_ascii=False)
        self.kv_store.set_item(self.key, payload)
        logger.debug("Saved %d notes to key '%s'", len(notes), self.key)
