"""
Import/export of the full note collection as a JSON document.
Imports are all-or-nothing: one bad record rejects the whole batch.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, List

from pydantic import ValidationError

from .datamodel import Note
from .migrations.defaults import migrate_records

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "scribe-notes-export.json"
REQUIRED_FIELDS = ("id", "title", "content")


class NotesImportError(ValueError):
    """Base class for rejected imports."""


class ImportValidationError(NotesImportError):
    """Raised when a document parses but is not a valid note collection."""


class ImportParseError(NotesImportError):
    """Raised when a document is not valid JSON or cannot be read."""


def export_notes(notes: Iterable[Note]) -> str:
    """Serialize the collection, version history included, as pretty JSON."""
    return json.dumps([note.to_record() for note in notes], indent=2, ensure_ascii=False)


def write_export(notes: Iterable[Note], directory: Path) -> Path:
    """Write the export document into directory and return its path."""
    path = Path(directory) / EXPORT_FILENAME
    path.write_text(export_notes(notes), encoding="utf-8")
    logger.info("Exported notes to %s", path)
    return path


def _validate_shape(data) -> None:
    if not isinstance(data, list):
        raise ImportValidationError("Invalid notes format: root must be an array")
    for i, record in enumerate(data):
        if not isinstance(record, dict):
            raise ImportValidationError(f"Invalid notes format: item {i} is not an object")
        missing = [field for field in REQUIRED_FIELDS if field not in record]
        if missing:
            raise ImportValidationError(
                f"Invalid notes format: item {i} is missing {', '.join(missing)}"
            )


def import_notes(document: str) -> List[Note]:
    """
    Parse and validate an exported document back into notes.
    Raises ImportParseError for malformed JSON and ImportValidationError
    for anything that is not an array of note records.
    """
    try:
        data = json.loads(document)
    except json.JSONDecodeError as exc:
        logger.error("Error importing notes: %s", exc)
        raise ImportParseError(f"Error importing notes: {exc}") from exc

    _validate_shape(data)

    try:
        return [Note.model_validate(record) for record in migrate_records(data)]
    except ValidationError as exc:
        raise ImportValidationError(f"Invalid notes format: {exc}") from exc


def read_import_file(path: Path) -> List[Note]:
    """Read a user-selected file and import it."""
    try:
        document = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Error reading import file %s: %s", path, exc)
        raise ImportParseError(f"Error importing notes: {exc}") from exc
    return import_notes(document)
