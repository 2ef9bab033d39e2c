"""
Field-default migration for note records of older shapes.
Shared by the persistence load path and the import path.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from ..datamodel import now_ms


def migrate_record(record: Dict[str, Any], now: Optional[int] = None) -> Dict[str, Any]:
    """
    Fill defaults for fields absent from a note record.
    - tags / versions missing or null -> []
    - created / lastEdited missing, null or 0 -> now
    Present fields and unknown keys are carried over untouched.
    """
    if now is None:
        now = now_ms()
    migrated = dict(record)
    migrated["tags"] = record.get("tags") or []
    migrated["versions"] = record.get("versions") or []
    migrated["created"] = record.get("created") or now
    migrated["lastEdited"] = record.get("lastEdited") or now
    return migrated


def migrate_records(records: Iterable[Dict[str, Any]], now: Optional[int] = None) -> List[Dict[str, Any]]:
    """Migrate a batch, using one clock reading for the whole batch."""
    if now is None:
        now = now_ms()
    return [migrate_record(record, now) for record in records]
