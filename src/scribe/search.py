"""
Keyword filtering over the note collection.
"""

from __future__ import annotations

from typing import Iterable, List

from .datamodel import Note


def note_matches(note: Note, query_lower: str) -> bool:
    """Case-insensitive substring match on title, content or any tag."""
    return (
        query_lower in note.title.lower()
        or query_lower in note.content.lower()
        or any(query_lower in tag.lower() for tag in note.tags)
    )


def filter_notes(notes: Iterable[Note], query: str) -> List[Note]:
    """
    Return the notes matching query, keeping collection order.
    An empty query returns every note.
    """
    notes = list(notes)
    if not query:
        return notes
    query_lower = query.lower()
    return [note for note in notes if note_matches(note, query_lower)]
