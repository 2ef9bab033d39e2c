"""
Core datamodel for the scribe notes engine.
Timestamps are integer epoch milliseconds, matching the persisted document.
"""

import time
from typing import List

from pydantic import BaseModel, ConfigDict, Field


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class NoteVersion(BaseModel):
    """Immutable snapshot of a note's content."""

    model_config = ConfigDict(frozen=True, extra="allow")

    content: str
    timestamp: int
    description: str = ""


class Note(BaseModel):
    """Core note datamodel."""

    model_config = ConfigDict(
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="allow",
    )

    id: str
    title: str = ""
    content: str = ""
    tags: List[str] = Field(default_factory=list)
    versions: List[NoteVersion] = Field(default_factory=list)
    created: int = Field(default_factory=now_ms)
    last_edited: int = Field(default_factory=now_ms, alias="lastEdited")

    def to_record(self) -> dict:
        """Dump using the persisted field names."""
        return self.model_dump(by_alias=True)

    def touch(self, when: int):
        """Refresh lastEdited without letting it fall behind created."""
        self.last_edited = max(when, self.created)
