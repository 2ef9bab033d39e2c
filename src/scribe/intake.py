"""
Turns completed speech-to-text results into notes.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .store import NoteStore

logger = logging.getLogger(__name__)

TRANSCRIBED_NOTE_TITLE = "Transcribed Note"


class TranscriptionIntake:
    """
    Creates one note per transcription result.

    Only the immediately preceding text is remembered: a result identical to
    the previous one is dropped, anything else creates a note. The same text
    arriving again after a different result is not suppressed.
    """

    def __init__(
        self,
        store: NoteStore,
        on_reveal: Optional[Callable[[str], None]] = None,
        title: str = TRANSCRIBED_NOTE_TITLE,
    ):
        self.store = store
        self.on_reveal = on_reveal
        self.title = title
        self.last_transcription: Optional[str] = None

    def on_transcription_complete(self, text: str) -> Optional[str]:
        if text == self.last_transcription:
            logger.debug("Duplicate transcription dropped (%d chars)", len(text))
            return None

        self.last_transcription = text
        note_id = self.store.create(title=self.title, content=text)
        logger.info("Created note %s from transcription", note_id)
        if self.on_reveal:
            self.on_reveal(note_id)
        return note_id
