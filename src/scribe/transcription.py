"""
Speech-to-text collaborator: audio file in, transcript text out.
The text is handed to TranscriptionIntake by the caller.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.openai.com/v1"


class TranscriptionError(RuntimeError):
    """Raised when transcription fails."""


class WhisperTranscriber:
    """Posts audio to an OpenAI-compatible /audio/transcriptions endpoint."""

    def __init__(self, model: str = "whisper-1", api_key: Optional[str] = None,
                 api_base: Optional[str] = None, language: Optional[str] = None):
        self.model = model
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self.api_base = api_base or os.environ.get("OPENAI_API_BASE", DEFAULT_API_BASE)
        self.language = language

    @classmethod
    def from_config(cls, config: dict) -> Optional["WhisperTranscriber"]:
        """Build from the 'transcriber' config section; None when disabled."""
        cfg = (config or {}).get("transcriber") or {}
        if cfg.get("type", "whisper") != "whisper":
            return None
        return cls(
            model=cfg.get("model", "whisper-1"),
            api_key=cfg.get("api_key"),
            api_base=cfg.get("api_base"),
            language=cfg.get("language"),
        )

    @property
    def endpoint(self) -> str:
        return f"{self.api_base.rstrip('/')}/audio/transcriptions"

    def transcribe_file(self, path: Path, timeout: int = 60) -> str:
        if not self.api_key:
            raise TranscriptionError("OPENAI_API_KEY is required for transcription")

        path = Path(path)
        form = {"model": self.model}
        if self.language:
            form["language"] = self.language

        logger.debug("Transcribing %s with %s", path, self.model)
        try:
            with open(path, "rb") as audio:
                resp = requests.post(
                    self.endpoint,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    data=form,
                    files={"file": (path.name, audio, "application/octet-stream")},
                    timeout=timeout,
                )
            resp.raise_for_status()
        except (OSError, requests.RequestException) as exc:
            raise TranscriptionError(f"Transcription of {path.name} failed: {exc}") from exc

        text = (resp.json().get("text") or "").strip()
        if not text:
            raise TranscriptionError(f"No transcription text returned for {path.name}.")
        return text
