"""Speech-to-text by running the whisper command-line tool."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

TRANSCRIPT_STEM = "temp_transcript"


class SpeechToTextError(RuntimeError):
    """Raised when transcription fails."""


class SpeechToText:
    """Transcribes WAV files with an external whisper binary."""

    def __init__(self, whisper_path: str, model_path: str) -> None:
        self.whisper_path = whisper_path
        self.model_path = model_path

    def command(self, audio_file_path) -> list[str]:
        """Return the whisper command line for ``audio_file_path``."""
        return [
            str(self.whisper_path),
            "-m", str(self.model_path),
            "-f", str(audio_file_path),
            "--language", "en",
            "--output-txt",
            "--output-file", TRANSCRIPT_STEM,
        ]

    def transcribe(self, audio_file_path) -> str:
        """Run whisper on ``audio_file_path`` and return the transcript text."""
        result = subprocess.run(self.command(audio_file_path), check=False)
        if result.returncode != 0:
            logger.error("whisper failed with code %s", result.returncode)
            raise SpeechToTextError(f"transcription failed with code {result.returncode}")
        transcript = Path(f"{TRANSCRIPT_STEM}.txt")
        try:
            return transcript.read_text(encoding="utf-8")
        except OSError as exc:
            raise SpeechToTextError(f"cannot read transcript file {transcript}") from exc