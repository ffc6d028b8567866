"""Text-to-speech by piping text through piper into aplay."""

from __future__ import annotations

import logging
import shlex
import subprocess

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 22050


class TTSError(RuntimeError):
    """Raised when speech synthesis or playback fails."""


class TTS:
    """Speaks text aloud with a piper voice model."""

    def __init__(
        self,
        piper_path: str,
        model_path: str,
        speaker_id: int = 0,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
    ) -> None:
        self.piper_path = piper_path
        self.model_path = model_path
        self.speaker_id = speaker_id
        self.sample_rate = sample_rate

    def command(self, text: str) -> str:
        """Return the shell pipeline that synthesizes and plays ``text``."""
        return (
            f"printf '%s\\n' {shlex.quote(text)}"
            f" | {shlex.quote(str(self.piper_path))}"
            f" --model {shlex.quote(str(self.model_path))}"
            f" --output-raw --speaker {int(self.speaker_id)}"
            f" | aplay -r {int(self.sample_rate)} -f S16_LE -t raw -"
        )

    def speak(self, text: str) -> None:
        """Synthesize ``text`` and play it, blocking until playback ends."""
        result = subprocess.run(self.command(text), shell=True, check=False)
        if result.returncode != 0:
            logger.error("TTS command failed with code %s", result.returncode)
            raise TTSError(f"TTS command failed with code {result.returncode}")