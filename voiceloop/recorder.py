"""Microphone capture with simple energy-based voice activity detection."""

from __future__ import annotations

import logging
import math
import subprocess
import sys
import wave
from array import array
from collections.abc import Callable, Iterable, Iterator, Sequence

logger = logging.getLogger(__name__)

FRAME_DURATION_MS = 20
VAD_START_THRESHOLD = 500.0
VAD_STOP_THRESHOLD = 300.0
MAX_SILENCE_FRAMES_BEFORE_STOP = 50


class RecorderError(RuntimeError):
    """Raised when audio cannot be captured."""


def compute_rms(samples: Sequence[int]) -> float:
    """Return the root mean square of ``samples``."""
    if not samples:
        raise ValueError("cannot compute RMS of an empty frame")
    return math.sqrt(sum(x * x for x in samples) / len(samples))


def collect_speech(frames: Iterable[Sequence[int]]) -> list[int]:
    """Gather the samples of one utterance from a stream of frames.

    Recording starts at the first frame louder than the start threshold and
    stops after more than the allowed number of consecutive quiet frames,
    or when the frames run out.
    """
    speech: list[int] = []
    recording = False
    silence = 0
    for frame in frames:
        energy = compute_rms(frame)
        if not recording and energy > VAD_START_THRESHOLD:
            logger.info("voice detected, recording")
            recording = True
            silence = 0
        if not recording:
            continue
        speech.extend(frame)
        if energy < VAD_STOP_THRESHOLD:
            silence += 1
            if silence > MAX_SILENCE_FRAMES_BEFORE_STOP:
                logger.info("sustained silence detected, stopping")
                break
        else:
            silence = 0
    return speech


def write_wav(path, samples: Sequence[int], sample_rate: int, channels: int) -> None:
    """Write 16-bit PCM ``samples`` to a WAV file."""
    data = array("h", samples)
    if sys.byteorder == "big":
        data.byteswap()
    with wave.open(str(path), "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(data.tobytes())


class MicrophoneRecorder:
    """Records one utterance from the microphone into a WAV file."""

    def __init__(
        self,
        sample_rate: int = 16000,
        channels: int = 1,
        frame_source: Callable[[], Iterable[Sequence[int]]] | None = None,
    ) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self._frame_source = frame_source

    def frame_size(self) -> int:
        """Number of sample frames in one analysis frame."""
        return self.sample_rate * FRAME_DURATION_MS // 1000

    def microphone_frames(self) -> Iterator[array]:
        """Yield frames of 16-bit samples captured from the default input."""
        command = [
            "arecord", "-q", "-t", "raw", "-f", "S16_LE",
            "-r", str(self.sample_rate), "-c", str(self.channels),
        ]
        frame_bytes = self.frame_size() * self.channels * 2
        try:
            process = subprocess.Popen(command, stdout=subprocess.PIPE)
        except OSError as exc:
            raise RecorderError(f"cannot open audio input: {exc}") from exc
        with process:
            try:
                while True:
                    chunk = process.stdout.read(frame_bytes)
                    if len(chunk) < frame_bytes:
                        logger.error("audio input stream ended")
                        break
                    frame = array("h")
                    frame.frombytes(chunk)
                    if sys.byteorder == "big":
                        frame.byteswap()
                    yield frame
            finally:
                process.terminate()

    def record_with_vad(self, output_file) -> bool:
        """Record one utterance into ``output_file``.

        Returns False when no speech was heard.
        """
        frames = self._frame_source() if self._frame_source else self.microphone_frames()
        logger.info("listening for voice")
        try:
            speech = collect_speech(frames)
        finally:
            close = getattr(frames, "close", None)
            if close is not None:
                close()
        if not speech:
            logger.info("no speech detected")
            return False
        write_wav(output_file, speech, self.sample_rate, self.channels)
        logger.info("audio saved to %s", output_file)
        return True