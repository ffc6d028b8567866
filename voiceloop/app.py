"""The listen, transcribe, think and speak loop of the voice assistant."""

from __future__ import annotations

import argparse
import enum
import sys
import time
from dataclasses import dataclass
from pathlib import Path

from voiceloop.brain import LlamaClient, LlamaRequestError
from voiceloop.recorder import MicrophoneRecorder, RecorderError
from voiceloop.stt import SpeechToText, SpeechToTextError
from voiceloop.tts import TTS, TTSError

AUDIO_FILE = "recorded_input.wav"
RETRY_DELAY = 0.5
APOLOGY = "I'm sorry, I couldn't generate a response for that."


def _status(message: str) -> None:
    print(message, flush=True)


def _problem(message: str) -> None:
    print(message, file=sys.stderr, flush=True)


class StepOutcome(enum.Enum):
    """What happened during one turn of the conversation."""

    NO_SPEECH = "no_speech"
    TRANSCRIPTION_FAILED = "transcription_failed"
    NO_REPLY = "no_reply"
    SPEAK_FAILED = "speak_failed"
    SPOKEN = "spoken"


@dataclass
class AssistantConfig:
    """Locations of the tools, models and server the assistant uses."""

    whisper_path: str = "../bin/whisper-cli"
    whisper_model_path: str = "../models/ggml-base.en.bin"
    piper_path: str = "../bin/piper"
    piper_model_path: str = "../models/en_US-lessac-high.onnx"
    piper_speaker_id: int = 0
    llama_server_url: str = "http://127.0.0.1:8080/v1/chat/completions"
    llama_model_name: str = "Meta Llama 3.1 8B Instruct"
    audio_file: str = AUDIO_FILE


class Assistant:
    """Ties recorder, transcriber, chat client and voice together."""

    def __init__(self, recorder, stt, tts, client, audio_file=AUDIO_FILE) -> None:
        self.recorder = recorder
        self.stt = stt
        self.tts = tts
        self.client = client
        self.audio_file = Path(audio_file)

    def _listen(self) -> str | None:
        _status("\n[Assistant]: Listening for speech...")
        if not self.recorder.record_with_vad(self.audio_file):
            return None
        _status("[Assistant]: Transcribing...")
        try:
            return self.stt.transcribe(self.audio_file)
        except SpeechToTextError as exc:
            _problem(f"[Assistant]: {exc}")
            return ""
        finally:
            self.audio_file.unlink(missing_ok=True)

    def _think(self, user_text: str) -> str:
        _status("[Assistant]: Thinking (querying LLM)...")
        try:
            return self.client.chat(user_text)
        except LlamaRequestError as exc:
            _problem(f"[Assistant]: {exc}")
            return ""

    def step(self) -> StepOutcome:
        """Run one turn: record, transcribe, ask the model and speak the answer."""
        user_text = self._listen()
        if user_text is None:
            _problem("[Assistant]: No speech detected or recording failed. Trying again.")
            return StepOutcome.NO_SPEECH
        if not user_text:
            _problem("[Assistant]: Transcription failed or empty. Trying again.")
            return StepOutcome.TRANSCRIPTION_FAILED
        _status(f"[You]: {user_text}")

        reply = self._think(user_text)
        if not reply:
            _problem(
                "[Assistant]: LLM did not provide a response or an error occurred. "
                "Trying again."
            )
            try:
                self.tts.speak(APOLOGY)
            except TTSError as exc:
                _problem(f"[Assistant]: {exc}")
            return StepOutcome.NO_REPLY

        _status("[Assistant]: Speaking response...")
        try:
            self.tts.speak(reply)
        except TTSError:
            _problem("[Assistant]: Failed to synthesize or play speech.")
            return StepOutcome.SPEAK_FAILED
        return StepOutcome.SPOKEN

    def run(self) -> None:
        """Hold conversations until interrupted."""
        while True:
            if self.step() is StepOutcome.NO_SPEECH:
                time.sleep(RETRY_DELAY)


def build_assistant(config: AssistantConfig) -> Assistant:
    """Create an assistant with the real components described by ``config``."""
    return Assistant(
        recorder=MicrophoneRecorder(),
        stt=SpeechToText(config.whisper_path, config.whisper_model_path),
        tts=TTS(config.piper_path, config.piper_model_path, config.piper_speaker_id),
        client=LlamaClient(config.llama_server_url, config.llama_model_name),
        audio_file=config.audio_file,
    )


def _parse_args(argv) -> AssistantConfig:
    defaults = AssistantConfig()
    parser = argparse.ArgumentParser(prog="voiceloop", description="Spoken chat assistant.")
    parser.add_argument("--whisper", dest="whisper_path", default=defaults.whisper_path)
    parser.add_argument(
        "--whisper-model", dest="whisper_model_path", default=defaults.whisper_model_path
    )
    parser.add_argument("--piper", dest="piper_path", default=defaults.piper_path)
    parser.add_argument(
        "--piper-model", dest="piper_model_path", default=defaults.piper_model_path
    )
    parser.add_argument(
        "--speaker", dest="piper_speaker_id", type=int, default=defaults.piper_speaker_id
    )
    parser.add_argument("--server", dest="llama_server_url", default=defaults.llama_server_url)
    parser.add_argument("--model", dest="llama_model_name", default=defaults.llama_model_name)
    parser.add_argument("--audio-file", dest="audio_file", default=defaults.audio_file)
    return AssistantConfig(**vars(parser.parse_args(argv)))


def main(argv=None) -> int:
    """Start the assistant; returns the process exit status."""
    config = _parse_args(argv)
    assistant = build_assistant(config)
    _status("Voice Assistant Initialized. Say 'Hello Assistant' or your chosen wake word.")
    _status("Press Ctrl+C to exit.")
    try:
        assistant.run()
    except KeyboardInterrupt:
        return 0
    except RecorderError as exc:
        _problem(f"ERROR: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())