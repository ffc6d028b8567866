from unittest import mock

import pytest

from voiceloop.app import (
    APOLOGY,
    RETRY_DELAY,
    Assistant,
    AssistantConfig,
    StepOutcome,
    build_assistant,
    main,
)
from voiceloop.brain import LlamaRequestError
from voiceloop.stt import SpeechToTextError
from voiceloop.tts import TTSError


class FakeRecorder:
    def __init__(self, results):
        self.results = list(results)
        self.paths = []

    def record_with_vad(self, output_file):
        self.paths.append(output_file)
        result = self.results.pop(0)
        if isinstance(result, BaseException):
            raise result
        if result:
            output_file.write_bytes(b"RIFF")
        return result


class FakeSTT:
    def __init__(self, text="hello there", error=None):
        self.text = text
        self.error = error
        self.seen = []

    def transcribe(self, path):
        self.seen.append((path, path.exists()))
        if self.error:
            raise self.error
        return self.text


class FakeTTS:
    def __init__(self, fail=False):
        self.fail = fail
        self.spoken = []

    def speak(self, text):
        self.spoken.append(text)
        if self.fail:
            raise TTSError("failed")


class FakeClient:
    def __init__(self, reply="hi", error=None):
        self.reply = reply
        self.error = error
        self.messages = []

    def chat(self, message):
        self.messages.append(message)
        if self.error:
            raise self.error
        return self.reply


def make(tmp_path, recorder=None, stt=None, tts=None, client=None):
    return Assistant(
        recorder or FakeRecorder([True]),
        stt or FakeSTT(),
        tts or FakeTTS(),
        client or FakeClient(),
        tmp_path / "input.wav",
    )


def test_step_speaks_reply(tmp_path):
    tts = FakeTTS()
    client = FakeClient(reply="a reply")
    assistant = make(tmp_path, stt=FakeSTT("what time"), tts=tts, client=client)
    assert assistant.step() is StepOutcome.SPOKEN
    assert client.messages == ["what time"]
    assert tts.spoken == ["a reply"]


def test_audio_file_passed_and_removed(tmp_path):
    stt = FakeSTT()
    recorder = FakeRecorder([True])
    assistant = make(tmp_path, recorder=recorder, stt=stt)
    assistant.step()
    assert recorder.paths == [tmp_path / "input.wav"]
    assert stt.seen == [(tmp_path / "input.wav", True)]
    assert not (tmp_path / "input.wav").exists()


def test_no_speech(tmp_path):
    stt = FakeSTT()
    assistant = make(tmp_path, recorder=FakeRecorder([False]), stt=stt)
    assert assistant.step() is StepOutcome.NO_SPEECH
    assert stt.seen == []


def test_empty_transcript(tmp_path):
    client = FakeClient()
    assistant = make(tmp_path, stt=FakeSTT(""), client=client)
    assert assistant.step() is StepOutcome.TRANSCRIPTION_FAILED
    assert client.messages == []


def test_transcription_error_removes_file(tmp_path):
    client = FakeClient()
    assistant = make(tmp_path, stt=FakeSTT(error=SpeechToTextError("bad")), client=client)
    assert assistant.step() is StepOutcome.TRANSCRIPTION_FAILED
    assert client.messages == []
    assert not (tmp_path / "input.wav").exists()


def test_empty_reply_speaks_apology(tmp_path):
    tts = FakeTTS()
    assistant = make(tmp_path, tts=tts, client=FakeClient(reply=""))
    assert assistant.step() is StepOutcome.NO_REPLY
    assert tts.spoken == [APOLOGY]


def test_request_error_speaks_apology(tmp_path):
    tts = FakeTTS()
    client = FakeClient(error=LlamaRequestError("down"))
    assistant = make(tmp_path, tts=tts, client=client)
    assert assistant.step() is StepOutcome.NO_REPLY
    assert tts.spoken == [APOLOGY]


def test_apology_failure_is_tolerated(tmp_path):
    tts = FakeTTS(fail=True)
    assistant = make(tmp_path, tts=tts, client=FakeClient(reply=""))
    assert assistant.step() is StepOutcome.NO_REPLY
    assert tts.spoken == [APOLOGY]


def test_speak_failure(tmp_path):
    assistant = make(tmp_path, tts=FakeTTS(fail=True))
    assert assistant.step() is StepOutcome.SPEAK_FAILED


@mock.patch("voiceloop.app.time.sleep")
def test_run_waits_after_no_speech(sleep, tmp_path):
    recorder = FakeRecorder([False, True, False, KeyboardInterrupt()])
    tts = FakeTTS()
    assistant = make(tmp_path, recorder=recorder, tts=tts)
    with pytest.raises(KeyboardInterrupt):
        assistant.run()
    assert sleep.call_args_list == [mock.call(RETRY_DELAY), mock.call(RETRY_DELAY)]
    assert tts.spoken == ["hi"]
    assert RETRY_DELAY == 0.5


def test_config_defaults():
    config = AssistantConfig()
    assert config.llama_server_url == "http://127.0.0.1:8080/v1/chat/completions"
    assert config.llama_model_name == "Meta Llama 3.1 8B Instruct"
    assert config.audio_file == "recorded_input.wav"
    assert config.piper_speaker_id == 0


def test_build_assistant_uses_config():
    config = AssistantConfig(
        whisper_path="w",
        whisper_model_path="wm",
        piper_path="p",
        piper_model_path="pm",
        piper_speaker_id=3,
        llama_server_url="http://localhost:9/chat",
        llama_model_name="m",
        audio_file="a.wav",
    )
    assistant = build_assistant(config)
    assert assistant.stt.command("x.wav")[:5] == ["w", "-m", "wm", "-f", "x.wav"]
    assert "--speaker 3" in assistant.tts.command("hi")
    assert assistant.client.server_url == "http://localhost:9/chat"
    assert assistant.client.model_name == "m"
    assert str(assistant.audio_file) == "a.wav"


def test_main_help_exits():
    with pytest.raises(SystemExit) as info:
        main(["--help"])
    assert info.value.code == 0


@mock.patch("voiceloop.recorder.subprocess.Popen", side_effect=OSError("no device"))
def test_main_fails_without_audio_input(popen, tmp_path):
    assert main(["--audio-file", str(tmp_path / "in.wav")]) == 1
    assert popen.call_count == 1