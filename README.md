# voiceloop

A small voice assistant that runs as one loop:

1. **Listen** – captures microphone audio with `arecord`, waits for speech
   using a simple energy-based voice activity detector, records until about
   a second of silence and saves the utterance as a 16-bit PCM WAV file
   (`voiceloop.recorder.MicrophoneRecorder`).
2. **Transcribe** – runs a Whisper command-line binary on the recording
   (`voiceloop.stt.SpeechToText`).
3. **Think** – sends the running conversation to an OpenAI-style
   chat-completions server, such as a local llama.cpp server
   (`voiceloop.brain.LlamaClient`).
4. **Speak** – pipes the reply through Piper and plays the raw audio with
   `aplay` (`voiceloop.tts.TTS`).

The package depends on nothing outside the Python standard library, but the
assistant needs these external programs and services:

- `arecord` for microphone capture and `aplay` for playback (ALSA utilities)
- a Whisper command-line binary and a model such as `ggml-base.en.bin`
- the Piper binary and a voice model (`.onnx`)
- a chat-completions HTTP server, by default at
  `http://127.0.0.1:8080/v1/chat/completions`

## Installation

```
pip install .
```

## Running the assistant

```
voiceloop
```

Options (all optional):

| Option            | Default                                        |
|-------------------|------------------------------------------------|
| `--whisper`       | `../bin/whisper-cli`                           |
| `--whisper-model` | `../models/ggml-base.en.bin`                   |
| `--piper`         | `../bin/piper`                                 |
| `--piper-model`   | `../models/en_US-lessac-high.onnx`             |
| `--speaker`       | `0`                                            |
| `--server`        | `http://127.0.0.1:8080/v1/chat/completions`    |
| `--model`         | `Meta Llama 3.1 8B Instruct`                   |
| `--audio-file`    | `recorded_input.wav`                           |

Relative paths are taken from the working directory. Each turn the
recording is written to the audio file, transcribed and then deleted;
Whisper's transcript is written to `temp_transcript.txt` in the working
directory. When the model gives no reply, the assistant says an apology
instead. Stop it with Ctrl+C; the command exits with status 1 if the
microphone cannot be opened.

## Using the parts from Python

```python
from voiceloop.brain import LlamaClient

client = LlamaClient("http://127.0.0.1:8080/v1/chat/completions", "Meta Llama 3.1 8B Instruct")
reply = client.chat("What is the capital of France?")
print(reply)
client.reset_history()   # start a new conversation; only the system prompt stays
```

The conversation starts with the system message
"You are a helpful assistant." and each request asks for at most 200 tokens.
`chat` returns an empty string when the response holds no usable content
(the reply is then not added to the history) and raises
`voiceloop.brain.LlamaRequestError` when the server cannot be reached.
`build_payload()` returns the JSON body for the current history, and
`extract_content()` / `escape_json_string()` are available as helpers.

```python
from voiceloop.recorder import MicrophoneRecorder, collect_speech, compute_rms, write_wav

level = compute_rms([1000, -1000, 1000, -1000])
write_wav("tone.wav", [0, 1000, 0, -1000], 16000, 1)

recorder = MicrophoneRecorder()            # 16 kHz, mono, 20 ms frames
if recorder.record_with_vad("utterance.wav"):
    print("saved")
```

`record_with_vad` returns `False` when no speech was heard and raises
`voiceloop.recorder.RecorderError` if `arecord` cannot be started. A
`frame_source` callable returning an iterable of sample frames can be given
to `MicrophoneRecorder` instead of the microphone; `collect_speech` applies
the voice activity detection to any iterable of frames.

```python
from voiceloop.stt import SpeechToText
from voiceloop.tts import TTS

stt = SpeechToText("../bin/whisper-cli", "../models/ggml-base.en.bin")
text = stt.transcribe("recorded_input.wav")

tts = TTS("../bin/piper", "../models/en_US-lessac-high.onnx", 0, 22050)
tts.speak(text)
```

`transcribe` raises `voiceloop.stt.SpeechToTextError` and `speak` raises
`voiceloop.tts.TTSError` when the external command fails. `command()` on
either class returns the command that would be run.

To wire the parts together yourself, build an `Assistant` from
`voiceloop.app`, or use `build_assistant` with an `AssistantConfig`, then
call `run()` for the endless loop or `step()` for a single turn; `step()`
returns a `StepOutcome` saying how the turn ended.

## What it does not do

- There is no wake-word detection: every utterance is answered.
- Audio capture and playback go through `arecord` and `aplay` only, so the
  assistant runs on Linux systems with ALSA.
- The conversation is kept in memory only and is lost when the program stops.

## Tests

```
pip install .[test]
pytest
```