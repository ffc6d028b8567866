[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "voiceloop"
version = "0.1.0"
description = "A spoken voice assistant loop: voice-activated recording, speech-to-text, a chat-completions LLM and text-to-speech."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "voice assistant",
    "speech",
    "vad",
    "whisper",
    "piper",
    "llm",
    "chat completions",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Speech",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
voiceloop = "voiceloop.app:main"

[tool.hatch.build.targets.wheel]
packages = ["voiceloop"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
