"""Voice assistant loop: record speech, transcribe it, ask an LLM and speak the reply."""

__version__ = "0.1.0"

__all__ = ["__version__"]