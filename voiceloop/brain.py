"""Chat client for an OpenAI-compatible llama server with conversation memory."""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from dataclasses import asdict, dataclass

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a helpful assistant."
MAX_TOKENS = 200

_CONTENT_MARKER = '"content":"'
_CONTENT_END = '"}'


class LlamaRequestError(ConnectionError):
    """Raised when the chat server cannot be reached."""


@dataclass
class ChatMessage:
    """One turn of the conversation."""

    role: str
    content: str


def escape_json_string(s: str) -> str:
    """Escape ``s`` for use inside a JSON string literal (without the quotes)."""
    return json.dumps(s, ensure_ascii=False)[1:-1]


def extract_content(response: str) -> str:
    """Pull the first ``"content":"..."`` value out of a raw server response.

    Backslashes in the value are replaced with spaces. Returns an empty
    string when no content is found.
    """
    start = response.find(_CONTENT_MARKER)
    if start == -1:
        return ""
    start += len(_CONTENT_MARKER)
    end = response.find(_CONTENT_END, start)
    if end == -1:
        return ""
    return response[start:end].replace("\\", " ")


class LlamaClient:
    """Keeps a conversation history and sends it to the chat server."""

    def __init__(self, server_url: str, model_name: str) -> None:
        self.server_url = server_url
        self.model_name = model_name
        self.history: list[ChatMessage] = [ChatMessage("system", SYSTEM_PROMPT)]

    def reset_history(self) -> None:
        """Forget the conversation, keeping only the system prompt."""
        self.history = [ChatMessage("system", SYSTEM_PROMPT)]

    def build_payload(self) -> str:
        """Return the JSON request body for the current history."""
        payload = {
            "model": self.model_name,
            "messages": [asdict(message) for message in self.history],
            "max_tokens": MAX_TOKENS,
        }
        return json.dumps(payload, ensure_ascii=False)

    def send_http_request(self, json_payload: str) -> str:
        """POST ``json_payload`` to the server and return the response body."""
        request = urllib.request.Request(
            self.server_url,
            data=json_payload.encode("utf-8"),
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        try:
            with urllib.request.urlopen(request) as response:
                return response.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as exc:
            return exc.read().decode("utf-8", errors="replace")
        except (urllib.error.URLError, OSError) as exc:
            logger.error("request to %s failed: %s", self.server_url, exc)
            raise LlamaRequestError(f"request to {self.server_url} failed: {exc}") from exc

    def chat(self, user_message: str) -> str:
        """Send ``user_message`` with the history and return the reply.

        An empty string means the server gave no usable reply.
        """
        self.history.append(ChatMessage("user", user_message))
        response = self.send_http_request(self.build_payload())
        reply = extract_content(response)
        if reply:
            self.history.append(ChatMessage("assistant", reply))
        return reply