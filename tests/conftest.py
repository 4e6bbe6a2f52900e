"""Pytest configuration and shared fixtures."""
import asyncio
import json
import os
from typing import Any

import pytest

from jyotchat.services import (
    AssistantFile,
    AssistantInfo,
    ChatStreamProvider,
    CompanionAPI,
    FragmentStream,
    ServiceError,
    Translation,
)
from jyotchat.session import ChatSessionController, SessionCallback


async def wait_until(predicate, timeout: float = 1.0) -> None:
    """Yield to the event loop until a condition holds."""
    async def _poll():
        while not predicate():
            await asyncio.sleep(0)
    await asyncio.wait_for(_poll(), timeout)


def fragment(content: str | None) -> str:
    """Build a raw JSON fragment carrying one delta."""
    delta = {} if content is None else {"content": content}
    return json.dumps({"choices": [{"delta": delta}]})


class FakeStreamProvider(ChatStreamProvider):
    """Replays scripted fragments.

    Each script is a list of raw fragments; an ``asyncio.Event`` in a
    script pauses the stream until it is set. ``open_gate`` holds the
    stream open call itself.
    """

    def __init__(self, *scripts: list[Any]):
        self.scripts = list(scripts)
        self.open_gate: asyncio.Event | None = None
        self.requests: list[list[dict[str, Any]]] = []
        self.closed = False

    async def stream_chat(self, messages: list[dict[str, Any]]) -> FragmentStream:
        self.requests.append(messages)
        if self.open_gate is not None:
            await self.open_gate.wait()
        script = self.scripts.pop(0) if self.scripts else []
        if isinstance(script, Exception):
            raise script

        async def _gen():
            for item in script:
                if isinstance(item, asyncio.Event):
                    await item.wait()
                    continue
                yield item

        return FragmentStream(_gen())

    async def close(self) -> None:
        self.closed = True


class FakeCompanionAPI(CompanionAPI):
    """In-memory companion endpoints with call recording."""

    def __init__(self):
        self.questions: list[str] = ["What is dharma?", "What is moksha?"]
        self.translation = "translated text"
        self.fail_translate = False
        self.fail_suggest = False
        self.audio = b"ID3-fake-mp3"
        self.assistant = AssistantInfo(exists=True, assistant_name="jyotChat")
        self.files = [AssistantFile(name="report.pdf", status="Available")]
        self.translate_calls: list[str] = []
        self.suggest_calls: list[list[dict[str, Any]]] = []
        self.speech_calls: list[str] = []
        self.translate_gate: asyncio.Event | None = None

    async def suggest_questions(self, messages: list[dict[str, Any]]) -> list[str]:
        self.suggest_calls.append(messages)
        if self.fail_suggest:
            raise ServiceError(500, "Failed to fetch suggestions")
        return list(self.questions)

    async def translate(self, message: str) -> list[Translation]:
        self.translate_calls.append(message)
        if self.translate_gate is not None:
            await self.translate_gate.wait()
        if self.fail_translate:
            raise ServiceError(500, "An error occurred while processing the request")
        return [Translation(text=self.translation, to="en")]

    async def synthesize_speech(self, message: str) -> bytes:
        self.speech_calls.append(message)
        return self.audio

    async def check_assistant(self) -> AssistantInfo:
        return self.assistant

    async def list_files(self) -> list[AssistantFile]:
        return list(self.files)

    async def close(self) -> None:
        pass


class RecordingCallback(SessionCallback):
    """Records every callback invocation."""

    def __init__(self):
        self.events: list[tuple] = []
        self.notices: list[tuple[str, str]] = []
        self.streaming: list[bool] = []
        self.regenerating: list[tuple[str, bool]] = []
        self.playback: list[tuple[str, str]] = []
        self.suggestions: list[list[str]] = []

    def message_added(self, message):
        self.events.append(("added", message.id))

    def message_updated(self, message, displayed):
        self.events.append(("updated", message.id, displayed))

    def streaming_changed(self, active):
        self.streaming.append(active)

    def regenerating_changed(self, message_id, active):
        self.regenerating.append((message_id, active))

    def playback_changed(self, message_id, state):
        self.playback.append((message_id, state))

    def suggestions_changed(self, questions):
        self.suggestions.append(questions)

    def notify(self, text, severity="information"):
        self.notices.append((text, severity))


@pytest.fixture
def api():
    """Fake companion API."""
    return FakeCompanionAPI()


@pytest.fixture
def callback():
    """Recording session callback."""
    return RecordingCallback()


@pytest.fixture
def make_controller(api, callback):
    """Build a controller around scripted streams."""
    def _make(*scripts: list[Any], timeout: float = 20.0) -> ChatSessionController:
        provider = FakeStreamProvider(*scripts)
        controller = ChatSessionController(provider, api, callback=callback, regenerate_timeout=timeout)
        controller.provider = provider
        return controller
    return _make


@pytest.fixture(scope="session")
def service_url():
    """Return the URL of a live JyotChat web server, if configured."""
    return os.getenv("JYOTCHAT_BASE_URL")
