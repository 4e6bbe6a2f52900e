"""HTTP clients for the JyotChat web endpoints."""

from collections.abc import AsyncIterator
from typing import Any

import httpx

from ..config import DEFAULT_BASE_URL, DEFAULT_HTTP_TIMEOUT
from .base import ChatStreamProvider, CompanionAPI
from .models import AssistantFile, AssistantInfo, FragmentStream, ServiceError, Translation

STREAM_DONE_SENTINEL = "[DONE]"


def _error_message(response: httpx.Response) -> str:
    """Pull the error text out of a JSON error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("error") or body.get("message") or body)
    return str(body)


def _raise_for_status(response: httpx.Response) -> None:
    if not response.is_success:
        raise ServiceError(response.status_code, _error_message(response))


def _new_client(
    base_url: str,
    timeout: float,
    transport: httpx.AsyncBaseTransport | None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)


class HTTPChatStreamProvider(ChatStreamProvider):
    """Streams replies from the chat endpoint of a JyotChat web server.

    Hidden design decisions:
    - The endpoint answers with one JSON fragment per line
    - Server-sent-event framing (``data:`` prefixes, ``[DONE]``) is tolerated
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        path: str = "/api/chat",
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the provider.

        Args:
            base_url: Root URL of the web server
            path: Chat endpoint path
            timeout: Timeout in seconds for connecting and for each read
            transport: Optional httpx transport (used by tests)
        """
        self._path = path
        self._client = _new_client(base_url, timeout, transport)

    async def stream_chat(self, messages: list[dict[str, Any]]) -> FragmentStream:
        request = self._client.build_request("POST", self._path, json={"messages": messages})
        response = await self._client.send(request, stream=True)
        if not response.is_success:
            await response.aread()
            await response.aclose()
            _raise_for_status(response)
        return FragmentStream(self._iter_fragments(response))

    async def _iter_fragments(self, response: httpx.Response) -> AsyncIterator[str]:
        try:
            async for line in response.aiter_lines():
                line = line.strip()
                if not line:
                    continue
                if line.startswith("data:"):
                    line = line[len("data:"):].strip()
                if line == STREAM_DONE_SENTINEL:
                    break
                yield line
        finally:
            await response.aclose()

    async def close(self) -> None:
        await self._client.aclose()


class HTTPCompanionAPI(CompanionAPI):
    """Suggestion, translation, speech and assistant endpoints over HTTP."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = _new_client(base_url, timeout, transport)

    async def suggest_questions(self, messages: list[dict[str, Any]]) -> list[str]:
        response = await self._client.post("/api/suggest-questions", json={"messages": messages})
        _raise_for_status(response)
        questions = response.json().get("questions") or []
        return [str(q) for q in questions]

    async def translate(self, message: str) -> list[Translation]:
        response = await self._client.post("/api/translate", json={"message": message})
        _raise_for_status(response)
        return [Translation.model_validate(t) for t in response.json().get("translations", [])]

    async def synthesize_speech(self, message: str) -> bytes:
        response = await self._client.post("/api/read-aloud", json={"message": message})
        _raise_for_status(response)
        content_type = response.headers.get("content-type", "")
        if not content_type.startswith("audio/"):
            raise ServiceError(response.status_code, f"Expected audio, got {content_type or 'no content type'}")
        return response.content

    async def check_assistant(self) -> AssistantInfo:
        response = await self._client.get("/api/assistants")
        _raise_for_status(response)
        return AssistantInfo.model_validate(response.json())

    async def list_files(self) -> list[AssistantFile]:
        response = await self._client.get("/api/files")
        _raise_for_status(response)
        data = response.json()
        if data.get("status") != "success":
            raise ServiceError(response.status_code, str(data.get("message", "Error fetching files")))
        return [AssistantFile.model_validate(f) for f in data.get("files", [])]

    async def close(self) -> None:
        await self._client.aclose()
