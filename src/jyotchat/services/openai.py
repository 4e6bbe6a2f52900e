from collections.abc import AsyncIterator
from typing import Any

from openai import AsyncOpenAI

from .base import ChatStreamProvider
from .models import FragmentStream, ServiceError


class OpenAIChatStreamProvider(ChatStreamProvider):
    """Streams replies from an OpenAI-compatible assistant endpoint.

    Retrieval assistants commonly expose a chat-completions compatible
    route; each streamed chunk is re-serialised to JSON so the session
    sees the same fragment shape as from the web server.

    Hidden design decisions:
    - OpenAI client initialization and authentication
    - Message format conversion
    """

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        model: str = "gpt-4o",
        **client_kwargs: Any
    ):
        """Initialize the provider.

        Args:
            api_key: API key for the assistant endpoint
            base_url: Base URL of the OpenAI-compatible endpoint
            model: Model (or assistant) name sent with each request
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._model = model
        self._client = AsyncOpenAI(api_key=api_key, base_url=base_url, **client_kwargs)

    @property
    def model(self) -> str:
        """Get the model name."""
        return self._model

    async def stream_chat(self, messages: list[dict[str, Any]]) -> FragmentStream:
        openai_messages = [
            {"role": m["role"], "content": m["content"]}
            for m in messages
            if m.get("role") in ("user", "assistant", "system")
        ]
        if not openai_messages:
            raise ServiceError(400, "Message content is required")

        stream = await self._client.chat.completions.create(
            model=self._model,
            messages=openai_messages,
            stream=True,
        )
        return FragmentStream(self._chunk_generator(stream))

    async def _chunk_generator(self, stream: Any) -> AsyncIterator[str]:
        """Serialise each streamed chunk to its JSON fragment."""
        async for chunk in stream:
            yield chunk.model_dump_json(exclude_none=True)

    async def close(self) -> None:
        """Close the OpenAI client."""
        await self._client.close()
