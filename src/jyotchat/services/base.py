"""Abstract interfaces for the remote collaborators of a chat session.

This module hides which services answer the session and how they are
reached. Implementations must handle:
- Client setup and authentication
- Request/response format conversion
- Mapping non-OK responses to ServiceError
"""

from abc import ABC, abstractmethod
from typing import Any

from .models import AssistantFile, AssistantInfo, FragmentStream, Translation


class _AsyncClosable(ABC):
    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""
        pass

    async def __aenter__(self) -> Any:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise


class ChatStreamProvider(_AsyncClosable):
    """Source of streamed assistant replies.

    Supports async context manager protocol for proper resource cleanup:
        async with provider:
            stream = await provider.stream_chat(messages)
    """

    @abstractmethod
    async def stream_chat(self, messages: list[dict[str, Any]]) -> FragmentStream:
        """Open a streamed reply for a conversation.

        Args:
            messages: Ordered message payloads ({id, role, content, timestamp})

        Returns:
            FragmentStream yielding raw JSON fragments shaped like
            ``{"choices": [{"delta": {"content": "..."}}]}``

        Raises:
            ServiceError: If the endpoint refuses the request
        """
        pass


class CompanionAPI(_AsyncClosable):
    """Non-streaming endpoints used around the chat stream."""

    @abstractmethod
    async def suggest_questions(self, messages: list[dict[str, Any]]) -> list[str]:
        """Suggest follow-up questions for a conversation."""
        pass

    @abstractmethod
    async def translate(self, message: str) -> list[Translation]:
        """Translate text, returning every translation the service produced."""
        pass

    @abstractmethod
    async def synthesize_speech(self, message: str) -> bytes:
        """Synthesize speech, returning encoded audio bytes."""
        pass

    @abstractmethod
    async def check_assistant(self) -> AssistantInfo:
        """Check whether the assistant exists and get its name."""
        pass

    @abstractmethod
    async def list_files(self) -> list[AssistantFile]:
        """List the documents the assistant answers from."""
        pass
