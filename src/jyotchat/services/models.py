from collections.abc import AsyncIterator

from pydantic import BaseModel, ConfigDict, Field


class ServiceError(Exception):
    """A remote endpoint answered with a non-OK status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class FragmentStream:
    """Lazy, finite, non-restartable sequence of raw reply fragments.

    Usage:
        stream = await provider.stream_chat(messages)
        async for raw in stream:
            fragment = ChatFragment.parse(raw)
    """

    def __init__(self, async_iter: AsyncIterator[str]):
        """Initialize with an async iterator of raw fragments.

        Args:
            async_iter: Async iterator yielding JSON fragments
        """
        self._iter = async_iter
        self._exhausted = False

    @property
    def exhausted(self) -> bool:
        """Whether the stream ran to its end."""
        return self._exhausted

    def __aiter__(self) -> "FragmentStream":
        return self

    async def __anext__(self) -> str:
        try:
            return await self._iter.__anext__()
        except StopAsyncIteration:
            self._exhausted = True
            raise

    async def aclose(self) -> None:
        """Release the underlying connection early."""
        aclose = getattr(self._iter, "aclose", None)
        if aclose is not None:
            await aclose()


class Translation(BaseModel):
    """One translation returned by the translation endpoint."""

    model_config = ConfigDict(frozen=True)

    text: str
    to: str = Field(default="", description="Target language code")


class AssistantFile(BaseModel):
    """A document uploaded to the retrieval assistant."""

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str
    id: str | None = None
    status: str | None = None
    signed_url: str | None = None


class AssistantInfo(BaseModel):
    """Existence check for the configured assistant."""

    model_config = ConfigDict(frozen=True)

    exists: bool
    assistant_name: str | None = None

    @property
    def display_name(self) -> str:
        """Assistant name with its first letter capitalised."""
        name = self.assistant_name or ""
        return name[:1].upper() + name[1:]
