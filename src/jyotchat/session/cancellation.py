"""Cooperative cancellation for stream consumption."""

import asyncio


class CancellationToken:
    """One-shot cancellation signal for a single stream run.

    The consumer checks ``is_cancelled()`` before applying each fragment and
    awaits ``wait()`` alongside the next fragment, so a stalled stream is
    abandoned as soon as the token is cancelled. Nothing is applied after
    cancellation; the network transfer is released, not awaited.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        """Signal the consumer to stop."""
        self._event.set()

    def is_cancelled(self) -> bool:
        """Check whether cancellation was requested."""
        return self._event.is_set()

    async def wait(self) -> None:
        """Wait until cancellation is requested."""
        await self._event.wait()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.is_cancelled()})"
