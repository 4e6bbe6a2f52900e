"""Read-aloud playback manager.

Owns the one active player of a session. Starting playback for a message
transfers ownership: whatever was playing is stopped first.
"""

import asyncio

from ..config import READ_ALOUD_FAILED_NOTICE, DebugCallback
from ..services import CompanionAPI
from ..session.callbacks import SessionCallback
from ..session.references import content_before_references
from .base import AudioPlayer, PlayerFactory
from .player import SubprocessAudioPlayer

COMPONENT = "ReadAloud"


class PlaybackManager:
    """Plays synthesized speech for one message at a time."""

    def __init__(
        self,
        api: CompanionAPI,
        player_factory: PlayerFactory | None = None,
        callback: SessionCallback | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            api: Provides speech synthesis
            player_factory: Builds a player for a clip; defaults to
                SubprocessAudioPlayer with an auto-detected command
            callback: Receives playback state changes
        """
        self._api = api
        self._player_factory = player_factory or SubprocessAudioPlayer
        self._callback = callback or SessionCallback()
        self._debug_callback: DebugCallback | None = None
        self._active: tuple[str, AudioPlayer] | None = None
        self._watchers: set[asyncio.Task] = set()
        self._loading: set[str] = set()

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, COMPONENT, message)

    @property
    def active_message_id(self) -> str | None:
        """Id of the message currently playing."""
        if self._active is None or not self._active[1].is_playing:
            return None
        return self._active[0]

    def is_playing(self, message_id: str) -> bool:
        return self.active_message_id == message_id

    def is_loading(self, message_id: str) -> bool:
        return message_id in self._loading

    async def toggle(self, message_id: str, content: str) -> bool:
        """Start or stop reading a message aloud.

        Args:
            message_id: Message to read
            content: Message content; only the part before ``References:``
                is synthesized

        Returns:
            True if the message is playing after the call
        """
        if self.is_playing(message_id):
            self._debug("info", "Stopping playback")
            await self.stop()
            return False

        if message_id in self._loading:
            return False

        text = content_before_references(content)
        if not text:
            return False

        await self.stop()

        self._loading.add(message_id)
        self._callback.playback_changed(message_id, "loading")
        self._debug("info", "Fetching audio")
        try:
            audio = await self._api.synthesize_speech(text)
            player = self._player_factory(audio)
            # another message may have started while this one was loading
            await self.stop()
            await player.start()
        except Exception as e:
            self._debug("error", f"Error controlling audio: {e}")
            self._callback.playback_changed(message_id, "stopped")
            self._callback.notify(READ_ALOUD_FAILED_NOTICE, "warning")
            return False
        finally:
            self._loading.discard(message_id)

        self._active = (message_id, player)
        self._callback.playback_changed(message_id, "playing")
        watcher = asyncio.create_task(self._release_when_done(message_id, player))
        self._watchers.add(watcher)
        watcher.add_done_callback(self._watchers.discard)
        return True

    async def _release_when_done(self, message_id: str, player: AudioPlayer) -> None:
        try:
            await player.wait()
        except Exception as e:
            self._debug("error", f"Error during audio playback: {e}")
        if self._active is not None and self._active[1] is player:
            self._active = None
            self._callback.playback_changed(message_id, "stopped")

    async def stop(self) -> None:
        """Stop whatever is playing."""
        if self._active is None:
            return
        message_id, player = self._active
        self._active = None
        await player.stop()
        self._callback.playback_changed(message_id, "stopped")

    async def close(self) -> None:
        """Stop playback and wait for watchers to finish."""
        await self.stop()
        if self._watchers:
            await asyncio.gather(*self._watchers, return_exceptions=True)
