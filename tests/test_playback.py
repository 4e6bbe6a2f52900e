"""Tests for read-aloud playback."""
import asyncio

import pytest
from conftest import wait_until

from jyotchat.audio import AudioPlayer, PlaybackManager, SubprocessAudioPlayer, detect_player
from jyotchat.audio.player import player_command
from jyotchat.config import READ_ALOUD_FAILED_NOTICE
from jyotchat.services import ServiceError


class FakePlayer(AudioPlayer):
    """Player that 'plays' until stopped or finished."""

    def __init__(self, audio: bytes):
        self.audio = audio
        self.started = False
        self.stopped = False
        self._done = asyncio.Event()

    @property
    def is_playing(self) -> bool:
        return self.started and not self._done.is_set()

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.stopped = True
        self._done.set()

    async def wait(self) -> None:
        await self._done.wait()

    def finish(self) -> None:
        self._done.set()


@pytest.fixture
def players():
    return []


@pytest.fixture
def manager(api, callback, players):
    def factory(audio: bytes) -> FakePlayer:
        player = FakePlayer(audio)
        players.append(player)
        return player
    return PlaybackManager(api, player_factory=factory, callback=callback)


class TestPlaybackManager:
    """Tests for PlaybackManager.toggle()."""

    @pytest.mark.asyncio
    async def test_play_message(self, manager, api, callback, players):
        """Test that toggling an idle message starts playback."""
        playing = await manager.toggle("m1", "Jai Jinendra")

        assert playing
        assert manager.is_playing("m1")
        assert manager.active_message_id == "m1"
        assert api.speech_calls == ["Jai Jinendra"]
        assert players[0].audio == api.audio
        assert callback.playback == [("m1", "loading"), ("m1", "playing")]
        await manager.close()

    @pytest.mark.asyncio
    async def test_references_not_read_aloud(self, manager, api):
        await manager.toggle("m1", "Body text.\n\nReferences: a.pdf, b.pdf")

        assert api.speech_calls == ["Body text."]
        await manager.close()

    @pytest.mark.asyncio
    async def test_toggle_same_message_stops(self, manager, callback, players):
        await manager.toggle("m1", "Hello")

        playing = await manager.toggle("m1", "Hello")

        assert not playing
        assert players[0].stopped
        assert manager.active_message_id is None
        assert callback.playback[-1] == ("m1", "stopped")
        await manager.close()

    @pytest.mark.asyncio
    async def test_other_message_takes_over(self, manager, players):
        """Test that at most one message plays at a time."""
        await manager.toggle("m1", "First")
        await manager.toggle("m2", "Second")

        assert players[0].stopped
        assert not players[1].stopped
        assert manager.active_message_id == "m2"
        assert not manager.is_playing("m1")
        await manager.close()

    @pytest.mark.asyncio
    async def test_natural_finish_releases_speaker(self, manager, callback, players):
        await manager.toggle("m1", "Short clip")

        players[0].finish()
        await wait_until(lambda: manager.active_message_id is None)

        assert callback.playback[-1] == ("m1", "stopped")
        await manager.close()

    @pytest.mark.asyncio
    async def test_synthesis_failure_notifies(self, manager, api, callback):
        async def fail(message):
            raise ServiceError(500, "Failed to generate speech")

        api.synthesize_speech = fail

        playing = await manager.toggle("m1", "Hello")

        assert not playing
        assert not manager.is_loading("m1")
        assert (READ_ALOUD_FAILED_NOTICE, "warning") in callback.notices
        assert callback.playback[-1] == ("m1", "stopped")

    @pytest.mark.asyncio
    async def test_empty_body_is_not_synthesized(self, manager, api):
        assert not await manager.toggle("m1", "References: a.pdf")
        assert api.speech_calls == []


class TestSubprocessPlayer:
    """Tests for the command-line player helpers."""

    def test_preferred_player_wins(self):
        assert detect_player("mpv") == "mpv"

    def test_detect_falls_back_to_path(self, monkeypatch):
        monkeypatch.setattr("jyotchat.audio.player.which", lambda name: name == "aplay")
        assert detect_player() == "aplay"

    def test_no_player_raises(self, monkeypatch):
        monkeypatch.setattr("jyotchat.audio.player.which", lambda name: None)
        with pytest.raises(RuntimeError, match="No audio player"):
            SubprocessAudioPlayer(b"audio")

    def test_player_command(self):
        assert player_command("/usr/bin/ffplay", "a.mp3")[0] == "/usr/bin/ffplay"
        assert "-nodisp" in player_command("ffplay", "a.mp3")
        assert player_command("aplay", "a.mp3") == ["aplay", "-q", "a.mp3"]
        assert player_command("afplay", "a.mp3") == ["afplay", "a.mp3"]
