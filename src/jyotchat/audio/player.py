"""Audio playback through an external command-line player."""

import asyncio
import contextlib
import os
import tempfile
from pathlib import Path
from shutil import which

from ..config import AUDIO_FILE_SUFFIX, AUDIO_PLAYER_CANDIDATES
from .base import AudioPlayer


def detect_player(preferred: str | None = None) -> str | None:
    """Find a command-line audio player.

    Args:
        preferred: Player to use if set (name or path)

    Returns:
        Player command, or None if none is installed
    """
    if preferred:
        return preferred
    for candidate in AUDIO_PLAYER_CANDIDATES:
        if which(candidate):
            return candidate
    return None


def player_command(player: str, path: str) -> list[str]:
    """Build the command line that plays a file with the given player."""
    name = Path(player).name
    if name == "ffplay":
        return [player, "-autoexit", "-nodisp", "-hide_banner", "-loglevel", "error", path]
    if name == "aplay":
        return [player, "-q", path]
    return [player, path]


class SubprocessAudioPlayer(AudioPlayer):
    """Writes the clip to a temporary file and plays it with an external command.

    The temporary file is removed once playback ends or is stopped.
    """

    def __init__(self, audio: bytes, player: str | None = None) -> None:
        """Initialize the player.

        Args:
            audio: Encoded audio (mp3)
            player: Player command; auto-detected when None

        Raises:
            RuntimeError: If no audio player is available
        """
        command = detect_player(player)
        if command is None:
            raise RuntimeError(
                "No audio player found (set JYOTCHAT_AUDIO_PLAYER="
                + "|".join(AUDIO_PLAYER_CANDIDATES) + ")"
            )
        self._audio = audio
        self._player = command
        self._path: str | None = None
        self._process: asyncio.subprocess.Process | None = None

    @property
    def is_playing(self) -> bool:
        return self._process is not None and self._process.returncode is None

    async def start(self) -> None:
        if self._process is not None:
            return
        with tempfile.NamedTemporaryFile(prefix="speech_", suffix=AUDIO_FILE_SUFFIX, delete=False) as f:
            f.write(self._audio)
            self._path = f.name
        try:
            self._process = await asyncio.create_subprocess_exec(
                *player_command(self._player, self._path),
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError:
            self._cleanup()
            raise

    async def stop(self) -> None:
        if self.is_playing:
            with contextlib.suppress(ProcessLookupError):
                self._process.terminate()
        await self.wait()

    async def wait(self) -> None:
        if self._process is not None:
            await self._process.wait()
        self._cleanup()

    def _cleanup(self) -> None:
        if self._path is not None:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(self._path)
            self._path = None
