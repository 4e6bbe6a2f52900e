from abc import ABC, abstractmethod
from collections.abc import Callable


class AudioPlayer(ABC):
    """Plays one synthesized clip.

    A player is single-use: it is created for one clip, started once and
    stopped or left to finish.
    """

    @property
    @abstractmethod
    def is_playing(self) -> bool:
        """Whether the clip is currently audible."""
        pass

    @abstractmethod
    async def start(self) -> None:
        """Begin playback without waiting for it to finish."""
        pass

    @abstractmethod
    async def stop(self) -> None:
        """Stop playback and release resources. Safe to call twice."""
        pass

    @abstractmethod
    async def wait(self) -> None:
        """Wait until playback ends or is stopped."""
        pass


# Callable(audio bytes) -> AudioPlayer
PlayerFactory = Callable[[bytes], AudioPlayer]
