"""Read-aloud audio for jyotchat.

- base.py: Player interface (how a clip is played)
- player.py: External command-line player
- playback.py: Which message owns the speaker
"""

from .base import AudioPlayer, PlayerFactory
from .playback import PlaybackManager
from .player import SubprocessAudioPlayer, detect_player

__all__ = [
    "AudioPlayer",
    "PlaybackManager",
    "PlayerFactory",
    "SubprocessAudioPlayer",
    "detect_player",
]
