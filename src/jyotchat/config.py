"""Configuration constants.

Centralizes magic numbers, user-facing strings and log levels for jyotchat.
"""

from collections.abc import Callable


class LogLevel:
    """Numeric debug-message levels; a printer shows levels at or above its threshold."""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    _by_name = {"debug": DEBUG, "info": INFO, "warning": WARNING, "error": ERROR}

    @classmethod
    def name(cls, level: int) -> str:
        for name, value in cls._by_name.items():
            if value == level:
                return name.upper()
        return "UNKNOWN"

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Level for a name such as "warning"; unknown names map to DEBUG."""
        return cls._by_name.get(level_str.lower(), cls.DEBUG)


# Callable(level, component, message), level is one of debug/info/warning/error
DebugCallback = Callable[[str, str, str], None]

# Regeneration deadline
REGENERATE_TIMEOUT_SECONDS = 20.0

# HTTP configuration
DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_HTTP_TIMEOUT = 30.0

# Content markers
REFERENCES_MARKER = "References:"
TRANSLATING_PLACEHOLDER = "Translating..."

# Inline notices
CHAT_ERROR_NOTICE = "An error occurred while chatting."
REGENERATE_FAILED_NOTICE = "Failed to regenerate the response. Please try again."
TRANSLATION_FAILED_NOTICE = "Translation failed. Please try again."
TRANSLATION_BUSY_NOTICE = "Translation is unavailable while the message is being written."
ASSISTANT_MISSING_NOTICE = "Please create an Assistant"
ASSISTANT_UNREACHABLE_NOTICE = "Error connecting to the Assistant"
READ_ALOUD_FAILED_NOTICE = "Could not play the message aloud."

# Audio playback
AUDIO_PLAYER_CANDIDATES = ("ffplay", "paplay", "aplay", "afplay")
AUDIO_FILE_SUFFIX = ".mp3"
