"""
JyotChat: terminal client for a retrieval-augmented chat assistant.

Streams assistant replies with cancellation, regeneration, translation
overlays and read-aloud playback. All heavy lifting (chat completion,
speech synthesis, translation) is done by remote services.
"""

__version__ = "0.1.0"

from .session import (
    CancellationToken,
    ChatFragment,
    ChatSessionController,
    Message,
    Reference,
    Role,
    SessionCallback,
)

__all__ = [
    "CancellationToken",
    "ChatFragment",
    "ChatSessionController",
    "Message",
    "Reference",
    "Role",
    "SessionCallback",
]
