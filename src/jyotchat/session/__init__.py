"""Chat session module for jyotchat.

Module structure (each module hides a design decision):
- models.py: Message and fragment representation
- cancellation.py: How a stream run is told to stop
- references.py: How cited files are found in a reply
- overlay.py: How translated text is layered over a message
- callbacks.py: How renderers receive updates
- controller.py: Session orchestration
"""

from .callbacks import SessionCallback
from .cancellation import CancellationToken
from .controller import ChatSessionController
from .models import ChatFragment, Message, Reference, Role
from .overlay import TranslationOverlay
from .references import (
    content_before_references,
    extract_references,
    format_references_tail,
    join_references,
    split_references,
)

__all__ = [
    "CancellationToken",
    "ChatFragment",
    "ChatSessionController",
    "Message",
    "Reference",
    "Role",
    "SessionCallback",
    "TranslationOverlay",
    "content_before_references",
    "extract_references",
    "format_references_tail",
    "join_references",
    "split_references",
]
