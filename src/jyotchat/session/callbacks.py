"""Callback interface for session renderers.

Hides how a renderer receives updates from the session controller.
All methods are no-ops; renderers override what they display.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Message


class SessionCallback:
    """Receives session state changes, one call per change."""

    def message_added(self, message: "Message") -> None:
        """Called when a message is appended to the session."""

    def message_updated(self, message: "Message", displayed: str) -> None:
        """Called after every content change, including each streamed fragment.

        Args:
            message: The message whose state changed
            displayed: Content to display, with any overlay applied
        """

    def streaming_changed(self, active: bool) -> None:
        """Called when the session-wide streaming indicator flips."""

    def regenerating_changed(self, message_id: str, active: bool) -> None:
        """Called when a message's regeneration indicator flips."""

    def translating_changed(self, message_id: str, active: bool) -> None:
        """Called when a message's translation request starts or ends."""

    def playback_changed(self, message_id: str, state: str) -> None:
        """Called when read-aloud state changes: 'loading', 'playing' or 'stopped'."""

    def suggestions_changed(self, questions: list[str]) -> None:
        """Called when suggested follow-up questions are replaced."""

    def notify(self, text: str, severity: str = "information") -> None:
        """Surface an inline notice.

        Args:
            text: Notice text
            severity: 'information', 'warning' or 'error'
        """
