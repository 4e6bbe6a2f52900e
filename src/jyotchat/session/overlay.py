"""Per-message translation overlay.

Display-time substitution of a message's content. The canonical
``Message.content`` is never touched by the overlay.
"""

from dataclasses import dataclass, field


@dataclass
class TranslationOverlay:
    """Translation state keyed by message id."""

    original: dict[str, str] = field(default_factory=dict)
    translated: dict[str, str] = field(default_factory=dict)
    in_flight: dict[str, bool] = field(default_factory=dict)
    displayed: dict[str, str] = field(default_factory=dict)
    showing_translation: set[str] = field(default_factory=set)

    def capture_original(self, message_id: str, content: str) -> None:
        """Remember the pre-translation text. Only the first capture counts."""
        self.original.setdefault(message_id, content)

    def is_translating(self, message_id: str) -> bool:
        return self.in_flight.get(message_id, False)

    def is_showing_translation(self, message_id: str) -> bool:
        return message_id in self.showing_translation

    def show(self, message_id: str, content: str, translated: bool = False) -> None:
        """Substitute the displayed content of a message."""
        self.displayed[message_id] = content
        if translated:
            self.showing_translation.add(message_id)
        else:
            self.showing_translation.discard(message_id)

    def clear(self, message_id: str) -> None:
        """Drop the substitution so the canonical content shows again."""
        self.displayed.pop(message_id, None)
        self.showing_translation.discard(message_id)

    def forget(self, message_id: str) -> None:
        """Drop every entry for a message whose content was replaced."""
        self.clear(message_id)
        self.original.pop(message_id, None)
        self.translated.pop(message_id, None)
