"""Chat session controller.

Owns the message store, the streamed reply in flight, per-message
regeneration and the translation overlay. Runs on a single event loop:
every state change happens between awaits, so no locking is needed.

State per assistant message, on two independent axes:
- reply: idle -> streaming -> completed | cancelled
- display: original <-> translating <-> translated

Translation is refused while the same message is streaming or being
regenerated, and regeneration is refused while it is translating.
"""

import asyncio
import contextlib
from collections.abc import Awaitable
from typing import Any

from ..config import (
    ASSISTANT_MISSING_NOTICE,
    ASSISTANT_UNREACHABLE_NOTICE,
    CHAT_ERROR_NOTICE,
    REGENERATE_FAILED_NOTICE,
    REGENERATE_TIMEOUT_SECONDS,
    TRANSLATING_PLACEHOLDER,
    TRANSLATION_BUSY_NOTICE,
    TRANSLATION_FAILED_NOTICE,
    DebugCallback,
)
from ..services import AssistantFile, AssistantInfo, ChatStreamProvider, CompanionAPI, FragmentStream
from .callbacks import SessionCallback
from .cancellation import CancellationToken
from .models import ChatFragment, Message, Reference, Role
from .overlay import TranslationOverlay
from .references import extract_references, join_references, split_references

COMPONENT = "ChatSession"


async def _next_fragment(stream: FragmentStream) -> str | None:
    """Next raw fragment, or None once the stream is exhausted."""
    try:
        return await stream.__anext__()
    except StopAsyncIteration:
        return None


class ChatSessionController:
    """Coordinates one chat session against its remote collaborators."""

    def __init__(
        self,
        stream_provider: ChatStreamProvider,
        api: CompanionAPI,
        callback: SessionCallback | None = None,
        regenerate_timeout: float = REGENERATE_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the controller.

        Args:
            stream_provider: Source of streamed replies
            api: Suggestion, translation and assistant endpoints
            callback: Receives state changes for rendering
            regenerate_timeout: Seconds before a regeneration is abandoned
        """
        self._stream_provider = stream_provider
        self._api = api
        self._callback = callback or SessionCallback()
        self._regenerate_timeout = regenerate_timeout
        self._debug_callback: DebugCallback | None = None

        self._messages: list[Message] = []
        self._overlay = TranslationOverlay()
        self._stream_token: CancellationToken | None = None
        self._streaming_message_id: str | None = None
        self._is_streaming = False
        self._regenerating: dict[str, CancellationToken] = {}
        self._suggestions: list[str] = []
        self._referenced_files: list[Reference] = []
        self._error: str | None = None

        self.input = ""
        self.assistant: AssistantInfo | None = None
        self.files: list[AssistantFile] = []

    # ------------------------------------------------------------------
    # Read-only view

    @property
    def messages(self) -> tuple[Message, ...]:
        """Messages in display order."""
        return tuple(self._messages)

    @property
    def is_streaming(self) -> bool:
        return self._is_streaming

    @property
    def suggestions(self) -> list[str]:
        """Suggested follow-up questions for the last completed reply."""
        return list(self._suggestions)

    @property
    def referenced_files(self) -> list[Reference]:
        """References of the last completed reply."""
        return list(self._referenced_files)

    @property
    def error(self) -> str | None:
        """Text of the most recent error banner, if any."""
        return self._error

    @property
    def overlay(self) -> TranslationOverlay:
        return self._overlay

    def get_message(self, message_id: str) -> Message | None:
        for message in self._messages:
            if message.id == message_id:
                return message
        return None

    def is_regenerating(self, message_id: str) -> bool:
        return message_id in self._regenerating

    def is_translating(self, message_id: str) -> bool:
        return self._overlay.is_translating(message_id)

    def displayed_content(self, message_id: str) -> str:
        """Content to display for a message, with any overlay applied."""
        if message_id in self._overlay.displayed:
            return self._overlay.displayed[message_id]
        message = self.get_message(message_id)
        return message.content if message is not None else ""

    # ------------------------------------------------------------------
    # Logging and notices

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        """Set the debug callback for detailed execution logging.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, COMPONENT, message)

    def _notify(self, text: str, severity: str = "information") -> None:
        if severity == "error":
            self._error = text
        self._callback.notify(text, severity)

    def dismiss_error(self) -> None:
        self._error = None

    # ------------------------------------------------------------------
    # State helpers

    def _append(self, message: Message) -> None:
        self._messages.append(message)
        self._callback.message_added(message)

    def _render(self, message: Message) -> None:
        self._callback.message_updated(message, self.displayed_content(message.id))

    def _set_streaming(self, active: bool) -> None:
        if self._is_streaming != active:
            self._is_streaming = active
            self._callback.streaming_changed(active)

    def _set_suggestions(self, questions: list[str]) -> None:
        self._suggestions = list(questions)
        self._callback.suggestions_changed(self.suggestions)

    def _history(self, before: Message | None = None) -> list[dict[str, Any]]:
        """Message payloads in order, optionally stopping before a message."""
        history = []
        for message in self._messages:
            if message is before:
                break
            history.append(message.to_payload())
        return history

    # ------------------------------------------------------------------
    # Session start

    async def load_assistant(self) -> AssistantInfo | None:
        """Check the assistant and load its file listing.

        Returns:
            AssistantInfo, or None if the assistant could not be reached
        """
        try:
            info = await self._api.check_assistant()
        except Exception as e:
            self._debug("error", f"Assistant check failed: {e}")
            self._notify(ASSISTANT_UNREACHABLE_NOTICE, "error")
            return None

        self.assistant = info
        if not info.exists:
            self._notify(ASSISTANT_MISSING_NOTICE, "error")

        try:
            self.files = await self._api.list_files()
        except Exception as e:
            self._debug("error", f"Error fetching files: {e}")
            self.files = []
        return info

    # ------------------------------------------------------------------
    # Submitting and streaming

    async def submit(self, text: str | None = None) -> Message | None:
        """Submit user input and stream the reply.

        Args:
            text: Text to submit; defaults to the input buffer

        Returns:
            The appended user message, or None if nothing was submitted
        """
        text = self.input if text is None else text
        if not text.strip():
            return None
        if self._is_streaming:
            self._debug("warning", "Submission ignored while a reply is streaming")
            return None

        message = Message(role=Role.USER, content=text)
        self._append(message)
        self.input = ""
        await self.run_stream(message)
        return message

    async def select_suggestion(self, index: int) -> Message | None:
        """Submit one of the suggested follow-up questions."""
        if not 0 <= index < len(self._suggestions):
            raise IndexError(f"No suggestion at index {index}")
        return await self.submit(self._suggestions[index])

    async def run_stream(self, triggering_message: Message) -> Message | None:
        """Stream a new assistant reply for a triggering message.

        Returns:
            The assistant message, or None if the stream could not be opened
        """
        token = CancellationToken()
        self._stream_token = token
        self._set_streaming(True)
        self._debug("info", f"Streaming reply to '{triggering_message.content[:50]}'")

        assistant: Message | None = None
        try:
            opened, stream = await self._unless_cancelled(
                self._stream_provider.stream_chat(self._history()), token
            )
            if not opened or token.is_cancelled():
                self._debug("info", "Reply cancelled before the stream opened")
                if opened:
                    with contextlib.suppress(Exception):
                        await stream.aclose()
                return None

            assistant = Message(role=Role.ASSISTANT)
            self._append(assistant)
            if self._stream_token is token and not token.is_cancelled():
                self._streaming_message_id = assistant.id

            completed = await self._consume(stream, assistant, token)
            if not completed:
                self._debug("info", "Reply cancelled")
                return assistant

            assistant.references = extract_references(assistant.content)
            self._referenced_files = list(assistant.references)
            self._render(assistant)
            if self._streaming_message_id == assistant.id:
                self._streaming_message_id = None

            questions = await self._fetch_suggestions()
            if not token.is_cancelled():
                self._set_suggestions(questions)
            return assistant
        except Exception as e:
            self._debug("error", f"Error in chat: {e}")
            self._notify(CHAT_ERROR_NOTICE, "error")
            return assistant
        finally:
            if self._stream_token is token:
                self._stream_token = None
                self._streaming_message_id = None
                self._set_streaming(False)

    async def _consume(
        self,
        stream: FragmentStream,
        message: Message,
        token: CancellationToken,
    ) -> bool:
        """Apply fragments to a message in arrival order.

        The token is checked before each fragment, and a stalled stream is
        abandoned as soon as the token is cancelled. Malformed fragments are
        logged and skipped.

        Returns:
            True if the stream was exhausted, False if it was cancelled
        """
        while not token.is_cancelled():
            received, raw = await self._unless_cancelled(_next_fragment(stream), token)
            if not received or stream.exhausted or token.is_cancelled():
                break
            fragment = ChatFragment.parse(raw)
            if fragment.malformed:
                self._debug("warning", f"Skipping malformed fragment: {fragment.error}")
                continue
            if fragment.delta:
                message.append(fragment.delta)
            self._render(message)

        if token.is_cancelled():
            with contextlib.suppress(Exception):
                await stream.aclose()
            return False
        return True

    async def _unless_cancelled(
        self,
        awaitable: Awaitable[Any],
        token: CancellationToken,
    ) -> tuple[bool, Any]:
        """Await a result, giving up as soon as the token is cancelled.

        Returns:
            (True, result) if the awaitable finished first, (False, None)
            if the token was cancelled while waiting
        """
        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(token.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            finished = task.done()
            if not finished:
                task.cancel()
        if not finished:
            return False, None
        return True, task.result()

    async def _fetch_suggestions(self) -> list[str]:
        try:
            return await self._api.suggest_questions(self._history())
        except Exception as e:
            self._debug("error", f"Error suggesting next questions: {e}")
            return []

    def stop(self) -> None:
        """Stop consuming the active stream and any regeneration.

        Streaming is marked inactive at once; the network transfer itself
        is abandoned, not aborted.
        """
        if self._stream_token is not None:
            self._stream_token.cancel()
            self._stream_token = None
        for message_id, token in list(self._regenerating.items()):
            token.cancel()
            del self._regenerating[message_id]
            self._callback.regenerating_changed(message_id, False)
        self._streaming_message_id = None
        self._set_streaming(False)
        self._debug("info", "Stop requested")

    # ------------------------------------------------------------------
    # Regeneration

    async def regenerate(self, message_id: str) -> bool:
        """Replace an assistant reply with a freshly streamed one.

        Args:
            message_id: Id of an existing assistant message

        Returns:
            True if the new reply streamed to completion

        Raises:
            ValueError: If the id does not identify an assistant message
        """
        message = self.get_message(message_id)
        if message is None or message.role != Role.ASSISTANT:
            raise ValueError(f"No assistant message with id {message_id}")

        if (
            message_id == self._streaming_message_id
            or message_id in self._regenerating
            or self._overlay.is_translating(message_id)
        ):
            self._debug("warning", f"Regeneration of {message_id} refused, message is busy")
            return False

        token = CancellationToken()
        self._regenerating[message_id] = token
        self._callback.regenerating_changed(message_id, True)

        message.content = ""
        message.references = []
        self._overlay.forget(message_id)
        self._render(message)

        try:
            return await asyncio.wait_for(
                self._regenerate_into(message, token),
                timeout=self._regenerate_timeout,
            )
        except asyncio.TimeoutError:
            if token.is_cancelled():
                return False
            token.cancel()
            self._debug("error", f"Regeneration timed out after {self._regenerate_timeout}s")
            self._notify(REGENERATE_FAILED_NOTICE, "error")
            return False
        except Exception as e:
            if token.is_cancelled():
                self._debug("info", f"Stopped regeneration ended with: {e}")
                return False
            self._debug("error", f"Error regenerating response: {e}")
            self._notify(REGENERATE_FAILED_NOTICE, "error")
            return False
        finally:
            if self._regenerating.get(message_id) is token:
                del self._regenerating[message_id]
                self._callback.regenerating_changed(message_id, False)

    async def _regenerate_into(self, message: Message, token: CancellationToken) -> bool:
        opened, stream = await self._unless_cancelled(
            self._stream_provider.stream_chat(self._history(before=message)), token
        )
        if not opened:
            return False
        completed = await self._consume(stream, message, token)
        if completed:
            message.references = extract_references(message.content)
            self._render(message)
        return completed

    # ------------------------------------------------------------------
    # Translation overlay

    async def toggle_translation(
        self,
        message_id: str,
        current_displayed_content: str | None = None,
    ) -> str:
        """Switch a message between its original and translated text.

        Only the body before ``References:`` is sent for translation; the
        references tail is kept and reformatted one entry per line.

        Args:
            message_id: Id of the message to toggle
            current_displayed_content: Content currently displayed; defaults
                to ``displayed_content(message_id)``

        Returns:
            The content displayed after the toggle
        """
        overlay = self._overlay
        current = (
            self.displayed_content(message_id)
            if current_displayed_content is None
            else current_displayed_content
        )
        message = self.get_message(message_id)
        if message is None:
            raise ValueError(f"No message with id {message_id}")

        if (
            message_id == self._streaming_message_id
            or message_id in self._regenerating
            or overlay.is_translating(message_id)
        ):
            self._notify(TRANSLATION_BUSY_NOTICE, "warning")
            return self.displayed_content(message_id)

        if overlay.is_showing_translation(message_id):
            original = overlay.original.get(message_id, message.content)
            if original == message.content:
                overlay.clear(message_id)
            else:
                overlay.show(message_id, original)
            self._render(message)
            return original

        overlay.in_flight[message_id] = True
        self._callback.translating_changed(message_id, True)
        try:
            body, tail = split_references(current)
            overlay.show(message_id, TRANSLATING_PLACEHOLDER)
            self._render(message)

            translated = overlay.translated.get(message_id)
            if translated is None:
                try:
                    translations = await self._api.translate(body)
                    translated = translations[0].text
                except Exception as e:
                    self._debug("error", f"Error translating message: {e}")
                    self._restore(message, current)
                    self._notify(TRANSLATION_FAILED_NOTICE, "error")
                    return current
                overlay.capture_original(message_id, current)
                overlay.translated[message_id] = translated

            displayed = join_references(translated, tail)
            overlay.show(message_id, displayed, translated=True)
            self._render(message)
            return displayed
        finally:
            overlay.in_flight[message_id] = False
            self._callback.translating_changed(message_id, False)

    def _restore(self, message: Message, content: str) -> None:
        if content == message.content:
            self._overlay.clear(message.id)
        else:
            self._overlay.show(message.id, content)
        self._render(message)
