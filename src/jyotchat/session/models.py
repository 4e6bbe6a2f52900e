"""Data models for the chat session.

Hides the representation of chat turns and streamed response fragments.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class Role(str, Enum):
    """Author of a chat turn."""

    USER = "user"
    ASSISTANT = "assistant"


class Reference(BaseModel):
    """A document cited by an assistant reply."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="File name as it appears in the reply")
    url: str | None = Field(default=None, description="Link to the document, if known")


class Message(BaseModel):
    """A single chat turn.

    Content is mutable: it grows while a reply streams in and is replaced
    when a reply is regenerated. Renderers may read it at any point and
    must tolerate partial text.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    role: Role
    content: str = ""
    timestamp: datetime = Field(default_factory=datetime.now)
    references: list[Reference] = Field(default_factory=list)

    def append(self, delta: str) -> None:
        """Append a streamed delta to the content."""
        self.content += delta

    def to_payload(self) -> dict[str, Any]:
        """Convert to the JSON shape expected by the remote endpoints."""
        return {
            "id": self.id,
            "role": self.role.value,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }


class _Delta(BaseModel):
    content: str | None = None


class _Choice(BaseModel):
    delta: _Delta | None = None


class _Envelope(BaseModel):
    choices: list[_Choice] = Field(default_factory=list)


class ChatFragment(BaseModel):
    """One incremental unit of a streamed reply.

    A fragment either carries a text delta, carries nothing (a keep-alive
    or a role/finish marker), or is malformed. All three are ordinary values;
    parsing never raises.
    """

    model_config = ConfigDict(frozen=True)

    delta: str | None = None
    malformed: bool = False
    error: str | None = None

    @classmethod
    def parse(cls, raw: str | bytes | dict[str, Any]) -> "ChatFragment":
        """Parse a raw fragment into its delta.

        Args:
            raw: JSON text, JSON bytes, or an already decoded mapping

        Returns:
            ChatFragment with ``delta`` set to ``choices[0].delta.content``
            when present, or ``malformed=True`` when the input cannot be read
        """
        try:
            data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
            envelope = _Envelope.model_validate(data)
        except (ValueError, ValidationError) as e:
            return cls(malformed=True, error=str(e))

        if not envelope.choices or envelope.choices[0].delta is None:
            return cls()
        return cls(delta=envelope.choices[0].delta.content)
