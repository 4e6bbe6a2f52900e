from .base import ChatStreamProvider, CompanionAPI
from .factory import create_chat_stream_provider
from .http import HTTPChatStreamProvider, HTTPCompanionAPI
from .models import AssistantFile, AssistantInfo, FragmentStream, ServiceError, Translation
from .openai import OpenAIChatStreamProvider

__all__ = [
    "AssistantFile",
    "AssistantInfo",
    "ChatStreamProvider",
    "CompanionAPI",
    "FragmentStream",
    "HTTPChatStreamProvider",
    "HTTPCompanionAPI",
    "OpenAIChatStreamProvider",
    "ServiceError",
    "Translation",
    "create_chat_stream_provider",
]
