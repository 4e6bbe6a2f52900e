from typing import Any

from .base import ChatStreamProvider


def create_chat_stream_provider(provider: str, **config: Any) -> ChatStreamProvider:
    """Create a chat stream provider instance.

    This factory function hides the instantiation logic for different providers.

    Args:
        provider: Provider type ('http', 'openai')
        **config: Provider-specific configuration
            For http:
                - base_url: str (default: 'http://localhost:3000')
                - path: str (default: '/api/chat')
                - timeout: float
            For openai:
                - api_key: str (required)
                - base_url: str | None
                - model: str (default: 'gpt-4o')

    Returns:
        Initialized chat stream provider

    Raises:
        ValueError: If provider type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> provider = create_chat_stream_provider(
        ...     "http",
        ...     base_url="http://localhost:3000"
        ... )
    """
    provider_lower = provider.lower()

    if provider_lower == "http":
        from .http import HTTPChatStreamProvider
        return HTTPChatStreamProvider(**config)

    if provider_lower == "openai":
        if "api_key" not in config:
            raise TypeError("OpenAI provider requires 'api_key' in config")
        from .openai import OpenAIChatStreamProvider
        return OpenAIChatStreamProvider(**config)

    raise ValueError(
        f"Unsupported provider: {provider}. "
        f"Supported providers: 'http', 'openai'"
    )
