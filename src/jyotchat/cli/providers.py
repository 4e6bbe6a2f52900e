"""Service factory functions for the CLI.

Centralizes creation of the chat stream provider, companion API and
playback manager from environment variables. Hides configuration details
from command implementations.
"""

import os
from functools import partial
from typing import Any

from rich.console import Console

from ..audio import PlaybackManager, SubprocessAudioPlayer
from ..config import DEFAULT_BASE_URL, DEFAULT_HTTP_TIMEOUT
from ..services import ChatStreamProvider, HTTPCompanionAPI, create_chat_stream_provider
from ..session import SessionCallback

# Default console for output
_console = Console()


def get_base_url() -> str:
    """Root URL of the JyotChat web server.

    Environment variables:
        JYOTCHAT_BASE_URL: Web server URL (default: http://localhost:3000)
    """
    return os.getenv("JYOTCHAT_BASE_URL", DEFAULT_BASE_URL).rstrip("/")


def get_timeout() -> float:
    """HTTP timeout in seconds.

    Environment variables:
        JYOTCHAT_TIMEOUT: Timeout in seconds (default: 30)
    """
    return float(os.getenv("JYOTCHAT_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT)))


def get_stream_provider(console: Console | None = None) -> ChatStreamProvider:
    """Create the chat stream provider from environment variables.

    Args:
        console: Optional Rich console for output

    Returns:
        Chat stream provider instance

    Raises:
        SystemExit: If the provider is unknown or missing its API key

    Environment variables:
        JYOTCHAT_STREAM_PROVIDER: Provider type (http, openai; default: http)
        JYOTCHAT_ASSISTANT_API_KEY: API key (for openai provider)
        JYOTCHAT_ASSISTANT_BASE_URL: OpenAI-compatible endpoint (for openai provider)
        JYOTCHAT_ASSISTANT_MODEL: Model or assistant name (default: gpt-4o)
    """
    import typer

    con = console or _console
    provider = os.getenv("JYOTCHAT_STREAM_PROVIDER", "http").lower()

    if provider == "http":
        return create_chat_stream_provider("http", base_url=get_base_url(), timeout=get_timeout())

    if provider == "openai":
        api_key = os.getenv("JYOTCHAT_ASSISTANT_API_KEY")
        if not api_key:
            con.print("[red]Error: JYOTCHAT_ASSISTANT_API_KEY not set in environment[/red]")
            raise typer.Exit(code=1)
        config: dict[str, Any] = {
            "api_key": api_key,
            "model": os.getenv("JYOTCHAT_ASSISTANT_MODEL", "gpt-4o"),
        }
        base_url = os.getenv("JYOTCHAT_ASSISTANT_BASE_URL")
        if base_url:
            config["base_url"] = base_url
        return create_chat_stream_provider("openai", **config)

    con.print(f"[red]Error: Unknown stream provider: {provider}[/red]")
    raise typer.Exit(code=1)


def get_companion_api() -> HTTPCompanionAPI:
    """Create the companion API client for the web server."""
    return HTTPCompanionAPI(base_url=get_base_url(), timeout=get_timeout())


def get_playback_manager(
    api: HTTPCompanionAPI,
    callback: SessionCallback | None = None,
) -> PlaybackManager:
    """Create the read-aloud playback manager.

    Environment variables:
        JYOTCHAT_AUDIO_PLAYER: Player command (ffplay, paplay, aplay, afplay;
            auto-detected when unset)
    """
    player = os.getenv("JYOTCHAT_AUDIO_PLAYER") or None
    return PlaybackManager(
        api,
        player_factory=partial(SubprocessAudioPlayer, player=player),
        callback=callback,
    )
