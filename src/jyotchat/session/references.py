"""Reference extraction and the ``References:`` tail of assistant replies."""

import re

from ..config import REFERENCES_MARKER
from .models import Reference

# file name with an alphabetic extension, e.g. "report.pdf"; no path or host prefixes
FILE_NAME_PATTERN = re.compile(r"[^\s:/]+\.[a-zA-Z][a-zA-Z0-9]+(?![\w/])")

# Markdown link: [text](url)
MARKDOWN_LINK_PATTERN = re.compile(r"\[([^\]\n]+)\]\(([^)\s]+)\)")


def extract_references(content: str) -> list[Reference]:
    """Extract cited file names from a reply.

    Markdown links are reduced to their text first, and the link target is
    kept as the reference url when the text is a file name.

    Args:
        content: Full reply text

    Returns:
        References in order of appearance
    """
    urls: dict[str, str] = {}

    def _unlink(match: re.Match[str]) -> str:
        text, url = match.group(1).strip(), match.group(2)
        urls.setdefault(text, url)
        return text

    plain = MARKDOWN_LINK_PATTERN.sub(_unlink, content)

    references = []
    for match in FILE_NAME_PATTERN.finditer(plain):
        name = match.group(0).strip()
        references.append(Reference(name=name, url=urls.get(name)))
    return references


def split_references(content: str) -> tuple[str, str | None]:
    """Split a reply into its main body and its references tail.

    Returns:
        Tuple of (body, tail). ``tail`` is None when the marker is absent.
    """
    if REFERENCES_MARKER not in content:
        return content, None
    body, tail = content.split(REFERENCES_MARKER, 1)
    return body.rstrip(), tail


def content_before_references(content: str) -> str:
    """Return the part of a reply that is read aloud or copied."""
    return content.split(REFERENCES_MARKER)[0].strip()


def format_references_tail(tail: str) -> str:
    """Reformat a references tail as one entry per line."""
    entries = [entry.strip() for entry in re.split(r"[\n,]", tail)]
    return "\n".join(entry for entry in entries if entry)


def join_references(body: str, tail: str | None) -> str:
    """Join a body with a reformatted references tail."""
    if tail is None:
        return body
    formatted = format_references_tail(tail)
    if not formatted:
        return body
    return f"{body}\n\n{REFERENCES_MARKER}\n{formatted}"
