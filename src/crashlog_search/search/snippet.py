"""Context windows around match offsets."""

from __future__ import annotations


DEFAULT_CONTEXT_CHARS = 100


def extract_context(text: str, position: int, context_chars: int = DEFAULT_CONTEXT_CHARS) -> str:
    """Return up to ``context_chars`` characters on each side of ``position``.

    The window is clamped to the bounds of ``text`` and does not snap to word
    or line boundaries.

    Examples:
        >>> extract_context("abcdefghij", 5, 2)
        'defg'
        >>> extract_context("abc", 0, 100)
        'abc'
    """
    if not text:
        return ""
    start = max(0, position - context_chars)
    end = min(len(text), position + context_chars)
    return text[start:end]
