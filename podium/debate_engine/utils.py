"""Utility functions for the debate engine."""

import logging

logger = logging.getLogger(__name__)


def count_words(text: str) -> int:
    """Count whitespace-separated words in ``text``."""
    return len(text.split())


def exceeds_word_limit(text: str, word_limit: int | None) -> bool:
    """Return True when a positive ``word_limit`` is configured and ``text`` is longer."""
    if not word_limit or word_limit <= 0:
        return False
    return count_words(text) > word_limit


def enforce_word_limit(text: str, word_limit: int | None) -> str:
    """Truncate ``text`` to ``word_limit`` words, marking the cut with an ellipsis.

    Args:
        text: The generated response
        word_limit: Maximum number of words allowed, or None for no limit

    Returns:
        The original text when it fits, otherwise the first ``word_limit`` words followed by "..."
    """
    if not exceeds_word_limit(text, word_limit):
        return text

    words = text.split()
    logger.warning(
        f"Response exceeded word limit of {word_limit}, truncated from {len(words)} to {word_limit} words"
    )
    return " ".join(words[:word_limit]) + "..."
