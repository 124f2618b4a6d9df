"""Input validation and sanitization utilities."""

import re
import unicodedata

# Control characters to remove (except newline, tab)
CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

# Multiple whitespace pattern
MULTI_WHITESPACE_PATTERN = re.compile(r"\s+")

LIKE_ESCAPE_CHAR = "\\"


def normalize_text(text: str | None) -> str | None:
    """
    Normalize text input by:
    - Stripping leading/trailing whitespace
    - Collapsing multiple whitespace to single space
    - Removing null bytes and control characters
    - Normalizing Unicode to NFC form

    Returns None if input is None.
    """
    if text is None:
        return None

    text = unicodedata.normalize("NFC", text)
    text = CONTROL_CHAR_PATTERN.sub("", text)
    text = text.strip()
    text = MULTI_WHITESPACE_PATTERN.sub(" ", text)

    return text


def normalize_single_line(text: str | None) -> str | None:
    """
    Normalize text for single-line fields (no newlines allowed).
    """
    if text is None:
        return None

    text = text.replace("\n", " ").replace("\r", " ")

    return normalize_text(text)


def normalize_query(text: str | None) -> str | None:
    """Normalize a search query; blank input becomes None."""
    normalized = normalize_single_line(text)
    return normalized or None


def normalize_tag(tag: str) -> str:
    """Tags compare case-insensitively, so they are stored lowercased."""
    return (normalize_single_line(tag) or "").lower()


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return (
        text.replace(LIKE_ESCAPE_CHAR, LIKE_ESCAPE_CHAR * 2)
        .replace("%", LIKE_ESCAPE_CHAR + "%")
        .replace("_", LIKE_ESCAPE_CHAR + "_")
    )


def validate_length(text: str | None, min_len: int = 0, max_len: int = 255) -> bool:
    """
    Validate that text length is within bounds.
    """
    if text is None:
        return min_len == 0
    length = len(text)
    return min_len <= length <= max_len
