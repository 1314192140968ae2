# util/functions.py
import re

_WHITESPACE = re.compile(r"\s+")
# C0/C1 controls other than tab, newline and carriage return
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text)


def clean_text(text: str) -> str:
    """
    - Strip control characters (NUL bytes are common in PDF text layers).
    - Collapse runs of whitespace to a single space.
    - Trim both ends.
    """
    return collapse_whitespace(_CONTROL_CHARS.sub("", text or "")).strip()


def truncate_text(text: str, limit: int) -> str:
    return text[:limit] if len(text) > limit else text


def split_sentences(text: str) -> list[str]:
    """
    Split on '.', '!' or '?' followed by whitespace, after whitespace collapsing.
    Empty fragments are dropped.
    """
    return [s for s in _SENTENCE_BOUNDARY.split(collapse_whitespace(text)) if s]
