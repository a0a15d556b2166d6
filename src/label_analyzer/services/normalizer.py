"""Cleanup of raw OCR text before analysis."""

import re

from label_analyzer.domain.errors import InsufficientText

MIN_TEXT_LENGTH = 5

_I_LOOKALIKES = re.compile(r"[|\\]")
_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^\w\s,.\-()%]")


def normalize_label_text(raw_text: str) -> str:
    """Return cleaned label text, or raise InsufficientText if too little is left.

    Pipes and backslashes are read as a capital I, whitespace runs collapse to
    one space, and anything outside letters, digits, whitespace and
    ``, . - ( ) %`` is removed.
    """
    text = _I_LOOKALIKES.sub("I", raw_text)
    text = _WHITESPACE.sub(" ", text)
    text = _DISALLOWED.sub("", text)
    text = text.strip()
    if len(text) < MIN_TEXT_LENGTH:
        raise InsufficientText()
    return text
