"""Recovery of scored ingredient records from analysis prose.

Analysis prose is expected to look like::

    Sugar Analysis: Added sweetener. Health Score: 20/100.
    Vitamin C Analysis: Antioxidant. Health Score: 95/100.

but its formatting is not guaranteed, so extraction runs an ordered list of
strategies and keeps the first one that yields any records. Fields are
delimited by the literal ``Analysis:`` and ``Health Score: N/100`` keywords,
located with a linear scan rather than one backtracking pattern spanning the
whole description.
"""

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from label_analyzer.domain.analysis import IngredientRecord

MIN_HEALTH_SCORE = 0
MAX_HEALTH_SCORE = 100

_NAME_LIMIT = 50
_NAME_FALLBACK_TAIL = 100
_SCORE_DIGITS_LIMIT = 3

_HEADING_KEYWORD = re.compile(r"analysis:", re.IGNORECASE)
_SCORE_MARKER = re.compile(r"health\s+score:\s*(-?\d+)/100", re.IGNORECASE)
_SENTENCE_BREAK = re.compile(r"[.!?]")
_LEADING_SEPARATORS = re.compile(r"^[\s.,-]+")
_NAME_PUNCTUATION = frozenset("(),.-")

_logger = logging.getLogger(__name__)

ExtractionStrategy = Callable[[str], list[IngredientRecord]]


@dataclass(frozen=True)
class _Heading:
    """A ``<name> Analysis:`` heading and where its description begins."""

    name: str
    body_start: int


def extract_ingredients(
    analysis_text: str,
    strategies: Sequence[ExtractionStrategy] | None = None,
) -> list[IngredientRecord]:
    """Return ingredient records in order of appearance; empty when none parse."""
    if not analysis_text:
        return []
    for strategy in strategies or EXTRACTION_STRATEGIES:
        records = strategy(analysis_text)
        if records:
            _logger.debug(
                "Extracted %s ingredients using %s", len(records), strategy.__name__
            )
            return records
    return []


def match_structured_blocks(text: str) -> list[IngredientRecord]:
    """Parse ``<name> Analysis: <description> Health Score: N/100`` blocks."""
    records: list[IngredientRecord] = []
    cursor = 0
    while True:
        heading = _find_heading(text, cursor, len(text))
        if heading is None:
            break
        marker = _SCORE_MARKER.search(text, heading.body_start)
        if marker is None:
            break
        record = _build_record(
            heading.name, text[heading.body_start : marker.start()], marker.group(1)
        )
        if record is not None:
            records.append(record)
        cursor = marker.end()
    return records


def split_on_score_markers(text: str) -> list[IngredientRecord]:
    """Pair each score marker with the text that precedes it.

    Text after the last marker has no score and is ignored.
    """
    records: list[IngredientRecord] = []
    segment_start = 0
    for marker in _SCORE_MARKER.finditer(text):
        segment = text[segment_start : marker.start()].strip()
        segment_start = marker.end()
        if not segment or _parse_score(marker.group(1)) is None:
            continue
        heading = _find_heading(segment, 0, len(segment))
        if heading is not None:
            record = _build_record(
                heading.name, segment[heading.body_start :], marker.group(1)
            )
        else:
            record = _build_record(
                _sentence_name(segment), segment, marker.group(1)
            )
        if record is not None:
            records.append(record)
    return records


EXTRACTION_STRATEGIES: tuple[ExtractionStrategy, ...] = (
    match_structured_blocks,
    split_on_score_markers,
)


def _find_heading(text: str, start: int, end: int) -> _Heading | None:
    """Find the first usable ``<name> Analysis:`` heading in ``text[start:end]``.

    The name is the run of name characters directly before the keyword. It
    must end in whitespace, and the keyword must be followed by whitespace.
    """
    for keyword in _HEADING_KEYWORD.finditer(text, start, end):
        name_start = keyword.start()
        while name_start > start and _is_name_char(text[name_start - 1]):
            name_start -= 1
        name_run = text[name_start : keyword.start()]
        if len(name_run) < 2 or not name_run[-1].isspace():  # noqa: PLR2004
            continue
        body_start = keyword.end()
        if body_start >= end or not text[body_start].isspace():
            continue
        return _Heading(name=_clean_name(name_run), body_start=body_start)
    return None


def _is_name_char(char: str) -> bool:
    return char.isalnum() or char.isspace() or char in _NAME_PUNCTUATION


def _clean_name(name_run: str) -> str:
    """Trim a name run, dropping separators left from the previous sentence."""
    return _LEADING_SEPARATORS.sub("", name_run).strip()


def _sentence_name(segment: str) -> str:
    """Derive a display name from the last sentence of a segment."""
    sentences = [part for part in _SENTENCE_BREAK.split(segment) if part.strip()]
    source = sentences[-1] if sentences else segment[-_NAME_FALLBACK_TAIL:]
    source = source.strip()
    if len(source) > _NAME_LIMIT:
        return source[:_NAME_LIMIT].rstrip() + "..."
    return source


def _parse_score(raw: str) -> int | None:
    if len(raw.lstrip("-")) > _SCORE_DIGITS_LIMIT:
        return None
    score = int(raw)
    if MIN_HEALTH_SCORE <= score <= MAX_HEALTH_SCORE:
        return score
    return None


def _build_record(
    name: str, description: str, raw_score: str
) -> IngredientRecord | None:
    """Build a record, or None when the score is out of range or a field is blank."""
    score = _parse_score(raw_score)
    name = name.strip()
    description = description.strip()
    if score is None or not name or not description:
        return None
    return IngredientRecord(name=name, description=description, health_score=score)
