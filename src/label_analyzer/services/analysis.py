"""Label analysis orchestration."""

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from label_analyzer.domain.analysis import AnalysisResult
from label_analyzer.domain.errors import (
    AnalysisInProgress,
    AnalysisRequestFailed,
    FailureReason,
    MissingInput,
    NoAnalysisData,
    NoIngredientsParsed,
)
from label_analyzer.services.extraction import extract_ingredients
from label_analyzer.services.ocr import OcrService
from label_analyzer.services.scoring import overall_score

ANALYSIS_TEXT_FIELDS = ("analysis_text", "ai_analysis", "summary", "output")
NESTED_OUTPUT_FIELD = "fullOutput"

_logger = logging.getLogger(__name__)


class AnalysisClient(Protocol):
    """Interface for the external analysis service."""

    async def request_analysis(self, message: str) -> object:
        """Send label text for analysis and return the decoded JSON body."""


@dataclass
class AnalysisService:
    """Turns label text or photos into a scored ingredient analysis."""

    client: AnalysisClient
    ocr_service: OcrService
    _active_sessions: set[str] = field(default_factory=set, init=False, repr=False)

    async def analyze_text(
        self, text: str | None, session_id: str | None = None
    ) -> AnalysisResult:
        """Analyze ingredient text typed or pasted by the user."""
        if not text or not text.strip():
            raise MissingInput()
        with self._claim_session(session_id):
            return await self._analyze(text)

    async def analyze_image(
        self, image_bytes: bytes, session_id: str | None = None
    ) -> AnalysisResult:
        """Read label text from a photo and analyze it."""
        with self._claim_session(session_id):
            label_text = await self.ocr_service.read_label(image_bytes)
            return await self._analyze(label_text)

    async def _analyze(self, text: str) -> AnalysisResult:
        payload = await self._request(text)
        analysis_text = resolve_analysis_text(payload)
        if not analysis_text:
            _logger.warning("Analysis response contained no analysis text")
            raise NoAnalysisData()
        ingredients = extract_ingredients(analysis_text)
        if not ingredients:
            _logger.warning(
                "No ingredients parsed from analysis text",
                extra={"analysis_length": len(analysis_text)},
            )
            raise NoIngredientsParsed()
        result = AnalysisResult(
            ingredients=tuple(ingredients),
            overall_score=overall_score(ingredients),
            raw_text=analysis_text,
        )
        _logger.info(
            "Label analyzed: ingredients=%s overall_score=%s",
            len(result.ingredients),
            result.overall_score,
        )
        return result

    async def _request(self, text: str) -> object:
        """Call the analysis service, mapping transport failures to domain errors."""
        try:
            return await self.client.request_analysis(text)
        except httpx.TimeoutException as exc:
            _logger.warning("Analysis request timed out: %s", exc)
            raise AnalysisRequestFailed(FailureReason.TIMEOUT) from exc
        except httpx.TransportError as exc:
            _logger.warning("Analysis service unreachable: %s", exc)
            raise AnalysisRequestFailed(FailureReason.UNREACHABLE) from exc
        except httpx.HTTPStatusError as exc:
            status_code = _status_code_from_exception(exc)
            _logger.warning("Analysis service returned status %s", status_code)
            raise AnalysisRequestFailed(
                FailureReason.SERVER_ERROR,
                f"Analysis failed: server responded with status {status_code}.",
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning("Analysis service returned an unusable response: %s", exc)
            raise AnalysisRequestFailed(FailureReason.SERVER_ERROR) from exc

    @contextmanager
    def _claim_session(self, session_id: str | None) -> Iterator[None]:
        """Allow at most one in-flight analysis per session id."""
        if session_id is None:
            yield
            return
        if session_id in self._active_sessions:
            raise AnalysisInProgress()
        self._active_sessions.add(session_id)
        try:
            yield
        finally:
            self._active_sessions.discard(session_id)


def resolve_analysis_text(payload: object) -> str | None:
    """Pick the analysis prose out of an analysis-service response body.

    Known field names are tried in order. A ``fullOutput`` string takes
    precedence: it is parsed as JSON and searched for the same fields, or used
    as-is when it is not JSON.
    """
    if isinstance(payload, str):
        return payload if payload.strip() else None
    if not isinstance(payload, dict):
        return None
    analysis_text = _first_text_field(payload)
    nested = payload.get(NESTED_OUTPUT_FIELD)
    if not isinstance(nested, str) or not nested.strip():
        return analysis_text
    try:
        parsed = json.loads(nested)
    except ValueError:
        return nested
    if isinstance(parsed, dict):
        return _first_text_field(parsed) or analysis_text
    if isinstance(parsed, str) and parsed.strip():
        return parsed
    return analysis_text


def _first_text_field(data: dict[str, object]) -> str | None:
    for field_name in ANALYSIS_TEXT_FIELDS:
        value = data.get(field_name)
        if isinstance(value, str) and value.strip():
            return value
    return None


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"
