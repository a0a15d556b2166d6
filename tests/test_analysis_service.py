"""Tests for the label analysis service."""

import asyncio
import json

import httpx
import pytest

from label_analyzer.domain.errors import (
    AnalysisInProgress,
    AnalysisRequestFailed,
    FailureReason,
    InsufficientText,
    MissingInput,
    NoAnalysisData,
    NoIngredientsParsed,
    NoTextRecognized,
)
from label_analyzer.services.analysis import AnalysisService, resolve_analysis_text
from label_analyzer.services.ocr import OcrService
from tests.conftest import SAMPLE_ANALYSIS, FakeAnalysisClient, FakeOcrClient


def _service(
    analysis_client: FakeAnalysisClient | None = None,
    ocr_client: FakeOcrClient | None = None,
) -> AnalysisService:
    return AnalysisService(
        client=analysis_client or FakeAnalysisClient(),
        ocr_service=OcrService(client=ocr_client or FakeOcrClient()),
    )


def test_analyze_text_returns_scored_result() -> None:
    client = FakeAnalysisClient()
    service = _service(client)

    result = asyncio.run(service.analyze_text("sugar, ascorbic acid"))

    assert client.messages == ["sugar, ascorbic acid"]
    assert [(item.name, item.health_score) for item in result.ingredients] == [
        ("Sugar", 20),
        ("Vitamin C", 95),
    ]
    assert result.overall_score == 58
    assert result.raw_text == SAMPLE_ANALYSIS


def test_analyze_text_rejects_blank_input() -> None:
    client = FakeAnalysisClient()
    service = _service(client)

    with pytest.raises(MissingInput):
        asyncio.run(service.analyze_text("  \n "))

    assert client.messages == []


def test_analyze_image_sends_normalized_ocr_text() -> None:
    client = FakeAnalysisClient()
    ocr_client = FakeOcrClient()
    service = _service(client, ocr_client)

    result = asyncio.run(service.analyze_image(b"image-bytes"))

    assert ocr_client.calls == [(b"image-bytes", "eng")]
    assert client.messages == ["INGREDIENTS Sugar, Ascorbic Acid (Vitamin C)"]
    assert len(result.ingredients) == 2


def test_analyze_image_fails_when_ocr_errors() -> None:
    client = FakeAnalysisClient()
    service = _service(client, FakeOcrClient(error=RuntimeError("tesseract missing")))

    with pytest.raises(NoTextRecognized):
        asyncio.run(service.analyze_image(b"image-bytes"))

    assert client.messages == []


def test_analyze_image_fails_when_ocr_finds_nothing() -> None:
    service = _service(ocr_client=FakeOcrClient(text="  \n"))

    with pytest.raises(NoTextRecognized):
        asyncio.run(service.analyze_image(b"image-bytes"))


def test_analyze_image_fails_when_text_too_short() -> None:
    client = FakeAnalysisClient()
    service = _service(client, FakeOcrClient(text="|*#\n%"))

    with pytest.raises(InsufficientText):
        asyncio.run(service.analyze_image(b"image-bytes"))

    assert client.messages == []


def test_no_usable_analysis_text_raises_no_analysis_data() -> None:
    service = _service(FakeAnalysisClient(payload={"output": "", "status": "done"}))

    with pytest.raises(NoAnalysisData):
        asyncio.run(service.analyze_text("sugar"))


def test_unparseable_analysis_raises_no_ingredients_parsed() -> None:
    payload = {"output": "This product contains sugar and should be limited."}
    service = _service(FakeAnalysisClient(payload=payload))

    with pytest.raises(NoIngredientsParsed):
        asyncio.run(service.analyze_text("sugar"))


@pytest.mark.parametrize(
    ("error", "reason", "status_code"),
    [
        (httpx.ReadTimeout("timed out"), FailureReason.TIMEOUT, 504),
        (httpx.ConnectError("refused"), FailureReason.UNREACHABLE, 502),
        (json.JSONDecodeError("bad", "<html>", 0), FailureReason.SERVER_ERROR, 502),
    ],
)
def test_transport_errors_map_to_request_failed(
    error: Exception, reason: FailureReason, status_code: int
) -> None:
    service = _service(FakeAnalysisClient(error=error))

    with pytest.raises(AnalysisRequestFailed) as exc_info:
        asyncio.run(service.analyze_text("sugar"))

    assert exc_info.value.reason is reason
    assert exc_info.value.status_code == status_code


def test_status_errors_report_status_code() -> None:
    request = httpx.Request("POST", "https://analysis.test/webhook")
    response = httpx.Response(500, request=request)
    error = httpx.HTTPStatusError("server error", request=request, response=response)
    service = _service(FakeAnalysisClient(error=error))

    with pytest.raises(AnalysisRequestFailed) as exc_info:
        asyncio.run(service.analyze_text("sugar"))

    assert exc_info.value.reason is FailureReason.SERVER_ERROR
    assert "500" in exc_info.value.message


def test_session_guard_rejects_concurrent_requests() -> None:
    class SlowAnalysisClient(FakeAnalysisClient):
        async def request_analysis(self, message: str) -> object:
            await asyncio.sleep(0.01)
            return await super().request_analysis(message)

    service = _service(SlowAnalysisClient())

    async def run_both() -> list[object]:
        return await asyncio.gather(
            service.analyze_text("sugar", session_id="session-1"),
            service.analyze_text("salt", session_id="session-1"),
            return_exceptions=True,
        )

    first, second = asyncio.run(run_both())

    assert first.overall_score == 58
    assert isinstance(second, AnalysisInProgress)


def test_session_guard_releases_after_failure() -> None:
    client = FakeAnalysisClient(error=httpx.ConnectError("refused"))
    service = _service(client)

    with pytest.raises(AnalysisRequestFailed):
        asyncio.run(service.analyze_text("sugar", session_id="session-1"))

    client.error = None
    result = asyncio.run(service.analyze_text("sugar", session_id="session-1"))

    assert result.overall_score == 58


@pytest.mark.parametrize(
    "field_name", ["analysis_text", "ai_analysis", "summary", "output"]
)
def test_resolve_analysis_text_field_names(field_name: str) -> None:
    assert resolve_analysis_text({field_name: "text"}) == "text"


def test_resolve_analysis_text_prefers_earlier_fields() -> None:
    payload = {"output": "later", "ai_analysis": "earlier", "analysis_text": "  "}

    assert resolve_analysis_text(payload) == "earlier"


def test_resolve_analysis_text_unwraps_nested_json() -> None:
    payload = {
        "output": "top level",
        "fullOutput": json.dumps({"summary": "nested"}),
    }

    assert resolve_analysis_text(payload) == "nested"


def test_resolve_analysis_text_nested_without_fields_keeps_top_level() -> None:
    payload = {"output": "top level", "fullOutput": json.dumps({"status": "ok"})}

    assert resolve_analysis_text(payload) == "top level"


def test_resolve_analysis_text_uses_unparseable_nested_value() -> None:
    payload = {"output": "top level", "fullOutput": "Sugar Analysis: sweet"}

    assert resolve_analysis_text(payload) == "Sugar Analysis: sweet"


def test_resolve_analysis_text_without_usable_text() -> None:
    assert resolve_analysis_text({"status": "ok"}) is None
    assert resolve_analysis_text({"output": 42}) is None
    assert resolve_analysis_text([{"output": "text"}]) is None
    assert resolve_analysis_text(None) is None
    assert resolve_analysis_text("plain text body") == "plain text body"
