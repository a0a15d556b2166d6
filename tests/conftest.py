"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from label_analyzer.config import Settings
from label_analyzer.containers import AppContainer
from label_analyzer.services.analysis import AnalysisClient, AnalysisService
from label_analyzer.services.ocr import OcrClient, OcrService

SAMPLE_ANALYSIS = (
    "Sugar Analysis: Added sweetener, high glycemic impact. Health Score: 20/100. "
    "Vitamin C Analysis: Antioxidant, beneficial. Health Score: 95/100."
)

SAMPLE_LABEL_TEXT = "Ingredients: sugar, ascorbic acid (vitamin C)"


@dataclass
class FakeAnalysisClient(AnalysisClient):
    """Fake analysis service that records messages and returns a fixed body."""

    payload: object = field(default_factory=lambda: {"output": SAMPLE_ANALYSIS})
    error: Exception | None = None
    messages: list[str] = field(default_factory=list)

    async def request_analysis(self, message: str) -> object:
        self.messages.append(message)
        if self.error is not None:
            raise self.error
        return self.payload


@dataclass
class FakeOcrClient(OcrClient):
    """Fake OCR client returning static text."""

    text: str = "INGREDIENTS: Sugar,\n\tAscorbic Acid (Vitamin C)*"
    error: Exception | None = None
    calls: list[tuple[bytes, str]] = field(default_factory=list)

    async def recognize(self, image_bytes: bytes, language: str) -> str:
        self.calls.append((image_bytes, language))
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def settings() -> Settings:
    return Settings(
        analysis_service_url="https://analysis.test/webhook/analyze-label",
        analysis_timeout_seconds=5.0,
        environment="test",
    )


@pytest.fixture
def analysis_client() -> FakeAnalysisClient:
    return FakeAnalysisClient()


@pytest.fixture
def ocr_client() -> FakeOcrClient:
    return FakeOcrClient()


@pytest.fixture
def container(
    settings: Settings,
    analysis_client: FakeAnalysisClient,
    ocr_client: FakeOcrClient,
) -> AppContainer:
    ocr_service = OcrService(client=ocr_client, language=settings.ocr_language)
    analysis_service = AnalysisService(client=analysis_client, ocr_service=ocr_service)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        ocr_service=ocr_service,
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
