"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from label_analyzer.adapters.analysis_client import HttpxAnalysisClient
from label_analyzer.adapters.openai_ocr_client import OpenAIOcrClient
from label_analyzer.adapters.tesseract_ocr_client import TesseractOcrClient
from label_analyzer.config import Settings
from label_analyzer.services.analysis import AnalysisService
from label_analyzer.services.ocr import OcrClient, OcrService

OCR_BACKENDS = ("tesseract", "openai")


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    ocr_service: OcrService
    analysis_service: AnalysisService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    closers: list[Callable[[], Awaitable[None]]] = []

    ocr_client: OcrClient
    backend = resolved_settings.ocr_backend.strip().lower()
    if backend == "openai":
        if not resolved_settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required when OCR_BACKEND=openai")
        openai_client = OpenAIOcrClient.create(
            api_key=resolved_settings.openai_api_key,
            model=resolved_settings.openai_model,
            store=resolved_settings.openai_store,
        )
        closers.append(openai_client.close)
        ocr_client = openai_client
    elif backend == "tesseract":
        ocr_client = TesseractOcrClient(tesseract_cmd=resolved_settings.tesseract_cmd)
    else:
        raise ValueError(
            f"Unknown OCR backend {resolved_settings.ocr_backend!r}; "
            f"expected one of {', '.join(OCR_BACKENDS)}"
        )

    ocr_service = OcrService(client=ocr_client, language=resolved_settings.ocr_language)
    analysis_client = HttpxAnalysisClient.create(
        url=resolved_settings.analysis_service_url,
        timeout_seconds=resolved_settings.analysis_timeout_seconds,
    )
    closers.append(analysis_client.close)
    analysis_service = AnalysisService(client=analysis_client, ocr_service=ocr_service)

    async def close_resources() -> None:
        for close in closers:
            await close()

    return AppContainer(
        settings=resolved_settings,
        ocr_service=ocr_service,
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
