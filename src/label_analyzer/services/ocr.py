"""Label text recognition."""

import logging
from dataclasses import dataclass
from typing import Protocol

from label_analyzer.domain.errors import NoTextRecognized
from label_analyzer.services.normalizer import normalize_label_text

_logger = logging.getLogger(__name__)


class OcrClient(Protocol):
    """Interface for recognizing text in an image."""

    async def recognize(self, image_bytes: bytes, language: str) -> str:
        """Return the raw text recognized in the image."""


@dataclass
class OcrService:
    """Service that reads label text from a photo and cleans it up."""

    client: OcrClient
    language: str = "eng"

    async def read_label(self, image_bytes: bytes) -> str:
        """Recognize and normalize label text.

        Raises NoTextRecognized when the client fails or finds nothing, and
        InsufficientText when too little survives normalization.
        """
        try:
            raw_text = await self.client.recognize(image_bytes, language=self.language)
        except Exception as exc:
            _logger.exception("OCR recognition failed")
            raise NoTextRecognized() from exc
        if not raw_text or not raw_text.strip():
            _logger.info("OCR returned no text")
            raise NoTextRecognized()
        return normalize_label_text(raw_text)
