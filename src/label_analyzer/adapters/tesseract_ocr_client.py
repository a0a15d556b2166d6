"""Tesseract OCR client."""

import asyncio
import io
from dataclasses import dataclass

import pytesseract
from PIL import Image

from label_analyzer.services.ocr import OcrClient


@dataclass
class TesseractOcrClient(OcrClient):
    """OCR client running the local Tesseract binary via pytesseract."""

    tesseract_cmd: str | None = None

    def __post_init__(self) -> None:
        # pytesseract reads the binary path from module state.
        if self.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd

    async def recognize(self, image_bytes: bytes, language: str) -> str:
        """Recognize text off the event loop; Tesseract blocks."""
        return await asyncio.to_thread(self._recognize, image_bytes, language)

    def _recognize(self, image_bytes: bytes, language: str) -> str:
        with Image.open(io.BytesIO(image_bytes)) as image:
            return pytesseract.image_to_string(image.convert("RGB"), lang=language)
