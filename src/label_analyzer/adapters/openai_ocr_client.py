"""OpenAI Responses API client for label transcription."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from label_analyzer.services.images import to_data_url
from label_analyzer.services.ocr import OcrClient

_LANGUAGE_NAMES = {
    "eng": "English",
    "deu": "German",
    "fra": "French",
    "spa": "Spanish",
    "ita": "Italian",
}


@dataclass
class OpenAIOcrClient(OcrClient):
    """OCR client that asks a vision model to transcribe the label."""

    client: AsyncOpenAI
    model: str
    store: bool = False

    @classmethod
    def create(cls, api_key: str, model: str, store: bool) -> "OpenAIOcrClient":
        """Create an OpenAI OCR client."""
        return cls(client=AsyncOpenAI(api_key=api_key), model=model, store=store)

    async def recognize(self, image_bytes: bytes, language: str) -> str:
        """Return the label text transcribed by the model, or an empty string."""
        language_name = _LANGUAGE_NAMES.get(language, language)
        prompt = (
            "Transcribe the ingredient list printed on this food label exactly as "
            f"written. The label is in {language_name}. "
            "Return only the transcribed text, or nothing if no text is legible."
        )
        response = await self.client.responses.create(
            model=self.model,
            input=[
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": prompt},
                        {"type": "input_image", "image_url": to_data_url(image_bytes)},
                    ],
                }
            ],
            store=self.store,
        )
        return response.output_text or ""

    async def close(self) -> None:
        """Close the underlying OpenAI HTTP session."""
        await self.client.close()
