"""Helpers for image payloads exchanged with OCR clients."""

import base64
import binascii

from label_analyzer.domain.errors import InvalidImage


def decode_image_payload(payload: str) -> bytes:
    """Decode a ``data:image/...;base64,`` URL or bare base64 into bytes."""
    data = payload.strip()
    if data.startswith("data:"):
        header, _, data = data.partition(",")
        mime_type = header[len("data:") :].split(";", maxsplit=1)[0]
        if not mime_type.startswith("image/") or ";base64" not in header:
            raise InvalidImage()
    if not data:
        raise InvalidImage()
    try:
        image_bytes = base64.b64decode(data, validate=True)
    except binascii.Error as exc:
        raise InvalidImage() from exc
    if not image_bytes:
        raise InvalidImage()
    return image_bytes


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    if image_bytes[:6] in {b"GIF87a", b"GIF89a"}:
        return "image/gif"
    return "image/jpeg"
