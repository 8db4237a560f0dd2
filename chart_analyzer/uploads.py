"""
Multipart upload handling.
Both HTTP surfaces funnel their form data through build_upload().
"""

import io
import logging
from email import policy
from email.parser import BytesParser
from typing import Dict, Mapping, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from chart_analyzer.errors import (
    INVALID_FILE_TYPE,
    NO_IMAGE_UPLOADED,
    UNREADABLE_IMAGE,
    InvalidUploadError,
)
from chart_analyzer.schemas import ChartUpload

log = logging.getLogger(__name__)

IMAGE_FIELD = "image"

# multipart field name -> ChartUpload attribute
FORM_FIELDS = {
    "assetType": "asset_type",
    "timeframe": "timeframe",
    "additionalNotes": "additional_notes",
    "outputLanguage": "output_language",
}


def parse_multipart(body: bytes, content_type: Optional[str]) -> ChartUpload:
    """Parse a raw multipart/form-data body (the serverless handler has no framework to do it)."""
    if not content_type or not content_type.lower().startswith("multipart/form-data"):
        raise InvalidUploadError(NO_IMAGE_UPLOADED)

    head = f"Content-Type: {content_type}\r\nMIME-Version: 1.0\r\n\r\n".encode("latin-1", errors="replace")
    message = BytesParser(policy=policy.HTTP).parsebytes(head + body)
    if not message.is_multipart():
        raise InvalidUploadError(NO_IMAGE_UPLOADED)

    fields: Dict[str, str] = {}
    image: Optional[Tuple[bytes, str]] = None

    for part in message.iter_parts():
        name = part.get_param("name", header="content-disposition")
        if not name:
            continue
        payload = part.get_payload(decode=True) or b""

        if name == IMAGE_FIELD:
            # First file wins, like every other field
            if image is None:
                image = (payload, part.get_content_type())
        elif name in FORM_FIELDS and name not in fields:
            fields[name] = _decode_text(payload, part.get_content_charset())

    if image is None:
        raise InvalidUploadError(NO_IMAGE_UPLOADED)

    image_bytes, mime_type = image
    return build_upload(image_bytes, mime_type, fields)


def _decode_text(payload: bytes, charset: Optional[str]) -> str:
    try:
        return payload.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return payload.decode("utf-8", errors="replace")


def build_upload(
    image_bytes: Optional[bytes],
    mime_type: Optional[str],
    fields: Mapping[str, Optional[str]],
) -> ChartUpload:
    """Validate the image part and normalize the text fields into a ChartUpload."""
    if not image_bytes:
        raise InvalidUploadError(NO_IMAGE_UPLOADED)

    mime_type = (mime_type or "").strip()
    if not mime_type.lower().startswith("image/"):
        raise InvalidUploadError(INVALID_FILE_TYPE)

    dimensions = image_size(image_bytes, mime_type)

    values = {attr: (fields.get(name) or "").strip() for name, attr in FORM_FIELDS.items()}
    upload = ChartUpload(image_bytes=image_bytes, mime_type=mime_type, **values)

    log.info(
        "Chart upload: asset=%r timeframe=%r mime=%s size=%d bytes dimensions=%s",
        upload.asset_type, upload.timeframe, mime_type, len(image_bytes),
        "%dx%d" % dimensions if dimensions else "unknown",
    )
    return upload


def pillow_reads(mime_type: str) -> bool:
    Image.init()
    return mime_type.lower() in {mime.lower() for mime in Image.MIME.values()}


def image_size(image_bytes: bytes, mime_type: str) -> Optional[Tuple[int, int]]:
    """Return (width, height) for logging.

    Formats Pillow claims (PNG, JPEG, WebP, ...) must decode, otherwise
    InvalidUploadError. Other image types (HEIC, HEIF, AVIF on older Pillow)
    go to Gemini as-is and the size is None.
    """
    strict = pillow_reads(mime_type)
    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            image.verify()
            return image.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        if strict:
            raise InvalidUploadError(UNREADABLE_IMAGE) from e
        log.info("Pillow cannot read %s upload, forwarding it unchecked", mime_type)
        return None
