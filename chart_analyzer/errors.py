"""Exceptions raised while handling an analyze request, and their client messages."""

from typing import Optional


class ChartAnalyzerError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidUploadError(ChartAnalyzerError):
    """The multipart body has no usable image."""

    status_code = 400


class MissingApiKeyError(ChartAnalyzerError):
    def __init__(self):
        super().__init__("GEMINI_API_KEY environment variable is not configured.")


METHOD_NOT_ALLOWED = "Method Not Allowed"
NO_IMAGE_UPLOADED = "No image file uploaded."
INVALID_FILE_TYPE = "Invalid file type. Please upload an image."
UNREADABLE_IMAGE = "Uploaded file could not be read as an image."
INVALID_CONTENT_LENGTH = "Invalid Content-Length header."

FAILURE_PREFIXES = {
    "en": "Failed to analyze chart. Please check the image and try again. Error: ",
    "id": "Gagal menganalisis grafik. Silakan periksa gambar dan coba lagi. Error: ",
}


def preferred_language(accept_language: Optional[str]) -> str:
    """Pick the first supported language tag from an Accept-Language header."""
    if not accept_language:
        return "en"
    for item in accept_language.split(","):
        tag = item.split(";")[0].strip().lower()
        primary = tag.split("-")[0]
        if primary in FAILURE_PREFIXES:
            return primary
    return "en"


def failure_message(error: Exception, accept_language: Optional[str] = None) -> str:
    return FAILURE_PREFIXES[preferred_language(accept_language)] + str(error)
