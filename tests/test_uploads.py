from __future__ import annotations

import pytest

from chart_analyzer.errors import (
    INVALID_FILE_TYPE,
    NO_IMAGE_UPLOADED,
    UNREADABLE_IMAGE,
    InvalidUploadError,
)
from chart_analyzer.uploads import build_upload, image_size, parse_multipart, pillow_reads
from tests.conftest import multipart_body

HEIC_BYTES = b"\x00\x00\x00\x18ftypheic\x00\x00\x00\x00mif1heic" + b"\x00" * 64


def test_parse_multipart_reads_image_and_fields(png_bytes):
    body, content_type = multipart_body(
        fields={
            "assetType": "BTC/USDT",
            "timeframe": "4h",
            "additionalNotes": "Watching the 200 EMA",
            "outputLanguage": "Indonesian",
        },
        files={"image": ("chart.png", png_bytes, "image/png")},
    )

    upload = parse_multipart(body, content_type)

    assert upload.image_bytes == png_bytes
    assert upload.mime_type == "image/png"
    assert upload.asset_type == "BTC/USDT"
    assert upload.timeframe == "4h"
    assert upload.additional_notes == "Watching the 200 EMA"
    assert upload.output_language == "Indonesian"


def test_parse_multipart_optional_fields_default_to_empty(png_bytes):
    body, content_type = multipart_body(files={"image": ("chart.png", png_bytes, "image/png")})

    upload = parse_multipart(body, content_type)

    assert upload.asset_type == ""
    assert upload.timeframe == ""
    assert upload.additional_notes == ""
    assert upload.output_language == ""


def test_parse_multipart_keeps_utf8_notes(png_bytes):
    body, content_type = multipart_body(
        fields={"additionalNotes": "Harga tembus level psikologis ¥"},
        files={"image": ("chart.png", png_bytes, "image/png")},
    )

    upload = parse_multipart(body, content_type)

    assert upload.additional_notes == "Harga tembus level psikologis ¥"


def test_parse_multipart_ignores_unknown_fields(png_bytes):
    body, content_type = multipart_body(
        fields={"symbol": "ETHUSDT"},
        files={"image": ("chart.png", png_bytes, "image/png")},
    )

    upload = parse_multipart(body, content_type)

    assert upload.asset_type == ""


def test_parse_multipart_without_image():
    body, content_type = multipart_body(fields={"assetType": "EUR/USD"})

    with pytest.raises(InvalidUploadError) as excinfo:
        parse_multipart(body, content_type)

    assert excinfo.value.status_code == 400
    assert excinfo.value.message == NO_IMAGE_UPLOADED


def test_parse_multipart_rejects_non_multipart_body():
    with pytest.raises(InvalidUploadError) as excinfo:
        parse_multipart(b'{"image": "x"}', "application/json")

    assert excinfo.value.message == NO_IMAGE_UPLOADED


def test_parse_multipart_rejects_missing_boundary(png_bytes):
    body, _ = multipart_body(files={"image": ("chart.png", png_bytes, "image/png")})

    with pytest.raises(InvalidUploadError):
        parse_multipart(body, "multipart/form-data")


def test_parse_multipart_rejects_non_image_mime_type():
    body, content_type = multipart_body(files={"image": ("notes.txt", b"hello", "text/plain")})

    with pytest.raises(InvalidUploadError) as excinfo:
        parse_multipart(body, content_type)

    assert excinfo.value.message == INVALID_FILE_TYPE


def test_build_upload_rejects_empty_image():
    with pytest.raises(InvalidUploadError) as excinfo:
        build_upload(b"", "image/png", {})

    assert excinfo.value.message == NO_IMAGE_UPLOADED


def test_build_upload_rejects_undecodable_image():
    with pytest.raises(InvalidUploadError) as excinfo:
        build_upload(b"definitely not a png", "image/png", {})

    assert excinfo.value.message == UNREADABLE_IMAGE


def test_build_upload_strips_field_whitespace(png_bytes):
    upload = build_upload(png_bytes, "image/png", {"assetType": "  Gold  ", "timeframe": None})

    assert upload.asset_type == "Gold"
    assert upload.timeframe == ""


def test_image_size(png_bytes):
    assert image_size(png_bytes, "image/png") == (64, 48)


def test_pillow_reads_registered_formats():
    assert pillow_reads("image/png")
    assert pillow_reads("IMAGE/JPEG")
    assert not pillow_reads("image/heic")


def test_build_upload_forwards_formats_pillow_cannot_read():
    upload = build_upload(HEIC_BYTES, "image/heic", {"assetType": "NVDA"})

    assert upload.image_bytes == HEIC_BYTES
    assert upload.mime_type == "image/heic"
    assert upload.asset_type == "NVDA"


def test_image_size_unknown_for_unregistered_format():
    assert image_size(HEIC_BYTES, "image/heif") is None
