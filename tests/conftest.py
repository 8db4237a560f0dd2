"""
Pytest fixtures for Chart Analyzer tests. The Gemini call is always patched out.
"""

from __future__ import annotations

import io
import threading
from http.server import HTTPServer

import pytest
from PIL import Image


@pytest.fixture
def png_bytes():
    buffer = io.BytesIO()
    Image.new("RGB", (64, 48), (18, 24, 38)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    return "test-key"


@pytest.fixture
def no_api_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from chart_analyzer.main import app

    return TestClient(app)


@pytest.fixture
def serverless_url():
    """Serve the Vercel handler on an ephemeral port."""
    from api.analyze_chart import handler

    server = HTTPServer(("127.0.0.1", 0), handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_port}/api/analyze-chart"
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


def multipart_body(fields=None, files=None, boundary="----chartanalyzerboundary"):
    """Hand-built multipart/form-data body, returned with its Content-Type."""
    chunks = []
    for name, value in (fields or {}).items():
        chunks.append(f"--{boundary}\r\n".encode())
        chunks.append(f'Content-Disposition: form-data; name="{name}"\r\n\r\n'.encode())
        chunks.append(value.encode("utf-8"))
        chunks.append(b"\r\n")
    for name, (filename, content, mime_type) in (files or {}).items():
        chunks.append(f"--{boundary}\r\n".encode())
        chunks.append(
            f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'.encode()
        )
        chunks.append(f"Content-Type: {mime_type}\r\n\r\n".encode())
        chunks.append(content)
        chunks.append(b"\r\n")
    chunks.append(f"--{boundary}--\r\n".encode())
    return b"".join(chunks), f"multipart/form-data; boundary={boundary}"
