"""
Vercel Serverless Function for Chart Analysis
Handles: multipart upload, Gemini Vision call, reply parsing
"""

from http.server import BaseHTTPRequestHandler
import json
import logging

from chart_analyzer import config
from chart_analyzer.errors import (
    INVALID_CONTENT_LENGTH,
    METHOD_NOT_ALLOWED,
    ChartAnalyzerError,
    InvalidUploadError,
    MissingApiKeyError,
    failure_message,
)
from chart_analyzer.schemas import AnalyzeResponse
from chart_analyzer.service import analyze_chart
from chart_analyzer.uploads import parse_multipart

logging.basicConfig(level=config.LOG_LEVEL)
log = logging.getLogger(__name__)


class handler(BaseHTTPRequestHandler):
    def do_POST(self):
        try:
            post_data = self.rfile.read(self._content_length())

            api_key = config.get_gemini_api_key()
            if not api_key:
                raise MissingApiKeyError()

            upload = parse_multipart(post_data, self.headers.get('Content-Type'))
            analysis = analyze_chart(upload, api_key)

            self._send_json(200, AnalyzeResponse(analysis=analysis).to_dict())

        except ChartAnalyzerError as e:
            self._send_json(e.status_code, {"message": e.message})

        except Exception as e:
            log.exception("Error in analyze-chart API")
            message = failure_message(e, self.headers.get('Accept-Language'))
            self._send_json(500, {"message": message})

    def _method_not_allowed(self):
        self._send_json(405, {"message": METHOD_NOT_ALLOWED}, allow="POST")

    def __getattr__(self, name):
        # The base class dispatches on hasattr(self, "do_" + command), so this
        # covers every verb except POST, including TRACE, CONNECT and unknown ones
        if name.startswith('do_'):
            return self._method_not_allowed
        raise AttributeError(name)

    def _content_length(self) -> int:
        raw = self.headers.get('Content-Length', '0')
        try:
            length = int(raw)
        except ValueError:
            raise InvalidUploadError(INVALID_CONTENT_LENGTH) from None
        if length < 0:
            raise InvalidUploadError(INVALID_CONTENT_LENGTH)
        return length

    def _send_json(self, status: int, payload: dict, allow: str = None):
        body = json.dumps(payload).encode()
        self.send_response(status)
        self.send_header('Content-Type', 'application/json')
        self.send_header('Content-Length', str(len(body)))
        self.send_header('Access-Control-Allow-Origin', '*')
        if allow:
            self.send_header('Allow', allow)
        self.end_headers()
        if self.command != 'HEAD':
            self.wfile.write(body)

    def log_message(self, format, *args):
        log.info("%s - %s", self.address_string(), format % args)
