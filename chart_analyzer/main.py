"""
Chart Analyzer API
FastAPI surface for local runs: POST /api/analyze-chart, GET /api/health
"""

import logging
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from chart_analyzer import __version__, config
from chart_analyzer.errors import (
    NO_IMAGE_UPLOADED,
    ChartAnalyzerError,
    InvalidUploadError,
    MissingApiKeyError,
    failure_message,
)
from chart_analyzer.schemas import AnalyzeResponse, ChartUpload, ErrorResponse
from chart_analyzer.service import analyze_chart
from chart_analyzer.uploads import FORM_FIELDS, IMAGE_FIELD, build_upload

logging.basicConfig(level=config.LOG_LEVEL)
log = logging.getLogger(__name__)

# ============================================================
# APP CONFIGURATION
# ============================================================

app = FastAPI(title="Chart Analyzer API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ChartAnalyzerError)
async def chart_analyzer_error_handler(request: Request, exc: ChartAnalyzerError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Framework errors (405, malformed multipart) use the same {message} envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


# ============================================================
# UPLOAD
# ============================================================

def _first(form: FormData, name: str):
    values = form.getlist(name)
    return values[0] if values else None


async def read_upload(request: Request) -> ChartUpload:
    content_type = request.headers.get("content-type", "")
    if not content_type.lower().startswith("multipart/form-data"):
        raise InvalidUploadError(NO_IMAGE_UPLOADED)

    # Leaving the block closes the spooled temp files behind each UploadFile
    async with request.form() as form:
        image = _first(form, IMAGE_FIELD)

        if isinstance(image, UploadFile):
            image_bytes = await image.read()
            mime_type = image.content_type
        elif image:
            # A plain text field named "image"
            image_bytes = image.encode("utf-8")
            mime_type = "text/plain"
        else:
            raise InvalidUploadError(NO_IMAGE_UPLOADED)

        fields = {}
        for name in FORM_FIELDS:
            value = _first(form, name)
            fields[name] = value if isinstance(value, str) else None

    return build_upload(image_bytes, mime_type, fields)


# ============================================================
# ENDPOINTS
# ============================================================

@app.post(
    "/api/analyze-chart",
    response_model=AnalyzeResponse,
    responses={400: {"model": ErrorResponse}, 405: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def analyze_chart_endpoint(request: Request):
    """POST /api/analyze-chart - multipart chart upload -> Gemini verdict"""
    api_key = config.get_gemini_api_key()
    if not api_key:
        raise MissingApiKeyError()

    try:
        upload = await read_upload(request)
        analysis = await run_in_threadpool(analyze_chart, upload, api_key)
    except (ChartAnalyzerError, StarletteHTTPException):
        raise
    except Exception as e:
        log.exception("Error in analyze-chart API")
        return JSONResponse(
            status_code=500,
            content={"message": failure_message(e, request.headers.get("accept-language"))},
        )

    return AnalyzeResponse(analysis=analysis).to_dict()


@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "model": config.GEMINI_MODEL,
        "timestamp": datetime.now().isoformat(),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
