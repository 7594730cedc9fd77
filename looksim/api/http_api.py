"""
HTTP API adapter for the LookSim generation backend.

Architectural role:
- Expose one JSON handler per generation provider plus the S3 upload handler.
- Enforce adapter-level input validation and credential checks.
- Delegate generation work to `looksim.image.service`.
- Translate the `looksim.jobs.errors` taxonomy into JSON error bodies.

Endpoint responsibilities:
- `POST /api/generate`: Gemini hair transformation.
- `POST /api/generate-replicate`: Replicate flux-kontext-pro edit (polled job).
- `POST /api/generate-openai`: OpenAI image edit.
- `POST /api/generate-hair-png`: two-stage transparent hair PNG.
- `POST /api/upload-to-s3`: reference image upload.

Request lifecycle (every `/api/*` route):
1. `OPTIONS` -> 200 with empty body and CORS headers, before anything else.
2. Any other non-POST method -> 405 `{"error": "Method not allowed"}`.
3. Missing provider credential -> 500 `{"error": "... not configured"}`, before
   the body is read and before any network call.
4. Body parsing/validation -> 400 on malformed JSON or missing fields.
5. Provider call; errors mapped to status codes at this boundary.

Error handling strategy:
- Known generation errors map to explicit status codes and messages.
- Anything else is logged and answered with
  500 `{"error": "Internal server error", "message": ...}`.
- No retries; a failed provider attempt is a failed request.

CORS:
- Every response carries permissive CORS headers (`Access-Control-Allow-Origin: *`).
"""

import logging
from functools import lru_cache
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, ValidationError
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from looksim.config.provider_config import JOB_MAX_WAIT_SECONDS
from looksim.image import service as image_service
from looksim.image.data_uri import parse_image
from looksim.jobs.errors import (
    ConfigurationError,
    EmptyOutputError,
    FetchError,
    GenerationError,
    StatusCheckError,
    SubmissionError,
    UnexpectedResponseError,
    UpstreamRequestError,
)
from looksim.storage.s3_upload import S3Uploader

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS,PATCH,DELETE,POST,PUT",
    "Access-Control-Allow-Headers": "Content-Type",
}

# Provider-specific label used when the provider rejects the request.
PROVIDER_FAILURE_LABELS = {
    "gemini": "Failed to generate image",
    "replicate": "Failed to start image generation",
    "openai": "Failed to edit image",
}


# ============================================================
# Request Schemas
# ============================================================
# Every field is optional at the schema level so that missing fields can be
# answered with the handler-specific 400 message instead of a 422.

class HairLength(BaseModel):
    top: Optional[float] = None
    side: Optional[float] = None
    back: Optional[float] = None


class HairSettings(BaseModel):
    model_config = ConfigDict(extra="allow")

    length: Optional[HairLength] = None
    color: Optional[str] = None
    volume: Optional[str] = None
    parting: Optional[str] = None


class GenerateRequest(BaseModel):
    image: Optional[str] = None
    prompt: Optional[str] = None
    styleId: Optional[str] = None
    settings: Optional[HairSettings] = None


class HairPngRequest(BaseModel):
    stylePrompt: Optional[str] = None
    gender: Optional[str] = None


class UploadRequest(BaseModel):
    fileName: Optional[str] = None
    imageData: Optional[str] = None
    contentType: Optional[str] = None


# ============================================================
# Helpers
# ============================================================

def _error(status_code: int, error: str, **extra) -> JSONResponse:
    content = {"error": error}
    content.update({k: v for k, v in extra.items() if v is not None})
    return JSONResponse(status_code=status_code, content=content)


def _internal_error(exc: Exception) -> JSONResponse:
    return _error(500, "Internal server error", message=str(exc) or "Unknown error")


async def _parse_body(request: Request, model):
    """Parse the JSON body into `model`.

    Returns:
        `(parsed, None)` on success, `(None, JSONResponse)` on a 400.
    """
    try:
        body = await request.json()
    except ValueError:
        return None, _error(400, "Invalid JSON body")

    if not isinstance(body, dict):
        return None, _error(400, "Invalid JSON body")

    try:
        return model.model_validate(body), None
    except ValidationError as exc:
        return None, _error(400, "Invalid request body", details=exc.errors(include_url=False, include_context=False))


@lru_cache(maxsize=1)
def get_uploader() -> S3Uploader:
    return S3Uploader.from_env()


# ============================================================
# Generation Handlers
# ============================================================

async def _generate_with(provider: str, request: Request) -> JSONResponse:
    """Shared body of the three photo-editing handlers."""
    try:
        api_key = image_service.require_key(provider)
    except ConfigurationError as exc:
        return _error(500, str(exc))

    payload, error = await _parse_body(request, GenerateRequest)
    if error is not None:
        return error

    if not payload.image or not payload.prompt:
        return _error(400, "Missing image or prompt")

    # styleId identifies the catalog entry for logs only; the prompt carries the style.
    logger.info("Generating with %s (style=%s)", provider, payload.styleId or "-")
    settings = payload.settings.model_dump(exclude_none=True) if payload.settings else None

    try:
        result_image = await image_service.generate_image(
            provider,
            payload.image,
            payload.prompt,
            settings,
            api_key=api_key,
            max_wait=request.app.state.replicate_max_wait,
        )
    except ValueError as exc:
        return _error(400, "Invalid image data", message=str(exc))
    except StatusCheckError as exc:
        logger.error("%s status check failed: %s", provider, exc)
        return _internal_error(exc)
    except UpstreamRequestError as exc:
        status = exc.status_code if exc.status_code and exc.status_code >= 400 else 502
        return _error(status, PROVIDER_FAILURE_LABELS[provider], details=exc.detail)
    except (EmptyOutputError, FetchError) as exc:
        return _error(500, str(exc))
    except UnexpectedResponseError as exc:
        detail = exc.detail if isinstance(exc.detail, str) else None
        return _error(500, str(exc), message=detail)
    except GenerationError as exc:
        logger.error("%s generation failed: %s", provider, exc)
        return _internal_error(exc)
    except Exception as exc:
        logger.exception("Unexpected %s generation failure", provider)
        return _internal_error(exc)

    return JSONResponse(content={"success": True, "resultImage": result_image})


async def generate_gemini(request: Request):
    return await _generate_with("gemini", request)


async def generate_replicate(request: Request):
    return await _generate_with("replicate", request)


async def generate_openai(request: Request):
    return await _generate_with("openai", request)


async def generate_hair_png(request: Request):
    try:
        api_key = image_service.require_key("replicate")
    except ConfigurationError as exc:
        return _error(500, str(exc))

    payload, error = await _parse_body(request, HairPngRequest)
    if error is not None:
        return error

    if not payload.stylePrompt:
        return _error(400, "Missing stylePrompt")

    try:
        result = await image_service.generate_hair_png(
            payload.stylePrompt,
            payload.gender,
            api_key=api_key,
            max_wait=request.app.state.replicate_max_wait,
        )
    except SubmissionError as exc:
        return _error(500, "Failed to generate hair image", details=exc.detail)
    except EmptyOutputError as exc:
        return _error(500, str(exc))
    except GenerationError as exc:
        logger.error("Hair PNG generation failed: %s", exc)
        return _internal_error(exc)
    except Exception as exc:
        logger.exception("Unexpected hair PNG failure")
        return _internal_error(exc)

    return JSONResponse(content={
        "success": True,
        "hairPngUrl": result.data_uri,
        "hasTransparency": result.has_transparency,
    })


# ============================================================
# Upload Handler
# ============================================================

async def upload_to_s3(request: Request):
    payload, error = await _parse_body(request, UploadRequest)
    if error is not None:
        return error

    if not payload.fileName or not payload.imageData:
        return _error(400, "Missing fileName or imageData")

    try:
        inline = parse_image(payload.imageData, default_mime=payload.contentType or "image/png")
        data = inline.to_bytes()
    except ValueError as exc:
        return _error(400, "Invalid imageData", message=str(exc))

    try:
        uploader = get_uploader()
        url = await run_in_threadpool(
            uploader.upload,
            payload.fileName,
            data,
            payload.contentType or inline.mime_type,
        )
    except Exception as exc:
        logger.exception("S3 upload failed for %s", payload.fileName)
        return _error(500, "Upload failed", message=str(exc) or "Unknown error")

    return JSONResponse(content={"success": True, "url": url, "fileName": payload.fileName})


# ============================================================
# App Factory
# ============================================================

ROUTES = {
    "generate": ("/api/generate", generate_gemini),
    "generate-replicate": ("/api/generate-replicate", generate_replicate),
    "generate-openai": ("/api/generate-openai", generate_openai),
    "generate-hair-png": ("/api/generate-hair-png", generate_hair_png),
    "upload-to-s3": ("/api/upload-to-s3", upload_to_s3),
}


def create_app(
    routes=tuple(ROUTES),
    replicate_max_wait: float = JOB_MAX_WAIT_SECONDS,
    title: str = "LookSim Generation API",
) -> FastAPI:
    """Build the ASGI app.

    Args:
        routes: Names from `ROUTES` to mount.
        replicate_max_wait: Polling budget for Replicate jobs, in seconds.
        title: OpenAPI title.
    """
    app = FastAPI(title=title)
    app.state.replicate_max_wait = replicate_max_wait

    for name in routes:
        path, endpoint = ROUTES[name]
        app.add_api_route(path, endpoint, methods=["POST"], name=name)

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    @app.middleware("http")
    async def cors(request: Request, call_next):
        if request.method == "OPTIONS":
            response = Response(status_code=200)
        else:
            response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            message = "Method not allowed"
        elif exc.status_code == 404:
            message = "Not found"
        else:
            message = exc.detail
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": message},
            headers=getattr(exc, "headers", None),
        )

    return app


app = create_app()
