import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pdf_assistant.backend.services.generation_service import GenerationService
from pdf_assistant.backend.utils.config import Settings, get_settings
from pdf_assistant.schemas import STREAMING_ACTIONS, GenerateRequest

logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)

MISSING_FIELDS = "Missing pdfText or action"
PROVIDER_FAILURE = "An error occurred while communicating with the AI."
STREAM_INTERRUPTED = (
    "\n\n---\n\n_The AI stopped before finishing, so this output is incomplete. Please try again._"
)

app = FastAPI(title="PDF Learning Assistant")


def get_generation_service(
    settings: Settings = Depends(get_settings),
) -> Optional[GenerationService]:
    # A fresh client per request; nothing is shared between requests
    if not settings.api_key:
        return None
    return GenerationService(settings)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    if exc.status_code == 405:
        detail = "Method not allowed"
    return JSONResponse({"error": detail}, status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Rejected malformed request body: {exc.errors()}")
    return JSONResponse({"error": MISSING_FIELDS}, status_code=400)


@app.middleware("http")
async def limit_body_size(request: Request, call_next):
    limit = get_settings().max_body_bytes
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > limit:
        return JSONResponse({"error": "Request body too large"}, status_code=413)
    return await call_next(request)


@app.post("/api/gemini")
async def generate(
    request: GenerateRequest,
    settings: Settings = Depends(get_settings),
    service: Optional[GenerationService] = Depends(get_generation_service),
):
    if not request.pdf_text or not request.action:
        raise HTTPException(400, MISSING_FIELDS)

    if not settings.api_key or service is None:
        raise HTTPException(500, "API_KEY is not configured on the server.")

    action = request.action
    logger.info(f"Handling '{action}' for {len(request.pdf_text)} characters of text")

    if action in STREAMING_ACTIONS:
        stream = service.stream_text(action, request.pdf_text)
        try:
            # Pull the first chunk before headers go out so early failures stay a 500
            first = await stream.__anext__()
        except StopAsyncIteration:
            first = ""
        except Exception:
            logger.exception("Error calling Gemini API")
            raise HTTPException(500, PROVIDER_FAILURE)
        return StreamingResponse(
            relay(first, stream),
            media_type="text/plain; charset=utf-8",
        )

    if action == "quiz":
        try:
            quiz = await service.generate_quiz(request.pdf_text)
        except Exception:
            logger.exception("Error calling Gemini API")
            raise HTTPException(500, PROVIDER_FAILURE)
        return quiz.model_dump(exclude_none=True)

    raise HTTPException(400, "Invalid action specified")


async def relay(first: str, stream):
    """Forward provider chunks verbatim; closing this generator closes the upstream stream."""
    try:
        if first:
            yield first
        async for text in stream:
            yield text
    except Exception:
        # Headers are already sent; flag the truncation in the body itself
        logger.exception("Gemini stream failed mid-response")
        yield STREAM_INTERRUPTED
    finally:
        await stream.aclose()
