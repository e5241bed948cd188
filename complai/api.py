"""
FastAPI REST API for the Complai service.

Provides /complai/ask, /complai/redact, /health and a home route.
The HTTP status of every response is derived from ErrorKind alone.

Usage:
    uvicorn complai.api:app --reload
    # or
    python -m complai.api
"""

import logging
import time

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response

from complai.api_models import (
    AskRequest, RedactRequest,
    PublicResponse, HomeResponse, HealthResponse,
)
from complai.logging_config import setup_logging
from complai.orchestrator import ComplaintOrchestrator, create_orchestrator
from complai.schemas import CLIENT_FORMATS_HELP, ComplaintResponse, ErrorKind, OutputFormat

load_dotenv()
setup_logging()
logger = logging.getLogger(__name__)

# --- App setup ---

app = FastAPI(
    title="Complai API",
    description="Civic assistant and complaint-letter drafting for El Prat de Llobregat",
    version="0.1.0",
)

STATUS_BY_KIND = {
    ErrorKind.NONE: 200,
    ErrorKind.VALIDATION: 400,
    ErrorKind.REFUSAL: 422,
    ErrorKind.UPSTREAM: 502,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.INTERNAL: 500,
}


# --- Orchestrator lifecycle ---

_orchestrator: ComplaintOrchestrator | None = None


def get_orchestrator() -> ComplaintOrchestrator:
    """Get the orchestrator, creating it on first call."""
    global _orchestrator
    if _orchestrator is None:
        logger.info("Initializing orchestrator...")
        _orchestrator = create_orchestrator()
    return _orchestrator


def to_http(result: ComplaintResponse) -> Response:
    """Translate an orchestrator result into an HTTP response."""
    if result.success and result.document is not None:
        return Response(
            content=result.document,
            media_type="application/pdf",
            headers={
                "Content-Length": str(len(result.document)),
                "Content-Disposition": 'attachment; filename="complaint.pdf"',
            },
        )
    body = PublicResponse.from_result(result).model_dump(by_alias=True)
    return JSONResponse(status_code=STATUS_BY_KIND[result.error_kind], content=body)


# --- Request logging middleware ---

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with timing."""
    start = time.time()
    response = await call_next(request)
    elapsed = time.time() - start
    logger.info(
        f"{request.method} {request.url.path} "
        f"status={response.status_code} "
        f"time={elapsed:.3f}s"
    )
    return response


# --- Routes ---

@app.get("/", response_model=HomeResponse)
def home():
    return HomeResponse(message="Welcome to the Complai Home Page!")


@app.get("/health", response_model=HealthResponse)
def health(orchestrator: ComplaintOrchestrator = Depends(get_orchestrator)):
    """System health check."""
    return HealthResponse(
        status="healthy",
        provider=getattr(orchestrator.provider, "provider_name", "unknown"),
        active_conversations=len(orchestrator.store),
    )


@app.post(
    "/complai/ask",
    response_model=PublicResponse,
    responses={400: {"model": PublicResponse}, 422: {"model": PublicResponse},
               502: {"model": PublicResponse}, 504: {"model": PublicResponse}},
)
async def ask(req: AskRequest, orchestrator: ComplaintOrchestrator = Depends(get_orchestrator)):
    """Answer a question about El Prat de Llobregat."""
    logger.info("Ask request: conversation=%s", req.conversation_id)
    result = await orchestrator.ask(req.text, req.conversation_id)
    return to_http(result)


@app.post(
    "/complai/redact",
    response_model=PublicResponse,
    responses={200: {"content": {"application/pdf": {}}},
               400: {"model": PublicResponse}, 422: {"model": PublicResponse},
               502: {"model": PublicResponse}, 504: {"model": PublicResponse}},
)
async def redact(req: RedactRequest, orchestrator: ComplaintOrchestrator = Depends(get_orchestrator)):
    """
    Draft a formal complaint letter to the Ajuntament.

    Returns JSON with the letter text, or the letter as a PDF when the
    client asks for one (or leaves the choice to the model with auto).
    """
    requested = OutputFormat.AUTO
    if req.format is not None:
        requested = OutputFormat.from_string(req.format)
        if not OutputFormat.is_client_supported(requested):
            logger.info("Redact request rejected: unsupported format %r", req.format)
            return to_http(ComplaintResponse.failure(
                ErrorKind.VALIDATION,
                f"Unsupported format '{req.format}'. {CLIENT_FORMATS_HELP}",
            ))

    logger.info("Redact request: format=%s, conversation=%s", requested.value, req.conversation_id)
    result = await orchestrator.redact(req.text, requested, req.conversation_id)
    return to_http(result)


# --- Entrypoint for python -m ---

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("complai.api:app", host="0.0.0.0", port=8000, reload=True)
