"""
pldaudit API

REST surface over the PLD/FTP self-assessment core.

Endpoints:
    POST /users                         - Register an actor
    POST /forms                         - Create a form
    POST /forms/{id}/assign|submit|return|approve|conclude
    POST /forms/assign-all|submit-all|return-all
    PUT  /questions/{id}/answer         - Record an answer
    GET  /forms/{id}/report             - Report document model (JSON)
    GET  /forms/{id}/report/markdown    - Report rendered as Markdown
    GET  /health                        - Liveness probe

The acting user is identified by the X-Actor-Id header.
"""

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import answers, builder, forms, reports, users
from pldaudit import __version__
from pldaudit.config import Settings
from pldaudit.exceptions import PldAuditError
from pldaudit.packs import EffectivenessPackLoader
from pldaudit.repository import InMemoryRepository
from pldaudit.service import AssessmentService


# =============================================================================
# Logging
# =============================================================================

class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Add extra fields if present
        for key in ("request_id", "form_id", "status", "code", "duration_ms"):
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)
        return json.dumps(log_entry, ensure_ascii=False)


settings = Settings.from_env()

logger = logging.getLogger("pldaudit")
logger.setLevel(getattr(logging, settings.log_level, logging.INFO))
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)


# =============================================================================
# Service wiring
# =============================================================================

STATUS_BY_CODE = {
    "PA_NOT_FOUND": 404,
    "PA_FORBIDDEN": 403,
    "PA_INVALID_STATE": 409,
    "PA_INCOMPLETE_ASSESSMENT": 409,
    "PA_VALIDATION_FAILED": 422,
    "PA_INVALID_CONTENT": 422,
}

service: Optional[AssessmentService] = None


def install_service(s: AssessmentService) -> AssessmentService:
    """Share one service instance with every router."""
    global service
    service = s
    for module in (users, forms, answers, builder, reports):
        module.set_service(s)
    return s


def build_service(app_settings: Settings) -> AssessmentService:
    loader = EffectivenessPackLoader(strict_version=True)
    policy = loader.load(app_settings.policy_pack_path)
    logger.info("Loaded effectiveness pack %s v%s", policy.id, policy.version)
    return AssessmentService(InMemoryRepository(), policy, settings=app_settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the effectiveness pack and wire the service on startup."""
    if service is None:
        install_service(build_service(settings))
    yield
    logger.info("Shutting down")


# =============================================================================
# FastAPI App
# =============================================================================

app = FastAPI(
    title="pldaudit API",
    description="PLD/FTP effectiveness self-assessment: workflow, classification and reports.",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.docs_enabled else None,
    redoc_url="/redoc" if settings.docs_enabled else None,
    openapi_url="/openapi.json" if settings.docs_enabled else None,
)

# CORS (restrict in production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)

app.include_router(users.router)
app.include_router(forms.router)
app.include_router(answers.router)
app.include_router(builder.router)
app.include_router(reports.router)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID to all requests."""
    request_id = str(uuid.uuid4())[:8]
    request.state.request_id = request_id
    start = time.time()

    response = await call_next(request)

    response.headers["X-Request-ID"] = request_id
    logger.info(
        "%s %s -> %d",
        request.method, request.url.path, response.status_code,
        extra={"request_id": request_id, "duration_ms": int((time.time() - start) * 1000)},
    )
    return response


@app.exception_handler(PldAuditError)
async def domain_error_handler(request: Request, exc: PldAuditError):
    """Map domain errors to HTTP statuses with a structured body."""
    status_code = STATUS_BY_CODE.get(exc.code, 500)
    request_id = getattr(request.state, "request_id", "unknown")
    logger.warning(
        "Request failed: %s",
        exc,
        extra={"request_id": request_id, "code": exc.code},
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "error": exc.message,
            "code": exc.code,
            "details": exc.details or None,
            "entity_id": exc.entity_id,
            "request_id": request_id,
        },
    )


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness probe."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
        "policy_id": service.scorer.policy.id if service else None,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.main:app", host="0.0.0.0", port=8000)
