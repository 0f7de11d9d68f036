# medintake/main.py
"""
MedIntake FastAPI Application

HTTP adapter over the WorkflowOrchestrator. Every route maps onto one
orchestrator operation; the workflow rules themselves live in medintake.core.
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import os

from medintake.core import orchestrator as orchestrator_module
from medintake.core.config import settings, validate_settings
from medintake.core.exceptions import (
    AcquisitionFailure,
    IntakeBaseException,
    SessionError,
    ValidationError,
    WorkflowError,
)
from medintake.core.logging_config import setup_logging
from medintake.core.orchestrator import WorkflowOrchestrator, init_orchestrator
from medintake.core.rate_limit_config import RATE_LIMITS, get_rate_limit_message, get_real_ip, rate_limit_group
from medintake.models.flow_models import VerificationStatus, WorkflowKind
from medintake.services.notification_service import LoggingNotificationSink

logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan event handler for startup/shutdown"""
    logger.info("=" * 60)
    logger.info(f"{settings.APP_NAME} API starting...")

    if not validate_settings():
        logger.warning("Some settings are inconsistent - check the environment")

    init_orchestrator()

    logger.info(f"  - Processing delay: {settings.PROCESSING_DELAY_SECONDS}s")
    logger.info(f"  - ETA range: {settings.ETA_MIN_MINUTES}-{settings.ETA_MAX_MINUTES} min")
    logger.info(f"  - Triage confidence: {settings.TRIAGE_CONFIDENCE_MODE}")
    logger.info("=" * 60)

    yield

    discarded = get_orchestrator().shutdown()
    logger.info(f"{settings.APP_NAME} API shutting down ({discarded} sessions discarded)")


app = FastAPI(
    title="MedIntake API",
    description="Staged intake workflows: triage, ambulance dispatch, doctor verification",
    version="1.0.0",
    lifespan=lifespan,
)


def get_orchestrator() -> WorkflowOrchestrator:
    return orchestrator_module.get_orchestrator()


# =============================================================================
# RATE LIMITING
# =============================================================================

limiter = Limiter(key_func=get_real_ip)


def custom_rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Rate limit response with a readable message"""
    response = PlainTextResponse(
        content=get_rate_limit_message(rate_limit_group(request.method, request.url.path)),
        status_code=429,
    )
    response.headers["Retry-After"] = "60"
    return response


app.add_exception_handler(RateLimitExceeded, custom_rate_limit_handler)
app.state.limiter = limiter


# =============================================================================
# ERROR MAPPING
# =============================================================================

ERROR_STATUS_CODES = {
    ValidationError: 422,
    WorkflowError: 409,
    SessionError: 404,
    AcquisitionFailure: 424,
}


@app.exception_handler(IntakeBaseException)
async def intake_exception_handler(request: Request, exc: IntakeBaseException):
    status_code = next(
        (code for error_type, code in ERROR_STATUS_CODES.items() if isinstance(exc, error_type)),
        500
    )
    if status_code == 500:
        logger.error(f"Unhandled intake error on {request.url.path}: {exc}")

    return JSONResponse(
        status_code=status_code,
        content={
            "error": type(exc).__name__,
            "message": exc.message,
            "details": exc.details,
        },
    )


# =============================================================================
# MIDDLEWARE
# =============================================================================

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log incoming requests, health checks only once"""
    path = request.url.path

    if path == "/health":
        if not hasattr(app.state, "health_logged"):
            logger.info(f"Health check endpoint hit: {path}")
            app.state.health_logged = True
    else:
        logger.info(f"Request: {request.method} {path}")

    return await call_next(request)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    """Add security headers to all responses"""
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Permissions-Policy"] = "geolocation=(self), microphone=(), camera=()"

    return response


allowed_origins = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


# =============================================================================
# API MODELS
# =============================================================================

class FieldsRequest(BaseModel):
    values: Dict[str, Any] = Field(default_factory=dict)


class LocationRequest(BaseModel):
    address: str
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class DocumentRequest(BaseModel):
    reference: str


class ReviewRequest(BaseModel):
    status: VerificationStatus
    note: Optional[str] = None


# =============================================================================
# ROUTES
# =============================================================================

@app.get("/", status_code=200)
def read_root():
    return {"status": "ok", "version": "1.0.0", "service": "medintake"}


@app.get("/health", status_code=200)
def health():
    issues = get_orchestrator().workflow_engine.validate_fsm()
    return {
        "status": "healthy" if not issues else "degraded",
        "issues": issues,
        "active_sessions": len(get_orchestrator().session_store),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.post("/workflows/{kind}", status_code=201)
@limiter.limit(RATE_LIMITS["workflow_start"])
async def start_workflow(request: Request, kind: WorkflowKind):
    state = get_orchestrator().start_workflow(kind)
    return state.to_public_dict()


@app.get("/workflows/{session_id}")
async def get_workflow(session_id: str):
    return get_orchestrator().get_session_info(session_id)


@app.put("/workflows/{session_id}/fields")
@limiter.limit(RATE_LIMITS["workflow_input"])
async def update_fields(request: Request, session_id: str, req: FieldsRequest):
    state = get_orchestrator().set_fields(session_id, req.values)
    return state.to_public_dict()


@app.post("/workflows/{session_id}/location")
@limiter.limit(RATE_LIMITS["workflow_input"])
async def acquire_location(request: Request, session_id: str):
    location = await get_orchestrator().acquire_location(session_id)
    return location.model_dump()


@app.put("/workflows/{session_id}/location")
@limiter.limit(RATE_LIMITS["workflow_input"])
async def set_manual_location(request: Request, session_id: str, req: LocationRequest):
    location = get_orchestrator().set_manual_location(
        session_id, req.address, req.latitude, req.longitude
    )
    return location.model_dump()


@app.post("/workflows/{session_id}/documents/{slot}")
@limiter.limit(RATE_LIMITS["workflow_input"])
async def upload_document(request: Request, session_id: str, slot: str, req: DocumentRequest):
    state = await get_orchestrator().upload_document(session_id, slot, req.reference)
    return state.to_public_dict()


@app.post("/workflows/{session_id}/submit", status_code=202)
@limiter.limit(RATE_LIMITS["workflow_submit"])
async def submit_workflow(request: Request, session_id: str):
    state = await get_orchestrator().submit(session_id)
    return state.to_public_dict()


@app.post("/workflows/{session_id}/review")
async def review_workflow(session_id: str, req: ReviewRequest):
    state = await get_orchestrator().record_review_decision(session_id, req.status, req.note)
    return state.to_public_dict()


@app.post("/workflows/{session_id}/restart", status_code=201)
@limiter.limit(RATE_LIMITS["workflow_start"])
async def restart_workflow(request: Request, session_id: str):
    state = get_orchestrator().restart(session_id)
    return state.to_public_dict()


@app.delete("/workflows/{session_id}", status_code=204)
async def discard_workflow(session_id: str):
    if not get_orchestrator().discard(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return None


@app.get("/workflows/{session_id}/notifications")
async def list_notifications(session_id: str):
    orchestrator = get_orchestrator()
    orchestrator.get_state(session_id)

    sink = orchestrator.notifications
    if not isinstance(sink, LoggingNotificationSink):
        return []
    return [
        {
            "title": n.title,
            "description": n.description,
            "severity": n.severity.value,
            "created_at": n.created_at.isoformat(),
        }
        for n in sink.history(session_id)
    ]


@app.get("/i18n/{locale}")
async def get_catalog(locale: str):
    localizer = get_orchestrator().localizer
    if locale not in localizer.available_locales:
        raise HTTPException(status_code=404, detail=f"No catalog for locale '{locale}'")
    return localizer.catalog(locale)


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Starting {settings.APP_NAME} on port {port}...")
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
