"""
Voice API Routes

Provides endpoints for the voice assistant:
- POST /api/voice/process   - Submit a transcript, get a reply and a directive
- GET  /api/voice/commands  - List example voice commands
"""

import logging
import uuid

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from citro.api.models import ErrorResponse, VoiceCommandsResponse, VoiceProcessRequest, VoiceProcessResponse
from citro.logging_config import bind_request
from citro.services import Services, create_default_services
from citro.voice.models import RequestContext
from citro.voice.parser.intent_parser import AVAILABLE_COMMANDS
from citro.voice.pipeline import process_command

logger = logging.getLogger(__name__)

router = APIRouter()

SESSION_COOKIE = "citro_session"
CART_COOKIE = "citro_cart"


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message).model_dump(),
        headers=headers,
    )


# =============================================================================
# Dependencies
# =============================================================================


def get_services(request: Request) -> Services:
    """Data collaborators attached to the app at startup."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        services = create_default_services()
        request.app.state.services = services
    return services


def _session_token(request: Request) -> str | None:
    token = request.cookies.get(SESSION_COOKIE)
    if not token:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            token = auth_header[7:]
    return token or None


async def build_context(request: Request, body: VoiceProcessRequest, services: Services) -> RequestContext:
    """Build the caller's context. A missing or broken session means anonymous."""
    session = None
    token = _session_token(request)
    if token:
        try:
            session = await services.sessions.lookup(token)
        except Exception as e:
            logger.warning(f"Session lookup failed, treating caller as anonymous: {e}")

    return RequestContext.from_session(
        session,
        current_page=body.current_page,
        cart_session=body.cart_session or request.cookies.get(CART_COOKIE),
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/process", response_model=VoiceProcessResponse)
async def process_voice(request: Request, services: Services = Depends(get_services)):
    """Receive a transcript, resolve it, and reply."""
    bind_request(request_id=uuid.uuid4().hex[:12], path=request.url.path)

    try:
        payload = await request.json()
        body = VoiceProcessRequest.model_validate(payload)
    except (ValueError, ValidationError):
        return _error(status.HTTP_400_BAD_REQUEST, "Transcript is required")

    try:
        context = await build_context(request, body, services)
        result = await process_command(body.transcript, context, services=services)
    except Exception:
        logger.exception("Voice processing failed")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Voice processing failed")

    return {"success": True, "data": result.to_dict()}


@router.api_route(
    "/process",
    methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def process_voice_wrong_method(request: Request):
    return _error(
        status.HTTP_405_METHOD_NOT_ALLOWED,
        f"Method {request.method} not allowed",
        headers={"Allow": "POST"},
    )


@router.get("/commands", response_model=VoiceCommandsResponse)
async def list_commands():
    """List example voice commands grouped by area."""
    total = sum(len(commands) for commands in AVAILABLE_COMMANDS.values())
    return {"success": True, "data": {"commands": AVAILABLE_COMMANDS, "total": total}}
