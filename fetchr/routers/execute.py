"""
Request execution API routes.

Sends a request draft as given; variables are expected to be resolved by the
caller. Interpolation against the active environment is exposed separately.
"""

from typing import Optional

import httpx
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_db
from ..exceptions import ErrorResponse
from ..schemas.draft import RequestDraft
from ..schemas.execute import HttpResponse, InterpolateRequest, InterpolateResponse
from ..services import environment_service
from ..services.http_executor import send_request
from ..services.variable_substitution import interpolate


router = APIRouter(prefix="/api/execute", tags=["execute"])


def get_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Outbound transport; None lets httpx open real connections."""
    return None


@router.post(
    "",
    response_model=HttpResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid URL or body"},
        502: {"model": ErrorResponse, "description": "Network error"},
        504: {"model": ErrorResponse, "description": "Request timeout"},
    }
)
async def execute_request(
    draft: RequestDraft,
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_transport),
):
    """
    Execute an HTTP request draft.

    Args:
        draft: The request to send, tokens already resolved
        transport: Outbound httpx transport

    Returns:
        HttpResponse with status, headers, body, cookies and timing info
    """
    return await send_request(draft, timeout=get_settings().request_timeout, transport=transport)


@router.post("/interpolate", response_model=InterpolateResponse)
def interpolate_text(payload: InterpolateRequest, db: Session = Depends(get_db)):
    """Resolve {{name}} tokens against the active environment."""
    environment = environment_service.get_active_environment(db)
    return InterpolateResponse(result=interpolate(payload.text, environment))
