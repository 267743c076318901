"""
Health Check API Endpoints

Reports store usage and whether the SMTP listener is up.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status

from mailsink import __version__
from mailsink.dependencies import get_smtp_listener, get_store
from mailsink.schemas.common import HealthResponse
from mailsink.services.message_store import MessageStore
from mailsink.smtp.server import SMTPListener

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="""
    Health check covering the message store and the SMTP listener.

    The HTTP side keeps serving when the SMTP listener failed to bind;
    status is then reported as degraded.
    """,
)
async def health_check(
    store: MessageStore = Depends(get_store),
    smtp_listener: Optional[SMTPListener] = Depends(get_smtp_listener),
):
    """
    Perform health check.

    Returns:
        HealthResponse: Store usage and listener status
    """
    smtp_running = smtp_listener is not None and smtp_listener.running

    return HealthResponse(
        status="healthy" if smtp_running else "degraded",
        version=__version__,
        messages=len(store),
        capacity=store.capacity,
        smtp_running=smtp_running,
    )
