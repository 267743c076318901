"""
API Router

Aggregates all API endpoints.
"""

from fastapi import APIRouter

from mailsink.api import emails

api_router = APIRouter()

api_router.include_router(
    emails.router,
    prefix="/emails",
    tags=["emails"],
)
