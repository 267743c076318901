"""
Common Pydantic schemas used across the application.
"""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="Application version")
    messages: int = Field(..., description="Number of stored messages")
    capacity: int = Field(..., description="Maximum number of stored messages")
    smtp_running: bool = Field(..., description="Whether the SMTP listener is up")
