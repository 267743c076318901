"""
Pydantic Schemas

Message model and API response models.
"""

from mailsink.schemas.message import (
    AddressList,
    Attachment,
    EmailAddress,
    Message,
)
from mailsink.schemas.common import (
    HealthResponse,
)

__all__ = [
    "AddressList",
    "Attachment",
    "EmailAddress",
    "Message",
    "HealthResponse",
]
