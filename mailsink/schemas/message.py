"""
Message-related Pydantic schemas.
"""

from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class EmailAddress(BaseModel):
    """Single mailbox: address plus display name."""

    model_config = ConfigDict(frozen=True)

    address: str = Field(..., description="Email address")
    name: str = Field(default="", description="Display name")


class AddressList(BaseModel):
    """Parsed address header (From, To, Cc)."""

    model_config = ConfigDict(frozen=True)

    value: Tuple[EmailAddress, ...] = Field(default_factory=tuple, description="Parsed mailboxes")
    text: str = Field(default="", description="Header value as received")

    @property
    def addresses(self) -> List[str]:
        """Bare addresses, in header order."""
        return [mailbox.address for mailbox in self.value]


class Attachment(BaseModel):
    """Attachment metadata (content is not kept)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    filename: Optional[str] = Field(None, description="File name")
    content_type: str = Field(..., alias="contentType", description="MIME type")
    size: int = Field(..., description="Size in bytes")


class Message(BaseModel):
    """
    One captured e-mail.

    Frozen once built, including nested collections; the store only ever
    adds or drops whole messages.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: AddressList = Field(default_factory=AddressList, alias="from", description="Sender")
    to: AddressList = Field(default_factory=AddressList, description="Recipients")
    cc: AddressList = Field(default_factory=AddressList, description="Carbon-copy recipients")
    subject: str = Field(default="", description="Email subject")
    date: Optional[datetime] = Field(None, description="Date header, or receipt time")
    message_id: Optional[str] = Field(None, alias="messageId", description="Message-ID header")
    text: Optional[str] = Field(None, description="Plain text body")
    html: Optional[str] = Field(None, description="HTML body")
    attachments: Tuple[Attachment, ...] = Field(default_factory=tuple, description="Attachment metadata")
    headers: Optional[Mapping[str, str]] = Field(None, description="Raw headers (only when enabled)")

    @field_validator("headers")
    @classmethod
    def freeze_headers(cls, v: Optional[Mapping[str, str]]) -> Optional[Mapping[str, str]]:
        """Wrap headers in a read-only view so stored messages cannot change."""
        if v is None:
            return None
        return MappingProxyType(dict(v))

    @field_serializer("headers")
    def serialize_headers(self, v: Optional[Mapping[str, str]]) -> Optional[Dict[str, str]]:
        return dict(v) if v is not None else None

    def to_response(self) -> Dict[str, Any]:
        """
        Serialize for the HTTP API.

        The ``headers`` key is left out entirely when headers were not kept.
        """
        exclude = {"headers"} if self.headers is None else None
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)
