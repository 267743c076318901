"""Shared pytest fixtures.

Provides:
- A message factory for building captured messages
- A small message store
- Settings and an HTTP test client wired to that store
"""

from datetime import datetime, timezone
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from mailsink.config import Settings
from mailsink.main import create_app
from mailsink.schemas.message import AddressList, EmailAddress, Message
from mailsink.services.message_store import MessageStore


def make_message(
    subject: str = "Hello",
    sender: str = "sender@example.com",
    recipients: Optional[List[str]] = None,
    date: Optional[datetime] = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
    headers: Optional[dict] = None,
) -> Message:
    """Build a captured message without going through SMTP."""
    recipients = recipients if recipients is not None else ["rcpt@example.com"]
    return Message(
        from_=AddressList(value=[EmailAddress(address=sender)], text=sender),
        to=AddressList(
            value=[EmailAddress(address=address) for address in recipients],
            text=", ".join(recipients),
        ),
        subject=subject,
        date=date,
        text=f"Body of {subject}",
        headers=headers,
    )


@pytest.fixture
def store() -> MessageStore:
    return MessageStore(capacity=10)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        MAX_EMAILS=10,
        STATIC_DIR=str(tmp_path / "missing-ui"),
        ENABLE_METRICS=False,
    )


@pytest.fixture
def client(settings, store) -> TestClient:
    """HTTP client without running the lifespan, so no SMTP socket is opened."""
    app = create_app(settings, store=store, start_smtp=False)
    return TestClient(app)
