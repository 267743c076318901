"""
Dependency Injection

FastAPI dependencies handing the application-owned store and SMTP
listener to the routes.
"""

from typing import Optional

from fastapi import Query, Request

from mailsink.services.filter_service import FilterCriteria
from mailsink.services.message_store import MessageStore
from mailsink.smtp.server import SMTPListener


def get_store(request: Request) -> MessageStore:
    """
    Get the shared message store.

    Returns:
        MessageStore: Store written by the SMTP handler
    """
    return request.app.state.store


def get_smtp_listener(request: Request) -> Optional[SMTPListener]:
    return getattr(request.app.state, "smtp_listener", None)


def get_filter_criteria(
    since: Optional[str] = Query(None, description="Only messages dated at or after this date"),
    until: Optional[str] = Query(None, description="Only messages dated at or before this date"),
    to: Optional[str] = Query(None, description="Only messages sent to this address"),
    from_: Optional[str] = Query(None, alias="from", description="Only messages sent from this address"),
) -> FilterCriteria:
    """
    Build filter criteria from the query string.

    Missing or unparseable values are ignored.
    """
    return FilterCriteria.from_query(since=since, until=until, to=to, from_=from_)
