"""
Email API Endpoints

REST API over captured messages:
- List messages, optionally filtered
- Clear all messages
"""

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from mailsink.core.logging import get_logger
from mailsink.dependencies import get_filter_criteria, get_store
from mailsink.services.filter_service import FilterCriteria, filter_all
from mailsink.services.message_store import MessageStore

logger = get_logger(__name__)
router = APIRouter()


@router.get(
    "",
    summary="List captured emails",
    description="""
    Get captured emails, newest first.

    Filters (all optional, combined with AND):
    - since / until: date range, parsed leniently; unparseable values are ignored
    - to: exact recipient address
    - from: exact sender address
    """,
    responses={
        200: {"description": "Emails retrieved successfully"},
    }
)
async def list_emails(
    criteria: FilterCriteria = Depends(get_filter_criteria),
    store: MessageStore = Depends(get_store),
):
    """
    List captured emails.

    Args:
        criteria: Filter built from the query string
        store: Shared message store

    Returns:
        JSONResponse: Matching messages, newest first
    """
    messages = filter_all(store.snapshot(), criteria)
    return JSONResponse(content=[message.to_response() for message in messages])


@router.delete(
    "",
    status_code=status.HTTP_200_OK,
    summary="Delete all emails",
    description="""
    Remove every captured email.

    This action cannot be undone.
    """,
    responses={
        200: {"description": "Emails deleted"},
    }
)
async def clear_emails(store: MessageStore = Depends(get_store)):
    """
    Clear the message store.

    Args:
        store: Shared message store
    """
    store.clear()
    return Response(status_code=status.HTTP_200_OK)
