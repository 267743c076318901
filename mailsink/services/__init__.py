"""
Services Module

Business logic layer for the application.
"""

from mailsink.services.message_store import MessageStore
from mailsink.services.sender_policy import SenderPolicy
from mailsink.services.filter_service import FilterCriteria, filter_all, matches

__all__ = [
    "MessageStore",
    "SenderPolicy",
    "FilterCriteria",
    "filter_all",
    "matches",
]
