"""
Filter Service

Query-parameter filtering over stored messages:
- Date range (since / until)
- Recipient address
- Sender address

All criteria are AND-combined; a missing criterion always matches.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from dateutil import parser as date_parser

from mailsink.core.logging import get_logger
from mailsink.schemas.message import Message

logger = get_logger(__name__)


def parse_query_date(value: Optional[str]) -> Optional[datetime]:
    """
    Leniently parse a date query parameter.

    Naive values are taken as UTC. Anything unparseable is treated as if
    the parameter had not been given.

    Args:
        value: Raw query string value

    Returns:
        datetime: Timezone-aware timestamp, or None
    """
    if not value:
        return None

    try:
        return as_utc(date_parser.parse(value)).astimezone(timezone.utc)
    except (ValueError, OverflowError) as e:
        # Out-of-range offsets (e.g. +99:00) only fail once the offset is read.
        logger.debug(f"Ignoring unparseable date filter {value!r}: {e}")
        return None


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class FilterCriteria:
    """Per-request message filter."""

    since: Optional[datetime] = None
    until: Optional[datetime] = None
    to: Optional[str] = None
    from_: Optional[str] = None

    @classmethod
    def from_query(
        cls,
        since: Optional[str] = None,
        until: Optional[str] = None,
        to: Optional[str] = None,
        from_: Optional[str] = None,
    ) -> "FilterCriteria":
        """Build criteria from raw query parameters; empty values count as absent."""
        return cls(
            since=parse_query_date(since),
            until=parse_query_date(until),
            to=to or None,
            from_=from_ or None,
        )

    @property
    def is_empty(self) -> bool:
        return not (self.since or self.until or self.to or self.from_)


def matches(message: Message, criteria: FilterCriteria) -> bool:
    """
    Check a single message against the criteria.

    A message without a date never passes a date criterion.
    """
    if criteria.since or criteria.until:
        if message.date is None:
            return False
        date = as_utc(message.date)
        if criteria.since and date < criteria.since:
            return False
        if criteria.until and date > criteria.until:
            return False

    if criteria.to and criteria.to not in message.to.addresses:
        return False

    if criteria.from_ and criteria.from_ not in message.from_.addresses:
        return False

    return True


def filter_all(messages: Iterable[Message], criteria: FilterCriteria) -> List[Message]:
    """Return the matching messages, keeping the input order."""
    if criteria.is_empty:
        return list(messages)
    return [message for message in messages if matches(message, criteria)]
