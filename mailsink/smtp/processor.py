"""
Email Processor

Decodes raw DATA payloads into captured messages:
- Extract address headers
- Extract bodies (HTML and text)
- Extract attachment metadata
- Normalize headers
"""

from datetime import datetime, timezone
from email import policy
from email.message import EmailMessage
from email.parser import BytesParser
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from mailsink.core.exceptions import DecodeError
from mailsink.core.logging import get_logger
from mailsink.schemas.message import AddressList, Attachment, EmailAddress, Message
from mailsink.services.filter_service import as_utc

logger = get_logger(__name__)


class MessageDecoder(Protocol):
    """Anything that turns raw message bytes into a Message or raises DecodeError."""

    def decode(self, raw_content: bytes, received_at: Optional[datetime] = None) -> Message:
        ...


def normalize_headers(items: Iterable[Tuple[str, object]]) -> Dict[str, str]:
    """
    Flatten ordered header pairs into a mapping.

    Names are lower-cased; when a header repeats, the last value wins.
    """
    headers = {}
    for name, value in items:
        headers[name.lower()] = str(value)
    return headers


class EmailProcessor:
    """
    Decode RFC 5322 messages with the standard library parser.

    Implements MessageDecoder.
    """

    def __init__(self):
        self.parser = BytesParser(policy=policy.default)

    def decode(self, raw_content: bytes, received_at: Optional[datetime] = None) -> Message:
        """
        Decode a raw message.

        Args:
            raw_content: Message bytes as received in DATA
            received_at: Receipt time, used when the Date header is unusable

        Returns:
            Message: Decoded message with headers attached

        Raises:
            DecodeError: If the payload cannot be parsed
        """
        received_at = received_at or datetime.now(timezone.utc)

        try:
            message = self.parser.parsebytes(raw_content)
            html_body, text_body = self._extract_bodies(message)
            return Message(
                from_=self._extract_addresses(message, "From"),
                to=self._extract_addresses(message, "To"),
                cc=self._extract_addresses(message, "Cc"),
                subject=self._extract_subject(message),
                date=self._extract_date(message, received_at),
                message_id=self._extract_message_id(message),
                text=text_body,
                html=html_body,
                attachments=self._extract_attachments(message),
                headers=normalize_headers(message.items()),
            )
        except DecodeError:
            raise
        except Exception as e:
            raise DecodeError(f"Error parsing message: {e}") from e

    def _extract_addresses(self, message: EmailMessage, name: str) -> AddressList:
        """
        Extract an address header.

        Args:
            message: Email message
            name: Header name

        Returns:
            AddressList: Parsed mailboxes (empty if the header is missing)
        """
        header = message.get(name)
        if header is None:
            return AddressList()

        mailboxes = [
            EmailAddress(address=address.addr_spec, name=address.display_name or "")
            for address in getattr(header, "addresses", ())
        ]
        return AddressList(value=mailboxes, text=str(header))

    def _extract_subject(self, message: EmailMessage) -> str:
        subject = message.get("Subject", "")
        return str(subject)

    def _extract_message_id(self, message: EmailMessage) -> Optional[str]:
        message_id = message.get("Message-ID")
        if message_id is None:
            return None
        return str(message_id).strip()

    def _extract_date(self, message: EmailMessage, received_at: datetime) -> datetime:
        """
        Extract the Date header.

        Falls back to the receipt time when the header is missing or
        cannot be parsed.
        """
        try:
            header = message.get("Date")
            value = getattr(header, "datetime", None)
        except (TypeError, ValueError) as e:
            logger.debug(f"Unparseable Date header: {e}")
            value = None

        if value is None:
            return as_utc(received_at)
        return as_utc(value)

    def _extract_bodies(self, message: EmailMessage) -> Tuple[Optional[str], Optional[str]]:
        """
        Extract HTML and text bodies from email.

        Args:
            message: Email message

        Returns:
            tuple: (html_body, text_body)
        """
        html_part = message.get_body(preferencelist=("html",))
        text_part = message.get_body(preferencelist=("plain",))

        html_body = self._part_content(html_part) if html_part is not None else None
        text_body = self._part_content(text_part) if text_part is not None else None
        return html_body, text_body

    def _part_content(self, part: EmailMessage) -> str:
        try:
            return part.get_content()
        except (LookupError, UnicodeError):
            # Unknown or lying charset
            payload = part.get_payload(decode=True) or b""
            return payload.decode("utf-8", errors="replace")

    def _extract_attachments(self, message: EmailMessage) -> List[Attachment]:
        """
        Extract attachment metadata.

        Args:
            message: Email message

        Returns:
            list: Attachment descriptions (name, type, size)
        """
        attachments = []

        if not message.is_multipart():
            return attachments

        for part in message.iter_attachments():
            if part.get_content_maintype() == "multipart":
                continue
            payload = part.get_payload(decode=True) or b""
            attachments.append(Attachment(
                filename=part.get_filename(),
                content_type=part.get_content_type(),
                size=len(payload),
            ))

        return attachments
