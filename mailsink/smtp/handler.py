"""
SMTP Handler

Drives each SMTP session through envelope validation, optional
authentication, body decoding and commit to the message store.
"""

import enum
import logging
import time
import weakref
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from aiosmtpd.smtp import AuthResult, Envelope, LoginPassword, Session, SMTP as SMTPProtocol

from mailsink.core.exceptions import DecodeError, SenderRejectedException
from mailsink.core.logging import get_logger
from mailsink.core.metrics import record_smtp_login, record_smtp_message, record_smtp_rejection
from mailsink.services.message_store import MessageStore
from mailsink.services.sender_policy import SenderPolicy
from mailsink.smtp.processor import EmailProcessor, MessageDecoder

logger = get_logger(__name__)


class SessionState(str, enum.Enum):
    """Lifecycle of one mail transaction."""

    STARTED = "started"
    SENDER_CHECKED = "sender_checked"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"
    RECEIVING_BODY = "receiving_body"
    COMMITTED = "committed"
    REJECTED = "rejected"
    FAILED = "failed"


TRANSITIONS = {
    SessionState.STARTED: {SessionState.SENDER_CHECKED, SessionState.REJECTED},
    SessionState.SENDER_CHECKED: {SessionState.AUTHENTICATED, SessionState.ANONYMOUS},
    SessionState.AUTHENTICATED: {SessionState.RECEIVING_BODY},
    SessionState.ANONYMOUS: {SessionState.RECEIVING_BODY},
    SessionState.RECEIVING_BODY: {SessionState.COMMITTED, SessionState.FAILED},
    SessionState.COMMITTED: set(),
    SessionState.REJECTED: set(),
    SessionState.FAILED: set(),
}


class InvalidTransition(RuntimeError):
    """Raised when a session event arrives in the wrong state."""


@dataclass
class SessionContext:
    """Per-connection bookkeeping kept alongside the aiosmtpd Session."""

    state: SessionState = SessionState.STARTED
    username: Optional[str] = None

    def begin_transaction(self) -> None:
        # A new MAIL FROM starts over; the login survives.
        self.state = SessionState.STARTED

    def advance(self, state: SessionState) -> None:
        if state not in TRANSITIONS[self.state]:
            raise InvalidTransition(f"Cannot go from {self.state.value} to {state.value}")
        self.state = state


class MailSinkHandler:
    """
    aiosmtpd handler capturing every accepted message.

    Authentication is accept-all: any credentials succeed and only the
    username is kept, for logging. It is never required.
    """

    def __init__(
        self,
        store: MessageStore,
        sender_policy: SenderPolicy,
        include_headers: bool = False,
        decoder: Optional[MessageDecoder] = None,
    ):
        self.store = store
        self.sender_policy = sender_policy
        self.include_headers = include_headers
        self.decoder = decoder or EmailProcessor()
        self._contexts: "weakref.WeakKeyDictionary[Session, SessionContext]" = weakref.WeakKeyDictionary()

    def context(self, session: Session) -> SessionContext:
        """Get (or create) the context for an aiosmtpd session."""
        ctx = self._contexts.get(session)
        if ctx is None:
            ctx = SessionContext()
            self._contexts[session] = ctx
        return ctx

    def authenticate(self, server, session: Session, envelope: Envelope, mechanism: str, auth_data) -> AuthResult:
        """
        aiosmtpd authenticator: accept any credentials.

        Args:
            server: SMTP server instance
            session: SMTP session
            envelope: Current envelope
            mechanism: AUTH mechanism (LOGIN, PLAIN)
            auth_data: LoginPassword for the built-in mechanisms

        Returns:
            AuthResult: Always successful
        """
        username = None
        if isinstance(auth_data, LoginPassword):
            username = auth_data.login.decode("utf-8", errors="replace")

        self.context(session).username = username
        record_smtp_login()
        logger.info(f"SMTP login for user: {username}")
        return AuthResult(success=True, handled=False, auth_data=auth_data)

    async def handle_MAIL(
        self,
        server: SMTPProtocol,
        session: Session,
        envelope: Envelope,
        address: str,
        mail_options: list,
    ) -> str:
        """
        Check the envelope sender against the whitelist.

        A rejection only fails this transaction; the connection stays open.
        """
        ctx = self.context(session)
        ctx.begin_transaction()

        try:
            self.sender_policy.ensure_allowed(address)
        except SenderRejectedException as e:
            ctx.advance(SessionState.REJECTED)
            record_smtp_rejection("sender_not_allowed")
            logger.warning(f"Email rejected: {e.message}")
            return f"{e.status_code} {e.message}"

        ctx.advance(SessionState.SENDER_CHECKED)
        ctx.advance(SessionState.AUTHENTICATED if ctx.username else SessionState.ANONYMOUS)

        envelope.mail_from = address
        envelope.mail_options.extend(mail_options)
        return "250 OK"

    async def handle_DATA(self, server: SMTPProtocol, session: Session, envelope: Envelope) -> str:
        """
        Decode the received body and commit it to the store.

        Args:
            server: SMTP server instance
            session: SMTP session
            envelope: Email envelope with recipients and data

        Returns:
            str: SMTP response code and message
        """
        start_time = time.time()
        ctx = self.context(session)

        try:
            ctx.advance(SessionState.RECEIVING_BODY)
        except InvalidTransition:
            return "503 Error: need MAIL command"

        content = envelope.original_content or envelope.content or b""
        if isinstance(content, str):
            content = content.encode("utf-8", errors="surrogateescape")

        try:
            message = self.decoder.decode(content, received_at=datetime.now(timezone.utc))
        except DecodeError as e:
            ctx.advance(SessionState.FAILED)
            record_smtp_rejection("decode_error")
            record_smtp_message("error", time.time() - start_time)
            logger.error(f"Email parsing failed: {e.message}")
            return f"{e.status_code} Requested action aborted: error in processing"

        if not self.include_headers:
            message = message.model_copy(update={"headers": None})

        evicted = self.store.insert_front(message)
        ctx.advance(SessionState.COMMITTED)

        duration = time.time() - start_time
        record_smtp_message("accepted", duration)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Captured message: {message.model_dump_json(by_alias=True)}")
        logger.info(
            f"Email accepted from {envelope.mail_from} "
            f"({len(content)} bytes, {len(evicted)} evicted, {duration:.2f}s)"
        )
        return "250 Message accepted for delivery"
