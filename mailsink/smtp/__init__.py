"""
SMTP Module

SMTP listener and session handling for captured mail.
"""

from mailsink.smtp.server import SMTPListener
from mailsink.smtp.handler import MailSinkHandler, SessionState
from mailsink.smtp.processor import EmailProcessor, MessageDecoder

__all__ = [
    "SMTPListener",
    "MailSinkHandler",
    "SessionState",
    "EmailProcessor",
    "MessageDecoder",
]
