"""
SMTP Server

SMTP listener built on aiosmtpd's threaded controller.

The listener is started from the HTTP application's lifespan. A bind
failure is logged and the HTTP side keeps serving.
"""

from typing import Optional

from aiosmtpd.controller import Controller

from mailsink.config import Settings
from mailsink.core.logging import get_logger
from mailsink.smtp.handler import MailSinkHandler

logger = get_logger(__name__)


class SMTPListener:
    """Owns the aiosmtpd controller for one handler."""

    def __init__(self, handler: MailSinkHandler, settings: Settings):
        self.handler = handler
        self.settings = settings
        self.controller: Optional[Controller] = None

    @property
    def running(self) -> bool:
        return self.controller is not None

    def build_controller(self) -> Controller:
        """
        Create the aiosmtpd controller.

        AUTH is offered but optional, and allowed without TLS.
        """
        return Controller(
            self.handler,
            hostname=self.settings.SMTP_HOST,
            port=self.settings.SMTP_PORT,
            server_hostname=self.settings.SMTP_HOSTNAME,
            data_size_limit=self.settings.SMTP_DATA_SIZE_LIMIT or None,
            authenticator=self.handler.authenticate,
            auth_required=False,
            auth_require_tls=False,
            enable_SMTPUTF8=True,
        )

    def start(self) -> bool:
        """
        Start listening.

        Returns:
            bool: True if the listener is up
        """
        controller = self.build_controller()
        try:
            controller.start()
        except Exception as e:
            logger.error(
                f"SMTP server failed to start on {self.settings.SMTP_HOST}:{self.settings.SMTP_PORT}: {e}",
                exc_info=True,
            )
            return False

        self.controller = controller
        logger.info(f"SMTP server listening on {self.settings.SMTP_HOST}:{self.settings.SMTP_PORT}")
        return True

    def stop(self) -> None:
        if self.controller is None:
            return
        self.controller.stop()
        self.controller = None
        logger.info("SMTP server stopped")
