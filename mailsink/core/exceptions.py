"""
Custom Exceptions

Application-specific exceptions with error codes and messages.
"""

from typing import Optional, Any


class MailSinkException(Exception):
    """
    Base exception for all MailSink errors.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "internal_error",
        detail: Optional[Any] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.detail = detail
        super().__init__(self.message)


class SenderRejectedException(MailSinkException):
    """
    Raised when an envelope sender is not on the whitelist.
    """

    def __init__(self, address: str, detail: Optional[Any] = None):
        self.address = address
        super().__init__(
            message=f"Invalid email from: {address}",
            status_code=550,
            error_code="sender_rejected",
            detail=detail,
        )


class DecodeError(MailSinkException):
    """
    Raised when a DATA payload cannot be decoded into a message.
    """

    def __init__(self, message: str = "Message could not be decoded", detail: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=451,
            error_code="decode_error",
            detail=detail,
        )


class AuthenticationRequiredException(MailSinkException):
    """
    Raised when the HTTP basic-auth gate rejects a request.
    """

    def __init__(self, detail: Optional[Any] = None):
        super().__init__(
            message="Authentication required",
            status_code=401,
            error_code="unauthorized",
            detail=detail,
        )
