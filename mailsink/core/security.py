"""
Security Module

HTTP basic-authentication gate for the web UI and API.

A single USERNAME:PASSWORD pair is configured; when set, every request
must present it.
"""

import secrets
from typing import Optional, Tuple

from fastapi import HTTPException, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from mailsink.core.exceptions import AuthenticationRequiredException


REALM = "MailSink"

http_basic = HTTPBasic(realm=REALM, auto_error=True)


def verify_credentials(credentials: HTTPBasicCredentials, expected: Tuple[str, str]) -> bool:
    """
    Compare supplied credentials with the configured pair.

    Args:
        credentials: Parsed basic-auth credentials
        expected: Configured (username, password)

    Returns:
        bool: True if both match
    """
    username, password = expected
    username_ok = secrets.compare_digest(credentials.username.encode("utf-8"), username.encode("utf-8"))
    password_ok = secrets.compare_digest(credentials.password.encode("utf-8"), password.encode("utf-8"))
    return username_ok and password_ok


async def authenticate_request(request: Request, expected: Optional[Tuple[str, str]]) -> Optional[str]:
    """
    Run the basic-auth gate for a request.

    Args:
        request: Incoming request
        expected: Configured (username, password), or None when disabled

    Returns:
        str: Authenticated username, or None when the gate is disabled

    Raises:
        AuthenticationRequiredException: If credentials are missing or wrong
    """
    if expected is None:
        return None

    try:
        credentials = await http_basic(request)
    except HTTPException as e:
        raise AuthenticationRequiredException(detail=e.detail) from e

    if credentials is None or not verify_credentials(credentials, expected):
        raise AuthenticationRequiredException(detail="Invalid authentication credentials")

    return credentials.username


def challenge_headers() -> dict:
    """Headers sent with a 401 so browsers prompt for credentials."""
    return {"WWW-Authenticate": f'Basic realm="{REALM}"'}
