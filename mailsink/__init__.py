"""
MailSink - Disposable SMTP Capture Server

A development mail sink: accepts SMTP connections, keeps the most recent
messages in a bounded in-memory store and exposes them over an HTTP API.

License: MIT
Version: 1.0.0
"""

__version__ = "1.0.0"
__license__ = "MIT"

# Package metadata
__all__ = [
    "__version__",
    "__license__",
]
