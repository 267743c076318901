"""
Core Module

Core functionality including:
- Security (HTTP basic-auth gate)
- Logging (structured logging)
- Metrics (Prometheus)
- Exceptions (custom exceptions)
"""

__all__ = [
    "security",
    "logging",
    "metrics",
    "exceptions",
]
