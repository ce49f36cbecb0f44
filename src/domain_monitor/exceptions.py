"""
Exception classes for the domain monitor.

All exceptions inherit from DomainMonitorError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class DomainMonitorError(Exception):
    """Base exception for all domain monitor errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(DomainMonitorError):
    """Raised when startup configuration is invalid."""

    pass


class ProtocolError(DomainMonitorError):
    """Raised when a response does not have the expected shape (malformed JSON, wrong types)."""

    pass


class NotificationError(DomainMonitorError):
    """Raised when the webhook rejects a notification."""

    pass
