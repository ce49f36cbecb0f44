"""
Enumeration types for the domain monitor.

These enums provide type-safe constants for lookup outcomes, error codes,
notification categories and logging levels.
"""

from enum import Enum


class StatusCategory(Enum):
    """Notification category derived from a domain status."""

    AVAILABLE = "available"
    REDEMPTION = "redemption"
    OTHER = "other"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class RegistryErrorCode(Enum):
    """Error codes for RDAP bootstrap registry fetches."""

    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    PARSE_ERROR = "parse_error"


class RDAPErrorCode(Enum):
    """Error codes for per-domain RDAP lookups."""

    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    PARSE_ERROR = "parse_error"
    SERVER_ERROR = "server_error"
    INVALID_REQUEST = "invalid_request"


class RDAPStatus(Enum):
    """RDAP query result status."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"
