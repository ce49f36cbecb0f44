"""
Data models for the domain monitor.

This module defines the inspection result for a single domain, the webhook
notification payload built from it, and the per-cycle outcome records.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


AVAILABLE_STATUS = "Available for registration"
SERVER_NOT_FOUND_STATUS = "RDAP server not found"
QUERY_ERROR_STATUS = "Error querying RDAP"
DEFAULT_ACTIVE_STATUS = "Active"
UNKNOWN_REGISTRAR = "Unknown"


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def zone_of(domain: str) -> str:
    """Return the top-level zone label of a domain, or '' if it has no dot."""
    if "." not in domain:
        return ""
    return domain.rsplit(".", 1)[-1]


def format_iso_timestamp(dt: datetime) -> str:
    """Serialize a datetime as UTC ISO 8601 with milliseconds and a 'Z' suffix."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class DomainStatus:
    """Observed state of one domain at one point in time."""

    domain: str
    is_available: bool
    status: list[str]
    registrar: Optional[str] = None
    expiry_date: Optional[str] = None
    timestamp: datetime = field(default_factory=utc_now)

    @classmethod
    def available(cls, domain: str) -> "DomainStatus":
        return cls(domain=domain, is_available=True, status=[AVAILABLE_STATUS])

    @classmethod
    def unavailable(cls, domain: str, label: str) -> "DomainStatus":
        return cls(domain=domain, is_available=False, status=[label])

    @property
    def status_text(self) -> str:
        return ", ".join(self.status)

    def to_dict(self) -> dict:
        return {
            "domain": self.domain,
            "is_available": self.is_available,
            "status": list(self.status),
            "registrar": self.registrar,
            "expiry_date": self.expiry_date,
            "timestamp": format_iso_timestamp(self.timestamp),
        }


@dataclass
class NotificationField:
    """A named field of a rich notification embed."""

    name: str
    value: str
    inline: Optional[bool] = None

    def to_dict(self) -> dict:
        data = {"name": self.name, "value": self.value}
        if self.inline is not None:
            data["inline"] = self.inline
        return data


@dataclass
class NotificationEmbed:
    """Rich content block of a notification."""

    title: str
    description: str
    color: int
    fields: list[NotificationField]
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "color": self.color,
            "fields": [f.to_dict() for f in self.fields],
            "timestamp": self.timestamp,
        }


@dataclass
class NotificationPayload:
    """Webhook message describing one domain status."""

    content: str
    embeds: list[NotificationEmbed]

    def to_dict(self) -> dict:
        """Build the JSON body sent to the webhook."""
        return {
            "content": self.content,
            "embeds": [e.to_dict() for e in self.embeds],
        }


@dataclass
class DomainOutcome:
    """Result of processing one domain within a monitor cycle."""

    domain: str
    success: bool
    status: Optional[DomainStatus] = None
    notified: bool = False
    error: Optional[str] = None


@dataclass
class CycleSummary:
    """Summary of a complete monitor cycle."""

    succeeded: int
    total: int
    started_at: str
    duration_ms: float = 0.0
    outcomes: list[DomainOutcome] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def all_succeeded(self) -> bool:
        return self.succeeded == self.total
