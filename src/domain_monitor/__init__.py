"""
Domain Monitor - periodic RDAP domain status monitoring with webhook alerts.

This package resolves the RDAP server for each configured domain's zone,
classifies the domain as available, in redemption / pending delete, or
otherwise registered, and posts a notification to a webhook.
"""

__version__ = "0.1.0"
__author__ = "Domain Monitor Team"

from domain_monitor.exceptions import (
    DomainMonitorError,
    ConfigurationError,
    ProtocolError,
    NotificationError,
)
from domain_monitor.enums import (
    StatusCategory,
    LogLevel,
    RegistryErrorCode,
    RDAPErrorCode,
    RDAPStatus,
)
from domain_monitor.config import (
    TimeoutConfig,
    LoggingConfig,
    MonitorConfig,
    load_config,
    parse_domains,
)
from domain_monitor.models import (
    DomainStatus,
    NotificationField,
    NotificationEmbed,
    NotificationPayload,
    DomainOutcome,
    CycleSummary,
)
from domain_monitor.audit_logger import (
    AuditLogger,
    LogEntry,
)
from domain_monitor.bootstrap import (
    AuthorityRegistry,
    AuthorityResolver,
    RegistryFetchResult,
    find_server,
)
from domain_monitor.rdap_client import (
    RDAPClient,
    RDAPRecord,
    RDAPResponse,
    RDAPError,
)
from domain_monitor.inspector import DomainInspector
from domain_monitor.formatter import (
    classify,
    format_notification,
    COLOR_AVAILABLE,
    COLOR_REDEMPTION,
    COLOR_OTHER,
)
from domain_monitor.notifications import (
    NotificationResult,
    WebhookSink,
)
from domain_monitor.monitor import MonitorCycle
from domain_monitor.scheduler import (
    Scheduler,
    CronSchedule,
    CronParser,
    CronParseError,
)

__all__ = [
    # Exceptions
    "DomainMonitorError",
    "ConfigurationError",
    "ProtocolError",
    "NotificationError",
    # Enums
    "StatusCategory",
    "LogLevel",
    "RegistryErrorCode",
    "RDAPErrorCode",
    "RDAPStatus",
    # Configuration
    "TimeoutConfig",
    "LoggingConfig",
    "MonitorConfig",
    "load_config",
    "parse_domains",
    # Models
    "DomainStatus",
    "NotificationField",
    "NotificationEmbed",
    "NotificationPayload",
    "DomainOutcome",
    "CycleSummary",
    # Logging
    "AuditLogger",
    "LogEntry",
    # Authority resolution
    "AuthorityRegistry",
    "AuthorityResolver",
    "RegistryFetchResult",
    "find_server",
    # RDAP
    "RDAPClient",
    "RDAPRecord",
    "RDAPResponse",
    "RDAPError",
    # Inspection and formatting
    "DomainInspector",
    "classify",
    "format_notification",
    "COLOR_AVAILABLE",
    "COLOR_REDEMPTION",
    "COLOR_OTHER",
    # Notifications
    "NotificationResult",
    "WebhookSink",
    # Monitor cycle and scheduling
    "MonitorCycle",
    "Scheduler",
    "CronSchedule",
    "CronParser",
    "CronParseError",
]
