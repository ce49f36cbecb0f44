"""
Monitor Cycle for the domain monitor.

One cycle inspects every configured domain concurrently, formats each result
and hands it to the notification sink, then reports how many domains were
processed successfully. A failure while processing one domain is captured
as a failed outcome and never affects the other domains.
"""

import asyncio
import time
from typing import TYPE_CHECKING, Optional, Sequence

from .bootstrap import AuthorityRegistry, AuthorityResolver
from .config import MonitorConfig
from .enums import LogLevel
from .formatter import format_notification
from .inspector import DomainInspector
from .models import CycleSummary, DomainOutcome, format_iso_timestamp, utc_now
from .notifications import WebhookSink
from .rdap_client import RDAPClient

if TYPE_CHECKING:
    from .audit_logger import AuditLogger


class MonitorCycle:
    """
    Orchestrates one monitoring run over a list of domains.

    The cycle holds no state between runs; every run starts from the
    configuration and live network responses.
    """

    def __init__(
        self,
        config: MonitorConfig,
        inspector: DomainInspector,
        sink: WebhookSink,
        resolver: Optional[AuthorityResolver] = None,
        logger: Optional["AuditLogger"] = None,
    ) -> None:
        """
        Initialize the monitor cycle.

        Args:
            config: Monitor configuration (domain list, mention, registry sharing)
            inspector: Domain inspector
            sink: Notification sink
            resolver: Resolver used to pre-fetch the registry when sharing is enabled
            logger: Optional audit logger
        """
        self._config = config
        self._inspector = inspector
        self._sink = sink
        self._resolver = resolver
        self._logger = logger

    @classmethod
    def from_config(
        cls,
        config: MonitorConfig,
        logger: Optional["AuditLogger"] = None,
    ) -> "MonitorCycle":
        """Wire the default collaborators from configuration."""
        resolver = AuthorityResolver(
            bootstrap_url=config.bootstrap_url,
            timeout=config.timeouts.registry_seconds,
            logger=logger,
        )
        inspector = DomainInspector(
            resolver=resolver,
            rdap_client=RDAPClient(timeout=config.timeouts.lookup_seconds),
            logger=logger,
        )
        sink = WebhookSink(
            url=config.webhook_url,
            timeout=config.timeouts.webhook_seconds,
            logger=logger,
        )
        return cls(config, inspector, sink, resolver=resolver, logger=logger)

    @property
    def inspector(self) -> DomainInspector:
        return self._inspector

    @property
    def sink(self) -> WebhookSink:
        return self._sink

    async def run(self, domains: Optional[Sequence[str]] = None) -> CycleSummary:
        """
        Run one monitoring cycle.

        Args:
            domains: Domains to check (defaults to the configured list)

        Returns:
            CycleSummary with the number of successful domains out of the total
        """
        domains = list(self._config.domains if domains is None else domains)
        started_at = format_iso_timestamp(utc_now())
        start_time = time.perf_counter()

        self._log(LogLevel.INFO, f"{started_at} - Running domain monitoring", {"domains": len(domains)})

        registry = await self._shared_registry() if domains else None

        outcomes = await asyncio.gather(
            *(self._process_domain(domain, registry) for domain in domains)
        )

        succeeded = sum(1 for outcome in outcomes if outcome.success)
        summary = CycleSummary(
            succeeded=succeeded,
            total=len(domains),
            started_at=started_at,
            duration_ms=(time.perf_counter() - start_time) * 1000,
            outcomes=list(outcomes),
        )

        self._log(
            LogLevel.INFO,
            f"Domain monitoring completed: {summary.succeeded}/{summary.total} successful",
            {
                "succeeded": summary.succeeded,
                "total": summary.total,
                "duration_ms": round(summary.duration_ms, 1),
            },
        )
        return summary

    async def _shared_registry(self) -> Optional[AuthorityRegistry]:
        """Fetch the bootstrap registry once for the cycle when sharing is enabled."""
        if not self._config.share_registry or self._resolver is None:
            return None

        result = await self._resolver.fetch_registry()
        if not result.ok:
            self._log(
                LogLevel.WARN,
                "Shared registry fetch failed; domains will fetch it individually",
                {},
            )
            return None
        return result.registry

    async def _process_domain(
        self, domain: str, registry: Optional[AuthorityRegistry]
    ) -> DomainOutcome:
        """Inspect, format and deliver one domain. Failures become a failed outcome."""
        try:
            status = await self._inspector.inspect(domain, registry)
            payload = format_notification(status, mention=self._config.mention)
            notified = await self._sink.deliver(payload)
        except Exception as e:
            if self._logger:
                self._logger.log_error(
                    "MonitorCycle",
                    f"Error processing domain {domain}",
                    error=e,
                    additional_data={"domain": domain},
                )
            return DomainOutcome(domain=domain, success=False, error=f"{type(e).__name__}: {e}")

        if notified:
            self._log(
                LogLevel.INFO,
                f"Notification sent successfully: {domain} (Status: {status.status_text})",
                {"domain": domain},
            )

        return DomainOutcome(domain=domain, success=True, status=status, notified=notified)

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "MonitorCycle", message, data)
