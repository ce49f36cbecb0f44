"""
Domain Inspector.

Combines authority resolution and the per-domain RDAP lookup into a single
normalized DomainStatus. Every failure degrades to a descriptive status
label; inspection itself never raises for lookup problems.
"""

from typing import TYPE_CHECKING, Optional

from .bootstrap import AuthorityRegistry, AuthorityResolver
from .enums import LogLevel, RDAPStatus
from .models import (
    QUERY_ERROR_STATUS,
    SERVER_NOT_FOUND_STATUS,
    DomainStatus,
    zone_of,
)
from .rdap_client import RDAPClient

if TYPE_CHECKING:
    from .audit_logger import AuditLogger


class DomainInspector:
    """Inspects one domain and classifies the result into a DomainStatus."""

    def __init__(
        self,
        resolver: AuthorityResolver,
        rdap_client: RDAPClient,
        logger: Optional["AuditLogger"] = None,
    ) -> None:
        self._resolver = resolver
        self._rdap_client = rdap_client
        self._logger = logger

    async def inspect(
        self, domain: str, registry: Optional[AuthorityRegistry] = None
    ) -> DomainStatus:
        """
        Inspect a domain.

        Args:
            domain: Fully-qualified domain name
            registry: Optional pre-fetched bootstrap registry to resolve against

        Returns:
            DomainStatus stamped with the time of evaluation
        """
        self._log(LogLevel.INFO, f"Checking domain: {domain}", {"domain": domain})

        status = await self._inspect(domain, registry)

        self._log(
            LogLevel.INFO,
            f"Result: {domain} - {'Available' if status.is_available else 'Unavailable'}"
            f" - {status.status_text}",
            {"domain": domain, "is_available": status.is_available, "status": status.status},
        )
        return status

    async def _inspect(
        self, domain: str, registry: Optional[AuthorityRegistry]
    ) -> DomainStatus:
        server = await self._resolver.resolve(zone_of(domain), registry)
        if not server:
            return DomainStatus.unavailable(domain, SERVER_NOT_FOUND_STATUS)

        response = await self._rdap_client.query(server, domain)

        if response.status == RDAPStatus.NOT_FOUND:
            return DomainStatus.available(domain)

        if response.status == RDAPStatus.FOUND and response.record is not None:
            record = response.record
            return DomainStatus(
                domain=domain,
                is_available=False,
                status=list(record.status),
                registrar=record.registrar,
                expiry_date=record.expiry_date,
            )

        if self._logger and response.error:
            self._logger.log_error(
                "DomainInspector",
                f"RDAP query error for {domain}",
                request_url=response.url,
                response_status_code=response.http_status_code or None,
                additional_data={
                    "domain": domain,
                    "code": response.error.code.value,
                    "error_message": response.error.message,
                },
            )
        return DomainStatus.unavailable(domain, QUERY_ERROR_STATUS)

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "DomainInspector", message, data)
