"""
RDAP bootstrap (authority registry) resolution.

Fetches the IANA RDAP bootstrap document for DNS and finds the RDAP server
responsible for a top-level zone.

Bootstrap format:
{
    "services": [
        [["com", "net"], ["https://rdap.verisign.com/com/v1/"]],
        [["org"], ["https://rdap.publicinterestregistry.org/rdap/"]],
        ...
    ]
}

Zone matching is lenient: a service is selected when any of its
zone labels contains the requested zone as a substring (case-insensitive).
A zone that is a substring of another label (e.g. 'co' in 'company') can
therefore match the wrong service if that service is listed first.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

import httpx

from .config import IANA_BOOTSTRAP_URL
from .enums import LogLevel, RegistryErrorCode
from .exceptions import ProtocolError

if TYPE_CHECKING:
    from .audit_logger import AuditLogger


@dataclass
class RegistryService:
    """One bootstrap entry: the zones it covers and their RDAP base URLs."""

    zones: list[str]
    servers: list[str]


@dataclass
class AuthorityRegistry:
    """Parsed bootstrap document."""

    services: list[RegistryService] = field(default_factory=list)
    publication: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> "AuthorityRegistry":
        """
        Parse a bootstrap document.

        Entries that are not [zones, servers] pairs of string lists are skipped.

        Raises:
            ProtocolError: If the document is not an object with a 'services' list
        """
        if not isinstance(data, dict) or not isinstance(data.get("services"), list):
            raise ProtocolError(
                code=RegistryErrorCode.PARSE_ERROR.value,
                message="Bootstrap document has no 'services' list",
            )

        services = []
        for entry in data["services"]:
            if not isinstance(entry, list) or len(entry) < 2:
                continue
            zones, servers = entry[0], entry[1]
            if not isinstance(zones, list) or not isinstance(servers, list):
                continue
            services.append(RegistryService(
                zones=[z for z in zones if isinstance(z, str)],
                servers=[s for s in servers if isinstance(s, str) and s],
            ))

        publication = data.get("publication")
        return cls(
            services=services,
            publication=publication if isinstance(publication, str) else None,
        )


@dataclass
class RegistryError:
    """Error information from a bootstrap fetch."""

    code: RegistryErrorCode
    message: str
    http_status_code: Optional[int] = None


@dataclass
class RegistryFetchResult:
    """Outcome of fetching the bootstrap document: a registry or an error."""

    registry: Optional[AuthorityRegistry] = None
    error: Optional[RegistryError] = None

    @property
    def ok(self) -> bool:
        return self.registry is not None


def find_server(registry: AuthorityRegistry, zone: str) -> Optional[str]:
    """
    Find the RDAP base URL for a zone in a parsed registry.

    Returns the first server of the first service with a zone label that
    contains `zone`; None for an empty zone or when nothing matches.
    """
    needle = zone.strip().lower()
    if not needle:
        return None

    for service in registry.services:
        if any(needle in label.lower() for label in service.zones):
            return service.servers[0] if service.servers else None
    return None


class AuthorityResolver:
    """Resolves zone labels to RDAP server base URLs via the bootstrap document."""

    def __init__(
        self,
        bootstrap_url: str = IANA_BOOTSTRAP_URL,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
        logger: Optional["AuditLogger"] = None,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            bootstrap_url: Location of the bootstrap document
            timeout: Request timeout in seconds
            client: Optional shared HTTP client (one is created per fetch otherwise)
            logger: Optional audit logger for failure diagnostics
        """
        self._bootstrap_url = bootstrap_url
        self._timeout = timeout
        self._client = client
        self._logger = logger

    @property
    def bootstrap_url(self) -> str:
        return self._bootstrap_url

    async def fetch_registry(self) -> RegistryFetchResult:
        """Fetch and parse the bootstrap document. Never raises."""
        if self._client is not None:
            result = await self._fetch(self._client)
        else:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
            ) as client:
                result = await self._fetch(client)

        if result.error:
            self._log_failure(result.error)
        return result

    async def _fetch(self, client: httpx.AsyncClient) -> RegistryFetchResult:
        try:
            response = await client.get(
                self._bootstrap_url,
                headers={"Accept": "application/json"},
                timeout=self._timeout,
            )
        except httpx.TimeoutException:
            return RegistryFetchResult(error=RegistryError(
                code=RegistryErrorCode.TIMEOUT,
                message=f"Bootstrap request timed out after {self._timeout}s",
            ))
        except httpx.HTTPError as e:
            return RegistryFetchResult(error=RegistryError(
                code=RegistryErrorCode.NETWORK_ERROR,
                message=f"Bootstrap request failed: {e}",
            ))

        if not response.is_success:
            return RegistryFetchResult(error=RegistryError(
                code=RegistryErrorCode.HTTP_ERROR,
                message=f"Bootstrap request returned HTTP {response.status_code}",
                http_status_code=response.status_code,
            ))

        try:
            registry = AuthorityRegistry.from_json(response.json())
        except ValueError as e:
            return RegistryFetchResult(error=RegistryError(
                code=RegistryErrorCode.PARSE_ERROR,
                message=f"Bootstrap document is not valid JSON: {e}",
                http_status_code=response.status_code,
            ))
        except ProtocolError as e:
            return RegistryFetchResult(error=RegistryError(
                code=RegistryErrorCode.PARSE_ERROR,
                message=e.message,
                http_status_code=response.status_code,
            ))

        return RegistryFetchResult(registry=registry)

    async def resolve(
        self, zone: str, registry: Optional[AuthorityRegistry] = None
    ) -> Optional[str]:
        """
        Return the RDAP base URL for a zone, or None if none can be found.

        The bootstrap document is fetched on every call unless a registry is
        passed in. Failures are logged, never raised.
        """
        if registry is None:
            result = await self.fetch_registry()
            if not result.ok:
                return None
            registry = result.registry

        server = find_server(registry, zone)
        if server is None and self._logger:
            self._logger.log(
                LogLevel.WARN,
                "AuthorityResolver",
                f"No RDAP server found for zone '{zone}'",
                {"zone": zone},
            )
        return server

    def _log_failure(self, error: RegistryError) -> None:
        if self._logger is None:
            return
        self._logger.log(
            LogLevel.ERROR,
            "AuthorityResolver",
            "RDAP server lookup error",
            {
                "code": error.code.value,
                "error_message": error.message,
                "request_url": self._bootstrap_url,
                "response_status_code": error.http_status_code,
            },
        )
