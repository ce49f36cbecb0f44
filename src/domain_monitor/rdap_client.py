"""
RDAP Client for per-domain record lookups.

This module provides an async RDAP client that queries a registry's RDAP
server for a single domain, distinguishes "not found" (HTTP 404) from a
registered domain, and parses only the record fields the monitor reports:
status labels, registrar name and expiration date.
"""

import time
from dataclasses import dataclass
from typing import Any, Optional

import httpx
import idna

from .enums import RDAPErrorCode, RDAPStatus
from .exceptions import ProtocolError
from .models import DEFAULT_ACTIVE_STATUS, UNKNOWN_REGISTRAR


@dataclass
class RDAPRecord:
    """
    Parsed RDAP domain record.

    Only the reported fields are extracted; everything else in the response
    is ignored.
    """

    status: list[str]
    registrar: str
    expiry_date: str

    @classmethod
    def from_json(cls, data: Any) -> "RDAPRecord":
        """
        Parse an RDAP domain object.

        Raises:
            ProtocolError: If the body is not a JSON object
        """
        if not isinstance(data, dict):
            raise ProtocolError(
                code=RDAPErrorCode.PARSE_ERROR.value,
                message=f"RDAP response is not an object: {type(data).__name__}",
            )

        status = data.get("status")
        if isinstance(status, list):
            status = [s for s in status if isinstance(s, str) and s]
        else:
            status = []

        return cls(
            status=status or [DEFAULT_ACTIVE_STATUS],
            registrar=_extract_registrar(data.get("entities")),
            expiry_date=_extract_expiry_date(data.get("events")),
        )


def _extract_registrar(entities: Any) -> str:
    """Return the 'fn' of the first entity with the registrar role."""
    if not isinstance(entities, list):
        return UNKNOWN_REGISTRAR

    for entity in entities:
        if not isinstance(entity, dict):
            continue
        roles = entity.get("roles")
        if not isinstance(roles, list) or "registrar" not in roles:
            continue

        # jCard: ["vcard", [[name, params, type, value], ...]]
        vcard = entity.get("vcardArray")
        properties = vcard[1] if isinstance(vcard, list) and len(vcard) > 1 else None
        if not isinstance(properties, list):
            return UNKNOWN_REGISTRAR
        for prop in properties:
            if isinstance(prop, list) and len(prop) > 3 and prop[0] == "fn":
                value = prop[3]
                return value if isinstance(value, str) and value else UNKNOWN_REGISTRAR
        return UNKNOWN_REGISTRAR

    return UNKNOWN_REGISTRAR


def _extract_expiry_date(events: Any) -> str:
    """Return the date of the first 'expiration' event, or ''."""
    if not isinstance(events, list):
        return ""
    for event in events:
        if isinstance(event, dict) and event.get("eventAction") == "expiration":
            date = event.get("eventDate")
            return date if isinstance(date, str) else ""
    return ""


def to_lookup_name(domain: str) -> str:
    """
    Return the name used in the RDAP URL.

    Internationalized names are converted to their IDNA A-label form; names
    that are already ASCII or cannot be encoded are used unchanged.
    """
    if domain.isascii():
        return domain
    try:
        return idna.encode(domain, uts46=True).decode("ascii")
    except idna.IDNAError:
        return domain


@dataclass
class RDAPError:
    """Error information from an RDAP query."""

    code: RDAPErrorCode
    message: str
    http_status_code: Optional[int] = None


@dataclass
class RDAPResponse:
    """Outcome of an RDAP query."""

    status: RDAPStatus
    http_status_code: int
    record: Optional[RDAPRecord] = None
    error: Optional[RDAPError] = None
    url: Optional[str] = None
    response_time_ms: float = 0.0


class RDAPClient:
    """Async RDAP client for `{server}/domain/{name}` lookups."""

    def __init__(
        self,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize the RDAP client.

        Args:
            timeout: Request timeout in seconds
            client: Optional shared HTTP client (one is created per query otherwise)
        """
        self._timeout = timeout
        self._client = client

    @staticmethod
    def build_url(server: str, domain: str) -> str:
        return f"{server.rstrip('/')}/domain/{to_lookup_name(domain)}"

    async def query(self, server: str, domain: str) -> RDAPResponse:
        """
        Query an RDAP server for a domain. Never raises.

        Args:
            server: RDAP base URL for the domain's zone
            domain: Domain name to look up

        Returns:
            RDAPResponse with NOT_FOUND for HTTP 404, FOUND with a parsed
            record for a successful response, ERROR otherwise
        """
        if self._client is not None:
            return await self._query(self._client, server, domain)

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout),
            follow_redirects=True,
        ) as client:
            return await self._query(client, server, domain)

    async def _query(
        self, client: httpx.AsyncClient, server: str, domain: str
    ) -> RDAPResponse:
        start_time = time.perf_counter()
        url = self.build_url(server, domain)

        try:
            response = await client.get(
                url,
                headers={"Accept": "application/rdap+json, application/json"},
                timeout=self._timeout,
            )
        except httpx.TimeoutException:
            return RDAPResponse(
                status=RDAPStatus.ERROR,
                http_status_code=0,
                error=RDAPError(
                    code=RDAPErrorCode.TIMEOUT,
                    message=f"RDAP request timed out after {self._timeout}s",
                ),
                url=url,
                response_time_ms=self._elapsed_ms(start_time),
            )
        except httpx.HTTPError as e:
            return RDAPResponse(
                status=RDAPStatus.ERROR,
                http_status_code=0,
                error=RDAPError(
                    code=RDAPErrorCode.NETWORK_ERROR,
                    message=f"Connection error: {e}",
                ),
                url=url,
                response_time_ms=self._elapsed_ms(start_time),
            )
        except httpx.InvalidURL as e:
            # Raised while building the request, e.g. control characters in the name
            return RDAPResponse(
                status=RDAPStatus.ERROR,
                http_status_code=0,
                error=RDAPError(
                    code=RDAPErrorCode.INVALID_REQUEST,
                    message=f"Invalid lookup URL: {e}",
                ),
                url=url,
                response_time_ms=self._elapsed_ms(start_time),
            )

        response_time_ms = self._elapsed_ms(start_time)

        if response.status_code == 404:
            return RDAPResponse(
                status=RDAPStatus.NOT_FOUND,
                http_status_code=404,
                url=url,
                response_time_ms=response_time_ms,
            )

        # Any other status is parsed like a record; an error status only
        # fails the lookup when its body is not an RDAP object.
        try:
            record = RDAPRecord.from_json(response.json())
        except (ValueError, ProtocolError) as e:
            if response.status_code >= 400:
                code = RDAPErrorCode.SERVER_ERROR
                message = f"RDAP server returned HTTP {response.status_code}"
            else:
                code = RDAPErrorCode.PARSE_ERROR
                message = f"Failed to parse RDAP response: {e}"
            return RDAPResponse(
                status=RDAPStatus.ERROR,
                http_status_code=response.status_code,
                error=RDAPError(
                    code=code,
                    message=message,
                    http_status_code=response.status_code,
                ),
                url=url,
                response_time_ms=response_time_ms,
            )

        return RDAPResponse(
            status=RDAPStatus.FOUND,
            http_status_code=response.status_code,
            record=record,
            url=url,
            response_time_ms=response_time_ms,
        )

    def _elapsed_ms(self, start_time: float) -> float:
        return (time.perf_counter() - start_time) * 1000
