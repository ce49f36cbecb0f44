"""
Property-based tests for the RDAP client.

Uses Hypothesis to generate RDAP domain objects and checks that only the
reported fields are extracted, and that HTTP outcomes map to the right
RDAPStatus.
"""

import asyncio
import string

import httpx
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_monitor.enums import RDAPErrorCode, RDAPStatus
from domain_monitor.rdap_client import RDAPClient, RDAPRecord, RDAPResponse, to_lookup_name


SERVER = "https://rdap.verisign.com/com/v1/"


def run_async(coro):
    """Helper to run async code in tests."""
    return asyncio.run(coro)


async def query(handler, domain: str = "example.com") -> RDAPResponse:
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        return await RDAPClient(client=client).query(SERVER, domain)


def registrar_entity(name: str, roles=("registrar",)) -> dict:
    return {
        "objectClassName": "entity",
        "roles": list(roles),
        "vcardArray": [
            "vcard",
            [
                ["version", {}, "text", "4.0"],
                ["fn", {}, "text", name],
            ],
        ],
    }


# Strategies

status_label = st.text(
    alphabet=string.ascii_letters + " ",
    min_size=1,
    max_size=30,
).filter(lambda s: s.strip())

registrar_name = st.text(alphabet=string.ascii_letters + " .,", min_size=1, max_size=40)

event_date = st.dates().map(lambda d: f"{d.isoformat()}T00:00:00Z")


@st.composite
def rdap_record_strategy(draw) -> tuple[dict, list[str], str, str]:
    """Generate an RDAP domain object and its expected extracted fields."""
    statuses = draw(st.lists(status_label, max_size=5))
    registrar = draw(registrar_name)
    expiry = draw(event_date)

    entities = []
    if draw(st.booleans()):
        entities.append(registrar_entity("Abuse Contact", roles=("abuse",)))
    entities.append(registrar_entity(registrar))

    events = [{"eventAction": "registration", "eventDate": draw(event_date)}]
    events.append({"eventAction": "expiration", "eventDate": expiry})
    if draw(st.booleans()):
        events.append({"eventAction": "last changed", "eventDate": draw(event_date)})

    body = {
        "objectClassName": "domain",
        "ldhName": "example.com",
        "status": statuses,
        "entities": entities,
        "events": events,
        "nameservers": [{"ldhName": "a.iana-servers.net"}],
    }
    return body, statuses or ["Active"], registrar, expiry


class TestRecordExtractionProperty:
    """Status, registrar and expiry are extracted; everything else is ignored."""

    @given(case=rdap_record_strategy())
    @settings(max_examples=100)
    def test_fields_are_extracted(self, case) -> None:
        body, expected_status, expected_registrar, expected_expiry = case

        record = RDAPRecord.from_json(body)

        assert record.status == expected_status
        assert record.registrar == expected_registrar
        assert record.expiry_date == expected_expiry

    def test_missing_fields_use_defaults(self) -> None:
        record = RDAPRecord.from_json({"objectClassName": "domain"})

        assert record.status == ["Active"]
        assert record.registrar == "Unknown"
        assert record.expiry_date == ""

    def test_registrar_without_fn_is_unknown(self) -> None:
        record = RDAPRecord.from_json({
            "entities": [{"roles": ["registrar"], "vcardArray": ["vcard", [["version", {}, "text", "4.0"]]]}],
        })

        assert record.registrar == "Unknown"

    def test_first_expiration_event_wins(self) -> None:
        record = RDAPRecord.from_json({
            "events": [
                {"eventAction": "expiration", "eventDate": "2030-01-01"},
                {"eventAction": "expiration", "eventDate": "2031-01-01"},
            ],
        })

        assert record.expiry_date == "2030-01-01"


class TestLookupNameProperty:
    """Lookup URLs use the A-label form of internationalized names."""

    @given(label=st.text(alphabet=string.ascii_lowercase + string.digits, min_size=1, max_size=20))
    @settings(max_examples=50)
    def test_ascii_names_are_unchanged(self, label: str) -> None:
        assert to_lookup_name(f"{label}.com") == f"{label}.com"

    def test_unicode_name_is_converted(self) -> None:
        assert to_lookup_name("münchen.de") == "xn--mnchen-3ya.de"

    def test_build_url_strips_trailing_slash(self) -> None:
        assert RDAPClient.build_url(SERVER, "example.com") == (
            "https://rdap.verisign.com/com/v1/domain/example.com"
        )
        assert RDAPClient.build_url(SERVER.rstrip("/"), "example.com") == (
            "https://rdap.verisign.com/com/v1/domain/example.com"
        )


class TestQueryOutcomeProperty:
    """HTTP outcomes map to FOUND, NOT_FOUND or ERROR."""

    def test_404_is_not_found(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(404, json={"errorCode": 404})

        response = run_async(query(handler))

        assert response.status == RDAPStatus.NOT_FOUND
        assert response.record is None
        assert seen == ["https://rdap.verisign.com/com/v1/domain/example.com"]

    def test_success_is_found_with_record(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={
                "status": ["client transfer prohibited"],
                "entities": [registrar_entity("Example Registrar")],
                "events": [{"eventAction": "expiration", "eventDate": "2030-01-01"}],
            })

        response = run_async(query(handler))

        assert response.status == RDAPStatus.FOUND
        assert response.record.status == ["client transfer prohibited"]
        assert response.record.registrar == "Example Registrar"
        assert response.record.expiry_date == "2030-01-01"

    @given(code=st.sampled_from([400, 403, 429, 500, 502, 503]))
    @settings(max_examples=10, deadline=None)
    def test_other_error_statuses_are_errors(self, code: int) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(code, text="nope")

        response = run_async(query(handler))

        assert response.status == RDAPStatus.ERROR
        assert response.error.code == RDAPErrorCode.SERVER_ERROR
        assert response.http_status_code == code

    def test_invalid_json_is_parse_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>not rdap</html>")

        response = run_async(query(handler))

        assert response.status == RDAPStatus.ERROR
        assert response.error.code == RDAPErrorCode.PARSE_ERROR

    def test_non_object_json_is_parse_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=["not", "an", "object"])

        response = run_async(query(handler))

        assert response.error.code == RDAPErrorCode.PARSE_ERROR

    def test_timeout_is_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        response = run_async(query(handler))

        assert response.status == RDAPStatus.ERROR
        assert response.error.code == RDAPErrorCode.TIMEOUT

    def test_connection_failure_is_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        response = run_async(query(handler))

        assert response.status == RDAPStatus.ERROR
        assert response.error.code == RDAPErrorCode.NETWORK_ERROR
        assert response.url == "https://rdap.verisign.com/com/v1/domain/example.com"

    @given(code=st.sampled_from([400, 429, 500, 503]))
    @settings(max_examples=10, deadline=None)
    def test_error_status_with_rdap_body_is_parsed(self, code: int) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(code, json={"errorCode": code, "title": "Server Error"})

        response = run_async(query(handler))

        assert response.status == RDAPStatus.FOUND
        assert response.http_status_code == code
        assert response.record.status == ["Active"]
        assert response.record.registrar == "Unknown"

    def test_unbuildable_url_is_invalid_request(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        response = run_async(query(handler, "bad\x01name.com"))

        assert response.status == RDAPStatus.ERROR
        assert response.error.code == RDAPErrorCode.INVALID_REQUEST
        assert seen == []
