"""
tests/unit/test_ip_service.py

Unit tests for services/ip_service.py.
Verifies ordered fallback across lookup services and the IPv4 validation rule.
"""

from __future__ import annotations

import pytest
import httpx

from services.ip_service import IP_CHECK_SERVICES, IpService
from exceptions import NoIpAvailableError
from validation import is_ipv4

_S1, _S2, _S3 = "https://one.test/ip", "https://two.test/ip", "https://three.test/ip"


# ---------------------------------------------------------------------------
# is_ipv4
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("value", ["1.2.3.4", "192.168.100.200", "0.0.0.0", "999.999.999.999"])
def test_is_ipv4_accepts_dotted_quads(value):
    """Four 1-3 digit groups pass, including out-of-range octets."""
    assert is_ipv4(value)


@pytest.mark.parametrize(
    "value",
    ["1.2.3", "1.2.3.4.5", "a.b.c.d", "1.2.3.x", "1234.1.1.1", "", " 1.2.3.4", "1.2.3.4\n", None, 1234],
)
def test_is_ipv4_rejects_malformed_values(value):
    """Wrong segment counts, non-digits and non-strings are rejected."""
    assert not is_ipv4(value)


# ---------------------------------------------------------------------------
# resolve_external_ip
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_default_services_are_tried_in_order(mock_http):
    """With the built-in list, ipify is asked first."""
    route = mock_http.get(IP_CHECK_SERVICES[0]).mock(
        return_value=httpx.Response(200, json={"ip": "1.2.3.4"})
    )
    async with httpx.AsyncClient() as client:
        ip = await IpService(http_client=client).resolve_external_ip()

    assert ip == "1.2.3.4"
    assert route.call_count == 1


@pytest.mark.asyncio
async def test_falls_back_after_network_error(mock_http):
    """Service 1 fails, service 2 answers, service 3 is never queried."""
    mock_http.get(_S1).mock(side_effect=httpx.ConnectError("unreachable"))
    mock_http.get(_S2).mock(return_value=httpx.Response(200, json={"ip": "5.6.7.8"}))
    third = mock_http.get(_S3).mock(return_value=httpx.Response(200, json={"ip": "9.9.9.9"}))

    async with httpx.AsyncClient() as client:
        service = IpService(http_client=client, services=[_S1, _S2, _S3])
        ip = await service.resolve_external_ip()

    assert ip == "5.6.7.8"
    assert not third.called


@pytest.mark.asyncio
async def test_falls_back_after_non_200_and_bad_json(mock_http):
    """Non-200 and unparsable bodies are skipped like network errors."""
    mock_http.get(_S1).mock(return_value=httpx.Response(503, json={"ip": "1.1.1.1"}))
    mock_http.get(_S2).mock(return_value=httpx.Response(200, text="not json"))
    mock_http.get(_S3).mock(return_value=httpx.Response(200, json={"ip_addr": "8.8.4.4"}))

    async with httpx.AsyncClient() as client:
        service = IpService(http_client=client, services=[_S1, _S2, _S3])
        ip = await service.resolve_external_ip()

    assert ip == "8.8.4.4"


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["ip", "ip_addr", "IP"])
async def test_reads_known_field_variants(mock_http, field):
    """Each service's field name is understood."""
    mock_http.get(_S1).mock(return_value=httpx.Response(200, json={field: "10.0.0.1"}))

    async with httpx.AsyncClient() as client:
        ip = await IpService(http_client=client, services=[_S1]).resolve_external_ip()

    assert ip == "10.0.0.1"


@pytest.mark.asyncio
async def test_skips_invalid_ip_value(mock_http):
    """An IPv6 or garbage value is treated as a failed service."""
    mock_http.get(_S1).mock(return_value=httpx.Response(200, json={"ip": "2001:db8::1"}))
    mock_http.get(_S2).mock(return_value=httpx.Response(200, json={"ip": "4.3.2.1"}))

    async with httpx.AsyncClient() as client:
        ip = await IpService(http_client=client, services=[_S1, _S2]).resolve_external_ip()

    assert ip == "4.3.2.1"


@pytest.mark.asyncio
async def test_raises_when_every_service_fails(mock_http):
    """NoIpAvailableError is raised only after all services were tried."""
    first = mock_http.get(_S1).mock(side_effect=httpx.ReadTimeout("slow"))
    second = mock_http.get(_S2).mock(return_value=httpx.Response(200, json=["1.2.3.4"]))
    third = mock_http.get(_S3).mock(return_value=httpx.Response(200, json={"country": "NL"}))

    async with httpx.AsyncClient() as client:
        service = IpService(http_client=client, services=[_S1, _S2, _S3])
        with pytest.raises(NoIpAvailableError):
            await service.resolve_external_ip()

    assert first.called and second.called and third.called
