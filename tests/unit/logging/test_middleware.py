"""Unit tests for request correlation and client address extraction."""

from httpx import AsyncClient
from starlette.requests import Request

from chronicle.core.logging.middleware import REQUEST_ID_HEADER, get_client_ip


def make_request(headers: dict[str, str] | None = None, client: tuple[str, int] | None = None) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestGetClientIp:
    """Tests for get_client_ip."""

    def test_first_forwarded_hop_wins(self):
        request = make_request({"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}, ("10.0.0.2", 80))

        assert get_client_ip(request) == "203.0.113.7"

    def test_real_ip_header(self):
        request = make_request({"X-Real-IP": "198.51.100.4"}, ("10.0.0.2", 80))

        assert get_client_ip(request) == "198.51.100.4"

    def test_socket_peer(self):
        assert get_client_ip(make_request(client=("192.0.2.1", 5000))) == "192.0.2.1"

    def test_no_address(self):
        assert get_client_ip(make_request()) is None


class TestRequestId:
    """Tests for the correlation ID on responses and problem bodies."""

    async def test_client_id_is_echoed_and_traced(self, client: AsyncClient):
        response = await client.get("/api/v1/events", headers={REQUEST_ID_HEADER: "req-123"})

        assert response.status_code == 401
        assert response.headers[REQUEST_ID_HEADER] == "req-123"
        assert response.json()["trace_id"] == "req-123"

    async def test_id_generated_when_absent(self, client: AsyncClient):
        response = await client.get("/api/v1/events")

        generated = response.headers[REQUEST_ID_HEADER]
        assert generated
        assert response.json()["trace_id"] == generated
