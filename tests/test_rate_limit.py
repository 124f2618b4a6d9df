"""Tests for rate limiting and client IP extraction."""

import json
from unittest.mock import MagicMock, patch

import pytest

from beatstore.core.rate_limit import (
    _get_trusted_proxies,
    _is_trusted_proxy,
    get_client_ip,
    rate_limit_exceeded_handler,
)


@pytest.fixture(autouse=True)
def _clear_cache():
    """Each test controls its own proxy configuration."""
    _get_trusted_proxies.cache_clear()
    yield
    _get_trusted_proxies.cache_clear()


def _settings(trusted_proxies: str):
    settings = MagicMock()
    settings.trusted_proxies = trusted_proxies
    return settings


def _request(*, client_host: str = "10.0.0.1", headers: dict | None = None):
    request = MagicMock()
    request.client = MagicMock()
    request.client.host = client_host
    request.headers = headers or {}
    return request


class TestTrustedProxies:
    def test_parses_ips_and_cidrs(self):
        with patch(
            "beatstore.core.rate_limit.get_settings",
            return_value=_settings("127.0.0.1, ::1,172.16.0.0/12"),
        ):
            exact, networks = _get_trusted_proxies()
        assert exact == frozenset({"127.0.0.1", "::1"})
        assert [str(n) for n in networks] == ["172.16.0.0/12"]

    def test_cidr_membership(self):
        with patch(
            "beatstore.core.rate_limit.get_settings", return_value=_settings("172.16.0.0/12")
        ):
            assert _is_trusted_proxy("172.18.0.3") is True
            assert _is_trusted_proxy("10.0.0.1") is False
            assert _is_trusted_proxy("not-an-ip") is False


class TestGetClientIp:
    def test_untrusted_peer_headers_ignored(self):
        with patch("beatstore.core.rate_limit.get_settings", return_value=_settings("127.0.0.1")):
            request = _request(
                client_host="10.0.0.99",
                headers={"X-Real-IP": "1.2.3.4", "X-Forwarded-For": "5.6.7.8"},
            )
            assert get_client_ip(request) == "10.0.0.99"

    def test_trusted_peer_prefers_x_real_ip(self):
        with patch(
            "beatstore.core.rate_limit.get_settings", return_value=_settings("172.16.0.0/12")
        ):
            request = _request(
                client_host="172.18.0.3",
                headers={"X-Real-IP": "203.0.113.50", "X-Forwarded-For": "1.1.1.1"},
            )
            assert get_client_ip(request) == "203.0.113.50"

    def test_trusted_peer_uses_first_forwarded_entry(self):
        with patch(
            "beatstore.core.rate_limit.get_settings", return_value=_settings("172.16.0.0/12")
        ):
            request = _request(
                client_host="172.20.0.1",
                headers={"X-Forwarded-For": "1.2.3.4, 5.6.7.8"},
            )
            assert get_client_ip(request) == "1.2.3.4"


class TestRateLimitExceededHandler:
    def test_response(self):
        exc = MagicMock()
        exc.detail = "Rate limit exceeded: 60 per 1 minute"
        response = rate_limit_exceeded_handler(MagicMock(), exc)
        assert response.status_code == 429
        assert response.headers["retry-after"] == "60"
        body = json.loads(response.body)
        assert body["retry_after"] == 60
        assert "detail" in body
