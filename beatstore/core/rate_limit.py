"""Rate limiting middleware using slowapi."""

import ipaddress
from functools import lru_cache

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from beatstore.core.config import get_settings

RETRY_AFTER_SECONDS = 60


@lru_cache(maxsize=1)
def _get_trusted_proxies() -> tuple[
    frozenset[str],
    tuple[ipaddress.IPv4Network | ipaddress.IPv6Network, ...],
]:
    """Return trusted proxy IPs and CIDR networks from settings (cached)."""
    exact = set()
    networks = []
    for entry in get_settings().trusted_proxies.split(","):
        entry = entry.strip()
        if not entry:
            continue
        if "/" in entry:
            networks.append(ipaddress.ip_network(entry, strict=False))
        else:
            exact.add(entry)
    return frozenset(exact), tuple(networks)


def _is_trusted_proxy(ip: str) -> bool:
    exact, networks = _get_trusted_proxies()
    if ip in exact:
        return True
    try:
        addr = ipaddress.ip_address(ip)
    except ValueError:
        return False
    return any(addr in net for net in networks)


def get_client_ip(request: Request) -> str:
    """Client IP for rate-limit keys.

    Forwarded headers are honoured only when the direct peer is a trusted
    proxy; X-Real-IP wins over the first X-Forwarded-For entry.
    """
    direct_ip = get_remote_address(request)
    if not _is_trusted_proxy(direct_ip):
        return direct_ip

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    return direct_ip


limiter = Limiter(key_func=get_client_ip, enabled=get_settings().is_rate_limit_enabled)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    return JSONResponse(
        status_code=429,
        content={
            "detail": "Too many searches. Please slow down and try again.",
            "retry_after": RETRY_AFTER_SECONDS,
        },
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )
