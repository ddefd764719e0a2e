"""Request header sanitization for upstream forwarding."""

from __future__ import annotations

from collections.abc import Mapping

from services.edge_gateway_service.models.proxy_models import HeaderValue

# Connection-scoped headers; the outbound transport recomputes these.
HOP_BY_HOP_HEADERS = frozenset(
    {
        "host",
        "connection",
        "content-length",
        "keep-alive",
        "proxy-connection",
        "transfer-encoding",
        "te",
        "trailer",
        "upgrade",
    }
)

GATEWAY_SERVICE_HEADER = "x-gateway-service"


def _wire_value(value: str) -> str | bytes | None:
    # httpx encodes str values as ascii; inbound values were decoded as latin-1.
    if value.isascii():
        return value
    try:
        return value.encode("latin-1")
    except UnicodeEncodeError:
        return None


def sanitize_headers(
    headers: Mapping[str, HeaderValue | None], gateway_marker: str = "api-gateway"
) -> dict[str, str | bytes]:
    """Return lower-cased, single-valued headers safe to send upstream.

    Multi-valued headers are comma-joined, ``x-forwarded-for`` falls back to
    ``x-real-ip`` (then to an empty string) and the gateway marker is added.
    Non-ASCII values go out as their latin-1 bytes; values with no latin-1
    form are dropped.
    """
    sanitized: dict[str, str | bytes] = {}
    for name, value in headers.items():
        key = name.lower()
        if key in HOP_BY_HOP_HEADERS or value is None or not key.isascii():
            continue
        if isinstance(value, (list, tuple)):
            joined = ",".join(str(item) for item in value)
        else:
            joined = str(value)
        wire_value = _wire_value(joined)
        if wire_value is not None:
            sanitized[key] = wire_value

    sanitized["x-forwarded-for"] = (
        sanitized.get("x-forwarded-for") or sanitized.get("x-real-ip") or ""
    )
    sanitized[GATEWAY_SERVICE_HEADER] = gateway_marker
    return sanitized
