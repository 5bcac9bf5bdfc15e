"""Resolve the client identifier used as the rate limit key."""

from __future__ import annotations

from typing import Mapping

UNKNOWN_CLIENT = "unknown-ip"

# Checked in order; the first non-empty value wins
FORWARDED_FOR_HEADER = "x-forwarded-for"
REAL_IP_HEADER = "x-real-ip"
CLOUDFLARE_IP_HEADER = "cf-connecting-ip"


def _lower_keys(headers: Mapping[str, str]) -> Mapping[str, str]:
    # Repeated header lines keep the first value, as Starlette's Headers.get does.
    normalized: dict[str, str] = {}
    for key, value in headers.items():
        normalized.setdefault(key.lower(), value)
    return normalized


def resolve_client_ip(headers: Mapping[str, str], fallback: str | None = None) -> str:
    """Return the originating client address for a request.

    Priority: first entry of ``X-Forwarded-For``, then ``X-Real-IP``, then
    ``CF-Connecting-IP``. Without any of them, ``fallback`` (typically the
    socket peer) or ``"unknown-ip"``.

    Args:
        headers: Request headers; lookup is case-insensitive.
        fallback: Value to use when no proxy header is present.

    Returns:
        Non-empty client identifier.
    """

    normalized = _lower_keys(headers)

    forwarded_for = normalized.get(FORWARDED_FOR_HEADER)
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    for header in (REAL_IP_HEADER, CLOUDFLARE_IP_HEADER):
        value = (normalized.get(header) or "").strip()
        if value:
            return value

    return fallback or UNKNOWN_CLIENT
