"""OAuth 1.0a one-legged request signing.

Signs requests with only a consumer key/secret pair, the scheme the store
API accepts over plain HTTP. The base string differs from RFC 5849 in one
place: the '=' and '&' joining the parameter pairs are themselves
percent-encoded ('%3D' and '%26'). The server verifies exactly this form.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import time
import uuid
from typing import Any, Mapping
from urllib.parse import quote, unquote

from wc_api_client.models import HashAlgorithm

_DIGESTS = {
    HashAlgorithm.SHA256: hashlib.sha256,
    HashAlgorithm.SHA1: hashlib.sha1,
}


def rfc3986_encode(value: str) -> str:
    """Percent-encode everything except the RFC 3986 unreserved characters.

    Spaces become '%20', never '+'.
    """
    return quote(value, safe="")


def stringify_param(value: Any) -> str:
    """Render a scalar parameter value the way it appears in a query string."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def flatten_params(params: Mapping[str, Any], prefix: str = "") -> list[tuple[str, str]]:
    """Flatten nested mappings into bracketed keys, preserving order.

    {"filter": {"limit": 5}} becomes [("filter[limit]", "5")]. Lists are
    indexed the same way: {"ids": [1, 2]} -> [("ids[0]", "1"), ("ids[1]", "2")].
    """
    flat: list[tuple[str, str]] = []
    for key, value in params.items():
        full_key = f"{prefix}[{key}]" if prefix else str(key)
        if isinstance(value, Mapping):
            flat.extend(flatten_params(value, full_key))
        elif isinstance(value, (list, tuple)):
            indexed = {str(i): item for i, item in enumerate(value)}
            flat.extend(flatten_params(indexed, full_key))
        else:
            flat.append((full_key, stringify_param(value)))
    return flat


def _normalize_component(component: str) -> str:
    # Decode once in case the caller pre-encoded, then encode per RFC 3986.
    # Percent signs are double-encoded so they survive the outer encoding.
    return rfc3986_encode(unquote(component)).replace("%", "%25")


def normalize_parameters(params: Mapping[str, Any]) -> dict[str, str]:
    """Normalize each parameter key and value for the signature base string.

    Both key and value are normalized, so a filter param like
    'filter[period]' => 'week' becomes 'filter%255Bperiod%255D' => 'week'.

    Args:
        params: Flat parameter mapping. Values are stringified first.

    Returns:
        New mapping of normalized keys to normalized values.
    """
    normalized: dict[str, str] = {}
    for key, value in params.items():
        normalized[_normalize_component(str(key))] = _normalize_component(
            stringify_param(value)
        )
    return normalized


def generate_oauth_signature(
    params: Mapping[str, Any],
    http_method: str,
    endpoint_url: str,
    consumer_secret: str,
    algorithm: HashAlgorithm = HashAlgorithm.SHA256,
) -> str:
    """Compute the base64 HMAC signature for a request.

    Args:
        params: All parameters to sign, OAuth parameters included and
                oauth_signature excluded. Must already be flat.
        http_method: Upper-case HTTP method.
        endpoint_url: Full URL of the endpoint (API URL + endpoint), no query.
        consumer_secret: HMAC key.
        algorithm: SHA256 (default) or SHA1.

    Returns:
        Base64-encoded raw HMAC digest.
    """
    string_to_sign = build_string_to_sign(params, http_method, endpoint_url)
    digest = hmac.new(
        consumer_secret.encode("utf-8"),
        string_to_sign.encode("utf-8"),
        _DIGESTS[HashAlgorithm(algorithm)],
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def build_string_to_sign(
    params: Mapping[str, Any],
    http_method: str,
    endpoint_url: str,
) -> str:
    """Build 'METHOD&encodedURL&paramString' with the %3D/%26 joiners."""
    base_request_uri = rfc3986_encode(endpoint_url)

    normalized = normalize_parameters(params)
    # Plain code-point ordering; normalized keys are pure ASCII.
    query_params = [
        f"{key}%3D{normalized[key]}" for key in sorted(normalized)
    ]
    query_string = "%26".join(query_params)

    return f"{http_method}&{base_request_uri}&{query_string}"


def generate_nonce() -> str:
    """Return a fresh per-request token. Uniqueness is all that matters."""
    return uuid.uuid4().hex


def build_oauth_params(
    consumer_key: str,
    algorithm: HashAlgorithm = HashAlgorithm.SHA256,
    timestamp: int | None = None,
    nonce: str | None = None,
) -> dict[str, str]:
    """OAuth parameters that accompany every unsigned-transport request.

    The signature itself is not included; callers add it after signing.
    """
    return {
        "oauth_consumer_key": consumer_key,
        "oauth_timestamp": str(int(time.time()) if timestamp is None else timestamp),
        "oauth_nonce": generate_nonce() if nonce is None else nonce,
        "oauth_signature_method": f"HMAC-{HashAlgorithm(algorithm).value}",
    }
