"""Response header parsing and pagination link extraction.

The parser works on a raw header block (the text between the status line
and the blank line before the body), so repeated headers and the original
name casing survive. Values for a header seen more than once become a list
in order of appearance.
"""

from __future__ import annotations

import re
from typing import Any

import httpx

# Key under which a leading line without ':' (the status line) is stored
STATUS_LINE_KEY = "0"

LINK_RELATIONS = ("next", "last", "first", "prev")

# <URL>; rel="RELATION" for the pagination relations we track
_LINK_PATTERN = re.compile(r'<([^>]+)>\s*;\s*rel="(' + "|".join(LINK_RELATIONS) + ')"')


def parse_headers(raw_headers: str) -> dict[str, str | list[str]]:
    """Parse a raw HTTP header block into a case-preserving mapping.

    Lines beginning with a tab continue the previous header's value
    (obsolete line folding, RFC 7230 section 3.2.4) and are joined with
    '\\r\\n\\t'.

    Args:
        raw_headers: Header block, lines separated by '\\n' (CRLF tolerated).

    Returns:
        Header name -> value, or list of values for repeated names. The
        status line, if present, is stored under STATUS_LINE_KEY. An empty
        block yields an empty mapping.
    """
    headers: dict[str, str | list[str]] = {}
    key = ""

    for line in raw_headers.split("\n"):
        name, sep, value = line.partition(":")

        if sep and not line.startswith("\t"):
            value = value.strip()
            existing = headers.get(name)
            if existing is None:
                headers[name] = value
            elif isinstance(existing, list):
                existing.append(value)
            else:
                headers[name] = [existing, value]
            key = name
            continue

        if line.startswith("\t"):
            if not key:
                continue
            continuation = "\r\n\t" + line.strip()
            current = headers[key]
            if isinstance(current, list):
                current[-1] += continuation
            else:
                headers[key] = current + continuation
        elif not key and line.strip():
            headers[STATUS_LINE_KEY] = line.strip()

    return headers


def extract_links(headers: dict[str, Any]) -> dict[str, str]:
    """Pull next/prev/first/last URLs out of the Link header(s).

    A missing Link header yields {}. The name is matched case-insensitively
    since the parser keeps wire casing. Entries that don't match
    '<URL>; rel="RELATION"' are skipped. If a relation appears more than
    once, the last occurrence wins.
    """
    entries: list[Any] = []
    for name, value in headers.items():
        if not isinstance(name, str) or name.lower() != "link":
            continue
        if isinstance(value, list):
            entries.extend(value)
        else:
            entries.append(value)

    links: dict[str, str] = {}
    for entry in entries:
        if not isinstance(entry, str):
            continue
        for match in _LINK_PATTERN.finditer(entry):
            links[match.group(2)] = match.group(1)
    return links


def build_raw_header_block(response: httpx.Response) -> str:
    """Serialize an httpx response's status line and headers as sent.

    Uses the raw header list so name casing and repeated headers are kept.
    """
    reason = response.reason_phrase
    status_line = f"{response.http_version} {response.status_code}"
    if reason:
        status_line = f"{status_line} {reason}"

    lines = [status_line]
    for name, value in response.headers.raw:
        lines.append(
            f"{name.decode('latin-1')}: {value.decode('latin-1')}"
        )
    return "\r\n".join(lines) + "\r\n\r\n"
