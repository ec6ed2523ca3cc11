"""Turn transport-encoded Gmail message bodies into plain text for matching."""

from __future__ import annotations

import base64
import binascii
import logging

from bs4 import BeautifulSoup

from .exceptions import DecodeError

logger = logging.getLogger(__name__)

_PLAIN = "text/plain"
_HTML = "text/html"


def _decode_strict(data: str) -> str:
    """Decode a base64url string to UTF-8 text, raising DecodeError on bad input."""
    standard = data.replace("-", "+").replace("_", "/")
    padded = standard + "=" * (-len(standard) % 4)
    try:
        raw = base64.b64decode(padded, validate=True)
        return raw.decode("utf-8")
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Malformed base64url body: {exc}") from exc


def decode_base64url(data: str | None) -> str:
    """Decode Gmail's base64url body data.

    Malformed input yields an empty string; this never raises.
    """
    if not data:
        return ""
    try:
        return _decode_strict(data)
    except DecodeError as exc:
        logger.debug("%s", exc)
        return ""


def html_to_text(html: str) -> str:
    """Reduce an HTML body to its visible text."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "head"]):
        tag.decompose()
    return soup.get_text(" ", strip=True)


def _flatten_parts(parts: list[dict]) -> list[dict]:
    """Depth-first list of leaf parts, descending into nested multipart."""
    leaves: list[dict] = []
    for part in parts:
        if part.get("parts"):
            leaves.extend(_flatten_parts(part["parts"]))
        else:
            leaves.append(part)
    return leaves


def _part_data(part: dict) -> str:
    return (part.get("body") or {}).get("data") or ""


def _select_part(parts: list[dict]) -> dict | None:
    """Pick the part to read: plain text, then HTML, then the first part with data."""
    with_data = [p for p in _flatten_parts(parts) if _part_data(p)]
    for mime_type in (_PLAIN, _HTML):
        for part in with_data:
            if part.get("mimeType", "").lower() == mime_type:
                return part
    return with_data[0] if with_data else None


def extract_body(payload: dict | None) -> str:
    """Return the plain text of a Gmail message payload.

    Inline ``body.data`` wins over ``parts``.  Empty payloads and
    undecodable data give ``""``.
    """
    if not payload:
        return ""

    mime_type = payload.get("mimeType", "").lower()
    data = _part_data(payload)

    if not data and payload.get("parts"):
        part = _select_part(payload["parts"])
        if part is None:
            return ""
        mime_type = part.get("mimeType", "").lower()
        data = _part_data(part)

    text = decode_base64url(data)
    if text and mime_type == _HTML:
        return html_to_text(text)
    return text
