"""
Header and body access for Gmail API message dicts.

Gmail returns ``users.messages.get(format="full")`` payloads with headers as
a list of ``{"name", "value"}`` pairs and body content base64url-encoded,
either inline in ``payload.body.data`` or spread across ``payload.parts``.
"""

import base64
import binascii
import logging
import re
from typing import Optional

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# Only these parts contribute to the decoded body
_TEXT_MIME_TYPES = ("text/plain", "text/html")


def get_header(message: dict, name: str) -> Optional[str]:
    """Return the value of the first header called exactly ``name``, or None."""
    headers = (message.get("payload") or {}).get("headers") or []
    for header in headers:
        if header.get("name") == name:
            return header.get("value")
    return None


def _decode_base64url(data: str) -> str:
    """Decode a Gmail base64url blob to text.

    Gmail strips the ``=`` padding, so it is restored before decoding.
    Invalid UTF-8 sequences are replaced rather than raising.
    """
    standard = data.replace("-", "+").replace("_", "/")
    standard += "=" * (-len(standard) % 4)
    raw = base64.b64decode(standard)
    return raw.decode("utf-8", errors="replace")


def _decode_best_effort(data: str) -> str:
    """Decode a single inline blob, dropping trailing garbage if needed."""
    try:
        return _decode_base64url(data)
    except (binascii.Error, ValueError):
        logger.warning("Malformed inline body, decoding leniently")
    # Drop anything outside the base64 alphabet and any dangling quantum
    cleaned = re.sub(r"[^A-Za-z0-9+/\-_]", "", data)
    cleaned = cleaned[: len(cleaned) - len(cleaned) % 4]
    try:
        return _decode_base64url(cleaned)
    except (binascii.Error, ValueError):
        return ""


def html_to_text(html: str) -> str:
    """Convert HTML to plain text, preserving meaningful whitespace."""
    soup = BeautifulSoup(html, "html.parser")

    for tag in soup(["script", "style"]):
        tag.decompose()

    text = soup.get_text(separator=" ", strip=True)
    return re.sub(r"\s+", " ", text)


def get_body(message: dict, strip_html: bool = False) -> str:
    """Decode the message body to text.

    A single inline body is decoded on its own. Otherwise the text/plain and
    text/html parts are decoded and concatenated in order with no separator;
    parts of any other type are ignored. Returns "" when there is no content.

    With ``strip_html`` the HTML content is converted to text first.
    """
    payload = message.get("payload") or {}

    data = (payload.get("body") or {}).get("data")
    if data:
        body = _decode_best_effort(data)
        if strip_html and payload.get("mimeType") == "text/html":
            body = html_to_text(body)
        return body

    body_parts = []
    for part in payload.get("parts") or []:
        mime_type = part.get("mimeType")
        if mime_type not in _TEXT_MIME_TYPES:
            continue
        part_data = (part.get("body") or {}).get("data")
        if not part_data:
            continue
        try:
            text = _decode_base64url(part_data)
        except (binascii.Error, ValueError) as e:
            logger.warning("Skipping unreadable %s part: %s", mime_type, e)
            continue
        if strip_html and mime_type == "text/html":
            text = html_to_text(text)
        body_parts.append(text)

    return "".join(body_parts)
