"""
Minimal Gmail REST client for reading bank alert emails.

OAuth is handled elsewhere; this client only needs a bearer token, which is
passed in explicitly through a GmailSession.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from alertas.config import DEFAULT_GMAIL_API_URL
from alertas.errors import MailboxError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GmailSession:
    access_token: str
    email: Optional[str] = None


class GmailClient:
    def __init__(
        self,
        session: GmailSession,
        base_url: str = DEFAULT_GMAIL_API_URL,
        timeout: float = 30,
    ):
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _get(self, path: str, params: dict) -> dict:
        url = f"{self.base_url}/users/me/{path}"
        try:
            resp = requests.get(
                url,
                params=params,
                headers={"Authorization": f"Bearer {self.session.access_token}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise MailboxError(f"Cannot reach Gmail at {self.base_url}: {e}") from e

        if resp.status_code != 200:
            raise MailboxError(
                f"Gmail returned status {resp.status_code} for {path}: {resp.text[:200]}"
            )
        return resp.json()

    def list_messages(self, query: str = "", max_results: int = 50) -> list[dict]:
        """Return message stubs ({id, threadId}) matching a Gmail search query."""
        data = self._get("messages", {"q": query, "maxResults": max_results})
        return data.get("messages") or []

    def get_message(self, message_id: str) -> dict:
        """Return the full message dict (headers and base64url body)."""
        return self._get(f"messages/{message_id}", {"format": "full"})
