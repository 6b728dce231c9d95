"""Exceptions raised by the alert parser and its mail client."""

from typing import Optional


class AlertError(Exception):
    """Base class for errors raised by this package."""


class InvalidTransactionDate(AlertError):
    """Raised when a message's Date header cannot be turned into a timestamp."""

    def __init__(self, raw_date: Optional[str]):
        self.raw_date = raw_date
        super().__init__(f"Invalid transaction date: {raw_date!r}")


class MailboxError(AlertError):
    """Raised when the Gmail API cannot be reached or rejects a request."""
