#!/usr/bin/env python3
"""
Headless bank-alert sync.

Runs without any UI. Designed to be called by cron:
    0 20 * * * cd ~/alertas && ./venv/bin/python sync_daily.py

Needs GMAIL_ACCESS_TOKEN (and usually GMAIL_ADDRESS, ALERTAS_OWNER) in the
environment or a .env file.
"""

import logging
import sys

from alertas.config import load_settings
from alertas.errors import MailboxError
from alertas.gmail import GmailClient, GmailSession
from alertas.sync import sync_bank_alerts

logger = logging.getLogger(__name__)


def main() -> int:
    """Fetch bank alerts from Gmail, parse them and save the transactions."""
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    if not settings.gmail_access_token:
        logger.error("GMAIL_ACCESS_TOKEN is not set. Authorise Gmail access first.")
        return 1

    session = GmailSession(settings.gmail_access_token, settings.gmail_address)
    client = GmailClient(session, base_url=settings.gmail_api_url)

    try:
        summary = sync_bank_alerts(
            client,
            settings,
            on_progress=lambda step, detail: logger.info("[%s] %s", step, detail),
        )
    except MailboxError as e:
        logger.error("Sync failed: %s", e)
        return 1

    if not summary.saved:
        logger.info("No new bank transactions found.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
