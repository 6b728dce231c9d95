"""
Fetch bank alert emails from Gmail, parse them and save the transactions.

Strategy:
  1. Run one Gmail search per bank (known alert sender addresses).
  2. Download each candidate message in full.
  3. Assemble transactions, drop in-batch duplicates, upsert.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from alertas import store
from alertas.assembler import assemble
from alertas.config import BANK_QUERIES, Settings
from alertas.gmail import GmailClient
from alertas.models import Bank, OutcomeStatus, TransactionRecord

logger = logging.getLogger(__name__)


@dataclass
class SyncSummary:
    fetched: int = 0
    parsed: int = 0
    skipped: int = 0
    invalid_dates: int = 0
    saved: int = 0
    previous_sync_at: Optional[str] = None


def _dedupe(records: list[TransactionRecord]) -> list[TransactionRecord]:
    """Keep the first record per (date, amount, bank)."""
    seen = set()
    unique = []
    for record in records:
        if record.dedupe_key not in seen:
            seen.add(record.dedupe_key)
            unique.append(record)
    return unique


def sync_bank_alerts(
    client: GmailClient,
    settings: Settings,
    queries: Optional[dict[Bank, str]] = None,
    on_progress: Optional[Callable[[str, str], None]] = None,
) -> SyncSummary:
    """Sync every bank's alerts into the store.

    Raises MailboxError if Gmail cannot be read; per-message problems are
    counted in the summary instead.
    """
    def _progress(step: str, detail: str = ""):
        if on_progress:
            on_progress(step, detail)

    queries = queries or BANK_QUERIES
    summary = SyncSummary()
    records: list[TransactionRecord] = []
    invalid_ids = []

    store.init_db(settings.db_path)

    mailbox = client.session.email
    if mailbox:
        summary.previous_sync_at = store.get_last_sync(mailbox, settings.db_path)
        logger.info("Syncing %s (last sync: %s)", mailbox, summary.previous_sync_at or "never")

    for bank, query in queries.items():
        _progress("search", f"Searching {bank.value} alerts...")
        stubs = client.list_messages(query, settings.max_results)

        for stub in stubs:
            message = client.get_message(stub["id"])
            summary.fetched += 1

            outcome = assemble(
                message,
                split=settings.split_multiple,
                strip_html=settings.strip_html,
            )
            if outcome.status is OutcomeStatus.PARSED:
                records.extend(outcome.records)
                summary.parsed += 1
            elif outcome.status is OutcomeStatus.INVALID_DATE:
                summary.invalid_dates += 1
                invalid_ids.append(outcome.message_id)
            else:
                summary.skipped += 1
                logger.debug("Skipped message %s: %s", outcome.message_id, outcome.reason)

    if invalid_ids:
        logger.warning("Messages with invalid dates (sample): %s", invalid_ids[:10])

    if records:
        records = _dedupe(records)
        summary.saved = store.save_transactions(records, settings.owner, settings.db_path)

    if mailbox:
        store.record_sync(mailbox, datetime.now(timezone.utc).isoformat(), settings.db_path)

    logger.info(
        "Sync summary: %d fetched, %d parsed, %d skipped, %d invalid dates, %d saved",
        summary.fetched, summary.parsed, summary.skipped,
        summary.invalid_dates, summary.saved,
    )
    _progress("done", f"Done: {summary.saved} transactions from {summary.fetched} emails")
    return summary
