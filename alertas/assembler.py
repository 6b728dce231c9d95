"""
Turn a Gmail message dict into transaction records.

    identify bank -> decode body/headers -> provider parser -> record

``parse_message`` and ``parse_multiple_transactions`` let InvalidTransactionDate
propagate; ``assemble`` wraps them into a ParseOutcome for batch callers.
"""

import logging
from typing import Optional

from alertas.decoder import get_body, get_header
from alertas.errors import InvalidTransactionDate
from alertas.identifier import identify_bank
from alertas.models import (
    Bank,
    OutcomeStatus,
    ParseOutcome,
    TransactionRecord,
    TransactionType,
)
from alertas.parsers import PARSERS, find_amounts, parse_transaction_date

logger = logging.getLogger(__name__)


# Helpers below take an already identified bank and decoded body so a message
# is decoded once per call.

def _parse_single(message: dict, bank: Bank, body: str) -> Optional[TransactionRecord]:
    subject = get_header(message, "Subject")
    date = get_header(message, "Date")

    parsed = PARSERS[bank](body, subject, date)
    if parsed is None:
        return None
    return parsed.to_record(bank, message.get("id"))


def _parse_multiple(message: dict, bank: Bank, body: str) -> list[TransactionRecord]:
    amounts = find_amounts(body)

    if len(amounts) <= 1:
        record = _parse_single(message, bank, body)
        return [record] if record else []

    txn_date = parse_transaction_date(get_header(message, "Date"))
    message_id = message.get("id")
    return [
        TransactionRecord(
            type=TransactionType.EXPENSE,
            amount=amount,
            description=f"Transacción {bank.value}",
            category="Otros",
            bank=bank.value,
            date=txn_date,
            message_id=message_id,
        )
        for amount in amounts
    ]


def parse_message(message: dict, strip_html: bool = False) -> Optional[TransactionRecord]:
    """Parse a single alert. Returns None for unknown senders or no amount."""
    bank = identify_bank(message)
    if bank is None:
        return None
    return _parse_single(message, bank, get_body(message, strip_html=strip_html))


def parse_multiple_transactions(message: dict, strip_html: bool = False) -> list[TransactionRecord]:
    """Parse an email that may carry several alerts.

    With one amount (or none) this is ``parse_message``. With several, each
    amount becomes a generic expense record; type and description are not
    inferred per amount.
    """
    bank = identify_bank(message)
    if bank is None:
        return []
    return _parse_multiple(message, bank, get_body(message, strip_html=strip_html))


def assemble(message: dict, split: bool = False, strip_html: bool = False) -> ParseOutcome:
    """Parse a message into an explicit outcome instead of None/exceptions."""
    message_id = message.get("id")

    bank = identify_bank(message)
    if bank is None:
        return ParseOutcome(
            status=OutcomeStatus.SKIPPED,
            message_id=message_id,
            reason="unknown bank",
        )

    body = get_body(message, strip_html=strip_html)
    try:
        if split:
            records = _parse_multiple(message, bank, body)
        else:
            record = _parse_single(message, bank, body)
            records = [record] if record else []
    except InvalidTransactionDate as e:
        logger.warning("Message %s has an invalid date: %r", message_id, e.raw_date)
        return ParseOutcome(
            status=OutcomeStatus.INVALID_DATE,
            message_id=message_id,
            reason=str(e),
            error=e,
        )

    if not records:
        return ParseOutcome(
            status=OutcomeStatus.SKIPPED,
            message_id=message_id,
            reason="no transaction found",
        )

    return ParseOutcome(
        status=OutcomeStatus.PARSED,
        message_id=message_id,
        records=tuple(records),
    )
