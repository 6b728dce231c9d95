"""
Bank-alert email parser for Colombian providers (Bancolombia, Nequi, Daviplata).

Turns Gmail API message dicts into categorised transaction records.
"""

from alertas.assembler import assemble, parse_message, parse_multiple_transactions
from alertas.errors import AlertError, InvalidTransactionDate, MailboxError
from alertas.models import (
    Bank,
    OutcomeStatus,
    ParseOutcome,
    TransactionRecord,
    TransactionType,
)

__all__ = [
    "AlertError",
    "Bank",
    "InvalidTransactionDate",
    "MailboxError",
    "OutcomeStatus",
    "ParseOutcome",
    "TransactionRecord",
    "TransactionType",
    "assemble",
    "parse_message",
    "parse_multiple_transactions",
]
