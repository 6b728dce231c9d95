"""
Data model shared by the decoder, parsers, categorizer and store.

A provider parser produces a ParsedAlert; the assembler attaches the bank
and Gmail message id to turn it into a TransactionRecord.
"""

import enum
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from alertas.errors import InvalidTransactionDate


class Bank(enum.Enum):
    BANCOLOMBIA = "Bancolombia"
    NEQUI = "Nequi"
    DAVIPLATA = "Daviplata"


class TransactionType(enum.Enum):
    INCOME = "income"
    EXPENSE = "expense"


@dataclass(frozen=True)
class ParsedAlert:
    """What a provider parser extracts from one alert (no bank/id yet)."""

    type: TransactionType
    amount: Decimal
    description: str
    category: str
    date: str

    def to_record(self, bank: Bank, message_id: str) -> "TransactionRecord":
        return TransactionRecord(
            type=self.type,
            amount=self.amount,
            description=self.description,
            category=self.category,
            bank=bank.value,
            date=self.date,
            message_id=message_id,
        )


@dataclass(frozen=True)
class TransactionRecord:
    type: TransactionType
    amount: Decimal
    description: str
    category: str
    bank: str
    date: str
    message_id: str

    @property
    def dedupe_key(self) -> tuple[str, Decimal, str]:
        """(date, amount, bank) -- the store's conflict tuple without the owner."""
        return (self.date, self.amount, self.bank)

    def to_dict(self) -> dict:
        """Row shape used by the store."""
        return {
            "type": self.type.value,
            "amount": float(self.amount),
            "description": self.description,
            "category": self.category,
            "bank": self.bank,
            "date": self.date,
            "message_id": self.message_id,
        }


class OutcomeStatus(enum.Enum):
    PARSED = "parsed"
    SKIPPED = "skipped"
    INVALID_DATE = "invalid_date"


@dataclass(frozen=True)
class ParseOutcome:
    """Result of assembling one message.

    PARSED carries one or more records. SKIPPED means the message is not a
    usable alert (unknown sender, no amount). INVALID_DATE keeps the error so
    callers can decide whether to surface it.
    """

    status: OutcomeStatus
    message_id: Optional[str]
    records: tuple[TransactionRecord, ...] = field(default_factory=tuple)
    reason: Optional[str] = None
    error: Optional[InvalidTransactionDate] = None

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.PARSED
