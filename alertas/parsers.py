"""
Provider-specific parsers for Colombian bank alert emails.

Each parser takes the decoded body, the Subject header and the raw Date
header and returns a ParsedAlert, or None when the alert has no amount.

Every alert is reduced to: {type, amount, description, category, date}
The bank and Gmail message id are attached later by the assembler.
"""

import logging
import re
from datetime import datetime, timezone
from decimal import Decimal
from email.utils import parsedate_to_datetime
from typing import Callable, Optional

from alertas.categorizer import categorize
from alertas.errors import InvalidTransactionDate
from alertas.models import Bank, ParsedAlert, TransactionType

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 200

# ---------------------------------------------------------------------------
# Pattern tables
# ---------------------------------------------------------------------------

# Amounts: $50,000  $ 980  $1,234.56  (comma thousands, optional 2-digit cents)
AMOUNT_PATTERN = re.compile(r"\$\s?(\d[\d,]*(?:\.\d{2})?)")

# Nequi counterpart: "de Maria Lopez", "para Juan", "recibiste Ana".
# Only the trigger word is case-insensitive; the name must be capitalised.
NAME_PATTERN = re.compile(
    r"\b(?i:enviaste|recibiste|de|para)\s+"
    r"([A-ZÁÉÍÓÚÑ][a-záéíóúñ]+(?:\s+[A-ZÁÉÍÓÚÑ][a-záéíóúñ]+)?)"
)

# Income markers per bank: (subject substrings, body substrings), lower-case
INCOME_MARKERS: dict[Bank, tuple[tuple[str, ...], tuple[str, ...]]] = {
    Bank.BANCOLOMBIA: (("recibiste", "consignación"), ("recibiste",)),
    Bank.NEQUI: (("recibiste",), ("recibiste", "te enviaron")),
    Bank.DAVIPLATA: (("recibiste",), ("recibiste", "consignación")),
}

# Bancolombia: case-sensitive subject fragment -> description
BANCOLOMBIA_SUBJECT_DESCRIPTIONS = [
    ("Compra", "Compra con tarjeta"),
    ("Retiro", "Retiro en cajero"),
    ("Transferencia", "Transferencia"),
]

# Used when there is no subject: case-sensitive body fragment -> description
NEQUI_BODY_DESCRIPTIONS = [
    ("enviaste", "Envío de dinero"),
    ("recibiste", "Recibo de dinero"),
    ("pago", "Pago"),
]

DAVIPLATA_BODY_DESCRIPTIONS = [
    ("retiro", "Retiro de dinero"),
    ("pago", "Pago"),
]


# ---------------------------------------------------------------------------
# Shared extraction helpers
# ---------------------------------------------------------------------------

def _to_decimal(raw: str) -> Decimal:
    return Decimal(raw.replace(",", ""))


def extract_amount(text: str) -> Optional[Decimal]:
    """Return the first $-prefixed amount in the text, or None."""
    match = AMOUNT_PATTERN.search(text)
    if not match:
        return None
    return _to_decimal(match.group(1))


def find_amounts(text: str) -> list[Decimal]:
    """Return every $-prefixed amount in the text, in order."""
    return [_to_decimal(m) for m in AMOUNT_PATTERN.findall(text)]


def parse_transaction_date(value: Optional[str]) -> str:
    """Convert a Date header (RFC 2822, or ISO-8601) to an ISO-8601 UTC timestamp.

    Output looks like ``2024-01-15T15:30:00.000Z``. Raises
    InvalidTransactionDate when the value is missing or unparseable.
    """
    if not value or not value.strip():
        raise InvalidTransactionDate(value)

    dt = None
    try:
        dt = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError, OverflowError):
        pass

    if dt is None:
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            raise InvalidTransactionDate(value) from None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    # Year 9999 with a negative offset lands past datetime.max in UTC
    try:
        dt = dt.astimezone(timezone.utc)
    except OverflowError:
        raise InvalidTransactionDate(value) from None
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _detect_type(bank: Bank, body: str, subject: Optional[str]) -> TransactionType:
    subject_markers, body_markers = INCOME_MARKERS[bank]
    body_lower = body.lower()
    subject_lower = (subject or "").lower()

    if any(m in subject_lower for m in subject_markers) or any(
        m in body_lower for m in body_markers
    ):
        return TransactionType.INCOME
    return TransactionType.EXPENSE


def _first_fragment(text: str, table: list[tuple[str, str]]) -> Optional[str]:
    for fragment, description in table:
        if fragment in text:
            return description
    return None


# ---------------------------------------------------------------------------
# Per-bank description heuristics
# ---------------------------------------------------------------------------

def _describe_bancolombia(body: str, subject: Optional[str], txn_type: TransactionType) -> str:
    if not subject:
        return "Transacción Bancolombia"
    return _first_fragment(subject, BANCOLOMBIA_SUBJECT_DESCRIPTIONS) or subject


def _describe_nequi(body: str, subject: Optional[str], txn_type: TransactionType) -> str:
    if subject:
        description = subject
    else:
        description = (
            _first_fragment(body, NEQUI_BODY_DESCRIPTIONS) or "Transacción Nequi"
        )

    # A named counterpart is more useful than the subject line
    name_match = NAME_PATTERN.search(body)
    if name_match:
        prefix = "De" if txn_type is TransactionType.INCOME else "Para"
        description = f"{prefix} {name_match.group(1)}"
    return description


def _describe_daviplata(body: str, subject: Optional[str], txn_type: TransactionType) -> str:
    if subject:
        return subject
    return _first_fragment(body, DAVIPLATA_BODY_DESCRIPTIONS) or "Transacción Daviplata"


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------

Describer = Callable[[str, Optional[str], TransactionType], str]


def _parse_alert(
    bank: Bank,
    describe: Describer,
    body: str,
    subject: Optional[str],
    date: Optional[str],
) -> Optional[ParsedAlert]:
    """Run the common extraction steps for one bank.

    Unexpected faults are logged and turned into None so one bad email
    never aborts a batch. Date errors are re-raised for the caller.
    """
    try:
        txn_type = _detect_type(bank, body, subject)

        amount = extract_amount(body)
        if amount is None:
            return None

        description = describe(body, subject, txn_type)[:MAX_DESCRIPTION_LENGTH]
        category = categorize(description, txn_type)
        txn_date = parse_transaction_date(date)
    except InvalidTransactionDate:
        raise
    except Exception:
        logger.exception("Error parsing %s alert", bank.value)
        return None

    return ParsedAlert(
        type=txn_type,
        amount=amount,
        description=description,
        category=category,
        date=txn_date,
    )


def parse_bancolombia(body: str, subject: Optional[str], date: Optional[str]) -> Optional[ParsedAlert]:
    return _parse_alert(Bank.BANCOLOMBIA, _describe_bancolombia, body, subject, date)


def parse_nequi(body: str, subject: Optional[str], date: Optional[str]) -> Optional[ParsedAlert]:
    return _parse_alert(Bank.NEQUI, _describe_nequi, body, subject, date)


def parse_daviplata(body: str, subject: Optional[str], date: Optional[str]) -> Optional[ParsedAlert]:
    return _parse_alert(Bank.DAVIPLATA, _describe_daviplata, body, subject, date)


PARSERS: dict[Bank, Callable[[str, Optional[str], Optional[str]], Optional[ParsedAlert]]] = {
    Bank.BANCOLOMBIA: parse_bancolombia,
    Bank.NEQUI: parse_nequi,
    Bank.DAVIPLATA: parse_daviplata,
}
