"""Work out which bank sent an alert from its From header."""

from typing import Optional

from alertas.decoder import get_header
from alertas.models import Bank

# Checked in order: first bank with a matching sender fragment wins
BANK_SENDERS: list[tuple[Bank, tuple[str, ...]]] = [
    (Bank.BANCOLOMBIA, ("bancolombia",)),
    (Bank.NEQUI, ("nequi",)),
    (Bank.DAVIPLATA, ("daviplata", "davivienda")),
]


def identify_bank(message: dict) -> Optional[Bank]:
    """Return the Bank whose sender fragment appears in the From header."""
    sender = (get_header(message, "From") or "").lower()

    for bank, fragments in BANK_SENDERS:
        if any(fragment in sender for fragment in fragments):
            return bank
    return None
