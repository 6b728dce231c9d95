"""
Keyword-based transaction categorisation.

Groups are checked in order and the first match wins, so table order matters.
"""

from alertas.models import TransactionType

DEFAULT_INCOME_CATEGORY = "Ingresos"
DEFAULT_EXPENSE_CATEGORY = "Otros"

INCOME_KEYWORDS: list[tuple[tuple[str, ...], str]] = [
    (("salario", "nómina"), "Salario"),
    (("freelance", "trabajo"), "Ingresos extra"),
]

# Groceries are checked before restaurants and both map to Alimentación
EXPENSE_KEYWORDS: list[tuple[tuple[str, ...], str]] = [
    (("mercado", "supermercado", "tienda"), "Alimentación"),
    (("arriendo", "alquiler", "renta"), "Vivienda"),
    (("transporte", "uber", "taxi", "gasolina"), "Transporte"),
    (("restaurante", "comida", "domicilio"), "Alimentación"),
    (("servicio", "luz", "agua", "gas", "internet"), "Servicios"),
    (("salud", "médico", "farmacia", "hospital"), "Salud"),
    (("entretenimiento", "cine", "netflix", "spotify"), "Entretenimiento"),
]


def categorize(description: str, txn_type: TransactionType) -> str:
    """Map a description and transaction type to a spending category."""
    desc = description.lower()

    if txn_type is TransactionType.INCOME:
        table, default = INCOME_KEYWORDS, DEFAULT_INCOME_CATEGORY
    else:
        table, default = EXPENSE_KEYWORDS, DEFAULT_EXPENSE_CATEGORY

    for keywords, category in table:
        if any(kw in desc for kw in keywords):
            return category
    return default
