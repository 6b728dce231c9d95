"""
Tests for the per-bank alert parsers and their shared helpers.
"""

from decimal import Decimal

import pytest

from alertas.errors import InvalidTransactionDate
from alertas.models import Bank, TransactionType
from alertas.parsers import (
    PARSERS,
    extract_amount,
    find_amounts,
    parse_bancolombia,
    parse_daviplata,
    parse_nequi,
    parse_transaction_date,
)

DATE = "Mon, 15 Jan 2024 10:30:00 -0500"
ISO_DATE = "2024-01-15T15:30:00.000Z"

ALL_PARSERS = [parse_bancolombia, parse_nequi, parse_daviplata]


# ---------------------------------------------------------------------------
# extract_amount / find_amounts
# ---------------------------------------------------------------------------

class TestExtractAmount:

    def test_thousands_and_cents(self):
        assert extract_amount("Valor $1,234.56 aprobado") == Decimal("1234.56")

    def test_space_after_dollar_sign(self):
        assert extract_amount("Retiro por $ 980") == Decimal("980")

    def test_first_amount_wins(self):
        assert extract_amount("$50,000 saldo $1,200,000") == Decimal("50000")

    def test_dollar_sign_required(self):
        assert extract_amount("Compraste 50,000 pesos") is None

    def test_single_decimal_digit_is_not_cents(self):
        assert extract_amount("$12.5") == Decimal("12")

    def test_no_digits_after_dollar(self):
        assert extract_amount("Total: $, gracias") is None

    def test_find_amounts_returns_all_in_order(self):
        text = "Pagaste $10,000, luego $2,500.50 y $ 300"
        assert find_amounts(text) == [Decimal("10000"), Decimal("2500.50"), Decimal("300")]

    def test_find_amounts_empty(self):
        assert find_amounts("sin montos") == []


# ---------------------------------------------------------------------------
# parse_transaction_date
# ---------------------------------------------------------------------------

class TestParseTransactionDate:

    def test_rfc2822_converted_to_utc(self):
        assert parse_transaction_date(DATE) == ISO_DATE

    def test_header_with_zone_comment(self):
        assert parse_transaction_date("Mon, 15 Jan 2024 10:30:00 -0500 (COT)") == ISO_DATE

    def test_iso_input(self):
        assert parse_transaction_date("2024-01-15T15:30:00Z") == ISO_DATE

    def test_naive_value_treated_as_utc(self):
        assert parse_transaction_date("2024-01-15 15:30:00") == ISO_DATE

    @pytest.mark.parametrize("value", [
        None, "", "   ", "not a date", "32/13/2024",
        # past datetime.max once shifted to UTC
        "Fri, 31 Dec 9999 23:00:00 -0500",
        "9999-12-31T23:00:00-05:00",
    ])
    def test_invalid_dates_raise(self, value):
        with pytest.raises(InvalidTransactionDate) as exc_info:
            parse_transaction_date(value)
        assert exc_info.value.raw_date == value


# ---------------------------------------------------------------------------
# Shared behaviour
# ---------------------------------------------------------------------------

class TestAllParsers:

    @pytest.mark.parametrize("parser", ALL_PARSERS)
    def test_no_amount_returns_none(self, parser):
        assert parser("Tu transacción fue exitosa", "Alerta", DATE) is None

    @pytest.mark.parametrize("parser", ALL_PARSERS)
    def test_missing_amount_wins_over_bad_date(self, parser):
        assert parser("sin monto", None, "garbage") is None

    @pytest.mark.parametrize("parser", ALL_PARSERS)
    def test_invalid_date_raises(self, parser):
        with pytest.raises(InvalidTransactionDate):
            parser("Pagaste $5,000", None, "garbage")

    @pytest.mark.parametrize("parser", ALL_PARSERS)
    def test_out_of_range_date_raises(self, parser):
        with pytest.raises(InvalidTransactionDate) as exc_info:
            parser("Pagaste $5,000", None, "Fri, 31 Dec 9999 23:00:00 -0500")
        assert exc_info.value.raw_date == "Fri, 31 Dec 9999 23:00:00 -0500"

    @pytest.mark.parametrize("parser", ALL_PARSERS)
    def test_description_truncated_to_200(self, parser):
        subject = "A" * 250
        result = parser("Valor $1,000", subject, DATE)
        assert len(result.description) == 200

    @pytest.mark.parametrize("parser", ALL_PARSERS)
    def test_unexpected_fault_returns_none(self, parser, caplog):
        assert parser(None, "Alerta", DATE) is None
        assert "Error parsing" in caplog.text

    def test_registry_covers_every_bank(self):
        assert set(PARSERS) == set(Bank)


# ---------------------------------------------------------------------------
# Bancolombia
# ---------------------------------------------------------------------------

class TestBancolombia:

    def test_purchase_subject(self):
        result = parse_bancolombia("Compraste $45,900.00 en EXITO", "Compra aprobada", DATE)
        assert result.type is TransactionType.EXPENSE
        assert result.amount == Decimal("45900.00")
        assert result.description == "Compra con tarjeta"
        assert result.category == "Otros"
        assert result.date == ISO_DATE

    def test_withdrawal_subject(self):
        result = parse_bancolombia("Retiraste $200,000", "Retiro exitoso", DATE)
        assert result.description == "Retiro en cajero"

    def test_transfer_subject(self):
        result = parse_bancolombia("Transferiste $80,000", "Transferencia realizada", DATE)
        assert result.description == "Transferencia"

    def test_subject_keyword_is_case_sensitive(self):
        result = parse_bancolombia("Valor $1,000", "Alerta de compra", DATE)
        assert result.description == "Alerta de compra"

    def test_other_subject_used_verbatim(self):
        result = parse_bancolombia("Pagaste $120,000", "Pago arriendo", DATE)
        assert result.description == "Pago arriendo"
        assert result.category == "Vivienda"

    def test_no_subject_default_description(self):
        result = parse_bancolombia("Pagaste $120,000", None, DATE)
        assert result.description == "Transacción Bancolombia"

    def test_income_from_subject_consignacion(self):
        result = parse_bancolombia("Valor $500,000", "Consignación recibida", DATE)
        assert result.type is TransactionType.INCOME
        assert result.category == "Ingresos"

    def test_income_from_body(self):
        result = parse_bancolombia("Recibiste $500,000 por nómina", "Alerta", DATE)
        assert result.type is TransactionType.INCOME

    def test_consignacion_in_body_is_not_income(self):
        result = parse_bancolombia("Consignación de $500,000", None, DATE)
        assert result.type is TransactionType.EXPENSE


# ---------------------------------------------------------------------------
# Nequi
# ---------------------------------------------------------------------------

class TestNequi:

    def test_received_from_named_person(self):
        result = parse_nequi("Recibiste $50,000 de Maria Lopez", None, DATE)
        assert result.type is TransactionType.INCOME
        assert result.amount == Decimal("50000")
        assert result.description == "De Maria Lopez"
        assert result.category == "Ingresos"

    def test_sent_to_named_person(self):
        result = parse_nequi("Enviaste $20,000 para Juan", "Envío exitoso", DATE)
        assert result.type is TransactionType.EXPENSE
        assert result.description == "Para Juan"

    def test_te_enviaron_is_income(self):
        result = parse_nequi("Te enviaron $15,000", None, DATE)
        assert result.type is TransactionType.INCOME

    def test_subject_received_is_income(self):
        result = parse_nequi("Valor $15,000", "Recibiste plata", DATE)
        assert result.type is TransactionType.INCOME

    def test_name_with_accents(self):
        result = parse_nequi("Recibiste $5,000 de José Núñez", None, DATE)
        assert result.description == "De José Núñez"

    def test_name_override_beats_subject(self):
        result = parse_nequi("Pagaste $9,000 para Tienda", "Pago en Nequi", DATE)
        assert result.description == "Para Tienda"
        assert result.category == "Alimentación"

    def test_lowercase_word_is_not_a_name(self):
        result = parse_nequi("Pagaste $9,000 de contado", "Pago en Nequi", DATE)
        assert result.description == "Pago en Nequi"

    def test_trigger_must_be_a_whole_word(self):
        result = parse_nequi("Movimiento $9,000 desde Bogota", "Alerta Nequi", DATE)
        assert result.description == "Alerta Nequi"

    @pytest.mark.parametrize("body, expected", [
        ("Tu envío: enviaste $3,000", "Envío de dinero"),
        ("Listo, recibiste $3,000", "Recibo de dinero"),
        ("Hiciste un pago por $3,000", "Pago"),
        ("Movimiento por $3,000", "Transacción Nequi"),
    ])
    def test_body_descriptions_without_subject(self, body, expected):
        assert parse_nequi(body, None, DATE).description == expected


# ---------------------------------------------------------------------------
# Daviplata
# ---------------------------------------------------------------------------

class TestDaviplata:

    def test_subject_used(self):
        result = parse_daviplata("Pagaste $35,000", "Pago en restaurante", DATE)
        assert result.description == "Pago en restaurante"
        assert result.category == "Alimentación"

    @pytest.mark.parametrize("body, expected", [
        ("Hiciste un retiro de $100,000", "Retiro de dinero"),
        ("Realizaste un pago de $100,000", "Pago"),
        ("Movimiento de $100,000", "Transacción Daviplata"),
    ])
    def test_body_descriptions_without_subject(self, body, expected):
        assert parse_daviplata(body, None, DATE).description == expected

    def test_consignacion_in_body_is_income(self):
        result = parse_daviplata("Consignación por $70,000", None, DATE)
        assert result.type is TransactionType.INCOME

    def test_default_is_expense(self):
        result = parse_daviplata("Compra por $70,000", None, DATE)
        assert result.type is TransactionType.EXPENSE
