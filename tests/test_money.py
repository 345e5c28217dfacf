from decimal import Decimal

import pytest

from app.utils.errors import InsufficientFundsError, PeriodBudgetExceededError
from app.utils.money import format_montant, to_decimal


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, Decimal("0.00")),
        (10, Decimal("10.00")),
        ("1234.567", Decimal("1234.57")),
        (0.1, Decimal("0.10")),
    ],
)
def test_to_decimal(value, expected):
    assert to_decimal(value) == expected


@pytest.mark.parametrize("value", ["abc", "NaN", "Infinity"])
def test_to_decimal_rejects_invalid(value):
    with pytest.raises(ValueError):
        to_decimal(value)


@pytest.mark.parametrize(
    "value, expected",
    [
        (Decimal("70000"), "70 000"),
        (Decimal("1234.5"), "1 234,50"),
        (Decimal("999"), "999"),
        (Decimal("1000000"), "1 000 000"),
    ],
)
def test_format_montant(value, expected):
    assert format_montant(value) == expected


def test_insufficient_funds_payload():
    exc = InsufficientFundsError(Decimal("70000.00"), Decimal("80000.00"), "XOF")

    assert exc.to_payload() == {
        "error": {
            "code": "INSUFFICIENT_FUNDS",
            "message": "Solde insuffisant dans la caisse versement. "
            "Solde actuel: 70 000 XOF, Montant requis: 80 000 XOF",
            "details": {"solde_actuel": "70000.00", "montant_requis": "80000.00"},
        }
    }


def test_period_budget_error_message():
    exc = PeriodBudgetExceededError(Decimal("140000"), Decimal("150000"), "Mars", 2025)

    assert exc.message == (
        "Solde insuffisant pour la période Mars 2025. "
        "Solde disponible: 140 000 FCFA, Montant requis: 150 000 FCFA"
    )
    assert isinstance(exc, InsufficientFundsError)
