"""Money helpers: Decimal normalisation and French display formatting."""
from decimal import Decimal, InvalidOperation
from typing import Any

CENT = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """
    Convertit proprement un montant en Decimal(2 décimales).
    Accepte Decimal, int, float, str. Lève ValueError si invalide.
    """
    if value is None:
        return Decimal("0.00")
    if isinstance(value, Decimal):
        d = value
    else:
        try:
            # str() évite les artefacts binaires des floats
            d = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as e:
            raise ValueError(f"Invalid money amount: {value!r}") from e

    if not d.is_finite():
        raise ValueError(f"Invalid money amount: {value!r}")
    return d.quantize(CENT)


def format_montant(value: Any) -> str:
    """Format an amount the French way: ``70 000`` or ``1 234,50``."""

    amount = to_decimal(value)
    if amount == amount.to_integral_value():
        text = f"{amount:,.0f}"
    else:
        text = f"{amount:,.2f}"
    return text.replace(",", " ").replace(".", ",")


__all__ = ["CENT", "to_decimal", "format_montant"]
