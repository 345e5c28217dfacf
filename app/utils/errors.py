"""Standardized error payloads and caisse business errors."""
from decimal import Decimal
from typing import Any

from app.utils.money import format_montant


def error_response(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return a standardized error payload."""

    payload: dict[str, Any] = {"error": {"code": code, "message": message}}
    if details:
        payload["error"]["details"] = details
    return payload


class InsufficientFundsError(Exception):
    """A sortie would drive the physical cash box below zero.

    The message is pre-formatted for display and must be surfaced verbatim.
    """

    code = "INSUFFICIENT_FUNDS"

    def __init__(
        self,
        solde_actuel: Decimal,
        montant_requis: Decimal,
        currency: str = "FCFA",
        message: str | None = None,
    ) -> None:
        self.solde_actuel = solde_actuel
        self.montant_requis = montant_requis
        self.currency = currency
        super().__init__(
            message
            or "Solde insuffisant dans la caisse versement. "
            f"Solde actuel: {format_montant(solde_actuel)} {currency}, "
            f"Montant requis: {format_montant(montant_requis)} {currency}"
        )

    @property
    def message(self) -> str:
        return str(self)

    def details(self) -> dict[str, Any]:
        return {"solde_actuel": str(self.solde_actuel), "montant_requis": str(self.montant_requis)}

    def to_payload(self) -> dict[str, Any]:
        return error_response(self.code, self.message, self.details())


class PeriodBudgetExceededError(InsufficientFundsError):
    """The period's agent versements cannot cover the payment."""

    code = "PERIOD_BUDGET_EXCEEDED"

    def __init__(
        self,
        solde_disponible: Decimal,
        montant_requis: Decimal,
        mois: str,
        annee: int,
        currency: str = "FCFA",
    ) -> None:
        self.mois = mois
        self.annee = annee
        super().__init__(
            solde_disponible,
            montant_requis,
            currency,
            message=(
                f"Solde insuffisant pour la période {mois} {annee}. "
                f"Solde disponible: {format_montant(solde_disponible)} {currency}, "
                f"Montant requis: {format_montant(montant_requis)} {currency}"
            ),
        )

    def details(self) -> dict[str, Any]:
        return {**super().details(), "mois": self.mois, "annee": self.annee}
