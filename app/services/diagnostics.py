"""Drift diagnosis for the physical cash box."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.cash import CashTransaction, TypeOperation, TypeTransaction
from app.services import alerts as alert_service
from app.services.cash_logic import VERSEMENT_SORTIES, get_current_balance, sum_column
from app.utils.money import format_montant
from app.utils.time import utcnow

logger = logging.getLogger(__name__)

RECENT_WINDOW = timedelta(days=7)
RECENT_LIMIT = 10
DRIFT_ALERT_KEYS = ("difference", "transactions_mal_orientees")


@dataclass
class DiagnosticCaisse:
    solde_actuel: Decimal
    solde_theorique: Decimal
    total_entrees: Decimal
    total_sorties: Decimal
    difference: Decimal
    transactions_mal_orientees: int
    transactions_analysees: int
    drift_detected: bool
    message: str
    versements_recents: list[dict[str, Any]] = field(default_factory=list)
    sorties_recentes: list[dict[str, Any]] = field(default_factory=list)


def _recent(db: Session, *criteria: Any) -> list[CashTransaction]:
    since = utcnow() - RECENT_WINDOW
    stmt = (
        select(CashTransaction)
        .where(CashTransaction.date_transaction >= since, *criteria)
        .order_by(CashTransaction.date_transaction.desc(), CashTransaction.id.desc())
        .limit(RECENT_LIMIT)
    )
    return list(db.scalars(stmt).all())


def _summary(entry: CashTransaction) -> dict[str, Any]:
    return {
        "id": entry.id,
        "type_operation": entry.type_operation.value,
        "beneficiaire": entry.beneficiaire,
        "agent_id": entry.agent_id,
        "date": entry.date_transaction,
        "montant": entry.montant,
        "solde_apres": entry.solde_apres,
    }


def _already_alerted(db: Session, payload: dict[str, Any]) -> bool:
    # Même écart que la dernière alerte: rien de nouveau à signaler.
    previous = alert_service.latest_alert(db, alert_service.ALERT_CAISSE_DRIFT)
    if previous is None:
        return False
    return all(previous.payload_json.get(key) == payload[key] for key in DRIFT_ALERT_KEYS)


def diagnose_caisse_versement(db: Session, *, raise_alert: bool = True) -> DiagnosticCaisse:
    """Compare the cached balance with the one implied by the cash journal.

    Payments recorded with the wrong direction are counted as sorties anyway,
    since the classifier (not the stored direction) decides their effect.
    Nothing is corrected here; see ``recalculate_caisse_balances``. A drift alert
    is only stored when the drift differs from the last one raised.
    """

    settings = get_settings()
    total_entrees = sum_column(
        db, CashTransaction.montant, CashTransaction.type_operation == TypeOperation.versement_agent
    )
    sorties_correctes = sum_column(
        db,
        CashTransaction.montant,
        CashTransaction.type_operation.in_(VERSEMENT_SORTIES),
        CashTransaction.type_transaction == TypeTransaction.sortie,
    )
    sorties_mal_orientees = sum_column(
        db,
        CashTransaction.montant,
        CashTransaction.type_operation.in_(VERSEMENT_SORTIES),
        CashTransaction.type_transaction == TypeTransaction.entree,
    )
    nb_mal_orientees = db.scalar(
        select(func.count(CashTransaction.id)).where(
            CashTransaction.type_operation.in_(VERSEMENT_SORTIES),
            CashTransaction.type_transaction == TypeTransaction.entree,
        )
    ) or 0
    nb_transactions = db.scalar(select(func.count(CashTransaction.id))) or 0

    total_sorties = sorties_correctes + sorties_mal_orientees
    solde_actuel = get_current_balance(db).amount
    solde_theorique = total_entrees - total_sorties
    difference = solde_actuel - solde_theorique
    currency = settings.CURRENCY_LABEL

    if sorties_mal_orientees > 0:
        message = (
            f"{format_montant(sorties_mal_orientees)} {currency} de paiements sont enregistrés en 'entree' "
            "au lieu de 'sortie'. Recalcul recommandé."
        )
    elif abs(difference) > settings.DRIFT_TOLERANCE:
        message = f"Écart de {format_montant(difference)} {currency} détecté. Recalcul recommandé."
    else:
        message = "La caisse versement est cohérente."
    drift = sorties_mal_orientees > 0 or abs(difference) > settings.DRIFT_TOLERANCE

    diagnostic = DiagnosticCaisse(
        solde_actuel=solde_actuel,
        solde_theorique=solde_theorique,
        total_entrees=total_entrees,
        total_sorties=total_sorties,
        difference=difference,
        transactions_mal_orientees=nb_mal_orientees,
        transactions_analysees=nb_transactions,
        drift_detected=drift,
        message=message,
        versements_recents=[
            _summary(entry)
            for entry in _recent(db, CashTransaction.type_operation == TypeOperation.versement_agent)
        ],
        sorties_recentes=[
            _summary(entry) for entry in _recent(db, CashTransaction.type_operation.in_(VERSEMENT_SORTIES))
        ],
    )

    if drift:
        logger.warning(
            "Caisse drift detected",
            extra={"difference": str(difference), "mal_orientees": nb_mal_orientees},
        )
        payload = {
            "solde_actuel": str(solde_actuel),
            "solde_theorique": str(solde_theorique),
            "difference": str(difference),
            "transactions_mal_orientees": nb_mal_orientees,
        }
        if raise_alert and not _already_alerted(db, payload):
            alert_service.create_alert(
                db, alert_type=alert_service.ALERT_CAISSE_DRIFT, message=message[:255], payload=payload
            )
    return diagnostic


__all__ = ["DiagnosticCaisse", "diagnose_caisse_versement"]
