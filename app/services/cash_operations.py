"""Payment workflows that move money through the cash journal.

Each workflow is one unit of work: business row, cash transaction, balance
update and audit entry are committed together or not at all.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import get_settings
from app.db import atomic
from app.models.cash import CashTransaction, TypeOperation, TypeTransaction
from app.models.facture import FactureFournisseur, FactureStatut, PaiementFacture
from app.models.paiements import PaiementCaution, PaiementDroitTerre, PaiementLocation, PaiementSouscription, Vente
from app.schemas.cash import (
    CashTransactionCreate,
    CautionPaymentCreate,
    DroitTerrePaymentCreate,
    FacturePaymentCreate,
    LocationPaymentCreate,
    PaymentBase,
    SouscriptionPaymentCreate,
    VenteCreate,
)
from app.services.caisse_repository import SqlCaisseBalanceRepository
from app.services.cash_logic import (
    VERSEMENT_SORTIES,
    VersementUpdate,
    can_make_payment_for_periode,
    classify_versement,
    update_caisse_versement,
)
from app.utils.audit import log_audit
from app.utils.errors import PeriodBudgetExceededError, error_response
from app.utils.money import to_decimal
from app.utils.time import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CashOperationResult:
    payment_id: int | None
    cash_transaction_id: int
    type_operation: TypeOperation
    montant: Decimal
    solde_avant: Decimal
    solde_apres: Decimal
    impacts_caisse: bool


def _check_periode_budget(
    db: Session, montant: Decimal, type_operation: TypeOperation, mois: str | None, annee: int | None
) -> None:
    settings = get_settings()
    if not settings.ENFORCE_PERIOD_BUDGET or type_operation not in VERSEMENT_SORTIES:
        return
    if mois is None or annee is None:
        return
    check = can_make_payment_for_periode(db, montant, mois, annee)
    if not check.can_pay:
        raise PeriodBudgetExceededError(
            check.solde_disponible, check.solde_necessaire, mois, annee, settings.CURRENCY_LABEL
        )


def _post_cash_entry(
    db: Session,
    *,
    montant: Decimal,
    type_operation: TypeOperation,
    fallback_direction: TypeTransaction | None = None,
    mois_concerne: str | None = None,
    annee_concerne: int | None = None,
    **metadata: Any,
) -> tuple[CashTransaction, VersementUpdate]:
    """Apply the ledger effect of an operation and journal it. Does not commit."""

    _check_periode_budget(db, montant, type_operation, mois_concerne, annee_concerne)
    update = update_caisse_versement(SqlCaisseBalanceRepository(db), montant, type_operation)

    entry = CashTransaction(
        montant=montant,
        type_operation=type_operation,
        type_transaction=classify_versement(type_operation) or fallback_direction,
        mois_concerne=mois_concerne,
        annee_concerne=annee_concerne,
        solde_avant=update.solde_avant,
        solde_apres=update.solde_apres,
        **metadata,
    )
    if entry.date_transaction is None:
        entry.date_transaction = utcnow()
    db.add(entry)
    db.flush()
    return entry, update


def _result(payment_id: int | None, entry: CashTransaction, update: VersementUpdate) -> CashOperationResult:
    return CashOperationResult(
        payment_id=payment_id,
        cash_transaction_id=entry.id,
        type_operation=entry.type_operation,
        montant=to_decimal(entry.montant),
        solde_avant=update.solde_avant,
        solde_apres=update.solde_apres,
        impacts_caisse=update.impacts_caisse,
    )


def record_cash_transaction(
    db: Session, payload: CashTransactionCreate, *, actor: str | None = None
) -> CashOperationResult:
    """Record a free-standing cash movement (agent versement, expense, ...).

    The ledger effect follows the operation type; ``type_transaction`` from the
    payload is only kept for operations outside the cash-box table.
    """

    montant = to_decimal(payload.montant)
    with atomic(db):
        metadata: dict[str, Any] = {
            "agent_id": payload.agent_id,
            "beneficiaire": payload.beneficiaire,
            "reference_operation": payload.reference_operation,
            "description": payload.description,
            "piece_justificative": payload.piece_justificative,
            "type": payload.type or payload.type_transaction.value,
            "mode": payload.mode,
            "reference": payload.reference,
        }
        if payload.date_transaction is not None:
            metadata["date_transaction"] = payload.date_transaction
        entry, update = _post_cash_entry(
            db,
            montant=montant,
            type_operation=payload.type_operation,
            fallback_direction=payload.type_transaction,
            mois_concerne=payload.mois_concerne,
            annee_concerne=payload.annee_concerne,
            **metadata,
        )
        log_audit(
            db,
            actor=actor or "system",
            action="CASH_TRANSACTION_RECORDED",
            entity="CashTransaction",
            entity_id=entry.id,
            data={
                "type_operation": entry.type_operation,
                "type_transaction": entry.type_transaction,
                "montant": montant,
                "solde_avant": update.solde_avant,
                "solde_apres": update.solde_apres,
            },
        )
    logger.info(
        "Cash transaction recorded",
        extra={"cash_transaction_id": entry.id, "type_operation": entry.type_operation.value},
    )
    return _result(None, entry, update)


def _pay(
    db: Session,
    payment: Any,
    payload: PaymentBase,
    *,
    type_operation: TypeOperation,
    category: str,
    actor: str | None,
    mois_concerne: str | None = None,
    annee_concerne: int | None = None,
) -> CashOperationResult:
    montant = to_decimal(payload.montant)
    with atomic(db):
        db.add(payment)
        db.flush()
        entry, update = _post_cash_entry(
            db,
            montant=montant,
            type_operation=type_operation,
            mois_concerne=mois_concerne,
            annee_concerne=annee_concerne,
            reference_operation=str(payment.id),
            type=category,
            mode=payload.mode_paiement,
            reference=payload.reference or str(payment.id),
        )
        log_audit(
            db,
            actor=actor or "system",
            action="CASH_PAYMENT_RECORDED",
            entity=type(payment).__name__,
            entity_id=payment.id,
            data={
                "type_operation": type_operation,
                "montant": montant,
                "cash_transaction_id": entry.id,
                "solde_avant": update.solde_avant,
                "solde_apres": update.solde_apres,
            },
        )
    logger.info(
        "Cash payment recorded",
        extra={"payment_id": payment.id, "type_operation": type_operation.value, "solde_apres": str(update.solde_apres)},
    )
    return _result(payment.id, entry, update)


def pay_location(db: Session, payload: LocationPaymentCreate, *, actor: str | None = None) -> CashOperationResult:
    """Rent payment: leaves the cash box, counted as revenue."""

    payment = PaiementLocation(
        location_id=payload.location_id,
        client_id=payload.client_id,
        montant=to_decimal(payload.montant),
        date_paiement=payload.date_paiement or utcnow(),
        mode_paiement=payload.mode_paiement,
        reference=payload.reference,
        mois_concerne=payload.mois_concerne,
        annee_concerne=payload.annee_concerne,
    )
    return _pay(
        db,
        payment,
        payload,
        type_operation=TypeOperation.paiement_loyer,
        category="location",
        actor=actor,
        mois_concerne=payload.mois_concerne,
        annee_concerne=payload.annee_concerne,
    )


def pay_souscription(
    db: Session, payload: SouscriptionPaymentCreate, *, actor: str | None = None
) -> CashOperationResult:
    payment = PaiementSouscription(
        souscription_id=payload.souscription_id,
        client_id=payload.client_id,
        montant=to_decimal(payload.montant),
        date_paiement=payload.date_paiement or utcnow(),
        mode_paiement=payload.mode_paiement,
        reference=payload.reference,
    )
    return _pay(
        db,
        payment,
        payload,
        type_operation=TypeOperation.paiement_souscription,
        category="souscription",
        actor=actor,
        mois_concerne=payload.mois_concerne,
        annee_concerne=payload.annee_concerne,
    )


def pay_droit_terre(
    db: Session, payload: DroitTerrePaymentCreate, *, actor: str | None = None
) -> CashOperationResult:
    payment = PaiementDroitTerre(
        souscription_id=payload.souscription_id,
        client_id=payload.client_id,
        montant=to_decimal(payload.montant),
        date_paiement=payload.date_paiement or utcnow(),
        mode_paiement=payload.mode_paiement,
        reference=payload.reference,
        annee_concerne=payload.annee_concerne,
    )
    return _pay(
        db,
        payment,
        payload,
        type_operation=TypeOperation.paiement_droit_terre,
        category="droit_terre",
        actor=actor,
        mois_concerne=payload.mois_concerne,
        annee_concerne=payload.annee_concerne,
    )


def pay_caution(db: Session, payload: CautionPaymentCreate, *, actor: str | None = None) -> CashOperationResult:
    payment = PaiementCaution(
        location_id=payload.location_id,
        montant=to_decimal(payload.montant),
        date_paiement=payload.date_paiement or utcnow(),
        mode_paiement=payload.mode_paiement,
        reference=payload.reference,
    )
    return _pay(
        db,
        payment,
        payload,
        type_operation=TypeOperation.paiement_caution,
        category="caution",
        actor=actor,
        mois_concerne=payload.mois_concerne,
        annee_concerne=payload.annee_concerne,
    )


def record_sale(db: Session, payload: VenteCreate, *, actor: str | None = None) -> CashOperationResult:
    """Sale: enterprise revenue only, the physical cash box is untouched."""

    montant = to_decimal(payload.montant)
    with atomic(db):
        vente = Vente(article_id=payload.article_id, montant=montant, quantite=payload.quantite)
        db.add(vente)
        db.flush()
        entry, update = _post_cash_entry(
            db,
            montant=montant,
            type_operation=TypeOperation.vente,
            fallback_direction=TypeTransaction.entree,
            type="sale",
            mode=payload.mode,
            reference=payload.reference or str(vente.id),
            reference_operation=str(vente.id),
        )
        log_audit(
            db,
            actor=actor or "system",
            action="SALE_RECORDED",
            entity="Vente",
            entity_id=vente.id,
            data={"montant": montant, "quantite": payload.quantite, "cash_transaction_id": entry.id},
        )
    logger.info("Sale recorded", extra={"vente_id": vente.id})
    return _result(vente.id, entry, update)


def _get_facture_or_404(db: Session, facture_id: int) -> FactureFournisseur:
    facture = db.scalars(
        select(FactureFournisseur).where(FactureFournisseur.id == facture_id).with_for_update()
    ).first()
    if facture is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_response("FACTURE_NOT_FOUND", "Facture introuvable."),
        )
    return facture


def pay_facture(db: Session, payload: FacturePaymentCreate, *, actor: str | None = None) -> CashOperationResult:
    """Supplier invoice payment.

    The amount is counted once, through ``montant_paye``; the journal entry is
    tagged ``type="facture"`` so the cash-expense aggregate skips it, and points
    at the ``PaiementFacture`` row of this settlement.
    """

    montant = to_decimal(payload.montant)
    with atomic(db):
        facture = _get_facture_or_404(db, payload.facture_id)
        facture.montant_paye = to_decimal(facture.montant_paye) + montant
        facture.solde = to_decimal(facture.montant_total) - facture.montant_paye
        facture.statut = FactureStatut.payee if facture.solde <= 0 else FactureStatut.partiel
        paiement = PaiementFacture(
            facture_id=facture.id,
            montant=montant,
            date_paiement=payload.date_paiement or utcnow(),
            mode_paiement=payload.mode_paiement,
            reference=payload.reference,
        )
        db.add(paiement)
        db.flush()
        entry, update = _post_cash_entry(
            db,
            montant=montant,
            type_operation=TypeOperation.depense_entreprise,
            fallback_direction=TypeTransaction.sortie,
            beneficiaire=str(facture.fournisseur_id) if facture.fournisseur_id is not None else None,
            reference_operation=str(paiement.id),
            type="facture",
            mode=payload.mode_paiement,
            reference=payload.reference or facture.numero,
        )
        log_audit(
            db,
            actor=actor or "system",
            action="FACTURE_PAID",
            entity="FactureFournisseur",
            entity_id=facture.id,
            data={
                "paiement_facture_id": paiement.id,
                "montant": montant,
                "montant_paye": facture.montant_paye,
                "statut": facture.statut,
            },
        )
    logger.info(
        "Facture paid",
        extra={"facture_id": facture.id, "paiement_facture_id": paiement.id, "statut": facture.statut.value},
    )
    return _result(paiement.id, entry, update)


__all__ = [
    "CashOperationResult",
    "record_cash_transaction",
    "pay_location",
    "pay_souscription",
    "pay_droit_terre",
    "pay_caution",
    "record_sale",
    "pay_facture",
]
