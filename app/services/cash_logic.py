"""
Logique de gestion des caisses.

CAISSE VERSEMENT (caisse physique):
- ENTREES: versement_agent (l'agent dépose l'argent collecté)
- SORTIES: paiement_loyer, paiement_souscription, paiement_droit_terre, paiement_caution
  (l'argent est transféré de la caisse vers la comptabilité entreprise)

CAISSE ENTREPRISE (comptabilité):
- REVENUS: paiement_loyer, paiement_souscription, paiement_droit_terre, paiement_caution, vente
- DEPENSES: depense_entreprise, paiement_facture, autre, remboursement_caution

A rent payment therefore leaves the physical box and is recognised as revenue
at the same time; the two tables overlap on purpose.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.config import get_settings
from app.db import atomic
from app.models.cash import CashTransaction, TypeOperation, TypeTransaction
from app.models.facture import FactureFournisseur
from app.models.paiements import PaiementCaution, PaiementDroitTerre, PaiementLocation, PaiementSouscription, Vente
from app.services.caisse_repository import CaisseBalanceRepository, CurrentBalance, SqlCaisseBalanceRepository
from app.utils.audit import log_audit
from app.utils.errors import InsufficientFundsError
from app.utils.money import to_decimal

logger = logging.getLogger(__name__)

VERSEMENT_ENTREES = frozenset({TypeOperation.versement_agent})
VERSEMENT_SORTIES = frozenset(
    {
        TypeOperation.paiement_loyer,
        TypeOperation.paiement_souscription,
        TypeOperation.paiement_droit_terre,
        TypeOperation.paiement_caution,
    }
)

ENTREPRISE_REVENUS = frozenset(
    {
        TypeOperation.paiement_loyer,
        TypeOperation.paiement_souscription,
        TypeOperation.paiement_droit_terre,
        TypeOperation.paiement_caution,
        TypeOperation.vente,
    }
)
ENTREPRISE_DEPENSES = frozenset(
    {
        TypeOperation.depense_entreprise,
        TypeOperation.paiement_facture,
        TypeOperation.autre,
        TypeOperation.remboursement_caution,
    }
)

# Dépenses saisies directement en caisse (hors factures fournisseurs).
DEPENSES_CAISSE = (TypeOperation.depense_entreprise, TypeOperation.autre)


# --- Classification -------------------------------------------------------


def _as_operation(type_operation: TypeOperation | str | None) -> TypeOperation | None:
    if type_operation is None or isinstance(type_operation, TypeOperation):
        return type_operation
    try:
        return TypeOperation(type_operation)
    except ValueError:
        return None


def classify_versement(type_operation: TypeOperation | str | None) -> TypeTransaction | None:
    """Return the cash-box direction of an operation, or ``None`` when it has no effect."""

    operation = _as_operation(type_operation)
    if operation in VERSEMENT_ENTREES:
        return TypeTransaction.entree
    if operation in VERSEMENT_SORTIES:
        return TypeTransaction.sortie
    return None


def affects_versement(type_operation: TypeOperation | str | None) -> bool:
    return classify_versement(type_operation) is not None


def is_revenue(type_operation: TypeOperation | str | None) -> bool:
    return _as_operation(type_operation) in ENTREPRISE_REVENUS


def is_expense(type_operation: TypeOperation | str | None) -> bool:
    return _as_operation(type_operation) in ENTREPRISE_DEPENSES


# --- Caisse versement -----------------------------------------------------


@dataclass(frozen=True)
class VersementUpdate:
    solde_avant: Decimal
    solde_apres: Decimal
    impacts_caisse: bool


def update_caisse_versement(
    repo: CaisseBalanceRepository,
    montant: Any,
    type_operation: TypeOperation | str,
) -> VersementUpdate:
    """Apply an operation to the physical cash box.

    Must run inside the unit of work that inserts the matching cash transaction:
    an ``InsufficientFundsError`` is raised before anything is written, and the
    caller's rollback discards the rest.
    """

    amount = to_decimal(montant)
    if amount <= 0:
        raise ValueError("Le montant doit être supérieur à 0")

    direction = classify_versement(type_operation)
    if direction is None:
        solde = repo.get_current_balance().amount
        return VersementUpdate(solde_avant=solde, solde_apres=solde, impacts_caisse=False)

    solde_avant = repo.get_current_balance(for_update=True).amount
    if direction is TypeTransaction.sortie and solde_avant < amount:
        logger.warning(
            "Insufficient caisse balance",
            extra={"solde_actuel": str(solde_avant), "montant_requis": str(amount), "type_operation": str(type_operation)},
        )
        raise InsufficientFundsError(solde_avant, amount, get_settings().CURRENCY_LABEL)

    if direction is TypeTransaction.entree:
        solde_apres = solde_avant + amount
    else:
        solde_apres = solde_avant - amount

    repo.set_balance(solde_apres)
    logger.info(
        "Caisse versement updated",
        extra={"direction": direction.value, "solde_avant": str(solde_avant), "solde_apres": str(solde_apres)},
    )
    return VersementUpdate(solde_avant=solde_avant, solde_apres=solde_apres, impacts_caisse=True)


def can_make_payment(repo: CaisseBalanceRepository, montant: Any) -> bool:
    """Advisory pre-check; the guard in ``update_caisse_versement`` stays authoritative."""

    return repo.get_current_balance().amount >= to_decimal(montant)


def get_current_balance(db: Session) -> CurrentBalance:
    return SqlCaisseBalanceRepository(db).get_current_balance()


# --- Aggregates -----------------------------------------------------------


def sum_column(db: Session, column: Any, *criteria: Any) -> Decimal:
    stmt = select(func.coalesce(func.sum(column), 0))
    if criteria:
        stmt = stmt.where(*criteria)
    return to_decimal(db.scalar(stmt))


@dataclass
class SoldeEntreprise:
    revenus: dict[str, Decimal] = field(default_factory=dict)
    depenses: dict[str, Decimal] = field(default_factory=dict)

    @property
    def total_revenus(self) -> Decimal:
        return sum(self.revenus.values(), Decimal("0.00"))

    @property
    def total_depenses(self) -> Decimal:
        return sum(self.depenses.values(), Decimal("0.00"))

    @property
    def solde(self) -> Decimal:
        return self.total_revenus - self.total_depenses


def calculate_solde_entreprise(db: Session) -> SoldeEntreprise:
    """All-time enterprise balance: client payments and sales minus paid invoices and cash expenses."""

    revenus = {
        "locations": sum_column(db, PaiementLocation.montant),
        "souscriptions": sum_column(db, PaiementSouscription.montant),
        "droit_terre": sum_column(db, PaiementDroitTerre.montant),
        "cautions": sum_column(db, PaiementCaution.montant),
        "ventes": sum_column(db, Vente.montant),
    }
    depenses = {
        "factures": sum_column(db, FactureFournisseur.montant_paye),
        # Invoice payments are also logged in the cash journal with type "facture":
        # they are already counted through montant_paye.
        "depenses_caisse": sum_column(
            db,
            CashTransaction.montant,
            CashTransaction.type_operation.in_(DEPENSES_CAISSE),
            CashTransaction.type_transaction == TypeTransaction.sortie,
            or_(CashTransaction.type.is_(None), CashTransaction.type != "facture"),
        ),
    }
    return SoldeEntreprise(revenus=revenus, depenses=depenses)


def get_solde_by_periode(db: Session, mois: str, annee: int) -> Decimal:
    """Agent versements of the period minus the cash-box payments tagged to it."""

    versements = sum_column(
        db,
        CashTransaction.montant,
        CashTransaction.type_operation == TypeOperation.versement_agent,
        CashTransaction.type_transaction == TypeTransaction.entree,
        CashTransaction.mois_concerne == mois,
        CashTransaction.annee_concerne == annee,
    )
    paiements = sum_column(
        db,
        CashTransaction.montant,
        CashTransaction.type_operation.in_(VERSEMENT_SORTIES),
        CashTransaction.type_transaction == TypeTransaction.sortie,
        CashTransaction.mois_concerne == mois,
        CashTransaction.annee_concerne == annee,
    )
    return versements - paiements


@dataclass(frozen=True)
class PeriodeCheck:
    can_pay: bool
    solde_disponible: Decimal
    solde_necessaire: Decimal


def can_make_payment_for_periode(db: Session, montant: Any, mois: str, annee: int) -> PeriodeCheck:
    amount = to_decimal(montant)
    disponible = get_solde_by_periode(db, mois, annee)
    return PeriodeCheck(can_pay=disponible >= amount, solde_disponible=disponible, solde_necessaire=amount)


# --- Recalcul -------------------------------------------------------------


@dataclass(frozen=True)
class RecalculationResult:
    ancien_solde: Decimal
    nouveau_solde: Decimal
    transactions_processed: int
    transactions_corrigees: int = 0


def recalculate_caisse_balances(
    db: Session, *, fix_directions: bool = False, actor: str | None = None
) -> RecalculationResult:
    """Replay the whole cash journal from zero and rewrite every snapshot.

    Runs as a single unit of work: a failure part-way leaves the journal and
    the balance exactly as they were; the ``CAISSE_RECALCULATED`` audit row is
    part of the same commit. With ``fix_directions`` the stored
    ``type_transaction`` of cash-box operations is realigned on the classifier
    (e.g. rent payments wrongly recorded as ``entree``).
    """

    repo = SqlCaisseBalanceRepository(db)
    with atomic(db):
        ancien_solde = repo.get_current_balance(for_update=True).amount
        transactions = db.scalars(
            select(CashTransaction).order_by(
                CashTransaction.date_transaction.asc(),
                CashTransaction.created_at.asc(),
                CashTransaction.id.asc(),
            )
        ).all()

        solde = Decimal("0.00")
        processed = 0
        corrected = 0
        for entry in transactions:
            direction = classify_versement(entry.type_operation)
            if direction is None:
                continue

            if fix_directions and entry.type_transaction is not direction:
                entry.type_transaction = direction
                corrected += 1

            montant = to_decimal(entry.montant)
            entry.solde_avant = solde
            solde = solde + montant if direction is TypeTransaction.entree else solde - montant
            entry.solde_apres = solde
            processed += 1

        repo.set_balance(solde)
        log_audit(
            db,
            actor=actor or "system",
            action="CAISSE_RECALCULATED",
            entity="CaisseBalance",
            entity_id=None,
            data={
                "ancien_solde": ancien_solde,
                "nouveau_solde": solde,
                "transactions_processed": processed,
                "transactions_corrigees": corrected,
                "fix_directions": fix_directions,
            },
        )

    logger.info(
        "Caisse balances recalculated",
        extra={
            "ancien_solde": str(ancien_solde),
            "nouveau_solde": str(solde),
            "transactions_processed": processed,
            "transactions_corrigees": corrected,
        },
    )
    return RecalculationResult(
        ancien_solde=ancien_solde,
        nouveau_solde=solde,
        transactions_processed=processed,
        transactions_corrigees=corrected,
    )


__all__ = [
    "VERSEMENT_ENTREES",
    "VERSEMENT_SORTIES",
    "ENTREPRISE_REVENUS",
    "ENTREPRISE_DEPENSES",
    "classify_versement",
    "affects_versement",
    "is_revenue",
    "is_expense",
    "VersementUpdate",
    "update_caisse_versement",
    "can_make_payment",
    "get_current_balance",
    "sum_column",
    "SoldeEntreprise",
    "calculate_solde_entreprise",
    "get_solde_by_periode",
    "PeriodeCheck",
    "can_make_payment_for_periode",
    "RecalculationResult",
    "recalculate_caisse_balances",
]
