"""Cash register models: ledger entries and the current balance row."""
import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Enum as SqlEnum, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.utils.time import utcnow

from .base import Base


class TypeTransaction(str, enum.Enum):
    """Direction of a movement relative to the physical cash box."""

    entree = "entree"
    sortie = "sortie"


class TypeOperation(str, enum.Enum):
    """Business operation that generated a cash transaction."""

    versement_agent = "versement_agent"
    paiement_loyer = "paiement_loyer"
    paiement_souscription = "paiement_souscription"
    paiement_droit_terre = "paiement_droit_terre"
    paiement_caution = "paiement_caution"
    vente = "vente"
    depense_entreprise = "depense_entreprise"
    paiement_facture = "paiement_facture"
    remboursement_caution = "remboursement_caution"
    autre = "autre"


class CashTransaction(Base):
    """Append-only ledger entry; only the balance snapshots may be rewritten."""

    __tablename__ = "cash_transactions"
    __table_args__ = (
        CheckConstraint("montant > 0", name="ck_cash_transaction_positive_montant"),
        Index("ix_cash_transactions_chrono", "date_transaction", "created_at"),
        Index("ix_cash_transactions_periode", "mois_concerne", "annee_concerne"),
        Index("ix_cash_transactions_operation", "type_operation", "type_transaction"),
    )

    type_transaction: Mapped[TypeTransaction | None] = mapped_column(SqlEnum(TypeTransaction), nullable=True)
    type_operation: Mapped[TypeOperation] = mapped_column(SqlEnum(TypeOperation), nullable=False)
    montant: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    date_transaction: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    mois_concerne: Mapped[str | None] = mapped_column(String(20), nullable=True)
    annee_concerne: Mapped[int | None] = mapped_column(Integer, nullable=True)
    solde_avant: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    solde_apres: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)

    # Generic category ("facture", "location", ...) distinct from type_operation.
    type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    mode: Mapped[str | None] = mapped_column(String(30), nullable=True)
    reference: Mapped[str | None] = mapped_column(String(128), nullable=True)

    agent_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    beneficiaire: Mapped[str | None] = mapped_column(String(255), nullable=True)
    reference_operation: Mapped[str | None] = mapped_column(String(128), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    piece_justificative: Mapped[str | None] = mapped_column(String(255), nullable=True)


class CaisseBalance(Base):
    """Current physical cash balance (latest row by ``updated_at`` wins)."""

    __tablename__ = "caisse_balance"
    __table_args__ = (Index("ix_caisse_balance_updated_at", "updated_at"),)

    # Both columns carry the same value; always written together.
    solde_courant: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    balance: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    derniere_maj: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
