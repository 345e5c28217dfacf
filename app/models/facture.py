"""Supplier invoice model."""
import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Enum as SqlEnum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from app.utils.time import utcnow

from .base import Base


class FactureStatut(str, enum.Enum):
    """Settlement status of a supplier invoice."""

    en_attente = "en_attente"
    partiel = "partiel"
    payee = "payee"


class FactureFournisseur(Base):
    """Supplier invoice; ``montant_paye`` feeds the enterprise expense aggregate."""

    __tablename__ = "factures_fournisseurs"
    __table_args__ = (
        CheckConstraint("montant_total >= 0", name="ck_facture_montant_total_non_negative"),
        CheckConstraint("montant_paye >= 0", name="ck_facture_montant_paye_non_negative"),
    )

    numero: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    fournisseur_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    montant_total: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    montant_paye: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    solde: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    statut: Mapped[FactureStatut] = mapped_column(
        SqlEnum(FactureStatut), nullable=False, default=FactureStatut.en_attente
    )


class PaiementFacture(Base):
    """One settlement of a supplier invoice; partial payments stay individually traceable."""

    __tablename__ = "paiements_factures"
    __table_args__ = (CheckConstraint("montant > 0", name="ck_paiement_facture_positive_montant"),)

    facture_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("factures_fournisseurs.id"), nullable=False, index=True
    )
    montant: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    date_paiement: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    mode_paiement: Mapped[str] = mapped_column(String(30), nullable=False, default="cash")
    reference: Mapped[str | None] = mapped_column(String(128), nullable=True)
