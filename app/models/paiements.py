"""Client payment records feeding the enterprise revenue aggregates."""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from app.utils.time import utcnow

from .base import Base


class PaiementLocation(Base):
    """Rent payment against a rental contract."""

    __tablename__ = "paiements_locations"
    __table_args__ = (CheckConstraint("montant > 0", name="ck_paiement_location_positive_montant"),)

    location_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    client_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    montant: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    date_paiement: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    mode_paiement: Mapped[str] = mapped_column(String(30), nullable=False, default="cash")
    reference: Mapped[str | None] = mapped_column(String(128), nullable=True)
    mois_concerne: Mapped[str | None] = mapped_column(String(20), nullable=True)
    annee_concerne: Mapped[int | None] = mapped_column(Integer, nullable=True)


class PaiementSouscription(Base):
    """Subscription installment."""

    __tablename__ = "paiements_souscriptions"
    __table_args__ = (CheckConstraint("montant > 0", name="ck_paiement_souscription_positive_montant"),)

    souscription_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    client_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    montant: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    date_paiement: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    mode_paiement: Mapped[str] = mapped_column(String(30), nullable=False, default="cash")
    reference: Mapped[str | None] = mapped_column(String(128), nullable=True)


class PaiementDroitTerre(Base):
    """Land-right (droit de terre) installment."""

    __tablename__ = "paiements_droit_terre"
    __table_args__ = (CheckConstraint("montant > 0", name="ck_paiement_droit_terre_positive_montant"),)

    souscription_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    client_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    montant: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    date_paiement: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    mode_paiement: Mapped[str] = mapped_column(String(30), nullable=False, default="cash")
    reference: Mapped[str | None] = mapped_column(String(128), nullable=True)
    annee_concerne: Mapped[int | None] = mapped_column(Integer, nullable=True)


class PaiementCaution(Base):
    """Deposit (caution) payment tied to a rental contract."""

    __tablename__ = "paiements_cautions"
    __table_args__ = (CheckConstraint("montant > 0", name="ck_paiement_caution_positive_montant"),)

    location_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    montant: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    date_paiement: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    mode_paiement: Mapped[str] = mapped_column(String(30), nullable=False, default="cash")
    reference: Mapped[str | None] = mapped_column(String(128), nullable=True)


class Vente(Base):
    """Sale of an article."""

    __tablename__ = "ventes"
    __table_args__ = (CheckConstraint("montant > 0", name="ck_vente_positive_montant"),)

    article_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    montant: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    quantite: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
