"""Cash register schemas."""
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.models.cash import TypeOperation, TypeTransaction


class PeriodeTag(BaseModel):
    """Optional (mois, année) tag; both parts must be given together."""

    mois_concerne: str | None = Field(default=None, max_length=20)
    annee_concerne: int | None = Field(default=None, ge=1900, le=2999)

    @model_validator(mode="after")
    def _both_or_none(self) -> "PeriodeTag":
        if (self.mois_concerne is None) != (self.annee_concerne is None):
            raise ValueError("mois_concerne et annee_concerne vont ensemble")
        return self


class CashTransactionCreate(PeriodeTag):
    montant: Decimal = Field(gt=Decimal("0"))
    type_operation: TypeOperation = TypeOperation.autre
    type_transaction: TypeTransaction = TypeTransaction.entree
    date_transaction: datetime | None = None
    agent_id: int | None = None
    beneficiaire: str | None = Field(default=None, max_length=255)
    reference_operation: str | None = Field(default=None, max_length=128)
    description: str | None = None
    piece_justificative: str | None = Field(default=None, max_length=255)
    type: str | None = Field(default=None, max_length=50)
    mode: str | None = Field(default=None, max_length=30)
    reference: str | None = Field(default=None, max_length=128)


class CashTransactionRead(BaseModel):
    id: int
    type_transaction: TypeTransaction | None
    type_operation: TypeOperation
    montant: Decimal
    date_transaction: datetime
    mois_concerne: str | None
    annee_concerne: int | None
    solde_avant: Decimal | None
    solde_apres: Decimal | None
    type: str | None
    mode: str | None
    reference: str | None
    agent_id: int | None
    beneficiaire: str | None
    reference_operation: str | None
    description: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentBase(PeriodeTag):
    montant: Decimal = Field(gt=Decimal("0"))
    date_paiement: datetime | None = None
    mode_paiement: str = Field(default="cash", max_length=30)
    reference: str | None = Field(default=None, max_length=128)


class LocationPaymentCreate(PaymentBase):
    location_id: int
    client_id: int | None = None


class SouscriptionPaymentCreate(PaymentBase):
    souscription_id: int
    client_id: int | None = None


class DroitTerrePaymentCreate(PaymentBase):
    souscription_id: int
    client_id: int | None = None


class CautionPaymentCreate(PaymentBase):
    location_id: int | None = None


class FacturePaymentCreate(PaymentBase):
    facture_id: int


class VenteCreate(BaseModel):
    article_id: int
    montant: Decimal = Field(gt=Decimal("0"))
    quantite: int = Field(default=1, ge=1)
    mode: str = Field(default="cash", max_length=30)
    reference: str | None = Field(default=None, max_length=128)


class CashOperationRead(BaseModel):
    """Outcome of a payment workflow: the business row and its journal entry."""

    payment_id: int | None
    cash_transaction_id: int
    type_operation: TypeOperation
    montant: Decimal
    solde_avant: Decimal
    solde_apres: Decimal
    impacts_caisse: bool

    model_config = ConfigDict(from_attributes=True)


class BalanceRead(BaseModel):
    solde: Decimal
    initialized: bool


class SoldeEntrepriseRead(BaseModel):
    revenus: dict[str, Decimal]
    depenses: dict[str, Decimal]
    total_revenus: Decimal
    total_depenses: Decimal
    solde: Decimal


class PeriodeSoldeRead(BaseModel):
    mois: str
    annee: int
    solde: Decimal


class PeriodeCheckRead(BaseModel):
    can_pay: bool
    solde_disponible: Decimal
    solde_necessaire: Decimal


class RecalculationRead(BaseModel):
    ancien_solde: Decimal
    nouveau_solde: Decimal
    transactions_processed: int
    transactions_corrigees: int

    model_config = ConfigDict(from_attributes=True)


class DiagnosticRead(BaseModel):
    solde_actuel: Decimal
    solde_theorique: Decimal
    total_entrees: Decimal
    total_sorties: Decimal
    difference: Decimal
    transactions_mal_orientees: int
    transactions_analysees: int
    drift_detected: bool
    message: str
    versements_recents: list[dict[str, Any]]
    sorties_recentes: list[dict[str, Any]]

    model_config = ConfigDict(from_attributes=True)

