"""Schema package exports."""
from .alert import AlertRead
from .cash import (
    BalanceRead,
    CashOperationRead,
    CashTransactionCreate,
    CashTransactionRead,
    CautionPaymentCreate,
    DiagnosticRead,
    DroitTerrePaymentCreate,
    FacturePaymentCreate,
    LocationPaymentCreate,
    PeriodeCheckRead,
    PeriodeSoldeRead,
    RecalculationRead,
    SoldeEntrepriseRead,
    SouscriptionPaymentCreate,
    VenteCreate,
)

__all__ = [
    "AlertRead",
    "BalanceRead",
    "CashOperationRead",
    "CashTransactionCreate",
    "CashTransactionRead",
    "CautionPaymentCreate",
    "DiagnosticRead",
    "DroitTerrePaymentCreate",
    "FacturePaymentCreate",
    "LocationPaymentCreate",
    "PeriodeCheckRead",
    "PeriodeSoldeRead",
    "RecalculationRead",
    "SoldeEntrepriseRead",
    "SouscriptionPaymentCreate",
    "VenteCreate",
]
