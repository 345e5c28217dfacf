"""Cash register endpoints: balances, journal, payments and administration."""
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.cash import CashTransaction, TypeOperation
from app.schemas.cash import (
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
from app.services import cash_logic
from app.services import cash_operations
from app.services.diagnostics import diagnose_caisse_versement

router = APIRouter(prefix="/cash", tags=["cash"])


@router.get("/balance/versement", response_model=BalanceRead)
def read_balance_versement(db: Session = Depends(get_db)) -> BalanceRead:
    current = cash_logic.get_current_balance(db)
    return BalanceRead(solde=current.amount, initialized=current.initialized)


@router.get("/balance/entreprise", response_model=SoldeEntrepriseRead)
def read_balance_entreprise(db: Session = Depends(get_db)) -> SoldeEntrepriseRead:
    solde = cash_logic.calculate_solde_entreprise(db)
    return SoldeEntrepriseRead(
        revenus=solde.revenus,
        depenses=solde.depenses,
        total_revenus=solde.total_revenus,
        total_depenses=solde.total_depenses,
        solde=solde.solde,
    )


@router.get("/periode", response_model=PeriodeSoldeRead)
def read_solde_periode(
    mois: str = Query(..., max_length=20),
    annee: int = Query(..., ge=1900, le=2999),
    db: Session = Depends(get_db),
) -> PeriodeSoldeRead:
    return PeriodeSoldeRead(mois=mois, annee=annee, solde=cash_logic.get_solde_by_periode(db, mois, annee))


@router.get("/periode/check", response_model=PeriodeCheckRead)
def check_periode_payment(
    montant: Decimal = Query(..., gt=Decimal("0")),
    mois: str = Query(..., max_length=20),
    annee: int = Query(..., ge=1900, le=2999),
    db: Session = Depends(get_db),
) -> PeriodeCheckRead:
    check = cash_logic.can_make_payment_for_periode(db, montant, mois, annee)
    return PeriodeCheckRead(
        can_pay=check.can_pay,
        solde_disponible=check.solde_disponible,
        solde_necessaire=check.solde_necessaire,
    )


@router.get("/transactions", response_model=list[CashTransactionRead])
def list_cash_transactions(
    type_operation: TypeOperation | None = Query(default=None),
    mois: str | None = Query(default=None, max_length=20),
    annee: int | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[CashTransaction]:
    stmt = select(CashTransaction)
    if type_operation is not None:
        stmt = stmt.where(CashTransaction.type_operation == type_operation)
    if mois is not None:
        stmt = stmt.where(CashTransaction.mois_concerne == mois)
    if annee is not None:
        stmt = stmt.where(CashTransaction.annee_concerne == annee)
    stmt = stmt.order_by(
        CashTransaction.date_transaction.asc(), CashTransaction.created_at.asc(), CashTransaction.id.asc()
    ).limit(limit)
    return list(db.scalars(stmt).all())


@router.post("/transactions", response_model=CashOperationRead, status_code=status.HTTP_201_CREATED)
def create_cash_transaction(payload: CashTransactionCreate, db: Session = Depends(get_db)):
    return cash_operations.record_cash_transaction(db, payload)


@router.post("/payments/location", response_model=CashOperationRead, status_code=status.HTTP_201_CREATED)
def pay_location(payload: LocationPaymentCreate, db: Session = Depends(get_db)):
    return cash_operations.pay_location(db, payload)


@router.post("/payments/souscription", response_model=CashOperationRead, status_code=status.HTTP_201_CREATED)
def pay_souscription(payload: SouscriptionPaymentCreate, db: Session = Depends(get_db)):
    return cash_operations.pay_souscription(db, payload)


@router.post("/payments/droit-terre", response_model=CashOperationRead, status_code=status.HTTP_201_CREATED)
def pay_droit_terre(payload: DroitTerrePaymentCreate, db: Session = Depends(get_db)):
    return cash_operations.pay_droit_terre(db, payload)


@router.post("/payments/caution", response_model=CashOperationRead, status_code=status.HTTP_201_CREATED)
def pay_caution(payload: CautionPaymentCreate, db: Session = Depends(get_db)):
    return cash_operations.pay_caution(db, payload)


@router.post("/payments/facture", response_model=CashOperationRead, status_code=status.HTTP_201_CREATED)
def pay_facture(payload: FacturePaymentCreate, db: Session = Depends(get_db)):
    return cash_operations.pay_facture(db, payload)


@router.post("/sales", response_model=CashOperationRead, status_code=status.HTTP_201_CREATED)
def record_sale(payload: VenteCreate, db: Session = Depends(get_db)):
    return cash_operations.record_sale(db, payload)


@router.post("/recalculate", response_model=RecalculationRead)
def recalculate(
    fix_directions: bool = Query(default=True),
    db: Session = Depends(get_db),
):
    return cash_logic.recalculate_caisse_balances(db, fix_directions=fix_directions, actor="admin")


@router.get("/diagnose", response_model=DiagnosticRead)
def diagnose(db: Session = Depends(get_db)):
    return diagnose_caisse_versement(db)
