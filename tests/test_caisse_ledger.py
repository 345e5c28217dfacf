from decimal import Decimal

import pytest

from app.models import CaisseBalance, TypeOperation
from app.services.caisse_repository import CurrentBalance, SqlCaisseBalanceRepository
from app.services.cash_logic import can_make_payment, update_caisse_versement
from app.utils.errors import InsufficientFundsError


class InMemoryBalanceRepository:
    def __init__(self, amount: Decimal | None = None) -> None:
        self.amount = amount
        self.writes: list[Decimal] = []

    def get_current_balance(self, *, for_update: bool = False) -> CurrentBalance:
        if self.amount is None:
            return CurrentBalance.zero()
        return CurrentBalance(amount=self.amount, initialized=True)

    def set_balance(self, value: Decimal) -> None:
        self.amount = value
        self.writes.append(value)


def test_versement_then_rent_then_overdraft():
    repo = InMemoryBalanceRepository()

    first = update_caisse_versement(repo, Decimal("100000"), TypeOperation.versement_agent)
    assert first.solde_avant == Decimal("0.00")
    assert first.solde_apres == Decimal("100000.00")
    assert first.impacts_caisse is True

    second = update_caisse_versement(repo, Decimal("30000"), TypeOperation.paiement_loyer)
    assert second.solde_avant == Decimal("100000.00")
    assert second.solde_apres == Decimal("70000.00")

    with pytest.raises(InsufficientFundsError) as excinfo:
        update_caisse_versement(repo, Decimal("80000"), TypeOperation.paiement_souscription)

    exc = excinfo.value
    assert exc.code == "INSUFFICIENT_FUNDS"
    assert exc.solde_actuel == Decimal("70000.00")
    assert exc.montant_requis == Decimal("80000.00")
    assert exc.message == (
        "Solde insuffisant dans la caisse versement. "
        "Solde actuel: 70 000 FCFA, Montant requis: 80 000 FCFA"
    )
    assert repo.amount == Decimal("70000.00")
    assert len(repo.writes) == 2


def test_sortie_of_exact_balance_is_allowed():
    repo = InMemoryBalanceRepository(Decimal("50000.00"))

    update = update_caisse_versement(repo, Decimal("50000"), TypeOperation.paiement_caution)

    assert update.solde_apres == Decimal("0.00")
    assert repo.amount == Decimal("0.00")


def test_sortie_on_uninitialized_box_is_refused():
    repo = InMemoryBalanceRepository()

    with pytest.raises(InsufficientFundsError):
        update_caisse_versement(repo, Decimal("1"), TypeOperation.paiement_loyer)
    assert repo.writes == []


@pytest.mark.parametrize(
    "operation",
    [TypeOperation.vente, TypeOperation.depense_entreprise, TypeOperation.autre, TypeOperation.paiement_facture],
)
def test_non_versement_operation_is_a_no_op(operation):
    repo = InMemoryBalanceRepository(Decimal("1000.00"))

    update = update_caisse_versement(repo, Decimal("999999"), operation)

    assert update.impacts_caisse is False
    assert update.solde_avant == update.solde_apres == Decimal("1000.00")
    assert repo.writes == []


@pytest.mark.parametrize("montant", [Decimal("0"), Decimal("-10")])
def test_non_positive_amount_is_rejected(montant):
    repo = InMemoryBalanceRepository(Decimal("1000.00"))

    with pytest.raises(ValueError):
        update_caisse_versement(repo, montant, TypeOperation.versement_agent)


def test_balance_is_conserved_over_a_sequence():
    repo = InMemoryBalanceRepository()
    operations = [
        (TypeOperation.versement_agent, Decimal("250000")),
        (TypeOperation.paiement_loyer, Decimal("75000")),
        (TypeOperation.vente, Decimal("12000")),
        (TypeOperation.versement_agent, Decimal("15000.50")),
        (TypeOperation.paiement_droit_terre, Decimal("40000")),
        (TypeOperation.depense_entreprise, Decimal("3000")),
    ]

    entrees = Decimal("0")
    sorties = Decimal("0")
    for operation, montant in operations:
        update = update_caisse_versement(repo, montant, operation)
        if operation is TypeOperation.versement_agent:
            entrees += montant
        elif update.impacts_caisse:
            sorties += montant

    assert repo.amount == entrees - sorties == Decimal("150000.50")


def test_can_make_payment():
    repo = InMemoryBalanceRepository(Decimal("70000.00"))

    assert can_make_payment(repo, Decimal("70000"))
    assert not can_make_payment(repo, Decimal("70000.01"))
    assert not can_make_payment(InMemoryBalanceRepository(), Decimal("1"))


def test_sql_repository_lazily_creates_then_updates_row(db_session):
    repo = SqlCaisseBalanceRepository(db_session)
    assert repo.get_current_balance() == CurrentBalance.zero()

    update_caisse_versement(repo, Decimal("100000"), TypeOperation.versement_agent)
    update_caisse_versement(repo, Decimal("30000"), TypeOperation.paiement_loyer)
    db_session.commit()

    rows = db_session.query(CaisseBalance).all()
    assert len(rows) == 1
    assert rows[0].solde_courant == Decimal("70000.00")
    assert rows[0].balance == Decimal("70000.00")
    assert repo.get_current_balance() == CurrentBalance(amount=Decimal("70000.00"), initialized=True)


def test_sql_repository_reads_existing_row(db_session, set_caisse_balance):
    set_caisse_balance("42500")

    current = SqlCaisseBalanceRepository(db_session).get_current_balance()

    assert current.initialized is True
    assert current.amount == Decimal("42500.00")
