import pytest

from app.models import TypeOperation, TypeTransaction
from app.services.cash_logic import affects_versement, classify_versement, is_expense, is_revenue


@pytest.mark.parametrize(
    "operation, expected",
    [
        (TypeOperation.versement_agent, TypeTransaction.entree),
        (TypeOperation.paiement_loyer, TypeTransaction.sortie),
        (TypeOperation.paiement_souscription, TypeTransaction.sortie),
        (TypeOperation.paiement_droit_terre, TypeTransaction.sortie),
        (TypeOperation.paiement_caution, TypeTransaction.sortie),
        (TypeOperation.vente, None),
        (TypeOperation.depense_entreprise, None),
        (TypeOperation.paiement_facture, None),
        (TypeOperation.remboursement_caution, None),
        (TypeOperation.autre, None),
    ],
)
def test_classify_versement(operation, expected):
    assert classify_versement(operation) is expected
    assert affects_versement(operation) is (expected is not None)


def test_classifier_accepts_raw_strings():
    assert classify_versement("versement_agent") is TypeTransaction.entree
    assert classify_versement("paiement_loyer") is TypeTransaction.sortie
    assert is_revenue("vente")
    assert is_expense("autre")


def test_unknown_operation_has_no_effect():
    assert classify_versement("inconnu") is None
    assert classify_versement(None) is None
    assert not affects_versement("inconnu")
    assert not is_revenue("inconnu")
    assert not is_expense("inconnu")


def test_rent_payment_is_both_versement_sortie_and_revenue():
    assert classify_versement(TypeOperation.paiement_loyer) is TypeTransaction.sortie
    assert is_revenue(TypeOperation.paiement_loyer)
    assert not is_expense(TypeOperation.paiement_loyer)


def test_versement_agent_is_neither_revenue_nor_expense():
    assert not is_revenue(TypeOperation.versement_agent)
    assert not is_expense(TypeOperation.versement_agent)


@pytest.mark.parametrize(
    "operation",
    [
        TypeOperation.depense_entreprise,
        TypeOperation.paiement_facture,
        TypeOperation.autre,
        TypeOperation.remboursement_caution,
    ],
)
def test_expenses_do_not_touch_cash_box(operation):
    assert is_expense(operation)
    assert not is_revenue(operation)
    assert not affects_versement(operation)
