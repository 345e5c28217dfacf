from decimal import Decimal

import pytest

from app.models import AuditLog, TypeOperation, TypeTransaction


async def _versement(client, montant: str, **extra) -> dict:
    response = await client.post(
        "/cash/transactions",
        json={"montant": montant, "type_operation": "versement_agent", "agent_id": 1, **extra},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.anyio("asyncio")
async def test_balance_versement_starts_uninitialized(client):
    response = await client.get("/cash/balance/versement")
    assert response.status_code == 200
    payload = response.json()
    assert Decimal(payload["solde"]) == Decimal("0")
    assert payload["initialized"] is False


@pytest.mark.anyio("asyncio")
async def test_payment_flow_and_overdraft(client):
    created = await _versement(client, "100000")
    assert Decimal(created["solde_apres"]) == Decimal("100000")

    rent = await client.post("/cash/payments/location", json={"location_id": 1, "montant": "30000"})
    assert rent.status_code == 201
    assert Decimal(rent.json()["solde_apres"]) == Decimal("70000")
    assert rent.json()["type_operation"] == "paiement_loyer"

    refused = await client.post("/cash/payments/souscription", json={"souscription_id": 2, "montant": "80000"})
    assert refused.status_code == 400
    error = refused.json()["error"]
    assert error["code"] == "INSUFFICIENT_FUNDS"
    assert error["message"] == (
        "Solde insuffisant dans la caisse versement. "
        "Solde actuel: 70 000 FCFA, Montant requis: 80 000 FCFA"
    )
    assert error["details"] == {"solde_actuel": "70000.00", "montant_requis": "80000.00"}

    balance = await client.get("/cash/balance/versement")
    assert Decimal(balance.json()["solde"]) == Decimal("70000")
    assert balance.json()["initialized"] is True


@pytest.mark.anyio("asyncio")
async def test_payment_validation(client):
    response = await client.post("/cash/payments/location", json={"location_id": 1, "montant": "0"})
    assert response.status_code == 422

    response = await client.post(
        "/cash/payments/location", json={"location_id": 1, "montant": "10", "mois_concerne": "Mars"}
    )
    assert response.status_code == 422


@pytest.mark.anyio("asyncio")
async def test_other_payment_endpoints(client, make_facture):
    await _versement(client, "100000")

    droit_terre = await client.post("/cash/payments/droit-terre", json={"souscription_id": 3, "montant": "10000"})
    caution = await client.post("/cash/payments/caution", json={"location_id": 4, "montant": "10000"})
    sale = await client.post("/cash/sales", json={"article_id": 9, "montant": "2500"})
    facture = make_facture("FAC-API-1", "40000")
    invoice = await client.post("/cash/payments/facture", json={"facture_id": facture.id, "montant": "40000"})

    assert [r.status_code for r in (droit_terre, caution, sale, invoice)] == [201, 201, 201, 201]
    assert Decimal(caution.json()["solde_apres"]) == Decimal("80000")
    assert sale.json()["impacts_caisse"] is False
    assert invoice.json()["impacts_caisse"] is False

    missing = await client.post("/cash/payments/facture", json={"facture_id": 12345, "montant": "10"})
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "FACTURE_NOT_FOUND"


@pytest.mark.anyio("asyncio")
async def test_balance_entreprise(client, make_facture):
    await _versement(client, "200000")
    await client.post("/cash/payments/location", json={"location_id": 1, "montant": "150000"})
    await client.post("/cash/sales", json={"article_id": 1, "montant": "5000"})
    facture = make_facture("FAC-API-2", "80000")
    await client.post("/cash/payments/facture", json={"facture_id": facture.id, "montant": "50000"})

    response = await client.get("/cash/balance/entreprise")
    assert response.status_code == 200
    payload = response.json()
    assert Decimal(payload["total_revenus"]) == Decimal("155000")
    assert Decimal(payload["depenses"]["factures"]) == Decimal("50000")
    assert Decimal(payload["depenses"]["depenses_caisse"]) == Decimal("0")
    assert Decimal(payload["solde"]) == Decimal("105000")


@pytest.mark.anyio("asyncio")
async def test_periode_endpoints(client):
    await _versement(client, "200000", mois_concerne="Mars", annee_concerne=2025)
    await client.post(
        "/cash/payments/location",
        json={"location_id": 1, "montant": "60000", "mois_concerne": "Mars", "annee_concerne": 2025},
    )

    solde = await client.get("/cash/periode", params={"mois": "Mars", "annee": 2025})
    assert solde.status_code == 200
    assert Decimal(solde.json()["solde"]) == Decimal("140000")

    check = await client.get("/cash/periode/check", params={"montant": "150000", "mois": "Mars", "annee": 2025})
    assert check.status_code == 200
    assert check.json()["can_pay"] is False
    assert Decimal(check.json()["solde_disponible"]) == Decimal("140000")


@pytest.mark.anyio("asyncio")
async def test_list_transactions_filters(client):
    await _versement(client, "1000", mois_concerne="Mars", annee_concerne=2025)
    await _versement(client, "2000")

    everything = await client.get("/cash/transactions")
    assert everything.status_code == 200
    assert [Decimal(item["montant"]) for item in everything.json()] == [Decimal("1000"), Decimal("2000")]

    tagged = await client.get("/cash/transactions", params={"mois": "Mars", "annee": 2025})
    assert len(tagged.json()) == 1
    assert tagged.json()[0]["type_transaction"] == "entree"


@pytest.mark.anyio("asyncio")
async def test_recalculate_and_diagnose(client, db_session, add_cash_transaction, set_caisse_balance):
    add_cash_transaction(TypeOperation.versement_agent, "100000", TypeTransaction.entree)
    add_cash_transaction(TypeOperation.paiement_loyer, "30000", TypeTransaction.entree)
    set_caisse_balance("130000")

    diagnose = await client.get("/cash/diagnose")
    assert diagnose.status_code == 200
    assert diagnose.json()["drift_detected"] is True
    assert diagnose.json()["transactions_mal_orientees"] == 1

    alerts = await client.get("/alerts", params={"type": "CAISSE_DRIFT_DETECTED"})
    assert alerts.status_code == 200
    assert len(alerts.json()) == 1
    assert alerts.json()[0]["payload"]["transactions_mal_orientees"] == 1

    again = await client.get("/cash/diagnose")
    assert again.json()["drift_detected"] is True
    assert len((await client.get("/alerts", params={"type": "CAISSE_DRIFT_DETECTED"})).json()) == 1

    recalc = await client.post("/cash/recalculate")
    assert recalc.status_code == 200
    payload = recalc.json()
    assert Decimal(payload["ancien_solde"]) == Decimal("130000")
    assert Decimal(payload["nouveau_solde"]) == Decimal("70000")
    assert payload["transactions_processed"] == 2
    assert payload["transactions_corrigees"] == 1
    assert db_session.query(AuditLog).filter_by(action="CAISSE_RECALCULATED").count() == 1

    after = await client.get("/cash/diagnose")
    assert after.json()["drift_detected"] is False
