"""Test configuration."""
import os
from collections.abc import AsyncIterator, Callable, Iterator
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from alembic import command
from alembic.config import Config
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

# --- Config env par défaut
os.environ.setdefault("DATABASE_URL", "sqlite:///./caisse_test.db")
os.environ.setdefault("CAISSE_ENV", "test")
os.environ.setdefault("PROMETHEUS_ENABLED", "false")

from app.main import app  # noqa: E402
from app import db as app_db  # noqa: E402
from app.db import get_db  # noqa: E402
from app.models import (  # noqa: E402
    Base,
    CaisseBalance,
    CashTransaction,
    FactureFournisseur,
    TypeOperation,
    TypeTransaction,
)
from app.utils.time import utcnow  # noqa: E402

DB_PATH = Path("./caisse_test.db")


def _run_migrations() -> None:
    cfg = Config(str(Path(__file__).resolve().parents[1] / "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", os.environ["DATABASE_URL"])
    command.upgrade(cfg, "head")


# --- (1) Reset DB fichier au début de la session
if DB_PATH.exists():
    DB_PATH.unlink()

engine = create_engine(
    os.environ["DATABASE_URL"],
    connect_args={"check_same_thread": False},
    future=True,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False,
                                   future=True, expire_on_commit=False)

# --- (2) Construire le schéma via Alembic uniquement
_run_migrations()


@pytest.fixture(scope="session", autouse=True)
def app_engine() -> Iterator[None]:
    app_db.init_engine()
    yield
    app_db.close_engine()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def db_session() -> Iterator[Session]:
    # Les workflows commitent eux-mêmes: on vide les tables après chaque test.
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()
        session.close()


@pytest.fixture(autouse=True)
def override_db_dependency(db_session: Session) -> Iterator[None]:
    def _get_db() -> Iterator[Session]:
        yield db_session
    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client


@pytest.fixture
def add_cash_transaction(db_session: Session) -> Callable[..., CashTransaction]:
    """Insert a raw journal row, bypassing the ledger (simulates legacy or drifted data)."""

    def _factory(
        type_operation: TypeOperation,
        montant: str | Decimal,
        type_transaction: TypeTransaction | None = None,
        *,
        date_transaction: datetime | None = None,
        mois_concerne: str | None = None,
        annee_concerne: int | None = None,
        type: str | None = None,
    ) -> CashTransaction:
        entry = CashTransaction(
            type_operation=type_operation,
            type_transaction=type_transaction,
            montant=Decimal(montant),
            date_transaction=date_transaction or utcnow(),
            mois_concerne=mois_concerne,
            annee_concerne=annee_concerne,
            type=type,
        )
        db_session.add(entry)
        db_session.commit()
        db_session.refresh(entry)
        return entry

    return _factory


@pytest.fixture
def set_caisse_balance(db_session: Session) -> Callable[[str | Decimal], CaisseBalance]:
    def _factory(value: str | Decimal) -> CaisseBalance:
        row = CaisseBalance(solde_courant=Decimal(value), balance=Decimal(value), derniere_maj=utcnow())
        db_session.add(row)
        db_session.commit()
        db_session.refresh(row)
        return row

    return _factory


@pytest.fixture
def make_facture(db_session: Session) -> Callable[..., FactureFournisseur]:
    def _factory(numero: str, montant_total: str | Decimal, fournisseur_id: int | None = 7) -> FactureFournisseur:
        facture = FactureFournisseur(
            numero=numero,
            fournisseur_id=fournisseur_id,
            montant_total=Decimal(montant_total),
            montant_paye=Decimal("0"),
            solde=Decimal(montant_total),
        )
        db_session.add(facture)
        db_session.commit()
        db_session.refresh(facture)
        return facture

    return _factory
