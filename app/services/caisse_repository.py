"""Access to the current physical cash balance (``caisse_balance`` singleton)."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.cash import CaisseBalance
from app.utils.money import to_decimal
from app.utils.time import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrentBalance:
    """Balance read result; ``initialized`` is False when no row exists yet."""

    amount: Decimal
    initialized: bool

    @classmethod
    def zero(cls) -> "CurrentBalance":
        return cls(amount=Decimal("0.00"), initialized=False)


class CaisseBalanceRepository(Protocol):
    def get_current_balance(self, *, for_update: bool = False) -> CurrentBalance: ...

    def set_balance(self, value: Decimal) -> None: ...


def _row_amount(row: CaisseBalance) -> Decimal:
    # Legacy rows may only have one of the two columns populated.
    if row.solde_courant is not None:
        return to_decimal(row.solde_courant)
    return to_decimal(row.balance)


class SqlCaisseBalanceRepository:
    """SQLAlchemy implementation bound to the caller's session.

    Never commits: the enclosing unit of work decides.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def _latest_row(self, *, for_update: bool = False) -> CaisseBalance | None:
        stmt = select(CaisseBalance).order_by(CaisseBalance.updated_at.desc(), CaisseBalance.id.desc()).limit(1)
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.scalars(stmt).first()

    def get_current_balance(self, *, for_update: bool = False) -> CurrentBalance:
        row = self._latest_row(for_update=for_update)
        if row is None:
            return CurrentBalance.zero()
        return CurrentBalance(amount=_row_amount(row), initialized=True)

    def set_balance(self, value: Decimal) -> None:
        amount = to_decimal(value)
        now = utcnow()
        row = self._latest_row(for_update=True)
        if row is None:
            row = CaisseBalance(solde_courant=amount, balance=amount, derniere_maj=now, updated_at=now)
            self.db.add(row)
            logger.info("Caisse balance initialised", extra={"solde": str(amount)})
        else:
            row.solde_courant = amount
            row.balance = amount
            row.derniere_maj = now
            row.updated_at = now
        self.db.flush()


__all__ = ["CurrentBalance", "CaisseBalanceRepository", "SqlCaisseBalanceRepository"]
