"""
services/data_source.py — Aggregate Loader.

The ledger core never talks to the database. It receives a LedgerSnapshot
built from four list queries against a LedgerDataSource, which is passed
into every service function explicitly. Production code uses
SqlAlchemyDataSource; the unit tests use an in-memory fake.

Failure contract:
  - Every query or write that the backing store rejects raises
    DataSourceError (the original exception is chained as __cause__).
  - Nothing is retried here. Services turn DataSourceError into a 503.

Layer rules (GUIDE Rule 3):
  - No Flask imports. The session is handed in by the caller.
  - Returns ledger records, never ORM objects.
  - Only flush; committing is the route's responsibility.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Protocol, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.errors import AppError, DataSourceError, ErrorCode, data_source_errors
from backend.app.ledger.records import (
    Expense,
    ExpenseShare,
    LedgerSnapshot,
    Participant,
    Payment,
)
from backend.app.models.event import Event as EventRow
from backend.app.models.event_participant import EventParticipant as EventParticipantRow
from backend.app.models.expense import Expense as ExpenseRow
from backend.app.models.expense_share import ExpenseShare as ExpenseShareRow
from backend.app.models.participant import Participant as ParticipantRow
from backend.app.models.payment import Payment as PaymentRow

logger = logging.getLogger(__name__)


class LedgerDataSource(Protocol):
    """Everything the ledger services need from persistent storage."""

    def event_exists(self, event_id: int) -> bool: ...

    def list_participants(self, event_id: int) -> list[Participant]: ...

    def list_expenses(self, event_id: int) -> list[Expense]: ...

    def list_expense_shares(self, event_id: int) -> list[ExpenseShare]: ...

    def list_payments(self, event_id: int) -> list[Payment]: ...

    def get_expense(self, expense_id: int) -> Expense | None: ...

    def list_shares_for_expense(self, expense_id: int) -> list[ExpenseShare]: ...

    def create_expense(self, event_id: int, data: dict, shares: Sequence[dict]) -> Expense: ...

    def delete_expense(self, expense_id: int) -> bool: ...

    def get_payment(self, payment_id: int) -> Payment | None: ...

    def create_payment(
            self,
            event_id: int,
            payer_id: int,
            receiver_id: int,
            amount: Decimal,
            notes: str,
    ) -> Payment: ...

    def delete_payment(self, payment_id: int) -> bool: ...


def load_snapshot(event_id: int, source: LedgerDataSource) -> LedgerSnapshot:
    """
    Materialises everything the core needs for one event.

    The four reads are independent of each other; any one of them failing
    aborts the whole load (DataSourceError propagates).
    """
    return LedgerSnapshot(
        participants=source.list_participants(event_id),
        expenses=source.list_expenses(event_id),
        shares=source.list_expense_shares(event_id),
        payments=source.list_payments(event_id),
    )


def require_event(event_id: int, source: LedgerDataSource) -> None:
    """Raises EVENT_NOT_FOUND (404) if the event does not exist."""
    with data_source_errors("load the event"):
        exists = source.event_exists(event_id)
    if not exists:
        raise AppError(
            ErrorCode.EVENT_NOT_FOUND,
            f"Event {event_id} does not exist.",
            404,
        )


# ── Row → record conversion ────────────────────────────────────────────────

def _participant_record(row: ParticipantRow) -> Participant:
    return Participant(id=row.id, name=row.name, type=row.type, children=row.children)


def _expense_record(row: ExpenseRow) -> Expense:
    return Expense(
        id=row.id,
        description=row.description,
        amount=row.amount,
        payer_id=row.payer_id,
        category=row.category,
        date=row.date,
        division_type=row.division_type,
        event_id=row.event_id,
    )


def _share_record(row: ExpenseShareRow) -> ExpenseShare:
    return ExpenseShare(
        expense_id=row.expense_id,
        participant_id=row.participant_id,
        amount=row.amount,
    )


def _payment_record(row: PaymentRow) -> Payment:
    return Payment(
        id=row.id,
        payer_id=row.payer_id,
        receiver_id=row.receiver_id,
        amount=row.amount,
        notes=row.notes,
        created_at=row.created_at,
        event_id=row.event_id,
    )


# ── SQLAlchemy implementation ──────────────────────────────────────────────

class SqlAlchemyDataSource:
    """
    LedgerDataSource backed by a SQLAlchemy session.

    Reads are ordered oldest first (expense date, then id; payment creation
    time, then id) so the core sees a stable iteration order.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def _run(self, action: str, fn):
        try:
            return fn()
        except SQLAlchemyError as exc:
            logger.error("Data source failure while trying to %s: %s", action, exc)
            raise DataSourceError(f"Could not {action}.") from exc

    # ── Reads ──────────────────────────────────────────────────────────────

    def event_exists(self, event_id: int) -> bool:
        return self._run(
            "load the event",
            lambda: self.session.get(EventRow, event_id) is not None,
        )

    def list_participants(self, event_id: int) -> list[Participant]:
        stmt = (
            select(ParticipantRow)
            .join(EventParticipantRow, EventParticipantRow.participant_id == ParticipantRow.id)
            .where(EventParticipantRow.event_id == event_id)
            .order_by(ParticipantRow.id)
        )
        return self._run(
            "load participants",
            lambda: [_participant_record(r) for r in self.session.execute(stmt).scalars()],
        )

    def list_expenses(self, event_id: int) -> list[Expense]:
        stmt = (
            select(ExpenseRow)
            .where(ExpenseRow.event_id == event_id)
            .order_by(ExpenseRow.date, ExpenseRow.id)
        )
        return self._run(
            "load expenses",
            lambda: [_expense_record(r) for r in self.session.execute(stmt).scalars()],
        )

    def list_expense_shares(self, event_id: int) -> list[ExpenseShare]:
        stmt = (
            select(ExpenseShareRow)
            .join(ExpenseRow, ExpenseRow.id == ExpenseShareRow.expense_id)
            .where(ExpenseRow.event_id == event_id)
            .order_by(ExpenseShareRow.expense_id, ExpenseShareRow.id)
        )
        return self._run(
            "load expense shares",
            lambda: [_share_record(r) for r in self.session.execute(stmt).scalars()],
        )

    def list_payments(self, event_id: int) -> list[Payment]:
        stmt = (
            select(PaymentRow)
            .where(PaymentRow.event_id == event_id)
            .order_by(PaymentRow.created_at, PaymentRow.id)
        )
        return self._run(
            "load payments",
            lambda: [_payment_record(r) for r in self.session.execute(stmt).scalars()],
        )

    def get_expense(self, expense_id: int) -> Expense | None:
        def _load():
            row = self.session.get(ExpenseRow, expense_id)
            return _expense_record(row) if row is not None else None
        return self._run("load the expense", _load)

    def list_shares_for_expense(self, expense_id: int) -> list[ExpenseShare]:
        stmt = (
            select(ExpenseShareRow)
            .where(ExpenseShareRow.expense_id == expense_id)
            .order_by(ExpenseShareRow.id)
        )
        return self._run(
            "load expense shares",
            lambda: [_share_record(r) for r in self.session.execute(stmt).scalars()],
        )

    def get_payment(self, payment_id: int) -> Payment | None:
        def _load():
            row = self.session.get(PaymentRow, payment_id)
            return _payment_record(row) if row is not None else None
        return self._run("load the payment", _load)

    # ── Writes ─────────────────────────────────────────────────────────────

    def create_expense(self, event_id: int, data: dict, shares: Sequence[dict]) -> Expense:
        """
        Inserts the expense and all its share rows in the session's current
        transaction. Nothing is committed here; on failure the caller rolls
        back, so either every row is written or none is.
        """
        def _write():
            row = ExpenseRow(
                event_id=event_id,
                payer_id=data["payer_id"],
                description=data["description"],
                amount=data["amount"],
                category=data["category"],
                date=data["date"],
                division_type=data["division_type"],
            )
            self.session.add(row)
            self.session.flush()
            for share in shares:
                self.session.add(ExpenseShareRow(
                    expense_id=row.id,
                    participant_id=share["participant_id"],
                    amount=share["amount"],
                ))
            self.session.flush()
            return _expense_record(row)
        return self._run("save the expense", _write)

    def delete_expense(self, expense_id: int) -> bool:
        def _write():
            row = self.session.get(ExpenseRow, expense_id)
            if row is None:
                return False
            # Bulk delete so SQLite (no FK cascade by default) drops the shares too.
            self.session.execute(
                delete(ExpenseShareRow).where(ExpenseShareRow.expense_id == expense_id)
            )
            self.session.expire(row, ["shares"])
            self.session.delete(row)
            self.session.flush()
            return True
        return self._run("delete the expense", _write)

    def create_payment(
            self,
            event_id: int,
            payer_id: int,
            receiver_id: int,
            amount: Decimal,
            notes: str,
    ) -> Payment:
        def _write():
            row = PaymentRow(
                event_id=event_id,
                payer_id=payer_id,
                receiver_id=receiver_id,
                amount=amount,
                notes=notes,
            )
            self.session.add(row)
            self.session.flush()
            return _payment_record(row)
        return self._run("save the payment", _write)

    def delete_payment(self, payment_id: int) -> bool:
        def _write():
            row = self.session.get(PaymentRow, payment_id)
            if row is None:
                return False
            self.session.delete(row)
            self.session.flush()
            return True
        return self._run("delete the payment", _write)
