"""
services/balance_service.py — The single recompute entry point.

recompute(event_id, source) is called on every balance read and after every
mutation. There is no incremental state: each call loads the full snapshot
for the event and runs the ledger core over it.

    snapshot = load_snapshot(event_id, source)
    balances = compute_balances(...)                      # 4.1
    obligations = derive_obligations(...)                 # 4.2
    lines = reconcile(obligations, payments, policy)      # 4.3
    by_ower = project_by_ower(lines, participants)        # 4.4

Nothing here blocks a view on data quality. Records the core had to skip,
shares that do not add up to their expense, and a balance sum outside the
tolerance are logged and returned as warnings alongside the result.

Layer rules (GUIDE Rule 3):
  - No Flask imports. Receives event_id and a LedgerDataSource.
  - Returns a LedgerView (immutable); routes serialise it.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from backend.app.errors import WarningCode, data_source_errors
from backend.app.ledger.accumulator import compute_balances
from backend.app.ledger.integrity import (
    find_rounding_drift,
    find_unresolved,
    is_conserved,
)
from backend.app.ledger.obligations import derive_obligations
from backend.app.ledger.projection import detail_by_expense, project_by_ower
from backend.app.ledger.reconciliation import ReconciliationPolicy, reconcile
from backend.app.ledger.records import CENT, CategorySummary, LedgerSnapshot, LedgerView
from backend.app.ledger.reports import summarize_by_category
from backend.app.services.data_source import LedgerDataSource, load_snapshot, require_event

logger = logging.getLogger(__name__)


def _load(event_id: int, source: LedgerDataSource) -> LedgerSnapshot:
    require_event(event_id, source)
    with data_source_errors("load the balances"):
        return load_snapshot(event_id, source)


def _integrity_warnings(
        event_id: int,
        snapshot: LedgerSnapshot,
        tolerance: Decimal,
) -> list[dict]:
    warnings: list[dict] = []

    skipped = find_unresolved(snapshot)
    for record in skipped:
        logger.warning(
            "Event %s: skipped %s %s (%s)",
            event_id, record.kind, record.record_id, record.reason,
        )
    if skipped:
        warnings.append({
            "code": WarningCode.SKIPPED_RECORDS,
            "message": (
                f"{len(skipped)} record(s) reference unknown participants or "
                f"expenses and were left out of the balances."
            ),
        })

    for drift in find_rounding_drift(snapshot.expenses, snapshot.shares, tolerance):
        logger.warning(
            "Event %s: shares of expense %s add up to %s, expense amount is %s",
            event_id, drift.expense_id, drift.shares_total, drift.amount,
        )
        warnings.append({
            "code": WarningCode.ROUNDING_DRIFT,
            "message": (
                f"Shares of expense {drift.expense_id} differ from its amount "
                f"by {drift.drift}."
            ),
        })

    return warnings


def recompute(
        event_id: int,
        source: LedgerDataSource,
        policy: ReconciliationPolicy | str = ReconciliationPolicy.PRESENCE,
        tolerance: Decimal = CENT,
) -> LedgerView:
    """
    Full recompute of balances and settlement lines for one event.

    Args:
        policy:    How recorded payments mark a settlement line as paid.
        tolerance: Drift per expense (and per participant, for the balance
                   sum) below which nothing is reported.

    Raises:
        AppError(EVENT_NOT_FOUND, 404)
        AppError(DATA_SOURCE_ERROR, 503) — any read failed; nothing is returned.
    """
    snapshot = _load(event_id, source)
    warnings = _integrity_warnings(event_id, snapshot, tolerance)

    balances = compute_balances(
        snapshot.participants,
        snapshot.expenses,
        snapshot.shares,
        snapshot.payments,
    )
    if not is_conserved(balances, tolerance):
        logger.warning(
            "Event %s: balances add up to %s instead of 0",
            event_id, sum(b.balance for b in balances),
        )

    obligations = derive_obligations(
        snapshot.expenses, snapshot.shares, snapshot.participant_ids,
    )
    lines = reconcile(obligations, snapshot.payments, policy)

    logger.debug(
        "Event %s recomputed: %d participant(s), %d obligation(s), %d settlement line(s)",
        event_id, len(balances), len(obligations), len(lines),
    )

    return LedgerView(
        event_id=event_id,
        balances=tuple(balances),
        settlement_lines=tuple(lines),
        payments_by_payer=tuple(project_by_ower(lines, snapshot.participants)),
        detailed_payments=tuple(detail_by_expense(obligations, snapshot.participants)),
        warnings=tuple(warnings),
    )


def category_report(event_id: int, source: LedgerDataSource) -> list[CategorySummary]:
    """Expense totals per category for an event, largest first."""
    require_event(event_id, source)
    with data_source_errors("load expenses"):
        expenses = source.list_expenses(event_id)
    return summarize_by_category(expenses)
