"""
ledger — the settlement engine.

Pure functions over immutable records: no Flask, no database, no logging.
Data flows one way:

    snapshot ─┬─> accumulator.compute_balances ───────────────> balances
              └─> obligations.derive_obligations ─> reconciliation.reconcile
                                                   ─> projection.project_by_ower
"""

from backend.app.ledger.accumulator import compute_balances
from backend.app.ledger.division import compute_shares, split_by_adult_units
from backend.app.ledger.obligations import derive_obligations
from backend.app.ledger.projection import detail_by_expense, project_by_ower
from backend.app.ledger.reconciliation import ReconciliationPolicy, reconcile
from backend.app.ledger.reports import (
    group_contributions_by_month,
    summarize_by_category,
    total_contributions,
)

__all__ = [
    "ReconciliationPolicy",
    "compute_balances",
    "compute_shares",
    "derive_obligations",
    "detail_by_expense",
    "group_contributions_by_month",
    "project_by_ower",
    "reconcile",
    "split_by_adult_units",
    "summarize_by_category",
    "total_contributions",
]
