"""
services/payment_service.py — Recording direct payments between participants.

A payment is a transfer ower -> payer that reduces their pairwise debt in
aggregate. It never targets a single expense.

Rules enforced here:
  SELF_PAYMENT (422)              — payer and receiver must differ
  PAYER_NOT_PARTICIPANT (422)     — payer must be on the event's roster
  RECEIVER_NOT_PARTICIPANT (422)  — receiver must be on the event's roster
  OVERPAYMENT (warning)           — the amount exceeds what the payer still
                                    owes the receiver; recorded anyway

Layer rules (GUIDE Rule 3):
  - No Flask imports. Receives a LedgerDataSource, returns ledger records.
  - Commits are the route's responsibility.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from backend.app.errors import AppError, ErrorCode, WarningCode, data_source_errors
from backend.app.ledger.obligations import derive_obligations
from backend.app.ledger.reconciliation import outstanding_between
from backend.app.ledger.records import Payment
from backend.app.services.data_source import LedgerDataSource, load_snapshot, require_event

logger = logging.getLogger(__name__)


def default_payment_note(payer_name: str, receiver_name: str) -> str:
    return f"Payment from {payer_name} to {receiver_name}"


def create_payment(
        event_id: int,
        data: dict,
        source: LedgerDataSource,
) -> tuple[Payment, list[dict]]:
    """
    Records a payment from data["payer_id"] to data["receiver_id"].

    Args:
        data: Validated dict from CreatePaymentSchema.
              Keys: payer_id, receiver_id, amount, and optionally notes.

    Returns:
        (Payment, warnings). Example warning:
        {"code": "OVERPAYMENT", "message": "..."}
    """
    require_event(event_id, source)

    payer_id: int = data["payer_id"]
    receiver_id: int = data["receiver_id"]
    amount: Decimal = data["amount"]

    if payer_id == receiver_id:
        raise AppError(
            ErrorCode.SELF_PAYMENT,
            "A participant cannot make a payment to themself.",
            422,
            field="receiver_id",
        )

    with data_source_errors("load the balances"):
        snapshot = load_snapshot(event_id, source)
    roster = {p.id: p for p in snapshot.participants}

    if payer_id not in roster:
        raise AppError(
            ErrorCode.PAYER_NOT_PARTICIPANT,
            f"Participant {payer_id} is not part of event {event_id}.",
            422,
            field="payer_id",
        )
    if receiver_id not in roster:
        raise AppError(
            ErrorCode.RECEIVER_NOT_PARTICIPANT,
            f"Participant {receiver_id} is not part of event {event_id}.",
            422,
            field="receiver_id",
        )

    # Overpayment is allowed; it only produces a warning.
    warnings: list[dict] = []
    obligations = derive_obligations(snapshot.expenses, snapshot.shares, roster.keys())
    current_debt = outstanding_between(obligations, snapshot.payments, payer_id, receiver_id)
    if amount > current_debt:
        warnings.append({
            "code": WarningCode.OVERPAYMENT,
            "message": (
                f"Payment of {amount} exceeds the outstanding debt of {current_debt} "
                f"from participant {payer_id} to participant {receiver_id}. "
                f"Recording anyway."
            ),
        })

    notes = (data.get("notes") or "").strip() or default_payment_note(
        roster[payer_id].name, roster[receiver_id].name,
    )

    with data_source_errors("save the payment"):
        payment = source.create_payment(event_id, payer_id, receiver_id, amount, notes)

    logger.info(
        "Payment %s of %s recorded for event %s: %s -> %s",
        payment.id, amount, event_id, payer_id, receiver_id,
    )
    return payment, warnings


def list_payments(event_id: int, source: LedgerDataSource) -> list[Payment]:
    """Payments of an event, newest first."""
    require_event(event_id, source)
    with data_source_errors("load payments"):
        payments = source.list_payments(event_id)
    return sorted(payments, key=lambda p: p.id, reverse=True)


def get_payment(payment_id: int, source: LedgerDataSource) -> Payment:
    """Returns the payment or raises PAYMENT_NOT_FOUND (404)."""
    with data_source_errors("load the payment"):
        payment = source.get_payment(payment_id)
    if payment is None:
        raise AppError(
            ErrorCode.PAYMENT_NOT_FOUND,
            f"Payment {payment_id} does not exist.",
            404,
        )
    return payment


def delete_payment(payment_id: int, source: LedgerDataSource) -> None:
    with data_source_errors("delete the payment"):
        deleted = source.delete_payment(payment_id)
    if not deleted:
        raise AppError(
            ErrorCode.PAYMENT_NOT_FOUND,
            f"Payment {payment_id} does not exist.",
            404,
        )
    logger.info("Payment %s deleted", payment_id)
