"""
errors.py — AppError base class and error code registry.

Every error returned by the Carnival Ledger API must use a code defined here.
Do not raise strings or generic exceptions from service or route code.

Rules:
  - Error codes are a versioned contract. They do not change once published.
  - Error messages are human-readable prose. They may be improved at any time.
  - Data-source failures are recoverable (503): the client offers "try again",
    the server never retries on its own.
"""

from __future__ import annotations

from contextlib import contextmanager


class AppError(Exception):

    def __init__(
            self,
            code: str,
            message: str,
            http_status: int,
            field: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code        = code
        self.message     = message
        self.http_status = http_status
        self.field       = field  # which request field caused the error

    def to_dict(self) -> dict:
        payload = {
            "code":    self.code,
            "message": self.message,
        }
        if self.field is not None:
            payload["field"] = self.field
        return {"error": payload}

    def __repr__(self) -> str:
        return (
            f"AppError(code={self.code!r}, "
            f"http_status={self.http_status}, "
            f"message={self.message!r})"
        )


class DataSourceError(Exception):
    """
    Raised by a LedgerDataSource when a query or write is rejected.

    Services convert it into AppError(DATA_SOURCE_ERROR, 503). The original
    exception is kept as __cause__ for the log.
    """


# ── Error Code Registry ────────────────────────────────────────────────────
#
# Organised by category. HTTP status is indicated in the comment.
#
# IMPORTANT: these are the string values sent in the API response.
# Do not rename them without a major version bump.
# ──────────────────────────────────────────────────────────────────────────

class ErrorCode:

    # ── Schema / Input Errors (400) ────────────────────────────────────────
    MISSING_FIELD              = "MISSING_FIELD"
    INVALID_FIELD              = "INVALID_FIELD"
    INVALID_AMOUNT_PRECISION   = "INVALID_AMOUNT_PRECISION"
    INVALID_CATEGORY           = "INVALID_CATEGORY"
    INVALID_DIVISION_TYPE      = "INVALID_DIVISION_TYPE"
    INVALID_PARTICIPANT_TYPE   = "INVALID_PARTICIPANT_TYPE"
    INVALID_EVENT_STATUS       = "INVALID_EVENT_STATUS"
    DUPLICATE_SHARE_PARTICIPANT = "DUPLICATE_SHARE_PARTICIPANT"

    # ── Conflict Errors (409) ──────────────────────────────────────────────
    ALREADY_IN_EVENT           = "ALREADY_IN_EVENT"
    PARTICIPANT_HAS_RECORDS    = "PARTICIPANT_HAS_RECORDS"  # still in expenses or payments

    # ── Not Found Errors (404) ─────────────────────────────────────────────
    EVENT_NOT_FOUND            = "EVENT_NOT_FOUND"
    PARTICIPANT_NOT_FOUND      = "PARTICIPANT_NOT_FOUND"
    EXPENSE_NOT_FOUND          = "EXPENSE_NOT_FOUND"
    PAYMENT_NOT_FOUND          = "PAYMENT_NOT_FOUND"
    CONTRIBUTION_NOT_FOUND     = "CONTRIBUTION_NOT_FOUND"
    PARTICIPANT_NOT_IN_EVENT   = "PARTICIPANT_NOT_IN_EVENT"

    # ── Business Rule Violations (422) ────────────────────────────────────
    PAYER_NOT_PARTICIPANT      = "PAYER_NOT_PARTICIPANT"
    RECEIVER_NOT_PARTICIPANT   = "RECEIVER_NOT_PARTICIPANT"
    SHARE_NOT_PARTICIPANT      = "SHARE_NOT_PARTICIPANT"
    NO_ADULT_UNITS             = "NO_ADULT_UNITS"         # equal split over nobody
    SELF_PAYMENT               = "SELF_PAYMENT"

    # ── Data Source Errors (503) ───────────────────────────────────────────
    DATA_SOURCE_ERROR          = "DATA_SOURCE_ERROR"

    # ── System Errors (500) ────────────────────────────────────────────────
    INTERNAL_ERROR             = "INTERNAL_ERROR"


# ── Warning Code Registry ──────────────────────────────────────────────────
#
# Warnings are returned alongside a 2xx response in the `warnings` array.
# They do not block the request.
# ──────────────────────────────────────────────────────────────────────────

class WarningCode:

    # Payment amount exceeds the current pairwise debt. Still recorded.
    OVERPAYMENT = "OVERPAYMENT"

    # Shares of an expense do not add up to its amount beyond the tolerance.
    ROUNDING_DRIFT = "ROUNDING_DRIFT"

    # Records referencing unknown participants/expenses were left out.
    SKIPPED_RECORDS = "SKIPPED_RECORDS"


def data_source_failure(action: str) -> AppError:
    """Builds the user-displayable 503 for a failed read or write."""
    return AppError(
        ErrorCode.DATA_SOURCE_ERROR,
        f"Could not {action}. Please try again.",
        503,
    )


@contextmanager
def data_source_errors(action: str):
    """
    Converts DataSourceError raised inside the block into the 503 AppError.

        with data_source_errors("load the balances"):
            snapshot = load_snapshot(event_id, source)
    """
    try:
        yield
    except DataSourceError as exc:
        raise data_source_failure(action) from exc
