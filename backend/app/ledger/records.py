"""
ledger/records.py — Immutable record types consumed and produced by the ledger core.

These are plain value objects, independent of the database schema. The
SQLAlchemy data source converts ORM rows into these; the in-memory fake used
by the unit tests builds them directly.

Monetary fields are always Decimal. Constructors coerce int/str input and
reject floats that cannot be represented, missing amounts and negative values.
"""

from __future__ import annotations

import datetime as dt
import enum
import unicodedata
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


# ── Enumerations ───────────────────────────────────────────────────────────

class ParticipantType(str, enum.Enum):
    """Household type. Couples weigh twice as much in an equal split."""
    INDIVIDUAL = "individual"
    COUPLE     = "couple"

    @property
    def adult_units(self) -> int:
        return 2 if self is ParticipantType.COUPLE else 1


class DivisionType(str, enum.Enum):
    """How an expense amount is divided into shares. Only EQUAL exists so far."""
    EQUAL = "equal"


class Category(str, enum.Enum):
    RENT      = "rent"
    GROCERIES = "groceries"
    EXTRA     = "extra"
    TRANSPORT = "transport"
    FOOD      = "food"
    LEISURE   = "leisure"
    OTHER     = "other"


# ── Helpers ────────────────────────────────────────────────────────────────

def to_amount(value, field_name: str = "amount") -> Decimal:
    """
    Coerces a monetary value to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1"), not the binary
    approximation. None, NaN and infinities are rejected.
    """
    if value is None:
        raise ValueError(f"{field_name} is required.")
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be a number, not a boolean.")
    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValueError(f"{field_name} is not a valid amount: {value!r}.") from exc
    if not amount.is_finite():
        raise ValueError(f"{field_name} must be finite.")
    return amount


def name_sort_key(name: str) -> str:
    """
    Case- and accent-insensitive collation key ("Élio" sorts with "elio").
    """
    decomposed = unicodedata.normalize("NFKD", name)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def _set(instance, name: str, value) -> None:
    object.__setattr__(instance, name, value)


# ── Source records ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Participant:
    id: int
    name: str
    type: ParticipantType = ParticipantType.INDIVIDUAL
    children: int = 0

    def __post_init__(self) -> None:
        if self.id is None:
            raise ValueError("Participant id is required.")
        if not self.name or not self.name.strip():
            raise ValueError("Participant name must not be blank.")
        _set(self, "type", ParticipantType(self.type))
        if self.children < 0:
            raise ValueError("children must not be negative.")

    @property
    def adult_units(self) -> int:
        return self.type.adult_units

    @property
    def sort_key(self) -> tuple:
        return (name_sort_key(self.name), self.name, self.id)


@dataclass(frozen=True)
class Expense:
    id: int
    description: str
    amount: Decimal
    payer_id: int | None
    category: str = Category.OTHER.value
    date: dt.date | None = None
    division_type: DivisionType = DivisionType.EQUAL
    event_id: int | None = None

    def __post_init__(self) -> None:
        if self.id is None:
            raise ValueError("Expense id is required.")
        amount = to_amount(self.amount)
        if amount <= 0:
            raise ValueError("Expense amount must be greater than zero.")
        _set(self, "amount", amount)
        _set(self, "category", self.category or Category.OTHER.value)
        _set(self, "division_type", DivisionType(self.division_type))


@dataclass(frozen=True)
class ExpenseShare:
    expense_id: int
    participant_id: int
    amount: Decimal

    def __post_init__(self) -> None:
        if self.expense_id is None or self.participant_id is None:
            raise ValueError("ExpenseShare needs both expense_id and participant_id.")
        amount = to_amount(self.amount)
        if amount < 0:
            raise ValueError("Share amount must not be negative.")
        _set(self, "amount", amount)


@dataclass(frozen=True)
class Payment:
    id: int
    payer_id: int
    receiver_id: int
    amount: Decimal
    notes: str = ""
    created_at: dt.datetime | None = None
    event_id: int | None = None

    def __post_init__(self) -> None:
        if self.payer_id is None or self.receiver_id is None:
            raise ValueError("Payment needs both payer_id and receiver_id.")
        amount = to_amount(self.amount)
        if amount <= 0:
            raise ValueError("Payment amount must be greater than zero.")
        _set(self, "amount", amount)
        _set(self, "notes", self.notes or "")


@dataclass(frozen=True)
class Contribution:
    """Money a participant put into the common fund for a given month."""
    id: int
    participant_id: int
    amount: Decimal
    month: dt.date
    notes: str | None = None
    created_at: dt.datetime | None = None

    def __post_init__(self) -> None:
        if self.participant_id is None:
            raise ValueError("Contribution needs a participant_id.")
        amount = to_amount(self.amount)
        if amount <= 0:
            raise ValueError("Contribution amount must be greater than zero.")
        _set(self, "amount", amount)
        _set(self, "month", self.month.replace(day=1))


@dataclass(frozen=True)
class LedgerSnapshot:
    """Everything the core needs for one event, fully materialised."""
    participants: tuple[Participant, ...] = ()
    expenses: tuple[Expense, ...] = ()
    shares: tuple[ExpenseShare, ...] = ()
    payments: tuple[Payment, ...] = ()

    def __post_init__(self) -> None:
        _set(self, "participants", tuple(self.participants))
        _set(self, "expenses", tuple(self.expenses))
        _set(self, "shares", tuple(self.shares))
        _set(self, "payments", tuple(self.payments))

    @property
    def participant_ids(self) -> frozenset[int]:
        return frozenset(p.id for p in self.participants)


# ── Derived records ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ParticipantBalance:
    participant: Participant
    paid: Decimal      # sum of expenses this participant fronted
    owed: Decimal      # what the others still owe them
    owes: Decimal      # what they still owe the others
    balance: Decimal   # owed - owes; positive means they get money back


@dataclass(frozen=True)
class PairwiseObligation:
    ower_id: int
    payer_id: int
    amount: Decimal
    expense_id: int
    expense_description: str = ""


@dataclass(frozen=True)
class SettlementLine:
    ower_id: int
    payer_id: int
    amount: Decimal
    is_paid: bool
    paid_amount: Decimal = ZERO

    @property
    def outstanding(self) -> Decimal:
        return max(ZERO, self.amount - self.paid_amount)


@dataclass(frozen=True)
class PaymentInstruction:
    receiver: Participant
    amount: Decimal
    is_paid: bool


@dataclass(frozen=True)
class PaymentsByPayer:
    """Payments one ower has to make, one entry per receiver."""
    payer: Participant
    payments: tuple[PaymentInstruction, ...] = ()


@dataclass(frozen=True)
class DetailedPayment:
    from_id: int
    from_name: str
    to_id: int
    to_name: str
    amount: Decimal
    expense_id: int
    expense_description: str


@dataclass(frozen=True)
class CategorySummary:
    category: str
    total: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class LedgerView:
    """Result of one full recompute, ready for rendering."""
    event_id: int
    balances: tuple[ParticipantBalance, ...] = ()
    settlement_lines: tuple[SettlementLine, ...] = ()
    payments_by_payer: tuple[PaymentsByPayer, ...] = ()
    detailed_payments: tuple[DetailedPayment, ...] = ()
    warnings: tuple[dict, ...] = ()

    @property
    def balance_sum(self) -> Decimal:
        return sum((b.balance for b in self.balances), ZERO)

    @property
    def outstanding_total(self) -> Decimal:
        """
        Open amount over all settlement lines. Equals the sum of positive
        balances only while no participant both owes and is owed; chained
        debts are not netted, so the total can be higher.
        """
        return sum((line.outstanding for line in self.settlement_lines), ZERO)


@dataclass(frozen=True)
class ContributionTotal:
    participant: Participant
    total: Decimal


@dataclass(frozen=True)
class ContributionMonth:
    month: str                                   # "YYYY-MM"
    total: Decimal
    contributions: tuple[Contribution, ...] = ()
