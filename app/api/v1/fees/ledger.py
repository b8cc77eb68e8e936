"""
Fee ledger computation, free of any database access.

A student's position in one session is computed from the StudentFeesMaster rows
active for that session: every FeeGroupType line of the assigned fee group adds
to totalAssigned; every payment against the master adds its amount to totalPaid.
Payment discount/fine fields are informational and never enter the figures.

    totalDue   = totalAssigned - totalPaid          (negative when overpaid)
    totalFine  = sum of fines of lines due strictly before as_of
    grandTotal = totalDue + totalFine

Fines are not reduced by partial payment: payments are tracked per master, not per line.
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional

from app.core.enums import FineType

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(val) -> Decimal:
    if val is None:
        return ZERO
    return val if isinstance(val, Decimal) else Decimal(str(val))


@dataclass
class FeeLine:
    amount: Decimal
    due_date: Optional[date] = None
    fine_type: str = FineType.NONE.value
    fine_percent: Optional[Decimal] = None
    fine_amount: Optional[Decimal] = None

    def is_overdue(self, as_of: date) -> bool:
        return self.due_date is not None and self.due_date < as_of

    def fine(self, as_of: date) -> Decimal:
        if not self.is_overdue(as_of):
            return ZERO
        if self.fine_type == FineType.PERCENTAGE.value:
            return (to_decimal(self.amount) * to_decimal(self.fine_percent) / 100).quantize(CENT, ROUND_HALF_UP)
        if self.fine_type == FineType.FIXED.value:
            return to_decimal(self.fine_amount)
        return ZERO


@dataclass
class MasterInput:
    """One StudentFeesMaster: the lines of its fee group and the amounts paid against it."""

    lines: List[FeeLine] = field(default_factory=list)
    payments: List[Decimal] = field(default_factory=list)


@dataclass
class LedgerTotals:
    total_assigned: Decimal = ZERO
    total_paid: Decimal = ZERO
    total_fine: Decimal = ZERO

    @property
    def total_due(self) -> Decimal:
        return self.total_assigned - self.total_paid

    @property
    def grand_total(self) -> Decimal:
        return self.total_due + self.total_fine

    def __add__(self, other: "LedgerTotals") -> "LedgerTotals":
        return LedgerTotals(
            total_assigned=self.total_assigned + other.total_assigned,
            total_paid=self.total_paid + other.total_paid,
            total_fine=self.total_fine + other.total_fine,
        )

    def as_dict(self) -> dict:
        return {
            "total_assigned": self.total_assigned,
            "total_paid": self.total_paid,
            "total_due": self.total_due,
            "total_fine": self.total_fine,
            "grand_total": self.grand_total,
        }


def compute_master(master: MasterInput, as_of: date) -> LedgerTotals:
    return LedgerTotals(
        total_assigned=sum((to_decimal(line.amount) for line in master.lines), ZERO),
        total_paid=sum((to_decimal(p) for p in master.payments), ZERO),
        total_fine=sum((line.fine(as_of) for line in master.lines), ZERO),
    )


def rollup(totals: Iterable[LedgerTotals]) -> LedgerTotals:
    out = LedgerTotals()
    for t in totals:
        out = out + t
    return out


def compute_ledger(masters: Iterable[MasterInput], as_of: date) -> LedgerTotals:
    """Figures for a set of masters, e.g. all of a student's masters in one session. Empty input is all zeros."""
    return rollup(compute_master(m, as_of) for m in masters)
