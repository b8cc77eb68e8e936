import random
from datetime import date, timedelta
from decimal import Decimal

from app.api.v1.fees import ledger
from app.api.v1.fees.ledger import FeeLine, LedgerTotals, MasterInput

TODAY = date(2025, 6, 15)


def test_scenario_percentage_fine_on_overdue_line() -> None:
    master = MasterInput(
        lines=[FeeLine(amount=Decimal("5000"), due_date=TODAY - timedelta(days=1), fine_type="percentage", fine_percent=Decimal("10"))],
        payments=[Decimal("2000")],
    )

    totals = ledger.compute_master(master, TODAY)

    assert totals.total_assigned == Decimal("5000")
    assert totals.total_paid == Decimal("2000")
    assert totals.total_due == Decimal("3000")
    assert totals.total_fine == Decimal("500.00")
    assert totals.grand_total == Decimal("3500.00")


def test_fine_applies_only_strictly_after_due_date() -> None:
    line = FeeLine(amount=Decimal("1000"), due_date=TODAY, fine_type="fixed", fine_amount=Decimal("50"))
    assert line.fine(TODAY) == Decimal("0")
    assert line.fine(TODAY + timedelta(days=1)) == Decimal("50")


def test_lines_without_due_date_or_fine_type_never_fine() -> None:
    assert FeeLine(amount=Decimal("1000")).fine(TODAY) == Decimal("0")
    overdue_no_fine = FeeLine(amount=Decimal("1000"), due_date=TODAY - timedelta(days=30), fine_type="none")
    assert overdue_no_fine.fine(TODAY) == Decimal("0")


def test_overpayment_gives_negative_due() -> None:
    totals = ledger.compute_master(MasterInput(lines=[FeeLine(amount=Decimal("100"))], payments=[Decimal("150")]), TODAY)
    assert totals.total_due == Decimal("-50")
    assert totals.grand_total == Decimal("-50")


def test_empty_ledger_is_all_zero() -> None:
    totals = ledger.compute_ledger([], TODAY)
    assert totals.as_dict() == {
        "total_assigned": Decimal("0"),
        "total_paid": Decimal("0"),
        "total_due": Decimal("0"),
        "total_fine": Decimal("0"),
        "grand_total": Decimal("0"),
    }


def test_fines_are_not_reduced_by_partial_payment() -> None:
    line = FeeLine(amount=Decimal("800"), due_date=TODAY - timedelta(days=3), fine_type="fixed", fine_amount=Decimal("25"))
    unpaid = ledger.compute_master(MasterInput(lines=[line]), TODAY)
    partly_paid = ledger.compute_master(MasterInput(lines=[line], payments=[Decimal("700")]), TODAY)
    assert unpaid.total_fine == partly_paid.total_fine == Decimal("25")


def test_rollup_sums_every_figure() -> None:
    a = LedgerTotals(total_assigned=Decimal("100"), total_paid=Decimal("40"), total_fine=Decimal("5"))
    b = LedgerTotals(total_assigned=Decimal("300"), total_paid=Decimal("300"), total_fine=Decimal("0"))

    total = ledger.rollup([a, b])

    assert total.total_assigned == Decimal("400")
    assert total.total_paid == Decimal("340")
    assert total.total_due == Decimal("60")
    assert total.grand_total == Decimal("65")


def _random_amount(rng: random.Random) -> Decimal:
    return Decimal(rng.randint(0, 500_000)) / 100


def test_due_identity_holds_for_random_ledgers() -> None:
    rng = random.Random(20250615)
    fine_types = ["none", "fixed", "percentage"]
    for _ in range(200):
        masters = []
        for _ in range(rng.randint(0, 4)):
            lines = [
                FeeLine(
                    amount=_random_amount(rng),
                    due_date=TODAY + timedelta(days=rng.randint(-60, 60)) if rng.random() < 0.8 else None,
                    fine_type=rng.choice(fine_types),
                    fine_percent=Decimal(rng.randint(0, 100)),
                    fine_amount=_random_amount(rng),
                )
                for _ in range(rng.randint(0, 5))
            ]
            payments = [_random_amount(rng) for _ in range(rng.randint(0, 4))]
            masters.append(MasterInput(lines=lines, payments=payments))

        totals = ledger.compute_ledger(masters, TODAY)

        assigned = sum((line.amount for m in masters for line in m.lines), Decimal("0"))
        paid = sum((p for m in masters for p in m.payments), Decimal("0"))
        assert totals.total_assigned == assigned
        assert totals.total_paid == paid
        assert totals.total_due == totals.total_assigned - totals.total_paid
        assert totals.grand_total == totals.total_due + totals.total_fine
        assert totals.total_fine >= 0
