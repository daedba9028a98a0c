"""Tests for payment allocation."""

from datetime import date
from decimal import Decimal

import pytest

from loan_engine.calculators.allocation import (
    allocate_across_schedule,
    allocate_payment,
    assess_late_penalty,
)
from loan_engine.exceptions import InvalidPaymentError
from loan_engine.models.fees import PercentagePenalty
from loan_engine.models.loan import AmortizationSchedule, ScheduleEntry


class TestAllocatePayment:
    """Tests for allocating one payment to one entry."""

    def test_fees_then_interest_then_principal(self, entry: ScheduleEntry) -> None:
        result = allocate_payment(Decimal("100"), entry, as_of=date(2024, 2, 10))

        assert result.fees_applied == Decimal("50.00")
        assert result.interest_applied == Decimal("50.00")
        assert result.principal_applied == Decimal("0.00")
        assert result.remaining_after == Decimal("950.00")
        assert result.unapplied == Decimal("0.00")
        assert result.sequence_number == 1
        assert entry.is_paid is False

    def test_full_payment_marks_paid(self, entry: ScheduleEntry) -> None:
        result = allocate_payment(Decimal("1050"), entry, as_of=date(2024, 2, 15))

        assert result.total_applied == Decimal("1050.00")
        assert result.remaining_after == Decimal("0.00")
        assert entry.is_paid is True
        assert entry.paid_date == date(2024, 2, 15)
        assert entry.late_days == 0

    def test_overpayment_is_not_credited(self, entry: ScheduleEntry) -> None:
        result = allocate_payment(Decimal("1100"), entry, as_of=date(2024, 2, 20))

        assert result.principal_applied == Decimal("800.00")
        assert result.unapplied == Decimal("50.00")
        assert entry.total_paid == Decimal("1050.00")
        assert entry.principal_paid == entry.principal_due

    def test_late_payment_records_late_days(self, entry: ScheduleEntry) -> None:
        allocate_payment(Decimal("1050"), entry, as_of=date(2024, 2, 20))

        assert entry.late_days == 5
        assert entry.paid_date == date(2024, 2, 20)

    def test_shortfall_within_epsilon(self, entry: ScheduleEntry) -> None:
        allocate_payment(Decimal("1049.99"), entry, as_of=date(2024, 2, 15))
        assert entry.is_paid is False

        other = ScheduleEntry(1, date(2024, 2, 15), Decimal("800"), Decimal("200"), Decimal("0"), Decimal("1000"))
        allocate_payment(Decimal("999.99"), other, as_of=date(2024, 2, 15), epsilon=Decimal("0.05"))
        assert other.is_paid is True

    def test_paid_amounts_only_grow(self, entry: ScheduleEntry) -> None:
        allocate_payment(Decimal("300"), entry, as_of=date(2024, 2, 10))
        after_first = (entry.fees_paid, entry.interest_paid, entry.principal_paid, entry.total_paid)
        allocate_payment(Decimal("300"), entry, as_of=date(2024, 2, 12))
        after_second = (entry.fees_paid, entry.interest_paid, entry.principal_paid, entry.total_paid)

        assert all(b >= a for a, b in zip(after_first, after_second))
        assert entry.principal_paid == Decimal("350.00")
        assert entry.total_paid == Decimal("600.00")

    def test_payment_on_paid_entry_is_unapplied(self, entry: ScheduleEntry) -> None:
        allocate_payment(Decimal("1050"), entry, as_of=date(2024, 2, 15))
        result = allocate_payment(Decimal("20"), entry, as_of=date(2024, 2, 16))

        assert result.total_applied == Decimal("0")
        assert result.unapplied == Decimal("20.00")
        assert entry.paid_date == date(2024, 2, 15)

    @pytest.mark.parametrize("amount", [0, -5, "0.004", "abc", None])
    def test_invalid_amount(self, entry: ScheduleEntry, amount) -> None:
        with pytest.raises(InvalidPaymentError):
            allocate_payment(amount, entry, as_of=date(2024, 2, 15))

        assert entry.total_paid == Decimal("0")


class TestAllocateAcrossSchedule:
    """Tests for spreading a payment over a schedule."""

    def test_oldest_first(self, schedule: AmortizationSchedule) -> None:
        entries = schedule.schedule
        amount = entries[0].total_due + entries[1].total_due

        results, surplus = allocate_across_schedule(amount, entries, as_of=date(2024, 2, 1))

        assert [r.sequence_number for r in results] == [1, 2]
        assert surplus == Decimal("0.00")
        assert entries[0].is_paid and entries[1].is_paid
        assert not entries[2].is_paid

    def test_partial_spills_into_next_entry(self, schedule: AmortizationSchedule) -> None:
        entries = schedule.schedule
        amount = entries[0].total_due + Decimal("100")

        results, _ = allocate_across_schedule(amount, entries, as_of=date(2024, 2, 1))

        assert len(results) == 2
        assert results[1].interest_applied == Decimal("100.00")
        assert results[1].principal_applied == Decimal("0.00")

    def test_skips_paid_entries(self, schedule: AmortizationSchedule) -> None:
        entries = schedule.schedule
        allocate_across_schedule(entries[0].total_due, entries, as_of=date(2024, 2, 1))
        results, _ = allocate_across_schedule(Decimal("10"), entries, as_of=date(2024, 2, 2))

        assert results[0].sequence_number == 2

    def test_surplus_after_settling_everything(self, schedule: AmortizationSchedule) -> None:
        total = sum((e.total_due for e in schedule.schedule), Decimal("0"))

        results, surplus = allocate_across_schedule(total + 100, schedule.schedule, as_of=date(2024, 2, 1))

        assert len(results) == 12
        assert surplus == Decimal("100.00")
        assert all(e.is_paid for e in schedule.schedule)

    def test_invalid_amount(self, schedule: AmortizationSchedule) -> None:
        with pytest.raises(InvalidPaymentError):
            allocate_across_schedule(0, schedule.schedule)


class TestAssessLatePenalty:
    """Tests for charging penalties onto entries."""

    def test_charges_fee_bucket(self, entry: ScheduleEntry) -> None:
        charged = assess_late_penalty(entry, PercentagePenalty(Decimal("5"), 3), as_of=date(2024, 2, 20))

        assert charged == Decimal("52.50")
        assert entry.fees_due == Decimal("102.50")
        assert entry.total_due == Decimal("1102.50")
        assert entry.late_days == 5

    def test_within_grace(self, entry: ScheduleEntry) -> None:
        charged = assess_late_penalty(entry, PercentagePenalty(Decimal("5"), 3), as_of=date(2024, 2, 17))

        assert charged == Decimal("0.00")
        assert entry.total_due == Decimal("1050.00")
        assert entry.late_days == 2

    def test_paid_entry_untouched(self, entry: ScheduleEntry) -> None:
        allocate_payment(Decimal("1050"), entry, as_of=date(2024, 2, 15))
        charged = assess_late_penalty(entry, PercentagePenalty(Decimal("5")), as_of=date(2024, 3, 20))

        assert charged == Decimal("0.00")
        assert entry.total_due == Decimal("1050.00")

    def test_penalty_on_remaining_due(self, entry: ScheduleEntry) -> None:
        allocate_payment(Decimal("50"), entry, as_of=date(2024, 2, 10))
        charged = assess_late_penalty(entry, PercentagePenalty(Decimal("10")), as_of=date(2024, 3, 1))

        assert charged == Decimal("100.00")

    def test_penalty_is_paid_first(self, entry: ScheduleEntry) -> None:
        assess_late_penalty(entry, PercentagePenalty(Decimal("5"), 3), as_of=date(2024, 2, 20))
        result = allocate_payment(Decimal("110"), entry, as_of=date(2024, 2, 21))

        assert result.fees_applied == Decimal("102.50")
        assert result.interest_applied == Decimal("7.50")
