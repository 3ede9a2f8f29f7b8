from datetime import date

import pytest

from components.installment.splitter import add_months, build_schedule, month_key, split_installment_amounts


class TestSplitInstallmentAmounts:

    def test_remainder_goes_to_earliest(self):
        assert split_installment_amounts(1000, 3) == [334, 333, 333]
        assert split_installment_amounts(1001, 3) == [334, 334, 333]
        assert split_installment_amounts(2, 3) == [1, 1, 0]

    @pytest.mark.parametrize("total,months", [(120000, 12), (99999, 7), (1, 1), (0, 4), (12345, 120)])
    def test_parts_sum_to_total_and_differ_by_at_most_one(self, total, months):
        parts = split_installment_amounts(total, months)

        assert len(parts) == months
        assert sum(parts) == total
        assert max(parts) - min(parts) <= 1
        assert parts == sorted(parts, reverse=True)

    def test_rejects_invalid_input(self):
        with pytest.raises(ValueError):
            split_installment_amounts(1000, 0)
        with pytest.raises(ValueError):
            split_installment_amounts(-1, 3)


class TestCalendar:

    def test_add_months_clamps_to_month_end(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
        assert add_months(date(2024, 3, 31), 1) == date(2024, 4, 30)

    def test_add_months_rolls_years(self):
        assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)
        assert add_months(date(2024, 12, 1), 12) == date(2025, 12, 1)
        assert add_months(date(2024, 5, 10), 0) == date(2024, 5, 10)

    def test_month_key(self):
        assert month_key(date(2024, 3, 9)) == "2024-03"
        assert month_key(date(987, 12, 1)) == "0987-12"

    def test_schedule_offsets_from_start_not_previous_due_date(self):
        assert build_schedule(1000, 3, date(2024, 1, 31)) == [
            (1, date(2024, 1, 31), 334),
            (2, date(2024, 2, 29), 333),
            (3, date(2024, 3, 31), 333),
        ]
