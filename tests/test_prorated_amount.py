from datetime import date

import pytest

from storekeep.core.exceptions import ValidationError
from storekeep.services.rental_ledger import compute_prorated_amount


def test_single_day():
    assert compute_prorated_amount(120, date(2024, 3, 1), date(2024, 3, 1)) == 3.87


def test_three_months_and_a_day():
    assert compute_prorated_amount(100, date(2024, 1, 1), date(2024, 4, 1)) == 303.33


def test_whole_calendar_year():
    assert compute_prorated_amount(100, date(2024, 1, 1), date(2024, 12, 31)) == 1200.0


def test_later_start_day_reduces_last_month():
    # one full month, then (10 - 20 + 1) / 29 of February 2024
    assert compute_prorated_amount(100, date(2024, 1, 20), date(2024, 2, 10)) == 68.97


def test_negative_total_floored_at_zero():
    assert compute_prorated_amount(100, date(2023, 1, 31), date(2023, 2, 1)) == 0.0


def test_accepts_iso_strings():
    assert compute_prorated_amount("120", "2024-03-01", "2024-03-01") == 3.87


def test_end_before_start():
    with pytest.raises(ValidationError):
        compute_prorated_amount(100, date(2024, 3, 2), date(2024, 3, 1))


@pytest.mark.parametrize("start, end", [(None, date(2024, 3, 1)), (date(2024, 3, 1), None)])
def test_missing_date(start, end):
    with pytest.raises(ValidationError):
        compute_prorated_amount(100, start, end)


@pytest.mark.parametrize("price", [0, -10])
def test_non_positive_price(price):
    with pytest.raises(ValidationError):
        compute_prorated_amount(price, date(2024, 3, 1), date(2024, 3, 31))


def test_invalid_date_string():
    with pytest.raises(ValidationError):
        compute_prorated_amount(100, "not-a-date", "2024-03-01")
