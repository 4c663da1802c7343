import datetime

import pytest

from services.periods import Period


def test_previous_wraps_year_boundary():
    assert Period.of(1, 2024).previous() == Period.of(12, 2023)
    assert Period.of(7, 2024).previous() == Period.of(6, 2024)


def test_next_wraps_year_boundary():
    assert Period.of(12, 2023).next() == Period.of(1, 2024)


def test_ordering_compares_year_before_month():
    assert Period.of(12, 2023).is_before(Period.of(1, 2024))
    assert Period.of(2, 2024).is_before(Period.of(3, 2024))
    assert not Period.of(3, 2024).is_before(Period.of(3, 2024))
    assert sorted([Period.of(1, 2025), Period.of(11, 2024)]) == [Period.of(11, 2024), Period.of(1, 2025)]


def test_current_and_due_date():
    period = Period.current(datetime.date(2024, 3, 20))
    assert period == Period.of(3, 2024)
    assert period.due_date() == datetime.date(2024, 3, 12)


def test_last_moment_handles_leap_february():
    assert Period.of(2, 2024).last_moment() == datetime.datetime(2024, 2, 29, 23, 59, 59, 999999)


def test_label():
    assert Period.of(3, 2024).label == "March 2024"
    assert str(Period.of(3, 2024)) == "2024-03"


@pytest.mark.parametrize("month", [0, 13])
def test_invalid_month_rejected(month):
    with pytest.raises(ValueError):
        Period.of(month, 2024)
